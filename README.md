# starfighter

A headless space-combat simulation built on `numpy`. It models:

- a player fighter (`XWing`) with roll, pitch and yaw, a boost that folds its
  wings and raises its speed, four reactors whose glow follows the controls,
  four guns that fire in turn with a recoil animation, and a scripted
  half-loop manoeuvre;
- AI ships (`AIShip`) that chase a target and fire when it is between 5 and
  100 units away and roughly ahead of them;
- passive ships (`PassiveShip`) that wander by holding a random manoeuvre for
  a random time;
- winged variants of both (`XWingAIShip`, `XWingPassiveShip`);
- an asteroid field (`AsteroidField`) that wraps around a bounding cube
  following the player, is roughened with Perlin noise, and breaks into smoke
  and debris when a laser hits it; destroyed asteroids respawn after a delay;
- a chase camera (`CombatCamera`) that follows a ship from behind;
- a `Scene` that ties these together, settles collisions between ships,
  lasers and asteroids each frame, respawns destroyed ships and fills in the
  lighting uniforms a renderer would need.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running

```
starfighter
```

This builds a `Scene`, steps it for a number of frames with a fixed time
step, and prints progress messages along with the camera help and welcome
banner. Options:

- `--frames N`: number of frames to simulate (default 600)
- `--dt SECONDS`: seconds per frame (default 1/60)
- `--seed N`: random seed
- `--combat N`: number of AI duels (default 2)
- `--asteroids N`: number of asteroids (default 100)
- `--resolution N`: asteroid mesh resolution (default 70)
- `--no-asteroids`: leave the asteroid field out

Negative `--frames` or `--dt` is rejected with exit status 2.

## Using it as a library

```python
from starfighter.inputs import Key
from starfighter.main import run
from starfighter.scene import Scene

scene = Scene()
scene.initialize()

scene.inputs.press(Key.SPACE)   # boost
scene.inputs.press(Key.P)       # fire
run(scene, frames=600, dt=1 / 60)
scene.inputs.release(Key.P)

print(scene.xwing_ship.position)
print(scene.uniforms()["N_lights"])
```

`run(scene, frames, dt=None)` calls `scene.display_frame` once per frame; with
no `dt` it uses the wall-clock time between frames, measured by `FrameTimer`.

Keys read by the ships on each `idle_frame` (see `starfighter.inputs.Key`):

- `Q` / `E`: roll; `W` / `S`: pitch; `A` / `D`: yaw
- `G`: toggle stopping the ship
- `O`: start the half-loop manoeuvre
- `J`: destroy the ship; `K`: respawn it at the origin once destroyed
- `SPACE`: boost (player fighter only)
- `P`: fire (player fighter only)

The surface noise of asteroids and their debris is controlled by `scene.gui`,
a `GuiParameters` instance. After changing it, call `scene.update_perlin()` to
reshape the meshes.

The building blocks can be used on their own:

- `starfighter.transform`: `norm`, `normalize`, `Rotation`, `Transform`,
  `Node` and the named `Hierarchy`;
- `starfighter.inputs`: `Key`, `InputState`, `ProjectSettings`, `Environment`;
- `starfighter.ship`: the base `Ship` and its `Debris`;
- `starfighter.ai_ship`: `AIShip`;
- `starfighter.passive_ship`: `PassiveShip`;
- `starfighter.winged`: `build_wing_hierarchy`, `XWingAIShip`, `XWingPassiveShip`;
- `starfighter.x_wing`: the player's `XWing`;
- `starfighter.camera`: `CombatCamera`;
- `starfighter.asteroid`: `AsteroidField`, `PerlinParameters`, `Mesh`,
  `perlin_noise` and `ellipsoid_mesh`;
- `starfighter.scene`: `Scene` and `GuiParameters`;
- `starfighter.main`: `FrameTimer`, `run` and `main`.

## What it does not do

There is no window, no drawing and no live keyboard: the simulation only
computes positions, rotations, meshes and shader uniform values. Ship shapes
are not loaded from model files; body, wing and gun parts are passed in as
arrays of vertex positions, and the scene uses a single point for each by
default. The `starfighter` command presses no keys, so the player's ship flies
straight ahead while the AI ships fight around it.