"""The combat scene: the player's ship, duelling AI ships and an asteroid field."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from starfighter.ai_ship import AIShip
from starfighter.asteroid import AsteroidField, PerlinParameters
from starfighter.camera import CombatCamera
from starfighter.inputs import Environment, InputState
from starfighter.passive_ship import PassiveShip
from starfighter.ship import BASE, X_AXIS, Z_AXIS, Ship
from starfighter.transform import Rotation, norm
from starfighter.winged import XWingAIShip, XWingPassiveShip
from starfighter.x_wing import XWing

_DEFAULT_PART = ((0.0, 0.0, 0.0),)
_N_LASER_LIGHTS = 20
_RULE = "-----------------------------------------------"


@dataclass
class GuiParameters:
    """Values the user can tweak from the interface."""

    display_frame: bool = False
    display_wireframe: bool = False
    display_ship_arrow: bool = False

    light_color: tuple = (1.0, 1.0, 1.0)

    ambiant: float = 0.3
    diffus: float = 0.8
    coef_spec: float = 0.8
    exp_spec: float = 20.0

    debris_persistency: float = 0.8
    debris_frequency_gain: float = 2.0
    debris_octave: int = 20
    debris_height: float = 0.1

    asteroids_persistency: float = 0.1
    asteroids_frequency_gain: float = 2.0
    asteroids_octave: int = 20
    asteroids_height: float = 1.0
    asteroids_color: tuple = (1.0, 1.0, 1.0)


class Scene:
    """Owns every object of the battle and advances them frame by frame."""

    def __init__(
        self,
        rng=None,
        *,
        show_asteroids=True,
        n_combat=2,
        n_asteroids=100,
        n_mesh=10,
        n_debris_mesh=10,
        nuv_asteroids=70,
        nuv_debris=20,
        xwing_body=_DEFAULT_PART,
        xwing_wing=_DEFAULT_PART,
        xwing_gun=_DEFAULT_PART,
        tie_body=_DEFAULT_PART,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.show_asteroids = bool(show_asteroids)
        self.n_combat = int(n_combat)
        self.nuv_asteroids = int(nuv_asteroids)
        self.nuv_debris = int(nuv_debris)
        self.xwing_body = [np.asarray(p, dtype=float) for p in xwing_body]
        self.xwing_wing = [np.asarray(p, dtype=float) for p in xwing_wing]
        self.xwing_gun = [np.asarray(p, dtype=float) for p in xwing_gun]
        self.tie_body = [np.asarray(p, dtype=float) for p in tie_body]

        self.inputs = InputState()
        self.environment = Environment()
        self.gui = GuiParameters()
        self.camera = CombatCamera()
        self.t = 0.0
        self.bound = 30.0

        self.sphere_light_position = np.zeros(3)
        self.sphere_light_color = 0.8 * np.asarray(self.gui.light_color, dtype=float)

        self.asteroid_set = AsteroidField(
            n_asteroids=n_asteroids,
            n_mesh=n_mesh,
            n_debris_mesh=n_debris_mesh,
            bound=200.0,
            rng=self.rng,
        )
        self.xwing_ship = XWing(self.rng)
        self.aiship = AIShip(self.rng)
        self.victims: list[Ship] = []
        self.chads: list[AIShip] = []

    def _random_scale(self, factor: float) -> np.ndarray:
        return factor * np.array(
            [self.rng.uniform(0.1, 1.0), self.rng.uniform(0.1, 0.5), self.rng.uniform(0.1, 0.8)]
        )

    def _random_spot(self) -> np.ndarray:
        return self.rng.uniform(-self.bound, self.bound, size=3) / 2

    def initialize(self) -> None:
        """Build the asteroid field and every ship; reset the clock."""
        self.display_info()

        if self.show_asteroids:
            field = self.asteroid_set
            asteroid_scales = [self._random_scale(2.0) for _ in range(field.n_mesh)]
            debris_scales = [self._random_scale(0.1) for _ in range(field.n_debris_mesh)]
            field.initialize(asteroid_scales, debris_scales, self.nuv_asteroids, self.nuv_debris)
            debris_perlin = PerlinParameters(
                self.gui.debris_persistency,
                self.gui.debris_frequency_gain,
                self.gui.debris_octave,
                self.gui.debris_height,
            )
            field.apply_perlin(PerlinParameters(), debris_perlin)

        self.xwing_ship.initialize(self.inputs, self.xwing_body, self.xwing_wing, self.xwing_gun)

        self.aiship.initialize(self.inputs)
        self.aiship.set_target(self.xwing_ship)
        self.aiship.respawn(np.array([-10.0, 0.0, 0.0]), Rotation.from_axis_angle(X_AXIS, 0.0))

        self.victims = []
        self.chads = []
        for i in range(self.n_combat):
            if i % 2 == 0:
                victim = XWingPassiveShip(self.rng)
                victim.initialize(self.inputs, self.xwing_body, self.xwing_wing)
                chad = AIShip(self.rng)
                chad.initialize(self.inputs, self.tie_body)
            else:
                chad = XWingAIShip(self.rng)
                chad.initialize(self.inputs, self.xwing_body, self.xwing_wing)
                victim = PassiveShip(self.rng)
                victim.initialize(self.inputs, self.tie_body)

            chad.speed = 0.04
            victim.speed = 0.043
            chad.set_target(victim)
            victim.position = self._random_spot()
            chad.position = self._random_spot()
            self.victims.append(victim)
            self.chads.append(chad)

        self.t = 0.0

    def _hazards(self):
        xwing_hazards: list = []
        enemy_hazards: list = []
        ally_hazards: list = []
        asteroid_hazards: list = []
        if self.t <= 3:
            return xwing_hazards, enemy_hazards, ally_hazards, asteroid_hazards

        field = self.asteroid_set
        for k, position in enumerate(field.positions):
            if field.destroyed[k] == 0:
                xwing_hazards.append((position.copy(), float(field.collision_radius[field.mesh_ref[k]])))

        for position in self.xwing_ship.active_lasers():
            enemy_hazards.append((position, self.xwing_ship.laser_radius))
            asteroid_hazards.append((position, self.xwing_ship.laser_radius))

        for i, chad in enumerate(self.chads):
            for position in chad.active_lasers():
                if i % 2 == 0:
                    xwing_hazards.append((position, chad.laser_radius))
                    ally_hazards.append((position, chad.laser_radius))
                else:
                    enemy_hazards.append((position, chad.laser_radius))
        return xwing_hazards, enemy_hazards, ally_hazards, asteroid_hazards

    @staticmethod
    def _split(hazards):
        return [pos for pos, _ in hazards], [radius for _, radius in hazards]

    def _tick_respawn(self, ship: Ship, dt: float) -> None:
        if ship.destruction and ship.respawn_timer < 0:
            ship.respawn(np.zeros(3), Rotation.from_frame_transform(X_AXIS, Z_AXIS, X_AXIS, Z_AXIS))
        else:
            ship.respawn_timer -= dt

    def display_frame(self, dt) -> None:
        """Advance the whole scene by dt seconds and refresh the shader uniforms."""
        dt = float(dt)
        self.inputs.time_interval = dt
        self.t += dt
        self.sphere_light_color = 0.8 * np.asarray(self.gui.light_color, dtype=float)

        xwing_h, enemy_h, ally_h, asteroid_h = self._hazards()
        enemies = self._split(enemy_h)
        allies = self._split(ally_h)

        self.xwing_ship.idle_frame(*self._split(xwing_h))

        center = self.xwing_ship.position.copy()
        for i, (victim, chad) in enumerate(zip(self.victims, self.chads)):
            if i % 2 == 0:
                victim.idle_frame(*allies)
                chad.idle_frame(*enemies)
            else:
                victim.idle_frame(*enemies)
                chad.idle_frame(*allies)
            self.check_bounds(victim, center)
            self.check_bounds(chad, center)
            self._tick_respawn(victim, dt)
            self._tick_respawn(chad, dt)

        if self.show_asteroids:
            next_center = self.xwing_ship.hierarchy[BASE].model.translation
            self.asteroid_set.idle_frame(dt, next_center, *self._split(asteroid_h))

        self.environment.camera_view = self.camera.idle_frame(self.xwing_ship, self.inputs.time_interval)
        self.uniforms()

    def check_bounds(self, ship: Ship, center) -> None:
        """Bring a ship that strayed too far back behind the player, with some noise."""
        center = np.asarray(center, dtype=float)
        if norm(ship.position - center) > self.bound:
            pos = center - self.xwing_ship.velocity * 0.5 * self.bound
            pos = pos + self.rng.normal(0.0, 3.0, size=3)
            ship.position = pos

    def update_perlin(self) -> None:
        """Reapply the surface noise from the current interface values."""
        gui = self.gui
        asteroid_perlin = PerlinParameters(
            gui.asteroids_persistency,
            gui.asteroids_frequency_gain,
            gui.asteroids_octave,
            gui.asteroids_height,
            gui.asteroids_color,
        )
        debris_perlin = PerlinParameters(
            gui.debris_persistency,
            gui.debris_frequency_gain,
            gui.debris_octave,
            gui.debris_height,
            gui.asteroids_color,
        )
        self.asteroid_set.apply_perlin(asteroid_perlin, debris_perlin)

    def uniforms(self) -> dict:
        """Store lighting, laser and reactor uniforms in the environment and return them."""
        env = self.environment
        gui = self.gui
        xwing = self.xwing_ship

        env.set_uniform("ambiant", gui.ambiant)
        env.set_uniform("diffus", gui.diffus)
        env.set_uniform("coef_spec", gui.coef_spec)
        env.set_uniform("coef_exp", gui.exp_spec)
        env.set_uniform("light_color", gui.light_color)
        env.set_uniform("distance_xwing", 1.0)
        env.set_uniform("camera_pos", self.camera.position())
        env.set_uniform("view", self.camera.matrix_view())

        env.set_uniform("N_lights", _N_LASER_LIGHTS)
        env.set_uniform("light_positions[0]", self.sphere_light_position)
        env.set_uniform("light_colors[0]", gui.light_color)
        env.set_uniform("d_light_max[0]", -1.0)
        env.set_uniform("active_lights[0]", 1)

        env.set_uniform("color", xwing.laser_material_color)
        for i in range(1, _N_LASER_LIGHTS):
            if xwing.lasers_active[i - 1] == 0:
                env.set_uniform(f"active_lights[{i}]", 0)
            else:
                env.set_uniform(f"light_colors[{i}]", xwing.lasers_color)
                env.set_uniform(f"light_positions[{i}]", xwing.lasers_pos[i - 1])
                env.set_uniform(f"d_light_max[{i}]", xwing.d_light_max)
                env.set_uniform(f"active_lights[{i}]", 1)

        for i, (position, intensity) in enumerate(zip(xwing.reactor_light_pos, xwing.intensities)):
            env.set_uniform(f"light_positions_reactor[{i}]", position)
            env.set_uniform(f"intensities[{i}]", float(intensity))

        env.set_uniform("light_color_reactor", (1.0, 0.8, 0.2))
        env.set_uniform("d_light_max_reactor", 0.2)
        env.set_uniform("N_lights_reactor", 4)
        env.set_uniform("ambiant_reactor", 0.2)
        env.set_uniform("diffus_reactor", 0.7)
        env.set_uniform("coef_spec_reactor", 0.4)
        env.set_uniform("coef_exp_reactor", 64.0)
        return dict(env.uniforms)

    def display_info(self) -> str:
        """Print and return the camera help and the welcome banner."""
        text = "\n".join(
            [
                "",
                "CAMERA CONTROL:",
                _RULE,
                self.camera.doc_usage(),
                _RULE + "\n",
                "",
                "SCENE INFO:",
                _RULE,
                "Welcome to X-Star-Wars.",
                _RULE + "\n",
            ]
        )
        print(text)
        return text