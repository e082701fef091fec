import numpy as np
import pytest

from starfighter.ai_ship import AIShip
from starfighter.inputs import InputState
from starfighter.ship import BASE, Ship
from starfighter.transform import norm, normalize


def _make(target_pos, dt=0.1, seed=0):
    inputs = InputState(time_interval=dt)
    target = Ship(np.random.default_rng(seed))
    target.initialize(inputs)
    target.position = target_pos
    ai = AIShip(np.random.default_rng(seed))
    ai.initialize(inputs, [[[0.0, 0.0, 0.0]]])
    ai.set_target(target)
    return ai, target


def test_initialize_builds_body_nodes_and_debris():
    ai = AIShip(np.random.default_rng(1))
    ai.initialize(InputState(), [[[1.0, 0.0, 0.0], [0.0, 2.0, 0.0]], []])
    assert "Body 0" in ai.hierarchy and "Body 1" in ai.hierarchy
    assert ai.hierarchy["Body 0"].parent == BASE
    assert ai.hierarchy["Body 1"].model.scaling == pytest.approx(0.05)
    assert len(ai.debris) == 2
    assert np.allclose(ai.debris[0].translation, -np.array([1.0, 2.0, 0.0]) * 0.05)
    assert np.allclose(ai.debris[1].translation, np.zeros(3))
    assert ai.debris[0].name == "Body 0"


def test_idle_frame_without_target_raises():
    ai = AIShip(np.random.default_rng(0))
    ai.initialize(InputState(time_interval=0.1), [])
    with pytest.raises(RuntimeError):
        ai.idle_frame([], [])


def test_idle_frame_before_initialize_raises():
    ai = AIShip()
    with pytest.raises(RuntimeError):
        ai.idle_frame([], [])


def test_moves_toward_target():
    ai, target = _make((10.0, 0.0, 0.0))
    before = norm(target.position - ai.position)
    ai.idle_frame([], [])
    after = norm(target.position - ai.position)
    assert after < before
    assert ai.position[1] == pytest.approx(0.0)
    assert ai.position[2] == pytest.approx(0.0)


def test_orientation_frame_is_orthonormal_after_move():
    ai, _ = _make((3.0, 4.0, 1.0))
    for _ in range(5):
        ai.idle_frame([], [])
    forward = normalize(ai.velocity)
    assert norm(ai.left) == pytest.approx(1.0)
    assert norm(ai.up) == pytest.approx(1.0)
    assert float(np.dot(forward, ai.left)) == pytest.approx(0.0, abs=1e-9)
    assert float(np.dot(forward, ai.up)) == pytest.approx(0.0, abs=1e-9)
    assert np.allclose(ai.rotation.apply((1.0, 0.0, 0.0)), forward)


def test_coincident_target_keeps_position():
    ai, _ = _make((0.0, 0.0, 0.0))
    ai.idle_frame([], [])
    assert np.allclose(ai.position, np.zeros(3))


def test_fires_when_target_ahead_and_in_range():
    ai, _ = _make((20.0, 0.0, 0.0))
    ai.idle_frame([], [])
    assert len(ai.active_lasers()) == 0
    ai.idle_frame([], [])
    assert len(ai.active_lasers()) == 1
    assert ai.last_laser == 1
    assert ai.laser_dt == 0.0
    assert np.allclose(normalize(ai.lasers_velocity[1]), normalize(ai.velocity))


def test_does_not_fire_at_target_behind():
    ai, _ = _make((-20.0, 0.0, 0.0))
    for _ in range(4):
        ai.idle_frame([], [])
    assert len(ai.active_lasers()) == 0
    assert ai.laser_dt > ai.laser_delay


def test_does_not_fire_beyond_range():
    ai, _ = _make((500.0, 0.0, 0.0))
    for _ in range(4):
        ai.idle_frame([], [])
    assert len(ai.active_lasers()) == 0


def test_laser_beyond_bound_is_deactivated():
    ai, _ = _make((20.0, 0.0, 0.0))
    ai.laser_bound = 1.0
    ai.idle_frame([], [])
    ai.idle_frame([], [])
    assert ai.last_laser == 1
    assert len(ai.active_lasers()) == 0


def test_collision_destroys_and_stops():
    ai, _ = _make((10.0, 0.0, 0.0))
    ai.idle_frame([ai.position.copy()], [1.0])
    assert ai.destruction
    assert ai.stopped
    assert ai.respawn_timer == pytest.approx(5.0)
    assert np.allclose(ai.position, np.zeros(3))


def test_destroyed_ship_does_not_move():
    ai, _ = _make((10.0, 0.0, 0.0))
    ai.destruction_trigger(ai.position, (-1.0, 0.0, 0.0))
    ai.idle_frame([], [])
    assert np.allclose(ai.position, np.zeros(3))