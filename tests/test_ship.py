import numpy as np
import pytest

from starfighter.inputs import InputState, Key
from starfighter.ship import BASE, Debris, Ship
from starfighter.transform import Rotation, norm

NONE_POS: list = []
NONE_RAD: list = []


def make_ship(dt=0.1, debris=0):
    ship = Ship(np.random.default_rng(0))
    inputs = InputState(time_interval=dt)
    ship.initialize(inputs)
    ship.debris = [Debris(name=f"part {k}") for k in range(debris)]
    return ship, inputs


def test_initial_frame_and_lasers():
    ship, _ = make_ship()
    assert np.allclose(ship.velocity, [1, 0, 0])
    assert np.allclose(ship.up, [0, 0, 1])
    assert np.allclose(ship.left, [0, 1, 0])
    assert ship.lasers_pos.shape == (19, 3)
    assert ship.active_lasers().shape == (0, 3)
    assert BASE in ship.hierarchy


def test_idle_frame_requires_initialize():
    ship = Ship(np.random.default_rng(0))
    with pytest.raises(RuntimeError):
        ship.idle_frame(NONE_POS, NONE_RAD)


def test_forward_motion_without_keys():
    ship, _ = make_ship()
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert np.allclose(ship.position, ship.velocity * ship.speed)
    assert np.allclose(ship.rotation.matrix(), np.eye(3))
    assert np.allclose(ship.arrow_translation, ship.position)


def test_pitch_up_keeps_orthonormal_frame():
    ship, inputs = make_ship()
    inputs.press(Key.W)
    for _ in range(5):
        ship.idle_frame(NONE_POS, NONE_RAD)
    assert ship.velocity[2] > 0
    for v in (ship.velocity, ship.up, ship.left):
        assert abs(norm(v) - 1.0) < 1e-9
    assert abs(np.dot(ship.velocity, ship.up)) < 1e-9
    assert abs(np.dot(ship.velocity, ship.left)) < 1e-9
    assert np.allclose(ship.rotation.apply([1, 0, 0]), ship.velocity)


def test_g_toggles_stop():
    ship, inputs = make_ship()
    inputs.press(Key.G)
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert ship.stopped
    assert np.allclose(ship.position, [0, 0, 0])


def test_check_collision():
    ship, _ = make_ship()
    assert ship.check_collision([[0.6, 0, 0]], [0.2])
    assert not ship.check_collision([[1.0, 0, 0]], [0.2])
    assert not ship.check_collision([], [])


def test_check_collision_length_mismatch():
    ship, _ = make_ship()
    with pytest.raises(ValueError):
        ship.check_collision([[0, 0, 0]], [])


def test_collision_destroys_ship():
    ship, _ = make_ship(debris=3)
    ship.idle_frame([[0.2, 0, 0]], [0.1])
    assert ship.destruction
    assert ship.stopped
    assert ship.respawn_timer == 5.0
    assert np.allclose(ship.position, [0, 0, 0])
    assert np.allclose(ship.normal_destruction, [-1, 0, 0])


def test_j_key_triggers_destruction():
    ship, inputs = make_ship(debris=2)
    inputs.press(Key.J)
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert ship.destruction
    assert np.allclose(ship.impact_pos, ship.position + 0.5 * ship.velocity)


def test_destruction_scatters_debris():
    ship, _ = make_ship(debris=4)
    ship.position = [1.0, 2.0, 3.0]
    ship.destruction_trigger([0, 0, 0], [0, 0, 5])
    assert np.allclose(ship.normal_destruction, [0, 0, 1])
    for piece in ship.debris:
        assert np.allclose(piece.translation, [1.0, 2.0, 3.0])
        assert np.all(np.abs(piece.angular_velocity) <= 5.0)
    before = [p.translation.copy() for p in ship.debris]
    ship.idle_frame(NONE_POS, NONE_RAD)
    for piece, old in zip(ship.debris, before):
        assert np.allclose(piece.translation, old + ship.derive_speed * piece.direction)


def test_k_respawns_destroyed_ship():
    ship, inputs = make_ship(debris=2)
    ship.destruction_trigger([0, 0, 0], [1, 0, 0])
    ship.lasers_active[3] = 1
    inputs.press(Key.K)
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert not ship.destruction
    assert not ship.stopped
    assert ship.respawn_timer == 0.0
    assert ship.lasers_active.sum() == 0


def test_respawn_sets_pose():
    ship, _ = make_ship()
    r = Rotation.from_axis_angle([0, 0, 1], 0.5)
    ship.respawn([4.0, 5.0, 6.0], r)
    assert np.allclose(ship.position, [4.0, 5.0, 6.0])
    assert np.allclose(ship.rotation.matrix(), r.matrix())
    assert ship.last_laser == 0


def test_turning_manoeuvre():
    ship, inputs = make_ship(dt=0.8)
    v0, u0 = ship.velocity.copy(), ship.up.copy()
    inputs.press(Key.O)
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert ship.is_turning
    inputs.release(Key.O)
    ship.idle_frame(NONE_POS, NONE_RAD)
    assert np.allclose(ship.position, ship.positions_turning[1])
    for _ in range(3):
        ship.idle_frame(NONE_POS, NONE_RAD)
    assert not ship.is_turning
    assert np.allclose(ship.velocity, -v0)
    assert np.allclose(ship.left, [0, -1, 0])
    assert np.allclose(ship.position, 2 * ship.ampl_turn * u0 - ship.ampl_turn * v0)


def test_emit_and_advance_lasers():
    ship, _ = make_ship()
    index = ship._emit_laser([0.0, 0.0, 0.0])
    assert index == 1
    assert ship.active_lasers().shape == (1, 3)
    ship._advance_lasers(1.0)
    assert np.allclose(ship.lasers_pos[1], ship.lasers_velocity[1])
    ship._advance_lasers(1.0)
    assert ship.active_lasers().shape == (0, 3)