import numpy as np
import pytest

from starfighter.inputs import InputState
from starfighter.passive_ship import PassiveShip
from starfighter.ship import BASE
from starfighter.transform import norm


def _make(seed=0, dt=0.1, parts=2):
    ship = PassiveShip(np.random.default_rng(seed))
    ship.initialize(InputState(time_interval=dt), [[] for _ in range(parts)])
    return ship


def test_initialize_builds_body_nodes_and_debris():
    ship = _make(parts=3)
    assert len(ship.debris) == 3
    assert [piece.name for piece in ship.debris] == ["Body 0", "Body 1", "Body 2"]
    assert ship.hierarchy["Body 2"].parent == BASE
    assert ship.hierarchy["Body 0"].model.scaling == pytest.approx(0.07)
    assert ship.debris[1].scaling == pytest.approx(0.07)


def test_first_frame_picks_manoeuvre_without_moving():
    ship = _make()
    ship.idle_frame([], [])
    assert 0.0 <= ship.time_remaining <= ship.time_max
    assert np.allclose(ship.position, np.zeros(3))


def test_manoeuvres_come_from_the_allowed_set():
    magnitudes = set()
    for seed in range(40):
        ship = _make(seed=seed)
        ship.idle_frame([], [])
        magnitudes.add(round(norm(ship.current_accel_component), 6))
    assert magnitudes <= {0.0, 1.2, 1.0, 0.8}
    assert 0.0 in magnitudes


def test_straight_flight_moves_along_velocity():
    ship = _make()
    ship.time_remaining = 1.0
    start_velocity = ship.velocity.copy()
    ship.idle_frame([], [])
    assert np.allclose(ship.position, start_velocity * ship.speed)
    assert ship.time_remaining == pytest.approx(0.9)


def test_turning_keeps_frame_orthonormal():
    ship = _make()
    ship.time_remaining = 5.0
    ship.current_accel_component = ship.turn_speed * ship.up
    for _ in range(10):
        ship.idle_frame([], [])
    assert norm(ship.velocity) == pytest.approx(1.0)
    assert float(np.dot(ship.velocity, ship.up)) == pytest.approx(0.0, abs=1e-9)
    assert float(np.dot(ship.velocity, ship.left)) == pytest.approx(0.0, abs=1e-9)
    assert not np.allclose(ship.velocity, [1.0, 0.0, 0.0])


def test_same_seed_gives_same_flight():
    a = _make(seed=7)
    b = _make(seed=7)
    for _ in range(30):
        a.idle_frame([], [])
        b.idle_frame([], [])
    assert np.allclose(a.position, b.position)
    assert np.allclose(a.velocity, b.velocity)


def test_collision_destroys_ship():
    ship = _make()
    ship.idle_frame([[0.2, 0.0, 0.0]], [0.1])
    assert ship.destruction
    assert ship.respawn_timer == pytest.approx(5.0)


def test_destroyed_ship_debris_drifts():
    ship = _make()
    ship.destruction_trigger(ship.position, (-1.0, 0.0, 0.0))
    before = [piece.translation.copy() for piece in ship.debris]
    ship.idle_frame([], [])
    for piece, old in zip(ship.debris, before):
        assert np.allclose(piece.translation - old, ship.derive_speed * piece.direction)


def test_mismatched_damaging_lists_raise():
    ship = _make()
    with pytest.raises(ValueError):
        ship.idle_frame([[0.0, 0.0, 0.0]], [])