import numpy as np
import pytest

from starfighter.inputs import InputState, Key
from starfighter.transform import Rotation, norm
from starfighter.x_wing import XWing


def make_xwing(bodies=2, wings=3, guns=1, dt=0.1):
    inputs = InputState(time_interval=dt)
    ship = XWing(rng=np.random.default_rng(1))
    ship.initialize(inputs, [[0.0, 0.0, 0.0]] * bodies, [[0.0, 0.0, 0.0]] * wings, [[0.0, 0.0, 0.0]] * guns)
    return ship, inputs


def test_initialize_builds_named_nodes():
    ship, _ = make_xwing()
    for name in (
        "Body 0",
        "Body 1",
        "Top right wing 2",
        "Bottom left wing 0",
        "Top left laser",
        "Bottom right gun",
        "Bottom right gun 0",
        "Top left reactor",
    ):
        assert name in ship.hierarchy
    assert "Body 2" not in ship.hierarchy


def test_debris_count_is_bodies_plus_two_per_wing():
    ship, _ = make_xwing(bodies=2, wings=3)
    assert len(ship.debris) == 2 + 2 * 3
    assert ship.debris[2].name == "Top right wing 0"
    assert ship.debris[5].name == "Bottom left wing 0"


def test_idle_frame_requires_initialize():
    ship = XWing(rng=np.random.default_rng(0))
    with pytest.raises(RuntimeError):
        ship.idle_frame([], [])


def test_without_boost_speed_drops_to_minimum_and_wings_open():
    ship, _ = make_xwing()
    ship.idle_frame([], [])
    assert ship.speed == pytest.approx(ship.speed_min)
    assert 0.0 < ship.wing_angle <= ship.wing_max_angle
    for _ in range(50):
        ship.idle_frame([], [])
    assert ship.wing_angle == pytest.approx(ship.wing_max_angle)


def test_wing_anchors_follow_wing_angle():
    ship, _ = make_xwing()
    ship.idle_frame([], [])
    expected = Rotation.from_axis_angle((1.0, 0.0, 0.0), -ship.wing_angle).matrix()
    actual = ship.hierarchy["Top right wing"].transform_local.rotation.matrix()
    assert np.allclose(actual, expected)
    mirrored = ship.hierarchy["Top left wing"].transform_local.rotation.matrix()
    assert np.allclose(mirrored, expected.T)


def test_boost_raises_speed_up_to_maximum_and_folds_wings():
    ship, inputs = make_xwing()
    ship.speed = ship.speed_max * 0.9
    ship.wing_angle = ship.wing_max_angle
    inputs.press(Key.SPACE)
    ship.idle_frame([], [])
    assert ship.speed > ship.speed_max * 0.9
    assert ship.wing_angle < ship.wing_max_angle
    for _ in range(100):
        ship.idle_frame([], [])
    assert ship.speed == pytest.approx(ship.speed_max)
    assert ship.wing_angle == pytest.approx(ship.wing_min_angle)


def test_boost_lights_all_reactors_equally():
    ship, inputs = make_xwing()
    inputs.press(Key.SPACE)
    ship.idle_frame([], [])
    assert all(value > 0.0 for value in ship.intensities)
    assert len(set(ship.intensities)) == 1
    for _ in range(100):
        ship.idle_frame([], [])
    assert all(value <= 2.0 for value in ship.intensities)


def test_roll_key_lights_matching_reactors_only():
    ship, inputs = make_xwing()
    inputs.press(Key.Q)
    ship.idle_frame([], [])
    assert ship.intensities[0] > 0.0 and ship.intensities[3] > 0.0
    assert ship.intensities[1] == 0.0 and ship.intensities[2] == 0.0


def test_reactors_fade_without_keys():
    ship, inputs = make_xwing()
    inputs.press(Key.SPACE)
    ship.idle_frame([], [])
    inputs.release(Key.SPACE)
    for _ in range(40):
        ship.idle_frame([], [])
    assert ship.intensities == [0.0, 0.0, 0.0, 0.0]


def test_reactor_lights_sit_next_to_reactors():
    ship, _ = make_xwing()
    ship.idle_frame([], [])
    assert len(ship.reactor_light_pos) == 4
    reactor = ship.hierarchy["Top right reactor"].transform_global.translation
    assert norm(ship.reactor_light_pos[0] - reactor) < 0.01


def test_firing_waits_for_delay_then_emits_from_a_gun():
    ship, inputs = make_xwing()
    inputs.press(Key.P)
    ship.idle_frame([], [])
    assert len(ship.active_lasers()) == 0
    ship.idle_frame([], [])
    assert len(ship.active_lasers()) == 1
    assert ship.last_laser == 1
    assert ship.guns_triggered[1] is True
    assert norm(ship.lasers_velocity[1]) == pytest.approx(ship.lasers_speed)


def test_gun_recoils_after_shot():
    ship, inputs = make_xwing()
    inputs.press(Key.P)
    ship.idle_frame([], [])
    ship.idle_frame([], [])
    inputs.release(Key.P)
    ship.idle_frame([], [])
    gun = ship.hierarchy[ship.guns_name[1]]
    assert gun.transform_local.translation[0] < 0.0
    for _ in range(20):
        ship.idle_frame([], [])
    assert gun.transform_local.translation[0] == 0.0
    assert ship.guns_triggered[1] is False


def test_collision_destroys_and_freezes_wings():
    ship, _ = make_xwing()
    ship.idle_frame([ship.position.copy()], [1.0])
    assert ship.destruction is True
    angle = ship.wing_angle
    ship.idle_frame([], [])
    assert ship.wing_angle == angle