import numpy as np
import pytest

from starfighter.inputs import Environment, InputState, Key, ProjectSettings


def test_press_and_release():
    state = InputState()
    state.press(Key.W)
    assert state.is_pressed(Key.W)
    assert not state.is_pressed(Key.S)
    state.release(Key.W)
    assert not state.is_pressed(Key.W)


def test_keys_by_value():
    state = InputState()
    state.press("space")
    assert state.is_pressed(Key.SPACE)


def test_unknown_key_raises():
    with pytest.raises(ValueError):
        InputState().press("not-a-key")


def test_release_of_unpressed_key_is_harmless():
    state = InputState()
    state.release(Key.J)
    assert not state.is_pressed(Key.J)


def test_project_defaults():
    settings = ProjectSettings()
    assert settings.fps_max == 60.0
    assert settings.fps_limiting is True
    assert settings.vsync is True
    assert settings.initial_window_size_width == 0.5
    assert settings.path == ""


def test_set_uniform_types():
    env = Environment()
    env.set_uniform("N_lights", 20)
    env.set_uniform("ambiant", 0.3)
    env.set_uniform("light_color", (1, 1, 1))
    env.set_uniform("view", np.eye(4))
    assert env.uniforms["N_lights"] == 20
    assert isinstance(env.uniforms["N_lights"], int)
    assert env.uniforms["ambiant"] == 0.3
    assert np.allclose(env.uniforms["light_color"], [1, 1, 1])
    assert env.uniforms["view"].shape == (4, 4)


def test_set_uniform_rejects_bad_values():
    env = Environment()
    with pytest.raises(TypeError):
        env.set_uniform("bad", [1, 2])
    with pytest.raises(TypeError):
        env.set_uniform("bad", "text")


def test_shader_uniforms_include_camera_and_light():
    env = Environment()
    env.light = np.array([2.0, 3.0, 4.0])
    values = env.shader_uniforms()
    assert np.allclose(values["light"], [2.0, 3.0, 4.0])
    assert np.allclose(values["projection"], np.eye(4))
    override = np.diag([2.0, 2.0, 2.0, 1.0])
    env.set_uniform("view", override)
    assert np.allclose(env.shader_uniforms()["view"], override)