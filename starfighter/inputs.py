"""Input state, project settings and the rendering environment."""

from __future__ import annotations

import enum
import numbers
from dataclasses import dataclass, field

import numpy as np


class Key(enum.Enum):
    A = "a"
    D = "d"
    E = "e"
    F = "f"
    G = "g"
    J = "j"
    K = "k"
    O = "o"  # noqa: E741
    P = "p"
    Q = "q"
    S = "s"
    V = "v"
    W = "w"
    SPACE = "space"


@dataclass
class InputState:
    """Keys held down, modifier state and the time elapsed since the last frame."""

    time_interval: float = 0.0
    shift: bool = False
    ctrl: bool = False
    _pressed: set = field(default_factory=set, repr=False)

    def press(self, key) -> None:
        self._pressed.add(Key(key))

    def release(self, key) -> None:
        self._pressed.discard(Key(key))

    def is_pressed(self, key) -> bool:
        return Key(key) in self._pressed


@dataclass
class ProjectSettings:
    """Global project settings with their default values."""

    path: str = ""
    gui_scale: float = 1.0
    fps_limiting: bool = True
    fps_max: float = 60.0
    vsync: bool = True
    initial_window_size_width: float = 0.5
    initial_window_size_height: float = 0.5


def _uniform_value(value):
    if isinstance(value, str):
        raise TypeError("uniforms hold numbers, 3D vectors or 4x4 matrices")
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return float(value)
    arr = np.asarray(value, dtype=float)
    if arr.shape in ((3,), (4, 4)):
        return arr.copy()
    raise TypeError(f"unsupported uniform shape {arr.shape}")


def _ones3() -> np.ndarray:
    return np.ones(3)


@dataclass(eq=False)
class Environment:
    """Camera, light and the additional uniforms sent to shaders."""

    background_color: np.ndarray = field(default_factory=_ones3)
    camera_view: np.ndarray = field(default_factory=lambda: np.eye(4))
    camera_projection: np.ndarray = field(default_factory=lambda: np.eye(4))
    light: np.ndarray = field(default_factory=_ones3)
    uniforms: dict = field(default_factory=dict)

    def set_uniform(self, name, value) -> None:
        self.uniforms[str(name)] = _uniform_value(value)

    def shader_uniforms(self) -> dict:
        """Every uniform sent to a shader; additional uniforms come last and win."""
        values = {
            "projection": np.asarray(self.camera_projection, dtype=float).copy(),
            "view": np.asarray(self.camera_view, dtype=float).copy(),
            "light": np.asarray(self.light, dtype=float).copy(),
        }
        values.update(self.uniforms)
        return values