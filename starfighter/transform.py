"""Vector helpers, rotations, rigid transforms and a named transform hierarchy."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

_EPS = 1e-12


def _vec3(vector) -> np.ndarray:
    arr = np.asarray(vector, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3D vector, got shape {arr.shape}")
    return arr


def norm(vector) -> float:
    """Euclidean length of a vector."""
    return float(np.linalg.norm(np.asarray(vector, dtype=float)))


def normalize(vector) -> np.ndarray:
    """Return the vector scaled to unit length."""
    arr = np.asarray(vector, dtype=float)
    length = float(np.linalg.norm(arr))
    if length < _EPS:
        raise ValueError("cannot normalize a zero-length vector")
    return arr / length


def _orthonormal_frame(u, v) -> np.ndarray:
    e1 = normalize(_vec3(u))
    v = _vec3(v)
    e2 = normalize(v - np.dot(v, e1) * e1)
    e3 = np.cross(e1, e2)
    return np.column_stack((e1, e2, e3))


class Rotation:
    """A 3D rotation stored as a unit quaternion (w, x, y, z)."""

    __slots__ = ("_q",)

    def __init__(self, quaternion=(1.0, 0.0, 0.0, 0.0)):
        q = np.asarray(quaternion, dtype=float)
        if q.shape != (4,):
            raise ValueError("a quaternion has four components")
        length = float(np.linalg.norm(q))
        if length < _EPS:
            raise ValueError("a rotation quaternion cannot be zero")
        self._q = q / length

    @property
    def quaternion(self) -> np.ndarray:
        return self._q.copy()

    @classmethod
    def identity(cls) -> Rotation:
        return cls()

    @classmethod
    def from_axis_angle(cls, axis, angle) -> Rotation:
        unit = normalize(_vec3(axis))
        half = 0.5 * float(angle)
        return cls((math.cos(half), *(math.sin(half) * unit)))

    @classmethod
    def from_matrix(cls, matrix) -> Rotation:
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError("a rotation matrix is 3x3")
        trace = m[0, 0] + m[1, 1] + m[2, 2]
        if trace > 0:
            s = math.sqrt(trace + 1.0) * 2
            q = (0.25 * s, (m[2, 1] - m[1, 2]) / s, (m[0, 2] - m[2, 0]) / s, (m[1, 0] - m[0, 1]) / s)
        elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
            s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2
            q = ((m[2, 1] - m[1, 2]) / s, 0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s)
        elif m[1, 1] > m[2, 2]:
            s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2
            q = ((m[0, 2] - m[2, 0]) / s, (m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s)
        else:
            s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2
            q = ((m[1, 0] - m[0, 1]) / s, (m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s)
        return cls(q)

    @classmethod
    def from_frame_transform(cls, u1, v1, u2, v2) -> Rotation:
        """Rotation sending the frame (u1, v1) onto the frame (u2, v2)."""
        return cls.from_matrix(_orthonormal_frame(u2, v2) @ _orthonormal_frame(u1, v1).T)

    @classmethod
    def lerp(cls, start: Rotation, end: Rotation, alpha: float) -> Rotation:
        """Spherical interpolation between two rotations along the shortest arc."""
        q0 = start._q
        q1 = end._q
        dot = float(np.dot(q0, q1))
        if dot < 0.0:
            q1 = -q1
            dot = -dot
        if dot > 0.9995:
            return cls(q0 + alpha * (q1 - q0))
        theta = math.acos(min(dot, 1.0))
        sin_theta = math.sin(theta)
        w0 = math.sin((1.0 - alpha) * theta) / sin_theta
        w1 = math.sin(alpha * theta) / sin_theta
        return cls(w0 * q0 + w1 * q1)

    def matrix(self) -> np.ndarray:
        w, x, y, z = self._q
        return np.array(
            [
                [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
                [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
                [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
            ]
        )

    def apply(self, vector) -> np.ndarray:
        return self.matrix() @ _vec3(vector)

    def inverse(self) -> Rotation:
        w, x, y, z = self._q
        return Rotation((w, -x, -y, -z))

    def __mul__(self, other):
        if isinstance(other, Rotation):
            w1, v1 = self._q[0], self._q[1:]
            w2, v2 = other._q[0], other._q[1:]
            w = w1 * w2 - float(np.dot(v1, v2))
            v = w1 * v2 + w2 * v1 + np.cross(v1, v2)
            return Rotation((w, *v))
        return self.apply(other)

    def __repr__(self) -> str:
        return f"Rotation({tuple(float(c) for c in self._q)})"


@dataclass(eq=False)
class Transform:
    """Uniform scaling, then rotation, then translation."""

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Rotation = field(default_factory=Rotation.identity)
    scaling: float = 1.0

    def __post_init__(self):
        self.translation = _vec3(self.translation).copy()

    def apply(self, point) -> np.ndarray:
        return self.translation + self.rotation.apply(self.scaling * _vec3(point))

    def __mul__(self, other):
        if isinstance(other, Transform):
            return Transform(
                self.apply(other.translation),
                self.rotation * other.rotation,
                self.scaling * other.scaling,
            )
        return self.apply(other)


@dataclass(eq=False)
class Node:
    """A named element of a hierarchy with local, global and model transforms."""

    name: str
    parent: str | None
    transform_local: Transform = field(default_factory=Transform)
    transform_global: Transform = field(default_factory=Transform)
    model: Transform = field(default_factory=Transform)

    @property
    def hierarchy_transform_model(self) -> Transform:
        return self.transform_global * self.model


class Hierarchy:
    """Tree of named nodes; parents are always added before their children."""

    def __init__(self):
        self._nodes: dict[str, Node] = {}

    def add(self, name, parent=None, translation=None) -> Node:
        if name in self._nodes:
            raise ValueError(f"node {name!r} already exists")
        if parent is None:
            if self._nodes:
                raise ValueError("the hierarchy already has a root")
        elif parent not in self._nodes:
            raise KeyError(f"unknown parent node {parent!r}")
        offset = np.zeros(3) if translation is None else translation
        node = Node(name, parent, Transform(offset))
        self._nodes[name] = node
        return node

    def __getitem__(self, name) -> Node:
        try:
            return self._nodes[name]
        except KeyError:
            raise KeyError(f"unknown node {name!r}") from None

    def __contains__(self, name) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def update_global(self) -> None:
        """Recompute every node's global transform from its parent's."""
        for node in self._nodes.values():
            local = node.transform_local
            if node.parent is None:
                node.transform_global = Transform(local.translation, local.rotation, local.scaling)
            else:
                node.transform_global = self._nodes[node.parent].transform_global * local