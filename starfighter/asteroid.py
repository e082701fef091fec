"""Asteroid field: noisy ellipsoid meshes, wrapping motion, destruction, smoke and debris."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from starfighter.transform import Rotation, norm, normalize

_EPS = 1e-12

_PERM = np.random.default_rng(0x5EED).permutation(256)
_PERM2 = np.concatenate((_PERM, _PERM))
_GRADIENTS = np.array(
    [
        (1, 1, 0), (-1, 1, 0), (1, -1, 0), (-1, -1, 0),
        (1, 0, 1), (-1, 0, 1), (1, 0, -1), (-1, 0, -1),
        (0, 1, 1), (0, -1, 1), (0, 1, -1), (0, -1, -1),
    ],
    dtype=float,
)
_CORNERS = [(dx, dy, dz) for dx in (0, 1) for dy in (0, 1) for dz in (0, 1)]


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _gradient_noise(points: np.ndarray) -> np.ndarray:
    """Gradient noise in [-1, 1] for an (n, 3) array; zero on integer lattice points."""
    cell = np.floor(points)
    frac = points - cell
    idx = cell.astype(np.int64) & 255
    weights = _fade(frac)
    total = np.zeros(len(points))
    for corner in _CORNERS:
        offset = np.array(corner, dtype=float)
        h = _PERM2[_PERM2[_PERM2[idx[:, 0] + corner[0]] + idx[:, 1] + corner[1]] + idx[:, 2] + corner[2]]
        grad = _GRADIENTS[h % 12]
        contribution = np.einsum("ij,ij->i", grad, frac - offset)
        blend = np.ones(len(points))
        for axis, d in enumerate(corner):
            blend = blend * (weights[:, axis] if d else 1.0 - weights[:, axis])
        total += blend * contribution
    return np.clip(total, -1.0, 1.0)


def perlin_noise(point, octave, persistency, frequency_gain):
    """Fractal noise: sum over octaves of amplitude * (0.5 + 0.5 * noise(frequency * p)).

    Accepts one 3D point (returns a float) or an (n, 3) array (returns an array).
    """
    octave = int(octave)
    if octave < 0:
        raise ValueError("octave must not be negative")
    arr = np.asarray(point, dtype=float)
    single = arr.ndim == 1
    pts = arr.reshape(-1, 3)
    value = np.zeros(len(pts))
    amplitude = 1.0
    frequency = 1.0
    for _ in range(octave):
        value += amplitude * (0.5 + 0.5 * _gradient_noise(pts * frequency))
        frequency *= frequency_gain
        amplitude *= persistency
    return float(value[0]) if single else value


@dataclass(eq=False)
class Mesh:
    """Triangle mesh with per-vertex position, normal, color and uv."""

    position: np.ndarray
    connectivity: np.ndarray
    normal: np.ndarray | None = None
    color: np.ndarray | None = None
    uv: np.ndarray | None = None

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=float).reshape(-1, 3).copy()
        self.connectivity = np.asarray(self.connectivity, dtype=np.int64).reshape(-1, 3).copy()
        if self.connectivity.size and (self.connectivity.min() < 0 or self.connectivity.max() >= len(self.position)):
            raise ValueError("connectivity refers to a missing vertex")
        self.fill_empty_field()

    def _has(self, values, width) -> bool:
        return values is not None and np.shape(values) == (len(self.position), width)

    def fill_empty_field(self) -> None:
        """Give default values to normals, colors and uvs that are missing."""
        if not self._has(self.normal, 3):
            self.normal = None
            self.normal_update()
        else:
            self.normal = np.asarray(self.normal, dtype=float).copy()
        if not self._has(self.color, 3):
            self.color = np.ones((len(self.position), 3))
        else:
            self.color = np.asarray(self.color, dtype=float).copy()
        if not self._has(self.uv, 2):
            self.uv = np.zeros((len(self.position), 2))
        else:
            self.uv = np.asarray(self.uv, dtype=float).copy()

    def normal_update(self) -> None:
        """Recompute vertex normals from area-weighted face normals.

        A vertex touched only by degenerate triangles keeps its previous normal.
        """
        p = self.position
        tri = self.connectivity
        accumulated = np.zeros_like(p)
        if len(tri):
            faces = np.cross(p[tri[:, 1]] - p[tri[:, 0]], p[tri[:, 2]] - p[tri[:, 0]])
            for column in range(3):
                np.add.at(accumulated, tri[:, column], faces)
        lengths = np.linalg.norm(accumulated, axis=1)
        valid = lengths > _EPS
        previous = self.normal if self._has(self.normal, 3) else np.zeros_like(p)
        updated = np.array(previous, dtype=float)
        updated[valid] = accumulated[valid] / lengths[valid, None]
        self.normal = updated

    def copy(self) -> Mesh:
        return Mesh(self.position, self.connectivity, self.normal, self.color, self.uv)


def ellipsoid_mesh(scale, center=(0.0, 0.0, 0.0), nu=40, nv=20) -> Mesh:
    """Parametric ellipsoid with semi-axes `scale`, sampled on an nu x nv grid."""
    nu, nv = int(nu), int(nv)
    if nu < 2 or nv < 2:
        raise ValueError("an ellipsoid needs at least 2 samples in each direction")
    radii = np.asarray(scale, dtype=float)
    if radii.shape != (3,) or np.any(radii <= 0):
        raise ValueError("ellipsoid scales must be three positive numbers")
    c = np.asarray(center, dtype=float)
    u = np.repeat(np.linspace(0.0, 1.0, nu), nv)
    v = np.tile(np.linspace(0.0, 1.0, nv), nu)
    theta = 2 * math.pi * u
    phi = math.pi * v
    unit = np.column_stack((np.sin(phi) * np.cos(theta), np.sin(phi) * np.sin(theta), np.cos(phi)))
    position = c + unit * radii
    gradient = unit / radii
    normal = gradient / np.linalg.norm(gradient, axis=1)[:, None]

    ku, kv = np.meshgrid(np.arange(nu - 1), np.arange(nv - 1), indexing="ij")
    idx = (kv + nv * ku).ravel()
    first = np.column_stack((idx, idx + 1, idx + 1 + nv))
    second = np.column_stack((idx, idx + 1 + nv, idx + nv))
    connectivity = np.vstack((first, second))
    return Mesh(position, connectivity, normal, None, np.column_stack((u, v)))


@dataclass
class PerlinParameters:
    """Parameters of the noise that roughens asteroid surfaces."""

    persistency: float = 0.1
    frequency_gain: float = 2.0
    octave: int = 20
    height: float = 1.0
    color: tuple = (1.0, 1.0, 1.0)


def _random_direction(rng) -> np.ndarray:
    theta = rng.uniform(0.0, 2.0 * math.pi)
    phi = rng.uniform(0.0, 2.0 * math.pi)
    return np.array([math.sin(theta) * math.cos(phi), math.sin(theta) * math.sin(phi), math.cos(theta)])


class AsteroidField:
    """Asteroids drifting inside a cube that follows a center; lasers break them apart."""

    def __init__(self, n_asteroids=100, n_mesh=10, n_debris_mesh=10, bound=200.0, center=(0.0, 0.0, 0.0), rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.n_asteroids = int(n_asteroids)
        self.n_mesh = int(n_mesh)
        self.n_debris_mesh = int(n_debris_mesh)
        self.bound = float(bound)
        self.center = np.asarray(center, dtype=float).copy()
        self.color = np.ones(3)
        self.respawn_delay = 20.0
        self.asteroid_perlin = PerlinParameters()
        self.debris_perlin = PerlinParameters()

        self.meshes: list[Mesh] = []
        self.original_meshes: list[Mesh] = []
        self.collision_radius = np.zeros(0)
        self.original_collision_radius = np.zeros(0)

        self.velocities = np.zeros((0, 3))
        self.angular_velocities = np.zeros((0, 3))
        self.positions = np.zeros((0, 3))
        self.rotations: list[Rotation] = []
        self.mesh_ref = np.zeros(0, dtype=int)
        self.n_destroyed = 0
        self.destroyed = np.zeros(0, dtype=int)
        self.inactive_time = np.zeros(0)

        self.n_quad = 100
        self.smoke_radius = 1.0
        self.dx = 0.005
        self.fade_speed = 1.1
        self.instance_positions = np.zeros((0, 3))
        self.instance_velocities = np.zeros((0, 3))
        self.smoke_positions = np.zeros((0, 3))
        self.smoke_alphas = np.zeros((0, 2))

        self.n_debris = 0
        self.max_debris = 10
        self.debris_meshes: list[Mesh] = []
        self.original_debris_meshes: list[Mesh] = []
        self.asteroid2debris_index: list[tuple[int, int]] = []
        self.debris_velocities = np.zeros((0, 3))
        self.debris_angular_velocities = np.zeros((0, 3))
        self.debris_positions = np.zeros((0, 3))
        self.debris_rotations: list[Rotation] = []
        self._initialized = False

    def _spawn_position(self) -> np.ndarray:
        return self.center + self.rng.uniform(-self.bound, self.bound, size=3) / 2

    def initialize(self, asteroid_scales, debris_scales, nuv_asteroids, nuv_debris) -> None:
        """Build the asteroid and debris meshes and scatter the asteroids around the center."""
        asteroid_scales = [np.asarray(s, dtype=float) for s in asteroid_scales]
        debris_scales = [np.asarray(s, dtype=float) for s in debris_scales]
        if len(asteroid_scales) != self.n_mesh:
            raise ValueError(f"expected {self.n_mesh} asteroid scales, got {len(asteroid_scales)}")
        if len(debris_scales) != self.n_debris_mesh:
            raise ValueError(f"expected {self.n_debris_mesh} debris scales, got {len(debris_scales)}")
        if self.n_mesh < 1 or self.n_debris_mesh < 1:
            raise ValueError("at least one asteroid mesh and one debris mesh are needed")

        self.asteroid2debris_index = []
        total = 0
        for _ in range(self.n_asteroids):
            count = int(self.rng.uniform(2, self.max_debris))
            self.asteroid2debris_index.append((total, total + count))
            total += count
        self.n_debris = total
        self.debris_positions = np.zeros((total, 3))
        self.debris_velocities = np.zeros((total, 3))
        self.debris_angular_velocities = np.zeros((total, 3))
        self.debris_rotations = [Rotation.identity() for _ in range(total)]

        self.original_meshes = [ellipsoid_mesh(s, (0, 0, 0), nuv_asteroids, nuv_asteroids) for s in asteroid_scales]
        self.meshes = [m.copy() for m in self.original_meshes]
        self.original_collision_radius = np.array([float(s.sum()) / 3.0 for s in asteroid_scales])
        self.collision_radius = self.original_collision_radius.copy()
        self.original_debris_meshes = [ellipsoid_mesh(s, (0, 0, 0), nuv_debris, nuv_debris) for s in debris_scales]
        self.debris_meshes = [m.copy() for m in self.original_debris_meshes]

        n = self.n_asteroids
        self.positions = np.zeros((n, 3))
        self.velocities = np.zeros((n, 3))
        self.angular_velocities = np.zeros((n, 3))
        for i in range(n):
            self.positions[i] = self._spawn_position()
            self.velocities[i] = self.rng.uniform(-5, 5, size=3)
            self.angular_velocities[i] = self.rng.uniform(-5, 5, size=3)
        self.rotations = [Rotation.identity() for _ in range(n)]
        self.mesh_ref = np.arange(n) % self.n_mesh
        self.destroyed = np.zeros(n, dtype=int)
        self.inactive_time = np.zeros(n)
        self.n_destroyed = 0

        self.instance_positions = np.zeros((self.n_quad * n, 3))
        self.instance_velocities = np.zeros((self.n_quad * n, 3))
        self.smoke_positions = np.zeros((0, 3))
        self.smoke_alphas = np.zeros((0, 2))
        self._initialized = True

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("asteroid field is not initialized")

    @staticmethod
    def _roughen(mesh: Mesh, original: Mesh, params: PerlinParameters) -> None:
        noise = params.height * perlin_noise(original.position, params.octave, params.persistency, params.frequency_gain)
        mesh.position = original.position + original.normal * noise[:, None]
        mesh.color = np.tile(np.asarray(params.color, dtype=float), (len(mesh.position), 1))
        mesh.fill_empty_field()
        mesh.normal_update()

    def apply_perlin(self, asteroid_perlin: PerlinParameters, debris_perlin: PerlinParameters) -> None:
        """Displace every vertex along its normal by noise and rescale collision radii."""
        self._require_initialized()
        self.asteroid_perlin = asteroid_perlin
        self.debris_perlin = debris_perlin
        for mesh, original in zip(self.meshes, self.original_meshes):
            self._roughen(mesh, original, asteroid_perlin)
        self.collision_radius = self.original_collision_radius * asteroid_perlin.height
        for mesh, original in zip(self.debris_meshes, self.original_debris_meshes):
            self._roughen(mesh, original, debris_perlin)

    def _wrap(self, k: int) -> None:
        p1 = self.positions[k].copy()
        p2 = p1 - self.velocities[k]
        c = self.center
        b = self.bound
        if not np.any(np.abs(p1 - c) > b):
            return
        candidates = []
        with np.errstate(divide="ignore", invalid="ignore"):
            for axis in range(3):
                face = c[axis] - b if p1[axis] - c[axis] > 0 else c[axis] + b
                t = (face - p1[axis]) / p2[axis]
                point = p1 + p2 * t
                point[axis] = face
                candidates.append(point)
            norms = [norm(p1 - q) for q in candidates]
        smallest = norms[0]
        for value in norms[1:]:
            if value < smallest:
                smallest = value
        if norms[0] == smallest:
            self.positions[k] = candidates[0]
        elif norms[1] == smallest:
            self.positions[k] = candidates[1]
        else:
            self.positions[k] = candidates[2]

    @staticmethod
    def _spin(rotation: Rotation, angular_velocity: np.ndarray, dt: float) -> Rotation:
        angle = norm(angular_velocity) * dt
        if norm(angular_velocity) <= _EPS:
            return rotation
        return rotation * Rotation.from_axis_angle(angular_velocity, angle)

    def _destroy(self, k: int, smoke_positions: list, smoke_alphas: list) -> None:
        self.destroyed[k] = 1
        origin = self.positions[k]
        for i in range(k * self.n_quad, (k + 1) * self.n_quad):
            pos = origin + self.rng.uniform(0.1, self.smoke_radius) * _random_direction(self.rng)
            smoke_positions.append(pos)
            self.instance_positions[i] = pos
            self.instance_velocities[i] = normalize(pos - origin)
            smoke_alphas.append((1.0, 0.0))
        start, end = self.asteroid2debris_index[k]
        for i in range(start, end):
            pos = origin + self.rng.uniform(0.1, self.smoke_radius) * _random_direction(self.rng)
            self.debris_positions[i] = pos
            self.debris_velocities[i] = normalize(pos - origin) * self.rng.uniform(0.1, 5.0)
            self.debris_angular_velocities[i] = 5.0 * self.rng.uniform(-1, 1, size=3)
        self.n_destroyed += 1

    def idle_frame(self, dt, next_center, damaging_position, damaging_radius) -> None:
        """Advance every asteroid, smoke cloud and debris piece by dt, then move the cube."""
        self._require_initialized()
        dt = float(dt)
        hazards = np.asarray(list(damaging_position), dtype=float).reshape(-1, 3)
        radii = np.asarray(list(damaging_radius), dtype=float).reshape(-1)
        if len(hazards) != len(radii):
            raise ValueError("damaging positions and radii differ in length")

        smoke_positions: list = []
        smoke_alphas: list = []
        for k in range(self.n_asteroids):
            if self.destroyed[k] == 1:
                if self.inactive_time[k] >= self.respawn_delay:
                    self.positions[k] = self._spawn_position()
                    self.destroyed[k] = 0
                    self.inactive_time[k] = 0.0
                    self.n_destroyed -= 1
                    continue
                self.inactive_time[k] += dt
                alpha = 1.0 - self.fade_speed * self.inactive_time[k] / self.respawn_delay
                for i in range(k * self.n_quad, (k + 1) * self.n_quad):
                    self.instance_positions[i] = self.instance_positions[i] + self.dx * self.instance_velocities[i]
                    smoke_positions.append(self.instance_positions[i].copy())
                    smoke_alphas.append((alpha, 0.0))
                start, end = self.asteroid2debris_index[k]
                for i in range(start, end):
                    self.debris_rotations[i] = self._spin(self.debris_rotations[i], self.debris_angular_velocities[i], dt)
                    self.debris_positions[i] = self.debris_positions[i] + self.debris_velocities[i] * dt
                continue

            self._wrap(k)

            if len(hazards):
                distances = np.linalg.norm(self.positions[k] - hazards, axis=1)
                if np.any(distances < self.collision_radius[self.mesh_ref[k]] + radii):
                    self._destroy(k, smoke_positions, smoke_alphas)
                    continue

            self.rotations[k] = self._spin(self.rotations[k], self.angular_velocities[k], dt)
            self.positions[k] = self.positions[k] + self.velocities[k] * dt

        self.center = np.asarray(next_center, dtype=float).copy()
        self.smoke_positions = np.asarray(smoke_positions, dtype=float).reshape(-1, 3)
        self.smoke_alphas = np.asarray(smoke_alphas, dtype=float).reshape(-1, 2)