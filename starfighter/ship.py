"""A steerable ship with lasers, collisions, destruction and respawn."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from starfighter.inputs import InputState, Key
from starfighter.transform import Hierarchy, Rotation, norm, normalize

BASE = "base"
X_AXIS = (1.0, 0.0, 0.0)
Z_AXIS = (0.0, 0.0, 1.0)


@dataclass(eq=False)
class Debris:
    """A fragment of a destroyed ship and how it drifts away."""

    name: str = ""
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: Rotation = field(default_factory=Rotation.identity)
    scaling: float = 1.0
    direction: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))


class Ship:
    """A player-controlled ship; subclasses change how it flies and fires."""

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.inputs: InputState | None = None

        self.velocity = np.array(X_AXIS)
        self.up = np.array(Z_AXIS)
        self.left = np.array([0.0, 1.0, 0.0])
        self.angular_velocity = np.zeros(3)

        self.impact_pos = np.zeros(3)
        self.normal_destruction = np.array([-1.0, 0.0, 0.0])

        self.up_speed = 1.0
        self.roll_speed = 1.2
        self.turn_speed = 0.8
        self.speed = 0.03
        self.speed_increase = 1.01
        self.speed_max = 0.1
        self.speed_min = 0.04
        self.angular_speed = 2.0
        self.angular_damping = 0.96

        self.derive_speed = 0.005
        self.collision_radius = 0.5
        self.respawn_timer = 0.0

        self.n_lasers = 19
        self.last_laser = 0
        self.lasers_color = np.array([1.0, 0.1, 0.88])
        self.laser_material_color = np.array([0.97, 0.78, 0.92])
        self.laser_bound = 100.0
        self.lasers_speed = 70.01
        self.laser_delay = 0.05
        self.laser_dt = 0.0
        self.d_light_max = 10.0
        self.laser_radius = 0.03

        self.is_turning = False
        self.rotation_turning: list[Rotation] = []
        self.positions_turning: list[np.ndarray] = []
        self.derivative_turning: list[np.ndarray] = []
        self.timer_turning = 0.0
        self.ampl_turn = 1.0
        self.steps_times = (0.0, 0.8, 1.6, 2.6)

        self.arrow_translation = np.zeros(3)
        self.arrow_rotation = Rotation.identity()

        self.debris: list[Debris] = []
        self._reset()

    def _reset(self) -> None:
        self.hierarchy = Hierarchy()
        self.hierarchy.add(BASE)
        self.stopped = False
        self.destruction = False
        self.lasers_pos = np.zeros((self.n_lasers, 3))
        self.lasers_velocity = np.zeros((self.n_lasers, 3))
        self.lasers_orientation = [Rotation.identity() for _ in range(self.n_lasers)]
        self.lasers_active = np.zeros(self.n_lasers, dtype=int)

    @property
    def position(self) -> np.ndarray:
        return self.hierarchy[BASE].transform_local.translation

    @position.setter
    def position(self, value) -> None:
        self.hierarchy[BASE].transform_local.translation = np.asarray(value, dtype=float).copy()

    @property
    def rotation(self) -> Rotation:
        return self.hierarchy[BASE].transform_local.rotation

    @rotation.setter
    def rotation(self, value: Rotation) -> None:
        self.hierarchy[BASE].transform_local.rotation = value

    def initialize(self, inputs: InputState) -> None:
        """Attach the input state and reset the ship's hierarchy and lasers."""
        self.inputs = inputs
        self._reset()

    def _require_inputs(self) -> InputState:
        if self.inputs is None:
            raise RuntimeError("ship is not initialized")
        return self.inputs

    def _pressed(self, key: Key) -> bool:
        return self._require_inputs().is_pressed(key)

    def _destroy_from_front(self) -> None:
        self.destruction_trigger(self.position + 0.5 * self.velocity, -self.velocity)

    def _turning_frame(self, dt: float) -> None:
        self.timer_turning += dt
        steps = self.steps_times
        if self.timer_turning > steps[3]:
            self.is_turning = False
            self.position = self.positions_turning[3]
            self.rotation = self.rotation_turning[3]
            self.velocity = self.derivative_turning[2].copy()
            self.left = -self.left
            self.angular_velocity = np.zeros(3)
            return
        if self.timer_turning < steps[1]:
            j = 0
        elif self.timer_turning < steps[2]:
            j = 1
        else:
            j = 2
        alpha = (self.timer_turning - steps[j]) / (steps[j + 1] - steps[j])
        a2, a3 = alpha**2, alpha**3
        p0, p1 = self.positions_turning[j], self.positions_turning[j + 1]
        d0, d1 = self.derivative_turning[j], self.derivative_turning[j + 1]
        self.position = (
            (2 * a3 - 3 * a2 + 1) * p0
            + (a3 - 2 * a2 + alpha) * d0
            + (-2 * a3 + 3 * a2) * p1
            + (a3 - a2) * d1
        )
        self.rotation = Rotation.lerp(self.rotation_turning[j], self.rotation_turning[j + 1], alpha)

    def _start_turning(self) -> None:
        self.is_turning = True
        self.timer_turning = 0.0
        start = self.position.copy()
        a = self.ampl_turn
        v, u = self.velocity, self.up
        self.positions_turning = [
            start,
            start + 1.5 * a * v + a * u,
            start + 2 * a * u + 0.5 * a * v,
            start + 2 * a * u + a * -v,
        ]
        self.rotation_turning = [
            self.rotation,
            Rotation.from_frame_transform(X_AXIS, Z_AXIS, u, -v),
            Rotation.from_frame_transform(X_AXIS, Z_AXIS, -v, -u),
            Rotation.from_frame_transform(X_AXIS, Z_AXIS, -v, u),
        ]
        self.derivative_turning = [v.copy(), u.copy(), -v, -v]

    def _steer(self, angular_acc: np.ndarray, dt: float) -> None:
        self.angular_velocity = self.angular_velocity + self.angular_speed * angular_acc * dt
        angle = norm(self.angular_velocity) * dt
        if angle > 0.0001:
            rt = Rotation.from_axis_angle(self.angular_velocity, angle)
            self.up = normalize(rt.apply(self.up))
            self.left = normalize(rt.apply(self.left))
            self.velocity = normalize(rt.apply(self.velocity))
            self.arrow_rotation = rt * self.arrow_rotation
        self.angular_velocity = self.angular_velocity * self.angular_damping

        self.position = self.position + self.velocity * self.speed
        self.rotation = Rotation.from_frame_transform(X_AXIS, Z_AXIS, self.velocity, self.up)
        self.arrow_translation = self.position.copy()

    def idle_frame(self, damaging_pos, damaging_radius) -> None:
        """Advance the ship by one frame from the keyboard state."""
        dt = self._require_inputs().time_interval
        if self.destruction:
            self.destructed_idle_frame()
            return

        if self._pressed(Key.J):
            self._destroy_from_front()
        if self.check_collision(damaging_pos, damaging_radius):
            self._destroy_from_front()

        if self.is_turning:
            self._turning_frame(dt)
            return

        if self._pressed(Key.O):
            self._start_turning()
            return

        angular_acc = np.zeros(3)
        if self._pressed(Key.Q):
            angular_acc += -self.roll_speed * self.velocity
        if self._pressed(Key.E):
            angular_acc += self.roll_speed * self.velocity
        if self._pressed(Key.W):
            angular_acc += -self.up_speed * self.left
        if self._pressed(Key.S):
            angular_acc += self.up_speed * self.left
        if self._pressed(Key.A):
            angular_acc += self.turn_speed * self.up
        if self._pressed(Key.D):
            angular_acc += -self.turn_speed * self.up
        if self._pressed(Key.G):
            self.stopped = not self.stopped

        if self.stopped:
            return
        self._steer(angular_acc, dt)

    def check_collision(self, damaging_pos, damaging_radius) -> bool:
        """True when any damaging sphere overlaps the ship's collision sphere."""
        positions = list(damaging_pos)
        radii = list(damaging_radius)
        if len(positions) != len(radii):
            raise ValueError("damaging positions and radii differ in length")
        center = self.position
        return any(
            self.collision_radius + radius > norm(np.asarray(pos, dtype=float) - center)
            for pos, radius in zip(positions, radii)
        )

    def destructed_idle_frame(self) -> None:
        """Let debris drift and spin; K respawns the ship at the origin."""
        dt = self._require_inputs().time_interval
        for piece in self.debris:
            piece.translation = piece.translation + self.derive_speed * piece.direction
            spin = norm(piece.angular_velocity)
            if spin > 0.0:
                piece.rotation = piece.rotation * Rotation.from_axis_angle(piece.angular_velocity, spin * dt)
        if self.debris and self._pressed(Key.K):
            self.respawn(np.zeros(3), Rotation.from_frame_transform(X_AXIS, Z_AXIS, X_AXIS, Z_AXIS))

    def destruction_trigger(self, impact_position, normal_destruction) -> None:
        """Break the ship apart, scattering debris around the given normal."""
        self.respawn_timer = 5.0
        self.destruction = True
        self.stopped = True
        self.impact_pos = np.asarray(impact_position, dtype=float).copy()
        normal = normalize(normal_destruction)
        self.normal_destruction = normal
        for piece in self.debris:
            piece.translation = self.position.copy()
            piece.rotation = self.arrow_rotation
            piece.direction = self.rng.normal(normal, 1.0)
            piece.angular_velocity = self.rng.uniform(-5.0, 5.0, size=3)

    def respawn(self, position, rotation: Rotation) -> None:
        self.position = position
        self.rotation = rotation
        self.destruction = False
        self.stopped = False
        self.laser_dt = 0.0
        self.last_laser = 0
        self.lasers_active[:] = 0
        self.respawn_timer = 0.0

    def active_lasers(self) -> np.ndarray:
        """Positions of the lasers currently in flight, as an (n, 3) array."""
        return self.lasers_pos[self.lasers_active.astype(bool)].copy()

    def _emit_laser(self, origin) -> int:
        self.laser_dt = 0.0
        self.last_laser = 0 if self.last_laser == self.n_lasers - 1 else self.last_laser + 1
        i = self.last_laser
        self.lasers_pos[i] = np.asarray(origin, dtype=float)
        self.lasers_velocity[i] = self.lasers_speed * normalize(self.velocity)
        self.lasers_orientation[i] = self.rotation * Rotation.from_axis_angle((0.0, 1.0, 0.0), math.pi / 2)
        self.lasers_active[i] = 1
        return i

    def _advance_lasers(self, dt: float) -> None:
        center = self.position
        for i in np.flatnonzero(self.lasers_active):
            self.lasers_pos[i] += self.lasers_velocity[i] * dt
            if norm(center - self.lasers_pos[i]) > self.laser_bound:
                self.lasers_active[i] = 0