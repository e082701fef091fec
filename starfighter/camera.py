"""A chase camera that follows a ship from behind and slightly above."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from starfighter.ship import Ship
from starfighter.transform import Rotation, norm, normalize


@dataclass(eq=False)
class CombatCamera:
    """Camera placed behind the controlled ship, looking at it."""

    speed: float = 0.05
    roll: float = 0.8
    pitch: float = 0.5
    speed_increase: float = 1.02
    speed_max: float = 0.5
    speed_min: float = 0.0001
    eye: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: Rotation = field(default_factory=Rotation.identity)

    def look_at(self, eye, target, up) -> None:
        """Place the camera at eye, looking toward target with the given up direction."""
        eye = np.asarray(eye, dtype=float)
        target = np.asarray(target, dtype=float)
        back = normalize(eye - target)
        right = normalize(np.cross(np.asarray(up, dtype=float), back))
        true_up = np.cross(back, right)
        self.eye = eye.copy()
        self.orientation = Rotation.from_matrix(np.column_stack((right, true_up, back)))

    def matrix_frame(self) -> np.ndarray:
        frame = np.eye(4)
        frame[:3, :3] = self.orientation.matrix()
        frame[:3, 3] = self.eye
        return frame

    def matrix_view(self) -> np.ndarray:
        """The world-to-camera matrix."""
        rotation_t = self.orientation.matrix().T
        view = np.eye(4)
        view[:3, :3] = rotation_t
        view[:3, 3] = -rotation_t @ self.eye
        return view

    def position(self) -> np.ndarray:
        return self.eye.copy()

    def idle_frame(self, ship: Ship, time_interval) -> np.ndarray:
        """Follow the ship for one frame and return the new view matrix."""
        target = ship.position
        if ship.is_turning:
            self.look_at(self.eye, target, ship.up - ship.velocity)
            return self.matrix_view()

        offset = -ship.velocity + ship.up / 3
        angle = 5 * norm(ship.angular_velocity) * float(time_interval)
        if angle > 0.0001:
            lag = Rotation.from_axis_angle(ship.angular_velocity, -angle)
            eye = target + lag.apply(offset)
        else:
            eye = target + offset
        self.look_at(eye, target, ship.up)
        return self.matrix_view()

    def doc_usage(self) -> str:
        return "Camera doc"