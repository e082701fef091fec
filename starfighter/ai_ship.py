"""A computer-controlled ship that chases a target and fires at it."""

from __future__ import annotations

import numpy as np

from starfighter.inputs import InputState
from starfighter.ship import BASE, X_AXIS, Z_AXIS, Debris, Ship
from starfighter.transform import Rotation, norm, normalize


def _global_position(ship: Ship) -> np.ndarray:
    ship.hierarchy.update_global()
    return ship.hierarchy[BASE].hierarchy_transform_model.translation


class AIShip(Ship):
    """A ship that steers toward its target and shoots when it is in sight."""

    body_scaling = 0.05
    pursuit_gain = 30.0
    max_velocity_change = 0.015
    fire_distance_min = 5.0
    fire_distance_max = 100.0
    fire_alignment = 0.7

    def __init__(self, rng=None):
        super().__init__(rng)
        self.target: Ship | None = None

    def initialize(self, inputs: InputState, body_parts=()) -> None:
        """Attach inputs and build one body node and one debris piece per part.

        Each body part is a sequence of vertex positions; the debris piece is
        offset by the scaled sum of those positions.
        """
        super().initialize(inputs)
        self.laser_delay = 0.05
        scaling = self.body_scaling
        self.debris = []
        for k, part in enumerate(body_parts):
            name = f"Body {k}"
            node = self.hierarchy.add(name, BASE)
            node.model.scaling = scaling
            vertices = np.asarray(part, dtype=float).reshape(-1, 3)
            barycenter = vertices.sum(axis=0)
            self.debris.append(
                Debris(
                    name=name,
                    translation=self.position - barycenter * scaling,
                    scaling=scaling,
                )
            )

    def set_target(self, target: Ship) -> None:
        self.target = target

    def _require_target(self) -> Ship:
        if self.target is None:
            raise RuntimeError("AI ship has no target")
        return self.target

    def idle_frame(self, damaging_pos, damaging_radius) -> None:
        """Chase the target for one frame, then update the lasers."""
        dt = self._require_inputs().time_interval
        if self.destruction:
            self.destructed_idle_frame()
            return

        if self.check_collision(damaging_pos, damaging_radius):
            self._destroy_from_front()

        if self.stopped:
            return

        target = self._require_target()
        pos_ai = self.position.copy()
        to_target = target.position - pos_ai
        if norm(to_target) < 1e-5:
            return

        step = self.pursuit_gain * self.turn_speed * normalize(to_target) * dt
        step_length = norm(step)
        if step_length > 0.0:
            self.velocity = self.velocity + normalize(step) * min(self.max_velocity_change, step_length)

        if norm(self.velocity) > self.speed_max:
            self.velocity = self.pursuit_gain * self.speed_max * normalize(self.velocity)

        new_pos = pos_ai + self.velocity * self.speed
        self.position = new_pos

        forward = normalize(self.velocity)
        side = np.cross(np.array(Z_AXIS), forward)
        if norm(side) > 1e-12:
            new_left = normalize(side)
            new_up = normalize(np.cross(forward, new_left))
            self.left = new_left
            self.up = new_up
            if norm(np.cross(forward, new_up)) > 1e-3:
                self.rotation = Rotation.from_frame_transform(X_AXIS, Z_AXIS, forward, new_up)

        self.arrow_translation = new_pos.copy()
        self.arrow_rotation = self.rotation

        self.laser_idle_frame()

    def laser_idle_frame(self) -> None:
        """Fire when the target is in range and ahead, then move the lasers."""
        dt = self._require_inputs().time_interval
        target = self._require_target()
        own = _global_position(self)
        other = _global_position(target)

        dist = norm(own - other)
        dist_ok = self.fire_distance_min < dist < self.fire_distance_max
        heading = normalize(self.velocity)
        to_target = other - own
        if norm(to_target) < 1e-5:
            angle_ok = True
        else:
            angle_ok = float(np.dot(heading, normalize(to_target))) > self.fire_alignment

        if dist_ok and angle_ok and self.laser_dt >= self.laser_delay:
            self._emit_laser(own)
        else:
            self.laser_dt += dt

        self._advance_lasers(dt)