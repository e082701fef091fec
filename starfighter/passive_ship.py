"""A ship that wanders by picking random manoeuvres."""

from __future__ import annotations

import numpy as np

from starfighter.inputs import InputState
from starfighter.ship import BASE, Debris, Ship


class PassiveShip(Ship):
    """A ship that holds a random manoeuvre for a random time, then picks another."""

    body_scaling = 0.07

    def __init__(self, rng=None):
        super().__init__(rng)
        self.time_remaining = 0.0
        self.time_max = 2.0
        self.current_accel_component = np.zeros(3)

    def initialize(self, inputs: InputState, body_parts=()) -> None:
        """Attach inputs and build one body node and one debris piece per part."""
        super().initialize(inputs)
        scaling = self.body_scaling
        self.debris = []
        for k, _part in enumerate(body_parts):
            name = f"Body {k}"
            node = self.hierarchy.add(name, BASE)
            node.model.scaling = scaling
            self.debris.append(Debris(name=name, scaling=scaling))

    def _pick_manoeuvre(self) -> None:
        self.time_remaining = float(self.rng.uniform(0.0, self.time_max))
        choice = int(self.rng.integers(10))
        options = (
            -self.roll_speed * self.velocity,
            self.roll_speed * self.velocity,
            -self.up_speed * self.left,
            self.up_speed * self.left,
            -self.turn_speed * self.up,
            self.turn_speed * self.up,
        )
        self.current_accel_component = options[choice].copy() if choice < len(options) else np.zeros(3)

    def idle_frame(self, damaging_pos, damaging_radius) -> None:
        """Fly the current manoeuvre for one frame, or choose the next one."""
        dt = self._require_inputs().time_interval
        if self.destruction:
            self.destructed_idle_frame()
            return

        if self.check_collision(damaging_pos, damaging_radius):
            self._destroy_from_front()

        if self.time_remaining > 0.0:
            self.time_remaining -= dt
            self._steer(self.current_accel_component, dt)
        else:
            self._pick_manoeuvre()