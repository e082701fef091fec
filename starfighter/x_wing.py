"""The player's X-wing: deployable wings, reactor glow and four alternating guns."""

from __future__ import annotations

import math

import numpy as np

from starfighter.inputs import InputState, Key
from starfighter.ship import BASE, Debris, Ship
from starfighter.transform import Rotation

_X_AXIS = (1.0, 0.0, 0.0)
_ANCHOR_SCALING = 0.0001

_WING_ANCHORS = ("Top right wing", "Top left wing", "Bottom left wing", "Bottom right wing")

_LASER_X = 0.8
_LASER_Y = 0.95
_LASER_TOP_Z = -0.3
_LASER_BOTTOM_Z = -0.4
_LASERS = (
    ("Top right laser", "Top right wing", (_LASER_X, -_LASER_Y, _LASER_TOP_Z)),
    ("Top left laser", "Top left wing", (_LASER_X, _LASER_Y, _LASER_TOP_Z)),
    ("Bottom right laser", "Bottom right wing", (_LASER_X, -_LASER_Y, _LASER_BOTTOM_Z)),
    ("Bottom left laser", "Bottom left wing", (_LASER_X, _LASER_Y, _LASER_BOTTOM_Z)),
)

# Offset of every part mounted on a wing anchor (wing panels, guns, reactors).
_MOUNT_OFFSETS = {
    "Top right wing": (0.0, -0.042, 0.008),
    "Top left wing": (0.0, 0.042, 0.008),
    "Bottom left wing": (0.0, 0.042, -0.006),
    "Bottom right wing": (0.0, -0.042, -0.006),
}

_GUNS = (
    ("Top right gun", "Top right wing"),
    ("Top left gun", "Top left wing"),
    ("Bottom left gun", "Bottom left wing"),
    ("Bottom right gun", "Bottom right wing"),
)
_REACTORS = (
    ("Top right reactor", "Top right wing"),
    ("Top left reactor", "Top left wing"),
    ("Bottom left reactor", "Bottom left wing"),
    ("Bottom right reactor", "Bottom right wing"),
)

_REACTOR_LIGHT_X = -0.158
_REACTOR_LIGHT_Y = -0.028
_REACTOR_LIGHT_Z = 0.03
_REACTOR_LIGHTS = (
    ("Top right reactor", (_REACTOR_LIGHT_X, _REACTOR_LIGHT_Y, _REACTOR_LIGHT_Z)),
    ("Top left reactor", (_REACTOR_LIGHT_X, -_REACTOR_LIGHT_Y, _REACTOR_LIGHT_Z)),
    ("Bottom right reactor", (_REACTOR_LIGHT_X, _REACTOR_LIGHT_Y, -_REACTOR_LIGHT_Z)),
    ("Bottom left reactor", (_REACTOR_LIGHT_X, -_REACTOR_LIGHT_Y, -_REACTOR_LIGHT_Z)),
)

# Steering keys and the reactors they light up.
_REACTOR_KEYS = (
    (Key.Q, (0, 3)),
    (Key.E, (2, 1)),
    (Key.W, (2, 3)),
    (Key.S, (0, 1)),
    (Key.A, (0, 2)),
    (Key.D, (1, 3)),
)

_GUN_RECOIL_FREQUENCY = 15.0
_GUN_RECOIL_EXPONENT = 0.7
_GUN_RECOIL_AMPLITUDE = 0.05


class XWing(Ship):
    """The player's ship: boosting folds the wings, firing alternates between guns."""

    body_scaling = 0.04
    canons_name = ("Top right laser", "Bottom left laser", "Top left laser", "Bottom right laser")
    guns_name = ("Top right gun", "Bottom left gun", "Top left gun", "Bottom right gun")
    reactor_color = (0.2, 0.07, 0.0)

    def __init__(self, rng=None):
        super().__init__(rng)
        self.scaling_factor = 0.04
        self.deployed = False
        self.wing_min_angle = 0.0
        self.wing_max_angle = 0.22
        self.wing_angle = 0.0
        self.wing_speed = 0.3
        self.intensities = [0.0, 0.0, 0.0, 0.0]
        self.reactor_light_pos = [np.zeros(3) for _ in range(4)]
        self.coef_reactor = 1.0
        self.disp_reactor = 0.5
        self.guns_triggered = [False, False, False, False]
        self.guns_anim_time = [0.0, 0.0, 0.0, 0.0]

    def initialize(self, inputs: InputState, body_parts=(), wing_parts=(), gun_parts=()) -> None:
        """Attach inputs and build the body, wings, laser anchors, guns and reactors."""
        super().initialize(inputs)
        scaling = self.body_scaling
        bodies = list(body_parts)
        wings = list(wing_parts)
        guns = list(gun_parts)

        body_debris = []
        for k in range(len(bodies)):
            name = f"Body {k}"
            self.hierarchy.add(name, BASE).model.scaling = scaling
            body_debris.append(Debris(name=name, scaling=scaling))

        for anchor in _WING_ANCHORS:
            self.hierarchy.add(anchor, BASE).model.scaling = _ANCHOR_SCALING
        for name, parent, offset in _LASERS:
            self.hierarchy.add(name, parent, offset).model.scaling = _ANCHOR_SCALING

        top_debris = []
        bottom_debris = []
        for k in range(len(wings)):
            for anchor in _WING_ANCHORS:
                node = self.hierarchy.add(f"{anchor} {k}", anchor, _MOUNT_OFFSETS[anchor])
                node.model.scaling = scaling
            top_debris.append(Debris(name=f"Top right wing {k}", scaling=scaling))
            bottom_debris.append(Debris(name=f"Bottom left wing {k}", scaling=scaling))

        for gun, anchor in _GUNS:
            self.hierarchy.add(gun, anchor, _MOUNT_OFFSETS[anchor]).model.scaling = scaling
            for k in range(len(guns)):
                self.hierarchy.add(f"{gun} {k}", gun).model.scaling = scaling

        for reactor, anchor in _REACTORS:
            self.hierarchy.add(reactor, anchor, _MOUNT_OFFSETS[anchor]).model.scaling = scaling

        self.debris = body_debris + top_debris + bottom_debris
        self.guns_triggered = [False, False, False, False]
        self.guns_anim_time = [0.0, 0.0, 0.0, 0.0]

    def _update_wings(self, dt: float, boosting: bool) -> None:
        if boosting:
            self.speed = min(self.speed * self.speed_increase, self.speed_max)
            self.wing_angle = max(self.wing_angle - self.wing_speed * dt, self.wing_min_angle)
        else:
            self.speed = max(self.speed / self.speed_increase, self.speed_min)
            self.wing_angle = min(self.wing_angle + self.wing_speed * dt, self.wing_max_angle)
        tilts = (-self.wing_angle, self.wing_angle, -self.wing_angle, self.wing_angle)
        for anchor, angle in zip(_WING_ANCHORS, tilts):
            self.hierarchy[anchor].transform_local.rotation = Rotation.from_axis_angle(_X_AXIS, angle)

    def _update_reactors(self, dt: float, boosting: bool) -> None:
        gain = dt * self.coef_reactor
        if boosting:
            self.intensities = [min(2.0, value + 2 * gain) for value in self.intensities]
        else:
            ceiling = 1.0
            for key, reactors in _REACTOR_KEYS:
                if self._pressed(key):
                    for i in reactors:
                        self.intensities[i] = min(ceiling, self.intensities[i] + gain)

    def _animate_guns(self, dt: float) -> None:
        for i, gun in enumerate(self.guns_name):
            if not self.guns_triggered[i]:
                continue
            self.guns_anim_time[i] += dt
            phase = (_GUN_RECOIL_FREQUENCY * self.guns_anim_time[i]) ** _GUN_RECOIL_EXPONENT
            offset = math.sin(phase) * _GUN_RECOIL_AMPLITUDE
            translation = self.hierarchy[gun].transform_local.translation
            if offset < 0:
                translation[0] = 0.0
                self.guns_triggered[i] = False
            else:
                translation[0] = -offset

    def _update_reactor_lights(self) -> None:
        self.hierarchy.update_global()
        self.reactor_light_pos = [
            self.hierarchy[name].hierarchy_transform_model.apply(offset) for name, offset in _REACTOR_LIGHTS
        ]

    def idle_frame(self, damaging_pos, damaging_radius) -> None:
        """Fly one frame, then update wings, reactors, guns and lasers."""
        dt = self._require_inputs().time_interval
        super().idle_frame(damaging_pos, damaging_radius)
        boosting = self._pressed(Key.SPACE)
        if not self.destruction:
            self._update_wings(dt, boosting)
        self._update_reactors(dt, boosting)
        self._animate_guns(dt)
        self.intensities = [max(value - self.disp_reactor * dt, 0.0) for value in self.intensities]
        self._update_reactor_lights()
        self.laser_idle_frame()

    def laser_idle_frame(self) -> None:
        """Fire from the next gun while P is held, then move the lasers."""
        dt = self._require_inputs().time_interval
        if self._pressed(Key.P) and self.laser_dt >= self.laser_delay:
            upcoming = 0 if self.last_laser == self.n_lasers - 1 else self.last_laser + 1
            self.hierarchy.update_global()
            canon = self.canons_name[upcoming % 4]
            origin = self.hierarchy[canon].hierarchy_transform_model.translation
            i = self._emit_laser(origin)
            self.guns_triggered[i % 4] = True
            self.guns_anim_time[i % 4] = 0.0
        else:
            self.laser_dt += dt
        self._advance_lasers(dt)