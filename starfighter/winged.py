"""Computer-controlled ships with four wings in an X layout."""

from __future__ import annotations

from starfighter.ai_ship import AIShip
from starfighter.inputs import InputState
from starfighter.passive_ship import PassiveShip
from starfighter.ship import BASE, Debris, Ship
from starfighter.transform import Hierarchy, Rotation

WING_SCALING = 0.04
WING_ANGLE = 0.22
_ANCHOR_SCALING = 0.0001
_X_AXIS = (1.0, 0.0, 0.0)

_LASER_X = 1.2
_LASER_Y = 0.95
_LASER_TOP_Z = -0.3
_LASER_BOTTOM_Z = -0.4

_WING_ANCHORS = ("Top right wing", "Top left wing", "Bottom left wing", "Bottom right wing")
_LASERS = (
    ("Top right laser", "Top right wing", (_LASER_X, -_LASER_Y, _LASER_TOP_Z)),
    ("Top left laser", "Top left wing", (_LASER_X, _LASER_Y, _LASER_TOP_Z)),
    ("Bottom right laser", "Bottom right wing", (_LASER_X, -_LASER_Y, _LASER_BOTTOM_Z)),
    ("Bottom left laser", "Bottom left wing", (_LASER_X, _LASER_Y, _LASER_BOTTOM_Z)),
)
_WING_OFFSETS = (
    ("Top right wing", (0.0, -0.042, 0.008)),
    ("Top left wing", (0.0, 0.042, 0.008)),
    ("Bottom left wing", (0.0, 0.04, -0.006)),
    ("Bottom right wing", (0.0, -0.04, -0.006)),
)
_WING_TILTS = (
    ("Top right wing", -WING_ANGLE),
    ("Top left wing", WING_ANGLE),
    ("Bottom left wing", -WING_ANGLE),
    ("Bottom right wing", WING_ANGLE),
)


def build_wing_hierarchy(hierarchy: Hierarchy, body_parts, wing_parts) -> list[Debris]:
    """Add body, wing and laser nodes under the base node; return the debris pieces.

    There is one debris piece per body part, then one per wing part for the
    top right wings and one per wing part for the bottom left wings.
    """
    bodies = list(body_parts)
    wings = list(wing_parts)

    body_debris = []
    for k in range(len(bodies)):
        name = f"Body {k}"
        hierarchy.add(name, BASE).model.scaling = WING_SCALING
        body_debris.append(Debris(name=name, scaling=WING_SCALING))

    for anchor in _WING_ANCHORS:
        hierarchy.add(anchor, BASE).model.scaling = _ANCHOR_SCALING
    for name, parent, offset in _LASERS:
        hierarchy.add(name, parent, offset).model.scaling = _ANCHOR_SCALING

    top_debris = []
    bottom_debris = []
    for k in range(len(wings)):
        for anchor, offset in _WING_OFFSETS:
            name = f"{anchor} {k}"
            hierarchy.add(name, anchor, offset).model.scaling = WING_SCALING
        top_debris.append(Debris(name=f"Top right wing {k}", scaling=WING_SCALING))
        bottom_debris.append(Debris(name=f"Bottom left wing {k}", scaling=WING_SCALING))

    for anchor, angle in _WING_TILTS:
        hierarchy[anchor].transform_local.rotation = Rotation.from_axis_angle(_X_AXIS, angle)

    return body_debris + top_debris + bottom_debris


class XWingAIShip(AIShip):
    """A chasing ship with open X wings."""

    def initialize(self, inputs: InputState, body_parts=(), wing_parts=()) -> None:
        Ship.initialize(self, inputs)
        self.debris = build_wing_hierarchy(self.hierarchy, body_parts, wing_parts)


class XWingPassiveShip(PassiveShip):
    """A wandering ship with open X wings."""

    def initialize(self, inputs: InputState, body_parts=(), wing_parts=()) -> None:
        Ship.initialize(self, inputs)
        self.debris = build_wing_hierarchy(self.hierarchy, body_parts, wing_parts)