"""
Key Geometry (Data Model)
=========================
Defines the key record consumed from the layout editor.

Why is this file needed?
------------------------
1. Geometry: Line capture, hit testing and automatic annotation all need the
   center and outline of a key in layout units, with rotation applied.
2. Labels: The twelve label slots are where matrix coordinates are persisted.

Classes:
    Key: A single key of the layout.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from keymatrix.config import LABEL_SLOT_COUNT
from keymatrix.model.geometry_primitives import Point
from keymatrix.model.geometry_utils import rotate_point


def empty_labels() -> list[str]:
    return [""] * LABEL_SLOT_COUNT


@dataclass(eq=False)
class Key:
    """A key of the layout. Positions and sizes are in layout units."""
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0
    rotation_angle: float = 0.0
    rotation_x: Optional[float] = None
    rotation_y: Optional[float] = None
    labels: list[str] = field(default_factory=empty_labels)
    ghost: bool = False
    decal: bool = False
    id: Optional[int] = None  # Assigned by the store when missing

    def __post_init__(self) -> None:
        # Pad short label arrays so slot 8 is always addressable
        if len(self.labels) < LABEL_SLOT_COUNT:
            self.labels = list(self.labels) + [""] * (LABEL_SLOT_COUNT - len(self.labels))

    @property
    def is_physical(self) -> bool:
        """Ghost and decal keys carry no switch."""
        return not (self.ghost or self.decal)

    @property
    def is_rotated(self) -> bool:
        return bool(self.rotation_angle)

    def unrotated_center(self) -> Point:
        return Point(self.x + (self.width or 1.0) / 2, self.y + (self.height or 1.0) / 2)

    def rotation_origin(self) -> Point:
        center = self.unrotated_center()
        return Point(
            self.rotation_x if self.rotation_x is not None else center.x,
            self.rotation_y if self.rotation_y is not None else center.y,
        )

    def center(self) -> Point:
        """Visual center, with rotation applied."""
        center = self.unrotated_center()
        if not self.is_rotated:
            return center
        return rotate_point(center, self.rotation_origin(), self.rotation_angle)

    def contains(self, point: Point) -> bool:
        """True if `point` lies inside the (rotated) key rectangle."""
        if self.is_rotated:
            # Undo the rotation and test against the axis-aligned rectangle
            point = rotate_point(point, self.rotation_origin(), -self.rotation_angle)
        w = self.width or 1.0
        h = self.height or 1.0
        return self.x <= point.x <= self.x + w and self.y <= point.y <= self.y + h

    def __repr__(self) -> str:
        return f"Key(id={self.id}, x={self.x}, y={self.y}, w={self.width}, h={self.height})"
