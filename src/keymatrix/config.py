"""
Configuration & Global Constants
================================
This module serves as the central registry for the tunables of the
annotation engine.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (tolerances, label slot indices)
   scattered throughout the code.
2. Consistency: Line capture and automatic annotation must share the same
   tolerance, so both read it from here.

Exports:
    DEFAULT_SENSITIVITY (float): Perpendicular capture tolerance in layout units.
    LINE_HIT_TOLERANCE (float): Distance at which the pointer is "on" a connecting line.
    KEY_NODE_RADIUS (float): Radius around a key center that always counts as the key.
    MATRIX_LABEL_SLOT (int): Label slot holding "row,col".
    OPTION_LABEL_SLOT (int): Label slot holding "option,choice".
    LABEL_SLOT_COUNT (int): Number of label slots on a key.
    AnnotationSettings: Per-controller settings container.
"""
from __future__ import annotations

from dataclasses import dataclass

# Global Constants
DEFAULT_SENSITIVITY: float = 0.3
MIN_SENSITIVITY: float = 0.0
MAX_SENSITIVITY: float = 1.0
LINE_HIT_TOLERANCE: float = 0.2
# Radius of the node drawn at each key center on the annotation overlay
KEY_NODE_RADIUS: float = 0.25

MATRIX_LABEL_SLOT: int = 0
OPTION_LABEL_SLOT: int = 8
LABEL_SLOT_COUNT: int = 12

# Degenerate segment / equal rotation threshold
GEOMETRY_EPS: float = 1e-6


def clamp_sensitivity(value: float) -> float:
    """Clamp a sensitivity value into [MIN_SENSITIVITY, MAX_SENSITIVITY]."""
    return max(MIN_SENSITIVITY, min(MAX_SENSITIVITY, float(value)))


@dataclass
class AnnotationSettings:
    """Tunables of one annotation controller."""
    sensitivity: float = DEFAULT_SENSITIVITY
    line_hit_tolerance: float = LINE_HIT_TOLERANCE
    key_node_radius: float = KEY_NODE_RADIUS
    # Rotation handling for automatic annotation (unrotated centers by default)
    auto_use_rotated_centers: bool = False

    def __post_init__(self) -> None:
        self.sensitivity = clamp_sensitivity(self.sensitivity)
        if self.line_hit_tolerance < 0:
            raise ValueError(f"line_hit_tolerance must be non-negative, got {self.line_hit_tolerance}")
