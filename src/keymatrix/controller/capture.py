"""
Line Capture
============
Finds the keys a drawn segment passes through.

A key is captured when its center projects inside the segment
(0 <= t <= 1) and lies within `sensitivity` of the line. Keys whose center
falls beyond an endpoint are never captured, however close a wide key's
outline comes to the line.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from keymatrix.config import DEFAULT_SENSITIVITY, GEOMETRY_EPS
from keymatrix.model.geometry_primitives import Point
from keymatrix.model.geometry_utils import project_onto_segment
from keymatrix.model.key import Key

logger = logging.getLogger(__name__)


class LineCaptureEngine:
    """Stateless point-to-segment capture with a perpendicular tolerance."""

    def __init__(self, sensitivity: float = DEFAULT_SENSITIVITY) -> None:
        self.sensitivity = sensitivity

    def capture(
        self,
        p0: Point,
        p1: Point,
        candidates: Iterable[Key],
        clicked: tuple[Optional[Key], Optional[Key]] = (None, None),
        *,
        sensitivity: Optional[float] = None
    ) -> list[Key]:
        """
        Keys along p0 -> p1, in draw order.

        Args:
            p0: Segment start in layout units.
            p1: Segment end in layout units.
            candidates: Keys eligible for capture.
            clicked: The keys clicked at the start and end of the gesture.
                They are always part of the result, first and last.
            sensitivity: Overrides the engine tolerance for this call.

        Returns:
            Captured keys ordered by their projection on the segment.
        """
        tolerance = self.sensitivity if sensitivity is None else sensitivity
        first, last = clicked
        if last is first:
            last = None
        pinned = {id(k) for k in (first, last) if k is not None}

        pool = [k for k in candidates if k.is_physical and id(k) not in pinned]
        middle: list[Key] = []

        if pool and p0.distance_to(p1) > GEOMETRY_EPS:
            centers = np.array([[c.x, c.y] for c in (k.center() for k in pool)])
            t, d = project_onto_segment(centers, p0, p1)
            mask = (t >= 0.0) & (t <= 1.0) & (d <= tolerance)
            kept = np.flatnonzero(mask)
            order = kept[np.argsort(t[kept], kind="stable")]
            middle = [pool[i] for i in order]

        result = ([first] if first is not None else []) + middle + ([last] if last is not None else [])
        logger.debug(f"Captured {len(result)} keys between ({p0.x:.2f}, {p0.y:.2f}) and ({p1.x:.2f}, {p1.y:.2f}).")
        return result
