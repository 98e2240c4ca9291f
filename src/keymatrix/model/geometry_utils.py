from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from math import pi
import numpy as np

if TYPE_CHECKING:
    from numpy import typing as npt

from keymatrix.config import GEOMETRY_EPS
from keymatrix.model.geometry_primitives import Point, Segment


def deg2rad(degrees: float) -> float:
    return degrees * pi / 180


def rotate_point(point: Point, origin: Point, angle_deg: float) -> Point:
    """Rotate `point` around `origin` by `angle_deg` degrees."""
    if not angle_deg:
        return point
    return origin + (point - origin).rotate(deg2rad(angle_deg))


def project_onto_segment(
    points: npt.ArrayLike,
    p0: Point,
    p1: Point,
    *,
    eps: float = GEOMETRY_EPS
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Project points onto the line through p0 -> p1.

    The line is given in parametric form: P(t) = p0 + t * (p1 - p0).

    Args:
        points: Array of shape (n, 2) with the (x, y) coordinates to project.
        p0: Start of the segment.
        p1: End of the segment.
        eps: Length below which the segment is treated as the single point p0.

    Returns:
        Tuple (t, d) of arrays of shape (n,): the scalar projection parameter
        of each point (0 at p0, 1 at p1) and its perpendicular distance to the
        infinite line.

    Notes:
        - For a degenerate segment, t is 0 for every point and d is the
          distance to p0.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    origin = p0.to_array()
    direction = p1.to_array() - origin
    rel = pts - origin
    length_sq = float(direction @ direction)

    # degenerate direction: treat as point
    if length_sq < eps * eps:
        return np.zeros(len(pts)), np.hypot(rel[:, 0], rel[:, 1])

    t = rel @ direction / length_sq
    cross = direction[0] * rel[:, 1] - direction[1] * rel[:, 0]
    d = np.abs(cross) / np.sqrt(length_sq)
    return t, d


def point_segment_distance(point: Point, segment: Segment, *, eps: float = GEOMETRY_EPS) -> float:
    """Euclidean distance from a point to the closest point of a finite segment."""
    t, _ = project_onto_segment([[point.x, point.y]], segment.start, segment.end, eps=eps)
    t_clamped = min(1.0, max(0.0, float(t[0])))
    v = segment.to_vector()
    closest = segment.start + v * t_clamped
    return point.distance_to(closest)


def cluster_1d(values: Sequence[float], tolerance: float) -> list[int]:
    """
    Group scalar values into clusters ordered by increasing value.

    Values are visited in ascending order (stable for ties); a value joins the
    current cluster if it lies within `tolerance` of the cluster's running
    mean, otherwise it opens a new cluster.

    Args:
        values: Scalars to cluster, in input order.
        tolerance: Maximum distance to the running mean of the open cluster.

    Returns:
        The cluster index of each input value, clusters numbered 0..k-1 from
        the smallest value upwards.
    """
    arr = np.asarray(values, dtype=np.float64)
    labels = np.empty(len(arr), dtype=int)
    if len(arr) == 0:
        return []

    order = np.argsort(arr, kind="stable")
    cluster = 0
    total = arr[order[0]]
    count = 1
    labels[order[0]] = cluster

    for idx in order[1:]:
        value = arr[idx]
        mean = total / count
        if abs(value - mean) <= tolerance:
            total += value
            count += 1
        else:
            cluster += 1
            total = value
            count = 1
        labels[idx] = cluster

    return labels.tolist()
