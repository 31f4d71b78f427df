"""
projection.py

Projection of a point onto a multipart polyline.

`nearest_coordinate` projects onto every segment of every path (clamped to
the segment ends) and keeps the closest projection. `nearest_vertex` only
considers the vertices themselves. Both report the global index of the
vertex the result is attached to: the start vertex of the winning segment
for `nearest_coordinate`, the vertex itself for `nearest_vertex`.

Public functions:
- `nearest_coordinate(polyline, point)` -> NearestPointResult
- `nearest_vertex(polyline, point)` -> NearestPointResult
"""
from typing import Any, Optional, Tuple
import logging
import math
import numpy as np

from routemeasure.lrs.models import NearestPointResult, Polyline, Vertex
from routemeasure.lrs.utils import as_xy, polyline_xy, safe_build_kdtree
from routemeasure.lrs.vertices import path_index_for_vertex, vertex_at

logger = logging.getLogger(__name__)


def _segment_arrays(polyline: Polyline):
    """Flatten all segments into parallel arrays.

    A path holding a single vertex contributes one zero-length segment so
    that the vertex can still be found.
    """
    x0, y0, x1, y1, m0, m1, z0, start = [], [], [], [], [], [], [], []
    offset = 0
    for path in polyline.paths:
        n = len(path)
        if n == 1:
            pairs = [(0, 0)]
        else:
            pairs = [(k, k + 1) for k in range(n - 1)]
        for a, b in pairs:
            va, vb = path[a], path[b]
            x0.append(va.x)
            y0.append(va.y)
            x1.append(vb.x)
            y1.append(vb.y)
            m0.append(np.nan if va.m is None else va.m)
            m1.append(np.nan if vb.m is None else vb.m)
            z0.append(va.z)
            start.append(offset + a)
        offset += n
    as_f = lambda v: np.asarray(v, dtype=float)
    return as_f(x0), as_f(y0), as_f(x1), as_f(y1), as_f(m0), as_f(m1), z0, np.asarray(start, dtype=int)


def _is_right_of(px: float, py: float, ax: float, ay: float, bx: float, by: float) -> bool:
    # negative cross product of (b - a) x (p - a) => p lies to the right
    return (bx - ax) * (py - ay) - (by - ay) * (px - ax) < 0.0


def nearest_coordinate(polyline: Polyline, point: Any) -> NearestPointResult:
    """Closest point on ``polyline`` to ``point``.

    The returned coordinate carries an interpolated measure and the start
    vertex's elevation. Ties go to the segment with the lowest index.
    """
    if polyline is None or polyline.vertex_count == 0:
        return NearestPointResult.empty()
    px, py = as_xy(point)
    x0, y0, x1, y1, m0, m1, z0, start = _segment_arrays(polyline)

    vx = x1 - x0
    vy = y1 - y0
    denom = vx * vx + vy * vy
    denom_safe = np.where(denom == 0, 1.0, denom)
    t = np.where(denom == 0, 0.0, ((px - x0) * vx + (py - y0) * vy) / denom_safe)
    t = np.clip(t, 0.0, 1.0)
    # snap exactly onto the end vertex so callers can compare coordinates
    cx = np.where(t == 1.0, x1, x0 + t * vx)
    cy = np.where(t == 1.0, y1, y0 + t * vy)
    cm = np.where(t == 1.0, m1, m0 + t * (m1 - m0))
    d = np.hypot(px - cx, py - cy)
    k = int(np.argmin(d))

    m = float(cm[k])
    coordinate = Vertex(
        x=float(cx[k]),
        y=float(cy[k]),
        m=None if math.isnan(m) else m,
        z=z0[k],
    )
    return NearestPointResult(
        coordinate=coordinate,
        distance=float(d[k]),
        is_right_side=_is_right_of(px, py, x0[k], y0[k], x1[k], y1[k]),
        vertex_index=int(start[k]),
    )


def _nearest_index(xy: np.ndarray, px: float, py: float) -> Tuple[int, float]:
    """Index and distance of the vertex closest to (px, py); lowest index on ties."""
    tree = safe_build_kdtree(xy, name='route_vertex_tree')
    if tree is not None:
        dist, idx = tree.query([px, py])
        # the tree returns any one of several equidistant vertices
        candidates = tree.query_ball_point([px, py], r=float(dist))
        if candidates:
            cand = np.asarray(sorted(candidates), dtype=int)
            cd = np.hypot(xy[cand, 0] - px, xy[cand, 1] - py)
            j = int(np.argmin(cd))
            if cd[j] <= dist:
                return int(cand[j]), float(cd[j])
        return int(idx), float(dist)
    d = np.hypot(xy[:, 0] - px, xy[:, 1] - py)
    k = int(np.argmin(d))
    return k, float(d[k])


def _side_of_vertex(polyline: Polyline, index: int, px: float, py: float) -> bool:
    path_index, local = path_index_for_vertex(polyline, index)
    path = polyline.paths[path_index]
    a: Optional[Vertex] = None
    b: Optional[Vertex] = None
    if local + 1 < len(path):
        a, b = path[local], path[local + 1]
    elif local > 0:
        a, b = path[local - 1], path[local]
    if a is None:
        return False
    return _is_right_of(px, py, a.x, a.y, b.x, b.y)


def nearest_vertex(polyline: Polyline, point: Any) -> NearestPointResult:
    """Closest actual vertex of ``polyline`` to ``point`` (no interpolation)."""
    if polyline is None or polyline.vertex_count == 0:
        return NearestPointResult.empty()
    px, py = as_xy(point)
    xy = polyline_xy(polyline)
    index, distance = _nearest_index(xy, px, py)
    return NearestPointResult(
        coordinate=vertex_at(polyline, index),
        distance=distance,
        is_right_side=_side_of_vertex(polyline, index, px, py),
        vertex_index=index,
    )
