"""
utils.py

Small helpers shared by the engine and the query layer.

The public helpers:
- `safe_log_exception(msg, exc, **ctx)` : log a failed lookup with its context, never raises
- `safe_build_kdtree(xy, name='route_vertex_tree')` : cKDTree over route vertices, or None
- `as_xy(point)` : (x, y) floats from a Vertex, tuple or shapely Point
- `polyline_xy(polyline)` : (N, 2) array of all vertex coordinates
- `to_shapely(polyline)` : shapely MultiLineString (x, y[, z])
"""

from typing import Any, Optional, Tuple
import sys
import logging
import numpy as np
from scipy.spatial import cKDTree
from shapely.geometry import MultiLineString

from routemeasure.lrs.errors import InvalidArgumentError
from routemeasure.lrs.models import Polyline

logger = logging.getLogger(__name__)


def safe_log_exception(msg: str, exc: Exception, **ctx: Any) -> None:
    """Log ``exc`` with the route/service context it happened in.

    Context keys are written sorted, e.g. ``map_service=... route_id=...``.
    If the logging call itself fails the message goes to ``sys.stderr``.
    """
    context = ' '.join(f'{k}={ctx[k]!r}' for k in sorted(ctx))
    try:
        if context:
            logger.exception('%s: %s [%s]', msg, exc, context)
        else:
            logger.exception('%s: %s', msg, exc)
    except Exception:
        try:
            sys.stderr.write(f'routemeasure: logging failed for "{msg}": {exc} {context}\n')
        except OSError:
            pass


def safe_build_kdtree(xy: Any, name: str = 'route_vertex_tree') -> Optional[cKDTree]:
    """Build a `scipy.spatial.cKDTree` over an (N, 2) array of vertex coordinates.

    Returns ``None`` when there is nothing to index or the coordinates are
    not an (N, 2) numeric array; callers then search by brute force.
    """
    if xy is None:
        logger.debug('%s: no coordinates, not building tree', name)
        return None
    try:
        pts = np.asarray(xy, dtype=float)
    except (TypeError, ValueError):
        logger.exception('%s: coordinates are not numeric', name)
        return None
    if pts.size == 0:
        logger.debug('%s: no vertices, not building tree', name)
        return None
    if pts.ndim != 2 or pts.shape[1] != 2:
        logger.warning('%s: expected (N, 2) coordinates, got shape %s', name, pts.shape)
        return None
    logger.debug('%s: indexing %d vertices', name, len(pts))
    return cKDTree(pts)


def as_xy(point: Any) -> Tuple[float, float]:
    """Return ``(x, y)`` for a Vertex, shapely Point or 2+ element sequence."""
    if hasattr(point, 'x') and hasattr(point, 'y'):
        return float(point.x), float(point.y)
    try:
        return float(point[0]), float(point[1])
    except (TypeError, IndexError, ValueError) as e:
        raise InvalidArgumentError(f'Cannot interpret {point!r} as a point') from e


def polyline_xy(polyline: Polyline) -> np.ndarray:
    """All vertex coordinates of ``polyline`` in global index order, shape (N, 2)."""
    coords = [(v.x, v.y) for v in polyline.iter_vertices()]
    if not coords:
        return np.empty((0, 2), dtype=float)
    return np.asarray(coords, dtype=float)


def to_shapely(polyline: Polyline) -> MultiLineString:
    """Convert to a shapely MultiLineString.

    Measures are dropped (shapely carries x, y and z only). Paths with fewer
    than two vertices cannot form a LineString and are skipped.
    """
    lines = []
    for path in polyline.paths:
        if len(path) < 2:
            continue
        if polyline.has_z and all(v.has_z for v in path):
            lines.append([(v.x, v.y, v.z) for v in path])
        else:
            lines.append([(v.x, v.y) for v in path])
    return MultiLineString(lines)
