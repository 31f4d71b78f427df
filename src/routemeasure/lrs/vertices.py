"""
vertices.py

Global vertex addressing across the paths of a multipart polyline.

A global vertex index counts vertices across all paths in order, so index
``len(paths[0])`` is the first vertex of the second path. These helpers map
between that index and ``(path_index, local_index)``.

Public functions:
- `path_index_for_vertex(polyline, index)` -> (path_index, local_index)
- `vertex_at(polyline, index)` -> Vertex
- `vertex_count(polyline)` -> int
- `first_vertex(polyline)`, `last_vertex(polyline)` -> Vertex
- `route_length_from_measure(polyline)` -> float
- `measure_range(polyline)` -> (min, max)
"""
import logging
from typing import Tuple

from routemeasure.lrs.errors import InvalidGeometryError
from routemeasure.lrs.models import Polyline, Vertex

logger = logging.getLogger(__name__)


def path_index_for_vertex(polyline: Polyline, vertex_index: int) -> Tuple[int, int]:
    """Return ``(path_index, local_index)`` for a global vertex index.

    An index not covered by any path falls back to ``(0, vertex_index)``.
    That fallback exists for compatibility with older callers and does not
    validate anything; out-of-range input surfaces as an IndexError when the
    vertex is read.
    """
    cumulative = 0
    for i, path in enumerate(polyline.paths):
        cumulative += len(path)
        if cumulative > vertex_index:
            return i, vertex_index - cumulative + len(path)

    logger.debug('vertex index %d not covered by %d paths; using path 0',
                 vertex_index, len(polyline.paths))
    return 0, vertex_index


def vertex_at(polyline: Polyline, vertex_index: int) -> Vertex:
    if len(polyline.paths) < 1:
        raise InvalidGeometryError('Multipart polylines require at least 1 part.')
    path_index, local_index = path_index_for_vertex(polyline, vertex_index)
    return polyline.paths[path_index][local_index]


def vertex_count(polyline: Polyline) -> int:
    return polyline.vertex_count


def first_vertex(polyline: Polyline) -> Vertex:
    if vertex_count(polyline) == 0:
        raise InvalidGeometryError('Polyline has no vertices.')
    return vertex_at(polyline, 0)


def last_vertex(polyline: Polyline) -> Vertex:
    n = vertex_count(polyline)
    if n == 0:
        raise InvalidGeometryError('Polyline has no vertices.')
    return vertex_at(polyline, n - 1)


def route_length_from_measure(polyline: Polyline) -> float:
    """Length of the route in measure units: |m(last) - m(first)|."""
    start = first_vertex(polyline)
    end = last_vertex(polyline)
    if not start.has_m or not end.has_m:
        raise InvalidGeometryError('route_length_from_measure: polyline does not contain M values')
    return abs(end.m - start.m)


def measure_range(polyline: Polyline) -> Tuple[float, float]:
    """Smallest and largest endpoint measure of the polyline."""
    start = first_vertex(polyline)
    end = last_vertex(polyline)
    if not start.has_m or not end.has_m:
        raise InvalidGeometryError('measure_range: polyline does not contain M values')
    return min(start.m, end.m), max(start.m, end.m)
