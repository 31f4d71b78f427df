"""
measures.py

Conversions between measures and coordinates along a route polyline.

Measure values may increase or decrease with vertex order. Bracketing
detects the direction from the first vertex and walks the vertices
accordingly, always returning a segment whose ``start.m <= end.m``.

Public functions:
- `bracket(target_measure, polyline)` -> LineSegment
- `measure_to_point(measure, segment)` -> Vertex
- `point_to_measure(point, polyline)` -> float
- `adjacent_segment(polyline, vertex_index)` -> LineSegment
- `station_to_measure(station, feature, config)` -> StationInfo
- `measure_to_station(measure, feature, config)` -> float
- `station_attributes(feature, config)` -> (begin, end)
- `clamp(value, low, high)` -> float
"""
import logging
from typing import Any, List, Tuple

from routemeasure.lrs import projection
from routemeasure.lrs.config import RouteConfig
from routemeasure.lrs.errors import (
    InvalidArgumentError,
    InvalidGeometryError,
    MeasureNotFoundError,
    MeasureOutOfRangeError,
)
from routemeasure.lrs.models import Feature, LineSegment, Polyline, StationInfo, Vertex
from routemeasure.lrs.vertices import measure_range, route_length_from_measure, vertex_at

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def _measured_vertices(polyline: Polyline) -> List[Vertex]:
    vertices = list(polyline.iter_vertices())
    if not vertices:
        raise InvalidGeometryError('Polyline has no vertices.')
    if any(v.m is None for v in vertices):
        raise InvalidGeometryError('Polyline does not contain M values.')
    return vertices


def bracket(target_measure: float, polyline: Polyline) -> LineSegment:
    """Find the two consecutive vertices whose measures surround ``target_measure``.

    If the first vertex already exceeds the target, or equals it while the
    measures fall towards the last vertex, the polyline is assumed to run in
    decreasing measure order and is walked from its last vertex. Raises
    MeasureNotFoundError when both ends exceed the target. When the walk
    finds nothing (target beyond the far end) the final pair of the walk is
    returned, ordered so that ``start.m <= end.m``.
    """
    vertices = _measured_vertices(polyline)
    n = len(vertices)
    last = vertices[0]
    reversed_measures = False

    if last.m > target_measure or (last.m == target_measure and vertices[n - 1].m < last.m):
        last = vertices[n - 1]
        if last.m > target_measure:
            raise MeasureNotFoundError(
                f'Measure value {target_measure} not found in the supplied polyline.')
        reversed_measures = True

    if reversed_measures:
        for i in range(n - 2, -1, -1):
            current = vertices[i]
            if current.m >= target_measure:
                return LineSegment(start=last, end=current)
            last = current
        start, end = vertices[n - 1], vertices[max(n - 2, 0)]
    else:
        for i in range(1, n):
            current = vertices[i]
            if current.m >= target_measure:
                return LineSegment(start=last, end=current)
            last = current
        start, end = vertices[max(n - 2, 0)], vertices[n - 1]

    if start.m > end.m:
        start, end = end, start
    segment = LineSegment(start=start, end=end)
    logger.warning('bracket: measure %s not reached (reversed=%s); using final segment %s..%s',
                   target_measure, reversed_measures, segment.start.m, segment.end.m)
    return segment


def measure_to_point(measure: float, segment: LineSegment) -> Vertex:
    """Coordinate at ``measure`` along ``segment``.

    Elevation always comes from the start vertex, including when the
    measure falls exactly on the end vertex.
    """
    start, end = segment.start, segment.end
    if measure < start.m or measure > end.m:
        raise MeasureOutOfRangeError(
            f'Measure value {measure} not contained in the segment [{start.m}, {end.m}].')

    if start.m == measure:
        return Vertex(x=start.x, y=start.y, m=measure, z=start.z)
    if end.m == measure:
        return Vertex(x=end.x, y=end.y, m=measure, z=start.z)

    ratio = (measure - start.m) / (end.m - start.m)
    x = (end.x - start.x) * ratio + start.x
    y = (end.y - start.y) * ratio + start.y
    return Vertex(x=x, y=y, m=measure, z=start.z)


def adjacent_segment(polyline: Polyline, vertex_index: int) -> LineSegment:
    """Segment from ``vertex_index`` to the vertex after it.

    Projection results always name the start vertex of a segment, so
    ``vertex_index + 1`` exists for any index produced by the projector.
    """
    return LineSegment(
        start=vertex_at(polyline, vertex_index),
        end=vertex_at(polyline, vertex_index + 1),
    )


def point_to_measure(point: Any, polyline: Polyline) -> float:
    """Measure of the location on ``polyline`` nearest to ``point``."""
    nearest = projection.nearest_coordinate(polyline, point)
    if nearest.is_empty:
        raise InvalidGeometryError('Cannot compute a measure on an empty geometry.')

    on_vertex = projection.nearest_vertex(polyline, nearest.coordinate)
    if (on_vertex.coordinate.x == nearest.coordinate.x
            and on_vertex.coordinate.y == nearest.coordinate.y):
        if on_vertex.coordinate.m is None:
            raise InvalidGeometryError('Polyline does not contain M values.')
        return on_vertex.coordinate.m

    segment = adjacent_segment(polyline, nearest.vertex_index)
    start, end = segment.start, segment.end
    if start.m is None or end.m is None:
        raise InvalidGeometryError('Polyline does not contain M values.')

    # Same ratio measure_to_point uses, so the two functions invert each other.
    # x is as good as y geometrically; y only when the segment is vertical.
    if end.x != start.x:
        ratio = (nearest.coordinate.x - start.x) / (end.x - start.x)
    elif end.y != start.y:
        ratio = (nearest.coordinate.y - start.y) / (end.y - start.y)
    else:
        return start.m
    return (end.m - start.m) * ratio + start.m


def station_attributes(feature: Feature, config: RouteConfig) -> Tuple[float, float]:
    """Begin and end station of ``feature`` as stored, in attribute order."""
    begin_field = config.segments_begin_station_field
    end_field = config.segments_end_station_field
    begin = feature.attributes.get(begin_field)
    end = feature.attributes.get(end_field)
    if begin is None or end is None:
        raise InvalidArgumentError(
            f'Feature is missing station attributes {begin_field!r}/{end_field!r}')
    try:
        return float(begin), float(end)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f'Station attributes {begin_field!r}/{end_field!r} are not numeric: {begin!r}, {end!r}') from e


def _station_bounds(feature: Feature, config: RouteConfig) -> Tuple[float, float]:
    begin, end = station_attributes(feature, config)
    return min(begin, end), max(begin, end)


def station_to_measure(station: float, feature: Feature, config: RouteConfig) -> StationInfo:
    """Resolve a station value to a measure and coordinate on ``feature``.

    Without attribute-based stationing the station is the measure. With it,
    the station's position between the feature's begin/end station
    attributes is mapped proportionally onto the feature's measure span.
    """
    geometry = feature.geometry
    if geometry is None:
        raise InvalidGeometryError('Feature has no geometry.')

    if not config.calculate_station_using_attributes:
        target = station
    else:
        low, high = _station_bounds(feature, config)
        span = abs(high - low)
        percent = (station - low) / span if span else 0.0
        target = route_length_from_measure(geometry) * percent + measure_range(geometry)[0]

    segment = bracket(target, geometry)
    target = clamp(target, segment.min_m, segment.max_m)
    point = measure_to_point(target, segment)
    return StationInfo(measure=target, point=point, station=station)


def measure_to_station(measure: float, feature: Feature, config: RouteConfig) -> float:
    """Inverse of the proportional mapping used by `station_to_measure`."""
    if not config.calculate_station_using_attributes:
        return measure
    if feature.geometry is None:
        raise InvalidGeometryError('Feature has no geometry.')
    low, high = _station_bounds(feature, config)
    length = route_length_from_measure(feature.geometry)
    start_measure = measure_range(feature.geometry)[0]
    percent = (measure - start_measure) / length if length else 0.0
    return low + percent * (high - low)
