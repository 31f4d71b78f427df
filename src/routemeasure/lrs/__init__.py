"""Measure <-> coordinate engine for linear referenced routes."""
from routemeasure.lrs.config import DEFAULT_M_VALUE_FIELD, RouteConfig
from routemeasure.lrs.errors import (
    ExternalQueryError,
    InvalidArgumentError,
    InvalidGeometryError,
    LinearReferencingError,
    MeasureNotFoundError,
    MeasureOutOfRangeError,
    NotFoundError,
)
from routemeasure.lrs.measures import (
    bracket,
    measure_to_point,
    measure_to_station,
    point_to_measure,
    station_attributes,
    station_to_measure,
)
from routemeasure.lrs.models import (
    Feature,
    LineSegment,
    MeasureBoundary,
    NearestPointResult,
    Polyline,
    RouteInfo,
    StationInfo,
    Vertex,
)
from routemeasure.lrs.projection import nearest_coordinate, nearest_vertex
from routemeasure.lrs.selection import nearest_feature
from routemeasure.lrs.trim import trim_to_range, trimmed_copy
from routemeasure.lrs.vertices import route_length_from_measure, vertex_at, vertex_count

__all__ = [
    'DEFAULT_M_VALUE_FIELD', 'RouteConfig',
    'ExternalQueryError', 'InvalidArgumentError', 'InvalidGeometryError',
    'LinearReferencingError', 'MeasureNotFoundError', 'MeasureOutOfRangeError', 'NotFoundError',
    'bracket', 'measure_to_point', 'measure_to_station', 'point_to_measure', 'station_attributes', 'station_to_measure',
    'Feature', 'LineSegment', 'MeasureBoundary', 'NearestPointResult', 'Polyline', 'RouteInfo',
    'StationInfo', 'Vertex',
    'nearest_coordinate', 'nearest_vertex', 'nearest_feature',
    'trim_to_range', 'trimmed_copy',
    'route_length_from_measure', 'vertex_at', 'vertex_count',
]
