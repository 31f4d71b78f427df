"""
workflows.py

Route-level operations combining the segment query with the measure engine.

- `calculate_m_values_from_coordinates` : measure of each point on a route
- `locate_measures` : synchronous core of the above, on already fetched segments
- `get_current_route_geometry` : geometry of a route, optionally trimmed to a range
- `route_measure_boundary` : lowest/highest measure over a set of features
- `build_route_info` : RouteInfo from the attributes of a route's segments
- `route_length` : planar length of a route polyline
"""
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from routemeasure.io.segment_query import get_segments_for_route
from routemeasure.lrs.config import DEFAULT_M_VALUE_FIELD, RouteConfig
from routemeasure.lrs.errors import NotFoundError
from routemeasure.lrs.measures import point_to_measure
from routemeasure.lrs.models import Feature, MeasureBoundary, Polyline, RouteInfo
from routemeasure.lrs.selection import nearest_feature
from routemeasure.lrs.trim import trim_to_range
from routemeasure.lrs.utils import as_xy, to_shapely
from routemeasure.lrs.vertices import first_vertex, last_vertex

logger = logging.getLogger(__name__)


def locate_measures(segments: Sequence[Feature], points: Iterable[Any]) -> List[float]:
    """Measure of each point on whichever segment passes nearest to it."""
    measures = []
    for point in points:
        segment = nearest_feature(segments, point)
        measures.append(point_to_measure(point, segment.geometry))
    return measures


def _points_frame(points: Any, x_field: str, y_field: str) -> pd.DataFrame:
    if isinstance(points, pd.DataFrame):
        return points.copy()
    return pd.DataFrame([as_xy(p) for p in points], columns=[x_field, y_field])


async def calculate_m_values_from_coordinates(config: RouteConfig, route_id: Union[str, int], points: Any,
                                              spatial_reference=None, x_field: str = 'x', y_field: str = 'y',
                                              m_value_field: str = DEFAULT_M_VALUE_FIELD,
                                              session=None) -> pd.DataFrame:
    """Add the route measure of every point as column ``m_value_field``.

    Parameters
    - config, route_id: which route to measure against
    - points: DataFrame with ``x_field``/``y_field`` columns, or an iterable
      of point-likes (Vertex, shapely Point, (x, y)); coordinates must be
      in ``spatial_reference``
    - spatial_reference: wkid or spatial reference dict for the segments

    Returns a new DataFrame; the input frame is not modified.
    """
    frame = _points_frame(points, x_field, y_field)
    segments = await get_segments_for_route(config, route_id, spatial_reference, session=session)
    xy = list(zip(frame[x_field].astype(float), frame[y_field].astype(float)))
    frame[m_value_field] = locate_measures(segments, xy)
    logger.info('Computed %d m-values on route %s', len(frame), route_id)
    return frame


async def get_current_route_geometry(config: RouteConfig, route_id: Union[str, int], spatial_reference=None,
                                     measure_range: Optional[Tuple[float, float]] = None,
                                     session=None) -> Polyline:
    """Geometry of the route's first segment, trimmed to ``measure_range`` if given."""
    segments = await get_segments_for_route(config, route_id, spatial_reference, session=session)
    if measure_range is not None:
        start, end = measure_range
        trim_to_range(segments, start, end, config)
        if not segments:
            raise NotFoundError(f'Route "{route_id}" has no geometry between {start} and {end}.')
    return segments[0].geometry


def route_measure_boundary(features: Sequence[Feature]) -> MeasureBoundary:
    """Smallest and largest endpoint measure over ``features`` with their vertices."""
    low = high = None
    for feature in features:
        if feature.geometry is None or feature.geometry.vertex_count == 0:
            continue
        for vertex in (first_vertex(feature.geometry), last_vertex(feature.geometry)):
            if vertex.m is None:
                continue
            if low is None or vertex.m < low.m:
                low = vertex
            if high is None or vertex.m > high.m:
                high = vertex
    if low is None:
        raise NotFoundError('No measured vertices in the supplied features.')
    return MeasureBoundary(min=low.m, min_point=low, max=high.m, max_point=high)


def build_route_info(config: RouteConfig, features: Sequence[Feature]) -> RouteInfo:
    """RouteInfo for a route from the attributes of its first segment."""
    if not features:
        raise NotFoundError('No segments to describe.')
    attrs = features[0].attributes

    def _get(name):
        return attrs.get(name) if name else None

    return RouteInfo(
        route_id=attrs.get(config.route_id_field),
        route_name=_get(config.route_name_field),
        previous_route_id=_get(config.previous_route_field),
        next_route_id=_get(config.next_route_field),
        additional_field=_get(config.route_selector_additional_field),
        measure_info=route_measure_boundary(features),
    )


def route_length(polyline: Polyline) -> float:
    """Planar length of ``polyline`` in its coordinate units (measures ignored)."""
    return float(to_shapely(polyline).length)
