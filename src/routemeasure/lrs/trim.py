"""Trim route features to a measure (or station) range.

`trim_to_range` mutates the list it is given: features wholly outside the
range are removed, the remaining ones have their paths cut at the range
bounds, with the boundary vertex moved onto the exact coordinate of the
bound. It returns nothing. Use `trimmed_copy` to keep the originals.
"""
import logging
from typing import Callable, List

from routemeasure.lrs.config import RouteConfig
from routemeasure.lrs.measures import station_attributes, station_to_measure
from routemeasure.lrs.models import Feature
from routemeasure.lrs.vertices import first_vertex, last_vertex

logger = logging.getLogger(__name__)


def _outside(reversed_measures: bool, bound: float, from_start: bool) -> Callable[[float], bool]:
    """Predicate for measures lying strictly on the excluded side of ``bound``.

    ``from_start`` means vertices are removed walking from the start of each
    path; in index order that side holds the smaller measures unless the
    measures run backwards.
    """
    if from_start != reversed_measures:
        return lambda m: m < bound
    return lambda m: m > bound


def _trim_path_starts(feature: Feature, station: float, reversed_measures: bool, config: RouteConfig) -> None:
    info = station_to_measure(station, feature, config)
    measure = info.measure
    excluded = _outside(reversed_measures, measure, from_start=True)

    for path in feature.geometry.paths:
        remove = 0
        for k in range(len(path) - 1):
            if not excluded(path[k].m):
                break
            if excluded(path[k + 1].m):
                remove += 1
                continue
            if path[k + 1].m == measure:
                # the next vertex already sits on the bound
                remove += 1
            else:
                path[k] = path[k].with_xy(info.point.x, info.point.y).with_m(measure)
            break

        # a path reduced to a single point is not a line
        if remove == len(path) - 1:
            remove += 1
        if remove:
            del path[:remove]


def _trim_path_ends(feature: Feature, station: float, reversed_measures: bool, config: RouteConfig) -> None:
    info = station_to_measure(station, feature, config)
    measure = info.measure
    excluded = _outside(reversed_measures, measure, from_start=False)

    for path in feature.geometry.paths:
        remove = 0
        for k in range(len(path) - 1, 0, -1):
            if not excluded(path[k].m):
                break
            if excluded(path[k - 1].m):
                remove += 1
                continue
            if path[k - 1].m == measure:
                remove += 1
            else:
                path[k] = path[k].with_xy(info.point.x, info.point.y).with_m(measure)
            break

        if remove == len(path) - 1:
            remove += 1
        if remove:
            del path[len(path) - remove:]


def trim_to_range(features: List[Feature], start: float, end: float, config: RouteConfig) -> None:
    """Cut ``features`` in place to the range ``[start, end]``.

    Parameters
    - features: list of Feature; modified in place
    - start, end: range bounds, in station units when
      ``config.calculate_station_using_attributes`` is set, else measures.
      Order does not matter.
    - config: RouteConfig naming the station attribute fields

    Features without geometry or without measures are left untouched.
    """
    if not features:
        return

    if start > end:
        start, end = end, start

    use_attributes = config.calculate_station_using_attributes
    begin_field = config.segments_begin_station_field
    end_field = config.segments_end_station_field

    for i in range(len(features) - 1, -1, -1):
        feature = features[i]
        geometry = feature.geometry
        if geometry is None or geometry.vertex_count == 0 or not geometry.has_m:
            logger.debug('trim_to_range: feature %d has no measured geometry; skipped', i)
            continue

        if use_attributes:
            route_start, route_end = station_attributes(feature, config)
        else:
            route_start = first_vertex(geometry).m
            route_end = last_vertex(geometry).m

        reversed_measures = False
        if route_start > route_end:
            route_start, route_end = route_end, route_start
            reversed_measures = True

        if route_end < start or route_start > end:
            logger.debug('trim_to_range: feature %d [%s, %s] outside [%s, %s]; removed',
                         i, route_start, route_end, start, end)
            del features[i]
            continue

        if use_attributes:
            # whichever attribute holds the smaller station is the low bound
            if reversed_measures:
                low_field, high_field = end_field, begin_field
            else:
                low_field, high_field = begin_field, end_field

        if route_start < start:
            if reversed_measures:
                _trim_path_ends(feature, start, reversed_measures, config)
            else:
                _trim_path_starts(feature, start, reversed_measures, config)
            if use_attributes:
                feature.attributes[low_field] = start

        if route_end > end:
            if reversed_measures:
                _trim_path_starts(feature, end, reversed_measures, config)
            else:
                _trim_path_ends(feature, end, reversed_measures, config)
            if use_attributes:
                feature.attributes[high_field] = end

        geometry.paths[:] = [p for p in geometry.paths if len(p) > 0]
        if not geometry.paths:
            logger.debug('trim_to_range: feature %d has no paths left; removed', i)
            del features[i]


def trimmed_copy(features: List[Feature], start: float, end: float, config: RouteConfig) -> List[Feature]:
    """Trim deep copies of ``features`` and return them; the input is untouched."""
    copies = [f.copy() for f in features]
    trim_to_range(copies, start, end, config)
    return copies
