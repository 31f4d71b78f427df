# -*- coding: utf-8 -*-

"""
lrs/config.py

Central configuration for route measure lookups.

Contents:
---------
1. MEASURE_UNITS:
   - Units the m-values of a segments layer may be stored in. Only used for
     validation and reporting; no unit conversion is performed.

2. QUOTED_FIELD_TYPES:
   - Field types whose values must be quoted when building a where clause
     against the route id field.

3. RouteConfig:
   - Immutable field bindings and behavior flags for one route layer.
     Validated once when constructed; functions that receive a RouteConfig
     never re-check it.

Usage:
------
    from routemeasure.lrs.config import RouteConfig

    cfg = RouteConfig.from_dict({
        "routeIdField": "ROUTE_ID",
        "routeIdFieldType": "esriFieldTypeString",
        "calculateStationUsingAttributes": True,
        "segmentsBeginStationField": "BEGIN_STA",
        "segmentsEndStationField": "END_STA",
    })
"""
import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from routemeasure.lrs.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

# ───────────────────────────────────────────────────────────────────────────────
# 1) UNITS OF THE SEGMENT M-VALUES
# ───────────────────────────────────────────────────────────────────────────────
MEASURE_UNITS = (
    'meters',
    'feet',
    'kilometers',
    'miles',
    'nautical-miles',
    'yards',
)

# ───────────────────────────────────────────────────────────────────────────────
# 2) ROUTE ID FIELD TYPES
# ───────────────────────────────────────────────────────────────────────────────
QUOTED_FIELD_TYPES = (
    'esriFieldTypeString',
    'esriFieldTypeGUID',
    'esriFieldTypeGlobalID',
    # short aliases accepted from hand-written configs
    'string',
    'guid',
    'globalid',
)

NUMERIC_FIELD_TYPES = (
    'esriFieldTypeInteger',
    'esriFieldTypeSmallInteger',
    'esriFieldTypeBigInteger',
    'esriFieldTypeDouble',
    'esriFieldTypeSingle',
    'esriFieldTypeOID',
    'integer',
    'double',
    'numeric',
)

# Attribute that receives computed m-values when the caller does not name one
DEFAULT_M_VALUE_FIELD = '_M_VALUE_FIELD_'

# Absolute tolerance used when comparing measures in tests and diagnostics
MEASURE_TOLERANCE = 1e-9

# Seconds before a segment query is abandoned
DEFAULT_REQUEST_TIMEOUT = 60.0

# camelCase keys of the JSON configuration -> RouteConfig attribute
_CAMEL_KEYS = {
    'routeIdField': 'route_id_field',
    'routeIdFieldType': 'route_id_field_type',
    'routeNameField': 'route_name_field',
    'previousRouteField': 'previous_route_field',
    'nextRouteField': 'next_route_field',
    'routeSelectorAdditionalField': 'route_selector_additional_field',
    'segmentsBeginStationField': 'segments_begin_station_field',
    'segmentsEndStationField': 'segments_end_station_field',
    'calculateStationUsingAttributes': 'calculate_station_using_attributes',
    'segmentsMeasureUnit': 'segments_measure_unit',
    'centerlineUrl': 'centerline_url',
    'mapService': 'map_service',
    'centerlineLayer': 'centerline_layer',
    'gdbVersion': 'gdb_version',
    'requestTimeout': 'request_timeout',
}


@dataclass(frozen=True)
class RouteConfig:
    """Field bindings and behavior flags for a route segments layer."""
    route_id_field: str
    route_id_field_type: str = 'esriFieldTypeString'
    route_name_field: Optional[str] = None
    previous_route_field: Optional[str] = None
    next_route_field: Optional[str] = None
    route_selector_additional_field: Optional[str] = None
    segments_begin_station_field: Optional[str] = None
    segments_end_station_field: Optional[str] = None
    calculate_station_using_attributes: bool = False
    segments_measure_unit: str = 'meters'

    # where the segments live
    centerline_url: Optional[str] = None
    map_service: Optional[str] = None
    centerline_layer: Optional[str] = None
    gdb_version: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if not self.route_id_field:
            raise InvalidArgumentError('route_id_field is required')
        if self.route_id_field_type not in QUOTED_FIELD_TYPES + NUMERIC_FIELD_TYPES:
            raise InvalidArgumentError(
                f'Unsupported route_id_field_type {self.route_id_field_type!r}')
        if self.segments_measure_unit not in MEASURE_UNITS:
            raise InvalidArgumentError(
                f'segments_measure_unit must be one of {MEASURE_UNITS}, '
                f'got {self.segments_measure_unit!r}')
        if self.calculate_station_using_attributes and not (
                self.segments_begin_station_field and self.segments_end_station_field):
            raise InvalidArgumentError(
                'calculate_station_using_attributes requires both '
                'segments_begin_station_field and segments_end_station_field')
        if self.request_timeout <= 0:
            raise InvalidArgumentError('request_timeout must be positive')

    @property
    def quote_route_id(self) -> bool:
        return self.route_id_field_type in QUOTED_FIELD_TYPES

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RouteConfig':
        """Build a config from snake_case or camelCase keys.

        Keys that are not configuration options (display settings such as
        ``decimalPlaces`` or ``useStationNotation``) are ignored.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                logger.debug('RouteConfig: ignoring unknown option %r', key)
                continue
            kwargs[name] = value
        if 'calculate_station_using_attributes' in kwargs:
            kwargs['calculate_station_using_attributes'] = bool(kwargs['calculate_station_using_attributes'])
        if kwargs.get('request_timeout') is None:
            kwargs.pop('request_timeout', None)
        else:
            kwargs['request_timeout'] = float(kwargs['request_timeout'])
        return cls(**kwargs)
