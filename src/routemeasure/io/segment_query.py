"""
segment_query.py

Asynchronous retrieval of route segment features from an ArcGIS feature
or map service.

A query asks the centerline layer for every feature whose route id field
equals the requested id, with m and z values and the attribute fields the
RouteConfig names. There is no retry: any transport failure, service error
payload, or truncated ("exceeded transfer limit") result is raised to the
caller as ExternalQueryError.

When ``config.centerline_url`` is not set the layer URL is discovered by
listing ``<map_service>/layers`` and matching ``config.centerline_layer``
by name.

Public functions:
- `quote_for_field_type(field_type)` -> str
- `build_where_clause(config, route_id)` -> str
- `segment_out_fields(config)` -> list[str]
- `custom_query_url(url)` -> str
- `get_map_service_layers(config, session=None)` -> dict | None   (async)
- `get_centerline_url(config, layers)` -> str
- `query_segments(config, route_id, spatial_reference, session=None)`   (async)
- `get_segments_for_route(config, route_id, spatial_reference, session=None)`   (async)
"""
import asyncio
import contextlib
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Union

import aiohttp

from routemeasure.io.wire import decode_features
from routemeasure.lrs.config import QUOTED_FIELD_TYPES, RouteConfig
from routemeasure.lrs.errors import ExternalQueryError, InvalidGeometryError, NotFoundError
from routemeasure.lrs.models import Feature
from routemeasure.lrs.utils import safe_log_exception

logger = logging.getLogger(__name__)

SpatialReference = Union[int, Mapping[str, Any], None]


def quote_for_field_type(field_type: str) -> str:
    return "'" if field_type in QUOTED_FIELD_TYPES else ''


def build_where_clause(config: RouteConfig, route_id: Union[str, int]) -> str:
    quote = quote_for_field_type(config.route_id_field_type)
    value = str(route_id)
    if quote:
        value = value.replace("'", "''")
    return f'{config.route_id_field} = {quote}{value}{quote}'


def segment_out_fields(config: RouteConfig) -> List[str]:
    """Attribute fields requested with each segment, in a stable order."""
    candidates = (
        config.route_id_field,
        config.route_name_field,
        config.previous_route_field,
        config.next_route_field,
        config.route_selector_additional_field,
        config.segments_begin_station_field,
        config.segments_end_station_field,
    )
    out_fields: List[str] = []
    for name in candidates:
        if name and name not in out_fields:
            out_fields.append(name)
    return out_fields


def custom_query_url(url: str) -> str:
    """Point ``url`` at the layer's query endpoint with m and z values requested."""
    base, _, query_string = url.partition('?')
    base = base.rstrip('/')
    if not base.endswith('/query'):
        base += '/query'
    extra = 'returnM=true&returnZ=true'
    if query_string:
        return f'{base}?{query_string}&{extra}'
    return f'{base}?{extra}'


def _out_sr(spatial_reference: SpatialReference) -> Optional[str]:
    if spatial_reference is None:
        return None
    if isinstance(spatial_reference, Mapping):
        return json.dumps(dict(spatial_reference))
    return str(int(spatial_reference))


@contextlib.asynccontextmanager
async def _session_scope(session: Optional[aiohttp.ClientSession]) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield ``session`` untouched, or a fresh ClientSession closed on exit."""
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession() as owned:
        yield owned


async def _get_json(session: aiohttp.ClientSession, url: str, params: Dict[str, str],
                    timeout: float) -> Dict[str, Any]:
    logger.debug('GET %s params=%s', url, params)
    try:
        async with session.get(url, params=params, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
            resp.raise_for_status()
            payload = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        raise ExternalQueryError(f'Request to {url} failed: {exc}') from exc

    if not isinstance(payload, dict):
        raise ExternalQueryError(f'Unexpected response from {url}: {type(payload).__name__}')
    if 'error' in payload:
        error = payload['error'] or {}
        raise ExternalQueryError(
            f"Service error {error.get('code', '?')} from {url}: {error.get('message', 'unknown error')}")
    return payload


async def get_map_service_layers(config: RouteConfig,
                                 session: Optional[aiohttp.ClientSession] = None) -> Optional[Dict[str, Any]]:
    """Layer listing of ``config.map_service``; None if unavailable or not configured."""
    if not (config.map_service and config.centerline_layer):
        return None
    url = config.map_service.rstrip('/') + '/layers'
    async with _session_scope(session) as s:
        try:
            payload = await _get_json(s, url, {'f': 'json'}, config.request_timeout)
        except ExternalQueryError as exc:
            safe_log_exception('Could not get layer info', exc, map_service=config.map_service)
            return None
    return payload or None


def get_centerline_url(config: RouteConfig, layers: Optional[Mapping[str, Any]]) -> str:
    """URL of the layer named ``config.centerline_layer``, or '' if absent."""
    if not layers or not config.map_service or not config.centerline_layer:
        return ''
    for layer in layers.get('layers', []):
        if layer.get('name') == config.centerline_layer:
            return f"{config.map_service.rstrip('/')}/{layer.get('id')}"
    return ''


async def query_segments(config: RouteConfig, route_id: Union[str, int],
                         spatial_reference: SpatialReference = None,
                         session: Optional[aiohttp.ClientSession] = None) -> List[Feature]:
    """All segment features of ``route_id``, in ``spatial_reference``."""
    async with _session_scope(session) as s:
        url = config.centerline_url
        if not url:
            layers = await get_map_service_layers(config, s)
            url = get_centerline_url(config, layers)
        if not url:
            raise ExternalQueryError(
                'No centerline layer URL: set centerline_url or map_service and centerline_layer')

        params = {
            'where': build_where_clause(config, route_id),
            'outFields': ','.join(segment_out_fields(config)),
            'returnGeometry': 'true',
            'f': 'json',
        }
        out_sr = _out_sr(spatial_reference)
        if out_sr is not None:
            params['outSR'] = out_sr
        if config.gdb_version:
            params['gdbVersion'] = config.gdb_version

        payload = await _get_json(s, custom_query_url(url), params, config.request_timeout)

    if payload.get('exceededTransferLimit'):
        raise ExternalQueryError('Query transfer limit exceeded.')

    features = decode_features(payload)
    logger.info('Route %s: %d segment(s) returned', route_id, len(features))
    return features


async def get_segments_for_route(config: RouteConfig, route_id: Union[str, int],
                                 spatial_reference: SpatialReference = None,
                                 session: Optional[aiohttp.ClientSession] = None) -> List[Feature]:
    """Like `query_segments`, but an empty result raises NotFoundError."""
    try:
        features = await query_segments(config, route_id, spatial_reference, session)
    except (ExternalQueryError, InvalidGeometryError) as exc:
        raise ExternalQueryError(f'Query for segments failed: {exc}') from exc

    if not features:
        raise NotFoundError(f'No segments found for route id "{route_id}".')
    return features
