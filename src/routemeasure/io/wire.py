"""Esri JSON encoding of measured polylines and feature sets.

Vertices travel as flat numeric lists: ``[x, y, m]`` without elevation and
``[x, y, z, m]`` with it. The layout is taken from the ``hasZ``/``hasM``
flags of the geometry (or of the enclosing feature set). Only when a
payload carries no flags at all is it guessed from the list length, and
that guess is logged.

Public functions:
- `decode_vertex(values, has_z, has_m)` -> Vertex
- `encode_vertex(vertex, has_z, has_m)` -> list
- `infer_layout(values)` -> (has_z, has_m)
- `decode_polyline(geometry, has_z=None, has_m=None)` -> Polyline
- `encode_polyline(polyline)` -> dict
- `decode_features(payload)` -> list[Feature]
- `encode_feature(feature)` -> dict
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from routemeasure.lrs.errors import InvalidGeometryError
from routemeasure.lrs.models import Feature, Polyline, Vertex

logger = logging.getLogger(__name__)


def infer_layout(values: Sequence[float]) -> Tuple[bool, bool]:
    """Guess ``(has_z, has_m)`` from a vertex list length (3 -> x,y,m; 4 -> x,y,z,m)."""
    n = len(values)
    if n == 4:
        return True, True
    if n == 3:
        return False, True
    if n == 2:
        return False, False
    raise InvalidGeometryError(f'Cannot infer vertex layout from {n} values')


def decode_vertex(values: Sequence[float], has_z: bool, has_m: bool) -> Vertex:
    expected = 2 + int(has_z) + int(has_m)
    if len(values) != expected:
        raise InvalidGeometryError(
            f'Vertex {list(values)!r} does not match declared layout '
            f'(hasZ={has_z}, hasM={has_m}, expected {expected} values)')
    x, y = float(values[0]), float(values[1])
    z = float(values[2]) if has_z and values[2] is not None else None
    m = None
    if has_m:
        raw = values[3] if has_z else values[2]
        m = float(raw) if raw is not None else None
    return Vertex(x=x, y=y, m=m, z=z)


def encode_vertex(vertex: Vertex, has_z: bool, has_m: bool) -> List[Optional[float]]:
    out: List[Optional[float]] = [vertex.x, vertex.y]
    if has_z:
        out.append(vertex.z)
    if has_m:
        out.append(vertex.m)
    return out


def _first_vertex_values(paths: Sequence[Sequence[Sequence[float]]]) -> Optional[Sequence[float]]:
    for path in paths:
        for values in path:
            return values
    return None


def decode_polyline(geometry: Mapping[str, Any], has_z: Optional[bool] = None,
                    has_m: Optional[bool] = None,
                    spatial_reference: Optional[Dict[str, Any]] = None) -> Polyline:
    """Decode an Esri JSON polyline.

    Flags on the geometry win over ``has_z``/``has_m`` passed in from the
    enclosing feature set.
    """
    paths_json = geometry.get('paths')
    if paths_json is None:
        raise InvalidGeometryError('Geometry has no paths')

    has_z = geometry.get('hasZ', has_z)
    has_m = geometry.get('hasM', has_m)
    if has_z is None or has_m is None:
        sample = _first_vertex_values(paths_json)
        if sample is None:
            guessed_z, guessed_m = False, True
        else:
            guessed_z, guessed_m = infer_layout(sample)
        logger.debug('decode_polyline: no hasZ/hasM flags; inferred hasZ=%s hasM=%s from vertex length',
                     guessed_z, guessed_m)
        has_z = guessed_z if has_z is None else has_z
        has_m = guessed_m if has_m is None else has_m

    paths = [[decode_vertex(values, has_z, has_m) for values in path] for path in paths_json]
    return Polyline(
        paths=paths,
        has_z=bool(has_z),
        has_m=bool(has_m),
        spatial_reference=geometry.get('spatialReference', spatial_reference),
    )


def encode_polyline(polyline: Polyline) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        'hasZ': polyline.has_z,
        'hasM': polyline.has_m,
        'paths': [[encode_vertex(v, polyline.has_z, polyline.has_m) for v in path]
                  for path in polyline.paths],
    }
    if polyline.spatial_reference is not None:
        out['spatialReference'] = polyline.spatial_reference
    return out


def decode_features(payload: Mapping[str, Any]) -> List[Feature]:
    """Decode the ``features`` of an Esri JSON feature set / query response."""
    has_z = payload.get('hasZ')
    has_m = payload.get('hasM')
    spatial_reference = payload.get('spatialReference')
    features = []
    for item in payload.get('features', []):
        geometry_json = item.get('geometry')
        geometry = None
        if geometry_json:
            geometry = decode_polyline(geometry_json, has_z, has_m, spatial_reference)
        features.append(Feature(geometry=geometry, attributes=dict(item.get('attributes') or {})))
    return features


def encode_feature(feature: Feature) -> Dict[str, Any]:
    out: Dict[str, Any] = {'attributes': dict(feature.attributes)}
    if feature.geometry is not None:
        out['geometry'] = encode_polyline(feature.geometry)
    return out
