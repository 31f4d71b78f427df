"""In-process stand-in for an aiohttp session talking to an ArcGIS service.

`FakeSession` maps URL prefixes to canned JSON payloads (or exceptions) and
records every request so tests can assert on the query parameters.
"""
import aiohttp


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status = status

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientError(f'HTTP {self.status}')

    async def json(self, content_type='application/json'):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, routes=None):
        # routes: list of (url_prefix, payload, status)
        self.routes = list(routes or [])
        self.requests = []

    def add(self, url_prefix, payload, status=200):
        self.routes.append((url_prefix, payload, status))
        return self

    def get(self, url, params=None, **kwargs):
        self.requests.append((url, dict(params or {})))
        for prefix, payload, status in self.routes:
            if url.startswith(prefix):
                if isinstance(payload, aiohttp.ClientError):
                    raise payload
                return FakeResponse(payload, status)
        return FakeResponse({}, 404)


def polyline_json(paths, has_z=False):
    return {'hasZ': has_z, 'hasM': True, 'paths': paths}


def feature_set_json(features, exceeded=False, has_z=False):
    payload = {
        'hasZ': has_z,
        'hasM': True,
        'spatialReference': {'wkid': 3857},
        'features': [
            {'attributes': attrs, 'geometry': {'paths': paths}} for attrs, paths in features
        ],
    }
    if exceeded:
        payload['exceededTransferLimit'] = True
    return payload


ROUTE_PAYLOAD = feature_set_json([
    ({'ROUTE_ID': 'R-1', 'ROUTE_NAME': 'Main', 'BEGIN': 0, 'END': 100},
     [[[0, 0, 0], [60, 0, 60], [100, 0, 100]]]),
    ({'ROUTE_ID': 'R-1', 'ROUTE_NAME': 'Main', 'BEGIN': 100, 'END': 250},
     [[[100, 0, 100], [100, 150, 250]]]),
])
