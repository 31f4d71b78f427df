import pandas as pd
import pytest

from routemeasure import cli, workflows
from routemeasure.lrs.config import DEFAULT_M_VALUE_FIELD
from routemeasure.lrs.errors import NotFoundError
from routemeasure.lrs.tests.fixtures.route_fixture import segment_features

URL = 'https://gis.test/arcgis/rest/services/LRS/MapServer/3'


@pytest.fixture
def calls(monkeypatch):
    seen = []

    async def fake(config, route_id, spatial_reference=None, session=None):
        seen.append((config, route_id, spatial_reference))
        return segment_features()

    monkeypatch.setattr(workflows, 'get_segments_for_route', fake)
    return seen


def test_cli_writes_measures(tmp_path, calls):
    inp = tmp_path / 'points.csv'
    out = tmp_path / 'measured.csv'
    pd.DataFrame({'x': [50.0, 390.0], 'y': [1.0, 0.0]}).to_csv(inp, index=False)

    rc = cli.main([str(inp), str(out), '--url', URL, '--route-id', 'R-1', '--route-id-field', 'ROUTE_ID',
                   '--wkid', '2277'])
    assert rc == 0
    result = pd.read_csv(out)
    assert list(result[DEFAULT_M_VALUE_FIELD]) == pytest.approx([50.0, 390.0])

    config, route_id, sr = calls[0]
    assert config.centerline_url == URL
    assert route_id == 'R-1'
    assert sr == {'wkid': 2277}


def test_cli_custom_columns(tmp_path, calls):
    inp = tmp_path / 'points.csv'
    out = tmp_path / 'measured.csv'
    pd.DataFrame({'E': [175.0], 'N': [-2.0]}).to_csv(inp, index=False)

    rc = cli.main([str(inp), str(out), '--url', URL, '--route-id', 'R-1', '--route-id-field', 'ROUTE_ID',
                   '--x-field', 'E', '--y-field', 'N', '--m-field', 'MEAS'])
    assert rc == 0
    assert pd.read_csv(out)['MEAS'].iloc[0] == pytest.approx(175.0)


def test_cli_reports_failure(tmp_path, monkeypatch):
    async def missing(config, route_id, spatial_reference=None, session=None):
        raise NotFoundError(f'No segments found for route id "{route_id}".')

    monkeypatch.setattr(workflows, 'get_segments_for_route', missing)
    inp = tmp_path / 'points.csv'
    out = tmp_path / 'measured.csv'
    pd.DataFrame({'x': [1.0], 'y': [1.0]}).to_csv(inp, index=False)

    rc = cli.main([str(inp), str(out), '--url', URL, '--route-id', 'R-9', '--route-id-field', 'ROUTE_ID'])
    assert rc == 1
    assert not out.exists()


def test_cli_rejects_bad_route_id_type(tmp_path):
    inp = tmp_path / 'points.csv'
    pd.DataFrame({'x': [1.0], 'y': [1.0]}).to_csv(inp, index=False)
    rc = cli.main([str(inp), str(tmp_path / 'out.csv'), '--url', URL, '--route-id', 'R-1',
                   '--route-id-field', 'ROUTE_ID', '--route-id-type', 'blob'])
    assert rc == 1
