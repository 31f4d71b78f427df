import numpy as np
import pytest
from shapely.geometry import Point

from routemeasure.lrs import utils
from routemeasure.lrs.errors import InvalidArgumentError
from routemeasure.lrs.models import Polyline, Vertex
from routemeasure.lrs.tests.fixtures.route_fixture import l_shaped_route, multipart_route


def test_safe_build_kdtree_none():
    tree = utils.safe_build_kdtree(None)
    assert tree is None


def test_safe_build_kdtree_empty():
    tree = utils.safe_build_kdtree(np.empty((0, 2)))
    assert tree is None


def test_safe_build_kdtree_valid():
    pts = utils.polyline_xy(multipart_route())
    tree = utils.safe_build_kdtree(pts)
    assert tree is not None
    d, idx = tree.query([40.0, 1.0])
    assert idx == 1


def test_safe_build_kdtree_rejects_wrong_shape():
    assert utils.safe_build_kdtree(np.zeros((3, 3))) is None
    assert utils.safe_build_kdtree([[0.0, 'a']]) is None


def test_safe_log_exception_logs_context(caplog):
    try:
        raise ValueError('boom')
    except ValueError as e:
        utils.safe_log_exception('Could not get layer info', e, route_id='R-1', map_service='svc')
    assert "Could not get layer info: boom [map_service='svc' route_id='R-1']" in caplog.text


def test_safe_log_exception_fallback(monkeypatch, capfd):
    class BrokenLogger:
        def exception(self, *args, **kwargs):
            raise RuntimeError('logger failed')

    monkeypatch.setattr(utils, 'logger', BrokenLogger())
    utils.safe_log_exception('Could not get layer info', ValueError('boom'), route_id='R-1')
    captured = capfd.readouterr()
    assert 'logging failed for "Could not get layer info"' in captured.err
    assert "route_id='R-1'" in captured.err


@pytest.mark.parametrize('point', [(1.5, 2.5), [1.5, 2.5, 9.0], Vertex(1.5, 2.5, m=3.0), Point(1.5, 2.5)])
def test_as_xy(point):
    assert utils.as_xy(point) == (1.5, 2.5)


def test_as_xy_rejects_garbage():
    with pytest.raises(InvalidArgumentError):
        utils.as_xy(None)
    with pytest.raises(InvalidArgumentError):
        utils.as_xy([1.0])


def test_polyline_xy_shape():
    assert utils.polyline_xy(multipart_route()).shape == (6, 2)
    assert utils.polyline_xy(Polyline(paths=[])).shape == (0, 2)


def test_to_shapely():
    poly = Polyline(paths=[
        [Vertex(0, 0, m=0), Vertex(3, 4, m=5)],
        [Vertex(9, 9, m=9)],
    ])
    geom = utils.to_shapely(poly)
    assert len(geom.geoms) == 1
    assert geom.length == pytest.approx(5.0)


def test_to_shapely_keeps_elevation():
    geom = utils.to_shapely(l_shaped_route())
    assert geom.has_z
    assert list(geom.geoms[0].coords)[0] == (0.0, 0.0, 5.0)
