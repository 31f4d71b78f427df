import math

import numpy as np
import pytest
from shapely.geometry import Point

from routemeasure.lrs import projection
from routemeasure.lrs.models import Polyline, Vertex
from routemeasure.lrs.projection import nearest_coordinate, nearest_vertex
from routemeasure.lrs.tests.fixtures.route_fixture import (
    l_shaped_route,
    multipart_route,
    straight_route,
)


def test_nearest_coordinate_interior():
    res = nearest_coordinate(straight_route(), (5.0, 3.0))
    assert np.allclose([res.coordinate.x, res.coordinate.y], [5.0, 0.0])
    assert res.coordinate.m == pytest.approx(5.0)
    assert res.distance == pytest.approx(3.0)
    assert res.vertex_index == 0
    assert res.is_right_side is False


def test_nearest_coordinate_right_side():
    res = nearest_coordinate(straight_route(), (5.0, -3.0))
    assert res.is_right_side is True


def test_nearest_coordinate_clamps_to_ends():
    poly = straight_route()
    past_end = nearest_coordinate(poly, (25.0, 0.0))
    assert (past_end.coordinate.x, past_end.coordinate.y) == (20.0, 0.0)
    assert past_end.coordinate.m == 20.0
    assert past_end.vertex_index == 1
    assert past_end.distance == pytest.approx(5.0)

    before_start = nearest_coordinate(poly, (-4.0, 0.0))
    assert (before_start.coordinate.x, before_start.coordinate.y) == (0.0, 0.0)
    assert before_start.vertex_index == 0


def test_nearest_coordinate_tie_prefers_first_segment():
    # (10, 5) is equally close to both segments at their shared vertex
    res = nearest_coordinate(straight_route(), (10.0, 5.0))
    assert res.vertex_index == 0
    assert (res.coordinate.x, res.coordinate.y) == (10.0, 0.0)
    assert res.coordinate.m == 10.0


def test_nearest_coordinate_takes_start_vertex_elevation():
    res = nearest_coordinate(l_shaped_route(), (5.0, 1.0))
    assert res.coordinate.z == 5.0
    assert res.coordinate.m == pytest.approx(105.0)


def test_nearest_coordinate_uses_global_vertex_index():
    res = nearest_coordinate(multipart_route(), (200.0, 1.0))
    assert res.vertex_index == 3
    assert res.coordinate.m == pytest.approx(200.0)


def test_nearest_coordinate_single_vertex_path():
    poly = Polyline(paths=[[Vertex(3.0, 4.0, m=7.0)]])
    res = nearest_coordinate(poly, (0.0, 0.0))
    assert (res.coordinate.x, res.coordinate.y) == (3.0, 4.0)
    assert res.coordinate.m == 7.0
    assert res.distance == pytest.approx(5.0)
    assert res.vertex_index == 0


def test_nearest_coordinate_accepts_shapely_point():
    res = nearest_coordinate(straight_route(), Point(5.0, 3.0))
    assert res.coordinate.x == pytest.approx(5.0)


@pytest.mark.parametrize('poly', [Polyline(paths=[]), Polyline(paths=[[]]), None])
def test_empty_geometry_gives_empty_result(poly):
    for fn in (nearest_coordinate, nearest_vertex):
        res = fn(poly, (1.0, 1.0))
        assert res.is_empty
        assert math.isinf(res.distance)


def test_nearest_vertex():
    res = nearest_vertex(straight_route(), (7.0, 1.0))
    assert res.vertex_index == 1
    assert res.coordinate == Vertex(10.0, 0.0, m=10.0)
    assert res.distance == pytest.approx(math.hypot(3.0, 1.0))


def test_nearest_vertex_tie_prefers_lowest_index():
    assert nearest_vertex(straight_route(), (5.0, 0.0)).vertex_index == 0
    # first vertex of the second path duplicates the last of the first
    assert nearest_vertex(multipart_route(), (150.0, 10.0)).vertex_index == 2


def test_nearest_vertex_without_tree(monkeypatch):
    monkeypatch.setattr(projection, 'safe_build_kdtree', lambda *a, **k: None)
    res = nearest_vertex(multipart_route(), (150.0, 10.0))
    assert res.vertex_index == 2
    assert res.distance == pytest.approx(10.0)


def test_nearest_vertex_side():
    assert nearest_vertex(straight_route(), (10.0, -2.0)).is_right_side is True
    assert nearest_vertex(straight_route(), (20.0, 2.0)).is_right_side is False
