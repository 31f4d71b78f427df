import math

from routemeasure.lrs.models import Feature, LineSegment, NearestPointResult, Vertex
from routemeasure.lrs.tests.fixtures.route_fixture import l_shaped_route, make_feature, straight_route


def test_vertex_with_xy_keeps_measure_and_elevation():
    v = Vertex(1.0, 2.0, m=3.0, z=4.0)
    moved = v.with_xy(5, 6).with_m(7.0)
    assert moved == Vertex(5.0, 6.0, m=7.0, z=4.0)
    assert v == Vertex(1.0, 2.0, m=3.0, z=4.0)
    assert moved.has_z and moved.has_m
    assert not Vertex(0.0, 0.0).has_m


def test_line_segment_bounds():
    seg = LineSegment(Vertex(0, 0, m=20.0), Vertex(1, 0, m=10.0))
    assert (seg.min_m, seg.max_m) == (10.0, 20.0)


def test_empty_nearest_result():
    res = NearestPointResult.empty()
    assert res.is_empty
    assert math.isinf(res.distance)
    assert res.vertex_index == -1


def test_polyline_copy_is_independent():
    poly = l_shaped_route()
    dup = poly.copy()
    dup.paths[0].pop()
    assert poly.vertex_count == 3
    assert dup.vertex_count == 2
    assert dup.has_z


def test_feature_copy_is_deep():
    feature = make_feature(straight_route(), INFO={'a': 1})
    dup = feature.copy()
    dup.attributes['INFO']['a'] = 2
    dup.geometry.paths[0].clear()
    assert feature.attributes['INFO'] == {'a': 1}
    assert feature.geometry.vertex_count == 3
    assert Feature(geometry=None).copy().geometry is None
