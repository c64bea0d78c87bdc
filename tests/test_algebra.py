import math

import pytest
from shapely.geometry import GeometryCollection, LineString, MultiPolygon, Point, Polygon, box

import seekarea.algebra as algebra
from seekarea.algebra import (
    as_candidate,
    bbox_polygon_for,
    bbox_swne,
    buffer_from_points,
    buffer_point,
    difference,
    from_geojson,
    intersect,
    to_geojson,
    union,
)
from seekarea.errors import GeometryError
from seekarea.primitives import distance_meters


def test_buffer_point_vertices_lie_on_radius():
    center = (8.5, 47.4)
    circle = buffer_point(center, 3.0)
    assert isinstance(circle, Polygon)
    for lon, lat in list(circle.exterior.coords)[:-1]:
        assert math.isclose(distance_meters(center, (lon, lat)), 3_000.0, abs_tol=1e-3)


def test_buffer_point_uses_at_least_64_steps():
    assert len(buffer_point((0.0, 0.0), 1.0, steps=8).exterior.coords) == 65
    assert len(buffer_point((0.0, 0.0), 1.0, steps=96).exterior.coords) == 97


@pytest.mark.parametrize("radius", [0.0, -1.0])
def test_buffer_point_rejects_non_positive_radius(radius):
    with pytest.raises(ValueError):
        buffer_point((0.0, 0.0), radius)


def test_set_operations_return_none_for_empty():
    a = box(0, 0, 1, 1)
    b = box(2, 2, 3, 3)
    assert intersect(a, b) is None
    assert difference(a, a) is None
    # touching along an edge has no area
    assert intersect(a, box(1, 0, 2, 1)) is None


def test_union_of_disjoint_boxes_is_multipolygon():
    merged = union(box(0, 0, 1, 1), box(2, 2, 3, 3))
    assert isinstance(merged, MultiPolygon)
    assert math.isclose(merged.area, 2.0)


def test_as_candidate_drops_non_polygonal_parts():
    assert as_candidate(None) is None
    assert as_candidate(LineString([(0, 0), (1, 1)])) is None
    mixed = GeometryCollection([Point(5, 5), box(0, 0, 1, 1)])
    assert as_candidate(mixed).equals(box(0, 0, 1, 1))


def test_as_candidate_repairs_bowtie():
    bowtie = Polygon([(0, 0), (2, 2), (2, 0), (0, 2), (0, 0)])
    fixed = as_candidate(bowtie)
    assert fixed is not None
    assert fixed.is_valid
    assert math.isclose(fixed.area, 2.0)


def test_buffer_from_points_unions_overlapping_circles():
    merged = buffer_from_points([(0.0, 0.0), (0.01, 0.0)], 1.0)
    assert isinstance(merged, Polygon)
    assert merged.covers(Point(0.005, 0.0))


def test_buffer_from_points_requires_points():
    with pytest.raises(GeometryError, match="No points provided"):
        buffer_from_points([], 1.0)


def test_buffer_from_points_skips_failed_batch(monkeypatch):
    real_union_batch = algebra._union_batch
    calls = []

    def flaky(polygons):
        calls.append(len(polygons))
        if len(calls) == 1:
            raise GeometryError("boom")
        return real_union_batch(polygons)

    monkeypatch.setattr(algebra, "_union_batch", flaky)
    points = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]
    merged = buffer_from_points(points, 1.0, batch_size=2)

    assert calls == [2, 1]
    assert merged.covers(Point(0.0, 2.0))
    assert not merged.covers(Point(0.0, 0.0))


def test_buffer_from_points_fails_when_every_batch_fails(monkeypatch):
    def broken(polygons):
        raise GeometryError("boom")

    monkeypatch.setattr(algebra, "_union_batch", broken)
    with pytest.raises(GeometryError, match="No valid buffers"):
        buffer_from_points([(0.0, 0.0)], 1.0)


def test_bbox_helpers():
    geom = box(1.0, 2.0, 3.0, 4.0)
    assert bbox_swne(geom) == (2.0, 1.0, 4.0, 3.0)
    assert bbox_polygon_for(geom, pad_deg=0.5).bounds == (0.5, 1.5, 3.5, 4.5)


def test_geojson_conversion_accepts_features():
    geom = box(0, 0, 1, 1)
    feature = {"type": "Feature", "properties": {}, "geometry": to_geojson(geom)}
    assert from_geojson(feature).equals(geom)
    assert to_geojson(None) is None


@pytest.mark.parametrize(
    "data",
    [
        {"type": "Point", "coordinates": [0, 0]},
        {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [2, 2], [0, 0]]]},
    ],
)
def test_from_geojson_rejects_non_areas(data):
    with pytest.raises(ValueError):
        from_geojson(data)
