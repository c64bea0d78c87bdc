import pytest
from shapely.geometry import Point, Polygon, box

from seekarea.sampling import clip_to_samples, downsample, grid_step_km, sample_interior


def test_samples_fall_inside_polygon():
    area = Polygon([(0, 0), (1, 0), (0, 1)])
    result = sample_interior(area, max_points=400, min_step_km=1.0)
    assert len(result) > 0
    assert all(area.covers(Point(lon, lat)) for lon, lat in result.points)


def test_sampling_respects_point_cap():
    result = sample_interior(box(0, 0, 2, 2), max_points=5, min_step_km=1.0)
    assert len(result) == 5


def test_step_never_below_minimum():
    assert grid_step_km(box(0, 0, 0.01, 0.01), max_points=900, min_step_km=12.0) == 12.0
    result = sample_interior(box(0, 0, 1, 1), max_points=10_000, min_step_km=25.0)
    assert result.step_km == 25.0


def test_thin_polygon_can_yield_no_samples():
    sliver = Polygon([(0.005, 0.0), (0.01, 0.01), (0.0, 0.01)])
    result = sample_interior(sliver, max_points=900, min_step_km=10.0)
    assert result.points == []


def test_longitude_step_widens_with_latitude():
    equator = sample_interior(box(0, 0, 1, 0.05), max_points=10_000, min_step_km=10.0)
    north = sample_interior(box(0, 60, 1, 60.05), max_points=10_000, min_step_km=10.0)
    assert len(north) < len(equator)


@pytest.mark.parametrize(
    "count, cap, expected",
    [
        (10, 3, [0, 4, 8]),
        (3, 5, [0, 1, 2]),
        (6, 6, [0, 1, 2, 3, 4, 5]),
    ],
)
def test_downsample(count, cap, expected):
    assert downsample(list(range(count)), cap) == expected


def test_clip_to_samples_stays_inside_candidate():
    candidate = box(0, 0, 1, 1)
    clipped = clip_to_samples(candidate, [(0.1, 0.1), (0.9, 0.9)], buffer_km=5.0)
    assert candidate.covers(clipped)
    assert clipped.covers(Point(0.1, 0.1))
    assert not clipped.covers(Point(0.5, 0.5))
