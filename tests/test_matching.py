import math

import pytest
from shapely.geometry import Point, box

from seekarea.errors import InsufficientInputError, SamplingError
from seekarea.nearest import Poi
from seekarea.operators import apply_matching_sampled, apply_matching_voronoi


CANDIDATE = box(-1.0, -1.0, 1.0, 1.0)
SEEKER = (-0.4, 0.1)
BBOX = (-2.0, -2.0, 2.0, 2.0)
POIS = [
    Poi(1, -0.5, 0.0, name="West Hospital", key="node/1"),
    Poi(2, 0.5, 0.0, name="East Hospital", key="node/2"),
]


def test_voronoi_yes_keeps_seeker_cell():
    outcome = apply_matching_voronoi(CANDIDATE, SEEKER, POIS, True, BBOX)

    assert math.isclose(outcome.next.bounds[2], 0.0, abs_tol=1e-9)
    assert outcome.seeker_nearest_key == "node/1"
    assert outcome.seeker_nearest_name == "West Hospital"
    assert outcome.feature_count == 2
    assert outcome.percent_remaining == pytest.approx(50.0, rel=1e-3)


def test_voronoi_no_removes_seeker_cell():
    outcome = apply_matching_voronoi(CANDIDATE, SEEKER, POIS, False, BBOX)
    assert math.isclose(outcome.next.bounds[0], 0.0, abs_tol=1e-9)
    assert outcome.next.covers(Point(0.9, 0.0))


def test_duplicate_pois_do_not_break_partition():
    pois = POIS + [Poi(3, -0.5, 0.0, key="node/3"), POIS[1]]
    outcome = apply_matching_voronoi(CANDIDATE, SEEKER, pois, True, BBOX)
    assert outcome.feature_count == 2
    assert math.isclose(outcome.next.bounds[2], 0.0, abs_tol=1e-9)


@pytest.mark.parametrize("answer_yes, expect_empty", [(True, False), (False, True)])
def test_single_poi_is_nearest_everywhere(answer_yes, expect_empty):
    outcome = apply_matching_voronoi(CANDIDATE, SEEKER, POIS[:1], answer_yes, BBOX)
    assert outcome.is_empty is expect_empty
    if not expect_empty:
        assert outcome.next is CANDIDATE


def test_matching_without_pois_is_refused():
    with pytest.raises(InsufficientInputError):
        apply_matching_voronoi(CANDIDATE, SEEKER, [], True, BBOX)
    with pytest.raises(InsufficientInputError):
        apply_matching_sampled(CANDIDATE, SEEKER, [], True)


def test_sampled_yes_keeps_western_samples():
    outcome = apply_matching_sampled(CANDIDATE, SEEKER, POIS, True)

    assert outcome.strategy == "sampled"
    assert 0 < outcome.kept_count < outcome.sample_count
    assert outcome.next.covers(Point(-0.8, 0.5))
    assert not outcome.next.covers(Point(0.8, 0.5))
    assert outcome.next.bounds[2] < 0.2


def test_sampled_on_tiny_area_raises_sampling_error():
    sliver = box(0.0, 0.0, 0.001, 0.001).difference(box(0.0, 0.0, 0.0005, 0.0005))
    with pytest.raises(SamplingError):
        apply_matching_sampled(sliver, SEEKER, POIS, True)
