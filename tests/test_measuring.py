import pytest
from shapely.geometry import Point

from seekarea.algebra import buffer_point
from seekarea.errors import InsufficientInputError
from seekarea.nearest import Poi
from seekarea.operators import apply_measuring
from seekarea.primitives import destination_point


ORIGIN = (0.0, 0.0)
DISK = buffer_point(ORIGIN, 10.0)
POIS = [Poi(1, 0.0, 0.0, name="Museum", key="node/1")]
SEEKER = destination_point(ORIGIN, 5_000.0, 90.0)


def _at(meters, bearing=45.0):
    return Point(destination_point(ORIGIN, meters, bearing))


def test_exact_closer_keeps_disk_inside_threshold():
    outcome = apply_measuring(DISK, SEEKER, POIS, True, epsilon_m=25.0)

    assert outcome.method == "exact"
    assert outcome.seeker_distance_m == pytest.approx(5_000.0, abs=1e-3)
    assert outcome.threshold_m == pytest.approx(4_975.0, abs=1e-3)
    assert outcome.next.covers(_at(4_900.0))
    assert not outcome.next.covers(_at(5_050.0))


def test_exact_farther_keeps_ring_outside_threshold():
    outcome = apply_measuring(DISK, SEEKER, POIS, False, epsilon_m=25.0)

    assert outcome.threshold_m == pytest.approx(5_025.0, abs=1e-3)
    assert outcome.next.covers(_at(5_100.0))
    assert outcome.next.covers(_at(9_000.0))
    assert not outcome.next.covers(_at(4_900.0))


def test_closer_than_zero_is_impossible():
    outcome = apply_measuring(DISK, ORIGIN, POIS, True, epsilon_m=25.0)
    assert outcome.is_empty


def test_sampled_method_matches_exact_shape():
    outcome = apply_measuring(
        DISK,
        SEEKER,
        POIS,
        True,
        method="sampled",
        min_step_km=0.5,
        buffer_min_km=0.3,
    )

    assert outcome.method == "sampled"
    assert 0 < outcome.kept_count < outcome.sample_count
    assert outcome.next.covers(_at(2_000.0))
    assert not outcome.next.covers(_at(8_000.0))


def test_auto_switches_to_sampling_for_many_pois():
    pois = [Poi(i, 0.001 * i, 0.0) for i in range(5)]
    outcome = apply_measuring(DISK, SEEKER, pois, True, exact_max_pois=3, min_step_km=1.0, buffer_min_km=0.5)
    assert outcome.method == "sampled"
    assert outcome.poi_count == 5


def test_measuring_requires_pois():
    with pytest.raises(InsufficientInputError):
        apply_measuring(DISK, SEEKER, [], True)


def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        apply_measuring(DISK, SEEKER, POIS, True, method="guess")
