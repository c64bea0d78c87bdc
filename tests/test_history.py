import pytest

from seekarea.history import (
    MatchingEntry,
    MeasuringEntry,
    PoiWithinEntry,
    RadarEntry,
    RegionMatchingEntry,
    SetAreaEntry,
    SetCountryEntry,
    ThermometerEntry,
    describe_entry,
    entry_to_dict,
)


ENTRIES = [
    SetCountryEntry(iso_a2="FR", name="France"),
    SetAreaEntry(label="Paris"),
    RadarEntry(radius_miles=5.0, hit=True, seeker=(2.35, 48.85)),
    ThermometerEntry(hotter=False, start=(0.0, 0.0), end=(0.0, 0.01), distance_m=1112.0),
    MatchingEntry(kind="hospital", answer_yes=True, strategy="voronoi", feature_count=4, percent_remaining=42.0),
    MeasuringEntry(kind="museum", closer=True, method="exact", poi_count=3, seeker_distance_m=800.0, epsilon_m=25.0),
    PoiWithinEntry(kind="zoo", radius_miles=1.0, answer_yes=False, poi_count=0),
    RegionMatchingEntry(level="state", answer_yes=True, seeker_region="ile-de-france"),
]


@pytest.mark.parametrize("entry", ENTRIES, ids=lambda e: e.KIND)
def test_every_entry_has_a_description(entry):
    text = describe_entry(entry)
    assert text
    assert "no possible area" not in text


@pytest.mark.parametrize("entry", ENTRIES, ids=lambda e: e.KIND)
def test_entry_dict_carries_type_and_metadata(entry):
    data = entry_to_dict(entry)
    assert data["type"] == entry.KIND
    assert data["entry_id"] == entry.entry_id
    assert isinstance(data["ts"], float)


def test_entries_get_unique_ids():
    first = SetAreaEntry(label="a")
    second = SetAreaEntry(label="a")
    assert first.entry_id != second.entry_id


def test_empty_outcome_is_mentioned():
    entry = RadarEntry(radius_miles=1.0, hit=False, seeker=(0.0, 0.0), empty=True)
    assert describe_entry(entry).endswith("(no possible area remains)")


def test_tuples_become_lists():
    data = entry_to_dict(RadarEntry(radius_miles=1.0, hit=True, seeker=(1.0, 2.0)))
    assert data["seeker"] == [1.0, 2.0]


def test_entries_are_frozen():
    entry = SetAreaEntry(label="x")
    with pytest.raises(AttributeError):
        entry.label = "y"


def test_unknown_entries_are_rejected():
    with pytest.raises(TypeError):
        describe_entry(object())
    with pytest.raises(TypeError):
        entry_to_dict({"type": "RADAR"})
