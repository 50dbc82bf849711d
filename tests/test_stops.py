import math

from geoimport.stops import (
    Stop,
    initialize_weights,
    merge_collection,
    merge_stops,
    prepare_stops,
)
from geoimport.utils import Admin, Code, ZoneType


def test_initialize_weights_scales_by_largest_count():
    stops = [Stop("a", "A"), Stop("b", "B"), Stop("c", "C")]
    initialize_weights(stops, {"a": 4, "b": 2})
    assert stops[0].weight == 1.0
    assert stops[1].weight == 2 / 4
    assert stops[2].weight == 0.0


def test_initialize_weights_stays_within_unit_range():
    counts = {"a": 7, "b": 3, "c": 11, "d": 1}
    stops = [Stop(key, key) for key in counts]
    initialize_weights(stops, counts)
    assert all(0.0 < stop.weight <= 1.0 for stop in stops)
    assert max(stop.weight for stop in stops) == 1.0


def test_initialize_weights_without_counts():
    stops = [Stop("a", "A")]
    stops[0].weight = 0.7
    initialize_weights(stops, {})
    assert stops[0].weight == 0.0


def test_merge_collection_sorts_and_deduplicates():
    assert merge_collection(["b", "a"], ["a", "c"]) == ["a", "b", "c"]


def test_merge_collection_with_codes():
    first = [Code("source", "stop_area:GDL"), Code("navitia1", "424242")]
    second = [Code("navitia2", "434343"), Code("source", "stop_area:GDL")]
    assert merge_collection(first, second) == [
        Code("navitia1", "424242"),
        Code("navitia2", "434343"),
        Code("source", "stop_area:GDL"),
    ]


def test_merge_stops_merges_coverages_and_keeps_first_data():
    first = Stop("stop_area:SA:known_by_all_dataset", "All known stop", coverages=["dataset1"])
    second = Stop(
        "stop_area:SA:known_by_all_dataset",
        "All known stop, but different name",
        coverages=["dataset2"],
    )
    other = Stop("stop_area:SA:second_station:dataset2", "Second", coverages=["dataset2"])
    merged = {stop.id: stop for stop in merge_stops([first, second, other])}
    assert len(merged) == 2
    known = merged["stop_area:SA:known_by_all_dataset"]
    assert known.coverages == ["dataset1", "dataset2"]
    assert known.name == "All known stop"
    assert merged["stop_area:SA:second_station:dataset2"].coverages == ["dataset2"]


def test_merge_stops_does_not_alter_inputs():
    first = Stop("x", "X", coverages=["dataset2", "dataset1"])
    second = Stop("x", "X", coverages=["dataset3"])
    list(merge_stops([first, second]))
    assert first.coverages == ["dataset2", "dataset1"]
    assert second.coverages == ["dataset3"]


def test_prepare_stops_without_city_halves_weight():
    region = Admin("admin:region", 4, "Region", weight=0.9, zone_type=ZoneType.STATE)
    stop = Stop("s", "S", weight=0.5, administrative_regions=[region])
    prepare_stops([stop], "dataset1")
    assert stop.weight == 0.5 / 2
    assert stop.coverages == ["dataset1"]


def test_prepare_stops_with_city_raises_weight():
    city = Admin("admin:city", 8, "City", weight=0.3, zone_type=ZoneType.CITY)
    with_city = Stop("s1", "S1", weight=0.5, administrative_regions=[city])
    without_city = Stop("s2", "S2", weight=0.5)
    prepare_stops([with_city, without_city], "dataset1")
    assert with_city.weight > without_city.weight
    assert math.isclose(2 * with_city.weight - 0.5, math.log10(0.3 * 1024.0 + 1.0))