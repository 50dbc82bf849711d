import pytest

from geoimport.osm_store import MemoryStore, Node, Way
from geoimport.osm_utils import (
    get_names_from_tags,
    get_osm_codes_from_tags,
    get_way_coord,
    make_centroid,
)
from geoimport.utils import Code, Coord, Property


def _square(cx, cy, half):
    return [
        (cx - half, cy - half),
        (cx + half, cy - half),
        (cx + half, cy + half),
        (cx - half, cy + half),
        (cx - half, cy - half),
    ]


def _store(*nodes):
    store = MemoryStore()
    for node in nodes:
        store.insert(node)
    return store


def test_way_coord_uses_middle_node():
    store = _store(Node(1, 48.1, 2.1), Node(2, 48.2, 2.2), Node(3, 48.3, 2.3), Node(4, 48.4, 2.4))
    assert get_way_coord(store, Way(10, [1, 2, 3, 4])) == Coord(2.3, 48.3)


def test_way_coord_skips_missing_nodes():
    store = _store(Node(1, 48.1, 2.1), Node(4, 48.4, 2.4))
    assert get_way_coord(store, Way(10, [1, 2, 3, 4])) == Coord(2.4, 48.4)


def test_way_coord_ignores_first_half():
    store = _store(Node(1, 48.1, 2.1), Node(2, 48.2, 2.2))
    assert get_way_coord(store, Way(10, [1, 2, 3, 4])).is_default()
    assert get_way_coord(store, Way(11, [])) == Coord()


def test_centroid_of_none_or_empty_is_default():
    assert make_centroid(None) == Coord()
    assert make_centroid([]) == Coord()


def test_centroid_of_square():
    coord = make_centroid([[_square(2.5, 48.5, 0.5)]])
    assert coord.lon == pytest.approx(2.5)
    assert coord.lat == pytest.approx(48.5)


def test_centroid_with_centered_hole_and_reversed_ring():
    outer = list(reversed(_square(2.5, 48.5, 0.5)))
    hole = _square(2.5, 48.5, 0.1)
    coord = make_centroid([[outer, hole]])
    assert coord.lon == pytest.approx(2.5)
    assert coord.lat == pytest.approx(48.5)


def test_centroid_of_two_equal_squares_is_midpoint():
    coord = make_centroid([[_square(2.0, 48.0, 0.5)], [_square(4.0, 50.0, 0.5)]])
    assert coord.lon == pytest.approx((2.0 + 4.0) / 2)
    assert coord.lat == pytest.approx((48.0 + 50.0) / 2)


def test_centroid_out_of_range_is_default():
    assert make_centroid([[_square(2.0, 100.0, 0.5)]]) == Coord()


def test_osm_codes_from_tags():
    tags = {
        "name": "France hexagonale",
        "wikidata": "Q142",
        "ISO3166-1:alpha2": "FR",
        "ref:INSEE": "77288",
        "wikipedia": "fr:France",
        "ISO3166-1": "FR",
    }
    assert get_osm_codes_from_tags(tags) == [
        Code("ISO3166-1", "FR"),
        Code("ISO3166-1:alpha2", "FR"),
        Code("ref:INSEE", "77288"),
        Code("wikidata", "Q142"),
    ]
    assert get_osm_codes_from_tags({"name": "x"}) == []


def test_names_from_tags():
    tags = {
        "name": "Colosseo",
        "name:fr": "Colisée",
        "name:es": "Coliseo",
        "name:it": "Colosseo",
    }
    assert get_names_from_tags(tags, ["fr", "es"]) == [
        Property("es", "Coliseo"),
        Property("fr", "Colisée"),
    ]
    assert get_names_from_tags(tags, []) == []