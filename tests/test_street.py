import pytest

from geoimport.osm_store import Kind, MemoryStore, Node, OsmId, Reference, Relation, Way
from geoimport.street import (
    Street,
    compute_street_weight,
    get_street_admins,
    is_valid_street_object,
    street_document_ids,
)
from geoimport.utils import Admin, Coord, ZoneType


@pytest.mark.parametrize(
    "tags, expected",
    [
        ({"highway": "residential", "name": "Rue des Près"}, True),
        ({"highway": "residential"}, False),
        ({"highway": "residential", "name": ""}, False),
        ({"highway": "", "name": "Rue des Près"}, False),
        ({"name": "Rue des Près"}, False),
        ({"highway": "bus_stop", "name": "Grand Châtelet"}, False),
        (
            {"highway": "residential", "name": "Rue", "public_transport": "platform"},
            False,
        ),
        (
            {"highway": "residential", "name": "Rue", "public_transport": "station"},
            True,
        ),
    ],
)
def test_way_validity(tags, expected):
    way = Way(1, [1, 2], tags)
    assert is_valid_street_object(way, ["bus_stop"], ["platform"]) is expected


def test_relation_validity():
    street = Relation(1, [Reference(OsmId(Kind.WAY, 2), "street")], {"type": "associatedStreet"})
    other = Relation(2, [], {"type": "multipolygon"})
    assert is_valid_street_object(street) is True
    assert is_valid_street_object(other) is False


def test_node_is_never_a_street():
    node = Node(1, 48.5, 2.6, {"highway": "residential", "name": "Rue"})
    assert is_valid_street_object(node) is False


def _store(*nodes):
    store = MemoryStore()
    for node in nodes:
        store.insert(node)
    return store


def test_get_street_admins_uses_middle_node():
    store = _store(Node(1, 48.1, 2.1), Node(2, 48.2, 2.2), Node(3, 48.3, 2.3))
    seen = []
    city = Admin("admin:fr:77288", 8, "Melun", zone_type=ZoneType.CITY)

    def lookup(coord):
        seen.append(coord)
        return [[city]]

    result = get_street_admins(store, Way(10, [1, 2, 3]), lookup)
    assert result == [[city]]
    assert seen == [Coord(2.2, 48.2)]


def test_get_street_admins_falls_back_to_other_nodes():
    store = _store(Node(1, 48.1, 2.1), Node(3, 48.3, 2.3))
    seen = []
    get_street_admins(store, Way(10, [1, 9, 3]), lambda c: seen.append(c) or [])
    assert seen == [Coord(2.3, 48.3)]

    seen.clear()
    get_street_admins(store, Way(11, [1, 8, 9]), lambda c: seen.append(c) or [])
    assert seen == [Coord(2.1, 48.1)]


def test_get_street_admins_without_known_nodes():
    calls = []
    result = get_street_admins(MemoryStore(), Way(10, [1, 2]), lambda c: calls.append(c) or [[]])
    assert result == []
    assert calls == []


def test_single_document_id_has_no_suffix():
    assert street_document_ids("way", 40812939, 1) == ["street:osm:way:40812939"]


def test_several_document_ids_are_suffixed_and_distinct():
    ids = street_document_ids("relation", 5, 3)
    assert len(set(ids)) == 3
    assert all(i.startswith("street:osm:relation:5-") for i in ids)
    assert ids[0] == "street:osm:relation:5-0"


def test_no_document_ids():
    assert street_document_ids("way", 5, 0) == []


def test_compute_street_weight():
    city = Admin("admin:city", 8, "City", weight=0.42, zone_type=ZoneType.CITY)
    region = Admin("admin:region", 4, "Region", weight=0.9, zone_type=ZoneType.STATE)
    with_city = Street("s1", "S1", administrative_regions=[region, city])
    without_city = Street("s2", "S2", weight=0.1, administrative_regions=[region])
    compute_street_weight([with_city, without_city])
    assert with_city.weight == city.weight
    assert without_city.weight == 0.1