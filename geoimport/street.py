"""Streets: which OSM objects are streets, where they lie and how they are named."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from geoimport.osm_store import Kind, MemoryStore, Node, OsmId, Relation, SqliteStore, Way
from geoimport.utils import Admin, Coord

AdminLookup = Callable[[Coord], list[list[Admin]]]


@dataclass
class Street:
    """A street document."""

    id: str
    name: str
    coord: Coord = field(default_factory=Coord)
    label: str = ""
    weight: float = 0.0
    zip_codes: list[str] = field(default_factory=list)
    administrative_regions: list[Admin] = field(default_factory=list)
    country_codes: list[str] = field(default_factory=list)


def is_valid_street_object(
    obj: Node | Way | Relation,
    invalid_highways: Sequence[str] = (),
    invalid_public_transports: Sequence[str] = (),
) -> bool:
    """A named way with an accepted highway tag, or an associatedStreet relation."""
    match obj:
        case Way(tags=tags):
            highway = tags.get("highway")
            has_valid_highway = bool(highway) and highway not in invalid_highways
            public_transport = tags.get("public_transport")
            has_no_excluded_public_transport = (
                public_transport is None or public_transport not in invalid_public_transports
            )
            has_valid_name = bool(tags.get("name"))
            return has_valid_name and has_valid_highway and has_no_excluded_public_transport
        case Relation(tags=tags):
            return tags.get("type") == "associatedStreet"
        case _:
            return False


def get_street_admins(
    store: MemoryStore | SqliteStore, way: Way, admin_lookup: AdminLookup
) -> list[list[Admin]]:
    """Branches of admins encompassing the way.

    The lookup is done preferably on a middle node, to avoid corner cases where
    the ends of the way lie near an administrative boundary.
    """
    middle = len(way.nodes) // 2
    for node_id in [*way.nodes[middle:], *way.nodes[:middle]]:
        obj = store.get(OsmId(Kind.NODE, node_id))
        if isinstance(obj, Node):
            return admin_lookup(Coord(obj.lon, obj.lat))
    return []


def street_document_ids(kind: str, osm_id: int, count: int) -> list[str]:
    """Ids of the ``count`` documents of one street, one per admin hierarchy."""
    base = f"street:osm:{kind}:{osm_id}"
    if count <= 1:
        return [base] * count
    return [f"{base}-{index}" for index in range(count)]


def compute_street_weight(streets: Iterable[Street]) -> None:
    """Give each street, in place, the weight of its city, if it has one."""
    for street in streets:
        city = next((a for a in street.administrative_regions if a.is_city()), None)
        if city is not None:
            street.weight = city.weight