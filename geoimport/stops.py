"""Public transport stops: weights, per-dataset preparation and merging."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from geoimport.utils import Admin, Code, Coord, Property

GLOBAL_STOP_INDEX_NAME = "munin_global_stops"

# Factor bringing the admin weight to the same order of magnitude as the stop weight.
ADMIN_WEIGHT_FACTOR = 1024.0

_MERGED_FIELDS = (
    "codes",
    "physical_modes",
    "commercial_modes",
    "coverages",
    "properties",
    "feed_publishers",
)


@dataclass
class Stop:
    """A public transport stop area."""

    id: str
    name: str
    coord: Coord = field(default_factory=Coord)
    label: str = ""
    weight: float = 0.0
    coverages: list[str] = field(default_factory=list)
    codes: list[Code] = field(default_factory=list)
    physical_modes: list[Any] = field(default_factory=list)
    commercial_modes: list[Any] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    feed_publishers: list[Any] = field(default_factory=list)
    administrative_regions: list[Admin] = field(default_factory=list)
    zip_codes: list[str] = field(default_factory=list)
    country_codes: list[str] = field(default_factory=list)


def initialize_weights(stops: Iterable[Stop], nb_stop_points: Mapping[str, int]) -> None:
    """Set, in place, each stop's weight to its stop point count over the largest count."""
    max_count = float(max(nb_stop_points.values(), default=1))
    for stop in stops:
        count = nb_stop_points.get(stop.id)
        if count is None:
            stop.weight = 0.0
        elif max_count == 0.0:
            stop.weight = math.nan
        else:
            stop.weight = count / max_count


def merge_collection(target: Iterable[Any], source: Iterable[Any]) -> list[Any]:
    """The sorted, duplicate-free union of both collections."""
    return sorted({*target, *source})


def merge_stops(stops: Iterable[Stop]) -> Iterator[Stop]:
    """Merge stops sharing an id.

    The first stop seen for an id gives the data; the collections of all the
    stops with that id are merged together.
    """
    merged: dict[str, Stop] = {}
    for stop in stops:
        current = merged.get(stop.id)
        if current is None:
            current = replace(stop, **{name: [] for name in _MERGED_FIELDS})
            merged[stop.id] = current
        for name in _MERGED_FIELDS:
            setattr(current, name, merge_collection(getattr(current, name), getattr(stop, name)))
    return iter(merged.values())


def prepare_stops(stops: Iterable[Stop], dataset: str) -> None:
    """Tag each stop, in place, with the dataset and blend its weight with its city's."""
    for stop in stops:
        stop.coverages.append(dataset)
        admin_weight = next(
            (admin.weight for admin in stop.administrative_regions if admin.is_city()), 0.0
        )
        # A log compresses the distance between low admin weights and high ones.
        admin_weight = math.log10(admin_weight * ADMIN_WEIGHT_FACTOR + 1.0)
        stop.weight = (stop.weight + admin_weight) / 2.0