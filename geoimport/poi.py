"""Points of interest: the rules that classify OSM objects and the POI record."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import IO, Any

from geoimport.utils import Admin, Coord, Property


class PoiConfigError(ValueError):
    """Raised when a POI configuration cannot be read or is inconsistent."""


@dataclass(frozen=True)
class OsmTagsFilter:
    """A tag that must be present with this exact value."""

    key: str
    value: str


@dataclass(frozen=True)
class Rule:
    """All its filters must match for an object to get the POI type."""

    osm_tags_filters: list[OsmTagsFilter]
    poi_type_id: str


@dataclass(frozen=True)
class PoiType:
    id: str
    name: str


@dataclass
class Poi:
    """A point of interest."""

    id: str
    name: str
    coord: Coord
    poi_type: PoiType
    label: str = ""
    zip_codes: list[str] = field(default_factory=list)
    administrative_regions: list[Admin] = field(default_factory=list)
    weight: float = 0.0
    properties: list[Property] = field(default_factory=list)
    address: Any = None
    names: list[Property] = field(default_factory=list)
    labels: list[Property] = field(default_factory=list)
    country_codes: list[str] = field(default_factory=list)


def _field(data: Any, key: str, expected: type, what: str) -> Any:
    if not isinstance(data, dict):
        raise PoiConfigError(f"invalid {what}: expected an object")
    if key not in data:
        raise PoiConfigError(f"missing field `{key}` in {what}")
    value = data[key]
    if not isinstance(value, expected):
        raise PoiConfigError(f"invalid type for field `{key}` in {what}")
    return value


def _read_filter(data: Any) -> OsmTagsFilter:
    return OsmTagsFilter(
        key=_field(data, "key", str, "osm tags filter"),
        value=_field(data, "value", str, "osm tags filter"),
    )


def _read_rule(data: Any) -> Rule:
    filters = _field(data, "osm_tags_filters", list, "rule")
    return Rule(
        osm_tags_filters=[_read_filter(f) for f in filters],
        poi_type_id=_field(data, "type", str, "rule"),
    )


def _read_poi_type(data: Any) -> PoiType:
    return PoiType(
        id=_field(data, "id", str, "poi type"),
        name=_field(data, "name", str, "poi type"),
    )


@dataclass
class PoiConfig:
    """The POI types and the rules mapping OSM tags to them."""

    poi_types: list[PoiType]
    rules: list[Rule]

    @classmethod
    def from_dict(cls, data: Any) -> PoiConfig:
        """Build and check a configuration from its JSON-like form."""
        config = cls(
            poi_types=[_read_poi_type(t) for t in _field(data, "types", list, "poi config")],
            rules=[_read_rule(r) for r in _field(data, "rules", list, "poi config")],
        )
        config.check()
        return config

    @classmethod
    def from_reader(cls, reader: IO[str] | IO[bytes]) -> PoiConfig:
        """Read and check a JSON configuration from a file object."""
        try:
            data = json.load(reader)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PoiConfigError(f"invalid poi configuration: {exc}") from exc
        return cls.from_dict(data)

    def is_poi(self, tags: Mapping[str, str]) -> bool:
        return self.get_poi_type(tags) is not None

    def get_poi_id(self, tags: Mapping[str, str]) -> str | None:
        poi_type = self.get_poi_type(tags)
        return None if poi_type is None else poi_type.id

    def get_poi_type(self, tags: Mapping[str, str]) -> PoiType | None:
        """The type given by the first rule whose filters all match the tags."""
        rule = next(
            (
                rule
                for rule in self.rules
                if all(tags.get(f.key) == f.value for f in rule.osm_tags_filters)
            ),
            None,
        )
        if rule is None:
            return None
        return next((t for t in self.poi_types if t.id == rule.poi_type_id), None)

    def check(self) -> None:
        """Raise if a type id is declared twice or a rule uses an undeclared one."""
        ids: set[str] = set()
        for poi_type in self.poi_types:
            if poi_type.id in ids:
                raise PoiConfigError(
                    f"poi_type_id {json.dumps(poi_type.id)} present several times"
                )
            ids.add(poi_type.id)
        for rule in self.rules:
            if rule.poi_type_id not in ids:
                raise PoiConfigError(
                    f"poi_type_id {json.dumps(rule.poi_type_id)} in a rule not declared"
                )


def make_properties(tags: Mapping[str, str]) -> list[Property]:
    """Every tag as a property, sorted by key."""
    return [Property(key, value) for key, value in sorted(tags.items())]


def format_poi_id(osm_type: str, osm_id: int) -> str:
    return f"poi:osm:{osm_type}:{osm_id}"


def compute_poi_weight(pois: Iterable[Poi]) -> None:
    """Give each POI, in place, the weight of its city, if it has one."""
    for poi in pois:
        city = next((a for a in poi.administrative_regions if a.is_city()), None)
        if city is not None:
            poi.weight = city.weight