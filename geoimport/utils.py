"""Core geographic records and helpers shared by the importers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

ADMIN_MAX_WEIGHT = 1_400_000_000.0  # China's population
COUNTRY_CODE_NAME = "ISO3166-1:alpha2"


@dataclass(frozen=True)
class Coord:
    """A WGS84 position; (0, 0) stands for "no coordinate"."""

    lon: float = 0.0
    lat: float = 0.0

    def is_default(self) -> bool:
        return self.lon == 0.0 and self.lat == 0.0

    def is_valid(self) -> bool:
        return (
            not self.is_default()
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lon <= 180.0
        )


@dataclass(frozen=True, order=True)
class Code:
    """A named external code attached to a place (ISO, INSEE, wikidata...)."""

    name: str
    value: str


@dataclass(frozen=True, order=True)
class Property:
    """A free key/value property."""

    key: str
    value: str


class ZoneType(IntEnum):
    """Kinds of administrative zones, from the smallest to the largest."""

    SUBURB = 0
    CITY_DISTRICT = 1
    CITY = 2
    STATE_DISTRICT = 3
    STATE = 4
    COUNTRY_REGION = 5
    COUNTRY = 6
    NON_ADMINISTRATIVE = 7


@dataclass
class Admin:
    """An administrative region."""

    id: str
    level: int
    name: str
    label: str = ""
    insee: str = ""
    zip_codes: list[str] = field(default_factory=list)
    weight: float = 0.0
    coord: Coord = field(default_factory=Coord)
    zone_type: ZoneType | None = None
    codes: list[Code] = field(default_factory=list)
    country_codes: list[str] = field(default_factory=list)
    boundary: list | None = None
    bbox: tuple[float, float, float, float] | None = None
    parent_id: str | None = None
    names: list[Property] = field(default_factory=list)
    labels: list[Property] = field(default_factory=list)

    def is_city(self) -> bool:
        return self.zone_type == ZoneType.CITY


def get_zip_codes_from_admins(admins: Iterable[Admin]) -> list[str]:
    """Zip codes of the deepest admin level that has any."""
    admins = list(admins)
    level = 0
    for admin in admins:
        if admin.level > level and admin.zip_codes:
            level = admin.level
    if level == 0:
        return []
    return [zip_code for admin in admins if admin.level == level for zip_code in admin.zip_codes]


def normalize_weight(weight: float, max_weight: float) -> float:
    """Scale ``weight`` by ``max_weight``, capped at 1."""
    w = weight / max_weight
    return 1.0 if w > 1.0 else w


def normalize_admin_weight(admins: Iterable[Admin]) -> None:
    """Normalize, in place, the weight of each admin into [0, 1]."""
    for admin in admins:
        admin.weight = normalize_weight(admin.weight, ADMIN_MAX_WEIGHT)


def get_country_code(codes: Sequence[Code]) -> str | None:
    """The ISO 3166-1 alpha-2 code among ``codes``, if any."""
    return next((code.value for code in codes if code.name == COUNTRY_CODE_NAME), None)


def find_country_codes(admins: Iterable[Admin]) -> list[str]:
    """Country codes carried by the given admins, in order."""
    return [code for admin in admins if (code := get_country_code(admin.codes)) is not None]