"""Recognition of administrative boundaries and reading of their tags."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence

from geoimport.osm_store import Node, Relation, Way
from geoimport.utils import ZoneType

_U32_MAX = 2**32 - 1
_U32_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_level(value: str) -> int | None:
    """Parse an unsigned 32-bit admin level, or ``None`` if it is not one."""
    if not _U32_PATTERN.fullmatch(value):
        return None
    level = int(value)
    return level if level <= _U32_MAX else None


class AdminMatcher:
    """Tells whether an OSM object is an administrative region of a wanted level."""

    def __init__(self, levels: Iterable[int]) -> None:
        self.admin_levels = frozenset(levels)

    def is_admin(self, obj: Node | Way | Relation) -> bool:
        if not isinstance(obj, Relation):
            return False
        if obj.tags.get("boundary") != "administrative":
            return False
        level = obj.tags.get("admin_level")
        if level is None:
            return False
        parsed = _parse_level(level)
        return (0 if parsed is None else parsed) in self.admin_levels

    def __repr__(self) -> str:
        return f"AdminMatcher(levels={sorted(self.admin_levels)!r})"


def get_zone_type(level: int, city_level: int) -> ZoneType | None:
    """``ZoneType.CITY`` for the city level, nothing for any other level."""
    return ZoneType.CITY if level == city_level else None


def format_zip_codes(zip_codes: Sequence[str]) -> str:
    """Zip codes as a label suffix: `` (first)`` or `` (first-last)``."""
    if not zip_codes:
        return ""
    if len(zip_codes) == 1:
        return f" ({zip_codes[0]})"
    return f" ({zip_codes[0]}-{zip_codes[-1]})"


def read_zip_codes(tags: Mapping[str, str]) -> list[str]:
    """Sorted zip codes from ``addr:postcode``, or else from ``postal_code``."""
    zip_code = tags.get("addr:postcode")
    if zip_code is None:
        zip_code = tags.get("postal_code", "")
    return sorted(code for code in zip_code.split(";") if code)


def read_insee(tags: Mapping[str, str]) -> str | None:
    """The INSEE code of the region, if tagged."""
    return tags.get("ref:INSEE")