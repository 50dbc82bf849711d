"""Helpers extracting coordinates, codes and names from OSM objects."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from geoimport.osm_store import Kind, MemoryStore, Node, OsmId, SqliteStore, Way
from geoimport.utils import Code, Coord, Property

NAME_TAG_PREFIX = "name:"

# A boundary is a list of polygons; a polygon is a list of rings (the exterior
# first, then the holes); a ring is a list of (x, y) points.
Point = tuple[float, float]
Ring = Sequence[Point]
Polygon = Sequence[Ring]
MultiPolygon = Sequence[Polygon]


def get_way_coord(store: MemoryStore | SqliteStore, way: Way) -> Coord:
    """A coordinate on the way, taken from a middle node rather than the first."""
    for node_id in way.nodes[len(way.nodes) // 2:]:
        obj = store.get(OsmId(Kind.NODE, node_id))
        if isinstance(obj, Node):
            return Coord(obj.lon, obj.lat)
    return Coord()


def _ring_moments(ring: Ring) -> tuple[float, float, float]:
    points = list(ring)
    area2 = mx = my = 0.0
    for (x0, y0), (x1, y1) in zip(points, points[1:] + points[:1]):
        cross = x0 * y1 - x1 * y0
        area2 += cross
        mx += (x0 + x1) * cross
        my += (y0 + y1) * cross
    area = area2 / 2.0
    mx /= 6.0
    my /= 6.0
    if area < 0:
        return -area, -mx, -my
    return area, mx, my


def _centroid(boundary: MultiPolygon) -> Point | None:
    total_area = total_mx = total_my = 0.0
    for polygon in boundary:
        for index, ring in enumerate(polygon):
            area, mx, my = _ring_moments(ring)
            sign = 1.0 if index == 0 else -1.0
            total_area += sign * area
            total_mx += sign * mx
            total_my += sign * my
    if total_area != 0.0:
        return total_mx / total_area, total_my / total_area

    rings = [list(ring) for polygon in boundary for ring in polygon]
    length = lx = ly = 0.0
    for points in rings:
        for (x0, y0), (x1, y1) in zip(points, points[1:]):
            segment = math.hypot(x1 - x0, y1 - y0)
            length += segment
            lx += segment * (x0 + x1) / 2.0
            ly += segment * (y0 + y1) / 2.0
    if length != 0.0:
        return lx / length, ly / length

    points = [p for ring in rings for p in ring]
    if not points:
        return None
    return (
        sum(x for x, _ in points) / len(points),
        sum(y for _, y in points) / len(points),
    )


def make_centroid(boundary: MultiPolygon | None) -> Coord:
    """Centroid of the boundary, or the default coordinate if none is valid."""
    if boundary is None:
        return Coord()
    center = _centroid(boundary)
    if center is None:
        return Coord()
    coord = Coord(center[0], center[1])
    return coord if coord.is_valid() else Coord()


def get_osm_codes_from_tags(tags: Mapping[str, str]) -> list[Code]:
    """ISO3166, ``ref:*`` and wikidata codes found in the tags, sorted by key."""
    return [
        Code(key, value)
        for key, value in sorted(tags.items())
        if key.startswith("ISO3166") or key.startswith("ref:") or key == "wikidata"
    ]


def get_names_from_tags(tags: Mapping[str, str], langs: Sequence[str]) -> list[Property]:
    """Localized names (``name:<lang>``) for the wanted languages, sorted by key."""
    names = (
        Property(key[len(NAME_TAG_PREFIX):], value)
        for key, value in sorted(tags.items())
        if key.startswith(NAME_TAG_PREFIX)
    )
    return [prop for prop in names if prop.key in langs]