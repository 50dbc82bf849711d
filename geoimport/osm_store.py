"""OSM objects and the stores that hold them while a file is being read."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


class Kind(IntEnum):
    """Kind of an OSM object."""

    NODE = 0
    WAY = 1
    RELATION = 2


@dataclass(frozen=True, order=True)
class OsmId:
    """Identifier of an OSM object: its kind and its numeric id."""

    kind: Kind
    id: int

    def is_node(self) -> bool:
        return self.kind == Kind.NODE

    def is_way(self) -> bool:
        return self.kind == Kind.WAY

    def is_relation(self) -> bool:
        return self.kind == Kind.RELATION


@dataclass
class Node:
    id: int
    lat: float
    lon: float
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> Kind:
        return Kind.NODE

    @property
    def osm_id(self) -> OsmId:
        return OsmId(Kind.NODE, self.id)


@dataclass
class Way:
    id: int
    nodes: list[int] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> Kind:
        return Kind.WAY

    @property
    def osm_id(self) -> OsmId:
        return OsmId(Kind.WAY, self.id)


@dataclass
class Reference:
    member: OsmId
    role: str = ""


@dataclass
class Relation:
    id: int
    refs: list[Reference] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> Kind:
        return Kind.RELATION

    @property
    def osm_id(self) -> OsmId:
        return OsmId(Kind.RELATION, self.id)


OsmObject = Node | Way | Relation


def _encode(obj: OsmObject) -> bytes:
    data: dict[str, Any]
    match obj:
        case Node():
            data = {"id": obj.id, "lat": obj.lat, "lon": obj.lon, "tags": obj.tags}
        case Way():
            data = {"id": obj.id, "nodes": obj.nodes, "tags": obj.tags}
        case Relation():
            data = {
                "id": obj.id,
                "refs": [[int(r.member.kind), r.member.id, r.role] for r in obj.refs],
                "tags": obj.tags,
            }
        case _:
            raise TypeError(f"not an OSM object: {obj!r}")
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def _decode(kind: int, blob: bytes) -> OsmObject:
    data = json.loads(blob)
    match Kind(kind):
        case Kind.NODE:
            return Node(data["id"], data["lat"], data["lon"], data["tags"])
        case Kind.WAY:
            return Way(data["id"], data["nodes"], data["tags"])
        case Kind.RELATION:
            refs = [Reference(OsmId(Kind(k), i), role) for k, i, role in data["refs"]]
            return Relation(data["id"], refs, data["tags"])


class MemoryStore:
    """OSM objects kept in memory, iterated in id order."""

    def __init__(self) -> None:
        self._objects: dict[OsmId, OsmObject] = {}

    def insert(self, obj: OsmObject) -> None:
        self._objects[obj.osm_id] = obj

    def get(self, osm_id: OsmId) -> OsmObject | None:
        return self._objects.get(osm_id)

    def contains(self, osm_id: OsmId) -> bool:
        return osm_id in self._objects

    def __contains__(self, osm_id: object) -> bool:
        return osm_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def iter_kind(self, kind: Kind) -> Iterator[OsmObject]:
        return (obj for obj in self if obj.kind == kind)

    def __iter__(self) -> Iterator[OsmObject]:
        for key in sorted(self._objects):
            yield self._objects[key]


class SqliteStore:
    """OSM objects kept in a temporary SQLite file, behind a write buffer.

    The file is removed when the store is opened and again when it is closed.
    """

    def __init__(self, path: str | os.PathLike[str], buffer_size: int) -> None:
        self.path = Path(path)
        self.buffer_size = buffer_size
        self._buffer: dict[OsmId, OsmObject] = {}
        self.path.unlink(missing_ok=True)
        self._conn = sqlite3.connect(self.path)
        self._conn.execute(
            """CREATE TABLE ids (
                id   INTEGER NOT NULL,
                obj  BLOB NOT NULL,
                kind INTEGER NOT NULL,
                UNIQUE(id, kind)
            )"""
        )
        self._conn.commit()

    def insert(self, obj: OsmObject) -> None:
        if len(self._buffer) >= self.buffer_size:
            self.flush()
        self._buffer[obj.osm_id] = obj

    def get(self, osm_id: OsmId) -> OsmObject | None:
        if (obj := self._buffer.get(osm_id)) is not None:
            return obj
        row = self._conn.execute(
            "SELECT obj FROM ids WHERE id=?1 AND kind=?2", (osm_id.id, int(osm_id.kind))
        ).fetchone()
        return None if row is None else _decode(osm_id.kind, row[0])

    def contains(self, osm_id: OsmId) -> bool:
        if osm_id in self._buffer:
            return True
        row = self._conn.execute(
            "SELECT id FROM ids WHERE id=?1 AND kind=?2", (osm_id.id, int(osm_id.kind))
        ).fetchone()
        return row is not None

    def __contains__(self, osm_id: object) -> bool:
        return isinstance(osm_id, OsmId) and self.contains(osm_id)

    def iter_kind(self, kind: Kind) -> Iterator[OsmObject]:
        buffered = [obj for obj in self._buffer.values() if obj.kind == kind]
        yield from buffered
        rows = self._conn.execute(
            "SELECT kind, obj FROM ids WHERE kind=?1 ORDER BY id", (int(kind),)
        ).fetchall()
        for row_kind, blob in rows:
            yield _decode(row_kind, blob)

    def __iter__(self) -> Iterator[OsmObject]:
        buffered = list(self._buffer.values())
        yield from buffered
        rows = self._conn.execute("SELECT kind, obj FROM ids ORDER BY kind, id").fetchall()
        for row_kind, blob in rows:
            yield _decode(row_kind, blob)

    def flush(self) -> None:
        """Write the buffered objects to the database."""
        if not self._buffer:
            return
        records = [
            (osm_id.id, _encode(obj), int(obj.kind)) for osm_id, obj in self._buffer.items()
        ]
        self._buffer.clear()
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO ids(id, obj, kind) VALUES (?1, ?2, ?3)", records
            )

    def close(self) -> None:
        """Close the database and remove its file."""
        self._conn.close()
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> SqliteStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def open_store(database: Any = None) -> MemoryStore | SqliteStore:
    """Open an in-memory store, or a SQLite one when ``database`` gives a file.

    ``database`` is any object with ``file`` and ``buffer_size`` attributes.
    """
    if database is None:
        log.info("Running with in-memory storage")
        return MemoryStore()
    log.info("Running with SQLite storage")
    return SqliteStore(database.file, database.buffer_size)


def tags_of(obj: OsmObject) -> Mapping[str, str]:
    """The tags of any OSM object."""
    return obj.tags