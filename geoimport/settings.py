"""Settings of the OSM importer: configuration files overridden by command line."""

from __future__ import annotations

import argparse
import json
import logging
import re
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from geoimport.poi import PoiConfig, PoiConfigError

log = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "osm2mimir-default"
_CONFIG_EXTENSIONS = (".toml", ".json")
_UINT_PATTERN = re.compile(r"\+?[0-9]+")
_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


class SettingsError(ValueError):
    """Raised when the settings cannot be built."""


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, Mapping):
        raise SettingsError(f"invalid {where}: expected a table")
    if key not in data or data[key] is None:
        raise SettingsError(f"missing field `{key}` in {where}")
    return data[key]


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise SettingsError(f"invalid section `{key}`: expected a table")
    return value


def _as_str(value: Any, key: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise SettingsError(f"invalid type for `{key}`: expected a string")
    return str(value)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise SettingsError(f"invalid type for `{key}`: expected a boolean")


def _as_uint(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"invalid type for `{key}`: expected an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _UINT_PATTERN.fullmatch(value.strip()):
        number = int(value.strip())
    else:
        raise SettingsError(f"invalid type for `{key}`: expected an integer")
    if number < 0:
        raise SettingsError(f"invalid value for `{key}`: expected a non-negative integer")
    return number


def _as_list(value: Any, key: str) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        raise SettingsError(f"invalid type for `{key}`: expected a list")
    return list(value)


def _optional_str_list(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    return [_as_str(item, key) for item in _as_list(value, key)]


@dataclass(frozen=True)
class StreetExclusion:
    """Highway and public_transport tag values that disqualify a street."""

    highway: list[str] | None = None
    public_transport: list[str] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StreetExclusion:
        return cls(
            highway=_optional_str_list(data, "highway"),
            public_transport=_optional_str_list(data, "public_transport"),
        )


@dataclass(frozen=True)
class StreetSettings:
    import_: bool
    exclusion: StreetExclusion

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StreetSettings:
        exclusion = _require(data, "exclusion", "street")
        if not isinstance(exclusion, Mapping):
            raise SettingsError("invalid section `street.exclusion`: expected a table")
        return cls(
            import_=_as_bool(_require(data, "import", "street"), "street.import"),
            exclusion=StreetExclusion.from_mapping(exclusion),
        )


@dataclass(frozen=True)
class AdminSettings:
    import_: bool
    levels: list[int]
    city_level: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AdminSettings:
        levels = _as_list(_require(data, "levels", "admin"), "admin.levels")
        return cls(
            import_=_as_bool(_require(data, "import", "admin"), "admin.import"),
            levels=[_as_uint(level, "admin.levels") for level in levels],
            city_level=_as_uint(_require(data, "city_level", "admin"), "admin.city_level"),
        )


@dataclass(frozen=True)
class PoiSettings:
    import_: bool
    config: PoiConfig | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PoiSettings:
        raw_config = data.get("config")
        config = None if raw_config is None else PoiConfig.from_dict(raw_config)
        return cls(
            import_=_as_bool(_require(data, "import", "poi"), "poi.import"),
            config=config,
        )


@dataclass(frozen=True)
class Database:
    """Where to keep OSM objects on disk while reading, and how many to buffer."""

    file: Path
    buffer_size: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Database:
        return cls(
            file=Path(_as_str(_require(data, "file", "database"), "database.file")),
            buffer_size=_as_uint(
                _require(data, "buffer_size", "database"), "database.buffer_size"
            ),
        )


_ELASTICSEARCH_COUNTS = (
    "insert_thread_count",
    "streets_shards",
    "streets_replicas",
    "admins_shards",
    "admins_replicas",
    "pois_shards",
    "pois_replicas",
)


@dataclass(frozen=True)
class Elasticsearch:
    connection_string: str
    insert_thread_count: int
    streets_shards: int
    streets_replicas: int
    admins_shards: int
    admins_replicas: int
    pois_shards: int
    pois_replicas: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Elasticsearch:
        counts = {
            name: _as_uint(_require(data, name, "elasticsearch"), f"elasticsearch.{name}")
            for name in _ELASTICSEARCH_COUNTS
        }
        connection = _require(data, "connection_string", "elasticsearch")
        return cls(
            connection_string=_as_str(connection, "elasticsearch.connection_string"),
            **counts,
        )


@dataclass(frozen=True)
class Settings:
    """The whole importer configuration."""

    dataset: str
    elasticsearch: Elasticsearch
    database: Database | None = None
    street: StreetSettings | None = None
    poi: PoiSettings | None = None
    admin: AdminSettings | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Settings:
        """Build the settings from a nested mapping, checking every field."""
        try:
            elasticsearch = _require(data, "elasticsearch", "settings")
            if not isinstance(elasticsearch, Mapping):
                raise SettingsError("invalid section `elasticsearch`: expected a table")
            database = _section(data, "database")
            street = _section(data, "street")
            poi = _section(data, "poi")
            admin = _section(data, "admin")
            return cls(
                dataset=_as_str(_require(data, "dataset", "settings"), "dataset"),
                elasticsearch=Elasticsearch.from_mapping(elasticsearch),
                database=None if database is None else Database.from_mapping(database),
                street=None if street is None else StreetSettings.from_mapping(street),
                poi=None if poi is None else PoiSettings.from_mapping(poi),
                admin=None if admin is None else AdminSettings.from_mapping(admin),
            )
        except (SettingsError, PoiConfigError) as exc:
            raise SettingsError(
                f"Could not generate settings from configuration: {exc}"
            ) from exc


@dataclass
class Args:
    """Command line options; every one left unset keeps the configured value."""

    input: Path
    level: list[int] | None = None
    city_level: int | None = None
    connection_string: str | None = None
    import_way: bool | None = None
    import_admin: bool | None = None
    import_poi: bool | None = None
    dataset: str | None = None
    nb_admin_shards: int | None = None
    nb_admin_replicas: int | None = None
    nb_street_shards: int | None = None
    nb_street_replicas: int | None = None
    nb_poi_shards: int | None = None
    nb_poi_replicas: int | None = None
    db_file: Path | None = None
    db_buffer_size: int | None = None
    nb_insert_threads: int | None = None
    config_dir: Path | None = None
    settings: str | None = None

    def collect(self) -> dict[str, Any]:
        """The options that were given, keyed by their dotted configuration path."""
        pairs: list[tuple[str, Any]] = [
            ("dataset", self.dataset),
            ("admin.import", self.import_admin),
            ("admin.city_level", self.city_level),
            ("admin.levels", None if self.level is None else list(self.level)),
            ("street.import", self.import_way),
            ("poi.import", self.import_poi),
            ("elasticsearch.connection_string", self.connection_string),
            ("elasticsearch.streets_shards", self.nb_street_shards),
            ("elasticsearch.streets_replicas", self.nb_street_replicas),
            ("elasticsearch.pois_shards", self.nb_poi_shards),
            ("elasticsearch.pois_replicas", self.nb_poi_replicas),
            ("elasticsearch.admins_shards", self.nb_admin_shards),
            ("elasticsearch.admins_replicas", self.nb_admin_replicas),
            ("elasticsearch.insert_thread_count", self.nb_insert_threads),
            ("database.file", None if self.db_file is None else str(self.db_file)),
            ("database.buffer_size", self.db_buffer_size),
        ]
        return {key: value for key, value in pairs if value is not None}


def _bool_option(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise argparse.ArgumentTypeError(f"provided string was not `true` or `false`: {value!r}")


def _uint_option(value: str) -> int:
    if not _UINT_PATTERN.fullmatch(value):
        raise argparse.ArgumentTypeError(f"invalid digit found in string: {value!r}")
    return int(value)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import OSM data into the geocoding index.")
    add = parser.add_argument
    add("-i", "--input", type=Path, required=True, help="OSM PBF file.")
    add("-l", "--level", type=_uint_option, action="append", help="Admin levels to keep.")
    add("-C", "--city-level", type=_uint_option, help="City level to calculate weight.")
    add("-c", "--connection-string", help="Elasticsearch parameters.")
    add("-w", "--import-way", type=_bool_option, help="Import ways.")
    add("-a", "--import-admin", type=_bool_option, help="Import admins.")
    add("-p", "--import-poi", type=_bool_option, help="Import POIs.")
    add("-d", "--dataset", help="Name of the dataset.")
    add("--nb-admin-shards", type=_uint_option, help="Number of shards for the admin index.")
    add("--nb-admin-replicas", type=_uint_option, help="Number of replicas for the admin index.")
    add("--nb-street-shards", type=_uint_option, help="Number of shards for the street index.")
    add("--nb-street-replicas", type=_uint_option, help="Number of replicas for the street index.")
    add("--nb-poi-shards", type=_uint_option, help="Number of shards for the poi index.")
    add("--nb-poi-replicas", type=_uint_option, help="Number of replicas for the poi index.")
    add("--db-file", type=Path, help="SQLite file used to store OSM objects while reading.")
    add("--db-buffer-size", type=_uint_option, help="DB buffer size.")
    add(
        "-T",
        "--nb-insert-threads",
        type=_uint_option,
        help="Number of threads used to insert into Elasticsearch.",
    )
    add("-D", "--config-dir", type=Path, help="Path to the config directory.")
    add(
        "-s",
        "--settings",
        help="Specific configuration, on top of the default one (basename in config-dir).",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Args:
    """Parse the command line; exits with a usage message on bad input."""
    namespace = _build_parser().parse_args(argv)
    return Args(**vars(namespace))


def _find_config_file(base: Path) -> Path | None:
    if base.is_file():
        return base
    for extension in _CONFIG_EXTENSIONS:
        candidate = base.with_name(base.name + extension)
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        if path.suffix == ".json":
            with path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        else:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
    except (OSError, ValueError) as exc:
        raise SettingsError(f"Could not read configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Configuration file {path} does not hold a table")
    return data


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        elif isinstance(value, Mapping):
            target[key] = {}
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _set_path(target: dict[str, Any], dotted_key: str, value: Any) -> None:
    *parents, leaf = dotted_key.split(".")
    for part in parents:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[leaf] = value


def load_settings(args: Args) -> Settings:
    """Merge the default configuration, the specific one, then the command line."""
    config: dict[str, Any] = {}
    if args.config_dir is not None:
        config_dir = Path(args.config_dir)
        default_base = config_dir / DEFAULT_CONFIG_NAME
        log.info("using configuration from %s", default_base)
        default_path = _find_config_file(default_base)
        if default_path is not None:
            _deep_merge(config, _read_config_file(default_path))
        if args.settings is not None:
            specific_base = config_dir / args.settings
            log.info("using configuration from %s", specific_base)
            specific_path = _find_config_file(specific_base)
            if specific_path is None:
                raise SettingsError(
                    f"Could not merge {args.settings} configuration in file "
                    f"{specific_base}: configuration file not found"
                )
            _deep_merge(config, _read_config_file(specific_path))
    elif args.settings is not None:
        log.warning(
            "settings option used without the 'config_dir' option. "
            "Please set the config directory with --config-dir."
        )
        raise SettingsError("Could not build program settings")

    for key, value in args.collect().items():
        _set_path(config, key, value)
    return Settings.from_mapping(config)