# geoimport

Building blocks for turning OpenStreetMap data and public transport stop lists
into documents for a geocoding index: administrative regions, streets, points
of interest and stops.

The package uses only the standard library.

## Modules

- `geoimport.utils`: core records (`Coord`, `Code`, `Property`, `ZoneType`,
  `Admin`) and helpers: `normalize_weight`, `normalize_admin_weight`,
  `get_zip_codes_from_admins`, `get_country_code`, `find_country_codes`.
- `geoimport.osm_store`: OSM objects (`OsmId`, `Node`, `Way`, `Relation`,
  `Reference`, `Kind`) and two stores with the same methods (`insert`, `get`,
  `contains`, `iter_kind`, iteration): the in-memory `MemoryStore` and the
  disk-backed `SqliteStore`. `open_store(database)` returns a `MemoryStore`
  when `database` is `None`, otherwise a `SqliteStore` built from its `file`
  and `buffer_size`.
- `geoimport.osm_utils`: `get_way_coord` (a coordinate from a middle node of a
  way), `make_centroid` (centroid of a multipolygon boundary),
  `get_osm_codes_from_tags` (ISO3166, `ref:*` and `wikidata` tags) and
  `get_names_from_tags` (`name:<lang>` tags for the wanted languages).
- `geoimport.admin`: `AdminMatcher` recognises `boundary=administrative`
  relations of the wanted levels; `get_zone_type`, `read_insee`,
  `read_zip_codes` and `format_zip_codes` read and format their tags.
- `geoimport.poi`: the `Poi` record, `PoiConfig` (POI types and the rules that
  map OSM tags to them, with validation), `make_properties`, `format_poi_id`
  and `compute_poi_weight`.
- `geoimport.street`: the `Street` record, `is_valid_street_object`,
  `get_street_admins`, `street_document_ids` and `compute_street_weight`.
- `geoimport.stops`: the `Stop` record, `initialize_weights`, `prepare_stops`
  (adds the dataset and blends in the city weight), `merge_collection` and
  `merge_stops` (merges stops of several datasets by id).
- `geoimport.settings`: `Settings` and its sections, `Args`, `parse_args` and
  `load_settings`.

## Examples

Postcodes and labels:

```python
from geoimport.admin import format_zip_codes, read_zip_codes

read_zip_codes({"addr:postcode": "77003;77000"})
# ['77000', '77003']
format_zip_codes(["77000", "77003", "CP77001"])
# ' (77000-CP77001)'
```

Weights are brought into `[0, 1]`:

```python
from geoimport.utils import normalize_weight

normalize_weight(700_000_000, 1_400_000_000)   # 0.5
normalize_weight(3_000_000_000, 1_400_000_000)  # 1.0
```

Matching POI types against OSM tags; the first rule whose filters all match
wins:

```python
import io
from geoimport.poi import PoiConfig

config = PoiConfig.from_reader(io.StringIO("""
{
  "types": [{"id": "poi_type:amenity:parking", "name": "Parking"}],
  "rules": [
    {
      "osm_tags_filters": [{"key": "amenity", "value": "parking"}],
      "type": "poi_type:amenity:parking"
    }
  ]
}
"""))
config.get_poi_id({"amenity": "parking"})  # 'poi_type:amenity:parking'
config.is_poi({"amenity": "bench"})        # False
```

A configuration that is not valid JSON, lacks a field, declares a type twice,
or has a rule pointing to an undeclared type raises `PoiConfigError`.

Storing OSM objects:

```python
from geoimport.osm_store import Kind, MemoryStore, Node

store = MemoryStore()
store.insert(Node(id=1, lon=2.65, lat=48.54, tags={"name": "Melun"}))
nodes = list(store.iter_kind(Kind.NODE))
```

`SqliteStore(path, buffer_size)` keeps up to `buffer_size` objects in memory
before writing them to the database. It removes its file when it is opened
and when it is closed, and works as a context manager.

Streets are split into one document per admin hierarchy:

```python
from geoimport.street import street_document_ids

street_document_ids("way", 42, 1)  # ['street:osm:way:42']
street_document_ids("way", 42, 2)  # ['street:osm:way:42-0', 'street:osm:way:42-1']
```

## Settings

`load_settings` starts from the configuration files in the directory given by
`--config-dir`: `osm2mimir-default` (`.toml` or `.json`), then, if
`--settings NAME` is given, the file `NAME` in that directory, merged on top.
Options given on the command line override both. There are no built-in
defaults: without a configuration directory, every required field must come
from the command line, and `--settings` without `--config-dir` is an error.
Any missing or ill-typed field raises `SettingsError`.

With a `config/osm2mimir-default.toml` such as:

```toml
dataset = "default"

[elasticsearch]
connection_string = "http://localhost:9200"
insert_thread_count = 1
streets_shards = 1
streets_replicas = 1
admins_shards = 1
admins_replicas = 1
pois_shards = 1
pois_replicas = 1

[admin]
import = true
levels = [8]
city_level = 8
```

```python
from geoimport.settings import load_settings, parse_args

args = parse_args(
    ["--input", "extract.osm.pbf", "--config-dir", "config", "--level", "7", "--dataset", "fr"]
)
settings = load_settings(args)
settings.dataset        # 'fr'
settings.admin.levels   # [7]
```

## What the package does not do

It does not read OSM PBF files, does not talk to Elasticsearch, and has no
command-line program: `parse_args` only turns arguments into an `Args` value.
It has no spatial index of administrative regions either; `get_street_admins`
takes the lookup from coordinates to admins as a function you supply.

## Tests

The test suite uses pytest; install the `test` extra to get it.