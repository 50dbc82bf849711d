"""Building blocks for importing OSM and public transport data into a geocoding index."""

__version__ = "0.1.0"

__all__ = [
    "admin",
    "osm_store",
    "osm_utils",
    "poi",
    "settings",
    "stops",
    "street",
    "utils",
]