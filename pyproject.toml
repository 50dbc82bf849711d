[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "geoimport"
version = "0.1.0"
description = "Building blocks for importing OpenStreetMap and public transport data into a geocoding index"
requires-python = ">=3.11"
dependencies = []
keywords = [
    "geocoding",
    "openstreetmap",
    "osm",
    "poi",
    "administrative-regions",
    "public-transport",
    "import",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["geoimport"]

[tool.hatch.build.targets.sdist]
include = ["geoimport", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
