[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eqmaptools"
version = "0.1.0"
description = "Readers and writers for PFS/S3D archives, WLD fragments and zone water maps"
requires-python = ">=3.10"
dependencies = []
keywords = ["pfs", "s3d", "wld", "water-map", "zone", "archive"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Role-Playing",
    "Topic :: File Formats",
    "Topic :: System :: Archiving",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["eqmaptools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
