# eqmaptools

Pure-Python tools for working with zone data files. No third-party
dependencies are needed.

- **PFS archives** (`.s3d` and related), in `eqmaptools.pfs`:
  `PfsArchive.load(path)` reads an archive; `get`, `set`, `delete`,
  `rename`, `exists` and `filenames` work on its files by case-insensitive
  name; `to_bytes()` and `save(path)` write it back. Files are stored as
  zlib blocks of at most `MAX_BLOCK_SIZE` (8192) uncompressed bytes.
  `footer_date` holds the footer's date stamp, or `None` when there is no
  footer. Failures raise `PfsError`; `get` of a missing file raises
  `KeyError`.
- **WLD fragments**, in `eqmaptools.s3d_loader`: `parse_wld(data)` decodes
  the string hash and every fragment of a WLD file into a list of
  `WldFragment` objects; `load_wld(archive_path, wld_name)` does the same
  for a WLD file inside a PFS archive. Errors raise `WldError`.
  Single fragments can be decoded with `eqmaptools.wld_fragment.parse_fragment`.
  The decoded objects (`Texture`, `TextureBrush`, `TextureBrushSet`,
  `Geometry`, `Vertex`, `Polygon`, `Light`, `Placeable`, `BspTree`,
  `BspRegion`, `SkeletonTrack`, `Bone`, `BoneOrientation`,
  `FragmentReference`) live in `eqmaptools.wld_model`;
  `WldFragment.data_as(kind)` returns the payload if it is of that type.
- **Water maps** (`.wtr`, versions 1 and 2), in `eqmaptools.water_map`:
  `load_water_map(directory, zone_name)` returns a `WaterMapV1` (BSP tree)
  or `WaterMapV2` (oriented boxes). Query with `region_type`, `in_water`,
  `in_vwater`, `in_lava` and `in_liquid`; `create_mesh()` and
  `region_details()` describe the regions of a version 2 map.
- Helpers: the PFS filename checksum (`eqmaptools.pfs_crc.filename_crc`,
  `crc_update`), oriented bounding boxes
  (`eqmaptools.geometry.OrientedBoundingBox`), the WLD string XOR
  (`eqmaptools.wld_hash.decode_string_hash`) and small string utilities
  (`eqmaptools.string_util.string_format`, `split_string`, `strings_equal`).

## Installation

```
pip install eqmaptools
```

## Examples

Read a file out of an archive and add another:

```python
from eqmaptools.pfs import PfsArchive

archive = PfsArchive.load("zone.s3d")
print(archive.filenames("wld"))
data = archive.get("zone.wld")
archive.set("notes.txt", b"hello")
archive.save("zone_copy.s3d")
```

Parse the fragments of a WLD file inside an archive:

```python
from eqmaptools.s3d_loader import load_wld

fragments = load_wld("zone.s3d", "zone.wld")
for fragment in fragments:
    print(hex(fragment.type), fragment.data)
```

Check whether a point is under water:

```python
from eqmaptools.water_map import load_water_map

water = load_water_map("maps/", "Zone")   # reads maps/zone.wtr
if water.in_liquid(y=10.0, x=20.0, z=-5.0):
    print("swimming")
```

`load_water_map` raises `OSError` if the file cannot be opened and
`ValueError` if it is not a water map of a known version. Note that the
water-map queries take their coordinates in `y, x, z` order.

## What it does not do

This is a library only: it has no command-line tool and does not draw,
display or export zones or models. WLD fragment types it does not know are
kept as fragments with no data, and WLD files cannot be written.

## Running the tests

```
pip install -e ".[test]"
pytest
```