"""Zone water maps: which liquid or special region a point lies in.

A water map file starts with the magic ``EQEMUWATER`` and a little-endian
32-bit version. Version 1 holds a BSP tree of planes; version 2 holds a
list of typed oriented boxes.
"""

from __future__ import annotations

import enum
import os
import string
import struct
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .geometry import OrientedBoundingBox, Vec3

_MAGIC = b"EQEMUWATER"
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_U32 = struct.Struct("<I")
_BSP_NODE = struct.Struct("<i4f4i")
_V2_REGION = struct.Struct("<i12f")

# Two triangles per face: top, back, bottom, front, left, right.
_BOX_INDICES = (
    0, 1, 2, 2, 3, 0,
    1, 2, 6, 6, 5, 1,
    4, 5, 6, 6, 7, 4,
    0, 3, 7, 7, 4, 0,
    0, 1, 5, 5, 4, 0,
    3, 2, 6, 6, 7, 3,
)


class RegionType(enum.IntEnum):
    """Kind of region a point can be in."""

    UNSUPPORTED = -2
    UNTAGGED = -1
    NORMAL = 0
    WATER = 1
    LAVA = 2
    ZONE_LINE = 3
    PVP = 4
    SLIME = 5
    ICE = 6
    VWATER = 7
    GENERAL_AREA = 8
    PREFER_PATHING = 9
    DISABLE_NAV_MESH = 10


def _as_region_type(value: int) -> RegionType:
    try:
        return RegionType(value)
    except ValueError:
        return RegionType.UNSUPPORTED


@dataclass(frozen=True)
class RegionDetails:
    """Four corners of a region box (in y, z, x order) and its type."""

    verts: tuple[Vec3, Vec3, Vec3, Vec3]
    region_type: RegionType


@dataclass(frozen=True)
class BspNode:
    """One node of a version 1 water map's BSP tree; children are 1-based, 0 for none."""

    node_number: int
    normal: Vec3
    split_distance: float
    region: int
    special: int
    left: int
    right: int


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("truncated water map")
    return data


def _read_count(stream: BinaryIO) -> int:
    return _U32.unpack(_read_exact(stream, _U32.size))[0]


class WaterMap:
    """A water map with no regions: every point is normal."""

    version = 0

    def region_type(self, y: float, x: float, z: float) -> RegionType:
        """Type of region containing the point (note the y, x, z argument order)."""
        return RegionType.NORMAL

    def in_water(self, y: float, x: float, z: float) -> bool:
        return self.region_type(y, x, z) == RegionType.WATER

    def in_vwater(self, y: float, x: float, z: float) -> bool:
        return self.region_type(y, x, z) == RegionType.VWATER

    def in_lava(self, y: float, x: float, z: float) -> bool:
        return self.region_type(y, x, z) == RegionType.LAVA

    def in_liquid(self, y: float, x: float, z: float) -> bool:
        return self.in_water(y, x, z) or self.in_lava(y, x, z)

    def create_mesh(self) -> tuple[list[Vec3], list[int]]:
        """Triangle mesh of the regions as (vertices, indices)."""
        return [], []

    def region_details(self) -> list[RegionDetails]:
        """Corner points and type of every region."""
        return []


class WaterMapV1(WaterMap):
    """Water map backed by a BSP tree whose leaves carry the region type."""

    version = 1

    def __init__(self, nodes: Iterable[BspNode]) -> None:
        self.nodes = list(nodes)

    @classmethod
    def read(cls, stream: BinaryIO) -> WaterMapV1:
        """Read the body of a version 1 file (everything after the version)."""
        count = _read_count(stream)
        data = _read_exact(stream, count * _BSP_NODE.size)
        nodes = [
            BspNode(number, (nx, ny, nz), split, region, special, left, right)
            for number, nx, ny, nz, split, region, special, left, right in _BSP_NODE.iter_unpack(data)
        ]
        return cls(nodes)

    def region_type(self, y: float, x: float, z: float) -> RegionType:
        if not self.nodes:
            return RegionType.NORMAL
        number = 1
        for _ in range(len(self.nodes)):
            if not 1 <= number <= len(self.nodes):
                raise ValueError(f"BSP node {number} out of range")
            node = self.nodes[number - 1]
            if node.left == 0 and node.right == 0:
                return _as_region_type(node.special)
            nx, ny, nz = node.normal
            distance = x * nx + y * ny + z * nz + node.split_distance
            if distance == 0.0:
                return RegionType.NORMAL
            child = node.left if distance > 0.0 else node.right
            if child == 0:
                return RegionType.NORMAL
            number = child
        raise ValueError("BSP tree contains a cycle")


def _swizzle(v: Vec3) -> Vec3:
    return (v[1], v[2], v[0])


def _box_corners(box: OrientedBoundingBox) -> list[Vec3]:
    lo_x, lo_y, lo_z = box.min_x, box.min_y, box.min_z
    hi_x, hi_y, hi_z = box.max_x, box.max_y, box.max_z
    corners = (
        (lo_x, hi_y, lo_z),
        (lo_x, hi_y, hi_z),
        (hi_x, hi_y, hi_z),
        (hi_x, hi_y, lo_z),
        (lo_x, lo_y, lo_z),
        (lo_x, lo_y, hi_z),
        (hi_x, lo_y, hi_z),
        (hi_x, lo_y, lo_z),
    )
    return [_swizzle(box.transform(c)) for c in corners]


class WaterMapV2(WaterMap):
    """Water map made of typed oriented boxes; the first box containing a point wins."""

    version = 2

    def __init__(self, regions: Iterable[tuple[RegionType, OrientedBoundingBox]]) -> None:
        self.regions = list(regions)

    @classmethod
    def read(cls, stream: BinaryIO) -> WaterMapV2:
        """Read the body of a version 2 file (everything after the version)."""
        count = _read_count(stream)
        regions = []
        for _ in range(count):
            type_code, *values = _V2_REGION.unpack(_read_exact(stream, _V2_REGION.size))
            pos, rot, scale, extents = (tuple(values[i : i + 3]) for i in range(0, 12, 3))
            regions.append(
                (_as_region_type(type_code), OrientedBoundingBox(pos, rot, scale, extents))
            )
        return cls(regions)

    def region_type(self, y: float, x: float, z: float) -> RegionType:
        point = (x, y, z)
        for kind, box in self.regions:
            if box.contains_point(point):
                return kind
        return RegionType.NORMAL

    def create_mesh(self) -> tuple[list[Vec3], list[int]]:
        verts: list[Vec3] = []
        inds: list[int] = []
        for _, box in self.regions:
            base = len(verts)
            verts.extend(_box_corners(box))
            inds.extend(base + i for i in _BOX_INDICES)
        return verts, inds

    def region_details(self) -> list[RegionDetails]:
        details = []
        for kind, box in self.regions:
            corners = _box_corners(box)
            details.append(
                RegionDetails((corners[4], corners[1], corners[2], corners[7]), kind)
            )
        return details


def load_water_map(directory: str | os.PathLike[str], zone_name: str) -> WaterMap:
    """Load ``<zone_name>.wtr`` (name lower-cased) from ``directory``.

    Raises ``OSError`` if the file cannot be opened and ``ValueError`` if it
    is not a water map of a known version.
    """
    path = Path(directory) / f"{zone_name.translate(_ASCII_LOWER)}.wtr"
    with open(path, "rb") as stream:
        if _read_exact(stream, len(_MAGIC)) != _MAGIC:
            raise ValueError(f"{path} is not a water map")
        version = _read_count(stream)
        loader = {1: WaterMapV1, 2: WaterMapV2}.get(version)
        if loader is None:
            raise ValueError(f"unsupported water map version {version}")
        return loader.read(stream)