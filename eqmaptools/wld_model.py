"""Objects decoded from WLD fragments: textures, models, lights, BSP data and skeletons."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]


@dataclass
class WldFragment:
    """A fragment of a WLD file: its type id, name reference and decoded payload."""

    type: int
    name: int
    data: Any = None

    def data_as(self, kind: type[T]) -> T | None:
        """The payload if it is an instance of ``kind``, otherwise ``None``."""
        return self.data if isinstance(self.data, kind) else None


@dataclass
class Texture:
    """A texture as a list of frame file names (more than one when animated)."""

    frames: list[str] = field(default_factory=list)


@dataclass
class TextureBrush:
    """Textures applied together, with render flags."""

    textures: list[Texture] = field(default_factory=list)
    flags: int = 0

    def copy(self) -> TextureBrush:
        """A new brush with its own texture list that shares the textures themselves."""
        return TextureBrush(textures=list(self.textures), flags=self.flags)


@dataclass
class TextureBrushSet:
    """The brushes a model's polygons index into."""

    brushes: list[TextureBrush | None] = field(default_factory=list)


@dataclass
class Placeable:
    """A model placed in the zone."""

    name: str = ""
    location: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)


@dataclass
class Light:
    """A point light."""

    location: Vec3 = (0.0, 0.0, 0.0)
    color: Vec3 = (1.0, 1.0, 1.0)
    radius: float = 0.0


@dataclass
class BspTreeNode:
    """A splitting plane of the zone BSP tree; children are 1-based, 0 for none."""

    number: int = 0
    normal: Vec3 = (0.0, 0.0, 0.0)
    split_dist: float = 0.0
    region: int = 0
    left: int = 0
    right: int = 0


@dataclass
class BspTree:
    """The zone BSP tree."""

    nodes: list[BspTreeNode] = field(default_factory=list)


@dataclass
class BspRegion:
    """A named group of BSP regions, with optional extended information."""

    name: str = ""
    regions: list[int] = field(default_factory=list)
    extended_info: str | None = None


@dataclass
class Vertex:
    """Position, texture coordinate and normal of a model vertex."""

    pos: Vec3 = (0.0, 0.0, 0.0)
    tex: Vec2 = (0.0, 0.0)
    nor: Vec3 = (0.0, 0.0, 0.0)


@dataclass
class Polygon:
    """A triangle: vertex indices, flags and texture brush index."""

    flags: int = 0
    verts: tuple[int, int, int] = (0, 0, 0)
    tex: int = 0


@dataclass
class Geometry:
    """A mesh model."""

    name: str = ""
    vertices: list[Vertex] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)
    texture_brush_set: TextureBrushSet | None = None


@dataclass
class BoneOrientation:
    """Rotation and shift of a bone, stored as numerators over denominators."""

    rotate_denom: int = 0
    rotate_x_num: int = 0
    rotate_y_num: int = 0
    rotate_z_num: int = 0
    shift_denom: int = 0
    shift_x_num: int = 0
    shift_y_num: int = 0
    shift_z_num: int = 0


@dataclass
class Bone:
    """A skeleton bone with optional model and orientation."""

    model: Geometry | None = None
    orientation: BoneOrientation | None = None
    children: list[Bone] = field(default_factory=list)


@dataclass
class SkeletonTrack:
    """A named skeleton: its bones in file order, linked through ``children``."""

    name: str = ""
    bones: list[Bone] = field(default_factory=list)


@dataclass
class FragmentReference:
    """A named reference to other fragments."""

    name: str = ""
    magic_string: str = ""
    frags: list[int] = field(default_factory=list)