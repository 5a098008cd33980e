"""Decoding of individual WLD fragments into model objects.

Each fragment body is little-endian binary. References to other fragments
are 1-based indices into the list of fragments decoded so far; references
to names are zero or negative offsets into the decoded string hash.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from .wld_hash import decode_string_hash
from .wld_model import (
    Bone,
    BoneOrientation,
    BspRegion,
    BspTree,
    BspTreeNode,
    FragmentReference,
    Geometry,
    Light,
    Placeable,
    Polygon,
    SkeletonTrack,
    Texture,
    TextureBrush,
    TextureBrushSet,
    Vertex,
    WldFragment,
)

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_REF = struct.Struct("<i")

_F03 = struct.Struct("<I")  # texture_count
_F04 = struct.Struct("<II")  # flags, texture_count
_F10 = struct.Struct("<IIi")  # flag, track_ref_count, frag
_F10_ENTRY = struct.Struct("<iIiiI")  # name_ref, flag, frag_ref, frag_ref2, tree_piece_count
_F12 = struct.Struct("<II8h")  # flags, size, rotate/shift numerators and denominators
_F14 = struct.Struct("<IiIIi")  # flag, ref, entries, entries2, frag
_F15 = struct.Struct("<Ii3f3ff2f")  # flags, frag, x y z, rot z y x, param, scale y x
_F1B = struct.Struct("<IIf3f")  # flags, params2, params3, color
_F21 = struct.Struct("<I")  # count
_F21_NODE = struct.Struct("<4fi2i")  # normal, split_dist, region, left, right
_F28 = struct.Struct("<I4f")  # flags, x, y, z, radius
_F29 = struct.Struct("<II")  # flags, region_count
_F30 = struct.Struct("<III2f")  # flags, params1, params2, params3
_F31 = struct.Struct("<II")  # flags, count
_F36 = struct.Struct("<I4i3f3If6f10H")
_F36_VERT = struct.Struct("<3h")
_F36_TEX_OLD = struct.Struct("<2h")
_F36_TEX_NEW = struct.Struct("<2f")
_F36_NORMAL = struct.Struct("<3b")
_F36_POLY = struct.Struct("<H3H")
_F36_TEX_MAP = struct.Struct("<HH")

_RECIP_256 = 1.0 / 256.0
_RECIP_127 = 1.0 / 127.0


class FragmentError(ValueError):
    """Raised when a fragment is truncated or refers to something that does not exist."""


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def unpack(self, layout: struct.Struct) -> tuple[Any, ...]:
        return layout.unpack(self.take(layout.size))

    def one(self, layout: struct.Struct) -> Any:
        return self.unpack(layout)[0]

    def many(self, layout: struct.Struct, count: int) -> Iterator[tuple[Any, ...]]:
        for _ in range(count):
            yield self.unpack(layout)

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise FragmentError(f"fragment truncated at offset {self._pos}")
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def skip(self, size: int) -> None:
        self.take(size)


def _cstring(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def _signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


@dataclass
class _Input:
    reader: _Reader
    fragments: Sequence[WldFragment]
    name_ref: int
    string_hash: bytes
    old: bool

    def hash_string(self, ref: int) -> str:
        offset = -_signed32(ref)
        if not 0 <= offset <= len(self.string_hash):
            raise FragmentError(f"string reference {ref} outside the string hash")
        return _cstring(self.string_hash[offset:])

    @property
    def name(self) -> str:
        return self.hash_string(self.name_ref)

    def at(self, index: int) -> WldFragment:
        if not 0 <= index < len(self.fragments):
            raise FragmentError(f"fragment reference {index + 1} out of range")
        return self.fragments[index]


def _int_data(fragment: WldFragment) -> int:
    value = fragment.data
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _texture(inp: _Input) -> Texture:
    count = inp.reader.one(_F03) or 1
    frames = []
    for _ in range(count):
        length = inp.reader.one(_U16)
        frames.append(_cstring(decode_string_hash(inp.reader.take(length))))
    return Texture(frames)


def _texture_brush(inp: _Input) -> TextureBrush:
    flags, count = inp.reader.unpack(_F04)
    if flags & (1 << 2):
        inp.reader.skip(4)
    if flags & (1 << 3):
        inp.reader.skip(4)
    brush = TextureBrush()
    for _ in range(count or 1):
        ref = inp.reader.one(_REF)
        texture = inp.at(ref - 1).data_as(Texture)
        brush.textures.append(texture if texture is not None else Texture())
    return brush


def _reference(inp: _Input) -> int:
    return (inp.reader.one(_REF) - 1) & 0xFFFFFFFF


def _skeleton_track(inp: _Input) -> SkeletonTrack:
    r = inp.reader
    flag, track_count, _ = r.unpack(_F10)
    track = SkeletonTrack(name=inp.name)
    if flag & 1:
        r.skip(12)
    if flag & 2:
        r.skip(4)

    tree: list[tuple[int, int]] = []
    for index in range(track_count):
        _, _, frag_ref, frag_ref2, piece_count = r.unpack(_F10_ENTRY)
        bone = Bone()
        if frag_ref2 > 0 and inp.at(frag_ref2 - 1).type == 0x2D:
            model_ref = _int_data(inp.at(frag_ref2 - 1))
            bone.model = inp.at(model_ref).data_as(Geometry)
            if frag_ref != 0:
                orient_ref = _int_data(inp.at(frag_ref - 1))
                bone.orientation = inp.at(orient_ref).data_as(BoneOrientation)
        track.bones.append(bone)
        tree.extend((index, dest) for (dest,) in r.many(_REF, piece_count))

    for src, dest in tree:
        if not 0 <= dest < len(track.bones):
            raise FragmentError(f"bone {dest} out of range")
        track.bones[src].children.append(track.bones[dest])

    if flag & 512:
        size = r.one(_U32)
        r.skip(4 * size)
        r.skip(4 * size)
    return track


def _bone_orientation(inp: _Input) -> BoneOrientation:
    _, _, rd, rx, ry, rz, sx, sy, sz, sd = inp.reader.unpack(_F12)
    return BoneOrientation(
        rotate_denom=rd,
        rotate_x_num=rx,
        rotate_y_num=ry,
        rotate_z_num=rz,
        shift_denom=sd,
        shift_x_num=sx,
        shift_y_num=sy,
        shift_z_num=sz,
    )


def _fragment_reference(inp: _Input) -> FragmentReference:
    r = inp.reader
    flag, magic_ref, entries, entries2, _ = r.unpack(_F14)
    ref = FragmentReference(name=inp.name, magic_string=inp.hash_string(magic_ref))
    if flag & 1:
        r.skip(4)
    if flag & 2:
        r.skip(4)
    for _ in range(entries):
        r.skip(8 * r.one(_U32))
    ref.frags.extend(value for (value,) in r.many(_U32, entries2))
    return ref


def _placeable(inp: _Input) -> Placeable | None:
    ref = inp.reader.one(_REF)
    if ref > 0:
        return None
    _, _, x, y, z, rot_z, rot_y, rot_x, _, scale_y, scale_x = inp.reader.unpack(_F15)
    return Placeable(
        name=inp.hash_string(ref),
        location=(x, y, z),
        rotation=(rot_x / 512.0 * 360.0, rot_y / 512.0 * 360.0, rot_z / 512.0 * 360.0),
        scale=(scale_x, scale_y, scale_y),
    )


def _light(inp: _Input) -> Light:
    flags, _, _, red, green, blue = inp.reader.unpack(_F1B)
    color = (red, green, blue) if flags & (1 << 3) else (1.0, 1.0, 1.0)
    return Light(location=(0.0, 0.0, 0.0), color=color, radius=0.0)


def _bsp_tree(inp: _Input) -> BspTree:
    count = inp.reader.one(_F21)
    nodes = [
        BspTreeNode(number=i, normal=(nx, ny, nz), split_dist=dist, region=region, left=left, right=right)
        for i, (nx, ny, nz, dist, region, left, right) in enumerate(inp.reader.many(_F21_NODE, count))
    ]
    return BspTree(nodes)


def _light_instance(inp: _Input) -> None:
    ref = inp.reader.one(_REF)
    _, x, y, z, radius = inp.reader.unpack(_F28)
    if ref == 0:
        return None
    light = inp.at(_int_data(inp.at(ref - 1))).data_as(Light)
    if light is not None:
        light.location = (x, y, z)
        light.radius = radius
    return None


def _bsp_region(inp: _Input) -> BspRegion:
    r = inp.reader
    _, count = r.unpack(_F29)
    region = BspRegion(name=inp.name)
    region.regions.extend(value for (value,) in r.many(_U32, count))
    length = r.one(_U32)
    if length > 0:
        region.extended_info = _cstring(decode_string_hash(r.take(length)))
    return region


def _material(inp: _Input) -> TextureBrush | None:
    flags, params1, _, _, _ = inp.reader.unpack(_F30)
    if not flags:
        inp.reader.skip(8)
    ref = inp.reader.one(_REF)
    if not params1 or not ref:
        return TextureBrush(textures=[Texture(["collide.dds"])], flags=1)
    brush = inp.at(_int_data(inp.at(ref - 1))).data_as(TextureBrush)
    if brush is None:
        return None
    new_brush = brush.copy()
    new_brush.flags = 1 if params1 & 0b11110 else 0
    return new_brush


def _brush_set(inp: _Input) -> TextureBrushSet:
    _, count = inp.reader.unpack(_F31)
    return TextureBrushSet(
        [inp.at(ref - 1).data_as(TextureBrush) for (ref,) in inp.reader.many(_U32, count)]
    )


def _geometry(inp: _Input) -> Geometry:
    r = inp.reader
    header = r.unpack(_F36)
    frag1 = header[1]
    cx, cy, cz = header[5:8]
    (vertex_count, tex_count, normal_count, color_count, polygon_count,
     size6, polygon_tex_count, _, _, scale_shift) = header[21:31]
    scale = 1.0 / float(1 << scale_shift)

    model = Geometry(name=inp.name)
    if frag1 > 0:
        model.texture_brush_set = inp.at(frag1 - 1).data_as(TextureBrushSet)

    model.vertices = [
        Vertex(pos=(cx + x * scale, cy + y * scale, cz + z * scale))
        for x, y, z in r.many(_F36_VERT, vertex_count)
    ]
    verts = model.vertices

    if inp.old:
        for i, (u, v) in enumerate(r.many(_F36_TEX_OLD, tex_count)):
            if i < len(verts):
                verts[i].tex = (u * _RECIP_256, v * _RECIP_256)
    else:
        for i, (u, v) in enumerate(r.many(_F36_TEX_NEW, tex_count)):
            if i < len(verts):
                verts[i].tex = (u, v)

    # Some zones carry more normals than vertices.
    for i, (x, y, z) in enumerate(r.many(_F36_NORMAL, normal_count)):
        if i < len(verts):
            verts[i].nor = (x * _RECIP_127, y * _RECIP_127, z * _RECIP_127)

    r.skip(4 * color_count)

    model.polygons = [
        Polygon(flags=flags, verts=(c, b, a))
        for flags, a, b, c in r.many(_F36_POLY, polygon_count)
    ]

    r.skip(4 * size6)
    polys = iter(model.polygons)
    for poly_count, tex in r.many(_F36_TEX_MAP, polygon_tex_count):
        for _, poly in zip(range(poly_count), polys):
            poly.tex = tex
    return model


# Types missing here (0x22 BSP region lists among them) carry no data.
_PARSERS: dict[int, Callable[[_Input], Any]] = {
    0x03: _texture,
    0x04: _texture_brush,
    0x05: _reference,
    0x10: _skeleton_track,
    0x11: _reference,
    0x12: _bone_orientation,
    0x13: _reference,
    0x14: _fragment_reference,
    0x15: _placeable,
    0x1B: _light,
    0x1C: _reference,
    0x21: _bsp_tree,
    0x28: _light_instance,
    0x29: _bsp_region,
    0x2D: _reference,
    0x30: _material,
    0x31: _brush_set,
    0x36: _geometry,
}


def parse_fragment(
    fragments: Sequence[WldFragment],
    type_id: int,
    data: bytes,
    name_ref: int,
    string_hash: bytes,
    old: bool = False,
) -> WldFragment:
    """Decode one fragment body.

    ``fragments`` are the fragments decoded before this one, which it may
    refer to (a light placement updates the light it points at).
    ``string_hash`` is the decoded string table and ``old`` selects the
    older file version's texture coordinate encoding. Unknown fragment
    types yield a fragment with no data.
    """
    parser = _PARSERS.get(type_id)
    if parser is None:
        return WldFragment(type=type_id, name=name_ref, data=None)
    inp = _Input(_Reader(data), fragments, name_ref, bytes(string_hash), old)
    return WldFragment(type=type_id, name=name_ref, data=parser(inp))