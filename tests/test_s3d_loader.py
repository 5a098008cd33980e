import struct

import pytest

from eqmaptools.pfs import PfsArchive
from eqmaptools.s3d_loader import WldError, load_wld, parse_wld
from eqmaptools.wld_hash import decode_string_hash
from eqmaptools.wld_model import BspRegion, Light, Texture

MAGIC = 0x54503D02
NEW_VERSION = 0x00015500 + 1


def fragment(type_id, name_ref, body):
    return struct.pack("<IIi", len(body) + 4, type_id, name_ref) + body


def wld(fragments, string_hash=b"", magic=MAGIC, version=NEW_VERSION):
    header = struct.pack("<7I", magic, version, len(fragments), 0, 0, len(string_hash), 0)
    return header + decode_string_hash(string_hash) + b"".join(fragments)


def texture_body(name):
    raw = name.encode("latin-1") + b"\x00"
    return struct.pack("<IH", 1, len(raw)) + decode_string_hash(raw)


def light_body(flags, color):
    return struct.pack("<IIf3f", flags, 0, 0.0, *color)


def test_texture_fragment_decoded():
    frags = parse_wld(wld([fragment(0x03, 0, texture_body("tex.bmp"))]))
    assert len(frags) == 1
    assert frags[0].type == 0x03
    assert frags[0].data_as(Texture).frames == ["tex.bmp"]


def test_names_resolved_from_string_hash():
    body = struct.pack("<II", 0, 2) + struct.pack("<II", 5, 6) + struct.pack("<I", 0)
    frags = parse_wld(wld([fragment(0x29, -1, body)], string_hash=b"\x00REGION1\x00"))
    region = frags[0].data_as(BspRegion)
    assert region.name == "REGION1"
    assert region.regions == [5, 6]
    assert frags[0].name == -1


def test_unknown_fragment_has_no_data_and_order_kept():
    frags = parse_wld(
        wld([fragment(0x99, 0, b"abcd"), fragment(0x03, 0, texture_body("a.dds"))])
    )
    assert [f.type for f in frags] == [0x99, 0x03]
    assert frags[0].data is None
    assert frags[1].data_as(Texture).frames == ["a.dds"]


def test_light_placement_updates_earlier_light():
    light = fragment(0x1B, 0, light_body(1 << 3, (0.5, 0.25, 0.75)))
    light_ref = fragment(0x1C, 0, struct.pack("<i", 1))
    placement = fragment(0x28, 0, struct.pack("<i", 2) + struct.pack("<I4f", 0, 1.0, 2.0, 3.0, 4.0))
    frags = parse_wld(wld([light, light_ref, placement]))
    result = frags[0].data_as(Light)
    assert result.color == (0.5, 0.25, 0.75)
    assert result.location == (1.0, 2.0, 3.0)
    assert result.radius == 4.0
    assert frags[1].data == 0


def test_empty_wld():
    assert parse_wld(wld([])) == []


def test_bad_magic():
    with pytest.raises(WldError):
        parse_wld(wld([], magic=0x12345678))


def test_truncated_header():
    with pytest.raises(WldError):
        parse_wld(struct.pack("<I", MAGIC))


def test_truncated_fragment():
    data = wld([fragment(0x03, 0, texture_body("tex.bmp"))])
    with pytest.raises(WldError):
        parse_wld(data[:-3])


def test_bad_fragment_reference_raises():
    body = struct.pack("<II", 0, 1) + struct.pack("<i", 5)
    with pytest.raises(WldError):
        parse_wld(wld([fragment(0x04, 0, body)]))


def test_load_wld_from_archive(tmp_path):
    archive = PfsArchive()
    archive.set("zone.wld", wld([fragment(0x03, 0, texture_body("wall.bmp"))]))
    path = tmp_path / "zone.s3d"
    archive.save(path)
    frags = load_wld(path, "ZONE.WLD")
    assert frags[0].data_as(Texture).frames == ["wall.bmp"]


def test_load_wld_missing_entry(tmp_path):
    archive = PfsArchive()
    archive.set("other.wld", wld([]))
    path = tmp_path / "zone.s3d"
    archive.save(path)
    with pytest.raises(WldError):
        load_wld(path, "zone.wld")


def test_load_wld_missing_archive(tmp_path):
    with pytest.raises(WldError):
        load_wld(tmp_path / "absent.s3d", "zone.wld")