from eqmaptools.wld_model import (
    Bone,
    BspRegion,
    Geometry,
    Light,
    Placeable,
    SkeletonTrack,
    Texture,
    TextureBrush,
    TextureBrushSet,
    WldFragment,
)


def test_data_as_returns_matching_payload():
    light = Light(location=(1.0, 2.0, 3.0))
    frag = WldFragment(0x1B, -5, light)
    assert frag.data_as(Light) is light


def test_data_as_mismatch_returns_none():
    frag = WldFragment(0x1B, -5, Light())
    assert frag.data_as(Geometry) is None


def test_data_as_without_payload():
    frag = WldFragment(0x22, 0)
    assert frag.data_as(Texture) is None


def test_data_as_integer_reference():
    frag = WldFragment(0x05, 0, 7)
    assert frag.data_as(int) == 7
    assert frag.data_as(Texture) is None


def test_brush_copy_is_independent_but_shares_textures():
    tex = Texture(frames=["a.bmp"])
    brush = TextureBrush(textures=[tex], flags=0)
    clone = brush.copy()
    clone.flags = 1
    clone.textures.append(Texture())
    assert brush.flags == 0
    assert len(brush.textures) == 1
    assert clone.textures[0] is tex
    assert clone == TextureBrush(textures=[tex, Texture()], flags=1)


def test_default_lists_are_not_shared():
    a, b = Bone(), Bone()
    a.children.append(b)
    assert b.children == []
    s1, s2 = SkeletonTrack(), SkeletonTrack()
    s1.bones.append(a)
    assert s2.bones == []


def test_geometry_defaults():
    model = Geometry(name="box")
    assert model.vertices == []
    assert model.polygons == []
    assert model.texture_brush_set is None


def test_brush_set_holds_missing_entries():
    brush_set = TextureBrushSet(brushes=[None, TextureBrush()])
    assert brush_set.brushes[0] is None
    assert brush_set.brushes[1] == TextureBrush()


def test_region_and_placeable_defaults():
    region = BspRegion(name="wt_zone")
    region.regions.append(4)
    assert region.regions == [4]
    assert region.extended_info is None
    assert Placeable().scale == (1.0, 1.0, 1.0)
    assert Light().color == (1.0, 1.0, 1.0)