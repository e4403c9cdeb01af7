import math

import pytest
import ufoLib2

from babelfont import (
    AssociatedWithMaster,
    Axis,
    Color,
    Component,
    DecomposedAffine,
    DefaultForMaster,
    Font,
    Glyph,
    Guide,
    Instance,
    Layer,
    Path,
    Position,
    load,
)
from babelfont.constants import FILTERS_KEY
from babelfont.convertors.babelfontJson import BabelfontJsonConvertor, dumps, loads
from babelfont.convertors.designspace import (
    UFO_GROUPS_KEY,
    DesignspaceConvertor,
    UFOConvertor,
    _parseColor,
)
from babelfont.decomposedAffine import Order
from babelfont.errors import (
    BabelfontIOError,
    DesignSpaceLoad,
    JsonSerializeError,
    UfoColor,
    UnknownFileType,
    WrongConvertor,
)
from babelfont.features import Features

from .testSupport import rect


def paths(layer):
    return [p.nodesToString() for p in layer.paths()]


@pytest.fixture
def richFont(kernedFont):
    font = kernedFont
    font.names.designer["dflt"] = "Jane Doe"
    font.names.family_name["de"] = "Testschrift"
    font.axes[0].map = [(400, 40), (700, 140)]
    font.axes[0].localized_names = {"de": "Gewicht"}
    font.masters[0].location = {"wght": 40}
    font.masters[1].location = {"wght": 140}
    font.masters[0].metrics = {"xHeight": 500, "ascender": 750}
    font.masters[0].guides.append(Guide(Position(0, 500), "x", Color(255, 0, 0)))
    font.instances.append(Instance("Medium", "i01", {"wght": 90}))
    font.variation_sequences = {(0xFE00, 0x61): "a"}
    font.features = Features(
        classes={"ab": "a b"},
        features=[("liga", "sub a b by c;")],
    )
    font.format_specific[FILTERS_KEY] = [{"name": "dropKerning"}]
    font.glyphs["b"].layers[0].shapes[0].transform = DecomposedAffine(
        (10, 0), (1, 1), math.pi / 2, (0, 0), Order.Glyphs
    )
    font.glyphs["b"].layers[0].shapes[0].format_specific["note"] = "rotated"
    font.glyphs["a"].layers[0].shapes[0].nodes[0].format_specific["name"] = "corner"
    font.glyphs["a"].layers.append(
        Layer(
            width=550,
            name="Medium",
            id="a.medium",
            master=AssociatedWithMaster("m01"),
            location={"wght": 90},
            shapes=[rect(0, 0, 150, 150)],
        )
    )
    font.glyphs.append(
        Glyph(
            "smart",
            exported=False,
            component_axes=[Axis("Height", "HGHT", min=0, default=0, max=100)],
            layers=[
                Layer(
                    width=100,
                    master=DefaultForMaster("m01"),
                    shapes=[
                        Path.fromNodesString("0 0 m 50 100 o 100 100 o 150 0 c", closed=False)
                    ],
                ),
                Layer(
                    width=100,
                    master=AssociatedWithMaster("m01"),
                    smart_component_location={"Height": 100},
                    shapes=[Component("a", location={"Height": 20})],
                ),
            ],
        )
    )
    return font


# Babelfont JSON


def test_json_roundtrip(richFont):
    assert loads(dumps(richFont)) == richFont


def test_json_save_and_load(richFont, tmp_path):
    path = tmp_path / "Test.babelfont"
    richFont.save(path)
    font = load(path)
    assert font == richFont
    assert font.source == str(path)


def test_json_is_readable(weightFont):
    text = dumps(weightFont)
    assert '"nodes": "0 0 l 100 0 l 100 100 l 0 100 l"' in text
    assert '"DefaultForMaster": "m01"' in text
    assert '"ref": "a"' in text


def test_json_malformed():
    with pytest.raises(JsonSerializeError):
        loads("{not json")
    with pytest.raises(JsonSerializeError):
        loads("{}")


def test_json_missing_file(tmp_path):
    with pytest.raises(BabelfontIOError):
        load(tmp_path / "missing.babelfont")


def test_json_unserializable(weightFont):
    weightFont.format_specific["bad"] = object()
    with pytest.raises(JsonSerializeError):
        dumps(weightFont)


# Picking a convertor


def test_unknown_file_type(tmp_path):
    with pytest.raises(UnknownFileType):
        load(tmp_path / "font.xyz")
    with pytest.raises(UnknownFileType):
        Font().save(tmp_path / "font.xyz")


def test_wrong_convertor(tmp_path):
    with pytest.raises(WrongConvertor):
        load(tmp_path / "font.designspace", convertor=BabelfontJsonConvertor)


def test_can_handle_is_case_insensitive():
    assert DesignspaceConvertor.can_load("Font.DESIGNSPACE")
    assert UFOConvertor.can_save("Font.ufo")
    assert not UFOConvertor.can_load("Font.designspace")


# Designspace and UFO


def test_designspace_roundtrip(kernedFont, tmp_path):
    path = tmp_path / "Test.designspace"
    kernedFont.instances.append(Instance("Bold", location={"wght": 700}))
    kernedFont.instances[0].custom_names.family_name["dflt"] = "Test Sans"
    kernedFont.save(path)
    assert (tmp_path / "Test-Regular.ufo").is_dir()
    assert (tmp_path / "Test-Bold.ufo").is_dir()

    font = load(path)
    assert [(a.name, a.tag, a.bounds()) for a in font.axes] == [
        ("Weight", "wght", (400, 400, 700))
    ]
    assert [(m.id, m.name, m.location) for m in font.masters] == [
        ("m01", "Regular", {"wght": 400}),
        ("m02", "Bold", {"wght": 700}),
    ]
    assert font.names.family_name == {"dflt": "Test Sans"}
    assert font.glyphs.keys() == ["a", "b", "c"]

    a = font.glyphs["a"]
    assert a.codepoints == [0x61]
    assert [layer.master for layer in a.layers] == [
        DefaultForMaster("m01"),
        DefaultForMaster("m02"),
    ]
    assert paths(a.layers[1]) == ["0 0 l 200 0 l 200 200 l 0 200 l"]
    assert a.layers[1].width == 600
    assert [(x.name, x.x, x.y) for x in a.layers[0].anchors] == [("top", 50, 100)]

    component = font.glyphs["b"].layers[0].components()[0]
    assert component.reference == "a"
    assert component.transform.translation == (10, 0)

    assert font.first_kern_groups == {"AB": ["a", "b"]}
    assert font.second_kern_groups == {"C": ["c"], "B": ["b"]}
    assert font.masters[0].kerning == kernedFont.masters[0].kerning
    assert font.masters[1].kerning == {}

    assert [(i.name, i.location) for i in font.instances] == [("Bold", {"wght": 700})]
    assert font.instances[0].custom_names.family_name == {"dflt": "Test Sans"}


def test_designspace_sparse_layers(weightFont, tmp_path):
    weightFont.glyphs["a"].layers.append(
        Layer(
            width=550,
            name="Medium",
            master=AssociatedWithMaster("m01"),
            location={"wght": 550},
            shapes=[rect(0, 0, 150, 150)],
        )
    )
    path = tmp_path / "Test.designspace"
    weightFont.save(path)
    assert "Medium" in ufoLib2.Font.open(tmp_path / "Test-Regular.ufo").layers

    font = load(path)
    assert len(font.masters) == 2
    layer = font.glyphs["a"].layers[2]
    assert layer.name == "Medium"
    assert layer.master == AssociatedWithMaster("m01")
    assert layer.location == {"wght": 550}
    assert paths(layer) == ["0 0 l 150 0 l 150 150 l 0 150 l"]
    assert len(font.glyphs["b"].layers) == 2


DESIGNSPACE = """\
<?xml version='1.0' encoding='UTF-8'?>
<designspace format="5.0">
  <axes>
    <axis tag="wght" name="Weight" minimum="400" maximum="700" default="400"/>
  </axes>
  <sources>
    <source filename="{filename}" name="Regular">
      <location>
        <dimension name="Weight" xvalue="400"/>
      </location>
    </source>
  </sources>
</designspace>
"""


def test_designspace_source_outside_root(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    path = project / "Test.designspace"
    path.write_text(DESIGNSPACE.format(filename="../outside.ufo"), encoding="utf-8")
    with pytest.raises(DesignSpaceLoad, match="outside the project root"):
        load(path)


def test_designspace_missing_file(tmp_path):
    with pytest.raises(DesignSpaceLoad):
        load(tmp_path / "missing.designspace")


def makeUfo(path):
    ufo = ufoLib2.Font()
    ufo.info.familyName = "Test"
    ufo.info.styleName = "Bold"
    ufo.info.unitsPerEm = 2048
    ufo.info.xHeight = 1000
    ufo.info.italicAngle = -10
    glyph = ufo.newGlyph("a")
    glyph.width = 1200
    glyph.unicodes = [0x61]
    pen = glyph.getPen()
    pen.moveTo((0, 0))
    pen.lineTo((100, 0))
    pen.lineTo((100, 100))
    pen.lineTo((0, 100))
    pen.closePath()
    ufo.newGlyph("b").width = 600
    ufo.groups["public.kern1.A"] = ["a"]
    ufo.groups["vowels"] = ["a"]
    ufo.kerning[("public.kern1.A", "b")] = -30
    ufo.lib["public.glyphOrder"] = ["b", "a"]
    ufo.lib["public.skipExportGlyphs"] = ["b"]
    ufo.lib["com.example.custom"] = 1
    ufo.features.text = "feature liga { sub a b by a; } liga;"
    ufo.save(path)


def test_load_ufo(tmp_path):
    path = tmp_path / "Test.ufo"
    makeUfo(path)
    font = load(path)
    assert font.upm == 2048
    assert font.names.family_name == {"dflt": "Test"}
    assert font.axes == []
    [master] = font.masters
    assert (master.name, master.id) == ("Bold", "master01")
    assert master.metrics == {"xHeight": 1000, "italicAngle": -10}
    assert master.kerning == {("@A", "b"): -30}
    assert font.first_kern_groups == {"A": ["a"]}
    assert font.format_specific[UFO_GROUPS_KEY] == {"vowels": ["a"]}
    assert font.glyphs.keys() == ["b", "a"]
    assert not font.glyphs["b"].exported
    a = font.glyphs["a"]
    assert a.codepoints == [0x61]
    assert a.layers[0].width == 1200
    assert paths(a.layers[0]) == ["0 0 l 100 0 l 100 100 l 0 100 l"]
    assert "sub a b by a;" in font.features.to_fea()


def test_ufo_roundtrip_keeps_foreign_data(tmp_path):
    makeUfo(tmp_path / "Test.ufo")
    font = load(tmp_path / "Test.ufo")
    font.save(tmp_path / "Copy.ufo")
    ufo = ufoLib2.Font.open(tmp_path / "Copy.ufo")
    assert ufo.groups["vowels"] == ["a"]
    assert ufo.groups["public.kern1.A"] == ["a"]
    assert ufo.kerning[("public.kern1.A", "b")] == -30
    assert ufo.lib["com.example.custom"] == 1
    assert ufo.lib["public.glyphOrder"] == ["b", "a"]
    assert ufo.lib["public.skipExportGlyphs"] == ["b"]
    assert ufo.info.xHeight == 1000


def test_save_ufo_writes_default_master(weightFont, tmp_path, caplog):
    path = tmp_path / "Test.ufo"
    with caplog.at_level("WARNING"):
        weightFont.save(path)
    assert "Only the default master" in caplog.text
    font = load(path)
    assert [m.name for m in font.masters] == ["Regular"]
    assert paths(font.glyphs["a"].layers[0]) == ["0 0 l 100 0 l 100 100 l 0 100 l"]


def test_ufo_color():
    assert _parseColor("1,0,0.5,1") == Color(255, 0, 128, 255)
    with pytest.raises(UfoColor):
        _parseColor("red")
