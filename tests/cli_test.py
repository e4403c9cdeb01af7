import pytest

from babelfont import load
from babelfont.constants import FILTERS_KEY
from babelfont.features import Features
from babelfont.filters.__main__ import main, parseArgs


@pytest.fixture
def source(kernedFont, tmp_path):
    path = tmp_path / "Test.babelfont"
    kernedFont.save(path)
    return path


def test_convert(source, tmp_path):
    output = tmp_path / "Test.designspace"
    assert main([str(source), str(output)]) == 0
    font = load(output)
    assert font.glyphs.keys() == ["a", "b", "c"]
    assert len(font.masters) == 2


def test_filters(source, tmp_path):
    output = tmp_path / "Out.babelfont"
    result = main(
        [
            str(source),
            str(output),
            "--retain-glyphs",
            "a,c",
            "--drop-kerning",
            "--scale-upem",
            "2000",
        ]
    )
    assert result == 0
    font = load(output)
    assert font.glyphs.keys() == ["a", "c"]
    assert font.upm == 2000
    assert all(not master.kerning for master in font.masters)
    assert not any(layer.has_components() for layer in font.glyphs["c"].layers)


def test_decompose_all_components(source, tmp_path):
    output = tmp_path / "Out.babelfont"
    assert main([str(source), str(output), "--decompose-components"]) == 0
    font = load(output)
    assert not any(
        layer.has_components() for glyph in font.glyphs for layer in glyph.layers
    )


def test_custom_filter(source, tmp_path):
    output = tmp_path / "Out.babelfont"
    args = [str(source), str(output), "--filter", "DropAxisFilter(axis='wght')"]
    assert main(args) == 0
    font = load(output)
    assert font.axes == []
    assert len(font.masters) == 1


def test_error_writes_nothing(source, tmp_path, capsys):
    output = tmp_path / "Out.babelfont"
    assert main([str(source), str(output), "--scale-upem", "big"]) == 1
    assert "Invalid UPEM value" in capsys.readouterr().err
    assert not output.exists()


def test_unknown_input(tmp_path, capsys):
    output = tmp_path / "Out.babelfont"
    assert main([str(tmp_path / "Test.xyz"), str(output)]) == 1
    assert "babelfont: error:" in capsys.readouterr().err
    assert not output.exists()


def test_parseArgs_defaults():
    options = parseArgs(["in.designspace"])
    assert options.output is None
    assert options.decompose_components is None
    assert options.resolve_includes is None
    assert options.rename_glyphs is None
    assert options.filters == []
    assert parseArgs(["in.ufo", "--decompose-components", "a,b"]).decompose_components == (
        "a,b"
    )


def test_filters_declared_in_font(kernedFont, tmp_path):
    kernedFont.format_specific[FILTERS_KEY] = [
        {"name": "dropKerning"},
        {"name": "retainGlyphs", "args": [["a", "b"]], "pre": True},
    ]
    source = tmp_path / "Test.babelfont"
    kernedFont.save(source)
    output = tmp_path / "Out.babelfont"
    assert main([str(source), str(output)]) == 0
    font = load(output)
    assert font.glyphs.keys() == ["a", "b"]
    assert font.masters[0].kerning == {}


def test_resolve_includes_and_rename(kernedFont, tmp_path):
    (tmp_path / "liga.fea").write_text("feature liga { sub a by c; } liga;\n")
    kernedFont.features = Features.from_fea("include(liga.fea);")
    source = tmp_path / "Test.babelfont"
    kernedFont.save(source)
    output = tmp_path / "Out.babelfont"
    args = [str(source), str(output), "--resolve-includes", "--rename-glyphs", "a=A"]
    assert main(args) == 0
    font = load(output)
    assert font.glyphs.keys() == ["A", "b", "c"]
    assert font.glyphs["b"].layers[0].components()[0].reference == "A"
    fea = font.features.to_fea()
    assert "include" not in fea
    assert "sub A by c;" in fea
