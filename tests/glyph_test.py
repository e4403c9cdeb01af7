import copy

import pytest

from babelfont import Glyph, GlyphList


def makeGlyphs(*names):
    return GlyphList(Glyph(name) for name in names)


def test_lookup_by_name_and_index():
    glyphs = makeGlyphs("a", "b", "c")
    assert glyphs["b"].name == "b"
    assert glyphs[2].name == "c"
    assert "c" in glyphs
    assert "d" not in glyphs
    assert glyphs.get("d") is None
    with pytest.raises(KeyError):
        glyphs["d"]


def test_duplicate_names():
    glyphs = makeGlyphs("a")
    with pytest.raises(ValueError, match="Duplicate glyph name: a"):
        glyphs.append(Glyph("a"))


def test_index_follows_changes():
    glyphs = makeGlyphs("a", "b", "c", "d")
    glyphs.remove("b")
    assert "b" not in glyphs
    glyphs.retain(lambda g: g.name != "c")
    assert "c" not in glyphs
    assert glyphs.keys() == ["a", "d"]
    glyphs.append(Glyph("b"))
    glyphs.sort(key=lambda g: g.name)
    assert glyphs.keys() == ["a", "b", "d"]
    assert glyphs["b"] is glyphs[1]


def test_rename():
    glyphs = makeGlyphs("a", "b", "c")
    b = glyphs["b"]
    glyphs.rename({"a": "b", "b": "a"})
    assert glyphs.keys() == ["b", "a", "c"]
    assert glyphs["a"] is b


def test_rename_clash():
    glyphs = makeGlyphs("a", "b")
    with pytest.raises(ValueError, match="same name"):
        glyphs.rename({"a": "b"})


def test_deepcopy_keeps_index():
    glyphs = makeGlyphs("a", "b")
    copied = copy.deepcopy(glyphs)
    assert copied == glyphs
    assert copied["a"] is copied[0]
    assert copied["a"] is not glyphs["a"]


def test_many_glyphs():
    names = [f"uni{i:04X}" for i in range(20000)]
    glyphs = makeGlyphs(*names)
    assert all(glyphs[name].name == name for name in names)
