import pytest

from babelfont import Font, Glyph, Master

from .testSupport import makeWeightFont, masterLayer, rect


@pytest.fixture
def weightFont():
    return makeWeightFont()


@pytest.fixture
def staticFont():
    """A single-master font with no axes."""
    font = Font()
    master = Master("Regular", "m01")
    font.masters.append(master)
    for name in ("a", "b", "c"):
        font.glyphs.append(Glyph(name, layers=[masterLayer(master, rect(0, 0, 100, 100))]))
    return font


@pytest.fixture
def kernedFont(weightFont):
    font = weightFont
    font.first_kern_groups = {"AB": ["a", "b"]}
    font.second_kern_groups = {"C": ["c"], "B": ["b"]}
    regular = font.masters[0]
    regular.kerning = {
        ("@AB", "@C"): -10,
        ("a", "c"): -20,
        ("b", "@B"): 15,
        ("c", "a"): 5,
    }
    return font
