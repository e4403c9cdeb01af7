from babelfont.features import Features
from babelfont.filters import SubsetLayoutFilter

from ..testSupport import pushd


def test_subsets_features_only(weightFont):
    weightFont.features = Features.from_fea(
        "feature liga { sub a by c; sub b by c; } liga;"
    )
    SubsetLayoutFilter(["a", "c"])(weightFont)
    fea = weightFont.features.to_fea()
    assert "sub a by c;" in fea
    assert "sub b by c;" not in fea
    assert weightFont.glyphs.keys() == ["a", "b", "c"]


def test_empty_features_untouched(weightFont):
    SubsetLayoutFilter(["a"])(weightFont)
    assert weightFont.features == Features()


def test_includes_found_next_to_source(weightFont, tmp_path):
    sourceDir = tmp_path / "sources"
    sourceDir.mkdir()
    (sourceDir / "liga.fea").write_text(
        "feature liga { sub a by c; sub b by c; } liga;\n"
    )
    weightFont.source = str(sourceDir / "Test.babelfont")
    weightFont.features = Features.from_fea("include(liga.fea);")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    with pushd(elsewhere):
        SubsetLayoutFilter(["a", "c"])(weightFont)
    fea = weightFont.features.to_fea()
    assert "sub a by c;" in fea
    assert "sub b by c;" not in fea


def test_fromString():
    assert SubsetLayoutFilter.fromString("a,b").options.glyphs == ["a", "b"]
