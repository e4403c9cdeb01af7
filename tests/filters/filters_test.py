import pytest
from fontTools.misc.loggingTools import CapturingLogHandler

from babelfont.filters import (
    FILTERS_KEY,
    BaseFilter,
    DecomposeComponentReferencesFilter,
    DropKerningFilter,
    RenameGlyphsFilter,
    RetainGlyphsFilter,
    ScaleUPMFilter,
    getFilterClass,
    loadFilterFromString,
    loadFilters,
    logger,
)

from ..testSupport import _TempModule


class MarkFilter(BaseFilter):
    """Records the glyphs it sees; reports all but 'b' as modified."""

    _args = ("tag",)
    _kwargs = {"limit": 0}

    def start(self):
        self.seen = []

    def filter(self, glyph):
        self.seen.append(glyph.name)
        return glyph.name != "b"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Retain Glyphs", RetainGlyphsFilter),
        ("retainGlyphs", RetainGlyphsFilter),
        ("ScaleUPM", ScaleUPMFilter),
        ("Decompose Component References", DecomposeComponentReferencesFilter),
        ("Rename Glyphs", RenameGlyphsFilter),
    ],
)
def test_getFilterClass(name, expected):
    assert getFilterClass(name) is expected


def test_getFilterClass_missing():
    with pytest.raises(ImportError):
        getFilterClass("Make Coffee")


def test_loadFilters_empty(weightFont):
    assert loadFilters(weightFont) == ([], [])


def test_loadFilters(weightFont):
    weightFont.format_specific[FILTERS_KEY] = [
        {"name": "Scale UPM", "kwargs": {"unitsPerEm": 2048}},
        {"name": "Retain Glyphs", "args": [["a"]], "pre": True},
        {"name": "Drop Kerning", "exclude": ["c"]},
    ]
    pre, post = loadFilters(weightFont)
    assert [type(f) for f in pre] == [RetainGlyphsFilter]
    assert pre[0].options.glyphs == ["a"]
    assert [type(f) for f in post] == [ScaleUPMFilter, DropKerningFilter]
    assert post[0].options.unitsPerEm == 2048
    assert not post[1].include(weightFont.glyphs["c"])
    assert post[1].include(weightFont.glyphs["a"])


def test_loadFilters_custom_namespace(weightFont):
    weightFont.format_specific[FILTERS_KEY] = [
        {"name": "Mark", "namespace": "myfilters", "args": ["x"]}
    ]
    with _TempModule("myfilters"), _TempModule("myfilters.mark") as temp:
        temp.module.__dict__["MarkFilter"] = MarkFilter
        _, [philter] = loadFilters(weightFont)
    assert isinstance(philter, MarkFilter)
    assert philter.options.tag == "x"


def test_loadFilters_failed(weightFont):
    weightFont.format_specific[FILTERS_KEY] = [{"name": "Make Coffee"}]
    with CapturingLogHandler(logger, level="ERROR") as captor:
        assert loadFilters(weightFont) == ([], [])
    captor.assertRegex("Failed to load filter")


@pytest.mark.parametrize(
    "filterDict, message",
    [
        ({"name": "Retain Glyphs"}, "missing 1 required positional argument"),
        ({"name": "Drop Kerning", "args": ["a"]}, "unsupported positional argument"),
        ({"name": "Scale UPM", "kwargs": {"upm": 1}}, "unsupported keyword"),
    ],
)
def test_loadFilters_bad_arguments(weightFont, filterDict, message):
    weightFont.format_specific[FILTERS_KEY] = [filterDict]
    with pytest.raises(TypeError, match=message):
        loadFilters(weightFont)


def test_include_and_exclude_exclusive():
    with pytest.raises(ValueError, match="mutually exclusive"):
        DropKerningFilter(include=["a"], exclude=["b"])


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("DropKerningFilter", "DropKerningFilter()"),
        ("ScaleUPMFilter(unitsPerEm=2048)", "ScaleUPMFilter(unitsPerEm=2048)"),
        ("RetainGlyphsFilter(glyphs=['a'])", "RetainGlyphsFilter(['a'])"),
        (
            "RenameGlyphsFilter(mapping={'a': 'A'}, include=['a'])",
            "RenameGlyphsFilter({'a': 'A'}, include=['a'])",
        ),
    ],
)
def test_loadFilterFromString(spec, expected):
    assert repr(loadFilterFromString(spec)) == expected


def test_loadFilterFromString_external_module():
    with _TempModule("myfilters") as temp:
        temp.module.__dict__["MarkFilter"] = MarkFilter
        philter = loadFilterFromString("myfilters::MarkFilter(tag='x', limit=2)")
    assert repr(philter) == "MarkFilter('x', limit=2)"


def test_loadFilterFromString_args_missing():
    message = "missing 1 required positional argument: 'glyphs'"
    with pytest.raises(TypeError, match=message):
        loadFilterFromString("RetainGlyphsFilter()")


def test_BaseFilter_call(weightFont, caplog):
    philter = MarkFilter("x", exclude=["a"])
    with caplog.at_level("INFO", logger="babelfont.filters"):
        modified = philter(weightFont)

    assert modified == {"c"}
    # composites with deeper component trees come first
    assert philter.seen == ["c", "b"]
    assert "Running MarkFilter on Test Sans" in caplog.text


def test_BaseFilter_fromString():
    assert repr(DropKerningFilter.fromString("")) == "DropKerningFilter()"
    assert repr(MarkFilter.fromString("y")) == "MarkFilter('y', limit=0)"


def test_BaseFilter_filter_not_implemented(weightFont):
    with pytest.raises(NotImplementedError):
        BaseFilter()(weightFont)
