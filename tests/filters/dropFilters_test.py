import pytest

from babelfont import (
    AssociatedWithMaster,
    Guide,
    Instance,
    Layer,
    Master,
    Path,
    Position,
)
from babelfont.errors import FilterError
from babelfont.features import Features
from babelfont.filters import (
    DropAxisFilter,
    DropFeaturesFilter,
    DropGuidesFilter,
    DropIncompatiblePathsFilter,
    DropInstancesFilter,
    DropKerningFilter,
    DropSparseMastersFilter,
    DropVariationsFilter,
)

from ..testSupport import masterLayer, rect


def test_drop_features(weightFont):
    weightFont.features = Features.from_fea("feature liga { sub a b by c; } liga;")
    DropFeaturesFilter()(weightFont)
    assert weightFont.features.is_empty()


def test_drop_kerning(kernedFont):
    DropKerningFilter()(kernedFont)
    assert all(master.kerning == {} for master in kernedFont.masters)
    assert kernedFont.first_kern_groups == {}
    assert kernedFont.second_kern_groups == {}


def test_drop_guides(weightFont):
    weightFont.masters[0].guides.append(Guide(Position(0, 500)))
    weightFont.glyphs["a"].layers[1].guides.append(Guide(Position(10, 0, 90)))
    modified = DropGuidesFilter()(weightFont)
    assert modified == {"a"}
    assert weightFont.masters[0].guides == []
    assert all(not layer.guides for glyph in weightFont.glyphs for layer in glyph.layers)


def test_drop_instances(weightFont):
    weightFont.instances.append(Instance("Bold", location={"wght": 700}))
    DropInstancesFilter()(weightFont)
    assert weightFont.instances == []


def test_drop_variations(weightFont):
    weightFont.instances.append(Instance("Bold", location={"wght": 700}))
    modified = DropVariationsFilter()(weightFont)
    assert modified == {"a", "b", "c"}
    assert [m.name for m in weightFont.masters] == ["Regular"]
    assert weightFont.masters[0].location == {}
    assert weightFont.axes == []
    assert weightFont.instances == []
    for glyph in weightFont.glyphs:
        assert [layer.master_id for layer in glyph.layers] == ["m01"]


def test_drop_axis(weightFont):
    a = weightFont.glyphs["a"]
    a.layers.append(
        Layer(
            name="{550}",
            master=AssociatedWithMaster("m01"),
            location={"wght": 550},
            shapes=[rect(0, 0, 150, 150)],
        )
    )
    a.layers.append(
        Layer(
            name="alternate",
            master=AssociatedWithMaster("m01"),
            location={"wght": 400},
            shapes=[rect(0, 0, 100, 100)],
        )
    )
    weightFont.instances.append(Instance("Regular", location={"wght": 400}))
    DropAxisFilter("wght")(weightFont)
    assert weightFont.axes == []
    assert [m.id for m in weightFont.masters] == ["m01"]
    assert weightFont.masters[0].location == {}
    assert weightFont.instances[0].location == {}
    assert [layer.name for layer in a.layers] == [None, "alternate"]
    assert a.layers[1].location == {}


def test_drop_axis_not_found(weightFont, caplog):
    with caplog.at_level("WARNING"):
        modified = DropAxisFilter("opsz")(weightFont)
    assert "Axis opsz not found" in caplog.text
    assert modified == set()
    assert len(weightFont.masters) == 2


def test_drop_sparse_masters(weightFont):
    semibold = Master("Semibold", "m03", location={"wght": 550})
    weightFont.masters.append(semibold)
    a = weightFont.glyphs["a"]
    a.layers.append(masterLayer(semibold, rect(0, 0, 150, 150)))
    modified = DropSparseMastersFilter()(weightFont)
    assert modified == {"a"}
    assert [m.id for m in weightFont.masters] == ["m01", "m02"]
    layer = a.layers[2]
    assert layer.master == AssociatedWithMaster("m01")
    assert layer.location == {"wght": 550}
    assert layer.effective_location(weightFont) == {"wght": 550}


def test_no_sparse_masters(weightFont):
    assert DropSparseMastersFilter()(weightFont) == set()
    assert len(weightFont.masters) == 2


def test_all_masters_sparse(weightFont):
    weightFont.glyphs["a"].layers.pop(1)
    weightFont.glyphs["b"].layers.pop(0)
    with pytest.raises(FilterError, match="All masters are sparse"):
        DropSparseMastersFilter()(weightFont)


def test_drop_incompatible_path_counts(weightFont, caplog):
    a = weightFont.glyphs["a"]
    a.layers[1].shapes.append(rect(300, 0, 400, 100))
    with caplog.at_level("WARNING"):
        modified = DropIncompatiblePathsFilter()(weightFont)
    assert modified == {"a"}
    assert "path counts differ" in caplog.text
    assert all(layer.shapes == [] for layer in a.layers)


def test_drop_incompatible_node_types(weightFont):
    a = weightFont.glyphs["a"]
    a.layers[0].shapes.append(rect(300, 0, 400, 100))
    a.layers[1].shapes = [
        Path.fromNodesString("0 0 l 200 0 l 200 200 l"),
        rect(300, 0, 500, 200),
    ]
    modified = DropIncompatiblePathsFilter()(weightFont)
    assert modified == {"a"}
    assert [p.nodesToString() for p in a.layers[0].paths()] == [
        "300 0 l 400 0 l 400 100 l 300 100 l"
    ]
    assert [p.nodesToString() for p in a.layers[1].paths()] == [
        "300 0 l 500 0 l 500 200 l 300 200 l"
    ]
    # components are untouched
    assert weightFont.glyphs["b"].layers[0].has_components()


def test_compatible_paths_untouched(weightFont):
    assert DropIncompatiblePathsFilter()(weightFont) == set()
