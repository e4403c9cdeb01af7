import pytest

from babelfont.errors import FilterError
from babelfont.features import Features
from babelfont.featureSubsetter import subsetFeatures


def normalize(text):
    return " ".join(text.split())


def subset(fea, oldGlyphs, newGlyphs):
    return subsetFeatures(Features.from_fea(fea), oldGlyphs, newGlyphs).to_fea()


def test_drops_rules_and_empty_features():
    fea = """
        feature foo { sub a by c; sub b by c; } foo;
        feature bar { sub b by a; } bar;
    """
    result = subset(fea, ["a", "b", "c"], ["a", "c"])
    assert "feature foo { sub a by c; } foo;" in normalize(result)
    assert "# Removed feature bar due to no statements remaining" in result
    assert "sub b" not in result


def test_retaining_everything_keeps_contextual_rules():
    glyphs = [
        "heh-ar.isol",
        "heh-ar.fina",
        "hamzaabove-ar",
        "heh-ar.isol.1",
        "heh-ar.fina.1",
    ]
    rule = (
        "sub [heh-ar.isol heh-ar.fina]' hamzaabove-ar by [heh-ar.isol.1 heh-ar.fina.1];"
    )
    fea = f"feature ccmp {{ {rule} }} ccmp;"
    assert normalize(subset(fea, glyphs, glyphs)) == normalize(fea)


def test_narrows_glyph_ranges():
    glyphs = ["a", "b", "c", "d", "e", "f", "g"]
    fea = "feature test { sub [a-f] by g; } test;"
    result = subset(fea, glyphs, ["a", "b", "g"])
    assert "sub [a b] by g;" in normalize(result)


def test_class_substitution_keeps_pairs_aligned():
    fea = """
        @before = [a b c];
        @after = [d e f];
        feature test { sub @before by @after; } test;
    """
    result = normalize(subset(fea, "abcdef", ["a", "c", "e", "f"]))
    assert "@before = [a c];" in result
    assert "@after = [e f];" in result
    # a -> d and b -> e lost one side each; only c -> f survives
    assert "sub c by f;" in result


def test_empty_class_definition_removed():
    fea = """
        @gone = [b];
        feature test { sub a by c; pos @gone 10; } test;
    """
    result = subset(fea, "abc", "ac")
    assert "# Removed glyph class @gone due to no glyphs remaining" in result
    assert "@gone 10" not in result
    assert "sub a by c;" in result


def test_dropped_lookup_references_cascade():
    fea = """
        lookup L1 { sub b by c; } L1;
        feature test { lookup L1; } test;
        feature keep { sub a by c; } keep;
    """
    result = subset(fea, "abc", "ac")
    assert "# Removed lookup L1 due to no statements remaining" in result
    assert "# Removed feature test due to no statements remaining" in result
    assert "feature keep" in result


def test_dropped_feature_references_removed():
    fea = """
        feature bar { sub b by c; } bar;
        feature aalt { feature bar; sub a by c; } aalt;
    """
    result = subset(fea, "abc", "ac")
    assert "# Removed feature bar due to no statements remaining" in result
    assert "# Removed feature reference to bar due to feature being dropped" in result
    assert "sub a by c;" in result


def test_live_lookup_reference_keeps_feature():
    fea = """
        lookup L1 { sub a by c; } L1;
        feature test { lookup L1; } test;
    """
    result = normalize(subset(fea, "abc", "ac"))
    assert "feature test { lookup L1; } test;" in result


def test_contextual_lookup_to_dropped_lookup():
    fea = """
        lookup L1 { sub b by c; } L1;
        feature test { sub a c' lookup L1; sub a by c; } test;
    """
    result = normalize(subset(fea, "abc", "ac"))
    assert "lookup L1;" not in result
    assert "sub a by c;" in result


def test_lookupflag_mark_filtering_set():
    fea = """
        lookup L1 {
            lookupflag UseMarkFilteringSet [acute];
            sub a by c;
        } L1;
    """
    result = normalize(subset(fea, ["a", "c", "acute"], ["a", "c"]))
    assert "UseMarkFilteringSet [];" in result
    assert "acute" not in result


def test_ignore_statements():
    fea = "feature test { ignore sub a c', b c'; sub c by a; } test;"
    result = normalize(subset(fea, "abc", "ac"))
    assert "ignore sub a c';" in result
    assert "sub c by a;" in result


def test_multiple_and_ligature_substitutions():
    fea = """
        feature test {
            sub f_i by f i;
            sub f_l by f l;
            sub f i by f_i;
            sub f l by f_l;
        } test;
    """
    glyphs = ["f", "i", "l", "f_i", "f_l"]
    result = normalize(subset(fea, glyphs, ["f", "i", "f_i"]))
    assert "sub f_i by f i;" in result
    assert "sub f i by f_i;" in result
    assert "f_l" not in result


def test_positioning():
    fea = """
        markClass [acute grave] <anchor 0 500> @TOP;
        feature kern { pos a b -10; pos [a b] c 20; } kern;
        feature mark { pos base [a b] <anchor 250 450> mark @TOP; } mark;
    """
    glyphs = ["a", "b", "c", "acute", "grave"]
    result = normalize(subset(fea, glyphs, ["a", "c", "grave"]))
    assert "markClass [grave] <anchor 0 500> @TOP;" in result
    assert "pos a b -10;" not in result
    assert "pos [a] c 20;" in result
    assert "pos base [a] <anchor 250 450> mark @TOP;" in result


def test_mark_class_without_survivors():
    fea = """
        markClass [acute] <anchor 0 500> @TOP;
        feature mark { pos base [a b] <anchor 250 450> mark @TOP; } mark;
    """
    result = subset(fea, ["a", "b", "acute"], ["a", "b"])
    assert "# Removed mark class definition TOP due to no glyphs remaining" in result
    assert "# Removed feature mark due to no statements remaining" in result


@pytest.mark.parametrize(
    "fea, glyphs, retained",
    [
        (
            "feature foo { sub a by c; sub b by c; } foo; feature bar { sub b by a; } bar;",
            "abc",
            "ac",
        ),
        (
            "@before = [a b c]; @after = [d e f]; feature test { sub @before by @after; } test;",
            "abcdef",
            "acef",
        ),
    ],
)
def test_idempotent(fea, glyphs, retained):
    once = subsetFeatures(Features.from_fea(fea), glyphs, retained)
    twice = subsetFeatures(once, retained, retained)
    assert twice.to_fea() == once.to_fea()


def test_empty_features_untouched():
    features = Features()
    assert subsetFeatures(features, "abc", "a") is features


def test_parse_error():
    with pytest.raises(FilterError, match="Error during feature subsetting"):
        subset("feature test { sub a by } test;", "abc", "a")
