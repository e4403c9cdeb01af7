import argparse
import logging
import sys

from fontTools.misc.cliTools import makeOutputFileName

from babelfont.convertors import load, save
from babelfont.errors import Error
from babelfont.filters import (
    DecomposeComponentReferencesFilter,
    DropAxisFilter,
    DropFeaturesFilter,
    DropGuidesFilter,
    DropIncompatiblePathsFilter,
    DropInstancesFilter,
    DropKerningFilter,
    DropSparseMastersFilter,
    DropVariationsFilter,
    RenameGlyphsFilter,
    ResolveIncludesFilter,
    RetainGlyphsFilter,
    ScaleUPMFilter,
    SubsetLayoutFilter,
    loadFilterFromString,
    loadFilters,
    logger,
)

# (option destination, filter class), in the order the filters run
FLAG_FILTERS = [
    ("resolve_includes", ResolveIncludesFilter),
    ("retain_glyphs", RetainGlyphsFilter),
    ("subset_layout", SubsetLayoutFilter),
    ("decompose_components", DecomposeComponentReferencesFilter),
    ("rename_glyphs", RenameGlyphsFilter),
    ("drop_features", DropFeaturesFilter),
    ("drop_kerning", DropKerningFilter),
    ("drop_guides", DropGuidesFilter),
    ("drop_instances", DropInstancesFilter),
    ("drop_variations", DropVariationsFilter),
    ("drop_axis", DropAxisFilter),
    ("drop_sparse_masters", DropSparseMastersFilter),
    ("drop_incompatible_paths", DropIncompatiblePathsFilter),
    ("scale_upem", ScaleUPMFilter),
]


def parseArgs(args=None):
    parser = argparse.ArgumentParser(
        prog="babelfont", description="Convert and filter font sources"
    )
    parser.add_argument("input", metavar="INPUT", help="input font source")
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        nargs="?",
        help="output font source; the format is chosen by extension",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "--resolve-includes",
        metavar="PATH",
        nargs="?",
        const="",
        help="inline feature includes, relative to PATH or to the input's directory",
    )
    parser.add_argument(
        "--retain-glyphs",
        metavar="GLYPHS",
        help="comma-separated list of glyphs to keep; all others are removed",
    )
    parser.add_argument(
        "--subset-layout",
        metavar="GLYPHS",
        help="comma-separated list of glyphs the feature code may refer to",
    )
    parser.add_argument(
        "--decompose-components",
        metavar="GLYPHS",
        nargs="?",
        const="",
        help="decompose references to these components (all if no list is given)",
    )
    parser.add_argument(
        "--rename-glyphs",
        metavar="RENAMES",
        help="comma-separated list of old=new glyph name pairs",
    )
    parser.add_argument("--drop-features", action="store_const", const="")
    parser.add_argument("--drop-kerning", action="store_const", const="")
    parser.add_argument("--drop-guides", action="store_const", const="")
    parser.add_argument("--drop-instances", action="store_const", const="")
    parser.add_argument("--drop-variations", action="store_const", const="")
    parser.add_argument("--drop-axis", metavar="TAG")
    parser.add_argument("--drop-sparse-masters", action="store_const", const="")
    parser.add_argument("--drop-incompatible-paths", action="store_const", const="")
    parser.add_argument("--scale-upem", metavar="UPM")
    parser.add_argument(
        "--filter",
        metavar="SPEC",
        action="append",
        default=[],
        dest="filters",
        help="extra filter, e.g. 'mymodule::MyFilter(a=1)'",
    )
    return parser.parse_args(args)


def buildFilters(options):
    filters = []
    for dest, filterClass in FLAG_FILTERS:
        value = getattr(options, dest)
        if value is not None:
            filters.append(filterClass.fromString(value))
    for spec in options.filters:
        filters.append(loadFilterFromString(spec))
    return filters


def main(args=None):
    options = parseArgs(args)
    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.INFO)
    output = options.output or makeOutputFileName(options.input)

    try:
        filters = buildFilters(options)
        font = load(options.input)
        # filters declared in the font run around the ones given as flags
        preFilters, postFilters = loadFilters(font)
        for philter in preFilters + filters + postFilters:
            philter(font)
        save(font, output)
    except (Error, ValueError, TypeError) as e:
        print(f"babelfont: error: {e}", file=sys.stderr)
        return 1

    logger.info("Written on %s", output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
