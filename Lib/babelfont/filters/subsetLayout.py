from babelfont.featureSubsetter import subsetFeatures
from babelfont.features import featureIncludeDir
from babelfont.filters.base import BaseFilter
from babelfont.util import splitGlyphList


class SubsetLayoutFilter(BaseFilter):
    """Rewrite the feature code so it only refers to the given glyphs.

    The glyphs themselves are left alone.
    """

    _args = ("glyphs",)

    @classmethod
    def fromString(cls, s):
        return cls(splitGlyphList(s))

    def apply(self, font):
        oldGlyphs = font.glyphs.keys()
        present = set(oldGlyphs)
        newGlyphs = [name for name in self.options.glyphs if name in present]
        font.features = subsetFeatures(
            font.features, oldGlyphs, newGlyphs, featureIncludeDir(font.source)
        )
