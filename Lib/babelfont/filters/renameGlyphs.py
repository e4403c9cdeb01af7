import logging

from babelfont.constants import GROUP_PREFIX
from babelfont.errors import FilterError
from babelfont.featureRenamer import renameFeatureGlyphs
from babelfont.features import featureIncludeDir
from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class RenameGlyphsFilter(BaseFilter):
    """Rename glyphs given a mapping of old to new names.

    Component references, kerning pairs, kerning groups, variation sequences
    and the feature code follow the new names.
    """

    _args = ("mapping",)

    @classmethod
    def fromString(cls, s):
        mapping = {}
        for item in s.split(","):
            item = item.strip()
            if not item:
                continue
            old, sep, new = item.partition("=")
            if not sep:
                logger.warning("Ignoring glyph rename without '=': %r", item)
                continue
            mapping[old.strip()] = new.strip()
        return cls(mapping)

    def start(self):
        self.options.mapping = dict(self.options.mapping)

    def apply(self, font):
        mapping = {
            old: new
            for old, new in self.options.mapping.items()
            if old != new and old in font.glyphs
        }
        for old in self.options.mapping:
            if old not in font.glyphs:
                logger.warning("Glyph %s to rename is not in the font", old)
        if not mapping:
            return
        logger.info("Renaming %d glyphs", len(mapping))
        oldGlyphs = font.glyphs.keys()

        try:
            font.glyphs.rename(mapping)
        except ValueError as e:
            raise FilterError(str(e)) from e
        self.context.modified.update(mapping.values())

        for glyph in font.glyphs:
            for layer in glyph.layers:
                for component in layer.components():
                    if component.reference in mapping:
                        component.reference = mapping[component.reference]
                        self.context.modified.add(glyph.name)

        for master in font.masters:
            master.kerning = {
                (self._renameSide(left, mapping), self._renameSide(right, mapping)): value
                for (left, right), value in master.kerning.items()
            }
        for groups in (font.first_kern_groups, font.second_kern_groups):
            for name, members in groups.items():
                groups[name] = [mapping.get(m, m) for m in members]
        font.variation_sequences = {
            key: mapping.get(name, name)
            for key, name in font.variation_sequences.items()
        }

        font.features = renameFeatureGlyphs(
            font.features, oldGlyphs, mapping, featureIncludeDir(font.source)
        )

    @staticmethod
    def _renameSide(side, mapping):
        if side.startswith(GROUP_PREFIX):
            return side
        return mapping.get(side, side)
