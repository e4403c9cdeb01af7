import logging

from babelfont.constants import GROUP_PREFIX
from babelfont.featureSubsetter import subsetFeatures
from babelfont.features import featureIncludeDir
from babelfont.filters.base import BaseFilter
from babelfont.filters.decomposeComponentReferences import (
    DecomposeComponentReferencesFilter,
)
from babelfont.shapes import Component
from babelfont.util import splitGlyphList

logger = logging.getLogger(__name__)


class RetainGlyphsFilter(BaseFilter):
    """Subset the font to the given glyphs.

    Components referring to glyphs which are not kept are decomposed first;
    kerning groups, kerning pairs, masters left without any glyph and the
    feature code are then pruned so nothing refers to a removed glyph.
    """

    _args = ("glyphs",)

    @classmethod
    def fromString(cls, s):
        return cls(splitGlyphList(s))

    def start(self):
        self.options.glyphs = list(self.options.glyphs)

    def apply(self, font):
        oldGlyphs = font.glyphs.keys()
        retained = set(self.options.glyphs) & set(oldGlyphs)
        logger.info("Retaining %d of %d glyphs", len(retained), len(oldGlyphs))

        external = set()
        for name in retained:
            for layer in font.glyphs[name].layers:
                external.update(
                    c.reference for c in layer.components() if c.reference not in retained
                )
        if external:
            decomposer = DecomposeComponentReferencesFilter(
                components=sorted(external), include=sorted(retained)
            )
            decomposer(font)
            self.context.modified.update(decomposer.context.modified & retained)
        self._removeDanglingComponents(font, retained)

        font.glyphs.retain(lambda g: g.name in retained)
        font.variation_sequences = {
            key: name for key, name in font.variation_sequences.items() if name in retained
        }

        font.first_kern_groups = _filterGroups(font.first_kern_groups, retained)
        font.second_kern_groups = _filterGroups(font.second_kern_groups, retained)
        for master in font.masters:
            master.kerning = {
                (left, right): value
                for (left, right), value in master.kerning.items()
                if _isLive(left, font.first_kern_groups, retained)
                and _isLive(right, font.second_kern_groups, retained)
            }

        if len(font.glyphs):
            self._dropEmptyMasters(font)

        font.features = subsetFeatures(
            font.features, oldGlyphs, retained, featureIncludeDir(font.source)
        )

    def _removeDanglingComponents(self, font, retained):
        for name in retained:
            glyph = font.glyphs[name]
            for layer in glyph.layers:
                kept = [
                    s
                    for s in layer.shapes
                    if not isinstance(s, Component) or s.reference in retained
                ]
                if len(kept) != len(layer.shapes):
                    logger.warning(
                        "Removing components of %s referring to missing glyphs", name
                    )
                    layer.shapes = kept
                    self.context.modified.add(name)

    def _dropEmptyMasters(self, font):
        empty = {master.id for master in font.masters if master.is_empty(font)}
        if not empty:
            return
        for master in font.masters:
            if master.id in empty:
                logger.info("Dropping master %s which has no glyphs left", master.name)
        font.masters = [m for m in font.masters if m.id not in empty]
        for glyph in font.glyphs:
            glyph.layers = [l for l in glyph.layers if l.master_id not in empty]


def _filterGroups(groups, retained):
    result = {}
    for name, members in groups.items():
        members = [m for m in members if m in retained]
        if members:
            result[name] = members
    return result


def _isLive(side, groups, retained):
    if side.startswith(GROUP_PREFIX):
        return side[len(GROUP_PREFIX) :] in groups
    return side in retained
