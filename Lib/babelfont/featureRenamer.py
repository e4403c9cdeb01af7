"""Rename glyphs throughout a feature file AST."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

import fontTools.feaLib.ast as ast
from fontTools.feaLib.error import FeatureLibError

from babelfont.errors import FilterError
from babelfont.features import Features

logger = logging.getLogger(__name__)


class FeatureRenamer:
    """Rewrite glyph names in a feaLib FeatureFile, in place.

    Glyph class and mark class references are left alone; their definitions
    are renamed where they appear. A glyph class written with ranges is
    spelled out glyph by glyph once one of its members is renamed.
    """

    def __init__(self, mapping: Mapping[str, str]):
        self.mapping = mapping
        self._seen = set()

    def renameName(self, name):
        return self.mapping.get(name, name)

    def renameObject(self, obj):
        if isinstance(obj, (ast.GlyphName, ast.GlyphClass)):
            if id(obj) in self._seen:
                return
            self._seen.add(id(obj))
            if isinstance(obj, ast.GlyphName):
                obj.glyph = self.renameName(obj.glyph)
            else:
                self._renameGlyphClass(obj)
        elif isinstance(obj, (list, tuple)):
            for item in obj:
                self.renameObject(item)

    def _renameGlyphClass(self, glyphclass):
        glyphs = [
            self.renameName(g) if isinstance(g, str) else g for g in glyphclass.glyphs
        ]
        if glyphs != list(glyphclass.glyphs):
            glyphclass.glyphs = glyphs
            glyphclass.original = []
            glyphclass.curr = 0
        for glyph in glyphs:
            self.renameObject(glyph)

    def renameStatements(self, statements):
        for statement in statements:
            if isinstance(statement, ast.Block):
                self.renameStatements(statement.statements)
                continue
            # a few statements hold bare glyph name strings
            if isinstance(statement, ast.LigatureSubstStatement):
                if isinstance(statement.replacement, str):
                    statement.replacement = self.renameName(statement.replacement)
            elif isinstance(statement, ast.MultipleSubstStatement):
                if isinstance(statement.glyph, str):
                    statement.glyph = self.renameName(statement.glyph)
                statement.replacement = [
                    self.renameName(r) if isinstance(r, str) else r
                    for r in statement.replacement
                ]
            for value in vars(statement).values():
                self.renameObject(value)


def renameFeatureGlyphs(
    features: Features,
    oldGlyphs: Iterable[str],
    mapping: Mapping[str, str],
    includeDir: Optional[str] = None,
) -> Features:
    """Return new Features with glyphs renamed by mapping; the code is
    parsed against oldGlyphs, the glyph names it was written for."""
    if features.is_empty() or not mapping:
        return features
    try:
        featureFile = features.parse(glyphNames=oldGlyphs, includeDir=includeDir)
    except FeatureLibError as e:
        raise FilterError(f"Error during glyph renaming: {e}") from e
    FeatureRenamer(mapping).renameStatements(featureFile.statements)
    return Features.from_fea(featureFile.asFea())
