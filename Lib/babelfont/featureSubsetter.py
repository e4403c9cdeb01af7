"""Rewrite a feature file AST so that it only refers to a given glyph set.

Rules which mention a glyph outside the set are narrowed or removed; glyph
classes, lookups and features left empty are removed too, together with
any reference to them.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import fontTools.feaLib.ast as ast
from fontTools.feaLib.error import FeatureLibError

from babelfont.errors import FilterError
from babelfont.features import Features

logger = logging.getLogger(__name__)

# marks a statement which must be removed from its block
DELETED = object()

TRIVIAL_STATEMENTS = (
    ast.Comment,
    ast.FeatureNameStatement,
    ast.FontRevisionStatement,
    ast.FeatureReferenceStatement,
    ast.LanguageStatement,
    ast.LanguageSystemStatement,
    ast.LookupFlagStatement,
    ast.LookupReferenceStatement,
    ast.SizeParameters,
    ast.SubtableStatement,
    ast.ScriptStatement,
)


def _comment(text):
    return ast.Comment("# " + text)


class FeatureSubsetter:
    """Depth-first visitor over a feaLib FeatureFile.

    Keeps track of the lookups, features and glyph classes it had to remove,
    so that later references to them can be removed as well.
    """

    def __init__(self, glyphSet: Iterable[str]):
        self.glyphSet = set(glyphSet)
        self.dropped_lookups = set()
        self.dropped_features = set()
        self.empty_classes = set()
        # class name -> glyphs of the class before it was narrowed
        self.original_class_definitions = {}

    def subset(self, featureFile: ast.FeatureFile) -> ast.FeatureFile:
        statements = []
        for statement in featureFile.statements:
            result = self.visit(statement)
            if result is DELETED:
                result = _comment("Removed statement due to no glyphs remaining")
            statements.append(result)
        featureFile.statements = statements
        return featureFile

    # Glyph containers

    def expand(self, container) -> List[str]:
        """Return the glyph names of a container, as they were before any
        class definition was narrowed."""
        if isinstance(container, str):
            return [container]
        if isinstance(container, ast.GlyphClassName):
            name = container.glyphclass.name
            if name in self.original_class_definitions:
                return list(self.original_class_definitions[name])
        if isinstance(container, ast.MarkClassName):
            return list(container.markClass.glyphs)
        return list(container.glyphSet())

    def _markClassSurvives(self, markClass) -> bool:
        return any(g in self.glyphSet for g in markClass.glyphs)

    def filterContainer(self, container):
        """Return the container restricted to the glyph set, or None if no
        glyph remains. Unchanged containers are returned as they are."""
        if container is None:
            return None
        if isinstance(container, str):
            return container if container in self.glyphSet else None
        if isinstance(container, ast.GlyphName):
            return container if container.glyph in self.glyphSet else None
        if isinstance(container, ast.GlyphClassName):
            if container.glyphclass.name in self.empty_classes:
                return None
            return container
        if isinstance(container, ast.MarkClassName):
            return container if self._markClassSurvives(container.markClass) else None
        if isinstance(container, ast.GlyphClass):
            glyphs = [g for g in container.glyphs if g in self.glyphSet]
            if not glyphs:
                return None
            if len(glyphs) == len(container.glyphs):
                return container
            return ast.GlyphClass(glyphs, location=container.location)
        return container

    def filterContainers(self, containers) -> Optional[list]:
        """Filter a sequence of containers; None if any of them empties."""
        result = []
        for container in containers:
            filtered = self.filterContainer(container)
            if filtered is None:
                return None
            result.append(filtered)
        return result

    def _filterAligned(self, sequences):
        """Given parallel glyph lists (length-1 lists broadcast), return the
        lists restricted to the positions where every glyph survives."""
        length = max(len(s) for s in sequences)
        sequences = [s * length if len(s) == 1 else s for s in sequences]
        if any(len(s) != length for s in sequences):
            return None
        keep = [
            i for i in range(length) if all(s[i] in self.glyphSet for s in sequences)
        ]
        return [[s[i] for i in keep] for s in sequences], len(keep) == length

    @staticmethod
    def _container(glyphs):
        if len(glyphs) == 1:
            return ast.GlyphName(glyphs[0])
        return ast.GlyphClass(glyphs)

    # Dispatch

    def visit(self, statement):
        method = getattr(self, "visit" + type(statement).__name__, None)
        if method is None:
            return statement
        return method(statement)

    def _visitStatements(self, statements):
        result = []
        for statement in statements:
            visited = self.visit(statement)
            if visited is not DELETED:
                result.append(visited)
        return result

    def _isSubstantive(self, statement) -> bool:
        if isinstance(statement, ast.LookupReferenceStatement):
            return statement.lookup.name not in self.dropped_lookups
        if isinstance(statement, ast.FeatureReferenceStatement):
            return statement.featureName not in self.dropped_features
        return not isinstance(statement, TRIVIAL_STATEMENTS)

    # Blocks

    def visitFeatureBlock(self, block):
        block.statements = self._visitStatements(block.statements)
        if not any(self._isSubstantive(s) for s in block.statements):
            self.dropped_features.add(block.name)
            logger.debug("Dropping feature %s", block.name.strip())
            return _comment(
                f"Removed feature {block.name.strip()} due to no statements remaining"
            )
        return block

    def visitLookupBlock(self, block):
        block.statements = self._visitStatements(block.statements)
        if not any(self._isSubstantive(s) for s in block.statements):
            self.dropped_lookups.add(block.name)
            logger.debug("Dropping lookup %s", block.name)
            return _comment(f"Removed lookup {block.name} due to no statements remaining")
        return block

    def visitNestedBlock(self, block):
        block.statements = self._visitStatements(block.statements)
        if not any(self._isSubstantive(s) for s in block.statements):
            return _comment("Removed nested block due to no statements remaining")
        return block

    visitVariationBlock = visitNestedBlock

    def visitTableBlock(self, block):
        block.statements = self._visitStatements(block.statements)
        return block

    # References

    def visitFeatureReferenceStatement(self, statement):
        if statement.featureName in self.dropped_features:
            return _comment(
                f"Removed feature reference to {statement.featureName.strip()} "
                "due to feature being dropped"
            )
        return statement

    def visitLookupReferenceStatement(self, statement):
        name = statement.lookup.name
        if name in self.dropped_lookups:
            return _comment(
                f"Removed lookup reference to {name} due to lookup being dropped"
            )
        return statement

    def visitLookupFlagStatement(self, statement):
        for attr in ("markAttachment", "markFilteringSet"):
            container = getattr(statement, attr)
            if container is not None and self.filterContainer(container) is None:
                setattr(statement, attr, ast.GlyphClass([]))
        return statement

    # Class definitions

    def visitGlyphClassDefinition(self, statement):
        name = statement.name
        self.original_class_definitions[name] = list(statement.glyphs.glyphSet())
        glyphs = self.filterContainer(statement.glyphs)
        if glyphs is None:
            self.empty_classes.add(name)
            return _comment(f"Removed glyph class @{name} due to no glyphs remaining")
        statement.glyphs = glyphs
        return statement

    def visitMarkClassDefinition(self, statement):
        glyphs = self.filterContainer(statement.glyphs)
        if glyphs is None:
            return _comment(
                f"Removed mark class definition {statement.markClass.name} "
                "due to no glyphs remaining"
            )
        statement.glyphs = glyphs
        return statement

    # GDEF

    def visitGlyphClassDefStatement(self, statement):
        for attr in ("baseGlyphs", "markGlyphs", "ligatureGlyphs", "componentGlyphs"):
            setattr(statement, attr, self.filterContainer(getattr(statement, attr)))
        return statement

    def visitAttachStatement(self, statement):
        glyphs = self.filterContainer(statement.glyphs)
        if glyphs is None:
            return _comment("Removed GDEF attach statement due to no glyphs remaining")
        statement.glyphs = glyphs
        return statement

    def visitLigatureCaretByIndexStatement(self, statement):
        glyphs = self.filterContainer(statement.glyphs)
        if glyphs is None:
            return _comment(
                "Removed GDEF ligature caret by index statement "
                "due to no glyphs remaining"
            )
        statement.glyphs = glyphs
        return statement

    def visitLigatureCaretByPosStatement(self, statement):
        glyphs = self.filterContainer(statement.glyphs)
        if glyphs is None:
            return _comment(
                "Removed GDEF ligature caret by pos statement due to no glyphs remaining"
            )
        statement.glyphs = glyphs
        return statement

    # GSUB

    def _filterContext(self, statement, prefixAttr="prefix", suffixAttr="suffix"):
        prefix = self.filterContainers(getattr(statement, prefixAttr))
        suffix = self.filterContainers(getattr(statement, suffixAttr))
        if prefix is None or suffix is None:
            return False
        setattr(statement, prefixAttr, prefix)
        setattr(statement, suffixAttr, suffix)
        return True

    def _filterPairwise(self, statement):
        """Narrow the glyphs/replacements of a single or reverse chaining
        substitution, keeping only pairs where both glyphs survive."""
        if len(statement.glyphs) != 1 or len(statement.replacements) != 1:
            glyphs = self.filterContainers(statement.glyphs)
            replacements = self.filterContainers(statement.replacements)
            if glyphs is None or replacements is None:
                return DELETED
            statement.glyphs, statement.replacements = glyphs, replacements
            return statement
        aligned = self._filterAligned(
            [self.expand(statement.glyphs[0]), self.expand(statement.replacements[0])]
        )
        if aligned is None:
            return DELETED
        (froms, tos), unchanged = aligned
        if not froms:
            return DELETED
        if not unchanged:
            statement.glyphs = [self._container(froms)]
            if len(set(tos)) == 1 and len(froms) > 1:
                statement.replacements = [ast.GlyphName(tos[0])]
            else:
                statement.replacements = [self._container(tos)]
        return statement

    def visitSingleSubstStatement(self, statement):
        if not self._filterContext(statement):
            return DELETED
        return self._filterPairwise(statement)

    def visitReverseChainSingleSubstStatement(self, statement):
        if not self._filterContext(statement, "old_prefix", "old_suffix"):
            return DELETED
        return self._filterPairwise(statement)

    def visitMultipleSubstStatement(self, statement):
        if not self._filterContext(statement):
            return DELETED
        replacement = list(statement.replacement)
        if any(not isinstance(r, str) and len(r.glyphSet()) > 1 for r in replacement):
            # class-based multiple substitution: glyph and classes are parallel
            aligned = self._filterAligned(
                [self.expand(statement.glyph)] + [self.expand(r) for r in replacement]
            )
            if aligned is None:
                return DELETED
            (froms, *tos), unchanged = aligned
            if not froms:
                return DELETED
            if not unchanged:
                statement.glyph = self._container(froms)
                statement.replacement = [self._container(t) for t in tos]
            return statement
        glyph = self.filterContainer(statement.glyph)
        replacement = self.filterContainers(replacement)
        if glyph is None or replacement is None:
            return DELETED
        statement.glyph, statement.replacement = glyph, replacement
        return statement

    def visitAlternateSubstStatement(self, statement):
        if not self._filterContext(statement):
            return DELETED
        glyph = self.filterContainer(statement.glyph)
        replacement = self.filterContainer(statement.replacement)
        if glyph is None or replacement is None:
            return DELETED
        statement.glyph, statement.replacement = glyph, replacement
        return statement

    def visitLigatureSubstStatement(self, statement):
        if not self._filterContext(statement):
            return DELETED
        glyphs = self.filterContainers(statement.glyphs)
        replacement = self.filterContainer(statement.replacement)
        if glyphs is None or replacement is None:
            return DELETED
        statement.glyphs, statement.replacement = glyphs, replacement
        return statement

    def _visitChainContext(self, statement):
        for lookups in statement.lookups:
            if lookups is None:
                continue
            if not isinstance(lookups, (list, tuple)):
                lookups = [lookups]
            if any(lookup.name in self.dropped_lookups for lookup in lookups):
                return DELETED
        if not self._filterContext(statement):
            return DELETED
        glyphs = self.filterContainers(statement.glyphs)
        if glyphs is None:
            return DELETED
        statement.glyphs = glyphs
        return statement

    visitChainContextSubstStatement = _visitChainContext
    visitChainContextPosStatement = _visitChainContext

    def _visitIgnore(self, statement):
        contexts = []
        for prefix, glyphs, suffix in statement.chainContexts:
            prefix = self.filterContainers(prefix)
            glyphs = self.filterContainers(glyphs)
            suffix = self.filterContainers(suffix)
            if prefix is None or glyphs is None or suffix is None:
                continue
            contexts.append((prefix, glyphs, suffix))
        if not contexts:
            return DELETED
        statement.chainContexts = contexts
        return statement

    visitIgnoreSubstStatement = _visitIgnore
    visitIgnorePosStatement = _visitIgnore

    # GPOS

    def visitSinglePosStatement(self, statement):
        if not self._filterContext(statement):
            return DELETED
        pos = []
        for container, valuerecord in statement.pos:
            container = self.filterContainer(container)
            if container is None:
                return DELETED
            pos.append((container, valuerecord))
        statement.pos = pos
        return statement

    def visitPairPosStatement(self, statement):
        glyphs1 = self.filterContainer(statement.glyphs1)
        glyphs2 = self.filterContainer(statement.glyphs2)
        if glyphs1 is None or glyphs2 is None:
            return DELETED
        statement.glyphs1, statement.glyphs2 = glyphs1, glyphs2
        return statement

    def visitCursivePosStatement(self, statement):
        glyphclass = self.filterContainer(statement.glyphclass)
        if glyphclass is None:
            return DELETED
        statement.glyphclass = glyphclass
        return statement

    def _filterMarks(self, marks):
        return [(anchor, mc) for anchor, mc in marks if self._markClassSurvives(mc)]

    def visitMarkBasePosStatement(self, statement):
        base = self.filterContainer(statement.base)
        marks = self._filterMarks(statement.marks)
        if base is None or not marks:
            return DELETED
        statement.base, statement.marks = base, marks
        return statement

    def visitMarkMarkPosStatement(self, statement):
        baseMarks = self.filterContainer(statement.baseMarks)
        marks = self._filterMarks(statement.marks)
        if baseMarks is None or not marks:
            return DELETED
        statement.baseMarks, statement.marks = baseMarks, marks
        return statement

    def visitMarkLigPosStatement(self, statement):
        ligatures = self.filterContainer(statement.ligatures)
        marks = [self._filterMarks(component or []) for component in statement.marks]
        if ligatures is None or not any(marks):
            return DELETED
        statement.ligatures, statement.marks = ligatures, marks
        return statement


def subsetFeatures(
    features: Features,
    oldGlyphs: Iterable[str],
    newGlyphs: Iterable[str],
    includeDir: Optional[str] = None,
) -> Features:
    """Return new Features restricted to newGlyphs; the code is parsed
    against oldGlyphs, the glyph set it was written for, with includes
    looked up in includeDir."""
    if features.is_empty():
        return features
    try:
        featureFile = features.parse(glyphNames=oldGlyphs, includeDir=includeDir)
        FeatureSubsetter(newGlyphs).subset(featureFile)
    except FeatureLibError as e:
        raise FilterError(f"Error during feature subsetting: {e}") from e
    return Features.from_fea(featureFile.asFea())
