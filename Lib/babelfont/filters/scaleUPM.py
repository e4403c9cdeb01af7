import logging

import fontTools.feaLib.ast as ast
from fontTools.feaLib.error import FeatureLibError
from fontTools.feaLib.variableScalar import VariableScalar
from fontTools.misc.fixedTools import otRound

from babelfont.constants import UNSCALED_METRICS
from babelfont.errors import FilterError
from babelfont.features import Features, featureIncludeDir
from babelfont.filters.base import BaseFilter
from babelfont.shapes import Component

logger = logging.getLogger(__name__)


class ScaleUPMFilter(BaseFilter):
    """This filter scales the font to a new upm value. Set the target upm in
    the font's filter list like this:

        font.format_specific["com.github.simoncozens.babelfont.filters"] = [
            {"name": "scaleUPM", "kwargs": {"unitsPerEm": 2048}}
        ]
    """

    _kwargs = {
        "unitsPerEm": 1000,
    }

    @classmethod
    def fromString(cls, s):
        try:
            unitsPerEm = int(s)
        except ValueError:
            raise FilterError(f"Invalid UPEM value: {s}")
        if unitsPerEm <= 0:
            raise FilterError(f"Invalid UPEM value: {s}")
        return cls(unitsPerEm=unitsPerEm)

    def _scaleGuides(self, guides):
        for guide in guides:
            guide.pos.x *= self.factor
            guide.pos.y *= self.factor

    def filter(self, glyph):
        """
        Scale a glyph
        """
        for layer in glyph.layers:
            for shape in layer.shapes:
                if isinstance(shape, Component):
                    tx, ty = shape.transform.translation
                    shape.transform.translation = (tx * self.factor, ty * self.factor)
                    continue
                for node in shape.nodes:
                    node.x *= self.factor
                    node.y *= self.factor

            for anchor in layer.anchors:
                anchor.x *= self.factor
                anchor.y *= self.factor

            self._scaleGuides(layer.guides)
            layer.width *= self.factor
        return True

    def apply(self, font):
        newUnitsPerEm = int(self.options.unitsPerEm)
        if font.upm == newUnitsPerEm:
            return

        self.factor = newUnitsPerEm / font.upm
        logger.info(
            "Scaling UPEM from %d to %d, scale factor %g",
            font.upm,
            newUnitsPerEm,
            self.factor,
        )

        # Scale glyphs
        super().apply(font)

        for master in font.masters:
            # Scale kerning
            for pair, value in master.kerning.items():
                master.kerning[pair] = otRound(value * self.factor)

            # Scale metrics
            for name, value in master.metrics.items():
                if name in UNSCALED_METRICS or value is None:
                    continue
                master.metrics[name] = otRound(value * self.factor)

            self._scaleGuides(master.guides)

        self._scaleFeatures(font)

        font.upm = newUnitsPerEm

    def _scaleFeatures(self, font):
        if font.features.is_empty():
            return
        try:
            featureFile = font.features.parse(
                glyphNames=font.glyphs.keys(),
                includeDir=featureIncludeDir(font.source),
            )
        except FeatureLibError as e:
            raise FilterError(f"Error while scaling feature code: {e}") from e
        scaler = FeatureScaler(self.factor)
        scaler.scaleStatements(featureFile.statements)
        if scaler.scaled:
            logger.debug("Scaled %d positioning values in features", scaler.scaled)
            font.features = Features.from_fea(featureFile.asFea())


class FeatureScaler:
    """Scale the value records, anchors and caret positions found in a
    feaLib AST."""

    def __init__(self, factor):
        self.factor = factor
        self.scaled = 0
        self._seen = set()

    def scaleValue(self, value):
        if value is None:
            return None
        self.scaled += 1
        if isinstance(value, VariableScalar):
            value.values = {
                location: otRound(v * self.factor)
                for location, v in value.values.items()
            }
            return value
        return otRound(value * self.factor)

    def _scaleAttributes(self, obj, attrs):
        if id(obj) in self._seen:
            return
        self._seen.add(id(obj))
        for attr in attrs:
            setattr(obj, attr, self.scaleValue(getattr(obj, attr)))

    def scaleObject(self, obj):
        if isinstance(obj, ast.ValueRecord):
            self._scaleAttributes(
                obj, ("xPlacement", "yPlacement", "xAdvance", "yAdvance")
            )
        elif isinstance(obj, (ast.Anchor, ast.AnchorDefinition)):
            self._scaleAttributes(obj, ("x", "y"))
        elif isinstance(obj, (list, tuple)):
            for item in obj:
                self.scaleObject(item)

    def scaleStatements(self, statements):
        for statement in statements:
            if isinstance(statement, ast.Block):
                self.scaleStatements(statement.statements)
            elif isinstance(statement, ast.LigatureCaretByPosStatement):
                statement.carets = [self.scaleValue(c) for c in statement.carets]
            elif isinstance(statement, ast.AnchorDefinition):
                self.scaleObject(statement)
            else:
                for value in vars(statement).values():
                    self.scaleObject(value)
