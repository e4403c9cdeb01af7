import logging
import os

from fontTools.feaLib.error import FeatureLibError

from babelfont.errors import FilterError
from babelfont.features import Features, featureIncludeDir
from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class ResolveIncludesFilter(BaseFilter):
    """Inline the files named by ``include`` statements in the feature code.

    Includes are looked up relative to ``path`` if given, otherwise relative
    to the directory the font was loaded from.
    """

    _kwargs = {"path": None}

    @classmethod
    def fromString(cls, s):
        return cls(path=s.strip() or None)

    def apply(self, font):
        if "include" not in font.features.to_fea():
            return
        includeDir = self.options.path
        if includeDir is None:
            includeDir = featureIncludeDir(font.source)
            if includeDir is None:
                raise FilterError("No base path provided and font has no source path")
        includeDir = os.fspath(includeDir)
        logger.info("Resolving feature includes relative to %s", includeDir)
        try:
            featureFile = font.features.parse(
                glyphNames=font.glyphs.keys(), includeDir=includeDir
            )
        except FeatureLibError as e:
            raise FilterError(f"Error resolving includes: {e}") from e
        font.features = Features.from_fea(featureFile.asFea())
