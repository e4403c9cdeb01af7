import logging

from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropGuidesFilter(BaseFilter):
    def apply(self, font):
        logger.info("Dropping all guides from font")
        for master in font.masters:
            master.guides = []
        for glyph in font.glyphs:
            for layer in glyph.layers:
                if layer.guides:
                    layer.guides = []
                    self.context.modified.add(glyph.name)
