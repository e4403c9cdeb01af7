import logging

from babelfont.filters.base import BaseFilter
from babelfont.layer import DefaultForMaster

logger = logging.getLogger(__name__)


class DropVariationsFilter(BaseFilter):
    """Reduce the font to its default master, with no axes or instances."""

    def apply(self, font):
        default = font.default_master()
        if default is None:
            logger.warning("No default master found; not dropping variations")
            return
        logger.info("Dropping all variations from font, keeping %s", default.name)
        font.masters = [default]
        for glyph in font.glyphs:
            layers = [l for l in glyph.layers if l.master == DefaultForMaster(default.id)]
            if len(layers) != len(glyph.layers):
                self.context.modified.add(glyph.name)
            glyph.layers = layers
        default.location = {}
        font.axes = []
        font.instances = []
