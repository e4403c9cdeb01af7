import logging

from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropKerningFilter(BaseFilter):
    def apply(self, font):
        logger.info("Dropping all kerning from font")
        for master in font.masters:
            master.kerning = {}
        font.first_kern_groups = {}
        font.second_kern_groups = {}
