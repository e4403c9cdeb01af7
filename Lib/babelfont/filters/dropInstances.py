import logging

from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropInstancesFilter(BaseFilter):
    def apply(self, font):
        logger.info("Dropping all instances from font")
        font.instances = []
