import logging

from babelfont.features import Features
from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropFeaturesFilter(BaseFilter):
    def apply(self, font):
        logger.info("Dropping all features from font")
        font.features = Features()
