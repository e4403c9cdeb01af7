import logging

from babelfont.errors import FilterError
from babelfont.filters.base import BaseFilter
from babelfont.layer import AssociatedWithMaster

logger = logging.getLogger(__name__)


class DropSparseMastersFilter(BaseFilter):
    """Turn sparse masters into intermediate layers of a full master.

    Each layer of a sparse master becomes associated with the first
    non-sparse master and keeps the sparse master's location explicitly.
    """

    def apply(self, font):
        sparse = [m for m in font.masters if m.is_sparse(font)]
        if not sparse:
            return
        full = [m for m in font.masters if m not in sparse]
        if not full:
            raise FilterError("All masters are sparse")
        target = full[0]
        sparseLocations = {m.id: m.location for m in sparse}
        for master in sparse:
            logger.info(
                "Converting sparse master %s to intermediate layers of %s",
                master.name,
                target.name,
            )
        for glyph in font.glyphs:
            for layer in glyph.layers:
                master_id = layer.master_id
                if master_id not in sparseLocations:
                    continue
                location = dict(sparseLocations[master_id])
                if layer.location:
                    location.update(layer.location)
                layer.location = location
                layer.master = AssociatedWithMaster(target.id)
                self.context.modified.add(glyph.name)
        font.masters = full
