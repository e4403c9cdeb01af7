import logging

from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropAxisFilter(BaseFilter):
    """Remove an axis, together with the masters and layers which lie off
    its default."""

    _args = ("axis",)

    def apply(self, font):
        tag = self.options.axis
        axis = font.axis_by_tag(tag)
        if axis is None:
            logger.warning("Axis %s not found in font", tag)
            return
        logger.info("Dropping axis: %s", tag)
        default = axis.userspace_to_designspace(axis.bounds()[1])

        droppable = {
            master.id
            for master in font.masters
            if master.location.get(tag, default) != default
        }
        for glyph in font.glyphs:
            kept = []
            for layer in glyph.layers:
                if layer.master_id in droppable:
                    continue
                if layer.location and layer.location.get(tag, default) != default:
                    continue
                if layer.location:
                    layer.location.pop(tag, None)
                kept.append(layer)
            if len(kept) != len(glyph.layers):
                self.context.modified.add(glyph.name)
            glyph.layers = kept

        font.masters = [m for m in font.masters if m.id not in droppable]
        for master in font.masters:
            master.location.pop(tag, None)
        for instance in font.instances:
            instance.location.pop(tag, None)
        font.axes = [a for a in font.axes if a.tag != tag]
