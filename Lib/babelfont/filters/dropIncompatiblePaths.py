import logging

from babelfont.filters.base import BaseFilter

logger = logging.getLogger(__name__)


class DropIncompatiblePathsFilter(BaseFilter):
    """Remove paths which cannot interpolate across a glyph's layers.

    If the layers disagree on the number of paths, every path is removed;
    otherwise only the paths whose node types differ between layers.
    """

    def filter(self, glyph):
        layers = [
            layer
            for layer in glyph.layers
            if not layer.is_background and (layer.is_default or layer.location is not None)
        ]
        if len(layers) < 2:
            return False
        pathLists = [layer.paths() for layer in layers]
        if len({len(paths) for paths in pathLists}) > 1:
            logger.warning("Dropping all paths of %s: path counts differ", glyph.name)
            for layer in layers:
                layer.shapes = layer.components()
            return True
        incompatible = [
            index
            for index, paths in enumerate(zip(*pathLists))
            if len({p.signature() for p in paths}) > 1
        ]
        if not incompatible:
            return False
        logger.warning(
            "Dropping incompatible paths %s of %s",
            ", ".join(str(i) for i in incompatible),
            glyph.name,
        )
        for layer, paths in zip(layers, pathLists):
            drop = {id(paths[i]) for i in incompatible}
            layer.shapes = [s for s in layer.shapes if id(s) not in drop]
        return True

    def apply(self, font):
        logger.info("Dropping incompatible paths from font")
        super().apply(font)
