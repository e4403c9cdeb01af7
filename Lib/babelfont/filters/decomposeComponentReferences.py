import copy
import logging

from babelfont.axis import Axis
from babelfont.constants import SYNTHETIC_AXIS_TAG
from babelfont.decomposedAffine import DecomposedAffine
from babelfont.errors import UnknownSmartComponentAxis
from babelfont.filters.base import BaseFilter
from babelfont.interpolation import interpolate_layer, normalize_location
from babelfont.shapes import Component, Path
from babelfont.util import (
    checkNoSyntheticAxisTags,
    componentGraph,
    location_to_key,
    reachableGlyphs,
    splitGlyphList,
    topologicalOrder,
)

logger = logging.getLogger(__name__)


class DecomposeComponentReferencesFilter(BaseFilter):
    """Replace component references with the outlines they refer to.

    ``components`` lists the referenced glyph names to decompose; the glyphs
    they reference in turn are decomposed too. None decomposes every
    component. Smart components are interpolated at their parametric location
    combined with the location of the layer they sit in.
    """

    _kwargs = {"components": None}

    @classmethod
    def fromString(cls, s):
        return cls(components=splitGlyphList(s) or None)

    def set_context(self, font):
        ctx = super().set_context(font)
        ctx.graph = componentGraph(font)
        components = self.options.components
        if components is None:
            ctx.targets = None
        else:
            ctx.targets = reachableGlyphs(ctx.graph, components)
        return ctx

    def shouldDecompose(self, component):
        targets = self.context.targets
        return targets is None or component.reference in targets

    def apply(self, font):
        logger.info("Decomposing component references")
        checkNoSyntheticAxisTags(font.axes)
        graph = self.context.graph
        hosts = {glyph.name for glyph in font.glyphs if self.include(glyph)}
        # referenced glyphs first, so later hosts read flattened outlines
        order = [
            name
            for name in topologicalOrder(graph, font.glyphs.keys())
            if name in hosts and self._hasTasks(font.glyphs[name])
        ]
        logger.debug("Decomposing %d glyphs", len(order))
        for name in order:
            self.decomposeGlyph(font, font.glyphs[name])
            self.context.modified.add(name)

    def _hasTasks(self, glyph):
        return any(
            self.shouldDecompose(component)
            for layer in glyph.layers
            for component in layer.components()
        )

    def decomposeGlyph(self, font, glyph):
        """Decompose the targeted components of every layer of the glyph,
        reading referenced glyphs as they currently are."""
        for layer in glyph.layers:
            layer.shapes = self._decomposeShapes(font, layer, layer.shapes, (glyph.name,))

    def _decomposeShapes(self, font, layer, shapes, seen):
        result = []
        for shape in shapes:
            if not isinstance(shape, Component) or not self.shouldDecompose(shape):
                result.append(shape)
                continue
            reference = shape.reference
            if reference not in font.glyphs:
                logger.warning(
                    "Glyph %s refers to missing glyph %s; component skipped",
                    seen[0],
                    reference,
                )
                result.append(shape)
                continue
            if reference in seen:
                logger.warning(
                    "Cyclical component reference %s => %s in %s; removed",
                    " -> ".join(seen),
                    reference,
                    layer.name or layer.id,
                )
                continue
            result.extend(
                self._decomposeShapes(
                    font,
                    layer,
                    self.decomposeComponent(font, shape, layer),
                    seen + (reference,),
                )
            )
        return result

    def decomposeComponent(self, font, component, hostLayer):
        """Return the shapes of a component, transformed, with the referenced
        glyph evaluated at the component's location."""
        referenced = font.glyphs[component.reference]
        layers = [layer for layer in referenced.layers if not layer.is_background]
        if not referenced.component_axes and (len(layers) == 1 or not font.axes):
            for axis in component.location:
                raise UnknownSmartComponentAxis(axis, hostLayer.name or hostLayer.id)
            layer = None
            if hostLayer.master_id is not None:
                layer = referenced.default_layer_for(hostLayer.master_id)
            if layer is None and layers:
                layer = layers[0]
            shapes = layer.shapes if layer is not None else []
        else:
            shapes = self._interpolate(font, referenced, component, hostLayer).shapes
        return _transformShapes(shapes, component.transform.asTransform())

    def _interpolate(self, font, referenced, component, hostLayer):
        # component axes are keyed by name; give them tags for the model
        tags = {
            axis.name: SYNTHETIC_AXIS_TAG.format(i)
            for i, axis in enumerate(referenced.component_axes)
        }
        axes = [
            Axis(
                name=axis.name,
                tag=tags[axis.name],
                min=axis.min,
                default=axis.default,
                max=axis.max,
            )
            for axis in referenced.component_axes
        ] + list(font.axes)
        defaults = {axis.tag: axis.userspace_to_designspace(axis.bounds()[1]) for axis in axes}
        layerName = hostLayer.name or hostLayer.id

        target = dict(defaults)
        for name, value in component.location.items():
            if name not in tags:
                raise UnknownSmartComponentAxis(name, layerName)
            target[tags[name]] = value
        hostLocation = hostLayer.effective_location(font)
        if hostLocation:
            target.update((k, v) for k, v in hostLocation.items() if k in defaults)

        supports = []
        seen = set()
        for layer in referenced.layers:
            if layer.is_background:
                continue
            if not (
                layer.smart_component_location
                or layer.location is not None
                or layer.is_default
            ):
                continue
            location = dict(defaults)
            for name, value in layer.smart_component_location.items():
                if name not in tags:
                    raise UnknownSmartComponentAxis(name, layer.name or layer.id)
                location[tags[name]] = value
            effective = layer.effective_location(font)
            if effective:
                location.update((k, v) for k, v in effective.items() if k in defaults)
            key = location_to_key(normalize_location(location, axes))
            if key in seen:
                continue
            seen.add(key)
            supports.append((location, layer))
        # the support at the default location goes first
        supports.sort(key=lambda s: location_to_key(normalize_location(s[0], axes)) != ())

        return interpolate_layer(
            referenced.name, supports, axes, normalize_location(target, axes)
        )


def _transformShapes(shapes, transform):
    result = []
    for shape in shapes:
        shape = copy.deepcopy(shape)
        if isinstance(shape, Path):
            shape.transform(transform)
        else:
            shape.transform = DecomposedAffine.fromTransform(
                transform.transform(shape.transform.asTransform())
            )
        result.append(shape)
    return result
