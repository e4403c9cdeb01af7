"""Evaluate a glyph's layers at an arbitrary point in the designspace."""
from __future__ import annotations

import copy
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from babelfont.common import Anchor
from babelfont.decomposedAffine import DecomposedAffine, Order
from babelfont.errors import GlyphNotInterpolatable
from babelfont.layer import FreeFloating, Layer
from babelfont.shapes import Component, Node, Path
from babelfont.util import location_to_key
from babelfont.variationModel import VariationModel

logger = logging.getLogger(__name__)

Location = Mapping[str, float]


def normalize_location(location: Location, axes) -> Dict[str, float]:
    """Normalize a designspace location over the given axes, filling in
    missing axes with their defaults."""
    normalized = {}
    for axis in axes:
        value = location.get(axis.tag)
        if value is None:
            normalized[axis.tag] = 0.0
        else:
            normalized[axis.tag] = axis.normalize_designspace_value(value)
    return normalized


def _sameSign(values):
    return all(v >= 0 for v in values) or all(v <= 0 for v in values)


def _interpolate(model, target, vectors):
    return model.interpolateFromMasters(target, vectors)


def _interpolatePaths(glyph_name, index, paths: List[Path], model, target) -> Path:
    signature = paths[0].signature()
    for path in paths[1:]:
        if path.signature() != signature:
            raise GlyphNotInterpolatable(
                glyph_name, f"Path node types do not match at shape index {index}"
            )
    coords = _interpolate(model, target, [p.coordinates() for p in paths])
    template = paths[0]
    nodes = [
        Node(coords[2 * i], coords[2 * i + 1], node.nodetype, node.smooth)
        for i, node in enumerate(template.nodes)
    ]
    return Path(nodes, template.closed)


def _interpolateComponents(
    glyph_name, index, components: List[Component], model, target
) -> Component:
    reference = components[0].reference
    if any(c.reference != reference for c in components):
        raise GlyphNotInterpolatable(
            glyph_name, f"Component references do not match at shape index {index}"
        )
    affines = [c.transform for c in components]
    order = affines[0].order
    if any(a.order is not order for a in affines):
        order = Order.Glyphs
        affines = [a.inOrder(order) for a in affines]

    vectors = [[*a.translation, *a.scale, a.rotation] for a in affines]
    skews = list(zip(*(a.skew for a in affines)))
    interpolateSkew = all(_sameSign(s) for s in skews)
    if interpolateSkew:
        for vector, affine in zip(vectors, affines):
            vector.extend(affine.skew)
    elif any(a.skew != affines[0].skew for a in affines):
        logger.debug(
            "Skew of component %s in %s changes sign; not interpolated",
            reference,
            glyph_name,
        )

    locationAxes = set(components[0].location)
    if any(set(c.location) != locationAxes for c in components):
        raise GlyphNotInterpolatable(
            glyph_name, f"Component locations do not match at shape index {index}"
        )
    locationAxes = sorted(locationAxes)
    for vector, component in zip(vectors, components):
        vector.extend(component.location[a] for a in locationAxes)

    values = list(_interpolate(model, target, vectors))
    tx, ty, sx, sy, rotation = values[:5]
    values = values[5:]
    if interpolateSkew:
        skew = (values[0], values[1])
        values = values[2:]
    else:
        skew = affines[0].skew
    affine = DecomposedAffine((tx, ty), (sx, sy), rotation, skew, order)
    location = dict(zip(locationAxes, values))
    return Component(reference, affine, location)


def _interpolateAnchors(glyph_name, layers: List[Layer], model, target) -> List[Anchor]:
    names = []
    for layer in layers:
        for anchor in layer.anchors:
            if anchor.name not in names:
                names.append(anchor.name)
    anchorMaps = [layer.anchors_dict() for layer in layers]
    anchors = []
    for name in names:
        if not all(name in anchorMap for anchorMap in anchorMaps):
            raise GlyphNotInterpolatable(
                glyph_name, f"Anchor '{name}' missing in some layers"
            )
        x, y = _interpolate(
            model, target, [(m[name].x, m[name].y) for m in anchorMaps]
        )
        anchors.append(Anchor(name, x, y))
    return anchors


def interpolate_layer(
    glyph_name: str,
    layers_locations: Sequence[Tuple[Location, Layer]],
    axes,
    target: Location,
) -> Layer:
    """Interpolate a glyph's layers at a normalized target location.

    ``layers_locations`` pairs each participating layer with its designspace
    location; the default master's layer should come first. ``axes`` are the
    Axis objects used to normalize those locations. The result is a new
    free-floating layer without id or location.
    """
    if not layers_locations:
        raise GlyphNotInterpolatable(glyph_name, "No layers found")

    locations = [normalize_location(loc, axes) for loc, _ in layers_locations]
    layers = [layer for _, layer in layers_locations]
    targetKey = location_to_key(target)
    for location, layer in zip(locations, layers):
        if location_to_key(location) == targetKey:
            result = copy.deepcopy(layer)
            result.id = None
            result.name = None
            result.location = None
            result.smart_component_location = {}
            result.master = FreeFloating()
            return result

    model = VariationModel(locations, [axis.tag for axis in axes])

    shapeCount = max(len(layer.shapes) for layer in layers)
    shapes = []
    for index in range(shapeCount):
        if any(len(layer.shapes) <= index for layer in layers):
            raise GlyphNotInterpolatable(
                glyph_name, f"Layer missing shape index {index}"
            )
        shapesAtIndex = [layer.shapes[index] for layer in layers]
        if all(isinstance(s, Path) for s in shapesAtIndex):
            shapes.append(
                _interpolatePaths(glyph_name, index, shapesAtIndex, model, target)
            )
        elif all(isinstance(s, Component) for s in shapesAtIndex):
            shapes.append(
                _interpolateComponents(glyph_name, index, shapesAtIndex, model, target)
            )
        else:
            raise GlyphNotInterpolatable(
                glyph_name, f"Shape index {index} has differing types across layers"
            )

    anchors = _interpolateAnchors(glyph_name, layers, model, target)
    (width,) = _interpolate(model, target, [(layer.width,) for layer in layers])
    return Layer(width=width, shapes=shapes, anchors=anchors, master=FreeFloating())
