from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from fontTools.misc.transform import Identity
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.pointPen import PointToSegmentPen, SegmentToPointPen

from babelfont.common import Anchor, Color, Guide
from babelfont.errors import GlyphNotFound, NeedsDecomposition
from babelfont.shapes import Component, Path, Shape, ShapesPointPen

if TYPE_CHECKING:
    from babelfont.font import Font

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefaultForMaster:
    """The layer is the master's own outline for the glyph."""

    master_id: str


@dataclass(frozen=True)
class AssociatedWithMaster:
    """An additional layer (intermediate, alternate, background) tied to a master."""

    master_id: str


@dataclass(frozen=True)
class FreeFloating:
    """A layer not tied to any master."""

    pass


LayerType = Union[DefaultForMaster, AssociatedWithMaster, FreeFloating]


@dataclass
class Layer:
    width: float = 0
    name: Optional[str] = None
    id: Optional[str] = None
    master: LayerType = field(default_factory=FreeFloating)
    shapes: List[Shape] = field(default_factory=list)
    anchors: List[Anchor] = field(default_factory=list)
    guides: List[Guide] = field(default_factory=list)
    color: Optional[Color] = None
    location: Optional[Dict[str, float]] = None
    smart_component_location: Dict[str, float] = field(default_factory=dict)
    is_background: bool = False
    background_layer_id: Optional[str] = None
    format_specific: Dict[str, Any] = field(default_factory=dict)

    @property
    def master_id(self) -> Optional[str]:
        if isinstance(self.master, (DefaultForMaster, AssociatedWithMaster)):
            return self.master.master_id
        return None

    @property
    def is_default(self) -> bool:
        return isinstance(self.master, DefaultForMaster)

    def paths(self) -> List[Path]:
        return [s for s in self.shapes if isinstance(s, Path)]

    def components(self) -> List[Component]:
        return [s for s in self.shapes if isinstance(s, Component)]

    def has_components(self) -> bool:
        return any(isinstance(s, Component) for s in self.shapes)

    def anchors_dict(self) -> Dict[str, Anchor]:
        return {anchor.name: anchor for anchor in self.anchors}

    def effective_location(self, font: "Font") -> Optional[Dict[str, float]]:
        """Return the designspace location of this layer, or None for a
        free-floating layer without an explicit location.

        A master-linked layer starts from its master's location; an explicit
        location overrides it axis by axis.
        """
        master_id = self.master_id
        if master_id is None:
            return dict(self.location) if self.location is not None else None
        location = dict(font.master(master_id).location)
        if self.location:
            location.update(self.location)
        return location

    def bounds(self):
        """Return (xMin, yMin, xMax, yMax) of the outlines, or None if empty."""
        if self.has_components():
            raise NeedsDecomposition()
        pen = BoundsPen(None)
        self.draw(pen)
        return pen.bounds

    def lsb(self) -> float:
        bounds = self.bounds()
        return bounds[0] if bounds else 0

    def rsb(self) -> float:
        bounds = self.bounds()
        return self.width - bounds[2] if bounds else self.width

    def _referenced_layer(self, font: "Font", reference: str) -> "Layer":
        glyph = font.glyphs.get(reference)
        if glyph is None:
            raise GlyphNotFound(reference)
        master_id = self.master_id
        if master_id is not None:
            layer = glyph.default_layer_for(master_id)
            if layer is not None:
                return layer
        location = self.effective_location(font)
        if location is None:
            location = font.default_location()
        return font.interpolate_glyph(reference, location)

    def decomposed_components(self, font: "Font") -> List[Path]:
        """Return the outlines of all components, flattened recursively.

        Smart component locations are not considered here; use the
        DecomposeComponentReferences filter for those.
        """
        paths = []
        stack = [(c, c.transform.asTransform(), (c.reference,)) for c in reversed(self.components())]
        while stack:
            component, transform, seen = stack.pop()
            layer = self._referenced_layer(font, component.reference)
            for shape in reversed(layer.shapes):
                if isinstance(shape, Path):
                    continue
                if shape.reference in seen:
                    logger.warning(
                        "Cyclical component reference %s in %s; skipped",
                        " -> ".join(seen + (shape.reference,)),
                        self.name or self.id,
                    )
                    continue
                stack.append(
                    (
                        shape,
                        transform.transform(shape.transform.asTransform()),
                        seen + (shape.reference,),
                    )
                )
            for path in layer.paths():
                path = copy.deepcopy(path)
                if transform != Identity:
                    path.transform(transform)
                paths.append(path)
        return paths

    def decompose(self, font: "Font"):
        """Replace all components in place with their decomposed outlines."""
        paths = self.decomposed_components(font)
        self.shapes = self.paths() + paths

    def draw(self, pen):
        self.drawPoints(PointToSegmentPen(pen))

    def drawPoints(self, pointPen):
        for shape in self.shapes:
            shape.drawPoints(pointPen)

    def getPen(self):
        return SegmentToPointPen(self.getPointPen())

    def getPointPen(self):
        return ShapesPointPen(self.shapes)
