from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from babelfont.axis import Axis
from babelfont.constants import DEFAULT_UPM, GROUP_PREFIX
from babelfont.errors import (
    Error,
    FilterError,
    GlyphNotFound,
    MasterNotFound,
    NoDefaultMaster,
    UnknownSmartComponentAxis,
)
from babelfont.features import Features
from babelfont.glyph import Glyph, GlyphList
from babelfont.instance import Instance
from babelfont.interpolation import interpolate_layer, normalize_location
from babelfont.layer import DefaultForMaster, Layer
from babelfont.master import Master
from babelfont.names import Names
from babelfont.shapes import Component
from babelfont.util import location_to_key, location_to_string, makeOfficialGlyphOrder

logger = logging.getLogger(__name__)


@dataclass
class Font:
    upm: int = DEFAULT_UPM
    version: Tuple[int, int] = (1, 0)
    date: datetime.datetime = field(default_factory=datetime.datetime.now)
    names: Names = field(default_factory=Names)
    axes: List[Axis] = field(default_factory=list)
    instances: List[Instance] = field(default_factory=list)
    masters: List[Master] = field(default_factory=list)
    glyphs: GlyphList = field(default_factory=GlyphList)
    note: Optional[str] = None
    custom_ot_values: Dict[str, Any] = field(default_factory=dict)
    # (selector, codepoint) -> glyph name
    variation_sequences: Dict[Tuple[int, int], str] = field(default_factory=dict)
    features: Features = field(default_factory=Features)
    # group name (without "@") -> member glyph names
    first_kern_groups: Dict[str, List[str]] = field(default_factory=dict)
    second_kern_groups: Dict[str, List[str]] = field(default_factory=dict)
    format_specific: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = field(default=None, compare=False)

    def __repr__(self):
        return "<Font: %d masters, %d glyphs>" % (len(self.masters), len(self.glyphs))

    # Axes and locations

    def axis_by_tag(self, tag: str) -> Optional[Axis]:
        for axis in self.axes:
            if axis.tag == tag:
                return axis
        return None

    def default_location(self) -> Dict[str, float]:
        """The designspace location of every axis's default."""
        return {
            axis.tag: axis.userspace_to_designspace(axis.bounds()[1])
            for axis in self.axes
        }

    def normalize_location(self, location: Mapping[str, float]) -> Dict[str, float]:
        return normalize_location(location, self.axes)

    def userspace_to_designspace(self, location: Mapping[str, float]) -> Dict[str, float]:
        result = {}
        for tag, value in location.items():
            axis = self.axis_by_tag(tag)
            result[tag] = axis.userspace_to_designspace(value) if axis else value
        return result

    def designspace_to_userspace(self, location: Mapping[str, float]) -> Dict[str, float]:
        result = {}
        for tag, value in location.items():
            axis = self.axis_by_tag(tag)
            result[tag] = axis.designspace_to_userspace(value) if axis else value
        return result

    def convert_location_from(
        self, donor: "Font", location: Mapping[str, float], clamp: bool = False
    ) -> Dict[str, float]:
        """Convert a designspace location in the donor font to a designspace
        location in this font.

        Coordinates go through userspace; axes this font lacks are dropped and
        axes the donor lacks take this font's defaults. Out-of-bounds values
        are clamped with a warning if ``clamp`` is true, else refused.
        """
        result = {}
        for axis in self.axes:
            donorAxis = donor.axis_by_tag(axis.tag)
            if donorAxis is None:
                result[axis.tag] = axis.userspace_to_designspace(axis.bounds()[1])
                continue
            design = location.get(axis.tag)
            if design is None:
                design = donorAxis.userspace_to_designspace(donorAxis.bounds()[1])
            user = donorAxis.designspace_to_userspace(design)
            lower, _, upper = axis.bounds()
            if not lower <= user <= upper:
                if not clamp:
                    raise FilterError(
                        f"Location {axis.tag}={user:g} is outside {lower:g}..{upper:g}"
                    )
                clamped = min(max(user, lower), upper)
                logger.warning(
                    "Clamping %s=%g to %g; the result will differ from the donor",
                    axis.tag,
                    user,
                    clamped,
                )
                user = clamped
            result[axis.tag] = axis.userspace_to_designspace(user)
        dropped = set(location) - {axis.tag for axis in self.axes}
        if dropped:
            logger.debug("Dropping axes absent from this font: %s", sorted(dropped))
        return result

    # Masters

    def _complete_location(self, location: Mapping[str, float]) -> Dict[str, float]:
        complete = self.default_location()
        complete.update(location)
        return complete

    def default_master_index(self) -> Optional[int]:
        if len(self.masters) == 1:
            return 0
        default = location_to_key(self.default_location())
        for i, master in enumerate(self.masters):
            if location_to_key(self._complete_location(master.location)) == default:
                return i
        return None

    def default_master(self) -> Optional[Master]:
        index = self.default_master_index()
        return self.masters[index] if index is not None else None

    def master(self, id_or_name: str) -> Master:
        for master in self.masters:
            if master.id == id_or_name:
                return master
        for master in self.masters:
            if master.name == id_or_name:
                return master
        raise MasterNotFound(id_or_name)

    def master_layer_for(self, glyph_name: str, master: Master) -> Optional[Layer]:
        glyph = self.glyphs.get(glyph_name)
        if glyph is None:
            raise GlyphNotFound(glyph_name)
        return glyph.default_layer_for(master.id)

    # Glyphs

    def glyph_order(self, glyphOrder=None) -> List[str]:
        """.notdef first, then the explicit glyph order, then the rest sorted."""
        return makeOfficialGlyphOrder(self.glyphs.keys(), glyphOrder)

    def sort_glyphs(self, glyphOrder=None):
        order = {name: i for i, name in enumerate(self.glyph_order(glyphOrder))}
        self.glyphs.sort(key=lambda g: order[g.name])

    def interpolation_layers(self, glyph: Glyph) -> List[Tuple[Dict[str, float], Layer]]:
        """Return the (designspace location, layer) pairs which define the
        glyph's variation over the font axes, default master first."""
        result = []
        seen = set()
        defaultMaster = self.default_master()
        layers = list(glyph.layers)
        if defaultMaster is not None:
            layers.sort(key=lambda l: l.master != DefaultForMaster(defaultMaster.id))
        for layer in layers:
            if layer.is_background or layer.smart_component_location:
                continue
            if not layer.is_default and layer.location is None:
                continue
            location = layer.effective_location(self)
            if location is None:
                continue
            location = self._complete_location(location)
            key = location_to_key(self.normalize_location(location))
            if key in seen:
                continue
            seen.add(key)
            result.append((location, layer))
        return result

    def interpolate_glyph(self, name: str, location: Mapping[str, float]) -> Layer:
        """Evaluate a glyph at a designspace location."""
        glyph = self.glyphs.get(name)
        if glyph is None:
            raise GlyphNotFound(name)
        target = self.normalize_location(self._complete_location(location))
        logger.debug("Interpolating %s at %s", name, location_to_string(location))
        return interpolate_layer(
            name, self.interpolation_layers(glyph), self.axes, target
        )

    # Validation and I/O

    def validate(self):
        """Raise an Error if the font breaks the data model's invariants."""
        tags = set()
        for axis in self.axes:
            axis.validate()
            tags.add(axis.tag)
        ids = [m.id for m in self.masters]
        if len(set(ids)) != len(ids):
            raise Error("Master ids are not unique")
        for master in self.masters:
            undeclared = set(master.location) - tags
            if undeclared:
                raise Error(
                    f"Master {master.name} uses undeclared axes {sorted(undeclared)}"
                )
            for pair in master.kerning:
                for side, groups in zip(
                    pair, (self.first_kern_groups, self.second_kern_groups)
                ):
                    if side.startswith(GROUP_PREFIX) and side[1:] not in groups:
                        raise Error(f"Kerning pair {pair} refers to unknown group")
        if self.axes and len(self.masters) > 1 and self.default_master() is None:
            raise NoDefaultMaster()
        for glyph in self.glyphs:
            masterIds = [
                layer.master.master_id for layer in glyph.layers if layer.is_default
            ]
            if len(set(masterIds)) != len(masterIds):
                raise Error(f"Glyph {glyph.name} has several layers for one master")
            if {a.name for a in glyph.component_axes} & {a.name for a in self.axes}:
                raise Error(f"Glyph {glyph.name} has component axes named as font axes")
            for layer in glyph.layers:
                for shape in layer.shapes:
                    if isinstance(shape, Component):
                        self._validate_component(shape, layer)
                    else:
                        shape.validate()

    def _validate_component(self, component: Component, layer: Layer):
        if not component.location:
            return
        referenced = self.glyphs.get(component.reference)
        if referenced is None:
            return
        known = {a.name for a in referenced.component_axes}
        for axis in component.location:
            if axis not in known:
                raise UnknownSmartComponentAxis(axis, layer.name or layer.id)

    def save(self, path, **kwargs):
        from babelfont.convertors import save

        save(self, path, **kwargs)

    @classmethod
    def load(cls, path, **kwargs) -> "Font":
        from babelfont.convertors import load

        return load(path, **kwargs)
