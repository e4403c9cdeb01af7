from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from babelfont.axis import Axis
from babelfont.layer import DefaultForMaster, Layer


class GlyphCategory(Enum):
    Base = "base"
    Mark = "mark"
    Ligature = "ligature"
    Unknown = "unknown"


@dataclass
class Glyph:
    name: str
    production_name: Optional[str] = None
    category: GlyphCategory = GlyphCategory.Base
    codepoints: List[int] = field(default_factory=list)
    layers: List[Layer] = field(default_factory=list)
    exported: bool = True
    direction: Optional[str] = None
    # parametric axes this glyph exposes when used as a smart component
    component_axes: List[Axis] = field(default_factory=list)
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def default_layer_for(self, master_id: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.master == DefaultForMaster(master_id):
                return layer
        return None

    def component_axis(self, name: str) -> Optional[Axis]:
        for axis in self.component_axes:
            if axis.name == name:
                return axis
        return None

    def component_references(self):
        """The set of glyph names referenced by components in any layer."""
        return {c.reference for layer in self.layers for c in layer.components()}


class GlyphList:
    """An ordered list of glyphs which can also be indexed by name.

    Glyphs must be renamed through rename() so the name index stays current.
    """

    def __init__(self, glyphs=()):
        self._glyphs: List[Glyph] = list(glyphs)
        self._reindex()

    def _reindex(self):
        self._byName: Dict[str, Glyph] = {}
        for glyph in self._glyphs:
            self._byName.setdefault(glyph.name, glyph)

    def __iter__(self) -> Iterator[Glyph]:
        return iter(self._glyphs)

    def __len__(self):
        return len(self._glyphs)

    def __contains__(self, name: str) -> bool:
        return name in self._byName

    def __getitem__(self, key: Union[int, str]) -> Glyph:
        if isinstance(key, int):
            return self._glyphs[key]
        return self._byName[key]

    def __eq__(self, other):
        if not isinstance(other, GlyphList):
            return NotImplemented
        return self._glyphs == other._glyphs

    def __repr__(self):
        return f"GlyphList({[g.name for g in self._glyphs]!r})"

    def get(self, name: str, default=None) -> Optional[Glyph]:
        return self._byName.get(name, default)

    def keys(self) -> List[str]:
        return [g.name for g in self._glyphs]

    def append(self, glyph: Glyph):
        if glyph.name in self._byName:
            raise ValueError(f"Duplicate glyph name: {glyph.name}")
        self._glyphs.append(glyph)
        self._byName[glyph.name] = glyph

    def remove(self, name: str):
        self._glyphs = [g for g in self._glyphs if g.name != name]
        self._byName.pop(name, None)

    def retain(self, predicate):
        """Keep only the glyphs for which predicate(glyph) is true."""
        self._glyphs = [g for g in self._glyphs if predicate(g)]
        self._reindex()

    def sort(self, key):
        self._glyphs.sort(key=key)

    def rename(self, mapping: Dict[str, str]):
        """Rename glyphs by an old name -> new name mapping. Names may be
        swapped, but two glyphs must not end up with the same name."""
        for glyph in self._glyphs:
            glyph.name = mapping.get(glyph.name, glyph.name)
        self._reindex()
        if len(self._byName) != len(self._glyphs):
            raise ValueError("Renaming would give two glyphs the same name")
