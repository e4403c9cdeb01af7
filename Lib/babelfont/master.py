from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from babelfont.common import Guide

if TYPE_CHECKING:
    from babelfont.font import Font


@dataclass
class Master:
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    location: Dict[str, float] = field(default_factory=dict)
    guides: List[Guide] = field(default_factory=list)
    metrics: Dict[str, int] = field(default_factory=dict)
    # (left, right) -> value; group sides carry an "@" prefix
    kerning: Dict[Tuple[str, str], int] = field(default_factory=dict)
    custom_ot_values: Dict[str, Any] = field(default_factory=dict)
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def is_sparse(self, font: "Font") -> bool:
        """True if some glyph has no default layer for this master."""
        return any(glyph.default_layer_for(self.id) is None for glyph in font.glyphs)

    def is_empty(self, font: "Font") -> bool:
        """True if no glyph has a default layer for this master."""
        return all(glyph.default_layer_for(self.id) is None for glyph in font.glyphs)
