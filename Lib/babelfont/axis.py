"""Font axes and conversion between user, design and normalized coordinates."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from fontTools.varLib.models import normalizeValue, piecewiseLinearMap

from babelfont.errors import IllDefinedAxis

logger = logging.getLogger(__name__)

# (user, design) pairs
AxisMap = List[Tuple[float, float]]


def _mapValue(value: float, mapping: AxisMap) -> float:
    """Map a value through a piecewise-linear mapping given as (from, to) pairs.

    Values outside the mapping are extrapolated along the nearest segment.
    """
    if not mapping:
        return value
    pairs = sorted(mapping)
    if len(pairs) == 1:
        (a, b), = pairs
        return value + b - a
    (x0, y0), (x1, y1) = pairs[0], pairs[1]
    if value < x0:
        return y0 + (value - x0) * (y1 - y0) / (x1 - x0)
    (x0, y0), (x1, y1) = pairs[-2], pairs[-1]
    if value > x1:
        return y1 + (value - x1) * (y1 - y0) / (x1 - x0)
    return piecewiseLinearMap(value, dict(pairs))


@dataclass
class Axis:
    """A variation axis of the font.

    ``min``, ``default`` and ``max`` are user-space coordinates; ``map`` is an
    optional list of ``(user, design)`` pairs.
    """

    name: str
    tag: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    min: Optional[float] = None
    default: Optional[float] = None
    max: Optional[float] = None
    map: Optional[AxisMap] = None
    hidden: bool = False
    localized_names: Dict[str, str] = field(default_factory=dict)
    format_specific: Dict[str, Any] = field(default_factory=dict)

    def bounds(self) -> Tuple[float, float, float]:
        """Return (min, default, max) in user space."""
        missing = [
            attr for attr in ("min", "default", "max") if getattr(self, attr) is None
        ]
        if missing:
            raise IllDefinedAxis(self.tag, f"no {'/'.join(missing)} value")
        return self.min, self.default, self.max

    def design_bounds(self) -> Tuple[float, float, float]:
        """Return (min, default, max) in design space."""
        return tuple(self.userspace_to_designspace(v) for v in self.bounds())

    def userspace_to_designspace(self, value: float) -> float:
        if not self.map:
            return value
        return _mapValue(value, self.map)

    def designspace_to_userspace(self, value: float) -> float:
        if not self.map:
            return value
        return _mapValue(value, [(d, u) for u, d in self.map])

    # shorter names, used throughout the filters
    user_to_design = userspace_to_designspace
    design_to_user = designspace_to_userspace

    def normalize_userspace_value(self, value: float) -> float:
        return normalizeValue(value, self.bounds())

    def normalize_designspace_value(self, value: float) -> float:
        """Normalize a design-space value to -1..+1 around the default.

        The two halves of the axis are normalized independently.
        """
        if not self.map:
            return self.normalize_userspace_value(value)
        lower, default, upper = self.design_bounds()
        if lower > default or default > upper:
            raise IllDefinedAxis(self.tag, "min/default/max are not in order")
        return normalizeValue(value, (lower, default, upper))

    def validate(self):
        lower, default, upper = self.bounds()
        if not lower <= default <= upper:
            raise IllDefinedAxis(self.tag, "min <= default <= max does not hold")
        if self.map:
            users = [u for u, _ in self.map]
            designs = [d for _, d in sorted(self.map)]
            if default not in users:
                raise IllDefinedAxis(self.tag, "map does not contain the default")
            if sorted(set(users)) != sorted(users) or any(
                b <= a for a, b in zip(designs, designs[1:])
            ):
                raise IllDefinedAxis(self.tag, "map is not strictly monotonic")

    def __str__(self):
        return f"{self.name} ({self.tag})"
