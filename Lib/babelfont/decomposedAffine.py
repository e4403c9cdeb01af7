from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from fontTools.misc.transform import Identity, Transform


class Order(Enum):
    """The order in which the parts of a decomposed affine are applied."""

    # translate . scale . skew . rotate
    Default = "Default"
    # translate . rotate . skew . scale
    Glyphs = "Glyphs"


@dataclass
class DecomposedAffine:
    """An affine transformation stored as its components.

    Rotation and skew angles are in radians.
    """

    translation: Tuple[float, float] = (0.0, 0.0)
    scale: Tuple[float, float] = (1.0, 1.0)
    rotation: float = 0.0
    skew: Tuple[float, float] = (0.0, 0.0)
    order: Order = Order.Default

    def asTransform(self) -> Transform:
        t = Transform().translate(*self.translation)
        if self.order is Order.Glyphs:
            return t.rotate(self.rotation).skew(*self.skew).scale(*self.scale)
        return t.scale(*self.scale).skew(*self.skew).rotate(self.rotation)

    @classmethod
    def fromTransform(cls, transform) -> "DecomposedAffine":
        """Decompose a 2x3 affine matrix into translate . rotate . skew . scale
        (the Glyphs order) with the x scale always positive."""
        xx, xy, yx, yy, dx, dy = transform
        sx = math.hypot(xx, xy)
        if sx == 0:
            return cls((dx, dy), (0.0, yy), 0.0, (0.0, 0.0), Order.Glyphs)
        rotation = math.atan2(xy, xx)
        c, s = xx / sx, xy / sx
        a = c * yx + s * yy
        sy = -s * yx + c * yy
        skew_x = math.atan2(a, sy) if sy >= 0 else math.atan2(-a, -sy)
        return cls((dx, dy), (sx, sy), rotation, (skew_x, 0.0), Order.Glyphs)

    def isIdentity(self) -> bool:
        return self.asTransform() == Identity

    def transformPoint(self, pt):
        return self.asTransform().transformPoint(pt)

    def inOrder(self, order: Order) -> "DecomposedAffine":
        """Return an equivalent affine decomposed in the given order."""
        if order is self.order:
            return self
        if order is Order.Glyphs:
            return self.fromTransform(self.asTransform())
        raise ValueError(f"Cannot decompose into {order} order")

    def as_tuple(self):
        return (
            *self.translation,
            *self.scale,
            self.rotation,
            *self.skew,
        )
