"""Thin layer over fontTools' VariationModel working on flat vectors."""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from fontTools.misc.vector import Vector
from fontTools.varLib import models

from babelfont.errors import DeltaError, VariationModelError

logger = logging.getLogger(__name__)

Location = Mapping[str, float]


def _isOrigin(location: Location) -> bool:
    return all(v == 0 for v in location.values())


class VariationModel:
    """Compute deltas over a set of normalized support locations, and
    evaluate them at arbitrary normalized locations.

    Supports are sparse ``tag -> coordinate`` mappings; missing tags are 0.
    One of the supports must be the origin.
    """

    def __init__(self, locations: Sequence[Location], axisOrder: Optional[List[str]] = None):
        locations = [dict(loc) for loc in locations]
        if not any(_isOrigin(loc) for loc in locations):
            raise VariationModelError("Base master not found: no support at origin")
        try:
            self.model = models.VariationModel(locations, axisOrder=axisOrder or [])
        except models.VariationModelError as e:
            raise VariationModelError(str(e)) from e
        self.locations = locations
        self.axisOrder = axisOrder or []

    @property
    def supports(self):
        return self.model.supports

    def getDeltas(self, masterValues: Sequence[Sequence[float]]) -> List[Vector]:
        """Return one delta vector per support, given one value vector per
        input location (in the order the locations were given)."""
        if len(masterValues) != len(self.locations):
            raise DeltaError(
                f"Expected {len(self.locations)} master values, got {len(masterValues)}"
            )
        lengths = {len(v) for v in masterValues}
        if len(lengths) > 1:
            raise DeltaError(f"Master vectors differ in length: {sorted(lengths)}")
        try:
            return self.model.getDeltas([Vector(v) for v in masterValues])
        except (ValueError, TypeError, AssertionError, ZeroDivisionError) as e:
            raise DeltaError(str(e)) from e

    def interpolateFromDeltas(self, location: Location, deltas) -> Vector:
        scalars = self.model.getScalars(dict(location))
        try:
            result = models.VariationModel.interpolateFromDeltasAndScalars(
                deltas, scalars
            )
        except (ValueError, TypeError, AssertionError) as e:
            raise DeltaError(str(e)) from e
        if result is None:
            raise DeltaError(f"No support contributes at location {dict(location)}")
        return result

    def interpolateFromMasters(self, location: Location, masterValues) -> Vector:
        return self.interpolateFromDeltas(location, self.getDeltas(masterValues))
