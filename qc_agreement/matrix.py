"""Reliability matrix construction: one unit per (sample, dimension)."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import DIMENSIONS, Dimension, QCGroupedSample, ReliabilityUnit

MIN_UNIT_VALUES = 2


def build_reliability_units(
    groups: Iterable[QCGroupedSample],
    dimension: Optional[Dimension] = None,
) -> List[ReliabilityUnit]:
    """Build units for every dimension, or for ``dimension`` alone.

    Raters that skipped a dimension simply contribute nothing to that unit;
    cells left with fewer than two values are dropped.
    """

    dimensions = DIMENSIONS if dimension is None else (dimension,)
    units: List[ReliabilityUnit] = []
    for group in groups:
        for dim in dimensions:
            values = [
                value
                for value in (entry.result.value(dim) for entry in group.entries)
                if value is not None
            ]
            if len(values) >= MIN_UNIT_VALUES:
                units.append(
                    ReliabilityUnit(sample_id=group.sample_id, dimension=dim, values=tuple(values))
                )
    return units
