"""Krippendorff alpha over reliability units with a pluggable distance."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np

from .distance import DistanceFn
from .matrix import build_reliability_units
from .models import (
    DIMENSIONS,
    AlphaComputation,
    Comparison,
    Dimension,
    KrippendorffResult,
    QCGroupedSample,
    Rating,
    ReliabilityUnit,
)

_COMPARISON_ORDER = {value: position for position, value in enumerate(Comparison)}


def rating_sort_key(value: Rating) -> Tuple[int, float]:
    """Canonical order: scores ascending, then A>B, A=B, A<B."""

    if isinstance(value, Comparison):
        return (1, _COMPARISON_ORDER[value])
    return (0, value)


def calculate_krippendorff_alpha(
    units: Sequence[ReliabilityUnit],
    distance: DistanceFn,
) -> AlphaComputation:
    """Alpha, observed and expected disagreement for a list of units.

    Works on the value-coincidence matrix: every ordered pair of values inside
    a unit adds ``1 / (m_u - 1)`` to its cell, so with ``n`` pairable values

        D_o = sum(o_ck * d_ck) / n
        D_e = sum(n_c * n_k * d_ck) / (n * (n - 1))

    which equals averaging pairwise distances within units (weighted by
    ``1 / (m_u - 1)``) against pairwise distances over the pooled values.
    Alpha is 1 when the pooled values show no disagreement at all, and
    ``nan`` when there is nothing to compare.
    """

    units = [unit for unit in units if len(unit.values) >= 2]
    if not units:
        return AlphaComputation(float("nan"), 0.0, 0.0, 0)

    domain = sorted({value for unit in units for value in unit.values}, key=rating_sort_key)
    index = {value: position for position, value in enumerate(domain)}

    value_counts = np.zeros((len(units), len(domain)), dtype=float)
    for row, unit in enumerate(units):
        for value in unit.values:
            value_counts[row, index[value]] += 1

    coincidence = _coincidence_matrix(value_counts)
    delta = np.array([[distance(a, b) for b in domain] for a in domain], dtype=float)

    marginals = value_counts.sum(axis=0)
    n = float(marginals.sum())
    observed = float((coincidence * delta).sum()) / n
    expected_counts = np.outer(marginals, marginals) - np.diag(marginals)
    expected = float((expected_counts * delta).sum()) / (n * (n - 1.0))

    if expected == 0:
        alpha = 1.0
    else:
        alpha = 1.0 - observed / expected
    return AlphaComputation(alpha, observed, expected, len(units))


def _coincidence_matrix(value_counts: np.ndarray) -> np.ndarray:
    coincidence = np.zeros((value_counts.shape[1], value_counts.shape[1]), dtype=float)
    for counts in value_counts:
        pairable = counts.sum()
        if pairable < 2:
            continue
        coincidence += (np.outer(counts, counts) - np.diag(counts)) / (pairable - 1.0)
    return coincidence


def alpha_by_dimension(
    groups: Sequence[QCGroupedSample],
    distance: DistanceFn,
) -> Dict[Dimension, float]:
    return {
        dim: calculate_krippendorff_alpha(build_reliability_units(groups, dim), distance).alpha
        for dim in DIMENSIONS
    }


def compute_krippendorff(
    groups: Sequence[QCGroupedSample],
    distance: DistanceFn,
    method: str,
    units: List[ReliabilityUnit] | None = None,
) -> KrippendorffResult:
    """Global alpha for ``groups`` plus the per-dimension breakdown."""

    if units is None:
        units = build_reliability_units(groups)
    overall = calculate_krippendorff_alpha(units, distance)
    return KrippendorffResult(
        alpha=overall.alpha,
        observed_disagreement=overall.observed_disagreement,
        expected_disagreement=overall.expected_disagreement,
        method=method,
        by_dimension=alpha_by_dimension(groups, distance),
        unit_count=overall.unit_count,
    )
