"""Leave-one-out sensitivity of aggregate agreement to each annotator."""

from __future__ import annotations

import math
from itertools import combinations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from tqdm import tqdm

from .alpha import alpha_by_dimension, calculate_krippendorff_alpha
from .distance import DistanceFn, hard_distance, soft_distance_for
from .matrix import MIN_UNIT_VALUES, build_reliability_units
from .models import (
    AnnotationMode,
    Dimension,
    LOOAnalysisResult,
    LOOAnnotatorResult,
    LOODelta,
    LOOMetrics,
    OverallMode,
    QCGroupedSample,
    ReliabilityUnit,
)


def remove_annotator(
    groups: Iterable[QCGroupedSample],
    annotator_id: str,
) -> List[QCGroupedSample]:
    """Drop the annotator's entries and any group left with a single rater."""

    reduced = []
    for group in groups:
        entries = tuple(entry for entry in group.entries if entry.annotator_id != annotator_id)
        if len(entries) < MIN_UNIT_VALUES:
            continue
        reduced.append(QCGroupedSample(sample_id=group.sample_id, mode=group.mode, entries=entries))
    return reduced


def agreement_rates(units: Sequence[ReliabilityUnit], soft: DistanceFn) -> tuple:
    """Fraction of units in exact agreement and in pairwise soft agreement."""

    if not units:
        return float("nan"), float("nan")
    hard = sum(1 for unit in units if len(set(unit.values)) == 1)
    soft_count = sum(
        1
        for unit in units
        if all(soft(a, b) == 0 for a, b in combinations(unit.values, 2))
    )
    return hard / len(units), soft_count / len(units)


def compute_loo_metrics(groups: Sequence[QCGroupedSample], mode) -> LOOMetrics:
    soft = soft_distance_for(mode)
    units = build_reliability_units(groups)
    rate_hard, rate_soft = agreement_rates(units, soft)
    return LOOMetrics(
        alpha_hard=calculate_krippendorff_alpha(units, hard_distance).alpha,
        alpha_soft=calculate_krippendorff_alpha(units, soft).alpha,
        alpha_hard_by_dimension=alpha_by_dimension(groups, hard_distance),
        alpha_soft_by_dimension=alpha_by_dimension(groups, soft),
        agreement_rate_hard=rate_hard,
        agreement_rate_soft=rate_soft,
        unit_count=len(units),
        sample_count=len(groups),
    )


def _dimension_delta(
    removed: Mapping[Dimension, float],
    original: Mapping[Dimension, float],
) -> Dict[Dimension, float]:
    return {dim: removed[dim] - original[dim] for dim in original}


def metrics_delta(removed: LOOMetrics, original: LOOMetrics) -> LOODelta:
    return LOODelta(
        alpha_hard=removed.alpha_hard - original.alpha_hard,
        alpha_soft=removed.alpha_soft - original.alpha_soft,
        alpha_hard_by_dimension=_dimension_delta(
            removed.alpha_hard_by_dimension, original.alpha_hard_by_dimension
        ),
        alpha_soft_by_dimension=_dimension_delta(
            removed.alpha_soft_by_dimension, original.alpha_soft_by_dimension
        ),
        agreement_rate_hard=removed.agreement_rate_hard - original.agreement_rate_hard,
        agreement_rate_soft=removed.agreement_rate_soft - original.agreement_rate_soft,
    )


def _sort_key(result: LOOAnnotatorResult):
    delta = result.delta.alpha_hard
    if math.isnan(delta):
        return (1, 0.0, result.annotator_id)
    return (0, -delta, result.annotator_id)


def calculate_loo_analysis(
    groups: Sequence[QCGroupedSample],
    mode=AnnotationMode.SCORE,
    annotator_ids: Optional[Iterable[str]] = None,
    progress: bool = False,
) -> LOOAnalysisResult:
    """Recompute every aggregate metric once per annotator left out.

    Results are ordered by ``delta.alpha_hard`` descending, so the annotator
    whose removal raises agreement the most comes first. Annotators without
    any QC entry can be passed in ``annotator_ids``; their deltas are zero.
    """

    original = compute_loo_metrics(groups, mode)
    if annotator_ids is None:
        annotator_ids = {entry.annotator_id for group in groups for entry in group.entries}

    results = []
    for annotator_id in tqdm(sorted(set(annotator_ids)), desc="Leave-one-out", disable=not progress):
        metrics = compute_loo_metrics(remove_annotator(groups, annotator_id), mode)
        results.append(
            LOOAnnotatorResult(
                annotator_id=annotator_id,
                metrics=metrics,
                delta=metrics_delta(metrics, original),
            )
        )

    return LOOAnalysisResult(
        mode=OverallMode(getattr(mode, "value", mode)),
        original=original,
        annotators=tuple(sorted(results, key=_sort_key)),
    )
