"""Orchestrates the full inter-annotator agreement analysis."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .alpha import compute_krippendorff
from .corpus import detect_overall_mode, detect_qc_samples, group_qc_samples
from .details import build_pair_details, build_score_details
from .disagreements import classify_disagreements, find_disagreements
from .distance import hard_distance, soft_distance_for
from .loaders import build_sample_details
from .loo import calculate_loo_analysis
from .matrix import build_reliability_units
from .models import (
    DIMENSIONS,
    AgreementStats,
    AnnotationRecord,
    DimensionAgreementStats,
    LOOAnalysisResult,
)
from .skills import compute_annotator_skills


def calculate_inter_annotator_agreement(
    records: Sequence[AnnotationRecord],
    sample_details: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> AgreementStats:
    """Compute every agreement statistic for the QC overlap samples.

    ``sample_details`` defaults to the metadata carried by the records
    themselves. Raises ``NoAnnotationRecordsError`` or ``NoQCSamplesError``
    when the input cannot support an agreement analysis.
    """

    detection = detect_qc_samples(records)
    groups = group_qc_samples(detection, records)
    mode = detect_overall_mode(groups)

    score_details = build_score_details(groups)
    pair_details = build_pair_details(groups)
    all_details = [*score_details, *pair_details]

    soft = soft_distance_for(mode)
    units = build_reliability_units(groups)
    krippendorff_hard = compute_krippendorff(groups, hard_distance, "hard", units=units)
    krippendorff_soft = compute_krippendorff(groups, soft, "soft", units=units)

    by_dimension = {
        dim: DimensionAgreementStats(
            dimension=dim,
            total_checks=sum(1 for detail in all_details if detail.dimension is dim),
            hard_alpha=krippendorff_hard.by_dimension[dim],
            soft_alpha=krippendorff_soft.by_dimension[dim],
        )
        for dim in DIMENSIONS
    }

    if sample_details is None:
        sample_details = build_sample_details(records)

    return AgreementStats(
        mode=mode,
        detection=detection,
        total_checks=len(all_details),
        krippendorff_hard=krippendorff_hard,
        krippendorff_soft=krippendorff_soft,
        by_dimension=by_dimension,
        annotator_skills=tuple(compute_annotator_skills(groups, score_details, pair_details)),
        score_details=tuple(score_details),
        pair_details=tuple(pair_details),
        disagreements=tuple(find_disagreements(all_details)),
        classified_disagreements=tuple(classify_disagreements(all_details)),
        grouped_samples=tuple(groups),
        sample_details=dict(sample_details),
    )


def run_loo_analysis(stats: AgreementStats, progress: bool = False) -> LOOAnalysisResult:
    """Leave-one-out analysis over the groups of a finished agreement run."""

    return calculate_loo_analysis(stats.grouped_samples, stats.mode, progress=progress)
