"""Console-friendly presentation helpers for QC agreement results."""

from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from .models import (
    DIMENSIONS,
    AgreementStats,
    ClassifiedDisagreement,
    LOOAnalysisResult,
    MatchCategory,
    PairUnitDetail,
    ResultFileInfo,
)


def dimension_frame(stats: AgreementStats) -> pd.DataFrame:
    rows = [
        {
            "dimension": dim.value,
            "checks": stats.by_dimension[dim].total_checks,
            "alpha_hard": stats.by_dimension[dim].hard_alpha,
            "alpha_soft": stats.by_dimension[dim].soft_alpha,
        }
        for dim in DIMENSIONS
    ]
    return pd.DataFrame(rows)


def skills_frame(stats: AgreementStats) -> pd.DataFrame:
    rows = [
        {
            "rank": skill.rank,
            "annotator": skill.annotator_id,
            "qc_samples": skill.qc_sample_count,
            "majority_hard": skill.majority_agreement_rate_hard,
            "majority_soft": skill.majority_agreement_rate_soft,
            "avg_deviation": skill.avg_deviation,
            "composite": skill.composite_score,
        }
        for skill in stats.annotator_skills
    ]
    return pd.DataFrame(rows, columns=[
        "rank", "annotator", "qc_samples", "majority_hard",
        "majority_soft", "avg_deviation", "composite",
    ])


def disagreement_frame(classified: Iterable[ClassifiedDisagreement]) -> pd.DataFrame:
    rows = []
    for item in classified:
        detail = item.detail
        rows.append(
            {
                "sample_id": detail.sample_id,
                "dimension": detail.dimension.value,
                "category": item.match_category.value,
                "ratings": ", ".join(
                    f"{rater}={getattr(value, 'value', value)}" for rater, value in detail.ratings
                ),
                "majority": _majority_label(detail),
            }
        )
    return pd.DataFrame(rows, columns=["sample_id", "dimension", "category", "ratings", "majority"])


def loo_frame(result: LOOAnalysisResult) -> pd.DataFrame:
    rows = [
        {
            "annotator": item.annotator_id,
            "alpha_hard": item.metrics.alpha_hard,
            "delta_alpha_hard": item.delta.alpha_hard,
            "alpha_soft": item.metrics.alpha_soft,
            "delta_alpha_soft": item.delta.alpha_soft,
            "delta_rate_hard": item.delta.agreement_rate_hard,
            "delta_rate_soft": item.delta.agreement_rate_soft,
            "units": item.metrics.unit_count,
        }
        for item in result.annotators
    ]
    return pd.DataFrame(rows)


def _majority_label(detail) -> str:
    if isinstance(detail, PairUnitDetail):
        return detail.majority_value.value if detail.majority_value else ""
    return f"mean {detail.mean:.2f} / spread {detail.spread}"


def print_file_summary(infos: Sequence[ResultFileInfo]) -> None:
    print(f"Loaded {len(infos)} result files")
    for info in infos:
        mode = info.mode.value if info.mode else "unknown"
        print(f"\t{info.name}: {info.annotator_id} ({mode}, {info.sample_count} samples)")


def print_header(stats: AgreementStats) -> None:
    detection = stats.detection
    print(
        f"Detected {detection.qc_count} QC samples rated by {detection.max_frequency} "
        f"annotators each ({detection.total_unique_samples} unique samples, "
        f"{detection.annotator_count} annotators, mode: {stats.mode.value})"
    )


def print_alpha_scores(stats: AgreementStats) -> None:
    hard = stats.krippendorff_hard
    soft = stats.krippendorff_soft
    print("\nKrippendorff alpha:")
    print(f"\thard: {hard.alpha:.4f} (D_o={hard.observed_disagreement:.4f}, D_e={hard.expected_disagreement:.4f})")
    print(f"\tsoft: {soft.alpha:.4f} (D_o={soft.observed_disagreement:.4f}, D_e={soft.expected_disagreement:.4f})")
    print(f"\tunits: {hard.unit_count}, checks: {stats.total_checks}")
    print("\nBy dimension:")
    print(dimension_frame(stats).to_string(index=False, float_format="{:.4f}".format))


def print_skills(stats: AgreementStats) -> None:
    print("\nAnnotator reliability:")
    print(skills_frame(stats).to_string(index=False, float_format="{:.4f}".format))


def print_disagreements(classified: Sequence[ClassifiedDisagreement], show_rows: bool = True) -> None:
    severe = sum(1 for item in classified if item.match_category is MatchCategory.SOFT_FAIL)
    print(f"\nDisagreements: {len(classified)} ({severe} soft_fail, {len(classified) - severe} hard_only)")
    if classified and show_rows:
        print(disagreement_frame(classified).to_string(index=False))


def print_loo(result: LOOAnalysisResult) -> None:
    original = result.original
    print("\nLeave-one-out analysis:")
    print(
        f"\toriginal alpha hard={original.alpha_hard:.4f} soft={original.alpha_soft:.4f}, "
        f"agreement hard={original.agreement_rate_hard:.4f} soft={original.agreement_rate_soft:.4f}"
    )
    print(loo_frame(result).to_string(index=False, float_format="{:+.4f}".format))
