"""Annotator Reliability Score (ARS) computed over the QC overlap set."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Sequence

from .details import majority_value
from .distance import is_soft_match
from .models import (
    DIMENSIONS,
    AnnotatorSkillMetrics,
    Dimension,
    DimensionSkill,
    PairUnitDetail,
    QCGroupedSample,
    ScoreUnitDetail,
)

SCORE_HARD_WEIGHT = 0.4
SCORE_SOFT_WEIGHT = 0.4
SCORE_DEVIATION_WEIGHT = 0.2
PAIR_HARD_WEIGHT = 0.5
PAIR_SOFT_WEIGHT = 0.5
# Largest possible gap on the 1-5 scale.
MAX_SCORE_DEVIATION = 4.0


@dataclass
class _Tally:
    checks: int = 0
    hard_matches: int = 0
    soft_matches: int = 0

    def rate_hard(self) -> float:
        return self.hard_matches / self.checks if self.checks else 0.0

    def rate_soft(self) -> float:
        return self.soft_matches / self.checks if self.checks else 0.0


def composite_score(hard_rate: float, soft_rate: float, avg_deviation: float | None) -> float:
    """Weighted ARS; the deviation term only applies to score-mode annotators."""

    if avg_deviation is None:
        return PAIR_HARD_WEIGHT * hard_rate + PAIR_SOFT_WEIGHT * soft_rate
    normalized = min(avg_deviation / MAX_SCORE_DEVIATION, 1.0)
    return (
        SCORE_HARD_WEIGHT * hard_rate
        + SCORE_SOFT_WEIGHT * soft_rate
        + SCORE_DEVIATION_WEIGHT * (1.0 - normalized)
    )


def rank_annotators(metrics: Iterable[AnnotatorSkillMetrics]) -> List[AnnotatorSkillMetrics]:
    """Sort by composite score (best first) and assign 1-based ranks.

    Annotators with equal composite scores are ordered by id.
    """

    ordered = sorted(metrics, key=lambda m: (-m.composite_score, m.annotator_id))
    return [replace(m, rank=position) for position, m in enumerate(ordered, start=1)]


def compute_annotator_skills(
    groups: Sequence[QCGroupedSample],
    score_details: Sequence[ScoreUnitDetail],
    pair_details: Sequence[PairUnitDetail],
) -> List[AnnotatorSkillMetrics]:
    annotator_ids = sorted({entry.annotator_id for group in groups for entry in group.entries})
    details = list(score_details) + list(pair_details)

    metrics = []
    for annotator_id in annotator_ids:
        qc_sample_count = sum(1 for group in groups if annotator_id in group.annotator_ids())

        overall = _Tally()
        per_dimension: Dict[Dimension, _Tally] = {dim: _Tally() for dim in DIMENSIONS}
        deviations: List[float] = []

        for detail in details:
            own = [value for rater, value in detail.ratings if rater == annotator_id]
            others = [value for rater, value in detail.ratings if rater != annotator_id]
            if not own or not others:
                continue
            mine = own[0]
            majority = majority_value(detail.values())

            for tally in (overall, per_dimension[detail.dimension]):
                tally.checks += 1
                if mine == majority:
                    tally.hard_matches += 1
                if is_soft_match(mine, majority):
                    tally.soft_matches += 1

            if isinstance(detail, ScoreUnitDetail):
                others_mean = sum(others) / len(others)
                deviations.append(abs(mine - others_mean))

        avg_deviation = sum(deviations) / len(deviations) if deviations else None
        hard_rate = overall.rate_hard()
        soft_rate = overall.rate_soft()

        metrics.append(
            AnnotatorSkillMetrics(
                annotator_id=annotator_id,
                qc_sample_count=qc_sample_count,
                majority_agreement_rate_hard=hard_rate,
                majority_agreement_rate_soft=soft_rate,
                avg_deviation=avg_deviation,
                composite_score=composite_score(hard_rate, soft_rate, avg_deviation),
                rank=0,
                by_dimension={
                    dim: DimensionSkill(
                        majority_agreement_rate_hard=tally.rate_hard(),
                        majority_agreement_rate_soft=tally.rate_soft(),
                        unit_count=tally.checks,
                    )
                    for dim, tally in per_dimension.items()
                },
            )
        )

    return rank_annotators(metrics)
