"""
End-to-end tests for the agreement pipeline.
"""

from __future__ import annotations

import pytest

from factories import pair_record, score_record, uniform_comparisons, uniform_scores
from qc_agreement.models import (
    DIMENSIONS,
    MatchCategory,
    NoAnnotationRecordsError,
    NoQCSamplesError,
    OverallMode,
    ScoreUnitDetail,
)
from qc_agreement.pipeline import calculate_inter_annotator_agreement, run_loo_analysis


def _score_records():
    return [
        score_record(
            "alice",
            {"s1": uniform_scores(5), "s2": uniform_scores(2), "s3": uniform_scores(1)},
            metadata={"s1": {"sample_id": "s1", "prompt": "a cat on a skateboard"}},
        ),
        score_record(
            "bob",
            {"s1": uniform_scores(5), "s2": uniform_scores(3)},
            metadata={"s1": {"sample_id": "s1", "prompt": "ignored duplicate"}},
        ),
        score_record("carol", {"s1": uniform_scores(4), "s2": uniform_scores(3)}),
    ]


def test_score_run_summary() -> None:
    stats = calculate_inter_annotator_agreement(_score_records())

    assert stats.mode is OverallMode.SCORE
    assert stats.detection.qc_sample_ids == ("s1", "s2")
    assert stats.detection.max_frequency == 3
    assert stats.total_checks == 10
    assert len(stats.score_details) == 10
    assert stats.pair_details == ()
    assert stats.krippendorff_hard.method == "hard"
    assert stats.krippendorff_soft.method == "soft"
    assert stats.krippendorff_hard.unit_count == 10
    assert stats.krippendorff_soft.alpha >= stats.krippendorff_hard.alpha
    for dim in DIMENSIONS:
        assert stats.by_dimension[dim].total_checks == 2
        assert stats.by_dimension[dim].hard_alpha == stats.krippendorff_hard.by_dimension[dim]


def test_score_run_disagreements() -> None:
    stats = calculate_inter_annotator_agreement(_score_records())

    assert len(stats.disagreements) == 10
    categories = {
        (item.detail.sample_id, item.match_category) for item in stats.classified_disagreements
    }
    assert categories == {("s1", MatchCategory.HARD_ONLY), ("s2", MatchCategory.SOFT_FAIL)}
    assert all(isinstance(item.detail, ScoreUnitDetail) for item in stats.classified_disagreements)


def test_score_run_lookups() -> None:
    stats = calculate_inter_annotator_agreement(_score_records())

    assert stats.annotator_ids() == ["alice", "bob", "carol"]
    assert sorted(skill.rank for skill in stats.annotator_skills) == [1, 2, 3]
    assert stats.skill_for("bob").qc_sample_count == 2
    assert stats.skill_for("nobody") is None
    assert stats.grouped_sample("s2").annotator_ids() == ["alice", "bob", "carol"]
    assert stats.grouped_sample("s3") is None
    assert stats.sample_detail("s1")["prompt"] == "a cat on a skateboard"
    assert stats.sample_detail("s2") is None


def test_explicit_sample_details_are_passed_through() -> None:
    details = {"s2": {"prompt": "sunset"}}

    stats = calculate_inter_annotator_agreement(_score_records(), sample_details=details)

    assert stats.sample_details == details


def test_pair_run() -> None:
    records = [
        pair_record("x", {"p1": uniform_comparisons("A>B"), "p2": uniform_comparisons("A=B")}),
        pair_record("y", {"p1": uniform_comparisons("A=B"), "p2": uniform_comparisons("A=B")}),
    ]

    stats = calculate_inter_annotator_agreement(records)

    assert stats.mode is OverallMode.PAIR
    assert len(stats.pair_details) == 10
    assert stats.krippendorff_soft.alpha == pytest.approx(1.0)
    assert stats.krippendorff_hard.alpha < 1.0
    assert {item.match_category for item in stats.classified_disagreements} == {MatchCategory.HARD_ONLY}
    assert all(skill.avg_deviation is None for skill in stats.annotator_skills)


def test_mixed_run_and_loo() -> None:
    records = [
        pair_record("x", {"p1": uniform_comparisons("A>B")}),
        pair_record("y", {"p1": uniform_comparisons("A<B")}),
        score_record("a", {"s1": uniform_scores(5)}),
        score_record("b", {"s1": uniform_scores(4)}),
    ]

    stats = calculate_inter_annotator_agreement(records)
    loo = run_loo_analysis(stats)

    assert stats.mode is OverallMode.MIXED
    assert len(stats.grouped_samples) == 2
    categories = {
        item.detail.sample_id: item.match_category for item in stats.classified_disagreements
    }
    assert categories == {"p1": MatchCategory.SOFT_FAIL, "s1": MatchCategory.HARD_ONLY}
    assert loo.mode is OverallMode.MIXED
    assert {item.annotator_id for item in loo.annotators} == {"a", "b", "x", "y"}
    assert loo.original.unit_count == 10
    assert loo.result_for("x").metrics.sample_count == 1


def test_error_conditions() -> None:
    with pytest.raises(NoAnnotationRecordsError):
        calculate_inter_annotator_agreement([])
    with pytest.raises(NoQCSamplesError):
        calculate_inter_annotator_agreement(
            [score_record("a", {"s1": uniform_scores(5)}), score_record("b", {"s2": uniform_scores(5)})]
        )
