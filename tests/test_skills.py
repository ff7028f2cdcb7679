"""
Tests for majority voting and the annotator reliability score.
"""

from __future__ import annotations

import pytest

from factories import pair_group, score_group
from qc_agreement.details import build_pair_details, build_score_details, majority_value
from qc_agreement.models import Comparison, Dimension
from qc_agreement.skills import composite_score, compute_annotator_skills

TEXT = Dimension.TEXT_CONSISTENCY


def _skills(groups):
    return compute_annotator_skills(groups, build_score_details(groups), build_pair_details(groups))


def test_majority_value_prefers_highest_count() -> None:
    assert majority_value([3, 5, 5]) == 5
    assert majority_value([Comparison.TIE, Comparison.B_BETTER, Comparison.TIE]) is Comparison.TIE
    assert majority_value([]) is None


def test_majority_value_tie_break_is_canonical_order() -> None:
    assert majority_value([5, 3]) == 3
    assert majority_value([3, 5]) == 3
    assert majority_value([Comparison.B_BETTER, Comparison.A_BETTER]) is Comparison.A_BETTER
    assert majority_value([Comparison.B_BETTER, Comparison.TIE]) is Comparison.TIE


def test_score_mode_skills_and_ranks() -> None:
    groups = [score_group("s1", {"c": {TEXT: 3}, "b": {TEXT: 5}, "a": {TEXT: 5}})]

    skills = {skill.annotator_id: skill for skill in _skills(groups)}

    assert skills["a"].majority_agreement_rate_hard == 1.0
    assert skills["a"].majority_agreement_rate_soft == 1.0
    assert skills["a"].avg_deviation == pytest.approx(1.0)
    assert skills["a"].composite_score == pytest.approx(0.95)

    assert skills["c"].majority_agreement_rate_hard == 0.0
    assert skills["c"].majority_agreement_rate_soft == 0.0
    assert skills["c"].avg_deviation == pytest.approx(2.0)
    assert skills["c"].composite_score == pytest.approx(0.1)

    # a and b tie on composite score; the id decides.
    assert [skills[name].rank for name in ("a", "b", "c")] == [1, 2, 3]
    assert skills["a"].qc_sample_count == 1


def test_pair_mode_skills_use_pair_weights() -> None:
    groups = [
        pair_group(
            "p1",
            {
                "a": {TEXT: Comparison.A_BETTER},
                "b": {TEXT: Comparison.A_BETTER},
                "c": {TEXT: Comparison.TIE},
            },
        ),
        pair_group(
            "p2",
            {
                "a": {TEXT: Comparison.B_BETTER, Dimension.DISTORTION: Comparison.TIE},
                "b": {TEXT: Comparison.B_BETTER, Dimension.DISTORTION: Comparison.TIE},
                "c": {TEXT: Comparison.A_BETTER, Dimension.DISTORTION: Comparison.TIE},
            },
        ),
    ]

    skills = _skills(groups)
    by_id = {skill.annotator_id: skill for skill in skills}

    assert by_id["a"].avg_deviation is None
    assert by_id["a"].composite_score == pytest.approx(1.0)
    # c: TIE vs A>B is a soft match, A>B vs A<B is not, DISTORTION agrees.
    assert by_id["c"].majority_agreement_rate_hard == pytest.approx(1 / 3)
    assert by_id["c"].majority_agreement_rate_soft == pytest.approx(2 / 3)
    assert by_id["c"].composite_score == pytest.approx(0.5)
    assert by_id["c"].by_dimension[TEXT].majority_agreement_rate_hard == 0.0
    assert by_id["c"].by_dimension[TEXT].majority_agreement_rate_soft == 0.5
    assert by_id["c"].by_dimension[TEXT].unit_count == 2
    assert by_id["c"].by_dimension[Dimension.DISTORTION].majority_agreement_rate_hard == 1.0
    assert by_id["c"].by_dimension[Dimension.MOTION_QUALITY].unit_count == 0
    assert skills[-1].annotator_id == "c"
    assert skills[-1].rank == 3


def test_composite_score_bounds() -> None:
    assert composite_score(1.0, 1.0, 0.0) == pytest.approx(1.0)
    assert composite_score(0.0, 0.0, 4.0) == pytest.approx(0.0)
    assert composite_score(0.0, 0.0, 9.0) == pytest.approx(0.0)
    assert composite_score(1.0, 1.0, None) == pytest.approx(1.0)
    assert composite_score(0.0, 0.0, None) == 0.0
    for hard in (0.0, 0.3, 1.0):
        for soft in (0.0, 0.6, 1.0):
            for deviation in (None, 0.0, 1.5, 4.0):
                assert 0.0 <= composite_score(hard, soft, deviation) <= 1.0
