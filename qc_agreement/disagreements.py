"""Severity classification of units where annotators disagree."""

from __future__ import annotations

from itertools import combinations
from typing import Iterable, List

from .distance import is_soft_match
from .models import ClassifiedDisagreement, MatchCategory, UnitDetail


def is_disagreement(detail: UnitDetail) -> bool:
    return len(set(detail.values())) > 1


def classify_disagreement(detail: UnitDetail) -> ClassifiedDisagreement:
    """``soft_fail`` when any two ratings conflict even under the soft rule."""

    soft_fail = any(not is_soft_match(a, b) for a, b in combinations(detail.values(), 2))
    category = MatchCategory.SOFT_FAIL if soft_fail else MatchCategory.HARD_ONLY
    return ClassifiedDisagreement(detail=detail, match_category=category)


def find_disagreements(details: Iterable[UnitDetail]) -> List[UnitDetail]:
    return [detail for detail in details if is_disagreement(detail)]


def classify_disagreements(details: Iterable[UnitDetail]) -> List[ClassifiedDisagreement]:
    return [classify_disagreement(detail) for detail in find_disagreements(details)]


def filter_disagreements_by_annotator(
    classified: Iterable[ClassifiedDisagreement],
    annotator_id: str | None,
) -> List[ClassifiedDisagreement]:
    """Keep disagreements that ``annotator_id`` took part in (all when ``None``)."""

    if annotator_id is None:
        return list(classified)
    return [
        item
        for item in classified
        if any(rater == annotator_id for rater, _ in item.detail.ratings)
    ]
