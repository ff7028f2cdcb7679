"""Per-unit agreement details for score and pair QC samples."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence

from .alpha import rating_sort_key
from .matrix import MIN_UNIT_VALUES
from .models import (
    DIMENSIONS,
    AnnotationMode,
    PairUnitDetail,
    QCGroupedSample,
    Rating,
    ScoreUnitDetail,
)


def majority_value(values: Sequence[Rating]) -> Optional[Rating]:
    """Most frequent value; ties go to the first value in canonical order."""

    if not values:
        return None
    counts = Counter(values)
    return min(counts, key=lambda value: (-counts[value], rating_sort_key(value)))


def build_score_details(groups: Iterable[QCGroupedSample]) -> List[ScoreUnitDetail]:
    details = []
    for group in groups:
        if group.mode is not AnnotationMode.SCORE:
            continue
        for dim in DIMENSIONS:
            ratings = tuple(
                (entry.annotator_id, entry.result.value(dim))
                for entry in group.entries
                if entry.result.value(dim) is not None
            )
            if len(ratings) < MIN_UNIT_VALUES:
                continue
            scores = [score for _, score in ratings]
            details.append(
                ScoreUnitDetail(
                    sample_id=group.sample_id,
                    dimension=dim,
                    ratings=ratings,
                    mean=sum(scores) / len(scores),
                    spread=max(scores) - min(scores),
                )
            )
    return details


def build_pair_details(groups: Iterable[QCGroupedSample]) -> List[PairUnitDetail]:
    details = []
    for group in groups:
        if group.mode is not AnnotationMode.PAIR:
            continue
        for dim in DIMENSIONS:
            ratings = tuple(
                (entry.annotator_id, entry.result.value(dim))
                for entry in group.entries
                if entry.result.value(dim) is not None
            )
            if len(ratings) < MIN_UNIT_VALUES:
                continue
            details.append(
                PairUnitDetail(
                    sample_id=group.sample_id,
                    dimension=dim,
                    ratings=ratings,
                    majority_value=majority_value([value for _, value in ratings]),
                )
            )
    return details
