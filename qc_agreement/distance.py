"""Hard and soft equivalence rules between two ratings.

Every distance here is binary: 0 when two ratings count as the same judgement,
1 otherwise. The soft rules relax exact equality in a domain-specific way:

* scores are bucketed into problem levels (5 -> none, 3-4 -> minor,
  1-2 -> major); equal levels match, and the none/minor boundary also matches
  when the scores are one apart (5 vs 4);
* pairwise verdicts only conflict when they point in opposite directions
  (``A>B`` vs ``A<B``); a tie is compatible with either direction.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .models import AnnotationMode, Comparison, OverallMode, Rating

DistanceFn = Callable[[Rating, Rating], float]


class ProblemLevel(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"


_OPPOSED = {
    frozenset((Comparison.A_BETTER, Comparison.B_BETTER)),
}


def score_problem_level(score: int) -> ProblemLevel:
    if score >= 5:
        return ProblemLevel.NONE
    if score >= 3:
        return ProblemLevel.MINOR
    return ProblemLevel.MAJOR


def is_soft_match_score(a: int, b: int) -> bool:
    level_a = score_problem_level(a)
    level_b = score_problem_level(b)
    if level_a is level_b:
        return True
    if ProblemLevel.MAJOR in (level_a, level_b):
        return False
    return abs(a - b) == 1


def is_soft_match_pair(a: Comparison, b: Comparison) -> bool:
    if a == b:
        return True
    return frozenset((Comparison(a), Comparison(b))) not in _OPPOSED


def is_soft_match(a: Rating, b: Rating) -> bool:
    """Soft equivalence for either rating type; mixed types never match."""

    if isinstance(a, Comparison) and isinstance(b, Comparison):
        return is_soft_match_pair(a, b)
    if isinstance(a, Comparison) or isinstance(b, Comparison):
        return False
    return is_soft_match_score(a, b)


def hard_distance(a: Rating, b: Rating) -> float:
    return 0.0 if a == b else 1.0


def soft_score_distance(a: Rating, b: Rating) -> float:
    return 0.0 if is_soft_match_score(a, b) else 1.0


def soft_pair_distance(a: Rating, b: Rating) -> float:
    return 0.0 if is_soft_match_pair(a, b) else 1.0


def soft_distance(a: Rating, b: Rating) -> float:
    return 0.0 if is_soft_match(a, b) else 1.0


def soft_distance_for(mode) -> DistanceFn:
    """Pick the soft distance matching an annotation or overall mode."""

    if mode in (AnnotationMode.PAIR, OverallMode.PAIR):
        return soft_pair_distance
    if mode in (AnnotationMode.SCORE, OverallMode.SCORE):
        return soft_score_distance
    return soft_distance
