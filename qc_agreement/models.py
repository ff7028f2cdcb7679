"""Shared data structures and enums for the QC agreement pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple, Union


class AgreementError(ValueError):
    """Base class for recoverable agreement-analysis conditions."""


class NoAnnotationRecordsError(AgreementError):
    """Raised when no usable annotation result documents were supplied."""


class NoQCSamplesError(AgreementError):
    """Raised when no sample was rated by more than one annotator."""


class Dimension(str, Enum):
    """The five quality axes every sample is rated on."""

    TEXT_CONSISTENCY = "text_consistency"
    TEMPORAL_CONSISTENCY = "temporal_consistency"
    VISUAL_QUALITY = "visual_quality"
    DISTORTION = "distortion"
    MOTION_QUALITY = "motion_quality"


DIMENSIONS: Tuple[Dimension, ...] = tuple(Dimension)


class Comparison(str, Enum):
    """Outcome of a pairwise comparison between video A and video B."""

    A_BETTER = "A>B"
    TIE = "A=B"
    B_BETTER = "A<B"


class AnnotationMode(str, Enum):
    PAIR = "pair"
    SCORE = "score"


class OverallMode(str, Enum):
    """Mode of a whole analysis run; ``mixed`` when both schemas occur."""

    PAIR = "pair"
    SCORE = "score"
    MIXED = "mixed"


class MatchCategory(str, Enum):
    HARD_ONLY = "hard_only"
    SOFT_FAIL = "soft_fail"


Rating = Union[int, Comparison]


@dataclass(frozen=True)
class PairResult:
    """One annotator's pairwise verdicts for a single sample."""

    sample_id: str
    comparisons: Mapping[Dimension, Comparison]

    @property
    def mode(self) -> AnnotationMode:
        return AnnotationMode.PAIR

    def value(self, dimension: Dimension) -> Optional[Comparison]:
        return self.comparisons.get(dimension)


@dataclass(frozen=True)
class ScoreResult:
    """One annotator's 1-5 scores for a single sample."""

    sample_id: str
    scores: Mapping[Dimension, int]

    @property
    def mode(self) -> AnnotationMode:
        return AnnotationMode.SCORE

    def value(self, dimension: Dimension) -> Optional[int]:
        return self.scores.get(dimension)


SampleResult = Union[PairResult, ScoreResult]


@dataclass(frozen=True)
class AnnotationRecord:
    """Normalized contents of a single annotator result document."""

    annotator_id: str
    mode: AnnotationMode
    results: Tuple[SampleResult, ...]
    samples: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def pair_results(self) -> List[PairResult]:
        return [r for r in self.results if isinstance(r, PairResult)]

    @property
    def score_results(self) -> List[ScoreResult]:
        return [r for r in self.results if isinstance(r, ScoreResult)]


@dataclass(frozen=True)
class ResultFileInfo:
    """Summary of an uploaded result document, used for listings."""

    name: str
    mode: Optional[AnnotationMode]
    sample_count: int
    annotator_id: str


@dataclass(frozen=True)
class QCDetectionResult:
    """Which samples were rated by the most annotators."""

    qc_sample_ids: Tuple[str, ...]
    max_frequency: int
    total_unique_samples: int
    annotator_count: int
    sample_annotator_map: Mapping[str, Tuple[str, ...]]

    @property
    def qc_count(self) -> int:
        return len(self.qc_sample_ids)


@dataclass(frozen=True)
class GroupEntry:
    annotator_id: str
    result: SampleResult

    @property
    def mode(self) -> AnnotationMode:
        return self.result.mode


@dataclass(frozen=True)
class QCGroupedSample:
    """Every annotator's entry for one QC sample; all entries share a mode."""

    sample_id: str
    mode: AnnotationMode
    entries: Tuple[GroupEntry, ...]

    def annotator_ids(self) -> List[str]:
        return [entry.annotator_id for entry in self.entries]


@dataclass(frozen=True)
class ReliabilityUnit:
    """One (sample, dimension) cell with the values supplied by its raters."""

    sample_id: str
    dimension: Dimension
    values: Tuple[Rating, ...]


@dataclass(frozen=True)
class AlphaComputation:
    alpha: float
    observed_disagreement: float
    expected_disagreement: float
    unit_count: int


@dataclass(frozen=True)
class KrippendorffResult:
    alpha: float
    observed_disagreement: float
    expected_disagreement: float
    method: str
    by_dimension: Mapping[Dimension, float]
    unit_count: int = 0


@dataclass(frozen=True)
class ScoreUnitDetail:
    """Per-unit view of score ratings, with their mean and max-min spread."""

    sample_id: str
    dimension: Dimension
    ratings: Tuple[Tuple[str, int], ...]
    mean: float
    spread: int

    def values(self) -> List[int]:
        return [score for _, score in self.ratings]


@dataclass(frozen=True)
class PairUnitDetail:
    """Per-unit view of pairwise ratings, with the majority verdict."""

    sample_id: str
    dimension: Dimension
    ratings: Tuple[Tuple[str, Comparison], ...]
    majority_value: Optional[Comparison]

    def values(self) -> List[Comparison]:
        return [comparison for _, comparison in self.ratings]


UnitDetail = Union[ScoreUnitDetail, PairUnitDetail]


@dataclass(frozen=True)
class ClassifiedDisagreement:
    detail: UnitDetail
    match_category: MatchCategory


@dataclass(frozen=True)
class DimensionSkill:
    majority_agreement_rate_hard: float
    majority_agreement_rate_soft: float
    unit_count: int


@dataclass(frozen=True)
class AnnotatorSkillMetrics:
    """Reliability summary for one annotator over the QC overlap set."""

    annotator_id: str
    qc_sample_count: int
    majority_agreement_rate_hard: float
    majority_agreement_rate_soft: float
    avg_deviation: Optional[float]
    composite_score: float
    rank: int
    by_dimension: Mapping[Dimension, DimensionSkill]


@dataclass(frozen=True)
class DimensionAgreementStats:
    dimension: Dimension
    total_checks: int
    hard_alpha: float
    soft_alpha: float


@dataclass(frozen=True)
class AgreementStats:
    """Complete result of an agreement run, handed to presentation code."""

    mode: OverallMode
    detection: QCDetectionResult
    total_checks: int
    krippendorff_hard: KrippendorffResult
    krippendorff_soft: KrippendorffResult
    by_dimension: Mapping[Dimension, DimensionAgreementStats]
    annotator_skills: Tuple[AnnotatorSkillMetrics, ...]
    score_details: Tuple[ScoreUnitDetail, ...]
    pair_details: Tuple[PairUnitDetail, ...]
    disagreements: Tuple[UnitDetail, ...]
    classified_disagreements: Tuple[ClassifiedDisagreement, ...]
    grouped_samples: Tuple[QCGroupedSample, ...]
    sample_details: Mapping[str, Mapping[str, Any]]

    def annotator_ids(self) -> List[str]:
        return sorted(skill.annotator_id for skill in self.annotator_skills)

    def skill_for(self, annotator_id: str) -> Optional[AnnotatorSkillMetrics]:
        for skill in self.annotator_skills:
            if skill.annotator_id == annotator_id:
                return skill
        return None

    def grouped_sample(self, sample_id: str) -> Optional[QCGroupedSample]:
        for group in self.grouped_samples:
            if group.sample_id == sample_id:
                return group
        return None

    def sample_detail(self, sample_id: str) -> Optional[Mapping[str, Any]]:
        return self.sample_details.get(sample_id)


@dataclass(frozen=True)
class LOOMetrics:
    """Aggregate agreement metrics for one (possibly reduced) dataset."""

    alpha_hard: float
    alpha_soft: float
    alpha_hard_by_dimension: Mapping[Dimension, float]
    alpha_soft_by_dimension: Mapping[Dimension, float]
    agreement_rate_hard: float
    agreement_rate_soft: float
    unit_count: int
    sample_count: int


@dataclass(frozen=True)
class LOODelta:
    """Signed change of each metric: value without the annotator minus original."""

    alpha_hard: float
    alpha_soft: float
    alpha_hard_by_dimension: Mapping[Dimension, float]
    alpha_soft_by_dimension: Mapping[Dimension, float]
    agreement_rate_hard: float
    agreement_rate_soft: float


@dataclass(frozen=True)
class LOOAnnotatorResult:
    annotator_id: str
    metrics: LOOMetrics
    delta: LOODelta


@dataclass(frozen=True)
class LOOAnalysisResult:
    mode: OverallMode
    original: LOOMetrics
    annotators: Tuple[LOOAnnotatorResult, ...]

    def result_for(self, annotator_id: str) -> Optional[LOOAnnotatorResult]:
        for result in self.annotators:
            if result.annotator_id == annotator_id:
                return result
        return None
