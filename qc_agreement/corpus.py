"""QC overlap detection and per-sample grouping of annotator entries."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Set

from .models import (
    AnnotationRecord,
    GroupEntry,
    NoAnnotationRecordsError,
    NoQCSamplesError,
    OverallMode,
    QCDetectionResult,
    QCGroupedSample,
)

LOGGER = logging.getLogger(__name__)


def detect_qc_samples(records: Sequence[AnnotationRecord]) -> QCDetectionResult:
    """Find the samples rated by the largest number of distinct annotators.

    Only samples seen by more than one annotator qualify: when every sample
    was rated once there is no overlap to measure and ``NoQCSamplesError`` is
    raised.
    """

    if not records:
        raise NoAnnotationRecordsError("No valid annotation result files were found.")

    sample_annotators: Dict[str, Set[str]] = {}
    for record in records:
        for result in record.results:
            sample_annotators.setdefault(result.sample_id, set()).add(record.annotator_id)

    max_frequency = max((len(ids) for ids in sample_annotators.values()), default=0)

    qc_sample_ids: List[str] = []
    if max_frequency > 1:
        qc_sample_ids = sorted(
            sample_id
            for sample_id, annotators in sample_annotators.items()
            if len(annotators) == max_frequency
        )

    if not qc_sample_ids:
        raise NoQCSamplesError(
            "No QC samples detected: no sample_id was rated by more than one annotator."
        )

    return QCDetectionResult(
        qc_sample_ids=tuple(qc_sample_ids),
        max_frequency=max_frequency,
        total_unique_samples=len(sample_annotators),
        annotator_count=len({record.annotator_id for record in records}),
        sample_annotator_map={
            sample_id: tuple(sorted(annotators))
            for sample_id, annotators in sample_annotators.items()
        },
    )


def group_qc_samples(
    detection: QCDetectionResult,
    records: Iterable[AnnotationRecord],
) -> List[QCGroupedSample]:
    """Collect every annotator's entry for each QC sample, in record order."""

    qc_ids = set(detection.qc_sample_ids)
    entries: Dict[str, List[GroupEntry]] = {}
    seen: Dict[str, Set[str]] = {}

    for record in records:
        for result in record.results:
            sample_id = result.sample_id
            if sample_id not in qc_ids:
                continue
            group = entries.setdefault(sample_id, [])
            annotators = seen.setdefault(sample_id, set())
            if group and group[0].mode is not result.mode:
                LOGGER.warning(
                    "Ignoring %s entry from %s for sample %s: sample already grouped as %s",
                    result.mode.value,
                    record.annotator_id,
                    sample_id,
                    group[0].mode.value,
                )
                continue
            if record.annotator_id in annotators:
                LOGGER.warning(
                    "Ignoring repeated entry from %s for sample %s",
                    record.annotator_id,
                    sample_id,
                )
                continue
            annotators.add(record.annotator_id)
            group.append(GroupEntry(annotator_id=record.annotator_id, result=result))

    return [
        QCGroupedSample(sample_id=sample_id, mode=group[0].mode, entries=tuple(group))
        for sample_id, group in entries.items()
    ]


def detect_overall_mode(groups: Iterable[QCGroupedSample]) -> OverallMode:
    modes = {group.mode for group in groups}
    if len(modes) > 1:
        return OverallMode.MIXED
    if not modes:
        return OverallMode.SCORE
    return OverallMode(modes.pop().value)
