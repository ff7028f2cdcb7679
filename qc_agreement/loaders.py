"""File-system helpers for turning annotation result exports into records."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import (
    DIMENSIONS,
    AnnotationMode,
    AnnotationRecord,
    Comparison,
    Dimension,
    PairResult,
    ResultFileInfo,
    SampleResult,
    ScoreResult,
)

LOGGER = logging.getLogger(__name__)

UNKNOWN_ANNOTATOR = "unknown"
SCORE_RANGE = range(1, 6)


def collect_result_files(root: Path) -> List[Path]:
    """Return all JSON files in the target directory, sorted for stability."""

    return sorted(p for p in root.glob("*.json") if p.is_file())


def read_payload(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_result_file(path: Path) -> Optional[AnnotationRecord]:
    """Read one exported result document; ``None`` when it is not one."""

    return normalize_payload(read_payload(path), path.name)


def load_records(root: Path) -> List[AnnotationRecord]:
    """Load every recognizable result document under ``root``."""

    records = []
    for path in collect_result_files(root):
        try:
            record = load_result_file(path)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Skipping %s: invalid JSON (%s)", path.name, exc)
            continue
        if record is not None:
            records.append(record)
    return records


def normalize_payload(payload: Any, file_name: str = "<memory>") -> Optional[AnnotationRecord]:
    """Convert a parsed result document into an ``AnnotationRecord``.

    Documents whose ``mode`` is neither ``pair`` nor ``score``, or that carry
    no ``results`` list, are skipped. Individual dimension values that cannot
    be read are left out of the result rather than rejected.
    """

    if not isinstance(payload, dict):
        LOGGER.warning("Skipping %s: top-level JSON value is not an object", file_name)
        return None

    mode = _coerce_mode(payload.get("mode"))
    results = payload.get("results")
    if mode is None or not isinstance(results, list):
        LOGGER.warning("Skipping %s: not a pair/score result document", file_name)
        return None

    annotator_id = payload.get("annotator_id") or UNKNOWN_ANNOTATOR
    parsed: List[SampleResult] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        sample_id = item.get("sample_id")
        if sample_id is None:
            continue
        if mode is AnnotationMode.PAIR:
            parsed.append(PairResult(str(sample_id), _extract_comparisons(item)))
        else:
            parsed.append(ScoreResult(str(sample_id), _extract_scores(item)))

    return AnnotationRecord(
        annotator_id=str(annotator_id),
        mode=mode,
        results=tuple(parsed),
        samples=_extract_samples(payload),
    )


def normalize_payloads(documents: Iterable[tuple]) -> List[AnnotationRecord]:
    """Normalize ``(payload, file_name)`` pairs, dropping unrecognized ones."""

    records = []
    for payload, file_name in documents:
        record = normalize_payload(payload, file_name)
        if record is not None:
            records.append(record)
    return records


def extract_file_info(payload: Any, file_name: str) -> ResultFileInfo:
    data = payload if isinstance(payload, dict) else {}
    results = data.get("results")
    return ResultFileInfo(
        name=file_name,
        mode=_coerce_mode(data.get("mode")),
        sample_count=len(results) if isinstance(results, list) else 0,
        annotator_id=str(data.get("annotator_id") or UNKNOWN_ANNOTATOR),
    )


def build_sample_details(records: Iterable[AnnotationRecord]) -> Dict[str, Mapping[str, Any]]:
    """Merge sample metadata across records; the first entry per id wins."""

    details: Dict[str, Mapping[str, Any]] = {}
    for record in records:
        for sample_id, sample in record.samples.items():
            details.setdefault(sample_id, sample)
    return details


def _coerce_mode(value) -> Optional[AnnotationMode]:
    try:
        return AnnotationMode(value)
    except ValueError:
        return None


def _extract_comparisons(item: Dict) -> Dict[Dimension, Comparison]:
    comparisons: Dict[Dimension, Comparison] = {}
    dimensions = item.get("dimensions") or {}
    if not isinstance(dimensions, dict):
        return comparisons
    for dim in DIMENSIONS:
        entry = dimensions.get(dim.value) or {}
        try:
            comparisons[dim] = Comparison(entry.get("comparison"))
        except (AttributeError, ValueError):
            continue
    return comparisons


def _extract_scores(item: Dict) -> Dict[Dimension, int]:
    scores: Dict[Dimension, int] = {}
    dimensions = item.get("scores") or {}
    if not isinstance(dimensions, dict):
        return scores
    for dim in DIMENSIONS:
        entry = dimensions.get(dim.value) or {}
        try:
            score = entry.get("score")
        except AttributeError:
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        if isinstance(score, float) and not score.is_integer():
            continue
        if int(score) not in SCORE_RANGE:
            continue
        scores[dim] = int(score)
    return scores


def _extract_samples(payload: Dict) -> Dict[str, Mapping[str, Any]]:
    task_package = payload.get("task_package") or {}
    samples = task_package.get("samples") if isinstance(task_package, dict) else None
    if not isinstance(samples, list):
        return {}

    extracted: Dict[str, Mapping[str, Any]] = {}
    for sample in samples:
        if isinstance(sample, dict) and sample.get("sample_id") is not None:
            extracted.setdefault(str(sample["sample_id"]), sample)
    return extracted
