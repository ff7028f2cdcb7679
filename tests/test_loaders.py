"""
Tests for normalizing exported result documents.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from qc_agreement.loaders import (
    build_sample_details,
    extract_file_info,
    load_records,
    normalize_payload,
    normalize_payloads,
)
from qc_agreement.models import AnnotationMode, Comparison, Dimension, PairResult, ScoreResult


def pair_payload(annotator_id: str = "ann_1") -> dict:
    return {
        "task_id": "task-7",
        "annotator_id": annotator_id,
        "mode": "pair",
        "results": [
            {
                "sample_id": "p1",
                "dimensions": {
                    "text_consistency": {"comparison": "A>B"},
                    "visual_quality": {"comparison": "A=B"},
                    "distortion": {"comparison": "B>A"},
                },
                "video_a_model": "m1",
                "video_b_model": "m2",
            }
        ],
        "task_package": {
            "samples": [
                {"sample_id": "p1", "prompt": "a dog surfing", "video_a_url": "a.mp4"},
            ]
        },
    }


def score_payload(annotator_id: str | None = "ann_2") -> dict:
    payload = {
        "mode": "score",
        "results": [
            {
                "sample_id": "s1",
                "scores": {
                    "text_consistency": {"score": 4},
                    "temporal_consistency": {"score": 4.0},
                    "visual_quality": {"score": 7},
                    "distortion": {"score": "3"},
                    "motion_quality": {"score": 2.5},
                },
            },
            {"scores": {}},
        ],
    }
    if annotator_id is not None:
        payload["annotator_id"] = annotator_id
    return payload


def test_normalize_pair_payload() -> None:
    record = normalize_payload(pair_payload())

    assert record.annotator_id == "ann_1"
    assert record.mode is AnnotationMode.PAIR
    assert record.score_results == []
    (result,) = record.pair_results
    assert isinstance(result, PairResult)
    assert result.value(Dimension.TEXT_CONSISTENCY) is Comparison.A_BETTER
    assert result.value(Dimension.VISUAL_QUALITY) is Comparison.TIE
    assert result.value(Dimension.DISTORTION) is None
    assert record.samples["p1"]["prompt"] == "a dog surfing"


def test_normalize_score_payload_keeps_valid_scores() -> None:
    record = normalize_payload(score_payload(annotator_id=None))

    assert record.annotator_id == "unknown"
    (result,) = record.results
    assert isinstance(result, ScoreResult)
    assert dict(result.scores) == {
        Dimension.TEXT_CONSISTENCY: 4,
        Dimension.TEMPORAL_CONSISTENCY: 4,
    }


def test_unrecognized_documents_are_skipped(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="qc_agreement.loaders"):
        assert normalize_payload({"mode": "golden", "results": []}, "golden.json") is None
        assert normalize_payload({"mode": "pair"}, "no_results.json") is None
        assert normalize_payload(["not", "a", "dict"], "list.json") is None

    assert "golden.json" in caplog.text
    assert "list.json" in caplog.text

    records = normalize_payloads([(pair_payload(), "a.json"), ({"mode": "x"}, "b.json")])
    assert [record.annotator_id for record in records] == ["ann_1"]


def test_extract_file_info() -> None:
    info = extract_file_info(score_payload(), "ann_2.json")

    assert info.name == "ann_2.json"
    assert info.mode is AnnotationMode.SCORE
    assert info.sample_count == 2
    assert info.annotator_id == "ann_2"

    unknown = extract_file_info({"mode": "other"}, "x.json")
    assert unknown.mode is None
    assert unknown.sample_count == 0


def test_build_sample_details_first_wins() -> None:
    first = normalize_payload(pair_payload("ann_1"))
    second_payload = pair_payload("ann_3")
    second_payload["task_package"]["samples"].append({"sample_id": "p9", "prompt": "extra"})
    second_payload["task_package"]["samples"][0]["prompt"] = "other prompt"
    second = normalize_payload(second_payload)

    details = build_sample_details([first, second])

    assert details["p1"]["prompt"] == "a dog surfing"
    assert details["p9"]["prompt"] == "extra"


def test_load_records_from_directory(tmp_path: Path) -> None:
    (tmp_path / "b_score.json").write_text(json.dumps(score_payload()), encoding="utf-8")
    (tmp_path / "a_pair.json").write_text(json.dumps(pair_payload()), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    records = load_records(tmp_path)

    assert [record.annotator_id for record in records] == ["ann_1", "ann_2"]
