"""Command-line interface for QC overlap agreement analysis."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from . import DEFAULT_RESULTS_DIR
from .disagreements import filter_disagreements_by_annotator
from .loaders import collect_result_files, extract_file_info, normalize_payload, read_payload
from .models import AgreementError
from .pipeline import calculate_inter_annotator_agreement, run_loo_analysis
from .reporting import (
    print_alpha_scores,
    print_disagreements,
    print_file_summary,
    print_header,
    print_loo,
    print_skills,
)

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute inter-annotator agreement on QC overlap samples.",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=DEFAULT_RESULTS_DIR,
        help="Directory with exported annotation result JSON files (default: repository results folder).",
    )
    parser.add_argument(
        "--annotator",
        default=None,
        help="Only list disagreements this annotator took part in.",
    )
    parser.add_argument(
        "--show-disagreements",
        action="store_true",
        help="Print every classified disagreement, not just the counts.",
    )
    parser.add_argument(
        "--skip-loo",
        action="store_true",
        help="Skip the leave-one-out sensitivity analysis.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log skipped files and ignored entries.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = args.input_dir.expanduser()
    if not root.exists() or not root.is_dir():
        raise SystemExit(f"--input-dir {root} is not a directory")

    infos = []
    records = []
    for path in collect_result_files(root):
        try:
            payload = read_payload(path)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Skipping %s: invalid JSON (%s)", path.name, exc)
            continue
        record = normalize_payload(payload, path.name)
        if record is None:
            continue
        infos.append(extract_file_info(payload, path.name))
        records.append(record)

    try:
        stats = calculate_inter_annotator_agreement(records)
    except AgreementError as exc:
        raise SystemExit(str(exc)) from exc

    print_file_summary(infos)
    print_header(stats)
    print_alpha_scores(stats)
    print_skills(stats)

    classified = filter_disagreements_by_annotator(stats.classified_disagreements, args.annotator)
    print_disagreements(classified, show_rows=args.show_disagreements or bool(args.annotator))

    if not args.skip_loo:
        print_loo(run_loo_analysis(stats, progress=True))


if __name__ == "__main__":  # pragma: no cover
    main()
