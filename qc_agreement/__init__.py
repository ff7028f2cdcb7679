"""Inter-annotator agreement analysis for QC overlap samples."""

from pathlib import Path

DEFAULT_RESULTS_DIR = Path(__file__).resolve().parent.parent / "results"

__all__ = ["DEFAULT_RESULTS_DIR"]
