"""Video thumbnail detection pipeline exports."""

from __future__ import annotations

from .crop import capture_video_region
from .detector import detect_video_presence, detect_video_thumbnail
from .extractors import EXTRACTORS, collect_candidates
from .scoring import calculate_final_confidence, is_valid_thumbnail, select_best_candidate, validate_candidates

__all__ = [
    "EXTRACTORS",
    "calculate_final_confidence",
    "capture_video_region",
    "collect_candidates",
    "detect_video_presence",
    "detect_video_thumbnail",
    "is_valid_thumbnail",
    "select_best_candidate",
    "validate_candidates",
]
