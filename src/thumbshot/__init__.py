"""Clean page captures: banner dismissal and video thumbnail selection."""

from .banners import BANNER_PATTERNS, handle_banners, handle_custom_banners, inject_banner_blocking_css
from .engine import produce_image_or_url
from .errors import PageConnectionLost, is_fatal_page_error
from .logging import jlog, pagelog
from .models import CaptureOptions, CaptureOutcome, DetectionResult, ImageResult, ThumbnailCandidate, UrlResult
from .playwright import CHROMIUM_LAUNCH_ARGS, cleanup_playwright, element_is_visibly_displayed, wait_assets_ready
from .versioning import get_engine_version
from .video import capture_video_region, detect_video_thumbnail

__all__ = [
    "BANNER_PATTERNS",
    "CHROMIUM_LAUNCH_ARGS",
    "CaptureOptions",
    "CaptureOutcome",
    "DetectionResult",
    "ImageResult",
    "PageConnectionLost",
    "ThumbnailCandidate",
    "UrlResult",
    "capture_video_region",
    "cleanup_playwright",
    "detect_video_thumbnail",
    "element_is_visibly_displayed",
    "get_engine_version",
    "handle_banners",
    "handle_custom_banners",
    "inject_banner_blocking_css",
    "is_fatal_page_error",
    "jlog",
    "pagelog",
    "produce_image_or_url",
    "wait_assets_ready",
]
