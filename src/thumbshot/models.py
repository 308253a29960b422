"""Data model shared by the banner handler, the video detector and the engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Optional, Union

DEFAULT_BANNER_TIMEOUT_MS = int(os.getenv("BANNER_TIMEOUT_MS", "5000"))
DEFAULT_CAPTURE_QUALITY = int(os.getenv("CAPTURE_QUALITY", "80"))

CaptureFormat = Literal["png", "jpeg"]


@dataclass(slots=True)
class ThumbnailCandidate:
    """A proposed thumbnail with provenance and a confidence score.

    Extractors create candidates with a base confidence; the validation pass may
    resolve ``url``, fill in dimensions and raise ``confidence``.
    """

    url: str
    source: str
    confidence: float
    method: str
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[float] = None
    element: Optional[str] = None


@dataclass(slots=True)
class DetectionResult:
    has_video: bool
    thumbnail: Optional[ThumbnailCandidate] = None
    candidates: list[ThumbnailCandidate] = field(default_factory=list)
    log: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ImageResult:
    data: bytes
    is_video_thumbnail: bool


@dataclass(frozen=True, slots=True)
class UrlResult:
    url: str
    is_video_thumbnail: bool = True


ScreenshotDecision = Union[ImageResult, UrlResult]


@dataclass(frozen=True, slots=True)
class CaptureOptions:
    """Caller knobs honoured by :func:`thumbshot.engine.produce_image_or_url`."""

    handle_banners: bool = True
    banner_timeout_ms: int = DEFAULT_BANNER_TIMEOUT_MS
    custom_banner_selectors: tuple[str, ...] = ()
    inject_banner_blocking_css: bool = False
    detect_video_thumbnails: bool = True
    format: CaptureFormat = "png"
    quality: int = DEFAULT_CAPTURE_QUALITY
    full_page: bool = False

    def screenshot_kwargs(self) -> dict[str, object]:
        kwargs: dict[str, object] = {"type": self.format}
        if self.format == "jpeg":
            kwargs["quality"] = self.quality
        return kwargs


@dataclass(slots=True)
class CaptureOutcome:
    decision: ScreenshotDecision
    detection: Optional[DetectionResult] = None
    banners_handled: list[str] = field(default_factory=list)
    log: list[str] = field(default_factory=list)


__all__ = [
    "CaptureFormat",
    "CaptureOptions",
    "CaptureOutcome",
    "DEFAULT_BANNER_TIMEOUT_MS",
    "DEFAULT_CAPTURE_QUALITY",
    "DetectionResult",
    "ImageResult",
    "ScreenshotDecision",
    "ThumbnailCandidate",
    "UrlResult",
]
