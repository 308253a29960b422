"""Validation, scoring and selection of thumbnail candidates."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from playwright.async_api import Page

from ..errors import raise_if_fatal
from ..logging import jlog
from ..models import ThumbnailCandidate
from ..urls import resolve_url

MIN_THUMBNAIL_WIDTH = 200
MIN_THUMBNAIL_HEIGHT = 150
PREFERRED_ASPECT_RATIOS = (16 / 9, 4 / 3, 3 / 2, 1.85, 2.35)
MAX_ASPECT_RATIO_DEVIATION = 0.3
GOOD_ASPECT_RATIO_DEVIATION = 0.1
MIN_ASPECT_RATIO = 0.5
IMAGE_PROBE_TIMEOUT_MS = 5000

REJECT_URL_PATTERNS = (
    "icon",
    "favicon",
    "logo",
    "sprite",
    "avatar",
    "profile",
    "button",
    "arrow",
    "close",
    "play-button",
    "controls",
)

MEASURE_IMAGE_JS = """
({ url, timeoutMs }) => new Promise((resolve) => {
    const img = new Image();
    const timer = setTimeout(() => resolve({ width: 0, height: 0 }), timeoutMs);
    img.onload = () => { clearTimeout(timer); resolve({ width: img.naturalWidth, height: img.naturalHeight }); };
    img.onerror = () => { clearTimeout(timer); resolve({ width: 0, height: 0 }); };
    img.src = url;
})
"""


def _near_preferred_ratio(ratio: float, tolerance: float) -> bool:
    return any(abs(ratio - preferred) <= tolerance for preferred in PREFERRED_ASPECT_RATIOS)


def is_valid_thumbnail(candidate: ThumbnailCandidate) -> bool:
    if candidate.width is not None and candidate.width < MIN_THUMBNAIL_WIDTH:
        return False
    if candidate.height is not None and candidate.height < MIN_THUMBNAIL_HEIGHT:
        return False

    url = candidate.url.lower()
    if any(pattern in url for pattern in REJECT_URL_PATTERNS):
        return False

    ratio = candidate.aspect_ratio
    if ratio is not None and ratio < MIN_ASPECT_RATIO and not _near_preferred_ratio(ratio, MAX_ASPECT_RATIO_DEVIATION):
        return False
    return True


def calculate_final_confidence(candidate: ThumbnailCandidate) -> float:
    """Base confidence plus size, aspect-ratio and source bonuses, capped at 1.0."""

    base = candidate.confidence
    bonus = 0.0
    if candidate.width and candidate.height:
        area = candidate.width * candidate.height
        if area > 500_000:
            bonus += 0.1
        elif area > 200_000:
            bonus += 0.05
    if candidate.aspect_ratio is not None and _near_preferred_ratio(candidate.aspect_ratio, GOOD_ASPECT_RATIO_DEVIATION):
        bonus += 0.1
    source = candidate.source.lower()
    if "video" in source or "poster" in source:
        bonus += 0.1
    return max(base, min(round(base + bonus, 6), 1.0))


async def measure_image(page: Page, url: str, *, timeout_ms: int = IMAGE_PROBE_TIMEOUT_MS) -> tuple[int, int]:
    """Load ``url`` off-DOM in the page and return its natural size (0x0 on failure)."""

    try:
        dims = await asyncio.wait_for(
            page.evaluate(MEASURE_IMAGE_JS, {"url": url, "timeoutMs": timeout_ms}),
            timeout=timeout_ms / 1000.0 + 1.0,
        )
    except asyncio.TimeoutError:
        return 0, 0
    dims = dims or {}
    return int(dims.get("width") or 0), int(dims.get("height") or 0)


async def validate_candidates(
    page: Page,
    candidates: Iterable[ThumbnailCandidate],
    *,
    probe_timeout_ms: int = IMAGE_PROBE_TIMEOUT_MS,
) -> list[ThumbnailCandidate]:
    """Resolve, measure, filter and score ``candidates``; returns survivors in order."""

    base_url = page.url
    valid: list[ThumbnailCandidate] = []
    for candidate in candidates:
        try:
            candidate.url = resolve_url(base_url, candidate.url)
            if not candidate.width or not candidate.height:
                candidate.width, candidate.height = await measure_image(page, candidate.url, timeout_ms=probe_timeout_ms)
            if candidate.width and candidate.height:
                candidate.aspect_ratio = candidate.width / candidate.height
            if not is_valid_thumbnail(candidate):
                jlog("debug", event="candidate_rejected", url=candidate.url, method=candidate.method, width=candidate.width, height=candidate.height)
                continue
            candidate.confidence = calculate_final_confidence(candidate)
            valid.append(candidate)
        except Exception as exc:
            raise_if_fatal(exc)
            jlog("debug", event="candidate_probe_failed", url=candidate.url, error=str(exc))
            continue
    return valid


def select_best_candidate(candidates: list[ThumbnailCandidate]) -> ThumbnailCandidate | None:
    if not candidates:
        return None
    # sorted() is stable, so the first candidate seen wins a tie.
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)[0]


__all__ = [
    "MIN_THUMBNAIL_HEIGHT",
    "MIN_THUMBNAIL_WIDTH",
    "PREFERRED_ASPECT_RATIOS",
    "REJECT_URL_PATTERNS",
    "calculate_final_confidence",
    "is_valid_thumbnail",
    "measure_image",
    "select_best_candidate",
    "validate_candidates",
]
