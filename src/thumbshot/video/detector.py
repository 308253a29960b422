"""Video thumbnail detection: extraction, validation, scoring and selection."""

from __future__ import annotations

from playwright.async_api import Page

from ..errors import raise_if_fatal
from ..logging import jlog
from ..models import DetectionResult
from ..urls import VIDEO_HOST_KEYWORDS
from .extractors import collect_candidates
from .scoring import select_best_candidate, validate_candidates

VIDEO_PRESENCE_JS = """
(hosts) => {
    if (document.querySelectorAll('video').length > 0) return true;
    return Array.from(document.querySelectorAll('iframe')).some(frame => {
        const src = (frame.src || '').toLowerCase();
        return hosts.some(host => src.includes(host));
    });
}
"""


async def detect_video_presence(page: Page) -> bool:
    """True when the page has a native video element or a known video-host iframe."""

    try:
        return bool(await page.evaluate(VIDEO_PRESENCE_JS, list(VIDEO_HOST_KEYWORDS)))
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="video_presence_check_failed", error=str(exc))
        return False


async def detect_video_thumbnail(page: Page) -> DetectionResult:
    log: list[str] = ["Starting video thumbnail detection"]

    raw = await collect_candidates(page, log)
    log.append(f"Validating and scoring {len(raw)} candidates")
    try:
        valid = await validate_candidates(page, raw)
    except Exception as exc:
        raise_if_fatal(exc)
        log.append(f"Validation failed: {exc}")
        valid = []
    log.append(f"{len(valid)} candidates passed validation")

    best = select_best_candidate(valid)
    has_video = best is not None or await detect_video_presence(page)

    if best is not None:
        log.append(f"Selected best candidate: {best.method} / {best.source} (confidence: {best.confidence:.2f}) {best.url}")
        jlog("info", event="candidate_selected", method=best.method, source=best.source, confidence=best.confidence, thumbnail_url=best.url)
    elif has_video:
        log.append("Video detected but no suitable thumbnail found")
    else:
        log.append("No video content detected")

    return DetectionResult(has_video=has_video, thumbnail=best, candidates=valid, log=log)


__all__ = ["detect_video_presence", "detect_video_thumbnail"]
