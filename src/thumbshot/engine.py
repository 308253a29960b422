"""
Decision policy that turns a loaded page into one image or thumbnail URL.

Order of operations for :func:`produce_image_or_url`:

1. optional banner handling (CSS blocklist, catalog loop, custom selectors);
2. plain capture when video detection is disabled;
3. detection; a selected candidate is returned as a URL when it comes from an
   authoritative endpoint, otherwise downloaded, otherwise replaced by a crop of
   the video region;
4. a crop of the video region when a video is present without a usable
   candidate;
5. plain capture.

Only a lost page/browser connection escapes as an exception
(:class:`~thumbshot.errors.PageConnectionLost`); every other failure falls
through to the next step.
"""

from __future__ import annotations

import asyncio
import os

from playwright.async_api import Page

from .banners import handle_banners, handle_custom_banners, inject_banner_blocking_css
from .errors import raise_if_fatal
from .images import reencode_image
from .logging import jlog
from .models import CaptureOptions, CaptureOutcome, DetectionResult, ImageResult, ThumbnailCandidate, UrlResult
from .urls import is_cdn_thumbnail_url
from .video import capture_video_region, detect_video_thumbnail
from .video.extractors import DEFAULT_USER_AGENT, make_http

THUMBNAIL_FETCH_TIMEOUT_S = float(os.getenv("THUMBNAIL_FETCH_TIMEOUT_S", "10"))
DIRECT_CONFIDENCE = 0.8
AUTHORITATIVE_SOURCES = frozenset({"oEmbed", "schema.org VideoObject"})


def is_direct_thumbnail(candidate: ThumbnailCandidate) -> bool:
    """True when the candidate URL can be handed back without fetching it."""

    return (
        candidate.source in AUTHORITATIVE_SOURCES
        or candidate.confidence >= DIRECT_CONFIDENCE
        or is_cdn_thumbnail_url(candidate.url)
    )


def fetch_image_bytes(url: str, referer: str | None = None, *, timeout: float = THUMBNAIL_FETCH_TIMEOUT_S) -> bytes:
    with make_http(DEFAULT_USER_AGENT, referer) as http:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.content


async def capture_page(page: Page, options: CaptureOptions) -> bytes:
    try:
        return await page.screenshot(full_page=options.full_page, **options.screenshot_kwargs())
    except Exception as exc:
        raise_if_fatal(exc)
        raise


async def _handle_banners(page: Page, options: CaptureOptions, log: list[str]) -> list[str]:
    handled: list[str] = []
    try:
        if options.inject_banner_blocking_css:
            await inject_banner_blocking_css(page)
        handled.extend(await handle_banners(page, options.banner_timeout_ms))
        if options.custom_banner_selectors:
            clicked = await handle_custom_banners(page, options.custom_banner_selectors)
            handled.extend(f"custom:{selector}" for selector in clicked)
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="banner_handling_failed", error=str(exc))
        log.append(f"Banner handling failed: {exc}")
    log.append(f"Handled {len(handled)} banner(s)")
    return handled


async def _crop(page: Page, options: CaptureOptions, log: list[str]) -> ImageResult | None:
    data = await capture_video_region(page, options)
    if data:
        log.append("Captured video region crop")
        return ImageResult(data=data, is_video_thumbnail=True)
    log.append("No video region found to crop")
    return None


async def _from_candidate(
    page: Page,
    candidate: ThumbnailCandidate,
    options: CaptureOptions,
    log: list[str],
) -> UrlResult | ImageResult | None:
    if is_direct_thumbnail(candidate):
        log.append(f"Returning thumbnail URL directly: {candidate.url}")
        return UrlResult(url=candidate.url)

    try:
        raw = await asyncio.to_thread(fetch_image_bytes, candidate.url, page.url)
        data, width, height = reencode_image(raw, options.format, quality=options.quality)
    except Exception as exc:
        jlog("warning", event="thumbnail_fetch_failed", thumbnail_url=candidate.url, error=str(exc))
        log.append(f"Thumbnail fetch failed: {exc}")
    else:
        log.append(f"Fetched thumbnail {width}x{height} from {candidate.url}")
        return ImageResult(data=data, is_video_thumbnail=True)

    return await _crop(page, options, log)


async def produce_image_or_url(page: Page, options: CaptureOptions | None = None) -> CaptureOutcome:
    """Produce the representative image (or thumbnail URL) for a loaded page."""

    options = options or CaptureOptions()
    log: list[str] = []
    banners: list[str] = []
    if options.handle_banners:
        banners = await _handle_banners(page, options, log)

    if not options.detect_video_thumbnails:
        data = await capture_page(page, options)
        return CaptureOutcome(decision=ImageResult(data=data, is_video_thumbnail=False), banners_handled=banners, log=log)

    detection: DetectionResult | None = None
    try:
        detection = await detect_video_thumbnail(page)
        log.extend(detection.log)
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="video_detection_failed", error=str(exc))
        log.append(f"Video detection failed: {exc}")

    decision: UrlResult | ImageResult | None = None
    if detection is not None and detection.thumbnail is not None:
        decision = await _from_candidate(page, detection.thumbnail, options, log)
    elif detection is not None and detection.has_video:
        decision = await _crop(page, options, log)

    if decision is None:
        log.append("Falling back to plain capture")
        decision = ImageResult(data=await capture_page(page, options), is_video_thumbnail=False)

    jlog(
        "info",
        event="capture_decided",
        kind="url" if isinstance(decision, UrlResult) else "image",
        is_video_thumbnail=decision.is_video_thumbnail,
        banners=len(banners),
    )
    return CaptureOutcome(decision=decision, detection=detection, banners_handled=banners, log=log)


__all__ = ["capture_page", "fetch_image_bytes", "is_direct_thumbnail", "produce_image_or_url"]
