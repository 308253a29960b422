"""Fallback capture of the on-screen video region."""

from __future__ import annotations

from playwright.async_api import Page

from ..errors import raise_if_fatal
from ..logging import jlog
from ..models import CaptureOptions

MIN_REGION_WIDTH = 300
MIN_REGION_HEIGHT = 200
MIN_REGION_ASPECT = 1.3
MAX_REGION_ASPECT = 2.5

# Viewport coordinates: a clip without full_page is taken relative to the viewport.
VIDEO_REGION_JS = """
({ minWidth, minHeight, minAspect, maxAspect }) => {
    const box = (el) => {
        const rect = el.getBoundingClientRect();
        return {
            x: Math.round(rect.x),
            y: Math.round(rect.y),
            width: Math.round(rect.width),
            height: Math.round(rect.height),
        };
    };
    const video = document.querySelector('video');
    if (video) return box(video);
    const containers = document.querySelectorAll('[class*="video"], [class*="player"], [id*="video"], [id*="player"]');
    for (const container of containers) {
        const rect = container.getBoundingClientRect();
        if (!rect.height) continue;
        const ratio = rect.width / rect.height;
        if (ratio > minAspect && ratio < maxAspect && rect.width > minWidth && rect.height > minHeight) {
            return box(container);
        }
    }
    return null;
}
"""


async def find_video_region(page: Page) -> dict[str, int] | None:
    region = await page.evaluate(
        VIDEO_REGION_JS,
        {
            "minWidth": MIN_REGION_WIDTH,
            "minHeight": MIN_REGION_HEIGHT,
            "minAspect": MIN_REGION_ASPECT,
            "maxAspect": MAX_REGION_ASPECT,
        },
    )
    if not region or region.get("width", 0) <= 0 or region.get("height", 0) <= 0:
        return None
    return {k: int(region[k]) for k in ("x", "y", "width", "height")}


async def capture_video_region(page: Page, options: CaptureOptions | None = None) -> bytes | None:
    """Capture only the detected video region; None when no region is found."""

    options = options or CaptureOptions()
    try:
        region = await find_video_region(page)
        if region is None:
            return None
        data = await page.screenshot(clip=region, **options.screenshot_kwargs())
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="video_region_crop_failed", error=str(exc))
        return None
    jlog("info", event="video_region_cropped", **region)
    return data


__all__ = ["capture_video_region", "find_video_region"]
