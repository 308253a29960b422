"""Playwright helpers shared by the banner handler, the detector and the CLI."""

from __future__ import annotations

import asyncio

from playwright.async_api import ElementHandle, Page

from .errors import raise_if_fatal

VISIBILITY_JS = """
(el) => {
    if (!el) return false;
    const style = window.getComputedStyle(el);
    const rect = el.getBoundingClientRect();
    return (
        style.display !== 'none' &&
        style.visibility !== 'hidden' &&
        style.opacity !== '0' &&
        rect.width > 0 &&
        rect.height > 0
    );
}
"""

ASSETS_READY_JS = """
() => Promise.all([
    (document.fonts && document.fonts.ready) ? document.fonts.ready : Promise.resolve(),
    Promise.all(
        Array.from(document.images || []).map(img => {
            if (img.complete) return Promise.resolve();
            return new Promise(res => {
                img.addEventListener('load', () => res(), { once: true });
                img.addEventListener('error', () => res(), { once: true });
            });
        })
    )
])
"""


async def sleep_ms(ms: int) -> None:
    """Cooperative settle delay."""

    if ms > 0:
        await asyncio.sleep(ms / 1000.0)


async def element_is_visibly_displayed(handle: ElementHandle | None) -> bool:
    if not handle:
        return False
    try:
        return bool(await handle.evaluate(VISIBILITY_JS))
    except Exception as exc:
        raise_if_fatal(exc)
        return False


async def wait_assets_ready(page: Page, timeout_ms: int = 5000) -> None:
    """Wait (bounded) for fonts and images to settle before taking screenshots."""

    try:
        await asyncio.wait_for(page.evaluate(ASSETS_READY_JS), timeout=timeout_ms / 1000.0)
    except Exception as exc:
        raise_if_fatal(exc)


async def cleanup_playwright(context, browser) -> None:
    """Close the browser resources (best effort)."""

    try:
        if context:
            await context.close()
    except Exception:
        pass
    try:
        if browser:
            await browser.close()
    except Exception:
        pass


CHROMIUM_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-setuid-sandbox",
    "--disable-gpu",
    "--no-first-run",
    "--disable-default-apps",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]


__all__ = [
    "CHROMIUM_LAUNCH_ARGS",
    "VISIBILITY_JS",
    "cleanup_playwright",
    "element_is_visibly_displayed",
    "sleep_ms",
    "wait_assets_ready",
]
