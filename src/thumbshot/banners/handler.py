"""Detection and dismissal of cookie, consent, age-gate and newsletter overlays."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Sequence

from playwright.async_api import ElementHandle, Page

from ..errors import raise_if_fatal
from ..logging import jlog
from ..models import DEFAULT_BANNER_TIMEOUT_MS
from ..playwright import element_is_visibly_displayed, sleep_ms
from .patterns import BANNER_PATTERNS, BLOCKING_CSS, BannerPattern, Selector, TextMatch, describe_selector

INITIAL_SETTLE_MS = int(os.getenv("BANNER_INITIAL_SETTLE_MS", "800"))
FINAL_SETTLE_MS = int(os.getenv("BANNER_FINAL_SETTLE_MS", "500"))
PASS_INTERVAL_MS = 500
CLICK_SETTLE_MS = 200
CUSTOM_SETTLE_MS = 1000
CLICK_TIMEOUT_MS = 3000
MAX_PASSES = 5

FIND_BY_TEXT_JS = """
({ selector, text }) => {
    for (const el of document.querySelectorAll(selector)) {
        if (el.textContent && el.textContent.includes(text)) {
            return el;
        }
    }
    return null;
}
"""

SCROLL_INTO_VIEW_JS = "(el) => el.scrollIntoView({ behavior: 'instant', block: 'center' })"
REMOVE_JS = "(el) => el.remove()"


async def resolve_selector(page: Page, selector: Selector) -> ElementHandle | None:
    """Return the first element matching ``selector`` (plain or text match)."""

    if isinstance(selector, TextMatch):
        handle = await page.evaluate_handle(FIND_BY_TEXT_JS, {"selector": selector.selector, "text": selector.text})
        return handle.as_element()
    return await page.query_selector(selector)


async def apply_banner_pattern(page: Page, pattern: BannerPattern) -> str | None:
    """Apply one pattern; returns the selector that fired, or None."""

    for selector in pattern.selectors:
        try:
            element = await resolve_selector(page, selector)
            if element is None:
                continue
            if not await element_is_visibly_displayed(element):
                continue
            if pattern.action == "click":
                await element.evaluate(SCROLL_INTO_VIEW_JS)
                await sleep_ms(CLICK_SETTLE_MS)
                await element.click(timeout=CLICK_TIMEOUT_MS)
            else:
                await element.evaluate(REMOVE_JS)
            described = describe_selector(selector)
            jlog("info", event="banner_element_" + ("clicked" if pattern.action == "click" else "removed"), pattern=pattern.name, selector=described)
            return described
        except Exception as exc:
            raise_if_fatal(exc)
            jlog("debug", event="banner_selector_failed", pattern=pattern.name, selector=describe_selector(selector), error=str(exc))
            continue
    return None


async def handle_banners(
    page: Page,
    timeout_ms: int = DEFAULT_BANNER_TIMEOUT_MS,
    *,
    patterns: Sequence[BannerPattern] = BANNER_PATTERNS,
) -> list[str]:
    """
    Repeatedly scan ``patterns`` and dismiss one banner per pass.

    Stops when a full pass finds nothing, when ``timeout_ms`` has elapsed, or
    after ``MAX_PASSES`` passes. The deadline is soft: an in-flight dismissal
    finishes, but no new pattern is tried once it has passed. Returns the names
    of the patterns that were handled, in order.
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + max(0, timeout_ms) / 1000.0
    handled: list[str] = []
    passes = 0

    try:
        await sleep_ms(INITIAL_SETTLE_MS)
        while loop.time() < deadline and passes < MAX_PASSES:
            passes += 1
            found: BannerPattern | None = None
            for pattern in patterns:
                if loop.time() >= deadline:
                    break
                if await apply_banner_pattern(page, pattern):
                    found = pattern
                    break
            if found is None:
                break
            handled.append(found.name)
            jlog("info", event="banner_handled", pattern=found.name, attempt=passes)
            if found.wait_after_ms:
                await sleep_ms(found.wait_after_ms)
            await sleep_ms(PASS_INTERVAL_MS)
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="banner_handling_error", error=str(exc), handled=len(handled))

    elapsed_ms = int((loop.time() - started) * 1000)
    jlog("info", event="banner_scan_done", handled=len(handled), passes=passes, elapsed_ms=elapsed_ms)
    await sleep_ms(FINAL_SETTLE_MS)
    return handled


async def handle_custom_banners(page: Page, selectors: Iterable[str]) -> list[str]:
    """Click each caller-supplied selector once if it resolves to a visible element."""

    clicked: list[str] = []
    for selector in selectors:
        try:
            element = await page.query_selector(selector)
            if element is None or not await element_is_visibly_displayed(element):
                continue
            await element.click(timeout=CLICK_TIMEOUT_MS)
            clicked.append(selector)
            jlog("info", event="custom_banner_clicked", selector=selector)
            await sleep_ms(CUSTOM_SETTLE_MS)
        except Exception as exc:
            raise_if_fatal(exc)
            jlog("warning", event="custom_banner_failed", selector=selector, error=str(exc))
    return clicked


async def inject_banner_blocking_css(page: Page) -> bool:
    """Force-hide known banner containers and restore body scrolling."""

    try:
        await page.add_style_tag(content=BLOCKING_CSS)
    except Exception as exc:
        raise_if_fatal(exc)
        jlog("warning", event="banner_css_inject_failed", error=str(exc))
        return False
    jlog("info", event="banner_css_injected")
    return True


__all__ = [
    "MAX_PASSES",
    "apply_banner_pattern",
    "handle_banners",
    "handle_custom_banners",
    "inject_banner_blocking_css",
    "resolve_selector",
]
