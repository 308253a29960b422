"""Thumbnail candidate extraction strategies.

Each strategy is a coroutine ``(page) -> list[ThumbnailCandidate]`` that reads
the DOM (and, for oEmbed, one remote document) without mutating the page. The
strategies are registered in :data:`EXTRACTORS` and run by
:func:`collect_candidates`, which isolates failures and hangs per strategy.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Awaitable, Callable
from typing import Any

import requests
from playwright.async_api import Page

from ..errors import raise_if_fatal
from ..logging import jlog
from ..models import ThumbnailCandidate
from ..urls import is_embed_src

Extractor = Callable[[Page], Awaitable[list[ThumbnailCandidate]]]

STRATEGY_TIMEOUT_S = float(os.getenv("STRATEGY_TIMEOUT_S", "10"))
OEMBED_TIMEOUT_S = float(os.getenv("OEMBED_TIMEOUT_S", "5"))
MAX_OEMBED_LINKS = int(os.getenv("MAX_OEMBED_LINKS", "5"))
DEFAULT_USER_AGENT = os.getenv(
    "THUMBSHOT_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

CONFIDENCE_JSONLD = 0.9
CONFIDENCE_OG_IMAGE = 0.8
CONFIDENCE_TWITTER_IMAGE = 0.7
CONFIDENCE_POSTER = 0.9
CONFIDENCE_VIDEO_DATA_ATTR = 0.8
CONFIDENCE_CONTAINER_IMAGE = 0.6
CONFIDENCE_SIBLING_IMAGE = 0.5
CONFIDENCE_CSS_BACKGROUND = 0.7
CONFIDENCE_IFRAME_ATTR = 0.6
CONFIDENCE_OEMBED = 0.8

VIDEO_DATA_ATTRS = ("data-thumb", "data-poster", "data-thumbnail", "data-preview", "data-image")
IFRAME_DATA_ATTRS = ("data-poster", "data-thumb", "data-thumbnail")
VIDEO_CONTAINER_SELECTORS = (
    '[class*="video"]',
    '[id*="video"]',
    '[class*="player"]',
    '[id*="player"]',
    '[class*="media"]',
    '[id*="media"]',
    '[class*="embed"]',
    '[id*="embed"]',
    "[data-video]",
    "[data-player]",
)
BACKGROUND_KEYWORDS = ("video", "player", "thumb", "preview")

METADATA_JS = """
() => {
    const og = document.querySelector('meta[property="og:image"]');
    const tw = document.querySelector('meta[name="twitter:image"]');
    const blocks = Array.from(document.querySelectorAll('script[type="application/ld+json"]'))
        .map(s => s.textContent || '');
    return {
        og: og ? og.getAttribute('content') : null,
        twitter: tw ? tw.getAttribute('content') : null,
        ldjson: blocks,
    };
}
"""

VIDEO_ELEMENTS_JS = """
(attrs) => Array.from(document.querySelectorAll('video')).map((video, index) => {
    const data = {};
    for (const attr of attrs) {
        const value = video.getAttribute(attr);
        if (value) data[attr] = value;
    }
    return { index, poster: video.poster || null, data };
})
"""

DOM_TRAVERSAL_JS = """
(selectors) => {
    const out = [];
    const srcOf = (img) => img.src || (img.dataset ? img.dataset.src : '') || '';
    for (const selector of selectors) {
        document.querySelectorAll(selector).forEach((container, ci) => {
            container.querySelectorAll('img').forEach((img, ii) => {
                const url = srcOf(img);
                if (url) out.push({ url, kind: 'container', element: `${selector}:nth-match(${ci + 1}) img:nth-match(${ii + 1})` });
            });
            const siblings = Array.from((container.parentElement && container.parentElement.children) || []);
            siblings.forEach((sibling, si) => {
                if (sibling === container) return;
                sibling.querySelectorAll('img').forEach((img, ii) => {
                    const url = srcOf(img);
                    if (url) out.push({ url, kind: 'sibling', element: `${selector}:nth-match(${ci + 1}) ~ *:nth-child(${si + 1}) img:nth-match(${ii + 1})` });
                });
            });
        });
    }
    return out;
}
"""

CSS_BACKGROUND_JS = """
(keywords) => {
    const out = [];
    for (const el of document.querySelectorAll('*')) {
        const bg = window.getComputedStyle(el).backgroundImage;
        if (!bg || bg === 'none') continue;
        const m = bg.match(/url\\(['"]?([^'"]+)['"]?\\)/);
        if (!m) continue;
        const cls = (typeof el.className === 'string' ? el.className : '').toLowerCase();
        const id = (el.id || '').toLowerCase();
        if (!keywords.some(k => cls.includes(k) || id.includes(k))) continue;
        const classes = cls.trim() ? '.' + cls.trim().split(/\\s+/).join('.') : '';
        out.push({ url: m[1], element: el.tagName.toLowerCase() + (el.id ? `#${el.id}` : '') + classes });
    }
    return out;
}
"""

IFRAME_SRC_JS = "(el) => el.src || ''"

OEMBED_LINKS_JS = """
() => Array.from(document.querySelectorAll('link[type="application/json+oembed"]'))
    .map(link => link.href)
    .filter(Boolean)
"""


def _is_video_object(type_value: Any) -> bool:
    if isinstance(type_value, str):
        return type_value == "VideoObject"
    if isinstance(type_value, list):
        return "VideoObject" in type_value
    return False


def _thumbnail_url(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url") or value.get("contentUrl")
    return value if isinstance(value, str) and value else None


def find_video_thumbnails(data: Any) -> list[str]:
    """Collect ``VideoObject.thumbnailUrl`` values from arbitrarily nested JSON-LD."""

    found: list[str] = []
    stack: list[Any] = [data]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            if _is_video_object(node.get("@type")):
                url = _thumbnail_url(node.get("thumbnailUrl"))
                if url:
                    found.append(url)
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))
    return found


async def extract_metadata_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    meta = await page.evaluate(METADATA_JS) or {}
    out: list[ThumbnailCandidate] = []
    if meta.get("og"):
        out.append(
            ThumbnailCandidate(
                url=meta["og"],
                source="og:image",
                confidence=CONFIDENCE_OG_IMAGE,
                method="metadata",
                element='meta[property="og:image"]',
            )
        )
    if meta.get("twitter"):
        out.append(
            ThumbnailCandidate(
                url=meta["twitter"],
                source="twitter:image",
                confidence=CONFIDENCE_TWITTER_IMAGE,
                method="metadata",
                element='meta[name="twitter:image"]',
            )
        )
    for index, block in enumerate(meta.get("ldjson") or []):
        try:
            data = json.loads(block)
        except (TypeError, ValueError):
            continue
        for url in find_video_thumbnails(data):
            out.append(
                ThumbnailCandidate(
                    url=url,
                    source="schema.org VideoObject",
                    confidence=CONFIDENCE_JSONLD,
                    method="metadata",
                    element=f'script[type="application/ld+json"]:nth-of-type({index + 1})',
                )
            )
    return out


async def extract_video_element_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    videos = await page.evaluate(VIDEO_ELEMENTS_JS, list(VIDEO_DATA_ATTRS)) or []
    out: list[ThumbnailCandidate] = []
    for video in videos:
        element = f"video:nth-of-type({video.get('index', 0) + 1})"
        if video.get("poster"):
            out.append(
                ThumbnailCandidate(
                    url=video["poster"],
                    source="video poster",
                    confidence=CONFIDENCE_POSTER,
                    method="video-element",
                    element=element,
                )
            )
        data = video.get("data") or {}
        for attr in VIDEO_DATA_ATTRS:
            if data.get(attr):
                out.append(
                    ThumbnailCandidate(
                        url=data[attr],
                        source=f"video {attr}",
                        confidence=CONFIDENCE_VIDEO_DATA_ATTR,
                        method="video-element",
                        element=element,
                    )
                )
    return out


async def extract_dom_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    images = await page.evaluate(DOM_TRAVERSAL_JS, list(VIDEO_CONTAINER_SELECTORS)) or []
    out: list[ThumbnailCandidate] = []
    for img in images:
        if not img.get("url"):
            continue
        sibling = img.get("kind") == "sibling"
        out.append(
            ThumbnailCandidate(
                url=img["url"],
                source="sibling image" if sibling else "container image",
                confidence=CONFIDENCE_SIBLING_IMAGE if sibling else CONFIDENCE_CONTAINER_IMAGE,
                method="dom-traversal",
                element=img.get("element"),
            )
        )
    return out


async def extract_css_background_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    backgrounds = await page.evaluate(CSS_BACKGROUND_JS, list(BACKGROUND_KEYWORDS)) or []
    return [
        ThumbnailCandidate(
            url=bg["url"],
            source="CSS background",
            confidence=CONFIDENCE_CSS_BACKGROUND,
            method="css-background",
            element=bg.get("element"),
        )
        for bg in backgrounds
        if bg.get("url")
    ]


async def extract_iframe_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    # Only attributes on the <iframe> itself are read; cross-origin frame
    # contents are never traversed.
    out: list[ThumbnailCandidate] = []
    for index, iframe in enumerate(await page.query_selector_all("iframe")):
        try:
            src = await iframe.evaluate(IFRAME_SRC_JS)
            if not is_embed_src(src):
                continue
            for attr in IFRAME_DATA_ATTRS:
                poster = await iframe.get_attribute(attr)
                if poster:
                    out.append(
                        ThumbnailCandidate(
                            url=poster,
                            source="iframe data attribute",
                            confidence=CONFIDENCE_IFRAME_ATTR,
                            method="iframe",
                            element=f"iframe:nth-of-type({index + 1})",
                        )
                    )
                    break
        except Exception as exc:
            raise_if_fatal(exc)
            continue
    return out


def make_http(user_agent: str = DEFAULT_USER_AGENT, referer: str | None = None) -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": user_agent})
    if referer:
        s.headers["Referer"] = referer
    return s


def fetch_json(url: str, *, timeout: float = OEMBED_TIMEOUT_S) -> Any:
    with make_http() as http:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()


def _as_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


async def _fetch_oembed(href: str) -> Any:
    try:
        return await asyncio.wait_for(asyncio.to_thread(fetch_json, href), timeout=OEMBED_TIMEOUT_S)
    except Exception as exc:
        jlog("debug", event="oembed_fetch_failed", href=href, error=str(exc))
        return None


async def extract_oembed_thumbnails(page: Page) -> list[ThumbnailCandidate]:
    """Fetch the advertised oEmbed documents concurrently, each under its own timeout."""

    links = (await page.evaluate(OEMBED_LINKS_JS) or [])[:MAX_OEMBED_LINKS]
    documents = await asyncio.gather(*(_fetch_oembed(href) for href in links))
    out: list[ThumbnailCandidate] = []
    for data in documents:
        if not isinstance(data, dict) or not data.get("thumbnail_url"):
            continue
        out.append(
            ThumbnailCandidate(
                url=str(data["thumbnail_url"]),
                source="oEmbed",
                confidence=CONFIDENCE_OEMBED,
                method="oembed",
                width=_as_int(data.get("thumbnail_width")),
                height=_as_int(data.get("thumbnail_height")),
                element='link[type="application/json+oembed"]',
            )
        )
    return out


EXTRACTORS: tuple[tuple[str, Extractor], ...] = (
    ("metadata", extract_metadata_thumbnails),
    ("video-element", extract_video_element_thumbnails),
    ("dom-traversal", extract_dom_thumbnails),
    ("css-background", extract_css_background_thumbnails),
    ("iframe", extract_iframe_thumbnails),
    ("oembed", extract_oembed_thumbnails),
)


async def collect_candidates(
    page: Page,
    log: list[str],
    *,
    extractors: tuple[tuple[str, Extractor], ...] = EXTRACTORS,
    timeout_s: float = STRATEGY_TIMEOUT_S,
) -> list[ThumbnailCandidate]:
    """Run every strategy in order; a failing or hung strategy contributes nothing."""

    candidates: list[ThumbnailCandidate] = []
    for number, (tag, extractor) in enumerate(extractors, start=1):
        try:
            found = await asyncio.wait_for(extractor(page), timeout=timeout_s)
        except asyncio.TimeoutError:
            log.append(f"Strategy {number} ({tag}) timed out after {timeout_s:g}s")
            jlog("warning", event="strategy_timeout", strategy=tag, timeout_s=timeout_s)
            continue
        except Exception as exc:
            raise_if_fatal(exc)
            log.append(f"Strategy {number} ({tag}) failed: {exc}")
            jlog("warning", event="strategy_failed", strategy=tag, error=str(exc))
            continue
        candidates.extend(found)
        log.append(f"Strategy {number} ({tag}): found {len(found)} candidates")
    return candidates


__all__ = [
    "EXTRACTORS",
    "collect_candidates",
    "extract_css_background_thumbnails",
    "extract_dom_thumbnails",
    "extract_iframe_thumbnails",
    "extract_metadata_thumbnails",
    "extract_oembed_thumbnails",
    "extract_video_element_thumbnails",
    "fetch_json",
    "find_video_thumbnails",
    "make_http",
]
