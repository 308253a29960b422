"""URL helpers for thumbnail candidates and embedded players."""

from __future__ import annotations

import re
import urllib.parse

EMBED_HOST_KEYWORDS = ("youtube", "vimeo", "dailymotion", "twitch", "player", "embed")
VIDEO_HOST_KEYWORDS = ("youtube", "vimeo", "dailymotion", "twitch")

# Thumbnail endpoints of the big video hosts; URLs here are served as-is.
CDN_THUMBNAIL_RE = re.compile(
    r"^https?://(?:"
    r"i\d?\.ytimg\.com/vi(?:_webp)?/"
    r"|img\.youtube\.com/vi/"
    r"|i\.vimeocdn\.com/video/"
    r"|(?:[a-z0-9-]+\.)*dmcdn\.net/"
    r"|(?:www\.)?dailymotion\.com/thumbnail/"
    r")",
    re.IGNORECASE,
)


def resolve_url(base: str | None, url: str) -> str:
    """Resolve ``url`` against ``base``; returns ``url`` unchanged on failure."""

    try:
        if not base:
            return url
        return urllib.parse.urljoin(base, url)
    except Exception:
        return url


def is_embed_src(src: str | None) -> bool:
    if not src:
        return False
    lowered = src.lower()
    return any(k in lowered for k in EMBED_HOST_KEYWORDS)


def is_cdn_thumbnail_url(url: str | None) -> bool:
    if not url:
        return False
    return bool(CDN_THUMBNAIL_RE.match(url))


__all__ = [
    "CDN_THUMBNAIL_RE",
    "EMBED_HOST_KEYWORDS",
    "VIDEO_HOST_KEYWORDS",
    "is_cdn_thumbnail_url",
    "is_embed_src",
    "resolve_url",
]
