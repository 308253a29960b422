"""Banner and overlay handling."""

from __future__ import annotations

from .handler import apply_banner_pattern, handle_banners, handle_custom_banners, inject_banner_blocking_css
from .patterns import BANNER_PATTERNS, BLOCKING_CSS, BannerPattern, TextMatch

__all__ = [
    "BANNER_PATTERNS",
    "BLOCKING_CSS",
    "BannerPattern",
    "TextMatch",
    "apply_banner_pattern",
    "handle_banners",
    "handle_custom_banners",
    "inject_banner_blocking_css",
]
