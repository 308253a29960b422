"""Metadata helpers for uploaded captures."""

from __future__ import annotations

from collections import OrderedDict
from typing import OrderedDict as OrderedDictType


def build_capture_metadata(
    *,
    source_url: str,
    is_video_thumbnail: bool,
    capture_method: str,
    image_format: str,
    width: int,
    height: int,
    sha256: str,
    engine_version: str,
    thumbnail_url: str | None = None,
    thumbnail_source: str | None = None,
    banners_handled: int | None = None,
) -> OrderedDictType[str, str]:
    """Return metadata with deterministic ordering for auditability."""

    md: OrderedDictType[str, str] = OrderedDict()
    md["source_url"] = source_url
    md["is_video_thumbnail"] = "true" if is_video_thumbnail else "false"
    md["capture_method"] = capture_method
    md["format"] = image_format
    md["width"] = str(width)
    md["height"] = str(height)
    md["sha256"] = sha256
    md["engine_version"] = engine_version
    if thumbnail_url:
        md["thumbnail_url"] = thumbnail_url
    if thumbnail_source:
        md["thumbnail_source"] = thumbnail_source
    if banners_handled is not None:
        md["banners_handled"] = str(banners_handled)
    return md


__all__ = ["build_capture_metadata"]
