"""Debug artifact helpers."""

from __future__ import annotations

import os
import re

from playwright.async_api import Page

from .logging import jlog

DEBUG_DIR = os.getenv("THUMBSHOT_DEBUG_DIR", "media/debug")


def ensure_debug_dir() -> str:
    """Create the debug directory if it does not exist and return the path."""

    try:
        os.makedirs(DEBUG_DIR, exist_ok=True)
    except Exception:
        pass
    return DEBUG_DIR


def debug_slug(url: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", url).strip("_")[:120] or "page"


async def ensure_debug_html(page: Page, name: str) -> None:
    """Persist the current page HTML for later debugging (best effort)."""

    try:
        ensure_debug_dir()
        html = await page.content()
        with open(os.path.join(DEBUG_DIR, f"page_{name}.html"), "w", encoding="utf-8") as f:
            f.write(html)
    except Exception as exc:  # pragma: no cover - logging only
        jlog("error", event="debug_save_html_error", name=name, error=str(exc))


def write_debug_log(lines: list[str], name: str) -> None:
    """Persist the diagnostic log of one capture (best effort)."""

    try:
        ensure_debug_dir()
        with open(os.path.join(DEBUG_DIR, f"log_{name}.txt"), "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
    except Exception as exc:  # pragma: no cover - logging only
        jlog("error", event="debug_save_log_error", name=name, error=str(exc))


__all__ = ["DEBUG_DIR", "debug_slug", "ensure_debug_dir", "ensure_debug_html", "write_debug_log"]
