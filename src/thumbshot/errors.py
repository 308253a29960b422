"""Error classification for the capture engine."""

from __future__ import annotations

_FATAL_MARKERS = (
    "target page, context or browser has been closed",
    "browser has been closed",
    "target closed",
    "connection closed",
    "session closed",
    "protocol error",
)


class PageConnectionLost(RuntimeError):
    """Signal that the page/browser link died and no further DOM work is possible."""


def is_fatal_page_error(exc: BaseException) -> bool:
    """Return True when ``exc`` means the page or its browser is gone."""

    if isinstance(exc, PageConnectionLost):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _FATAL_MARKERS)


def raise_if_fatal(exc: BaseException) -> None:
    """Re-raise ``exc`` as :class:`PageConnectionLost` when it is fatal."""

    if isinstance(exc, PageConnectionLost):
        raise exc
    if is_fatal_page_error(exc):
        raise PageConnectionLost(str(exc)) from exc


__all__ = ["PageConnectionLost", "is_fatal_page_error", "raise_if_fatal"]
