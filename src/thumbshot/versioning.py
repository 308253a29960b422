"""Engine version resolution helpers."""

from __future__ import annotations

import os

ENGINE_NAME = "thumbshot"
ENGINE_VERSION = "2025-11-04.1"


def get_engine_version(name: str = ENGINE_NAME, version: str = ENGINE_VERSION) -> str:
    """Return a human-readable version string with an env override."""

    return os.getenv("THUMBSHOT_VERSION", f"{name}:{version}")


__all__ = ["ENGINE_NAME", "ENGINE_VERSION", "get_engine_version"]
