#!/usr/bin/env python3
"""CLI shim for the page capture pipeline.

Delegates to :mod:`thumbshot.cli` so automation can keep executing
``scripts/capture_page.py`` directly.
"""
from __future__ import annotations

import sys

from thumbshot.cli import main

if __name__ == "__main__":
    sys.exit(main())
