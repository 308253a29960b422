"""Command-line capture pipeline exports."""

from __future__ import annotations

from .pipeline import CliArgs, capture_url, emit_outcome, main, parse_args, run

__all__ = ["CliArgs", "capture_url", "emit_outcome", "main", "parse_args", "run"]
