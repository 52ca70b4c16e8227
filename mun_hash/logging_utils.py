"""Logging helpers for mun_hash runs."""

from __future__ import annotations

import logging
from datetime import timedelta


def configure_logging(level: int = logging.INFO) -> None:
    """Configure default logging if no handlers are present."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )


def format_elapsed(ms: int) -> str:
    ts = timedelta(milliseconds=ms)
    minutes, seconds = divmod(int(ts.total_seconds()), 60)
    return f"{minutes}m {seconds}s {ts.microseconds // 1000}ms"
