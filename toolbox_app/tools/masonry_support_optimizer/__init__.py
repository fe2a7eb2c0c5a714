"""Masonry support optimizer plugin."""
from __future__ import annotations

from typing import Any


def __getattr__(name: str) -> Any:
    if name == "TOOL":
        from .tool import TOOL

        return TOOL
    if name == "run_search":
        from .solver import run_search

        return run_search
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["TOOL", "run_search"]
