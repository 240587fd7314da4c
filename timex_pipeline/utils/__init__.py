"""
Shared utilities for the timex pipeline.
"""

from timex_pipeline.utils.spans import is_fully_referenced, resolve_spans

__all__ = [
    "resolve_spans",
    "is_fully_referenced",
]
