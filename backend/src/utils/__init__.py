"""
Utility modules for the event task workflow backend.

This package contains shared utilities used across the application:
- logging_config: Structured logging (console / rotating JSON files)
- formatting: UTC timestamp normalization and formatting
"""

from backend.src.utils.formatting import format_utc, to_naive_utc

__all__ = [
    "format_utc",
    "to_naive_utc",
]
