"""Observability module for questlint.

Provides structured logging (structlog routed through rich on the console
and optionally JSONL to disk).
"""

from questlint.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
    quest_context,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "get_logs_dir",
    "quest_context",
]
