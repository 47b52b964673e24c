"""Errors raised when a document or catalog source cannot be used at all.

Per-document problems are not raised; they are collected as
``LoadFailure`` values by the loader.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - used at runtime

from questlint.models.references import EntityKind  # noqa: TC001 - used at runtime


class SourceUnavailableError(Exception):
    """Base for sources that cannot be read before validation starts."""

    def __init__(self, path: Path, reason: str, message: str | None = None) -> None:
        self.path = path
        self.reason = reason
        super().__init__(message or f"Cannot read {path}: {reason}")


class QuestSourceError(SourceUnavailableError):
    """Raised when the quests directory is missing or unreadable."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, reason, f"Failed to read quests at {path}: {reason}")


class CatalogLoadError(SourceUnavailableError):
    """Raised when the data directory or a catalog file cannot be loaded."""

    def __init__(self, kind: EntityKind | None, path: Path, reason: str) -> None:
        self.kind = kind
        what = f"{kind} catalog" if kind is not None else "reference data"
        super().__init__(path, reason, f"Failed to load {what} at {path}: {reason}")
