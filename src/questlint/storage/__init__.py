"""File-based quest and reference data access."""

from questlint.storage.catalog import load_catalog, load_catalog_ids
from questlint.storage.errors import CatalogLoadError, QuestSourceError, SourceUnavailableError
from questlint.storage.loader import (
    LoadResult,
    QuestParseError,
    QuestRepository,
    load_quest_file,
    parse_quest,
)

__all__ = [
    "CatalogLoadError",
    "LoadResult",
    "QuestParseError",
    "QuestRepository",
    "QuestSourceError",
    "SourceUnavailableError",
    "load_catalog",
    "load_catalog_ids",
    "load_quest_file",
    "parse_quest",
]
