"""Quest document loading from a directory of YAML files.

The quests directory is walked recursively; every ``.yaml``/``.yml`` file
is one quest document. A document that cannot be parsed becomes a
``LoadFailure`` and the rest of the batch still loads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from questlint.graph.validation_types import LoadFailure
from questlint.models.quest import Quest
from questlint.observability.logging import get_logger
from questlint.storage.errors import QuestSourceError

log = get_logger(__name__)

QUEST_SUFFIXES = (".yaml", ".yml")


class QuestParseError(Exception):
    """Raised when a single quest document cannot be parsed."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f" at {path}" if path is not None else ""
        super().__init__(f"Failed to parse quest{where}: {reason}")


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into one line: ``loc: msg; loc: msg``."""
    parts = []
    for detail in error.errors():
        loc = ".".join(str(part) for part in detail.get("loc", ()))
        msg = detail.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_quest(data: Any, source: Path | None = None) -> Quest:
    """Build a Quest from an already-decoded document.

    Args:
        data: The decoded YAML/JSON document.
        source: File the document came from, remembered on the quest.

    Raises:
        QuestParseError: If the document is empty or does not match the model.
    """
    if data is None:
        raise QuestParseError(source, "empty document")
    if not isinstance(data, dict):
        raise QuestParseError(source, "document is not a mapping")
    try:
        quest = Quest.model_validate(data)
    except ValidationError as e:
        raise QuestParseError(source, describe_validation_error(e)) from e
    if source is not None:
        quest.with_source(source)
    return quest


def load_quest_file(path: Path) -> Quest:
    """Read and parse one quest file.

    Raises:
        QuestParseError: If the file cannot be read, decoded or validated.
    """
    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except (OSError, UnicodeDecodeError, YAMLError) as e:
        raise QuestParseError(path, str(e)) from e
    return parse_quest(data, path)


@dataclass
class LoadResult:
    """Outcome of loading a quests directory."""

    quests: list[Quest] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)


class QuestRepository:
    """Read-only access to the quest documents under one directory."""

    def __init__(self, quests_dir: Path) -> None:
        self.quests_dir = quests_dir

    def paths(self) -> list[Path]:
        """All quest files, sorted for a stable load order.

        Raises:
            QuestSourceError: If the quests directory is missing or unreadable.
        """
        if not self.quests_dir.exists():
            raise QuestSourceError(self.quests_dir, "directory not found")
        if not self.quests_dir.is_dir():
            raise QuestSourceError(self.quests_dir, "not a directory")
        try:
            return sorted(
                p for p in self.quests_dir.rglob("*") if p.is_file() and p.suffix in QUEST_SUFFIXES
            )
        except OSError as e:
            raise QuestSourceError(self.quests_dir, str(e)) from e

    def load_all(self) -> LoadResult:
        """Load every quest document, collecting failures instead of raising.

        Raises:
            QuestSourceError: If the directory itself cannot be read.
        """
        result = LoadResult()
        for path in self.paths():
            try:
                result.quests.append(load_quest_file(path))
            except QuestParseError as e:
                log.info("quest_load_failed", path=str(path), reason=e.reason)
                result.failures.append(LoadFailure(path=path, reason=e.reason))

        log.debug(
            "quests_loaded",
            quests_dir=str(self.quests_dir),
            loaded=len(result.quests),
            failed=len(result.failures),
        )
        return result

    def list_ids(self) -> list[str]:
        """QuestIDs of all loadable documents, in load order; broken files are skipped."""
        return [quest.quest_id for quest in self.load_all().quests]

    def get(self, quest_id: str) -> Quest | None:
        """Return the first loadable quest with the given ID, or None."""
        for path in self.paths():
            try:
                quest = load_quest_file(path)
            except QuestParseError:
                continue
            if quest.quest_id == quest_id:
                return quest
        return None
