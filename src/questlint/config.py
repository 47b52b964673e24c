"""Linter configuration loading.

Resolution order, highest first: CLI flags, environment variables
(``QL_QUESTS_DIR``, ``QL_DATA_DIR``, ``QL_JOURNAL_CHECKS``), the
``questlint.yaml`` file, built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from questlint.graph.quest_validation import DEFAULT_PLAYER_SPEAKER
from questlint.models.quest import SUPPORTED_LOCALES

DEFAULT_CONFIG_FILE = "questlint.yaml"
DEFAULT_QUESTS_DIR = Path("./quests")
DEFAULT_DATA_DIR = Path("./data")

_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


@dataclass
class LintConfig:
    """Settings for a lint run.

    Attributes:
        quests_dir: Directory walked for quest documents.
        data_dir: Directory holding the reference catalog files.
        journal_checks: Run the flow-start/flow-end journal checks.
        player_speaker: Speaker value that denotes the player.
        locales: Locales checked by the cross-document uniqueness rules.
    """

    quests_dir: Path = DEFAULT_QUESTS_DIR
    data_dir: Path = DEFAULT_DATA_DIR
    journal_checks: bool = True
    player_speaker: str = DEFAULT_PLAYER_SPEAKER
    locales: list[str] = field(default_factory=lambda: list(SUPPORTED_LOCALES))

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> LintConfig:
        """Create config from dictionary.

        Relative directories are resolved against ``base_dir`` (the
        directory of the config file) when given.
        """

        def resolve(value: Any, default: Path) -> Path:
            if not value:
                return default
            path = Path(str(value))
            if base_dir is not None and not path.is_absolute():
                return base_dir / path
            return path

        locales = data.get("locales")
        return cls(
            quests_dir=resolve(data.get("quests_dir"), DEFAULT_QUESTS_DIR),
            data_dir=resolve(data.get("data_dir"), DEFAULT_DATA_DIR),
            journal_checks=_parse_bool(data.get("journal_checks"), True),
            player_speaker=str(data.get("player_speaker") or DEFAULT_PLAYER_SPEAKER),
            locales=[str(loc) for loc in locales] if locales else list(SUPPORTED_LOCALES),
        )

    def with_env(self) -> LintConfig:
        """Return a copy with environment variable overrides applied."""
        quests_dir = os.getenv("QL_QUESTS_DIR")
        data_dir = os.getenv("QL_DATA_DIR")
        return replace(
            self,
            quests_dir=Path(quests_dir) if quests_dir else self.quests_dir,
            data_dir=Path(data_dir) if data_dir else self.data_dir,
            journal_checks=_parse_bool(os.getenv("QL_JOURNAL_CHECKS"), self.journal_checks),
        )

    def with_overrides(
        self,
        *,
        quests_dir: Path | None = None,
        data_dir: Path | None = None,
        journal_checks: bool | None = None,
    ) -> LintConfig:
        """Return a copy with explicitly given values (e.g. CLI flags) applied."""
        return replace(
            self,
            quests_dir=quests_dir if quests_dir is not None else self.quests_dir,
            data_dir=data_dir if data_dir is not None else self.data_dir,
            journal_checks=journal_checks if journal_checks is not None else self.journal_checks,
        )


def load_config(config_path: Path | None = None, cwd: Path | None = None) -> LintConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Explicit config file. Must exist if given.
        cwd: Directory searched for ``questlint.yaml`` when no explicit
            path is given. Defaults to the current directory.

    Returns:
        LintConfig with file values and environment overrides applied.

    Raises:
        ConfigError: If an explicit file is missing, or any file is
            unreadable or malformed.
    """
    if config_path is None:
        candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
        if not candidate.exists():
            return LintConfig().with_env()
        config_path = candidate
    elif not config_path.exists():
        raise ConfigError(config_path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(config_path, "expected a mapping")

        return LintConfig.from_dict(dict(data), base_dir=config_path.parent).with_env()
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(config_path, str(e)) from e
