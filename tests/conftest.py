"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.fixtures.quest_fixtures import make_catalog, write_yaml

if TYPE_CHECKING:
    from pathlib import Path

    from questlint.models.references import ReferenceCatalog


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep QL_* variables from the developer's shell out of test runs."""
    for name in ("QL_QUESTS_DIR", "QL_DATA_DIR", "QL_JOURNAL_CHECKS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalog() -> ReferenceCatalog:
    return make_catalog()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory holding one entry per catalog file."""
    root = tmp_path / "data"
    write_yaml(root / "npcs.yaml", [{"NPCID": "NPC:Smith", "Name": "Smith"}, {"NPCID": "NPC:Guard"}])
    write_yaml(root / "items.yaml", [{"ItemID": "Item:Hammer"}, {"ItemID": "Item:Coal"}])
    write_yaml(root / "factions.yaml", [{"FactionID": "Faction:Guild"}])
    write_yaml(root / "resources.yaml", [{"ResourceID": "Resource:Iron"}])
    write_yaml(root / "objects.yaml", [{"ObjectID": "Object:Anvil"}])
    return root


@pytest.fixture
def quests_dir(tmp_path: Path) -> Path:
    root = tmp_path / "quests"
    root.mkdir()
    return root
