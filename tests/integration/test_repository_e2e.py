"""End-to-end integration tests for repository validation.

Runs the full pipeline (catalog, recursive loading, single-document and
cross-document rules) over the YAML repository built in conftest, through
the library, the CLI and the HTTP API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.testclient import TestClient
from typer.testing import CliRunner

from questlint.api import create_app
from questlint.checker import check_repository
from questlint.cli import app

if TYPE_CHECKING:
    from questlint.config import LintConfig

EXPECTED_ISSUE_LINES = [
    "[Side.Loop]: quest contains a cycle (loops are not allowed)",
    "[Side.Loop] Node 1: unknown speaker: NPC:Stranger",
    "[Side.Loop] Node 0: EntryPoint flow has no Actions node",
    '[CROSS-QUEST]: duplicate QuestStageDescription "Talk to the smith" (en-US) '
    "in quests: Main.Intro, Side.Forge",
    '[Side.Forge] Node 2: QuestCompleted references non-existent quest "Main.Missing"',
]


class TestRepositoryPipeline:
    """Library-level run over the whole repository."""

    def test_report_lines(self, quest_repository: LintConfig) -> None:
        """Load failures come first, then issues in load and rule order."""
        report = check_repository(quest_repository)
        lines = report.lines()

        assert lines[0].startswith("[LOAD ERROR]: failed to load ")
        assert "draft.yaml" in lines[0]
        assert lines[1:] == EXPECTED_ISSUE_LINES

    def test_summary(self, quest_repository: LintConfig) -> None:
        report = check_repository(quest_repository)

        assert report.quests_checked == 3
        assert report.summary == "Checked 3 quests, found 6 issues."
        assert report.exit_code == 1

    def test_report_is_deterministic(self, quest_repository: LintConfig) -> None:
        """Two runs over the same files produce identical reports."""
        first = check_repository(quest_repository)
        second = check_repository(quest_repository)

        assert first.lines() == second.lines()

    def test_editor_keys_survive_loading(self, quest_repository: LintConfig) -> None:
        """Unknown keys such as editor positions stay on the document."""
        from questlint.storage import QuestRepository

        quest = QuestRepository(quest_repository.quests_dir).get("Main.Intro")

        assert quest is not None
        assert quest.to_document()["QuestNodes"][0]["Position"] == {"x": 0, "y": 0}


def test_cli_check(quest_repository: LintConfig) -> None:
    result = CliRunner().invoke(
        app,
        [
            "check",
            "--quests",
            str(quest_repository.quests_dir),
            "--data",
            str(quest_repository.data_dir),
        ],
    )

    assert result.exit_code == 1
    for line in EXPECTED_ISSUE_LINES:
        assert line in result.output
    assert "Checked 3 quests, found 6 issues." in result.output


def test_api_repository_validation(quest_repository: LintConfig) -> None:
    client = TestClient(create_app(quest_repository))

    body = client.post("/api/validate/repository").json()

    assert body["valid"] is False
    assert body["questsChecked"] == 3
    assert len(body["loadErrors"]) == 1
    assert len(body["errors"]) == 5
    assert client.get("/api/quests").json() == ["Side.Loop", "Main.Intro", "Side.Forge"]
