"""Tests for the qlint command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from questlint import __version__
from questlint.cli import app
from tests.fixtures.quest_fixtures import (
    actions,
    dialog,
    entry,
    journal_entry,
    opening_actions,
    quest_doc,
    valid_quest_doc,
    write_yaml,
)

if TYPE_CHECKING:
    from pathlib import Path

    from click.testing import Result

runner = CliRunner()


@pytest.fixture(autouse=True)
def in_tmp_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every command from an empty directory so no stray config is read."""
    monkeypatch.chdir(tmp_path)


def _check(quests_dir: Path, data_dir: Path, *args: str) -> Result:
    return runner.invoke(
        app, ["check", "--quests", str(quests_dir), "--data", str(data_dir), *args]
    )


class TestCheck:
    """qlint check."""

    def test_clean_repository_exits_zero(self, quests_dir: Path, data_dir: Path) -> None:
        write_yaml(quests_dir / "q1.yaml", valid_quest_doc("Q1"))

        result = _check(quests_dir, data_dir)

        assert result.exit_code == 0
        assert "Checked 1 quests, found 0 issues." in result.output

    def test_issues_exit_one(self, quests_dir: Path, data_dir: Path) -> None:
        write_yaml(
            quests_dir / "q1.yaml",
            quest_doc(
                [
                    entry(0, [1]),
                    opening_actions(1, [2]),
                    dialog(2, [3], partner="NPC:Ghost"),
                    actions(3, [journal_entry(), "CompleteQuest"]),
                ]
            ),
        )

        result = _check(quests_dir, data_dir)

        assert result.exit_code == 1
        assert "[Q1] Node 2: unknown conversation partner: NPC:Ghost" in result.output
        assert "Checked 1 quests, found 1 issues." in result.output

    def test_no_quests_found(self, quests_dir: Path, data_dir: Path) -> None:
        result = _check(quests_dir, data_dir)

        assert result.exit_code == 0
        assert "No quests found." in result.output

    def test_quiet_omits_summary(self, quests_dir: Path, data_dir: Path) -> None:
        write_yaml(quests_dir / "a.yaml", valid_quest_doc("Q1"))
        write_yaml(quests_dir / "b.yaml", valid_quest_doc("Q1"))

        result = _check(quests_dir, data_dir, "--quiet")

        assert result.exit_code == 1
        assert '[CROSS-QUEST]: duplicate QuestID "Q1" found 2 times' in result.output
        assert "Checked" not in result.output
        assert "-" * 40 not in result.output

    def test_load_failure_line(self, quests_dir: Path, data_dir: Path) -> None:
        (quests_dir / "empty.yaml").write_text("", encoding="utf-8")

        result = _check(quests_dir, data_dir)

        assert result.exit_code == 1
        assert "[LOAD ERROR]: failed to load" in result.output
        assert "empty document" in result.output

    def test_no_journal_checks_flag(self, quests_dir: Path, data_dir: Path) -> None:
        write_yaml(quests_dir / "q1.yaml", quest_doc([entry(0, [1]), actions(1, ["CompleteQuest"])]))

        assert _check(quests_dir, data_dir).exit_code == 1
        assert _check(quests_dir, data_dir, "--no-journal-checks").exit_code == 0

    def test_missing_quests_directory_exits_two(self, tmp_path: Path, data_dir: Path) -> None:
        result = _check(tmp_path / "missing", data_dir)

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_missing_data_directory_exits_two(self, quests_dir: Path, tmp_path: Path) -> None:
        write_yaml(quests_dir / "q1.yaml", valid_quest_doc("Q1"))

        result = _check(quests_dir, tmp_path / "missing")

        assert result.exit_code == 2

    def test_config_file_provides_directories(
        self, tmp_path: Path, quests_dir: Path, data_dir: Path
    ) -> None:
        """Directories come from questlint.yaml when no flags are given."""
        write_yaml(quests_dir / "q1.yaml", valid_quest_doc("Q1"))
        write_yaml(tmp_path / "questlint.yaml", {"quests_dir": "quests", "data_dir": "data"})

        result = runner.invoke(app, ["check"])

        assert result.exit_code == 0
        assert "Checked 1 quests" in result.output

    def test_missing_explicit_config_exits_two(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 2


class TestValidate:
    """qlint validate FILE."""

    def test_valid_file(self, tmp_path: Path, data_dir: Path) -> None:
        path = write_yaml(tmp_path / "q1.yaml", valid_quest_doc("Q1"))

        result = runner.invoke(app, ["validate", str(path), "--data", str(data_dir)])

        assert result.exit_code == 0
        assert "Q1 is valid" in result.output

    def test_invalid_file(self, tmp_path: Path, data_dir: Path) -> None:
        path = write_yaml(tmp_path / "q1.yaml", quest_doc([actions(0, ["CompleteQuest"])]))

        result = runner.invoke(app, ["validate", str(path), "--data", str(data_dir)])

        assert result.exit_code == 1
        assert "[Q1]: quest must have at least one EntryPoint node" in result.output

    def test_unparseable_file(self, tmp_path: Path, data_dir: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- not a quest\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path), "--data", str(data_dir)])

        assert result.exit_code == 1
        assert "[LOAD ERROR]" in result.output

    def test_missing_file(self, tmp_path: Path, data_dir: Path) -> None:
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.yaml"), "--data", str(data_dir)])

        assert result.exit_code == 2


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"questlint v{__version__}" in result.output


def test_no_args_shows_help() -> None:
    result = runner.invoke(app, [])

    assert "check" in result.output
    assert "validate" in result.output


def test_version_matches_pyproject() -> None:
    """The CLI reports the version the package is published under."""
    import tomllib
    from pathlib import Path

    pyproject = Path(__file__).parents[2] / "pyproject.toml"
    with pyproject.open("rb") as f:
        assert tomllib.load(f)["project"]["version"] == __version__
