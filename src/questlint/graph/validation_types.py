"""Validation result types shared by the single- and cross-document validators.

Validation issues are data, not exceptions: every check returns a list of
issues and the caller merges them. A result is valid exactly when it
holds no issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

CROSS_QUEST_LABEL = "CROSS-QUEST"


@dataclass(frozen=True)
class ValidationIssue:
    """A single rule violation.

    Attributes:
        message: Human-readable description of the violation.
        node_id: Offending node, or None for quest-level issues.
        quest_id: Owning quest; set in repository context, None for
            cross-document issues that belong to no single quest.
    """

    message: str
    node_id: int | None = None
    quest_id: str | None = None

    def for_quest(self, quest_id: str) -> ValidationIssue:
        """Return a copy stamped with the owning quest ID."""
        return replace(self, quest_id=quest_id)

    def format(self) -> str:
        """Render as one report line.

        ``[QuestID] Node N: message``, ``[QuestID]: message`` or
        ``[CROSS-QUEST]: message``.
        """
        if self.quest_id:
            if self.node_id is not None:
                return f"[{self.quest_id}] Node {self.node_id}: {self.message}"
            return f"[{self.quest_id}]: {self.message}"
        if self.node_id is not None:
            return f"Node {self.node_id}: {self.message}"
        return f"[{CROSS_QUEST_LABEL}]: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.quest_id is not None:
            data["questId"] = self.quest_id
        if self.node_id is not None:
            data["nodeId"] = self.node_id
        data["message"] = self.message
        return data


def node_issue(node_id: int, message: str) -> ValidationIssue:
    return ValidationIssue(message=message, node_id=node_id)


def quest_issue(message: str) -> ValidationIssue:
    return ValidationIssue(message=message)


@dataclass
class ValidationResult:
    """Ordered issues for one quest document.

    Attributes:
        issues: Issues in the order the checks produced them.
    """

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        """True if no check reported an issue."""
        return not self.issues

    def extend(self, issues: list[ValidationIssue]) -> None:
        self.issues.extend(issues)

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> dict[str, Any]:
        """Serialize as ``{"valid": bool, "errors": [...]}``."""
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class LoadFailure:
    """A quest document that could not be parsed.

    Load failures are reported separately and never take part in
    semantic validation.
    """

    path: Path
    reason: str

    def format(self) -> str:
        return f"[LOAD ERROR]: failed to load {self.path}: {self.reason}"

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "message": self.reason}


@dataclass
class RepositoryReport:
    """Aggregated outcome of validating a whole quest repository.

    Attributes:
        quests_checked: Number of successfully loaded quests.
        load_failures: Documents that could not be loaded.
        quest_issues: Single-document issues, stamped with their QuestID,
            in load order.
        cross_issues: Repository-wide issues.
    """

    quests_checked: int = 0
    load_failures: list[LoadFailure] = field(default_factory=list)
    quest_issues: list[ValidationIssue] = field(default_factory=list)
    cross_issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.quest_issues, *self.cross_issues]

    @property
    def issue_count(self) -> int:
        """Validation issues plus load failures."""
        return len(self.load_failures) + len(self.quest_issues) + len(self.cross_issues)

    @property
    def has_issues(self) -> bool:
        return self.issue_count > 0

    @property
    def exit_code(self) -> int:
        """0 when clean, 1 when anything was reported."""
        return 1 if self.has_issues else 0

    @property
    def summary(self) -> str:
        return f"Checked {self.quests_checked} quests, found {self.issue_count} issues."

    def lines(self) -> list[str]:
        """Report lines: load failures first, then issues."""
        return [
            *(failure.format() for failure in self.load_failures),
            *(issue.format() for issue in self.issues),
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": not self.has_issues,
            "questsChecked": self.quests_checked,
            "loadErrors": [failure.to_dict() for failure in self.load_failures],
            "errors": [issue.to_dict() for issue in self.issues],
        }
