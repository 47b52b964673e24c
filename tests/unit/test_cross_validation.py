"""Tests for repository-wide validation rules."""

from __future__ import annotations

from pathlib import Path

from questlint.graph.cross_validation import (
    check_quest_references,
    check_unique_display_names,
    check_unique_quest_ids,
    check_unique_stage_descriptions,
    validate_repository,
)
from tests.fixtures.quest_fixtures import (
    actions,
    branch,
    decision,
    entry,
    journal_entry,
    make_quest,
    opening_actions,
    option,
    quest_doc,
    stage_description,
    valid_quest_doc,
)


class TestUniqueQuestIds:
    """QuestIDs must be unique across the repository."""

    def test_duplicate_id_reported_once_with_count(self) -> None:
        """Two documents with the same QuestID give one issue naming the count."""
        first = make_quest(valid_quest_doc("Q1")).with_source(Path("quests/a.yaml"))
        second = make_quest(valid_quest_doc("Q1")).with_source(Path("quests/b.yaml"))

        issues = validate_repository([first, second])

        assert [i.format() for i in issues] == [
            '[CROSS-QUEST]: duplicate QuestID "Q1" found 2 times (quests/a.yaml, quests/b.yaml)'
        ]

    def test_three_occurrences(self) -> None:
        """The count reflects every occurrence."""
        quests = [make_quest(valid_quest_doc("Q1")) for _ in range(3)]

        assert [i.message for i in check_unique_quest_ids(quests)] == [
            'duplicate QuestID "Q1" found 3 times'
        ]

    def test_unique_ids(self) -> None:
        """Distinct QuestIDs produce nothing."""
        quests = [make_quest(valid_quest_doc("Q1")), make_quest(valid_quest_doc("Q2"))]

        assert check_unique_quest_ids(quests) == []


class TestUniqueDisplayNames:
    """DisplayName must be unique per locale."""

    def test_duplicate_name_in_one_locale(self) -> None:
        """Only the clashing locale is reported."""
        quests = [
            make_quest(quest_doc([], "Q1", name="The Smith", name_de="Schmied A")),
            make_quest(quest_doc([], "Q2", name="The Smith", name_de="Schmied B")),
        ]

        assert [i.message for i in check_unique_display_names(quests)] == [
            'duplicate DisplayName "The Smith" (en-US) in quests: Q1, Q2'
        ]

    def test_duplicate_name_in_both_locales(self) -> None:
        """Each locale is checked separately."""
        quests = [
            make_quest(quest_doc([], "Q1", name="Same", name_de="Gleich")),
            make_quest(quest_doc([], "Q2", name="Same", name_de="Gleich")),
        ]

        assert len(check_unique_display_names(quests)) == 2

    def test_empty_names_are_ignored(self) -> None:
        """Missing display names never clash."""
        first = quest_doc([], "Q1")
        second = quest_doc([], "Q2")
        first["DisplayName"] = {}
        second["DisplayName"] = {}

        assert check_unique_display_names([make_quest(first), make_quest(second)]) == []

    def test_locales_are_configurable(self) -> None:
        """Only the requested locales are checked."""
        quests = [
            make_quest(quest_doc([], "Q1", name="Same", name_de="Gleich")),
            make_quest(quest_doc([], "Q2", name="Same", name_de="Gleich")),
        ]

        issues = check_unique_display_names(quests, locales=("de-DE",))

        assert [i.message for i in issues] == [
            'duplicate DisplayName "Gleich" (de-DE) in quests: Q1, Q2'
        ]


class TestUniqueStageDescriptions:
    """Stage description texts must be unique across quests."""

    def test_shared_stage_text(self) -> None:
        """The same en-US stage text in two quests is reported."""
        quests = [
            make_quest(valid_quest_doc("Q1", stage="Find the smith")),
            make_quest(valid_quest_doc("Q2", stage="Find the smith")),
        ]

        messages = [i.message for i in check_unique_stage_descriptions(quests)]

        assert messages == [
            'duplicate QuestStageDescription "Find the smith" (en-US) in quests: Q1, Q2',
            'duplicate QuestStageDescription "DE: Find the smith" (de-DE) in quests: Q1, Q2',
        ]

    def test_repeat_within_one_quest_is_allowed(self) -> None:
        """A quest may reuse its own stage text."""
        quest = make_quest(
            quest_doc(
                [
                    entry(0, [1]),
                    opening_actions(1, [2], stage="Repeat"),
                    actions(2, [journal_entry(), stage_description("Repeat"), "CompleteQuest"]),
                ]
            )
        )

        assert check_unique_stage_descriptions([quest]) == []

    def test_quest_listed_once_per_group(self) -> None:
        """A quest repeating a shared text appears once in the group."""
        first = make_quest(
            quest_doc(
                [
                    entry(0, [1]),
                    opening_actions(1, [2], stage="Shared"),
                    actions(2, [journal_entry(), stage_description("Shared"), "CompleteQuest"]),
                ],
                "Q1",
            )
        )
        second = make_quest(valid_quest_doc("Q2", stage="Shared"))

        messages = [i.message for i in check_unique_stage_descriptions([first, second], ("en-US",))]

        assert messages == ['duplicate QuestStageDescription "Shared" (en-US) in quests: Q1, Q2']


class TestQuestReferences:
    """QuestCompleted conditions must name a loaded quest."""

    def test_unknown_quest_in_node_condition(self) -> None:
        """The issue is attached to the referencing quest and node."""
        quest = make_quest(
            quest_doc(
                [
                    entry(0, [1]),
                    branch(1, [{"QuestCompleted": "Missing"}], if_true=[2]),
                    actions(2, ["CompleteQuest"]),
                ],
                "Q1",
            )
        )

        issues = check_quest_references([quest])

        assert [i.format() for i in issues] == [
            '[Q1] Node 1: QuestCompleted references non-existent quest "Missing"'
        ]

    def test_unknown_quest_in_option_condition(self) -> None:
        """Option-level conditions are checked too."""
        quest = make_quest(
            quest_doc(
                [
                    entry(0, [1]),
                    decision(1, [option([2], conditions=[{"QuestCompleted": "Ghost"}])]),
                    actions(2, ["CompleteQuest"]),
                ],
                "Q1",
            )
        )

        issues = check_quest_references([quest])

        assert [(i.quest_id, i.node_id) for i in issues] == [("Q1", 1)]

    def test_known_quest(self) -> None:
        """A reference to another loaded quest is fine."""
        referencing = make_quest(
            quest_doc(
                [entry(0, [1]), branch(1, [{"QuestCompleted": "Q2"}], if_false=[2]), actions(2, [])],
                "Q1",
            )
        )

        assert check_quest_references([referencing, make_quest(valid_quest_doc("Q2"))]) == []


class TestValidateRepository:
    """Combined cross-document run."""

    def test_clean_repository(self) -> None:
        """Distinct quests produce no issues."""
        quests = [make_quest(valid_quest_doc("Q1")), make_quest(valid_quest_doc("Q2"))]

        assert validate_repository(quests) == []

    def test_rule_order(self) -> None:
        """QuestID issues come before QuestCompleted issues."""
        dangling = make_quest(
            quest_doc(
                [entry(0, [1]), branch(1, [{"QuestCompleted": "Nope"}], if_true=[2]), actions(2, [])],
                "Q2",
            )
        )
        quests = [make_quest(valid_quest_doc("Q1")), make_quest(valid_quest_doc("Q1")), dangling]

        messages = [i.message for i in validate_repository(quests)]

        assert messages == [
            'duplicate QuestID "Q1" found 2 times',
            'QuestCompleted references non-existent quest "Nope"',
        ]

    def test_empty_repository(self) -> None:
        """No quests, no issues."""
        assert validate_repository([]) == []
