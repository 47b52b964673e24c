"""Cross-document validation over a whole quest repository.

These rules need every successfully loaded quest at once: uniqueness of
quest IDs, display names and stage descriptions, and QuestCompleted
references between quests. Groups are reported in the order their first
member was loaded so that reports are stable between runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from questlint.graph.validation_types import ValidationIssue
from questlint.models.payloads import QuestCompleted, QuestStageDescriptionAction
from questlint.models.quest import SUPPORTED_LOCALES
from questlint.observability.logging import get_logger

if TYPE_CHECKING:
    from questlint.models.payloads import Payload
    from questlint.models.quest import Quest

log = get_logger(__name__)


def _group(pairs: list[tuple[str, str]]) -> dict[str, list[str]]:
    """Group quest IDs by value, keeping first-occurrence order and unique members."""
    groups: dict[str, list[str]] = {}
    for value, quest_id in pairs:
        members = groups.setdefault(value, [])
        if quest_id not in members:
            members.append(quest_id)
    return groups


def check_unique_quest_ids(quests: Sequence[Quest]) -> list[ValidationIssue]:
    """One issue per QuestID that occurs more than once, naming the count."""
    occurrences: dict[str, list[Quest]] = {}
    for quest in quests:
        occurrences.setdefault(quest.quest_id, []).append(quest)

    issues: list[ValidationIssue] = []
    for quest_id, duplicates in occurrences.items():
        if len(duplicates) < 2:
            continue
        message = f'duplicate QuestID "{quest_id}" found {len(duplicates)} times'
        sources = [str(q.source) for q in duplicates if q.source is not None]
        if sources:
            message += f" ({', '.join(sources)})"
        issues.append(ValidationIssue(message=message))
    return issues


def check_unique_display_names(
    quests: Sequence[Quest], locales: Sequence[str] = SUPPORTED_LOCALES
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for locale in locales:
        pairs = [
            (name, quest.quest_id)
            for quest in quests
            if (name := quest.display_name.get(locale))
        ]
        for name, quest_ids in _group(pairs).items():
            if len(quest_ids) > 1:
                issues.append(
                    ValidationIssue(
                        message=f'duplicate DisplayName "{name}" ({locale}) '
                        f"in quests: {', '.join(quest_ids)}"
                    )
                )
    return issues


def _stage_descriptions(quest: Quest, locale: str) -> list[str]:
    texts = []
    for node in quest.quest_nodes:
        for action in node.actions:
            if isinstance(action, QuestStageDescriptionAction) and (text := action.texts.get(locale)):
                texts.append(text)
    return texts


def check_unique_stage_descriptions(
    quests: Sequence[Quest], locales: Sequence[str] = SUPPORTED_LOCALES
) -> list[ValidationIssue]:
    """Stage description texts must be unique across the repository, per locale.

    Repeating a text inside one quest is allowed; a quest is listed once
    per group.
    """
    issues: list[ValidationIssue] = []
    for locale in locales:
        pairs = [
            (text, quest.quest_id)
            for quest in quests
            for text in _stage_descriptions(quest, locale)
        ]
        for text, quest_ids in _group(pairs).items():
            if len(quest_ids) > 1:
                issues.append(
                    ValidationIssue(
                        message=f'duplicate QuestStageDescription "{text}" ({locale}) '
                        f"in quests: {', '.join(quest_ids)}"
                    )
                )
    return issues


def _completed_references(conditions: list[Payload]) -> list[str]:
    return [c.quest_id for c in conditions if isinstance(c, QuestCompleted) and c.quest_id]


def check_quest_references(quests: Sequence[Quest]) -> list[ValidationIssue]:
    """QuestCompleted conditions must name a loaded quest.

    Both node-level and option-level conditions are checked; issues are
    attached to the referencing quest and node.
    """
    known = {quest.quest_id for quest in quests}
    issues: list[ValidationIssue] = []

    for quest in quests:
        for node in quest.quest_nodes:
            referenced = _completed_references(node.conditions)
            for option in node.declared_options():
                referenced.extend(_completed_references(option.conditions))
            for target in referenced:
                if target not in known:
                    issues.append(
                        ValidationIssue(
                            message=f'QuestCompleted references non-existent quest "{target}"',
                            node_id=node.node_id,
                            quest_id=quest.quest_id,
                        )
                    )
    return issues


def validate_repository(
    quests: Sequence[Quest], *, locales: Sequence[str] = SUPPORTED_LOCALES
) -> list[ValidationIssue]:
    """Run every cross-document rule over the loaded quests.

    Args:
        quests: Successfully loaded quests in load order.
        locales: Locales checked by the uniqueness rules.

    Returns:
        Issues in rule order. Only QuestCompleted issues carry a QuestID.
    """
    issues = [
        *check_unique_quest_ids(quests),
        *check_unique_display_names(quests, locales),
        *check_unique_stage_descriptions(quests, locales),
        *check_quest_references(quests),
    ]
    log.debug("repository_validated", quests=len(quests), issues=len(issues))
    return issues
