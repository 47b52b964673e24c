"""Pydantic models for quest documents and reference data.

Quest documents are authored by designers and loaded from YAML (or posted
as JSON). The models map the document's PascalCase field names onto
typed attributes, split the node record into one variant per ``NodeType``,
and parse condition/action payloads into a closed set of kinds.
"""

from questlint.models.payloads import (
    TERMINAL_ACTIONS,
    Action,
    Condition,
    FactionStanding,
    Inventory,
    ItemLost,
    ItemsGained,
    ItemsLost,
    ItemUsedOnNPC,
    ItemUsedOnObject,
    JournalEntryAction,
    OpaqueAction,
    OpaqueCondition,
    Payload,
    QuestCompleted,
    QuestStageDescriptionAction,
    ResourceAvailability,
    TerminalAction,
    parse_action,
    parse_condition,
)
from questlint.models.quest import (
    QUEST_ID_PATTERN,
    SUPPORTED_LOCALES,
    ActionsNode,
    BaseNode,
    ConditionBranchNode,
    DecisionNode,
    DialogMessage,
    DialogNode,
    DialogOption,
    EntryPointNode,
    I18nString,
    OpaqueNode,
    Quest,
    QuestNode,
    QuestProgressNode,
)
from questlint.models.references import CATALOG_FILES, EntityKind, ReferenceCatalog

__all__ = [
    "CATALOG_FILES",
    "QUEST_ID_PATTERN",
    "SUPPORTED_LOCALES",
    "TERMINAL_ACTIONS",
    "Action",
    "ActionsNode",
    "BaseNode",
    "Condition",
    "ConditionBranchNode",
    "DecisionNode",
    "DialogMessage",
    "DialogNode",
    "DialogOption",
    "EntityKind",
    "EntryPointNode",
    "FactionStanding",
    "I18nString",
    "Inventory",
    "ItemLost",
    "ItemUsedOnNPC",
    "ItemUsedOnObject",
    "ItemsGained",
    "ItemsLost",
    "JournalEntryAction",
    "OpaqueAction",
    "OpaqueCondition",
    "OpaqueNode",
    "Payload",
    "Quest",
    "QuestCompleted",
    "QuestNode",
    "QuestProgressNode",
    "QuestStageDescriptionAction",
    "ReferenceCatalog",
    "ResourceAvailability",
    "TerminalAction",
    "parse_action",
    "parse_condition",
]
