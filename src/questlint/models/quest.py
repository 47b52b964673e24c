"""Quest document models.

A quest is an ordered list of nodes forming a directed flow graph. Nodes
come in a set of variants selected by ``NodeType``; each variant
declares only the edge fields that are legal for it:

- EntryPoint, Actions, Dialog, QuestProgress: flat ``NextNodes``
- ConditionBranch: ``NextNodesIfTrue`` / ``NextNodesIfFalse``
- Decision / PlayerDecisionDialog: ``NextNodes`` inside each option
- any other NodeType: an opaque node whose every edge field counts

Edge fields that belong to another variant (a flat ``NextNodes`` on a
Decision, ``NextNodesIfTrue`` or ``Options`` on an Actions node, ...) are
kept as misplaced fields so validation can report them, but they are never
part of the variant's edges.

Field names follow the document (PascalCase) through aliases; models
accept either name and dump back by alias. Unknown keys are preserved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, PrivateAttr, Tag

from questlint.models.payloads import (
    Action,
    Condition,
    JournalEntryAction,
    Payload,
    QuestStageDescriptionAction,
    TerminalAction,
)

QUEST_ID_PATTERN = r"^[A-Z][A-Za-z0-9.\-_:]*$"
MAX_QUEST_ID_LENGTH = 100

SUPPORTED_LOCALES = ("en-US", "de-DE")

OPAQUE_NODE_TAG = "Opaque"

# (field label, edge targets)
EdgeField = tuple[str, list[int]]


class DocumentModel(BaseModel):
    """Common configuration for document models."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )


class I18nString(DocumentModel):
    """A localized string; ``en-US`` and ``de-DE`` are the supported locales."""

    en_us: str = Field(default="", alias="en-US")
    de_de: str = Field(default="", alias="de-DE")

    def get(self, locale: str) -> str:
        """Return the text for a locale, or an empty string."""
        if locale == "en-US":
            return self.en_us
        if locale == "de-DE":
            return self.de_de
        value = (self.model_extra or {}).get(locale)
        return value if isinstance(value, str) else ""


class DialogMessage(DocumentModel):
    speaker: str = Field(default="", alias="Speaker")
    text: I18nString = Field(default_factory=I18nString, alias="Text")


class DialogOption(DocumentModel):
    """A player-facing choice; each option lists its own continuations."""

    text: I18nString = Field(default_factory=I18nString, alias="Text")
    conditions: list[Condition] = Field(default_factory=list, alias="Conditions")
    next_nodes: list[int] = Field(default_factory=list, alias="NextNodes")


class BaseNode(DocumentModel):
    """Fields shared by every node variant."""

    node_id: int = Field(alias="NodeID")
    conditions: list[Condition] = Field(default_factory=list, alias="Conditions")

    def edge_fields(self) -> list[EdgeField]:
        """Legal edge fields of this variant, in document order."""
        raise NotImplementedError

    def misplaced_options(self) -> list[DialogOption]:
        return []

    def declared_options(self) -> list[DialogOption]:
        """Options the document lists for this node, legal or not."""
        return [*self.options, *self.misplaced_options()]

    def misplaced_edge_fields(self) -> list[EdgeField]:
        """Edge fields the document declares although the variant forbids them."""
        return []

    def declared_edge_fields(self) -> list[EdgeField]:
        """Every edge field the document declares, legal or not."""
        return [*self.edge_fields(), *self.misplaced_edge_fields()]

    @property
    def actions(self) -> list[Payload]:
        return []

    @property
    def options(self) -> list[DialogOption]:
        return []

    def has_action(self, payload_type: type[Payload]) -> bool:
        return any(isinstance(action, payload_type) for action in self.actions)

    @property
    def terminal_actions(self) -> list[TerminalAction]:
        return [a for a in self.actions if isinstance(a, TerminalAction)]

    @property
    def is_terminal(self) -> bool:
        """True for an Actions node carrying a terminal action."""
        return False


def _option_edge_fields(options: list[DialogOption]) -> list[EdgeField]:
    return [(f"option {i} NextNodes", o.next_nodes) for i, o in enumerate(options, start=1)]


class _FlatEdgesNode(BaseNode):
    next_nodes: list[int] = Field(default_factory=list, alias="NextNodes")
    # Branch and option edges some editors leave on flat-edge nodes
    misplaced_if_true: list[int] | None = Field(default=None, alias="NextNodesIfTrue")
    misplaced_if_false: list[int] | None = Field(default=None, alias="NextNodesIfFalse")
    misplaced_option_list: list[DialogOption] | None = Field(default=None, alias="Options")

    def edge_fields(self) -> list[EdgeField]:
        return [("NextNodes", self.next_nodes)]

    def misplaced_options(self) -> list[DialogOption]:
        return self.misplaced_option_list or []

    def misplaced_edge_fields(self) -> list[EdgeField]:
        fields: list[EdgeField] = []
        if self.misplaced_if_true:
            fields.append(("NextNodesIfTrue", self.misplaced_if_true))
        if self.misplaced_if_false:
            fields.append(("NextNodesIfFalse", self.misplaced_if_false))
        fields.extend(
            (label, targets)
            for label, targets in _option_edge_fields(self.misplaced_options())
            if targets
        )
        return fields


class EntryPointNode(_FlatEdgesNode):
    node_type: Literal["EntryPoint"] = Field(default="EntryPoint", alias="NodeType")


class ActionsNode(_FlatEdgesNode):
    node_type: Literal["Actions"] = Field(default="Actions", alias="NodeType")
    action_list: list[Action] = Field(default_factory=list, alias="Actions")

    @property
    def actions(self) -> list[Payload]:
        return self.action_list

    @property
    def is_terminal(self) -> bool:
        return bool(self.terminal_actions)

    @property
    def has_journal_entry(self) -> bool:
        return self.has_action(JournalEntryAction)

    @property
    def has_stage_description(self) -> bool:
        return self.has_action(QuestStageDescriptionAction)


class DialogNode(_FlatEdgesNode):
    node_type: Literal["Dialog"] = Field(default="Dialog", alias="NodeType")
    conversation_partner: str = Field(default="", alias="ConversationPartner")
    speaker: str = Field(default="", alias="Speaker")
    text: I18nString | None = Field(default=None, alias="Text")
    messages: list[DialogMessage] = Field(default_factory=list, alias="Messages")


class QuestProgressNode(_FlatEdgesNode):
    node_type: Literal["QuestProgress"] = Field(default="QuestProgress", alias="NodeType")
    quest_progressors: list[str] = Field(default_factory=list, alias="QuestProgressors")


class DecisionNode(BaseNode):
    """A player decision: edges live on the options, never on the node."""

    node_type: Literal["Decision", "PlayerDecisionDialog"] = Field(
        default="Decision", alias="NodeType"
    )
    conversation_partner: str = Field(default="", alias="ConversationPartner")
    speaker: str = Field(default="", alias="Speaker")
    text: I18nString | None = Field(default=None, alias="Text")
    option_list: list[DialogOption] = Field(default_factory=list, alias="Options")
    misplaced_next_nodes: list[int] = Field(default_factory=list, alias="NextNodes")

    @property
    def options(self) -> list[DialogOption]:
        return self.option_list

    def edge_fields(self) -> list[EdgeField]:
        return _option_edge_fields(self.option_list)

    def misplaced_edge_fields(self) -> list[EdgeField]:
        return [("NextNodes", self.misplaced_next_nodes)] if self.misplaced_next_nodes else []


class ConditionBranchNode(BaseNode):
    """Evaluates its conditions and continues on the true or false list."""

    node_type: Literal["ConditionBranch"] = Field(default="ConditionBranch", alias="NodeType")
    conditions_required: str | None = Field(default=None, alias="ConditionsRequired")
    next_nodes_if_true: list[int] = Field(default_factory=list, alias="NextNodesIfTrue")
    next_nodes_if_false: list[int] = Field(default_factory=list, alias="NextNodesIfFalse")
    misplaced_next_nodes: list[int] = Field(default_factory=list, alias="NextNodes")

    def edge_fields(self) -> list[EdgeField]:
        return [
            ("NextNodesIfTrue", self.next_nodes_if_true),
            ("NextNodesIfFalse", self.next_nodes_if_false),
        ]

    def misplaced_edge_fields(self) -> list[EdgeField]:
        return [("NextNodes", self.misplaced_next_nodes)] if self.misplaced_next_nodes else []


class OpaqueNode(BaseNode):
    """A node of a type this linter does not model (``QuestAvailable``, ...).

    Nothing about its shape is known, so every edge field it declares is a
    legal edge and it takes part in the graph checks like any other node.
    """

    node_type: str = Field(alias="NodeType")
    next_nodes: list[int] = Field(default_factory=list, alias="NextNodes")
    next_nodes_if_true: list[int] = Field(default_factory=list, alias="NextNodesIfTrue")
    next_nodes_if_false: list[int] = Field(default_factory=list, alias="NextNodesIfFalse")
    option_list: list[DialogOption] = Field(default_factory=list, alias="Options")

    @property
    def options(self) -> list[DialogOption]:
        return self.option_list

    def edge_fields(self) -> list[EdgeField]:
        fields: list[EdgeField] = [("NextNodes", self.next_nodes)]
        if self.next_nodes_if_true:
            fields.append(("NextNodesIfTrue", self.next_nodes_if_true))
        if self.next_nodes_if_false:
            fields.append(("NextNodesIfFalse", self.next_nodes_if_false))
        fields.extend(_option_edge_fields(self.option_list))
        return fields


_NODE_TAGS = {
    "EntryPoint": "EntryPoint",
    "Actions": "Actions",
    "Dialog": "Dialog",
    "Decision": "Decision",
    "PlayerDecisionDialog": "Decision",
    "ConditionBranch": "ConditionBranch",
    "QuestProgress": "QuestProgress",
}


def _node_tag(value: Any) -> str | None:
    """Pick the node variant; a missing or non-string NodeType has none."""
    if isinstance(value, dict):
        node_type = value.get("NodeType", value.get("node_type"))
    else:
        node_type = getattr(value, "node_type", None)
    if not isinstance(node_type, str):
        return None
    return _NODE_TAGS.get(node_type, OPAQUE_NODE_TAG)


QuestNode = Annotated[
    Annotated[EntryPointNode, Tag("EntryPoint")]
    | Annotated[ActionsNode, Tag("Actions")]
    | Annotated[DialogNode, Tag("Dialog")]
    | Annotated[DecisionNode, Tag("Decision")]
    | Annotated[ConditionBranchNode, Tag("ConditionBranch")]
    | Annotated[QuestProgressNode, Tag("QuestProgress")]
    | Annotated[OpaqueNode, Tag(OPAQUE_NODE_TAG)],
    Discriminator(_node_tag),
]


class Quest(DocumentModel):
    """A complete quest document."""

    quest_id: str = Field(
        alias="QuestID", pattern=QUEST_ID_PATTERN, max_length=MAX_QUEST_ID_LENGTH
    )
    display_name: I18nString = Field(default_factory=I18nString, alias="DisplayName")
    quest_type_version: int | None = Field(default=None, alias="QuestTypeVersion")
    quest_version: int | None = Field(default=None, alias="QuestVersion")
    quest_type: str | None = Field(default=None, alias="QuestType")
    repeatable: str | None = Field(default=None, alias="Repeatable")
    quest_nodes: list[QuestNode] = Field(default_factory=list, alias="QuestNodes")

    _source: Path | None = PrivateAttr(default=None)

    @property
    def source(self) -> Path | None:
        """File the quest was loaded from, if any."""
        return self._source

    def with_source(self, path: Path) -> Quest:
        self._source = path
        return self

    def node_ids(self) -> set[int]:
        return {node.node_id for node in self.quest_nodes}

    def entry_points(self) -> list[BaseNode]:
        return [n for n in self.quest_nodes if isinstance(n, EntryPointNode)]

    def to_document(self) -> dict[str, Any]:
        """Dump the quest back to its document form."""
        return self.model_dump(by_alias=True, exclude_none=True)
