"""Condition and action payloads.

Quest documents store conditions and actions as discriminator-keyed
values (``{"ResourceAvailability": {"Resource": "Coal"}}``, ``"CompleteQuest"``).
This module turns them into a closed set of typed payloads. Anything not
recognised becomes an opaque payload that keeps the raw value and is never
reference-checked, so newer document shapes load without complaint.

Every payload serializes back to exactly the raw value it was parsed from.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from questlint.models.references import EntityKind

TERMINAL_ACTIONS = frozenset({"CompleteQuest", "FailQuest", "DeclineQuest"})

JOURNAL_ENTRY = "JournalEntry"
QUEST_STAGE_DESCRIPTION = "QuestStageDescription"
QUEST_COMPLETED = "QuestCompleted"

# (kind, id, context) - context names the payload field for issue messages
Reference = tuple[EntityKind, str, str]


class Payload(BaseModel):
    """Base for all condition and action payloads."""

    model_config = ConfigDict(frozen=True)

    discriminator: ClassVar[str] = ""

    raw: Any = None

    def references(self) -> Iterator[Reference]:
        """Yield the catalog references embedded in this payload."""
        return iter(())


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _types(entries: Any) -> list[str]:
    """Collect ``Type`` IDs from a list of ``{Type: ..., Amount: ...}`` mappings."""
    if not isinstance(entries, list):
        return []
    found = []
    for entry in entries:
        if isinstance(entry, dict) and (item_type := _text(entry.get("Type"))):
            found.append(item_type)
    return found


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


class ResourceAvailability(Payload):
    discriminator: ClassVar[str] = "ResourceAvailability"

    resource: str | None = None

    def references(self) -> Iterator[Reference]:
        if self.resource:
            yield EntityKind.RESOURCE, self.resource, "ResourceAvailability"


class ItemUsedOnObject(Payload):
    discriminator: ClassVar[str] = "ItemUsedOnObject"

    item: str | None = None
    object_id: str | None = None

    def references(self) -> Iterator[Reference]:
        if self.item:
            yield EntityKind.ITEM, self.item, "ItemUsedOnObject"
        if self.object_id:
            yield EntityKind.OBJECT, self.object_id, "ItemUsedOnObject"


class ItemUsedOnNPC(Payload):
    discriminator: ClassVar[str] = "ItemUsedOnNPC"

    item: str | None = None
    npc: str | None = None

    def references(self) -> Iterator[Reference]:
        if self.item:
            yield EntityKind.ITEM, self.item, "ItemUsedOnNPC"
        if self.npc:
            yield EntityKind.CHARACTER, self.npc, "ItemUsedOnNPC"


class FactionStanding(Payload):
    """Faction standing; used both as a condition and as an action."""

    discriminator: ClassVar[str] = "FactionStanding"

    faction: str | None = None

    def references(self) -> Iterator[Reference]:
        if self.faction:
            yield EntityKind.FACTION, self.faction, "FactionStanding"


class Inventory(Payload):
    discriminator: ClassVar[str] = "Inventory"

    item_types: tuple[str, ...] = ()

    def references(self) -> Iterator[Reference]:
        for item_type in self.item_types:
            yield EntityKind.ITEM, item_type, "Inventory"


class ItemLost(Payload):
    discriminator: ClassVar[str] = "ItemLost"

    item: str | None = None

    def references(self) -> Iterator[Reference]:
        if self.item:
            yield EntityKind.ITEM, self.item, "ItemLost"


class QuestCompleted(Payload):
    """Requires another quest to be completed; resolved across documents."""

    discriminator: ClassVar[str] = QUEST_COMPLETED

    quest_id: str | None = None


class OpaqueCondition(Payload):
    """A condition shape this version does not know about."""


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class TerminalAction(Payload):
    """``CompleteQuest``, ``FailQuest`` or ``DeclineQuest``: ends a flow branch."""

    name: str


class JournalEntryAction(Payload):
    discriminator: ClassVar[str] = JOURNAL_ENTRY


class QuestStageDescriptionAction(Payload):
    discriminator: ClassVar[str] = QUEST_STAGE_DESCRIPTION

    texts: dict[str, str] = {}


class ItemsGained(Payload):
    discriminator: ClassVar[str] = "ItemsGained"

    item_types: tuple[str, ...] = ()

    def references(self) -> Iterator[Reference]:
        for item_type in self.item_types:
            yield EntityKind.ITEM, item_type, "ItemsGained"


class ItemsLost(Payload):
    discriminator: ClassVar[str] = "ItemsLost"

    item_types: tuple[str, ...] = ()

    def references(self) -> Iterator[Reference]:
        for item_type in self.item_types:
            yield EntityKind.ITEM, item_type, "ItemsLost"


class OpaqueAction(Payload):
    """An action shape this version does not know about."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

# Each parser receives the value under the discriminator key and the raw
# payload; it returns None when the value does not have the expected shape.
_Parser = Callable[[Any, Any], Payload | None]


def _mapping_parser(build: Callable[[dict[str, Any], Any], Payload]) -> _Parser:
    def parse(value: Any, raw: Any) -> Payload | None:
        if not isinstance(value, dict):
            return None
        return build(value, raw)

    return parse


def _list_parser(build: Callable[[tuple[str, ...], Any], Payload]) -> _Parser:
    def parse(value: Any, raw: Any) -> Payload | None:
        if not isinstance(value, list):
            return None
        return build(tuple(_types(value)), raw)

    return parse


def _string_parser(build: Callable[[str, Any], Payload]) -> _Parser:
    def parse(value: Any, raw: Any) -> Payload | None:
        if not isinstance(value, str):
            return None
        return build(value, raw)

    return parse


_CONDITION_PARSERS: dict[str, _Parser] = {
    "ResourceAvailability": _mapping_parser(
        lambda v, raw: ResourceAvailability(raw=raw, resource=_text(v.get("Resource")))
    ),
    "ItemUsedOnObject": _mapping_parser(
        lambda v, raw: ItemUsedOnObject(
            raw=raw, item=_text(v.get("Item")), object_id=_text(v.get("Object"))
        )
    ),
    "ItemUsedOnNPC": _mapping_parser(
        lambda v, raw: ItemUsedOnNPC(raw=raw, item=_text(v.get("Item")), npc=_text(v.get("NPC")))
    ),
    "FactionStanding": _mapping_parser(
        lambda v, raw: FactionStanding(raw=raw, faction=_text(v.get("Faction")))
    ),
    "Inventory": _list_parser(lambda types, raw: Inventory(raw=raw, item_types=types)),
    "ItemLost": _string_parser(lambda v, raw: ItemLost(raw=raw, item=_text(v))),
    QUEST_COMPLETED: _string_parser(lambda v, raw: QuestCompleted(raw=raw, quest_id=_text(v))),
}

_ACTION_PARSERS: dict[str, _Parser] = {
    "ItemsGained": _list_parser(lambda types, raw: ItemsGained(raw=raw, item_types=types)),
    "ItemsLost": _list_parser(lambda types, raw: ItemsLost(raw=raw, item_types=types)),
    "FactionStanding": _mapping_parser(
        lambda v, raw: FactionStanding(raw=raw, faction=_text(v.get("Faction")))
    ),
    JOURNAL_ENTRY: lambda _v, raw: JournalEntryAction(raw=raw),
    QUEST_STAGE_DESCRIPTION: _mapping_parser(
        lambda v, raw: QuestStageDescriptionAction(
            raw=raw, texts={k: t for k, t in v.items() if isinstance(k, str) and _text(t)}
        )
    ),
}
for _name in sorted(TERMINAL_ACTIONS):
    _ACTION_PARSERS[_name] = lambda _v, raw, name=_name: TerminalAction(raw=raw, name=name)


def _parse_keyed(raw: Any, parsers: dict[str, _Parser]) -> Payload | None:
    if not isinstance(raw, dict):
        return None
    for key, value in raw.items():
        parser = parsers.get(key)
        if parser is None:
            continue
        payload = parser(value, raw)
        if payload is not None:
            return payload
    return None


def parse_condition(raw: Any) -> Payload:
    """Parse a raw condition into a typed payload (or ``OpaqueCondition``)."""
    if isinstance(raw, Payload):
        return raw
    return _parse_keyed(raw, _CONDITION_PARSERS) or OpaqueCondition(raw=raw)


def parse_action(raw: Any) -> Payload:
    """Parse a raw action into a typed payload (or ``OpaqueAction``).

    Actions come either as a bare string tag (``"CompleteQuest"``) or as a
    single-key mapping carrying a payload (``{"ItemsGained": [...]}``).
    """
    if isinstance(raw, Payload):
        return raw
    if isinstance(raw, str):
        if raw in TERMINAL_ACTIONS:
            return TerminalAction(raw=raw, name=raw)
        if raw == JOURNAL_ENTRY:
            return JournalEntryAction(raw=raw)
        return OpaqueAction(raw=raw)
    return _parse_keyed(raw, _ACTION_PARSERS) or OpaqueAction(raw=raw)


def _dump_raw(payload: Payload) -> Any:
    return payload.raw


Condition = Annotated[Payload, BeforeValidator(parse_condition), PlainSerializer(_dump_raw)]
Action = Annotated[Payload, BeforeValidator(parse_action), PlainSerializer(_dump_raw)]
