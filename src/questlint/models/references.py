"""Reference catalog: the externally supplied entity ID sets.

Quest documents point at characters, items, factions, resources and world
objects by ID. The catalog only answers existence lookups; everything else
about those entities is of no interest to validation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum


class EntityKind(StrEnum):
    """Kinds of entity a quest document can reference."""

    CHARACTER = "character"
    ITEM = "item"
    FACTION = "faction"
    RESOURCE = "resource"
    OBJECT = "object"


# Catalog file name and ID key per kind, as the game data directory lays them out.
CATALOG_FILES: dict[EntityKind, tuple[str, str]] = {
    EntityKind.CHARACTER: ("npcs.yaml", "NPCID"),
    EntityKind.ITEM: ("items.yaml", "ItemID"),
    EntityKind.FACTION: ("factions.yaml", "FactionID"),
    EntityKind.RESOURCE: ("resources.yaml", "ResourceID"),
    EntityKind.OBJECT: ("objects.yaml", "ObjectID"),
}


@dataclass(frozen=True)
class ReferenceCatalog:
    """Known entity IDs, one set per kind.

    A kind with no data is simply an empty set: every reference of that
    kind is then unknown.
    """

    characters: frozenset[str] = field(default_factory=frozenset)
    items: frozenset[str] = field(default_factory=frozenset)
    factions: frozenset[str] = field(default_factory=frozenset)
    resources: frozenset[str] = field(default_factory=frozenset)
    objects: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_ids(
        cls,
        *,
        characters: Iterable[str] = (),
        items: Iterable[str] = (),
        factions: Iterable[str] = (),
        resources: Iterable[str] = (),
        objects: Iterable[str] = (),
    ) -> ReferenceCatalog:
        """Build a catalog from plain iterables of IDs."""
        return cls(
            characters=frozenset(characters),
            items=frozenset(items),
            factions=frozenset(factions),
            resources=frozenset(resources),
            objects=frozenset(objects),
        )

    def ids(self, kind: EntityKind) -> frozenset[str]:
        """Return the ID set for one entity kind."""
        return {
            EntityKind.CHARACTER: self.characters,
            EntityKind.ITEM: self.items,
            EntityKind.FACTION: self.factions,
            EntityKind.RESOURCE: self.resources,
            EntityKind.OBJECT: self.objects,
        }[kind]

    def lookup(self, kind: EntityKind, entity_id: str) -> bool:
        """True if ``entity_id`` is a known entity of the given kind."""
        return entity_id in self.ids(kind)
