"""Integration test configuration and fixtures.

Builds a small quest repository from literal YAML text, the way content
authors write it: comments, flow mappings, editor-only keys and nested
directories included.
"""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest

from questlint.config import LintConfig

if TYPE_CHECKING:
    from pathlib import Path

INTRO_QUEST = """\
# Opening quest of the main line
QuestID: Main.Intro
DisplayName:
  en-US: The Smith's Request
  de-DE: Die Bitte des Schmieds
QuestType: MainQuest
QuestTypeVersion: 1
QuestVersion: 3
Repeatable: never
QuestNodes:
  - NodeID: 0
    NodeType: EntryPoint
    NextNodes: [1]
    Position: {x: 0, y: 0}
  - NodeID: 1
    NodeType: Actions
    Actions:
      - JournalEntry:
          en-US: The smith asked for help.
          de-DE: Der Schmied bat um Hilfe.
      - QuestStageDescription:
          en-US: Talk to the smith
          de-DE: Sprich mit dem Schmied
    NextNodes: [2]
  - NodeID: 2
    NodeType: Dialog
    ConversationPartner: NPC:Smith
    Speaker: NPC:Smith
    Messages:
      - Speaker: NPC:Smith
        Text: {en-US: "Bring me coal.", de-DE: "Bring mir Kohle."}
      - Speaker: Player
        Text: {en-US: "Sure.", de-DE: "Klar."}
    NextNodes: [3]
  - NodeID: 3
    NodeType: PlayerDecisionDialog
    ConversationPartner: NPC:Smith
    Options:
      - Text: {en-US: "Here is the coal.", de-DE: "Hier ist die Kohle."}
        Conditions:
          - Inventory:
              - Type: Item:Coal
                Amount: 2
        NextNodes: [4]
      - Text: {en-US: "Not now.", de-DE: "Nicht jetzt."}
        NextNodes: [5]
  - NodeID: 4
    NodeType: Actions
    Actions:
      - ItemsLost:
          - Type: Item:Coal
            Amount: 2
      - ItemsGained:
          - Type: Item:Hammer
      - JournalEntry: {en-US: "The smith thanked me.", de-DE: "Der Schmied dankte mir."}
      - CompleteQuest
  - NodeID: 5
    NodeType: Actions
    Actions:
      - JournalEntry: {en-US: "I turned the smith down.", de-DE: "Ich lehnte ab."}
      - DeclineQuest
"""

FORGE_QUEST = """\
QuestID: Side.Forge
DisplayName:
  en-US: Cold Forge
  de-DE: Kalte Esse
QuestType: SideQuest
QuestTypeVersion: 1
QuestVersion: 1
Repeatable: never
QuestNodes:
  - NodeID: 0
    NodeType: EntryPoint
    NextNodes: [1]
  - NodeID: 1
    NodeType: Actions
    Actions:
      - JournalEntry: {en-US: "The forge is cold.", de-DE: "Die Esse ist kalt."}
      - QuestStageDescription:
          en-US: Talk to the smith
          de-DE: Frag den Schmied nach der Esse
    NextNodes: [2]
  - NodeID: 2
    NodeType: ConditionBranch
    ConditionsRequired: all
    Conditions:
      - QuestCompleted: Main.Intro
      - QuestCompleted: Main.Missing
    NextNodesIfTrue: [3]
    NextNodesIfFalse: [4]
  - NodeID: 3
    NodeType: Actions
    Actions:
      - JournalEntry: {en-US: "The forge burns again.", de-DE: "Die Esse brennt wieder."}
      - CompleteQuest
  - NodeID: 4
    NodeType: Actions
    Actions:
      - JournalEntry: {en-US: "Too early.", de-DE: "Zu frueh."}
      - FailQuest
"""

LOOP_QUEST = """\
QuestID: Side.Loop
DisplayName:
  en-US: Endless Chatter
  de-DE: Endloses Geplauder
QuestNodes:
  - NodeID: 0
    NodeType: EntryPoint
    NextNodes: [1]
  - NodeID: 1
    NodeType: Dialog
    ConversationPartner: NPC:Smith
    Speaker: NPC:Stranger
    NextNodes: [2]
  - NodeID: 2
    NodeType: Dialog
    ConversationPartner: NPC:Smith
    Speaker: NPC:Smith
    NextNodes: [1]
"""

DRAFT_QUEST = """\
QuestID: [unterminated
"""

CATALOG_FILES = {
    "npcs.yaml": """\
- NPCID: NPC:Smith
  Name: Smith
- NPCID: NPC:Guard
""",
    "items.yaml": """\
- ItemID: Item:Coal
- ItemID: Item:Hammer
""",
    "factions.yaml": "- FactionID: Faction:Guild\n",
    "resources.yaml": "",
}


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")


@pytest.fixture
def quest_repository(tmp_path: Path) -> LintConfig:
    """A repository with two clean quests, one broken quest and one unparseable draft."""
    quests = tmp_path / "quests"
    data = tmp_path / "data"

    _write(quests / "main" / "intro.yaml", INTRO_QUEST)
    _write(quests / "side" / "forge.yml", FORGE_QUEST)
    _write(quests / "broken.yaml", LOOP_QUEST)
    _write(quests / "notes" / "draft.yaml", DRAFT_QUEST)
    for name, text in CATALOG_FILES.items():
        _write(data / name, text)

    return LintConfig(quests_dir=quests, data_dir=data)
