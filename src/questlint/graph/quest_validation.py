"""Single-document quest validation.

Structural, semantic and reference checks for one quest. Every check is
a pure function returning the issues it found; ``validate_quest`` runs all
of them in a fixed order and never stops early, so a document gets its
complete list of problems in one pass.

Check order:
1. Unique NodeIDs
2. Edge validity per declared edge field (target exists, no self edge, no duplicate)
3. Incoming edges for every non-EntryPoint node (declared fields)
4. At least one EntryPoint
5. Terminal semantics of Actions nodes
6. Decision shape
7. ConditionBranch shape, then branch/option edges on flat-edge nodes
8. Acyclicity
9. Entity references against the reference catalog
10. Journal bookkeeping at flow start and flow end
11. Unreferenced nodes (legal edge graph)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from questlint.graph.algorithms import (
    build_adjacency,
    build_node_lookup,
    build_predecessors,
    collect_backward,
    declared_targets,
    detect_cycle,
    find_first_forward,
    outgoing_edges,
)
from questlint.graph.validation_types import (
    ValidationIssue,
    ValidationResult,
    node_issue,
    quest_issue,
)
from questlint.models.quest import (
    ActionsNode,
    BaseNode,
    ConditionBranchNode,
    DecisionNode,
    DialogNode,
    EntryPointNode,
    QuestProgressNode,
)
from questlint.models.references import EntityKind, ReferenceCatalog
from questlint.observability.logging import get_logger

if TYPE_CHECKING:
    from questlint.models.payloads import Payload
    from questlint.models.quest import Quest

log = get_logger(__name__)

DEFAULT_PLAYER_SPEAKER = "Player"

_KIND_LABELS = {
    EntityKind.CHARACTER: "NPC",
    EntityKind.ITEM: "item",
    EntityKind.FACTION: "faction",
    EntityKind.RESOURCE: "resource",
    EntityKind.OBJECT: "object",
}

__all__ = [
    "DEFAULT_PLAYER_SPEAKER",
    "check_acyclic",
    "check_condition_branches",
    "check_decisions",
    "check_edges",
    "check_entry_points",
    "check_flat_edge_nodes",
    "check_incoming_edges",
    "check_journal_at_flow_end",
    "check_journal_at_flow_start",
    "check_references",
    "check_terminal_nodes",
    "check_unique_node_ids",
    "check_unreferenced_nodes",
    "validate_quest",
]


def _is_actions(node: BaseNode) -> bool:
    return isinstance(node, ActionsNode)


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def check_unique_node_ids(quest: Quest) -> list[ValidationIssue]:
    """One issue per repeated occurrence of a NodeID."""
    issues: list[ValidationIssue] = []
    seen: set[int] = set()
    for node in quest.quest_nodes:
        if node.node_id in seen:
            issues.append(node_issue(node.node_id, "duplicate NodeID"))
        seen.add(node.node_id)
    return issues


def check_edges(quest: Quest) -> list[ValidationIssue]:
    """Validate every declared edge field of every node independently.

    Targets must exist and must not be the node itself. A target may
    appear only once per field; the same target in two different
    decision options is fine.
    """
    issues: list[ValidationIssue] = []
    node_ids = quest.node_ids()

    for node in quest.quest_nodes:
        for label, targets in node.declared_edge_fields():
            seen: set[int] = set()
            for target in targets:
                if target not in node_ids:
                    issues.append(
                        node_issue(node.node_id, f"{label} references non-existent NodeID {target}")
                    )
                if target == node.node_id:
                    issues.append(node_issue(node.node_id, f"node references itself in {label}"))
                if target in seen:
                    issues.append(
                        node_issue(node.node_id, f"duplicate edge to NodeID {target} in {label}")
                    )
                seen.add(target)

    return issues


def check_incoming_edges(quest: Quest) -> list[ValidationIssue]:
    """Every non-EntryPoint node needs an inbound edge from some declared field."""
    has_incoming: set[int] = set()
    for node in quest.quest_nodes:
        has_incoming.update(declared_targets(node))

    return [
        node_issue(node.node_id, "non-EntryPoint node has no incoming connections")
        for node in quest.quest_nodes
        if not isinstance(node, EntryPointNode) and node.node_id not in has_incoming
    ]


def check_entry_points(quest: Quest) -> list[ValidationIssue]:
    if quest.entry_points():
        return []
    return [quest_issue("quest must have at least one EntryPoint node")]


def check_terminal_nodes(quest: Quest) -> list[ValidationIssue]:
    """Terminal semantics of Actions nodes.

    A terminal node (one carrying CompleteQuest/FailQuest/DeclineQuest)
    ends its flow and must not continue; a non-terminal Actions node must
    continue somewhere; no node may carry two terminal actions.
    """
    issues: list[ValidationIssue] = []

    for node in quest.quest_nodes:
        if not isinstance(node, ActionsNode):
            continue

        terminal_count = len(node.terminal_actions)
        has_outgoing = bool(outgoing_edges(node))

        if terminal_count > 0 and has_outgoing:
            issues.append(
                node_issue(node.node_id, "terminal Actions node must not have outgoing edges")
            )
        if terminal_count == 0 and not has_outgoing:
            issues.append(
                node_issue(
                    node.node_id,
                    "non-terminal Actions node must have outgoing edges "
                    "(quest flow ends with unspecified behaviour)",
                )
            )
        if terminal_count > 1:
            issues.append(node_issue(node.node_id, "Actions node has more than one terminal action"))

    return issues


def check_decisions(quest: Quest) -> list[ValidationIssue]:
    """Decision edges belong to the options; every option must lead somewhere."""
    issues: list[ValidationIssue] = []

    for node in quest.quest_nodes:
        if not isinstance(node, DecisionNode):
            continue
        if node.misplaced_next_nodes:
            issues.append(
                node_issue(
                    node.node_id,
                    f"{node.node_type} must not have top-level NextNodes; "
                    "use NextNodes in each option instead",
                )
            )
        for i, option in enumerate(node.options, start=1):
            if not option.next_nodes:
                issues.append(node_issue(node.node_id, f"option {i} must have NextNodes"))

    return issues


def check_condition_branches(quest: Quest) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    for node in quest.quest_nodes:
        if not isinstance(node, ConditionBranchNode):
            continue
        if node.misplaced_next_nodes:
            issues.append(
                node_issue(
                    node.node_id,
                    "ConditionBranch must not have top-level NextNodes; "
                    "use NextNodesIfTrue and NextNodesIfFalse instead",
                )
            )
        if not node.conditions:
            issues.append(node_issue(node.node_id, "ConditionBranch must have at least one condition"))
        if not node.next_nodes_if_true and not node.next_nodes_if_false:
            issues.append(
                node_issue(
                    node.node_id,
                    "ConditionBranch must have at least one of NextNodesIfTrue or NextNodesIfFalse",
                )
            )

    return issues


def check_flat_edge_nodes(quest: Quest) -> list[ValidationIssue]:
    """Flat-edge nodes continue through NextNodes only.

    One issue per branch or option edge field such a node declares.
    """
    issues: list[ValidationIssue] = []

    for node in quest.quest_nodes:
        if not isinstance(node, (EntryPointNode, ActionsNode, DialogNode, QuestProgressNode)):
            continue
        for label, _targets in node.misplaced_edge_fields():
            issues.append(
                node_issue(
                    node.node_id,
                    f"{node.node_type} must not have {label}; use NextNodes instead",
                )
            )

    return issues


def check_acyclic(quest: Quest) -> list[ValidationIssue]:
    """Report a single quest-level issue if the edge graph has any cycle."""
    adjacency = build_adjacency(quest)
    if detect_cycle(adjacency, (node.node_id for node in quest.quest_nodes)):
        return [quest_issue("quest contains a cycle (loops are not allowed)")]
    return []


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


def _payload_issues(
    node_id: int, payloads: list[Payload], catalog: ReferenceCatalog
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for payload in payloads:
        for kind, entity_id, context in payload.references():
            if not catalog.lookup(kind, entity_id):
                issues.append(
                    node_issue(node_id, f"unknown {_KIND_LABELS[kind]} in {context}: {entity_id}")
                )
    return issues


def _speaker_issues(
    node: BaseNode, catalog: ReferenceCatalog, player_speaker: str
) -> list[ValidationIssue]:
    if not isinstance(node, (DialogNode, DecisionNode)):
        return []

    issues: list[ValidationIssue] = []
    partner = node.conversation_partner
    if partner and not catalog.lookup(EntityKind.CHARACTER, partner):
        issues.append(node_issue(node.node_id, f"unknown conversation partner: {partner}"))

    speaker = node.speaker
    if speaker and speaker != player_speaker and not catalog.lookup(EntityKind.CHARACTER, speaker):
        issues.append(node_issue(node.node_id, f"unknown speaker: {speaker}"))

    if isinstance(node, DialogNode):
        for message in node.messages:
            if message.speaker == player_speaker:
                continue
            if not catalog.lookup(EntityKind.CHARACTER, message.speaker):
                issues.append(
                    node_issue(node.node_id, f"unknown speaker in message: {message.speaker}")
                )
    return issues


def check_references(
    quest: Quest,
    catalog: ReferenceCatalog | None = None,
    *,
    player_speaker: str = DEFAULT_PLAYER_SPEAKER,
) -> list[ValidationIssue]:
    """Resolve every embedded entity ID against the reference catalog.

    Covers conversation partners, speakers, message speakers, node and
    option conditions, and actions. Opaque payloads are not inspected.
    """
    catalog = catalog or ReferenceCatalog()
    issues: list[ValidationIssue] = []

    for node in quest.quest_nodes:
        issues.extend(_speaker_issues(node, catalog, player_speaker))
        issues.extend(_payload_issues(node.node_id, node.conditions, catalog))
        for option in node.declared_options():
            issues.extend(_payload_issues(node.node_id, option.conditions, catalog))
        issues.extend(_payload_issues(node.node_id, node.actions, catalog))

    return issues


# ---------------------------------------------------------------------------
# Flow bookkeeping
# ---------------------------------------------------------------------------


def check_journal_at_flow_start(quest: Quest) -> list[ValidationIssue]:
    """The first Actions node after each EntryPoint opens the journal.

    It must carry both a JournalEntry and a QuestStageDescription action.
    """
    issues: list[ValidationIssue] = []
    adjacency = build_adjacency(quest)
    lookup = build_node_lookup(quest)

    for entry in quest.entry_points():
        first = find_first_forward(outgoing_edges(entry), adjacency, lookup, _is_actions)
        if not isinstance(first, ActionsNode):
            issues.append(node_issue(entry.node_id, "EntryPoint flow has no Actions node"))
            continue
        if not first.has_journal_entry:
            issues.append(
                node_issue(first.node_id, "first Actions node in flow must have JournalEntry action")
            )
        if not first.has_stage_description:
            issues.append(
                node_issue(
                    first.node_id,
                    "first Actions node in flow must have QuestStageDescription action",
                )
            )

    return issues


def check_journal_at_flow_end(quest: Quest) -> list[ValidationIssue]:
    """Each terminal chain must write a journal entry.

    The chain is the terminal node plus the Actions nodes reachable
    backwards from it through Actions nodes only.
    """
    issues: list[ValidationIssue] = []
    adjacency = build_adjacency(quest)
    predecessors = build_predecessors(adjacency)
    lookup = build_node_lookup(quest)

    for node in quest.quest_nodes:
        if not node.is_terminal:
            continue
        chain = collect_backward(node, predecessors, lookup, _is_actions)
        if not any(isinstance(n, ActionsNode) and n.has_journal_entry for n in chain):
            issues.append(
                node_issue(node.node_id, "terminal Actions chain must contain a JournalEntry action")
            )

    return issues


def check_unreferenced_nodes(quest: Quest) -> list[ValidationIssue]:
    """Every non-EntryPoint node must be the target of some edge in the graph.

    Unlike ``check_incoming_edges`` this uses the legal edge graph only, so
    a node reached solely through a misplaced field is reported here.
    """
    referenced: set[int] = set()
    for targets in build_adjacency(quest).values():
        referenced.update(targets)

    return [
        node_issue(node.node_id, "NodeID is never referenced by any other node")
        for node in quest.quest_nodes
        if not isinstance(node, EntryPointNode) and node.node_id not in referenced
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def validate_quest(
    quest: Quest,
    catalog: ReferenceCatalog | None = None,
    *,
    journal_checks: bool = True,
    player_speaker: str = DEFAULT_PLAYER_SPEAKER,
) -> ValidationResult:
    """Run every single-document check against one quest.

    Args:
        quest: The quest to validate. Not modified.
        catalog: Known entity IDs. None means an empty catalog.
        journal_checks: Run the flow-start/flow-end journal checks.
        player_speaker: Speaker value that denotes the player.

    Returns:
        ValidationResult with issues in check order.
    """
    result = ValidationResult()
    result.extend(check_unique_node_ids(quest))
    result.extend(check_edges(quest))
    result.extend(check_incoming_edges(quest))
    result.extend(check_entry_points(quest))
    result.extend(check_terminal_nodes(quest))
    result.extend(check_decisions(quest))
    result.extend(check_condition_branches(quest))
    result.extend(check_flat_edge_nodes(quest))
    result.extend(check_acyclic(quest))
    result.extend(check_references(quest, catalog, player_speaker=player_speaker))
    if journal_checks:
        result.extend(check_journal_at_flow_start(quest))
        result.extend(check_journal_at_flow_end(quest))
    result.extend(check_unreferenced_nodes(quest))

    log.debug("quest_validated", quest_id=quest.quest_id, issues=len(result.issues))
    return result
