"""Graph algorithms over quest node graphs.

Pure functions that read a quest without modifying it. The edge graph of
a quest is the union of every legal edge field across all node variants
(see ``BaseNode.edge_fields``); adjacency is keyed by NodeID.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from questlint.observability.logging import get_logger

if TYPE_CHECKING:
    from questlint.models.quest import BaseNode, Quest

log = get_logger(__name__)

Adjacency = dict[int, list[int]]
NodePredicate = Callable[["BaseNode"], bool]

_WHITE, _GRAY, _BLACK = 0, 1, 2


def outgoing_edges(node: BaseNode) -> list[int]:
    """Concatenate the node's legal edge fields in document order.

    Decision nodes contribute every option's list; misplaced fields
    (see ``BaseNode.misplaced_edge_fields``) are not edges.
    """
    edges: list[int] = []
    for _label, targets in node.edge_fields():
        edges.extend(targets)
    return edges


def declared_targets(node: BaseNode) -> list[int]:
    """Every target the document lists for a node, including misplaced fields."""
    targets: list[int] = []
    for _label, field_targets in node.declared_edge_fields():
        targets.extend(field_targets)
    return targets


def build_adjacency(quest: Quest) -> Adjacency:
    """Map each NodeID to its outgoing-edge targets.

    Nodes sharing a NodeID (an error reported elsewhere) merge their edges.
    """
    adjacency: Adjacency = {}
    for node in quest.quest_nodes:
        adjacency.setdefault(node.node_id, []).extend(outgoing_edges(node))
    return adjacency


def build_predecessors(adjacency: Adjacency) -> Adjacency:
    """Invert an adjacency map: NodeID → IDs of nodes pointing at it."""
    predecessors: Adjacency = {}
    for source, targets in adjacency.items():
        for target in targets:
            predecessors.setdefault(target, []).append(source)
    return predecessors


def build_node_lookup(quest: Quest) -> dict[int, BaseNode]:
    """Map NodeID to node; the first node wins when IDs are duplicated."""
    lookup: dict[int, BaseNode] = {}
    for node in quest.quest_nodes:
        lookup.setdefault(node.node_id, node)
    return lookup


def detect_cycle(adjacency: Adjacency, node_ids: Iterable[int]) -> bool:
    """Three-color depth-first search for a directed cycle.

    Roots are visited in the given order. Returns True on the first back
    edge (an edge into a node still on the DFS stack). The search keeps
    an explicit stack so deep graphs cannot exhaust the call stack.

    Args:
        adjacency: NodeID → successor IDs.
        node_ids: DFS roots, normally the quest's NodeIDs in document order.

    Returns:
        True if the graph contains at least one directed cycle.
    """
    color: dict[int, int] = {}

    for root in node_ids:
        if color.get(root, _WHITE) != _WHITE:
            continue
        color[root] = _GRAY
        stack = [(root, iter(adjacency.get(root, ())))]

        while stack:
            current, successors = stack[-1]
            for successor in successors:
                state = color.get(successor, _WHITE)
                if state == _GRAY:
                    log.debug("cycle_detected", source=current, target=successor)
                    return True
                if state == _WHITE:
                    color[successor] = _GRAY
                    stack.append((successor, iter(adjacency.get(successor, ()))))
                    break
            else:
                color[current] = _BLACK
                stack.pop()

    return False


def find_first_forward(
    starts: Iterable[int],
    adjacency: Adjacency,
    lookup: dict[int, BaseNode],
    predicate: NodePredicate,
) -> BaseNode | None:
    """Breadth-first search for the first node satisfying ``predicate``.

    The search does not expand past a matching node. Targets that do not
    exist in ``lookup`` are skipped.

    Args:
        starts: Initial frontier (e.g. an EntryPoint's outgoing edges).
        adjacency: NodeID → successor IDs.
        lookup: NodeID → node.
        predicate: Stop condition.

    Returns:
        The first matching node in BFS order, or None.
    """
    visited: set[int] = set()
    queue: deque[int] = deque(starts)

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        current = lookup.get(current_id)
        if current is None:
            continue
        if predicate(current):
            return current
        queue.extend(adjacency.get(current_id, ()))

    return None


def collect_backward(
    start: BaseNode,
    predecessors: Adjacency,
    lookup: dict[int, BaseNode],
    allowed: NodePredicate,
) -> list[BaseNode]:
    """Walk inbound edges from ``start`` through allowed nodes only.

    Predecessors failing ``allowed`` end that branch of the walk. The
    returned chain starts with ``start`` followed by the collected
    predecessors in BFS order.
    """
    chain = [start]
    visited = {start.node_id}
    queue: deque[int] = deque([start.node_id])

    while queue:
        current_id = queue.popleft()
        for prev_id in predecessors.get(current_id, ()):
            if prev_id in visited:
                continue
            prev = lookup.get(prev_id)
            if prev is None or not allowed(prev):
                continue
            visited.add(prev_id)
            chain.append(prev)
            queue.append(prev_id)

    return chain
