from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from core.domain.enums import DependencyType
from core.domain.milestone import Milestone
from core.domain.task import Task, TaskDependency
from core.exceptions import BusinessRuleError, CircularDependencyError, DanglingReferenceError, ValidationError

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2


@dataclass(frozen=True)
class ScheduleNode:
    id: str
    name: str
    priority: int
    dependencies: tuple[TaskDependency, ...]
    task: Optional[Task] = None
    milestone: Optional[Milestone] = None

    @property
    def is_milestone(self) -> bool:
        return self.milestone is not None


@dataclass(frozen=True)
class GraphEdge:
    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType
    lag_days: float


@dataclass
class DependencyGraph:
    nodes: Dict[str, ScheduleNode]
    topo_order: List[str]
    incoming: Dict[str, List[GraphEdge]] = field(default_factory=dict)
    outgoing: Dict[str, List[GraphEdge]] = field(default_factory=dict)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.incoming.values())

    def sources(self) -> list[str]:
        return [node_id for node_id in self.topo_order if not self.incoming.get(node_id)]

    def sinks(self) -> list[str]:
        return [node_id for node_id in self.topo_order if not self.outgoing.get(node_id)]


def build_dependency_graph(
    tasks: Sequence[Task],
    milestones: Sequence[Milestone] = (),
) -> DependencyGraph:
    """
    Assemble tasks and milestones into a predecessor -> successor graph.

    Raises DanglingReferenceError for a dependency on an unknown identifier and
    CircularDependencyError (carrying the cycle) when the graph is not acyclic.
    """
    nodes: Dict[str, ScheduleNode] = {}
    for task in tasks:
        _add_node(
            nodes,
            ScheduleNode(
                id=task.id,
                name=task.name,
                priority=task.priority,
                dependencies=task.dependencies,
                task=task,
            ),
        )
    for milestone in milestones:
        _add_node(
            nodes,
            ScheduleNode(
                id=milestone.id,
                name=milestone.name,
                priority=0,
                dependencies=milestone.dependencies,
                milestone=milestone,
            ),
        )

    incoming: Dict[str, List[GraphEdge]] = {}
    outgoing: Dict[str, List[GraphEdge]] = {}
    for node in nodes.values():
        for dep in node.dependencies:
            if dep.predecessor_id not in nodes:
                logger.warning(
                    "Dangling dependency: %s -> %s", node.id, dep.predecessor_id
                )
                raise DanglingReferenceError(dep.predecessor_id, referenced_by=node.id)
            edge = GraphEdge(
                predecessor_id=dep.predecessor_id,
                successor_id=node.id,
                dependency_type=dep.dependency_type,
                lag_days=float(dep.lag_days or 0.0),
            )
            incoming.setdefault(node.id, []).append(edge)
            outgoing.setdefault(dep.predecessor_id, []).append(edge)

    cycle = find_cycle(nodes, outgoing)
    if cycle:
        logger.warning("Circular dependency detected: %s", " -> ".join(cycle + cycle[:1]))
        raise CircularDependencyError(cycle)

    topo_order = _topological_order(nodes, incoming, outgoing)
    return DependencyGraph(
        nodes=nodes,
        topo_order=topo_order,
        incoming=incoming,
        outgoing=outgoing,
    )


def find_cycle(
    nodes: Dict[str, ScheduleNode],
    outgoing: Dict[str, List[GraphEdge]],
) -> list[str]:
    """
    Depth-first search with grey/black colouring. Returns the first cycle found,
    rotated so that its smallest identifier comes first, or [] if acyclic.
    Nodes and successors are visited in identifier order so the answer does not
    depend on how the snapshot was ordered.
    """
    color: Dict[str, int] = {node_id: _WHITE for node_id in nodes}
    successors: Dict[str, list[str]] = {
        node_id: sorted({e.successor_id for e in outgoing.get(node_id, [])})
        for node_id in nodes
    }

    for root in sorted(nodes):
        if color[root] != _WHITE:
            continue
        stack: list[tuple[str, int]] = [(root, 0)]
        path: list[str] = [root]
        color[root] = _GREY
        while stack:
            node_id, index = stack[-1]
            succ = successors[node_id]
            if index >= len(succ):
                stack.pop()
                path.pop()
                color[node_id] = _BLACK
                continue
            stack[-1] = (node_id, index + 1)
            nxt = succ[index]
            if color[nxt] == _GREY:
                return _canonical_cycle(path[path.index(nxt):])
            if color[nxt] == _WHITE:
                color[nxt] = _GREY
                stack.append((nxt, 0))
                path.append(nxt)
    return []


def _canonical_cycle(cycle: list[str]) -> list[str]:
    pivot = cycle.index(min(cycle))
    return cycle[pivot:] + cycle[:pivot]


def _add_node(nodes: Dict[str, ScheduleNode], node: ScheduleNode) -> None:
    if node.id in nodes:
        raise ValidationError(
            f"Duplicate task or milestone identifier '{node.id}'.",
            code="SCHEDULE_DUPLICATE_ID",
        )
    nodes[node.id] = node


def _topological_order(
    nodes: Dict[str, ScheduleNode],
    incoming: Dict[str, List[GraphEdge]],
    outgoing: Dict[str, List[GraphEdge]],
) -> list[str]:
    indegree: Dict[str, int] = {node_id: len(incoming.get(node_id, [])) for node_id in nodes}

    heap: list[tuple[int, str, str]] = []
    for node_id, degree in indegree.items():
        if degree == 0:
            node = nodes[node_id]
            heapq.heappush(heap, (node.priority, node.name or "", node_id))

    topo_order: list[str] = []
    while heap:
        _priority, _name, node_id = heapq.heappop(heap)
        topo_order.append(node_id)
        for edge in outgoing.get(node_id, []):
            succ_id = edge.successor_id
            indegree[succ_id] -= 1
            if indegree[succ_id] == 0:
                succ = nodes[succ_id]
                heapq.heappush(heap, (succ.priority, succ.name or "", succ_id))

    if len(topo_order) != len(nodes):
        unordered = sorted(set(nodes) - set(topo_order))
        raise BusinessRuleError(
            f"Dependency graph could not be ordered; unresolved nodes: {', '.join(unordered)}.",
            code="SCHEDULE_UNORDERED_GRAPH",
        )
    return topo_order


__all__ = [
    "ScheduleNode",
    "GraphEdge",
    "DependencyGraph",
    "build_dependency_graph",
    "find_cycle",
]
