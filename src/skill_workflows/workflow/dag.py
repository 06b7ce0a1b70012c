"""Directed graph over step identifiers.

Edges point from a prerequisite to the step that needs it. Steps are referenced by
string id only, and the graph is rebuilt from a step list whenever it is needed.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from .models import WorkflowStep


@dataclass(frozen=True, slots=True)
class CycleResult:
    has_cycle: bool
    topological_order: list[str] | None = None
    cycle: list[str] | None = None


class WorkflowDAG:
    """Multi-predecessor dependency graph.

    Node order is insertion order, which makes topological order deterministic for a
    fixed step list.
    """

    def __init__(self) -> None:
        # dicts double as ordered sets
        self._successors: dict[str, dict[str, None]] = {}
        self._predecessors: dict[str, dict[str, None]] = {}

    @classmethod
    def from_steps(cls, steps: Iterable[WorkflowStep]) -> WorkflowDAG:
        steps = list(steps)
        dag = cls()
        for step in steps:
            dag.add_node(step.id)
        for step in steps:
            for needed in step.needs:
                dag.add_edge(needed, step.id)
        return dag

    @property
    def nodes(self) -> list[str]:
        return list(self._successors)

    def add_node(self, node_id: str) -> None:
        if node_id not in self._successors:
            self._successors[node_id] = {}
            self._predecessors[node_id] = {}

    def add_edge(self, from_id: str, to_id: str) -> None:
        """Register that ``to_id`` depends on ``from_id``."""
        self.add_node(from_id)
        self.add_node(to_id)
        self._successors[from_id][to_id] = None
        self._predecessors[to_id][from_id] = None

    def predecessors(self, node_id: str) -> list[str]:
        return list(self._predecessors.get(node_id, {}))

    def detect_cycles(self) -> CycleResult:
        """Run Kahn's algorithm over the graph.

        Returns the topological order when the graph is acyclic. Otherwise every node
        that could not be emitted sits on, or behind, a cycle and is reported in
        ``cycle``.
        """
        in_degree = {node: len(preds) for node, preds in self._predecessors.items()}
        queue = deque(node for node, degree in in_degree.items() if degree == 0)
        order: list[str] = []

        while queue:
            node = queue.popleft()
            order.append(node)
            for successor in self._successors[node]:
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)

        if len(order) == len(self._successors):
            return CycleResult(has_cycle=False, topological_order=order)

        emitted = set(order)
        return CycleResult(
            has_cycle=True,
            cycle=[node for node in self._successors if node not in emitted],
        )

    def get_ready_steps(self, completed: set[str]) -> list[str]:
        """Steps not yet completed whose prerequisites are all in ``completed``."""
        return [
            node
            for node, preds in self._predecessors.items()
            if node not in completed and all(p in completed for p in preds)
        ]
