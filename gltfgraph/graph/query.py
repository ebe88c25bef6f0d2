"""Query helpers for the glTF property graph."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from .model import Direction, EdgeType
from .store import GraphStore


@dataclass
class QueryService:
    """Provide read-only access patterns on top of :class:`GraphStore`."""

    store: GraphStore

    def by_kind(self, weight_type: type, **filters: Any) -> Iterator[int]:
        """Yield indices of nodes whose weight is ``weight_type`` and matches ``filters``."""

        for index in list(self.store.nodes()):
            weight = self.store.node_weight(index)
            if not isinstance(weight, weight_type):
                continue
            if all(getattr(weight, key, None) == value for key, value in filters.items()):
                yield index

    def neighbors(
        self, index: int, *, hop: int = 1, kinds: Optional[Iterable[EdgeType]] = None
    ) -> Iterator[int]:
        """Yield nodes reachable from ``index`` within ``hop`` outgoing steps.

        The walk is breadth-first; every node is produced once, in the order it
        is first reached. Within one frontier node, edges are followed in
        target index order.
        """

        if index not in self.store:
            return
        allowed = set(kinds) if kinds is not None else None
        visited = {index}
        frontier = [index]
        for _ in range(hop):
            next_frontier = []
            for current in frontier:
                targets = sorted(
                    target
                    for relation, target, _ in self.store.edges_from(current)
                    if allowed is None or relation.kind in allowed
                )
                for neighbor in targets:
                    if neighbor in visited:
                        continue
                    visited.add(neighbor)
                    next_frontier.append(neighbor)
                    yield neighbor
            if not next_frontier:
                break
            frontier = next_frontier

    def referrers(self, index: int, *, kinds: Optional[Iterable[EdgeType]] = None) -> list[int]:
        """Return the sorted indices of nodes holding an edge to ``index``."""

        allowed = set(kinds) if kinds is not None else None
        return sorted(
            {
                source
                for relation, source, _ in self.store.edges_from(index, Direction.INCOMING)
                if allowed is None or relation.kind in allowed
            }
        )
