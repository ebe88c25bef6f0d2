"""In-memory NetworkX based storage for glTF property graphs."""
from __future__ import annotations

from dataclasses import dataclass, field, is_dataclass, replace
from typing import Any, Hashable, Iterable, Iterator

import networkx as nx

from gltfgraph.errors import NotFoundError

from .model import Direction, Relation


@dataclass(eq=False)
class GraphStore:
    """Lightweight wrapper around :class:`networkx.MultiDiGraph`.

    Nodes are integer indices handed out by a monotonic counter, so an index is
    never reused after its node is removed. Each node stores its entity payload
    under the ``weight`` attribute and each edge its :class:`Relation` under
    ``relation``. The store performs no locking; callers serialize mutation.
    """

    graph: nx.MultiDiGraph = field(default_factory=nx.MultiDiGraph)
    _next_index: int = field(default=0, repr=False)

    def new_node(self, weight: Any) -> int:
        """Add a node carrying ``weight`` and return its index."""

        index = self._next_index
        self._next_index += 1
        self.graph.add_node(index, weight=weight)
        return index

    def node_weight(self, index: int) -> Any:
        """Return the live weight stored on ``index``."""

        self._require(index)
        return self.graph.nodes[index]["weight"]

    def set_node_weight(self, index: int, weight: Any) -> None:
        """Replace the weight stored on ``index``."""

        self._require(index)
        self.graph.nodes[index]["weight"] = weight

    def add_edge(self, source: int, target: int, relation: Relation) -> Hashable:
        """Connect ``source`` to ``target`` and return the new edge key."""

        self._require(source)
        self._require(target)
        return self.graph.add_edge(source, target, relation=relation)

    def remove_edge(self, source: int, target: int, key: Hashable) -> None:
        """Remove a single edge identified by its endpoints and key."""

        try:
            self.graph.remove_edge(source, target, key=key)
        except nx.NetworkXError:
            raise NotFoundError((source, target, key)) from None

    def edges_from(
        self, index: int, direction: Direction = Direction.OUTGOING
    ) -> Iterator[tuple[Relation, int, Hashable]]:
        """Yield ``(relation, other_index, key)`` for edges touching ``index``.

        Edges are produced lazily in insertion order.
        """

        self._require(index)
        if direction is Direction.OUTGOING:
            for _, target, key, data in self.graph.out_edges(index, keys=True, data=True):
                yield data["relation"], target, key
        else:
            for source, _, key, data in self.graph.in_edges(index, keys=True, data=True):
                yield data["relation"], source, key

    def remove_node(self, index: int) -> None:
        """Remove ``index`` together with every edge touching it."""

        self._require(index)
        self.graph.remove_node(index)

    def nodes(self) -> Iterable[int]:
        """Iterate over node indices."""

        return self.graph.nodes

    def edges(self) -> Iterable[tuple[int, int, Relation]]:
        """Iterate over edges with their relations."""

        for source, target, data in self.graph.edges(data=True):
            yield source, target, data["relation"]

    def copy(self) -> "GraphStore":
        """Return an independent copy; weights are copied shallowly."""

        clone = GraphStore(self.graph.copy())
        for index in clone.graph.nodes:
            weight = clone.graph.nodes[index]["weight"]
            clone.graph.nodes[index]["weight"] = _clone_weight(weight)
        clone._next_index = self._next_index
        return clone

    def __contains__(self, index: object) -> bool:
        return index in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def _require(self, index: int) -> None:
        if index not in self.graph:
            raise NotFoundError(index)


def _clone_weight(weight: Any) -> Any:
    if is_dataclass(weight):
        return replace(weight)
    return weight
