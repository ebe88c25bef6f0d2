"""Typed handle base shared by every glTF entity and extension."""
from __future__ import annotations

from typing import Any, Callable, ClassVar, Generic, Hashable, Iterator, List, Optional, Type, TypeVar

from gltfgraph.errors import NotFoundError, WeightTypeError

from .model import Direction, EdgeType, Relation
from .store import GraphStore

W = TypeVar("W")
H = TypeVar("H", bound="GraphNode")

ANY_KEY: Any = object()


class GraphNode(Generic[W]):
    """Lightweight view over a node stored in a :class:`GraphStore`.

    Handles are cheap to create and compare equal when they point at the same
    index of the same store instance. Subclasses declare ``WEIGHT``, the weight
    dataclass their node carries.
    """

    __slots__ = ("store", "index")

    WEIGHT: ClassVar[Type[Any]]

    def __init__(self, store: GraphStore, index: int) -> None:
        self.store = store
        self.index = index

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"{self.__class__.__name__}(index={self.index!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphNode):
            return NotImplemented
        return other.store is self.store and other.index == self.index

    def __hash__(self) -> int:
        return hash((id(self.store), self.index))

    @classmethod
    def new(cls: Type[H], store: GraphStore, weight: Optional[W] = None) -> H:
        """Create a node carrying ``weight`` (or a default one) and wrap it."""

        if weight is None:
            weight = cls.WEIGHT()
        elif not isinstance(weight, cls.WEIGHT):
            raise WeightTypeError(
                f"{cls.__name__} expects {cls.WEIGHT.__name__}, got {type(weight).__name__}"
            )
        return cls(store, store.new_node(weight))

    def get(self) -> W:
        """Return the live weight; mutations are visible to the graph."""

        weight = self.store.node_weight(self.index)
        if not isinstance(weight, self.WEIGHT):
            raise WeightTypeError(
                f"node {self.index} holds {type(weight).__name__}, not {self.WEIGHT.__name__}"
            )
        return weight

    def set(self, weight: W) -> None:
        """Replace the weight of this node."""

        if not isinstance(weight, self.WEIGHT):
            raise WeightTypeError(
                f"{type(self).__name__} expects {self.WEIGHT.__name__}, got {type(weight).__name__}"
            )
        self.store.set_node_weight(self.index, weight)

    def exists(self) -> bool:
        return self.index in self.store

    def remove(self) -> None:
        """Delete the node and every edge touching it."""

        self.store.remove_node(self.index)

    # Edge helpers

    def _matching(
        self, kind: EdgeType, key: Any = ANY_KEY, direction: Direction = Direction.OUTGOING
    ) -> Iterator[tuple[Relation, int, Hashable]]:
        for relation, other, edge_key in self.store.edges_from(self.index, direction):
            if relation.kind is not kind:
                continue
            if key is not ANY_KEY and relation.key != key:
                continue
            yield relation, other, edge_key

    def _find_edge_target(self, kind: EdgeType, cls: Type[H], key: Any = ANY_KEY) -> Optional[H]:
        """Return the first target reached through ``kind`` edges, if any."""

        for _, target, _ in self._matching(kind, key):
            return cls(self.store, target)
        return None

    def _edge_targets(self, kind: EdgeType, cls: Type[H], key: Any = ANY_KEY) -> List[H]:
        """Return every target reached through ``kind`` edges, sorted by index."""

        targets = sorted({target for _, target, _ in self._matching(kind, key)})
        return [cls(self.store, target) for target in targets]

    def _keyed_edge_targets(
        self, kind: EdgeType, cls: Type[H], sort_key: Callable[[Any], Any] = lambda key: key
    ) -> List[tuple[Any, H]]:
        """Return ``(key, target)`` pairs for ``kind`` edges ordered by key."""

        pairs = [(relation.key, target) for relation, target, _ in self._matching(kind)]
        pairs.sort(key=lambda pair: (sort_key(pair[0]), pair[1]))
        return [(key, cls(self.store, target)) for key, target in pairs]

    def _set_edge_target(self, kind: EdgeType, target: Optional[GraphNode], key: Any = None) -> None:
        """Replace any existing ``kind`` edge (with ``key``) by one to ``target``."""

        match = ANY_KEY if key is None else key
        for _, other, edge_key in list(self._matching(kind, match)):
            self.store.remove_edge(self.index, other, edge_key)
        if target is not None:
            self._add_edge_target(kind, target, key)

    def _add_edge_target(self, kind: EdgeType, target: GraphNode, key: Any = None) -> None:
        self._require_same_store(target)
        self.store.add_edge(self.index, target.index, Relation(kind, key))

    def _remove_edge_target(self, kind: EdgeType, target: GraphNode, key: Any = ANY_KEY) -> None:
        """Remove every ``kind`` edge from this node to ``target``."""

        self._require_same_store(target)
        for _, other, edge_key in list(self._matching(kind, key)):
            if other == target.index:
                self.store.remove_edge(self.index, other, edge_key)

    def _create_edge_target(self, kind: EdgeType, cls: Type[H], key: Any = None) -> H:
        """Create a default ``cls`` node and connect it with a ``kind`` edge."""

        target = cls.new(self.store)
        self._add_edge_target(kind, target, key)
        return target

    def _find_edge_source(self, kind: EdgeType, cls: Type[H], key: Any = ANY_KEY) -> Optional[H]:
        """Return the first node pointing at this one through ``kind``."""

        for _, source, _ in self._matching(kind, key, Direction.INCOMING):
            return cls(self.store, source)
        return None

    def _edge_sources(self, kind: EdgeType, cls: Type[H], key: Any = ANY_KEY) -> List[H]:
        sources = sorted({source for _, source, _ in self._matching(kind, key, Direction.INCOMING)})
        return [cls(self.store, source) for source in sources]

    def _next_ordinal(self, kind: EdgeType) -> int:
        keys = [relation.key for relation, _, _ in self._matching(kind)]
        return max(keys) + 1 if keys else 0

    def _require_same_store(self, other: GraphNode) -> None:
        if other.store is not self.store or other.index not in self.store:
            raise NotFoundError(other.index)

    # Extension slots

    def get_extension(self, cls: Type[H]) -> Optional[H]:
        """Return this entity's ``cls`` extension node, if one exists."""

        return self._find_edge_target(EdgeType.EXTENSION, cls, cls.EXTENSION_NAME)

    def create_extension(self, cls: Type[H]) -> H:
        """Create (replacing any previous one) a ``cls`` extension on this entity."""

        self.remove_extension(cls)
        return self._create_edge_target(EdgeType.EXTENSION, cls, cls.EXTENSION_NAME)

    def remove_extension(self, cls: Type[H]) -> None:
        """Delete the ``cls`` extension node owned by this entity, if any."""

        existing = self.get_extension(cls)
        if existing is not None:
            existing.remove()

    def extension_names(self) -> List[str]:
        """Return the names of every extension attached to this entity."""

        return sorted(relation.key for relation, _, _ in self._matching(EdgeType.EXTENSION))


__all__ = ["ANY_KEY", "GraphNode"]
