"""Accessor handle and helpers for building accessors from arrays."""
from __future__ import annotations

from typing import List, Optional, Union

from gltfgraph.codec.accessor_iter import AccessorIter
from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import AccessorWeight, ComponentType, EdgeType, ElementType
from gltfgraph.graph.store import GraphStore

from .buffer import Buffer


class Accessor(GraphNode[AccessorWeight]):
    """Typed element stream stored as tightly packed bytes."""

    __slots__ = ()

    WEIGHT = AccessorWeight

    @classmethod
    def from_array(
        cls,
        store: GraphStore,
        values,
        component_type: ComponentType = ComponentType.F32,
        element_type: ElementType = ElementType.SCALAR,
        *,
        normalized: bool = False,
        name: Optional[str] = None,
    ) -> "Accessor":
        """Encode ``values`` and create an accessor node holding the bytes."""

        encoded = AccessorIter.from_array(values, component_type, element_type, normalized)
        weight = AccessorWeight(
            name=name,
            component_type=encoded.component_type,
            element_type=encoded.element_type,
            normalized=normalized,
            data=encoded.data,
        )
        return cls.new(store, weight)

    def iter(self) -> AccessorIter:
        """Return a decoded element stream over the current payload."""

        weight = self.get()
        return AccessorIter(weight.data, weight.component_type, weight.element_type, weight.normalized)

    def count(self) -> int:
        return self.iter().count

    def element_size(self) -> int:
        weight = self.get()
        return ComponentType(weight.component_type).size * ElementType(weight.element_type).multiplicity

    def calc_min(self) -> List[Union[int, float]]:
        return self.iter().min()

    def calc_max(self) -> List[Union[int, float]]:
        return self.iter().max()

    def buffer(self) -> Optional[Buffer]:
        return self._find_edge_target(EdgeType.ACCESSOR_BUFFER, Buffer)

    def set_buffer(self, buffer: Optional[Buffer]) -> None:
        self._set_edge_target(EdgeType.ACCESSOR_BUFFER, buffer)
