"""Primitive handle."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import ComponentType, EdgeType, ElementType, PrimitiveWeight

from .accessor import Accessor
from .material import Material
from .morph_target import MorphTarget

if TYPE_CHECKING:
    from .mesh import Mesh

INDEX_COMPONENT_TYPES = (ComponentType.U8, ComponentType.U16, ComponentType.U32)


def is_index_accessor(accessor: Accessor) -> bool:
    """Whether ``accessor`` is a scalar unsigned integer stream."""

    weight = accessor.get()
    return (
        ElementType(weight.element_type) is ElementType.SCALAR
        and ComponentType(weight.component_type) in INDEX_COMPONENT_TYPES
    )


class Primitive(GraphNode[PrimitiveWeight]):
    """Geometry to draw with one material."""

    __slots__ = ()

    WEIGHT = PrimitiveWeight

    def mesh(self) -> Optional["Mesh"]:
        from .mesh import Mesh

        return self._find_edge_source(EdgeType.MESH_PRIMITIVE, Mesh)

    def attributes(self) -> Dict[str, Accessor]:
        """Map of semantic to accessor, ordered by semantic name."""

        return dict(self._keyed_edge_targets(EdgeType.ATTRIBUTE, Accessor))

    def attribute(self, semantic: str) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.ATTRIBUTE, Accessor, semantic)

    def set_attribute(self, semantic: str, accessor: Optional[Accessor]) -> None:
        self._set_edge_target(EdgeType.ATTRIBUTE, accessor, semantic)

    def indices(self) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.INDICES, Accessor)

    def set_indices(self, accessor: Optional[Accessor]) -> None:
        """Set the index accessor, which must be a scalar unsigned integer stream."""

        if accessor is not None and not is_index_accessor(accessor):
            raise ValueError("primitive indices must be SCALAR U8, U16 or U32")
        self._set_edge_target(EdgeType.INDICES, accessor)

    def material(self) -> Optional[Material]:
        return self._find_edge_target(EdgeType.PRIMITIVE_MATERIAL, Material)

    def set_material(self, material: Optional[Material]) -> None:
        self._set_edge_target(EdgeType.PRIMITIVE_MATERIAL, material)

    def morph_targets(self) -> List[MorphTarget]:
        return [target for _, target in self._keyed_edge_targets(EdgeType.MORPH_TARGET, MorphTarget)]

    def create_morph_target(self) -> MorphTarget:
        ordinal = self._next_ordinal(EdgeType.MORPH_TARGET)
        return self._create_edge_target(EdgeType.MORPH_TARGET, MorphTarget, ordinal)

    def remove_morph_target(self, target: MorphTarget) -> None:
        """Delete ``target`` and renumber the remaining targets contiguously."""

        remaining = [other for other in self.morph_targets() if other != target]
        target.remove()
        self._set_edge_target(EdgeType.MORPH_TARGET, None)
        for ordinal, other in enumerate(remaining):
            self._add_edge_target(EdgeType.MORPH_TARGET, other, ordinal)
