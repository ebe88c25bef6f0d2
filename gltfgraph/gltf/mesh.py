"""Mesh handle."""
from __future__ import annotations

from typing import List

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, MeshWeight

from .primitive import Primitive


class Mesh(GraphNode[MeshWeight]):
    __slots__ = ()

    WEIGHT = MeshWeight

    def primitives(self) -> List[Primitive]:
        return self._edge_targets(EdgeType.MESH_PRIMITIVE, Primitive)

    def create_primitive(self) -> Primitive:
        return self._create_edge_target(EdgeType.MESH_PRIMITIVE, Primitive)

    def add_primitive(self, primitive: Primitive) -> None:
        self._add_edge_target(EdgeType.MESH_PRIMITIVE, primitive)

    def remove_primitive(self, primitive: Primitive) -> None:
        self._remove_edge_target(EdgeType.MESH_PRIMITIVE, primitive)
