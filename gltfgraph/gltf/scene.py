"""Scene handle."""
from __future__ import annotations

from typing import Iterator, List

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, SceneWeight
from gltfgraph.graph.query import QueryService

from .node import Node


class Scene(GraphNode[SceneWeight]):
    __slots__ = ()

    WEIGHT = SceneWeight

    def nodes(self) -> List[Node]:
        """Root nodes of the scene, ordered by index."""

        return self._edge_targets(EdgeType.SCENE_NODE, Node)

    def add_node(self, node: Node) -> None:
        self._add_edge_target(EdgeType.SCENE_NODE, node)

    def create_node(self) -> Node:
        return self._create_edge_target(EdgeType.SCENE_NODE, Node)

    def remove_node(self, node: Node) -> None:
        self._remove_edge_target(EdgeType.SCENE_NODE, node)

    def walk(self, max_depth: int = 64) -> Iterator[Node]:
        """Yield every node reachable from the scene roots, breadth first."""

        query = QueryService(self.store)
        kinds = (EdgeType.SCENE_NODE, EdgeType.CHILD)
        for index in query.neighbors(self.index, hop=max_depth, kinds=kinds):
            yield Node(self.store, index)
