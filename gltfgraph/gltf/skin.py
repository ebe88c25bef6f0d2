"""Skin handle."""
from __future__ import annotations

from typing import Iterable, List, Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, SkinWeight

from .accessor import Accessor
from .node import Node


class Skin(GraphNode[SkinWeight]):
    """Joint hierarchy used for vertex skinning.

    Joints are ordered by the ordinal stored on each joint edge, which is the
    index used by ``JOINTS_n`` vertex attributes.
    """

    __slots__ = ()

    WEIGHT = SkinWeight

    def inverse_bind_matrices(self) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.INVERSE_BIND_MATRICES, Accessor)

    def set_inverse_bind_matrices(self, accessor: Optional[Accessor]) -> None:
        self._set_edge_target(EdgeType.INVERSE_BIND_MATRICES, accessor)

    def joints(self) -> List[Node]:
        return [joint for _, joint in self._keyed_edge_targets(EdgeType.JOINT, Node)]

    def add_joint(self, joint: Node) -> int:
        """Append ``joint`` and return its ordinal."""

        ordinal = self._next_ordinal(EdgeType.JOINT)
        self._add_edge_target(EdgeType.JOINT, joint, ordinal)
        return ordinal

    def set_joints(self, joints: Iterable[Node]) -> None:
        self._set_edge_target(EdgeType.JOINT, None)
        for ordinal, joint in enumerate(joints):
            self._add_edge_target(EdgeType.JOINT, joint, ordinal)

    def remove_joint(self, joint: Node) -> None:
        """Remove ``joint`` and renumber the remaining joints contiguously."""

        self.set_joints([other for other in self.joints() if other != joint])

    def skeleton(self) -> Optional[Node]:
        return self._find_edge_target(EdgeType.SKELETON, Node)

    def set_skeleton(self, node: Optional[Node]) -> None:
        self._set_edge_target(EdgeType.SKELETON, node)
