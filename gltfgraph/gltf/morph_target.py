"""Morph target handle."""
from __future__ import annotations

from typing import Dict, Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, MorphTargetWeight, Semantic

from .accessor import Accessor


class MorphTarget(GraphNode[MorphTargetWeight]):
    """Per-vertex displacement set; only POSITION, NORMAL and TANGENT are allowed."""

    __slots__ = ()

    WEIGHT = MorphTargetWeight

    def attributes(self) -> Dict[str, Accessor]:
        return dict(self._keyed_edge_targets(EdgeType.TARGET_ATTRIBUTE, Accessor))

    def attribute(self, semantic: str) -> Optional[Accessor]:
        return self._find_edge_target(EdgeType.TARGET_ATTRIBUTE, Accessor, semantic)

    def set_attribute(self, semantic: str, accessor: Optional[Accessor]) -> None:
        if semantic not in Semantic.MORPH_TARGET:
            raise ValueError(f"morph targets cannot carry {semantic!r} attributes")
        self._set_edge_target(EdgeType.TARGET_ATTRIBUTE, accessor, semantic)
