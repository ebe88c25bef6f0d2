"""Texture handle."""
from __future__ import annotations

from typing import Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, TextureWeight

from .image import Image


class Texture(GraphNode[TextureWeight]):
    """Texture with its sampler settings folded into the weight."""

    __slots__ = ()

    WEIGHT = TextureWeight

    def image(self) -> Optional[Image]:
        return self._find_edge_target(EdgeType.TEXTURE_IMAGE, Image)

    def set_image(self, image: Optional[Image]) -> None:
        self._set_edge_target(EdgeType.TEXTURE_IMAGE, image)
