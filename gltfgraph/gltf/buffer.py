"""Buffer handle."""
from __future__ import annotations

from typing import Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import BufferWeight


class Buffer(GraphNode[BufferWeight]):
    """Physical byte blob that accessors and images are packed into on export."""

    __slots__ = ()

    WEIGHT = BufferWeight

    @property
    def uri(self) -> Optional[str]:
        return self.get().uri

    @uri.setter
    def uri(self, value: Optional[str]) -> None:
        self.get().uri = value
