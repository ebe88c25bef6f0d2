"""Material handle."""
from __future__ import annotations

from typing import Dict, Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, MaterialWeight, TextureSlot

from .texture import Texture


class Material(GraphNode[MaterialWeight]):
    """PBR metallic-roughness material.

    Up to five textures hang off a material, one per :class:`TextureSlot`.
    The texture coordinate set of each slot lives on the weight.
    """

    __slots__ = ()

    WEIGHT = MaterialWeight

    def texture(self, slot: TextureSlot) -> Optional[Texture]:
        return self._find_edge_target(EdgeType.MATERIAL_TEXTURE, Texture, TextureSlot(slot))

    def set_texture(
        self, slot: TextureSlot, texture: Optional[Texture], *, tex_coord: Optional[int] = None
    ) -> None:
        """Point ``slot`` at ``texture``; ``None`` clears the slot."""

        slot = TextureSlot(slot)
        self._set_edge_target(EdgeType.MATERIAL_TEXTURE, texture, slot)
        weight = self.get()
        if texture is None:
            weight.tex_coords.pop(slot, None)
        elif tex_coord is not None:
            weight.tex_coords[slot] = tex_coord

    def textures(self) -> Dict[TextureSlot, Texture]:
        return dict(self._keyed_edge_targets(EdgeType.MATERIAL_TEXTURE, Texture, _slot_order))

    def tex_coord(self, slot: TextureSlot) -> int:
        return self.get().tex_coords.get(TextureSlot(slot), 0)


_SLOT_ORDER = {slot: position for position, slot in enumerate(TextureSlot)}


def _slot_order(slot: TextureSlot) -> int:
    return _SLOT_ORDER[slot]
