"""Document handle: the root that owns every top-level glTF entity."""
from __future__ import annotations

from typing import List, Optional, Type, TypeVar

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import DocumentWeight, EdgeType

from .accessor import Accessor
from .animation import Animation
from .buffer import Buffer
from .image import Image
from .material import Material
from .mesh import Mesh
from .node import Node
from .scene import Scene
from .skin import Skin
from .texture import Texture

H = TypeVar("H", bound=GraphNode)


class Document(GraphNode[DocumentWeight]):
    """Root marker of a glTF document.

    Membership edges connect the document to its scenes, nodes, meshes,
    accessors, buffers, images, textures, materials, skins and animations.
    Lists are ordered by node index, which is creation order, and that order is
    the one used for JSON indices on export. ``remove_*`` deletes the entity
    node and every edge touching it.
    """

    __slots__ = ()

    WEIGHT = DocumentWeight

    def _members(self, kind: EdgeType, cls: Type[H]) -> List[H]:
        return self._edge_targets(kind, cls)

    def _create(self, kind: EdgeType, cls: Type[H], name: Optional[str]) -> H:
        entity = self._create_edge_target(kind, cls)
        if name is not None:
            entity.get().name = name
        return entity

    def _add(self, kind: EdgeType, entity: GraphNode) -> None:
        if entity not in self._members(kind, type(entity)):
            self._add_edge_target(kind, entity)

    # Scenes

    def scenes(self) -> List[Scene]:
        return self._members(EdgeType.DOCUMENT_SCENE, Scene)

    def create_scene(self, name: Optional[str] = None) -> Scene:
        return self._create(EdgeType.DOCUMENT_SCENE, Scene, name)

    def add_scene(self, scene: Scene) -> None:
        self._add(EdgeType.DOCUMENT_SCENE, scene)

    def remove_scene(self, scene: Scene) -> None:
        scene.remove()

    def default_scene(self) -> Optional[Scene]:
        return self._find_edge_target(EdgeType.DEFAULT_SCENE, Scene)

    def set_default_scene(self, scene: Optional[Scene]) -> None:
        self._set_edge_target(EdgeType.DEFAULT_SCENE, scene)

    # Nodes

    def nodes(self) -> List[Node]:
        return self._members(EdgeType.DOCUMENT_NODE, Node)

    def create_node(self, name: Optional[str] = None) -> Node:
        return self._create(EdgeType.DOCUMENT_NODE, Node, name)

    def add_node(self, node: Node) -> None:
        self._add(EdgeType.DOCUMENT_NODE, node)

    def remove_node(self, node: Node) -> None:
        node.remove()

    # Meshes

    def meshes(self) -> List[Mesh]:
        return self._members(EdgeType.DOCUMENT_MESH, Mesh)

    def create_mesh(self, name: Optional[str] = None) -> Mesh:
        return self._create(EdgeType.DOCUMENT_MESH, Mesh, name)

    def add_mesh(self, mesh: Mesh) -> None:
        self._add(EdgeType.DOCUMENT_MESH, mesh)

    def remove_mesh(self, mesh: Mesh) -> None:
        mesh.remove()

    # Accessors

    def accessors(self) -> List[Accessor]:
        return self._members(EdgeType.DOCUMENT_ACCESSOR, Accessor)

    def create_accessor(self, name: Optional[str] = None) -> Accessor:
        return self._create(EdgeType.DOCUMENT_ACCESSOR, Accessor, name)

    def add_accessor(self, accessor: Accessor) -> None:
        self._add(EdgeType.DOCUMENT_ACCESSOR, accessor)

    def remove_accessor(self, accessor: Accessor) -> None:
        accessor.remove()

    # Buffers

    def buffers(self) -> List[Buffer]:
        return self._members(EdgeType.DOCUMENT_BUFFER, Buffer)

    def create_buffer(self, name: Optional[str] = None) -> Buffer:
        return self._create(EdgeType.DOCUMENT_BUFFER, Buffer, name)

    def add_buffer(self, buffer: Buffer) -> None:
        self._add(EdgeType.DOCUMENT_BUFFER, buffer)

    def remove_buffer(self, buffer: Buffer) -> None:
        buffer.remove()

    # Images

    def images(self) -> List[Image]:
        return self._members(EdgeType.DOCUMENT_IMAGE, Image)

    def create_image(self, name: Optional[str] = None) -> Image:
        return self._create(EdgeType.DOCUMENT_IMAGE, Image, name)

    def add_image(self, image: Image) -> None:
        self._add(EdgeType.DOCUMENT_IMAGE, image)

    def remove_image(self, image: Image) -> None:
        image.remove()

    # Textures

    def textures(self) -> List[Texture]:
        return self._members(EdgeType.DOCUMENT_TEXTURE, Texture)

    def create_texture(self, name: Optional[str] = None) -> Texture:
        return self._create(EdgeType.DOCUMENT_TEXTURE, Texture, name)

    def add_texture(self, texture: Texture) -> None:
        self._add(EdgeType.DOCUMENT_TEXTURE, texture)

    def remove_texture(self, texture: Texture) -> None:
        texture.remove()

    # Materials

    def materials(self) -> List[Material]:
        return self._members(EdgeType.DOCUMENT_MATERIAL, Material)

    def create_material(self, name: Optional[str] = None) -> Material:
        return self._create(EdgeType.DOCUMENT_MATERIAL, Material, name)

    def add_material(self, material: Material) -> None:
        self._add(EdgeType.DOCUMENT_MATERIAL, material)

    def remove_material(self, material: Material) -> None:
        material.remove()

    # Skins

    def skins(self) -> List[Skin]:
        return self._members(EdgeType.DOCUMENT_SKIN, Skin)

    def create_skin(self, name: Optional[str] = None) -> Skin:
        return self._create(EdgeType.DOCUMENT_SKIN, Skin, name)

    def add_skin(self, skin: Skin) -> None:
        self._add(EdgeType.DOCUMENT_SKIN, skin)

    def remove_skin(self, skin: Skin) -> None:
        skin.remove()

    # Animations

    def animations(self) -> List[Animation]:
        return self._members(EdgeType.DOCUMENT_ANIMATION, Animation)

    def create_animation(self, name: Optional[str] = None) -> Animation:
        return self._create(EdgeType.DOCUMENT_ANIMATION, Animation, name)

    def add_animation(self, animation: Animation) -> None:
        self._add(EdgeType.DOCUMENT_ANIMATION, animation)

    def remove_animation(self, animation: Animation) -> None:
        animation.remove()
