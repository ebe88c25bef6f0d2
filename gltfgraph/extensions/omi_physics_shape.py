"""``OMI_physics_shape``: a document-level table of collision shapes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Type, Union

from gltfgraph.errors import ExtensionError
from gltfgraph.graph.model import EdgeType
from gltfgraph.gltf.mesh import Mesh

from .base import ByteNode, Extension, float_list, number, require_object

if TYPE_CHECKING:
    from gltfgraph.io.context import ExportContext, ImportContext

EXTENSION_NAME = "OMI_physics_shape"
SHAPE_EDGE = f"{EXTENSION_NAME}/shape"
MESH_EDGE = f"{EXTENSION_NAME}/mesh"

DEFAULT_SIZE = (1.0, 1.0, 1.0)
DEFAULT_RADIUS = 0.5
DEFAULT_HEIGHT = 2.0


@dataclass
class BoxShape:
    TYPE: ClassVar[str] = "box"

    size: tuple = DEFAULT_SIZE


@dataclass
class SphereShape:
    TYPE: ClassVar[str] = "sphere"

    radius: float = DEFAULT_RADIUS


@dataclass
class CapsuleShape:
    TYPE: ClassVar[str] = "capsule"

    radius: float = DEFAULT_RADIUS
    height: float = DEFAULT_HEIGHT


@dataclass
class CylinderShape:
    TYPE: ClassVar[str] = "cylinder"

    radius: float = DEFAULT_RADIUS
    height: float = DEFAULT_HEIGHT


@dataclass
class ConvexShape:
    """Convex hull of a mesh; the mesh is linked by a graph edge."""

    TYPE: ClassVar[str] = "convex"


@dataclass
class TrimeshShape:
    """Triangle mesh collider; the mesh is linked by a graph edge."""

    TYPE: ClassVar[str] = "trimesh"


PhysicsShapeWeight = Union[BoxShape, SphereShape, CapsuleShape, CylinderShape, ConvexShape, TrimeshShape]

SHAPE_TYPES: Dict[str, Type[Any]] = {
    cls.TYPE: cls
    for cls in (BoxShape, SphereShape, CapsuleShape, CylinderShape, ConvexShape, TrimeshShape)
}
MESH_SHAPES = (ConvexShape, TrimeshShape)


def encode_shape(shape: PhysicsShapeWeight) -> Dict[str, Any]:
    """Serialize ``shape``; fields equal to their default are omitted."""

    body: Dict[str, Any] = {}
    if isinstance(shape, BoxShape):
        if tuple(shape.size) != DEFAULT_SIZE:
            body["size"] = list(shape.size)
    elif isinstance(shape, (SphereShape, CapsuleShape, CylinderShape)):
        if shape.radius != DEFAULT_RADIUS:
            body["radius"] = shape.radius
        if not isinstance(shape, SphereShape) and shape.height != DEFAULT_HEIGHT:
            body["height"] = shape.height
    return {"type": shape.TYPE, shape.TYPE: body}


def decode_shape(payload: Any) -> PhysicsShapeWeight:
    payload = require_object(payload, "shape")
    shape_type = payload.get("type")
    cls = SHAPE_TYPES.get(shape_type)
    if cls is None:
        raise ExtensionError(f"unknown physics shape type {shape_type!r}")
    what = f"shape.{shape_type}"
    body = require_object(payload.get(shape_type, {}), what)
    if cls is BoxShape:
        return BoxShape(size=float_list(body, "size", DEFAULT_SIZE, what))
    if cls is SphereShape:
        return SphereShape(radius=number(body, "radius", DEFAULT_RADIUS, what))
    if cls in (CapsuleShape, CylinderShape):
        return cls(
            radius=number(body, "radius", DEFAULT_RADIUS, what),
            height=number(body, "height", DEFAULT_HEIGHT, what),
        )
    return cls()


class PhysicsShape(ByteNode[PhysicsShapeWeight]):
    """One entry of the shape table."""

    __slots__ = ()

    @classmethod
    def default_value(cls) -> PhysicsShapeWeight:
        return BoxShape()

    @classmethod
    def decode(cls, payload: Any) -> PhysicsShapeWeight:
        return decode_shape(payload)

    @classmethod
    def encode(cls, value: PhysicsShapeWeight) -> Any:
        return encode_shape(value)

    def mesh(self) -> Optional[Mesh]:
        return self._find_edge_target(EdgeType.OTHER, Mesh, MESH_EDGE)

    def set_mesh(self, mesh: Optional[Mesh]) -> None:
        self._set_edge_target(EdgeType.OTHER, mesh, MESH_EDGE)


class OmiPhysicsShape(Extension[None]):
    """Document extension owning the shape table."""

    __slots__ = ()

    EXTENSION_NAME = EXTENSION_NAME

    @classmethod
    def default_value(cls) -> None:
        return None

    @classmethod
    def decode(cls, payload: Any) -> None:
        return None

    @classmethod
    def encode(cls, value: None) -> Any:
        return {}

    def shapes(self) -> List[PhysicsShape]:
        return self._edge_targets(EdgeType.OTHER, PhysicsShape, SHAPE_EDGE)

    def create_shape(self, weight: Optional[PhysicsShapeWeight] = None) -> PhysicsShape:
        shape = self._create_edge_target(EdgeType.OTHER, PhysicsShape, SHAPE_EDGE)
        shape.write(weight if weight is not None else BoxShape())
        return shape

    def remove_shape(self, shape: PhysicsShape) -> None:
        shape.remove()


class OmiPhysicsShapeCodec:
    """Moves the shape table between ``extensions.OMI_physics_shape`` and the graph."""

    name = EXTENSION_NAME

    def import_extension(self, ctx: "ImportContext") -> None:
        extensions = ctx.json.get("extensions") or {}
        if EXTENSION_NAME not in extensions:
            return
        payload = require_object(extensions[EXTENSION_NAME], EXTENSION_NAME)
        shapes = payload.get("shapes", [])
        if not isinstance(shapes, list):
            raise ExtensionError(f"{EXTENSION_NAME}.shapes must be a list")

        ext = ctx.doc.get_extension(OmiPhysicsShape) or ctx.doc.create_extension(OmiPhysicsShape)
        for item in shapes:
            weight = decode_shape(item)
            shape = ext.create_shape(weight)
            if isinstance(weight, MESH_SHAPES):
                mesh_index = item.get(weight.TYPE, {}).get("mesh")
                if mesh_index is not None:
                    shape.set_mesh(ctx.resolve("meshes", mesh_index, stage=EXTENSION_NAME))

    def export_extension(self, ctx: "ExportContext") -> bool:
        ext = ctx.doc.get_extension(OmiPhysicsShape)
        if ext is None:
            return False
        shapes = []
        for shape in ext.shapes():
            weight = shape.read()
            payload = encode_shape(weight)
            if isinstance(weight, MESH_SHAPES):
                mesh_index = ctx.index_of("meshes", shape.mesh())
                if mesh_index is not None:
                    payload[weight.TYPE]["mesh"] = mesh_index
            shapes.append(payload)
        if not shapes:
            return False
        ctx.json.setdefault("extensions", {})[EXTENSION_NAME] = {"shapes": shapes}
        return True


__all__ = [
    "BoxShape",
    "CapsuleShape",
    "ConvexShape",
    "CylinderShape",
    "OmiPhysicsShape",
    "OmiPhysicsShapeCodec",
    "PhysicsShape",
    "PhysicsShapeWeight",
    "SphereShape",
    "TrimeshShape",
    "decode_shape",
    "encode_shape",
]
