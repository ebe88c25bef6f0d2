"""``OMI_physics_body``: per-node motion, collider and trigger settings."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from gltfgraph.errors import ExtensionError, InvalidIndexError
from gltfgraph.graph.model import EdgeType
from gltfgraph.gltf.node import Node

from .base import Extension, float_list, number, require_object
from .omi_physics_shape import OmiPhysicsShape, PhysicsShape

if TYPE_CHECKING:
    from gltfgraph.io.context import ExportContext, ImportContext

EXTENSION_NAME = "OMI_physics_body"
COLLIDER_EDGE = f"{EXTENSION_NAME}/collider"
TRIGGER_EDGE = f"{EXTENSION_NAME}/trigger"

ZERO3 = (0.0, 0.0, 0.0)
IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)
DEFAULT_MASS = 1.0


class BodyType(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"
    KINEMATIC = "kinematic"


@dataclass
class Motion:
    """Rigid body motion properties; units are SI (kg, m/s, rad/s)."""

    type: BodyType = BodyType.STATIC
    mass: float = DEFAULT_MASS
    linear_velocity: tuple = ZERO3
    angular_velocity: tuple = ZERO3
    center_of_mass: tuple = ZERO3
    inertia_diagonal: tuple = ZERO3
    inertia_orientation: tuple = IDENTITY_QUAT

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type.value}
        if self.mass != DEFAULT_MASS:
            payload["mass"] = self.mass
        for key, value, default in (
            ("linearVelocity", self.linear_velocity, ZERO3),
            ("angularVelocity", self.angular_velocity, ZERO3),
            ("centerOfMass", self.center_of_mass, ZERO3),
            ("inertialDiagonal", self.inertia_diagonal, ZERO3),
            ("inertiaOrientation", self.inertia_orientation, IDENTITY_QUAT),
        ):
            if tuple(value) != default:
                payload[key] = list(value)
        return payload

    @classmethod
    def from_json(cls, payload: Any) -> "Motion":
        what = f"{EXTENSION_NAME}.motion"
        payload = require_object(payload, what)
        try:
            body_type = BodyType(payload.get("type"))
        except ValueError:
            raise ExtensionError(f"{what}.type {payload.get('type')!r} is not a body type") from None
        return cls(
            type=body_type,
            mass=number(payload, "mass", DEFAULT_MASS, what),
            linear_velocity=float_list(payload, "linearVelocity", ZERO3, what),
            angular_velocity=float_list(payload, "angularVelocity", ZERO3, what),
            center_of_mass=float_list(payload, "centerOfMass", ZERO3, what),
            inertia_diagonal=float_list(payload, "inertialDiagonal", ZERO3, what),
            inertia_orientation=float_list(payload, "inertiaOrientation", IDENTITY_QUAT, what),
        )


@dataclass
class PhysicsBodyWeight:
    motion: Optional[Motion] = field(default=None)


class OmiPhysicsBody(Extension[PhysicsBodyWeight]):
    """Node extension; collider and trigger shapes are linked by graph edges."""

    __slots__ = ()

    EXTENSION_NAME = EXTENSION_NAME

    @classmethod
    def default_value(cls) -> PhysicsBodyWeight:
        return PhysicsBodyWeight()

    @classmethod
    def decode(cls, payload: Any) -> PhysicsBodyWeight:
        payload = require_object(payload, EXTENSION_NAME)
        motion = payload.get("motion")
        return PhysicsBodyWeight(motion=Motion.from_json(motion) if motion is not None else None)

    @classmethod
    def encode(cls, value: PhysicsBodyWeight) -> Any:
        payload: Dict[str, Any] = {}
        if value.motion is not None:
            payload["motion"] = value.motion.to_json()
        return payload

    def collider(self) -> Optional[PhysicsShape]:
        return self._find_edge_target(EdgeType.OTHER, PhysicsShape, COLLIDER_EDGE)

    def set_collider(self, shape: Optional[PhysicsShape]) -> None:
        self._set_edge_target(EdgeType.OTHER, shape, COLLIDER_EDGE)

    def trigger(self) -> Optional[PhysicsShape]:
        return self._find_edge_target(EdgeType.OTHER, PhysicsShape, TRIGGER_EDGE)

    def set_trigger(self, shape: Optional[PhysicsShape]) -> None:
        self._set_edge_target(EdgeType.OTHER, shape, TRIGGER_EDGE)


class OmiPhysicsBodyCodec:
    """Moves ``nodes[*].extensions.OMI_physics_body`` between JSON and the graph.

    Shape references index the document's ``OMI_physics_shape`` table, so this
    codec must run after the shape codec.
    """

    name = EXTENSION_NAME

    def import_extension(self, ctx: "ImportContext") -> None:
        shape_ext = ctx.doc.get_extension(OmiPhysicsShape)
        shapes = shape_ext.shapes() if shape_ext is not None else []
        nodes = ctx.entities.get("nodes", [])

        for position, node_json in enumerate(ctx.items("nodes")):
            extensions = node_json.get("extensions") if isinstance(node_json, dict) else None
            if not extensions or EXTENSION_NAME not in extensions:
                continue
            node = nodes[position] if position < len(nodes) else None
            if node is None:
                continue
            payload = require_object(extensions[EXTENSION_NAME], EXTENSION_NAME)
            body = node.create_extension(OmiPhysicsBody)
            body.write(OmiPhysicsBody.decode(payload))
            for key, setter in (("collider", body.set_collider), ("trigger", body.set_trigger)):
                if key not in payload:
                    continue
                ref = require_object(payload[key], f"{EXTENSION_NAME}.{key}")
                setter(self._shape(ctx, shapes, ref.get("shape"), node))

    def _shape(self, ctx: "ImportContext", shapes: list, index: Any, node: Node) -> Optional[PhysicsShape]:
        if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(shapes):
            return shapes[index]
        if ctx.options.strict:
            raise InvalidIndexError("OMI_physics_shape.shapes", index, len(shapes))
        ctx.events.warn(
            f"physics body references missing shape {index!r}",
            stage=EXTENSION_NAME,
            target_ids=[node.index],
        )
        return None

    def export_extension(self, ctx: "ExportContext") -> bool:
        shape_ext = ctx.doc.get_extension(OmiPhysicsShape)
        shape_indices = {
            shape: position for position, shape in enumerate(shape_ext.shapes())
        } if shape_ext is not None else {}
        used = False

        for node, position in ctx.indices.get("nodes", {}).items():
            body = node.get_extension(OmiPhysicsBody)
            if body is None:
                continue
            payload = OmiPhysicsBody.encode(body.read())
            for key, shape in (("collider", body.collider()), ("trigger", body.trigger())):
                if shape is None:
                    continue
                if shape not in shape_indices:
                    ctx.events.warn(
                        f"physics body {key} shape is not in the document shape table",
                        stage=EXTENSION_NAME,
                        target_ids=[node.index],
                    )
                    continue
                payload[key] = {"shape": shape_indices[shape]}
            node_json = ctx.json["nodes"][position]
            node_json.setdefault("extensions", {})[EXTENSION_NAME] = payload
            used = True
        return used


__all__ = [
    "BodyType",
    "Motion",
    "OmiPhysicsBody",
    "OmiPhysicsBodyCodec",
    "PhysicsBodyWeight",
]
