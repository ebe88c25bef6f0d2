"""Extension slots, the codec registry and the built-in OMI physics extensions."""

from .base import ByteNode, Extension
from .omi_physics_body import BodyType, Motion, OmiPhysicsBody, OmiPhysicsBodyCodec, PhysicsBodyWeight
from .omi_physics_shape import (
    BoxShape,
    CapsuleShape,
    ConvexShape,
    CylinderShape,
    OmiPhysicsShape,
    OmiPhysicsShapeCodec,
    PhysicsShape,
    SphereShape,
    TrimeshShape,
)
from .registry import ExtensionCodec, ExtensionRegistry, default_registry

__all__ = [
    "BodyType",
    "BoxShape",
    "ByteNode",
    "CapsuleShape",
    "ConvexShape",
    "CylinderShape",
    "Extension",
    "ExtensionCodec",
    "ExtensionRegistry",
    "Motion",
    "OmiPhysicsBody",
    "OmiPhysicsBodyCodec",
    "OmiPhysicsShape",
    "OmiPhysicsShapeCodec",
    "PhysicsBodyWeight",
    "PhysicsShape",
    "SphereShape",
    "TrimeshShape",
    "default_registry",
]
