"""Data structures stored on the nodes and edges of the glTF property graph."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]


class EdgeType(str, Enum):
    """Enumerates the relation kinds that may connect two graph nodes."""

    # Document membership
    DOCUMENT_SCENE = "DOCUMENT_SCENE"
    DOCUMENT_NODE = "DOCUMENT_NODE"
    DOCUMENT_MESH = "DOCUMENT_MESH"
    DOCUMENT_ACCESSOR = "DOCUMENT_ACCESSOR"
    DOCUMENT_BUFFER = "DOCUMENT_BUFFER"
    DOCUMENT_IMAGE = "DOCUMENT_IMAGE"
    DOCUMENT_TEXTURE = "DOCUMENT_TEXTURE"
    DOCUMENT_MATERIAL = "DOCUMENT_MATERIAL"
    DOCUMENT_SKIN = "DOCUMENT_SKIN"
    DOCUMENT_ANIMATION = "DOCUMENT_ANIMATION"
    DEFAULT_SCENE = "DEFAULT_SCENE"

    SCENE_NODE = "SCENE_NODE"
    CHILD = "CHILD"
    NODE_MESH = "NODE_MESH"
    NODE_SKIN = "NODE_SKIN"
    MESH_PRIMITIVE = "MESH_PRIMITIVE"
    ATTRIBUTE = "ATTRIBUTE"
    INDICES = "INDICES"
    PRIMITIVE_MATERIAL = "PRIMITIVE_MATERIAL"
    MORPH_TARGET = "MORPH_TARGET"
    TARGET_ATTRIBUTE = "TARGET_ATTRIBUTE"
    ACCESSOR_BUFFER = "ACCESSOR_BUFFER"
    IMAGE_BUFFER = "IMAGE_BUFFER"
    TEXTURE_IMAGE = "TEXTURE_IMAGE"
    MATERIAL_TEXTURE = "MATERIAL_TEXTURE"
    INVERSE_BIND_MATRICES = "INVERSE_BIND_MATRICES"
    JOINT = "JOINT"
    SKELETON = "SKELETON"
    ANIMATION_CHANNEL = "ANIMATION_CHANNEL"
    CHANNEL_SAMPLER = "CHANNEL_SAMPLER"
    CHANNEL_TARGET = "CHANNEL_TARGET"
    SAMPLER_INPUT = "SAMPLER_INPUT"
    SAMPLER_OUTPUT = "SAMPLER_OUTPUT"

    EXTENSION = "EXTENSION"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Relation:
    """Payload stored on every edge.

    ``key`` carries the attribute semantic, the ordinal of a joint or morph
    target, the material texture slot, or the extension name.
    """

    kind: EdgeType
    key: Any = None


class Direction(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


# glTF enumerants


class ComponentType(IntEnum):
    I8 = 5120
    U8 = 5121
    I16 = 5122
    U16 = 5123
    U32 = 5125
    F32 = 5126

    @property
    def size(self) -> int:
        """Byte width of a single component."""

        return _COMPONENT_SIZES[self]

    @property
    def dtype(self) -> str:
        """Little-endian numpy dtype string for the component."""

        return _COMPONENT_DTYPES[self]

    @property
    def is_float(self) -> bool:
        return self is ComponentType.F32


_COMPONENT_SIZES = {
    ComponentType.I8: 1,
    ComponentType.U8: 1,
    ComponentType.I16: 2,
    ComponentType.U16: 2,
    ComponentType.U32: 4,
    ComponentType.F32: 4,
}

_COMPONENT_DTYPES = {
    ComponentType.I8: "<i1",
    ComponentType.U8: "<u1",
    ComponentType.I16: "<i2",
    ComponentType.U16: "<u2",
    ComponentType.U32: "<u4",
    ComponentType.F32: "<f4",
}


class ElementType(str, Enum):
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"

    @property
    def multiplicity(self) -> int:
        """Number of components in one element."""

        return _MULTIPLICITY[self]


_MULTIPLICITY = {
    ElementType.SCALAR: 1,
    ElementType.VEC2: 2,
    ElementType.VEC3: 3,
    ElementType.VEC4: 4,
    ElementType.MAT2: 4,
    ElementType.MAT3: 9,
    ElementType.MAT4: 16,
}


class PrimitiveMode(IntEnum):
    POINTS = 0
    LINES = 1
    LINE_LOOP = 2
    LINE_STRIP = 3
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


class AlphaMode(str, Enum):
    OPAQUE = "OPAQUE"
    MASK = "MASK"
    BLEND = "BLEND"


class MagFilter(IntEnum):
    NEAREST = 9728
    LINEAR = 9729


class MinFilter(IntEnum):
    NEAREST = 9728
    LINEAR = 9729
    NEAREST_MIPMAP_NEAREST = 9984
    LINEAR_MIPMAP_NEAREST = 9985
    NEAREST_MIPMAP_LINEAR = 9986
    LINEAR_MIPMAP_LINEAR = 9987


class WrappingMode(IntEnum):
    CLAMP_TO_EDGE = 33071
    MIRRORED_REPEAT = 33648
    REPEAT = 10497


class TargetPath(str, Enum):
    TRANSLATION = "translation"
    ROTATION = "rotation"
    SCALE = "scale"
    WEIGHTS = "weights"


class Interpolation(str, Enum):
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBICSPLINE = "CUBICSPLINE"


class TextureSlot(str, Enum):
    """Material slots that may reference a texture."""

    BASE_COLOR = "baseColor"
    METALLIC_ROUGHNESS = "metallicRoughness"
    NORMAL = "normal"
    OCCLUSION = "occlusion"
    EMISSIVE = "emissive"


class Semantic:
    """Well-known vertex attribute semantics."""

    POSITION = "POSITION"
    NORMAL = "NORMAL"
    TANGENT = "TANGENT"

    MORPH_TARGET = (POSITION, NORMAL, TANGENT)

    @staticmethod
    def texcoord(set_index: int) -> str:
        return f"TEXCOORD_{set_index}"

    @staticmethod
    def color(set_index: int) -> str:
        return f"COLOR_{set_index}"

    @staticmethod
    def joints(set_index: int) -> str:
        return f"JOINTS_{set_index}"

    @staticmethod
    def weights(set_index: int) -> str:
        return f"WEIGHTS_{set_index}"


# Node weights


@dataclass
class DocumentWeight:
    """Root marker for a glTF document."""

    generator: Optional[str] = None
    copyright: Optional[str] = None
    extras: Any = None


@dataclass
class SceneWeight:
    name: Optional[str] = None
    extras: Any = None


@dataclass
class NodeWeight:
    name: Optional[str] = None
    translation: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec4 = (0.0, 0.0, 0.0, 1.0)
    scale: Vec3 = (1.0, 1.0, 1.0)
    weights: Optional[List[float]] = None
    extras: Any = None


@dataclass
class MeshWeight:
    name: Optional[str] = None
    weights: Optional[List[float]] = None
    extras: Any = None


@dataclass
class PrimitiveWeight:
    mode: PrimitiveMode = PrimitiveMode.TRIANGLES
    extras: Any = None


@dataclass
class MorphTargetWeight:
    """Morph targets carry no scalar fields, only attribute edges."""


@dataclass
class AccessorWeight:
    """Typed element stream; ``data`` is tightly packed little-endian bytes."""

    name: Optional[str] = None
    component_type: ComponentType = ComponentType.F32
    element_type: ElementType = ElementType.SCALAR
    normalized: bool = False
    data: bytes = b""
    extras: Any = None


@dataclass
class BufferWeight:
    """Physical byte blob.

    ``data`` holds the payload resolved on import. Export rebuilds buffer
    contents from the accessors and images that point at the buffer.
    """

    name: Optional[str] = None
    uri: Optional[str] = None
    data: bytes = b""
    extras: Any = None


@dataclass
class ImageWeight:
    name: Optional[str] = None
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    data: bytes = b""
    extras: Any = None


@dataclass
class TextureWeight:
    name: Optional[str] = None
    mag_filter: Optional[MagFilter] = None
    min_filter: Optional[MinFilter] = None
    wrap_s: WrappingMode = WrappingMode.REPEAT
    wrap_t: WrappingMode = WrappingMode.REPEAT
    extras: Any = None


@dataclass
class MaterialWeight:
    name: Optional[str] = None
    base_color_factor: Vec4 = (1.0, 1.0, 1.0, 1.0)
    metallic_factor: float = 1.0
    roughness_factor: float = 1.0
    emissive_factor: Vec3 = (0.0, 0.0, 0.0)
    alpha_mode: AlphaMode = AlphaMode.OPAQUE
    alpha_cutoff: float = 0.5
    double_sided: bool = False
    normal_scale: float = 1.0
    occlusion_strength: float = 1.0
    tex_coords: Dict[TextureSlot, int] = field(default_factory=dict)
    extras: Any = None


@dataclass
class SkinWeight:
    name: Optional[str] = None
    extras: Any = None


@dataclass
class AnimationWeight:
    name: Optional[str] = None
    extras: Any = None


@dataclass
class AnimationChannelWeight:
    path: TargetPath = TargetPath.TRANSLATION
    extras: Any = None


@dataclass
class AnimationSamplerWeight:
    interpolation: Interpolation = Interpolation.LINEAR
    extras: Any = None


@dataclass
class BytesWeight:
    """Opaque payload owned by an extension codec."""

    data: bytes = b""


__all__ = [
    "AccessorWeight",
    "AlphaMode",
    "AnimationChannelWeight",
    "AnimationSamplerWeight",
    "AnimationWeight",
    "BufferWeight",
    "BytesWeight",
    "ComponentType",
    "Direction",
    "DocumentWeight",
    "EdgeType",
    "ElementType",
    "ImageWeight",
    "Interpolation",
    "MagFilter",
    "MaterialWeight",
    "MeshWeight",
    "MinFilter",
    "MorphTargetWeight",
    "NodeWeight",
    "PrimitiveMode",
    "PrimitiveWeight",
    "Relation",
    "SceneWeight",
    "Semantic",
    "SkinWeight",
    "TargetPath",
    "TextureSlot",
    "TextureWeight",
    "WrappingMode",
]
