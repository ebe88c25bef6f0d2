"""Typed handles for every glTF entity kind."""

from .accessor import Accessor
from .animation import Animation, AnimationChannel, AnimationSampler
from .buffer import Buffer
from .document import Document
from .image import Image, extension_for_mime, guess_mime_type
from .material import Material
from .mesh import Mesh
from .morph_target import MorphTarget
from .node import Node
from .primitive import Primitive
from .scene import Scene
from .skin import Skin
from .texture import Texture

__all__ = [
    "Accessor",
    "Animation",
    "AnimationChannel",
    "AnimationSampler",
    "Buffer",
    "Document",
    "Image",
    "Material",
    "Mesh",
    "MorphTarget",
    "Node",
    "Primitive",
    "Scene",
    "Skin",
    "Texture",
    "extension_for_mime",
    "guess_mime_type",
]
