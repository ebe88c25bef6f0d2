"""Semantic casting views over accessor element streams.

Each reader accepts the component types glTF allows for one vertex semantic
and reinterprets them as a caller-chosen representation. Index and joint
readers widen integers as-is; weight, color and texture coordinate readers go
through the normalized integer mapping.
"""
from __future__ import annotations

from typing import List, Tuple

import numpy as np

from gltfgraph.errors import UnsupportedTypeError
from gltfgraph.graph.model import ComponentType, ElementType

from . import normalize as _normalize
from .accessor_iter import AccessorIter

U8, U16, U32, F32 = ComponentType.U8, ComponentType.U16, ComponentType.U32, ComponentType.F32


class _SemanticReader:
    COMPONENTS: Tuple[ComponentType, ...] = ()
    ELEMENTS: Tuple[ElementType, ...] = ()

    def __init__(self, source: AccessorIter) -> None:
        if source.component_type not in self.COMPONENTS or source.element_type not in self.ELEMENTS:
            raise UnsupportedTypeError(source.component_type.name, source.element_type.value)
        self.source = source

    @classmethod
    def from_bytes(cls, data: bytes, component_type, element_type, normalized: bool = False):
        return cls(AccessorIter(data, component_type, element_type, normalized))

    def __len__(self) -> int:
        return self.source.count

    def _cast(self, target: ComponentType) -> np.ndarray:
        return _normalize.convert(self.source.to_array(), self.source.component_type, target)


def _rows(array: np.ndarray) -> List[tuple]:
    return [tuple(row) for row in array.tolist()]


class ReadIndices(_SemanticReader):
    """Primitive indices stored as ``U8``, ``U16`` or ``U32`` scalars."""

    COMPONENTS = (U8, U16, U32)
    ELEMENTS = (ElementType.SCALAR,)

    def into_u32(self) -> List[int]:
        return self.source.to_array().astype(np.uint32).ravel().tolist()


class ReadJoints(_SemanticReader):
    """Skin joint indices stored as ``U8`` or ``U16`` quadruples."""

    COMPONENTS = (U8, U16)
    ELEMENTS = (ElementType.VEC4,)

    def into_u16(self) -> List[tuple]:
        """Widen to ``U16``, which can address any joint."""

        return _rows(self.source.to_array().astype(np.uint16))


class ReadWeights(_SemanticReader):
    """Skin weights stored as normalized ``U8``/``U16`` or ``F32`` quadruples."""

    COMPONENTS = (U8, U16, F32)
    ELEMENTS = (ElementType.VEC4,)

    def into_u8(self) -> List[tuple]:
        return _rows(self._cast(U8))

    def into_u16(self) -> List[tuple]:
        return _rows(self._cast(U16))

    def into_f32(self) -> List[tuple]:
        return _rows(self._cast(F32))


class ReadTexCoords(_SemanticReader):
    """Texture coordinates stored as normalized ``U8``/``U16`` or ``F32`` pairs."""

    COMPONENTS = (U8, U16, F32)
    ELEMENTS = (ElementType.VEC2,)

    def into_u8(self) -> List[tuple]:
        return _rows(self._cast(U8))

    def into_u16(self) -> List[tuple]:
        return _rows(self._cast(U16))

    def into_f32(self) -> List[tuple]:
        return _rows(self._cast(F32))


class ReadColors(_SemanticReader):
    """Vertex colors stored as RGB or RGBA in ``U8``, ``U16`` or ``F32``.

    Dropping to RGB discards alpha. Widening to RGBA fills alpha with the
    opaque value of the target type (``255``, ``65535`` or ``1.0``).
    """

    COMPONENTS = (U8, U16, F32)
    ELEMENTS = (ElementType.VEC3, ElementType.VEC4)

    def is_rgba(self) -> bool:
        return self.source.element_type is ElementType.VEC4

    def _rgb(self, target: ComponentType) -> np.ndarray:
        return self._cast(target)[:, :3]

    def _rgba(self, target: ComponentType) -> np.ndarray:
        cast = self._cast(target)
        if self.is_rgba():
            return cast
        opaque = 1.0 if target is F32 else _normalize.component_max(target)
        alpha = np.full((cast.shape[0], 1), opaque, dtype=cast.dtype)
        return np.concatenate([cast, alpha], axis=1)

    def into_rgb_u8(self) -> List[tuple]:
        return _rows(self._rgb(U8))

    def into_rgb_u16(self) -> List[tuple]:
        return _rows(self._rgb(U16))

    def into_rgb_f32(self) -> List[tuple]:
        return _rows(self._rgb(F32))

    def into_rgba_u8(self) -> List[tuple]:
        return _rows(self._rgba(U8))

    def into_rgba_u16(self) -> List[tuple]:
        return _rows(self._rgba(U16))

    def into_rgba_f32(self) -> List[tuple]:
        return _rows(self._rgba(F32))


__all__ = ["ReadColors", "ReadIndices", "ReadJoints", "ReadTexCoords", "ReadWeights"]
