"""Element streams decoded from raw accessor bytes."""
from __future__ import annotations

from typing import Iterator, List, Sequence, Union

import numpy as np

from gltfgraph.errors import ElementCountError, UnsupportedTypeError
from gltfgraph.graph.model import ComponentType, ElementType

from . import normalize as _normalize

Element = Union[int, float, tuple]

_VECTOR_TYPES = (ElementType.SCALAR, ElementType.VEC2, ElementType.VEC3, ElementType.VEC4)


def resolve_types(component_type, element_type) -> tuple[ComponentType, ElementType]:
    """Validate and coerce a component/element type pairing.

    Every component type may be used with ``SCALAR`` to ``VEC4``; only floats
    may form ``MAT4``. Anything else raises :class:`UnsupportedTypeError`.
    """

    try:
        component = ComponentType(component_type)
        element = ElementType(element_type)
    except ValueError:
        raise UnsupportedTypeError(component_type, element_type) from None
    if element in _VECTOR_TYPES:
        return component, element
    if element is ElementType.MAT4 and component is ComponentType.F32:
        return component, element
    raise UnsupportedTypeError(component.name, element.value)


def element_size(component_type, element_type) -> int:
    component, element = resolve_types(component_type, element_type)
    return component.size * element.multiplicity


class AccessorIter:
    """Typed view over little-endian accessor bytes.

    Elements are yielded as Python scalars for ``SCALAR`` data and tuples for
    vectors and matrices. The raw values are exposed as stored; use
    :meth:`to_float_array` to apply the normalized integer mapping.
    """

    def __init__(
        self,
        data: bytes,
        component_type: ComponentType,
        element_type: ElementType,
        normalized: bool = False,
    ) -> None:
        self.component_type, self.element_type = resolve_types(component_type, element_type)
        self.normalized = normalized
        size = self.component_type.size * self.element_type.multiplicity
        if len(data) % size:
            raise ElementCountError(len(data), size)
        self._data = bytes(data)
        self._array = np.frombuffer(self._data, dtype=self.component_type.dtype).reshape(
            -1, self.element_type.multiplicity
        )

    @classmethod
    def from_array(
        cls,
        values,
        component_type: ComponentType,
        element_type: ElementType,
        normalized: bool = False,
    ) -> "AccessorIter":
        """Encode ``values`` (nested sequences or an ndarray) as accessor bytes."""

        component, element = resolve_types(component_type, element_type)
        array = np.asarray(values)
        width = element.multiplicity
        if array.size % width:
            raise ElementCountError(array.size * component.size, width * component.size)
        if normalized and array.dtype.kind == "f" and not component.is_float:
            encoded = _normalize.from_float(array, component)
        else:
            encoded = array.astype(component.dtype)
        return cls(encoded.reshape(-1, width).tobytes(), component, element, normalized)

    @property
    def count(self) -> int:
        return int(self._array.shape[0])

    @property
    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Element]:
        for row in self._array:
            yield self._element(row)

    def __getitem__(self, position: int) -> Element:
        return self._element(self._array[position])

    def _element(self, row: np.ndarray) -> Element:
        values = row.tolist()
        if self.element_type is ElementType.SCALAR:
            return values[0]
        return tuple(values)

    def to_array(self) -> np.ndarray:
        """Return a ``(count, multiplicity)`` copy of the stored components."""

        return self._array.copy()

    def to_float_array(self) -> np.ndarray:
        """Return components as ``float32``, applying normalization when flagged."""

        if self.normalized:
            return _normalize.to_float(self._array, self.component_type)
        return self._array.astype(np.float32)

    def min(self) -> List[Union[int, float]]:
        """Per-component minimum; empty when there are no elements."""

        if not self.count:
            return []
        return self._array.min(axis=0).tolist()

    def max(self) -> List[Union[int, float]]:
        """Per-component maximum; empty when there are no elements."""

        if not self.count:
            return []
        return self._array.max(axis=0).tolist()

    def as_type(self, component_type: ComponentType) -> "AccessorIter":
        """Cast the values onto another component type.

        Normalized streams keep their meaning through the normalized mapping;
        plain streams keep their magnitude, clamped to the target's range.
        """

        component = ComponentType(component_type)
        if self.normalized:
            converted = _normalize.convert(self._array, self.component_type, component)
        else:
            converted = _normalize.cast(self._array, component)
        return AccessorIter(converted.tobytes(), component, self.element_type, self.normalized)


def decode(data: bytes, component_type, element_type, normalized: bool = False) -> List[Element]:
    return list(AccessorIter(data, component_type, element_type, normalized))


def encode(values: Sequence, component_type, element_type, normalized: bool = False) -> bytes:
    return AccessorIter.from_array(values, component_type, element_type, normalized).data


__all__ = ["AccessorIter", "decode", "element_size", "encode", "resolve_types"]
