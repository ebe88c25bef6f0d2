"""Normalized integer conversions used by glTF accessors.

Unsigned N-bit integers map to ``v / (2**N - 1)``; signed N-bit integers map
to ``max(v / (2**(N - 1) - 1), -1.0)``. The inverse rounds to the nearest
integer and clamps to the representable range.
"""
from __future__ import annotations

import numpy as np

from gltfgraph.graph.model import ComponentType

_SIGNED = {ComponentType.I8, ComponentType.I16}


def component_max(component_type: ComponentType) -> int:
    """Largest positive integer a normalized component can hold."""

    bits = component_type.size * 8
    if component_type in _SIGNED:
        return 2 ** (bits - 1) - 1
    return 2**bits - 1


def to_float(values, component_type: ComponentType) -> np.ndarray:
    """Map normalized integers (or floats, unchanged) to ``float32``."""

    component_type = ComponentType(component_type)
    array = np.asarray(values)
    if component_type is ComponentType.F32:
        return array.astype(np.float32)
    scaled = array.astype(np.float64) / component_max(component_type)
    if component_type in _SIGNED:
        scaled = np.maximum(scaled, -1.0)
    return scaled.astype(np.float32)


def from_float(values, component_type: ComponentType) -> np.ndarray:
    """Map floats onto normalized integers of ``component_type``."""

    component_type = ComponentType(component_type)
    array = np.asarray(values, dtype=np.float64)
    if component_type is ComponentType.F32:
        return array.astype(np.float32)
    info = np.iinfo(np.dtype(component_type.dtype))
    scaled = np.rint(array * component_max(component_type))
    return np.clip(scaled, info.min, info.max).astype(component_type.dtype)


def convert(values, source: ComponentType, target: ComponentType) -> np.ndarray:
    """Re-express normalized values of ``source`` type as ``target`` type.

    Integer to integer conversions go through the float mapping, so ``255``
    as ``U8`` becomes ``65535`` as ``U16``.
    """

    source = ComponentType(source)
    target = ComponentType(target)
    if source is target:
        return np.array(values, dtype=source.dtype)
    return from_float(to_float(values, source), target)


def cast(values, target: ComponentType) -> np.ndarray:
    """Cast raw (non-normalized) values onto ``target``, keeping their magnitude.

    Floats round to the nearest integer; out-of-range values clamp to the
    target's representable range.
    """

    target = ComponentType(target)
    array = np.asarray(values)
    if target is ComponentType.F32:
        return array.astype(np.float32)
    info = np.iinfo(np.dtype(target.dtype))
    if array.dtype.kind == "f":
        array = np.rint(array)
    return np.clip(array.astype(np.float64), info.min, info.max).astype(target.dtype)


def normalize(value: int, component_type: ComponentType) -> float:
    """Scalar form of :func:`to_float`."""

    return float(to_float(np.array([value]), component_type)[0])


def denormalize(value: float, component_type: ComponentType) -> int | float:
    """Scalar form of :func:`from_float`."""

    return from_float(np.array([value]), component_type)[0].item()


__all__ = ["cast", "component_max", "convert", "denormalize", "from_float", "normalize", "to_float"]
