"""Accessor codec: typed element streams over raw bytes."""

from .accessor_iter import AccessorIter, element_size, resolve_types
from .casting import ReadColors, ReadIndices, ReadJoints, ReadTexCoords, ReadWeights

__all__ = [
    "AccessorIter",
    "ReadColors",
    "ReadIndices",
    "ReadJoints",
    "ReadTexCoords",
    "ReadWeights",
    "element_size",
    "resolve_types",
]
