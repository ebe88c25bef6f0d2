"""Exception hierarchy shared by the graph, codec and IO layers."""
from __future__ import annotations


class GltfGraphError(Exception):
    """Base class for every error raised by :mod:`gltfgraph`."""


class NotFoundError(GltfGraphError, KeyError):
    """Raised when a node index is missing from (or foreign to) a store."""

    def __init__(self, index: object) -> None:
        super().__init__(f"Node {index!r} does not exist in this graph")
        self.index = index

    def __str__(self) -> str:
        return self.args[0]


class WeightTypeError(GltfGraphError, TypeError):
    """Raised when a handle is pointed at a node carrying another weight kind."""


# Codec errors


class CodecError(GltfGraphError, ValueError):
    """Base class for accessor codec failures."""


class UnsupportedTypeError(CodecError):
    """The component type / element type pairing has no defined meaning."""

    def __init__(self, component_type: object, element_type: object) -> None:
        super().__init__(f"unsupported accessor type {component_type!s} {element_type!s}")
        self.component_type = component_type
        self.element_type = element_type


# Layout errors


class LayoutError(GltfGraphError, ValueError):
    """Base class for byte range failures."""


class ExceedsLengthError(LayoutError):
    """A byte range reaches past the end of its buffer or buffer view."""

    def __init__(self, end: int, length: int, what: str = "buffer") -> None:
        super().__init__(f"byte range ending at {end} exceeds {what} length {length}")
        self.end = end
        self.length = length


class ElementCountError(LayoutError):
    """A byte length is not an integral number of elements."""

    def __init__(self, byte_length: int, element_size: int) -> None:
        super().__init__(
            f"byte length {byte_length} is not a multiple of element size {element_size}"
        )
        self.byte_length = byte_length
        self.element_size = element_size


# Format errors


class FormatError(GltfGraphError, ValueError):
    """Invalid or missing fields in a glTF document."""


class InvalidAccessorError(FormatError):
    """An accessor definition cannot be decoded."""


class InvalidIndexError(FormatError):
    """A reference points at an index that does not exist in the document."""

    def __init__(self, collection: str, index: object, length: int) -> None:
        super().__init__(f"{collection} index {index!r} is out of range (length {length})")
        self.collection = collection
        self.index = index
        self.length = length


class GlbError(FormatError):
    """The binary container framing is malformed."""


# Resolver errors


class ResolverError(GltfGraphError):
    """A URI could not be turned into bytes."""


class InvalidUriError(ResolverError):
    """The URI is not understood by the resolver it was handed to."""


# Extension errors


class ExtensionError(GltfGraphError):
    """A registered extension failed to decode or encode its payload."""


__all__ = [
    "CodecError",
    "ElementCountError",
    "ExceedsLengthError",
    "ExtensionError",
    "FormatError",
    "GlbError",
    "GltfGraphError",
    "InvalidAccessorError",
    "InvalidIndexError",
    "InvalidUriError",
    "LayoutError",
    "NotFoundError",
    "ResolverError",
    "UnsupportedTypeError",
    "WeightTypeError",
]
