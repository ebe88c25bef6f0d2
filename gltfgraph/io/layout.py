"""Buffer and buffer view layout: packing on export, slicing on import."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from gltfgraph.codec.accessor_iter import resolve_types
from gltfgraph.errors import (
    ExceedsLengthError,
    FormatError,
    InvalidAccessorError,
    InvalidIndexError,
)
from gltfgraph.graph.model import ComponentType, Direction, EdgeType, ElementType
from gltfgraph.gltf.buffer import Buffer
from gltfgraph.gltf.document import Document

from .context import is_index

LOGGER = logging.getLogger(__name__)

ALIGNMENT = 4
SPARSE_INDEX_TYPES = (ComponentType.U8, ComponentType.U16, ComponentType.U32)


def align(length: int, alignment: int = ALIGNMENT) -> int:
    """Round ``length`` up to the next multiple of ``alignment``."""

    return (length + alignment - 1) // alignment * alignment


class BufferPacker:
    """Append payloads to per-buffer byte arrays and record buffer views.

    Every payload starts on a 4-byte boundary. Views are numbered in the
    order payloads were added.
    """

    def __init__(self) -> None:
        self._blobs: Dict[int, bytearray] = {}
        self.views: List[Dict[str, Any]] = []

    def add(
        self,
        buffer_index: int,
        data: bytes,
        *,
        target: Optional[int] = None,
        byte_stride: Optional[int] = None,
    ) -> int:
        """Append ``data`` to buffer ``buffer_index`` and return the new view index."""

        blob = self._blobs.setdefault(buffer_index, bytearray())
        blob.extend(b"\x00" * (align(len(blob)) - len(blob)))
        offset = len(blob)
        blob.extend(data)

        view: Dict[str, Any] = {"buffer": buffer_index, "byteLength": len(data)}
        if offset:
            view["byteOffset"] = offset
        if byte_stride:
            view["byteStride"] = byte_stride
        if target is not None:
            view["target"] = target
        self.views.append(view)
        return len(self.views) - 1

    def buffer_bytes(self, buffer_index: int) -> bytes:
        return bytes(self._blobs.get(buffer_index, b""))

    def byte_length(self, buffer_index: int) -> int:
        return len(self._blobs.get(buffer_index, b""))


def _int_field(record: Dict[str, Any], key: str, what: str, default: Optional[int] = None) -> int:
    value = record.get(key, default)
    if not is_index(value) or value < 0:
        raise FormatError(f"{what}.{key} must be a non-negative integer, got {value!r}")
    return value


def lookup(items: Sequence[Any], index: Any, collection: str) -> Any:
    if not is_index(index) or not 0 <= index < len(items):
        raise InvalidIndexError(collection, index, len(items))
    return items[index]


def read_buffer_view(view: Dict[str, Any], buffers: Sequence[bytes]) -> bytes:
    """Return the bytes a buffer view covers within its buffer."""

    if not isinstance(view, dict):
        raise FormatError("bufferView must be a JSON object")
    data = lookup(buffers, view.get("buffer"), "buffers")
    offset = _int_field(view, "byteOffset", "bufferView", 0)
    length = _int_field(view, "byteLength", "bufferView")
    end = offset + length
    if end > len(data):
        raise ExceedsLengthError(end, len(data), "buffer")
    return data[offset:end]


def accessor_types(accessor: Dict[str, Any]) -> tuple[ComponentType, ElementType]:
    """Parse and validate an accessor's component and element types."""

    try:
        component = ComponentType(accessor.get("componentType"))
        element = ElementType(accessor.get("type"))
    except ValueError:
        raise InvalidAccessorError(
            f"invalid accessor type {accessor.get('componentType')!r} {accessor.get('type')!r}"
        ) from None
    return resolve_types(component, element)


def _strided(data: bytes, offset: int, count: int, item_size: int, stride: int, what: str) -> bytes:
    if count == 0:
        return b""
    if stride in (0, item_size):
        end = offset + count * item_size
        if end > len(data):
            raise ExceedsLengthError(end, len(data), what)
        return bytes(data[offset:end])
    if stride < item_size:
        raise FormatError(f"byteStride {stride} is smaller than element size {item_size}")
    end = offset + stride * (count - 1) + item_size
    if end > len(data):
        raise ExceedsLengthError(end, len(data), what)
    return b"".join(data[start : start + item_size] for start in range(offset, end, stride))


def read_accessor(
    accessor: Dict[str, Any], views: Sequence[Dict[str, Any]], buffers: Sequence[bytes]
) -> bytes:
    """Return the tightly packed bytes of ``accessor``.

    Interleaved views (``byteStride`` larger than the element) are gathered
    element by element. Sparse accessors are reconstructed on top of their
    base data. Accessors without a view are all zeros.
    """

    component, element = accessor_types(accessor)
    item_size = component.size * element.multiplicity
    count = _int_field(accessor, "count", "accessor")

    if "sparse" in accessor:
        return read_sparse_accessor(accessor, views, buffers)

    view_index = accessor.get("bufferView")
    if view_index is None:
        return bytes(count * item_size)

    view = lookup(views, view_index, "bufferViews")
    data = read_buffer_view(view, buffers)
    offset = _int_field(accessor, "byteOffset", "accessor", 0)
    stride = _int_field(view, "byteStride", "bufferView", 0)
    return _strided(data, offset, count, item_size, stride, "buffer view")


def read_sparse_accessor(
    accessor: Dict[str, Any], views: Sequence[Dict[str, Any]], buffers: Sequence[bytes]
) -> bytes:
    """Reconstruct a sparse accessor: base bytes (or zeros) plus indexed overrides."""

    component, element = accessor_types(accessor)
    item_size = component.size * element.multiplicity
    count = _int_field(accessor, "count", "accessor")

    if accessor.get("bufferView") is None:
        base = bytearray(count * item_size)
    else:
        dense = dict(accessor)
        del dense["sparse"]
        base = bytearray(read_accessor(dense, views, buffers))

    sparse = accessor["sparse"]
    if not isinstance(sparse, dict):
        raise InvalidAccessorError("accessor.sparse must be an object")
    sparse_count = _int_field(sparse, "count", "accessor.sparse")
    indices = sparse.get("indices")
    values = sparse.get("values")
    if not isinstance(indices, dict) or not isinstance(values, dict):
        raise InvalidAccessorError("accessor.sparse requires indices and values objects")

    try:
        index_type = ComponentType(indices.get("componentType"))
    except ValueError:
        index_type = None
    if index_type not in SPARSE_INDEX_TYPES:
        raise InvalidAccessorError(f"invalid sparse index type {indices.get('componentType')!r}")

    index_view = read_buffer_view(lookup(views, indices.get("bufferView"), "bufferViews"), buffers)
    index_bytes = _strided(
        index_view,
        _int_field(indices, "byteOffset", "accessor.sparse.indices", 0),
        sparse_count,
        index_type.size,
        0,
        "sparse indices view",
    )
    value_view = read_buffer_view(lookup(views, values.get("bufferView"), "bufferViews"), buffers)
    value_bytes = _strided(
        value_view,
        _int_field(values, "byteOffset", "accessor.sparse.values", 0),
        sparse_count,
        item_size,
        0,
        "sparse values view",
    )

    targets = np.frombuffer(index_bytes, dtype=index_type.dtype)
    for position, target in enumerate(targets.tolist()):
        if target >= count:
            raise InvalidIndexError("accessor.sparse.indices", target, count)
        start = target * item_size
        base[start : start + item_size] = value_bytes[position * item_size : (position + 1) * item_size]
    return bytes(base)


def merge_buffers(doc: Document) -> Buffer:
    """Fold every buffer of ``doc`` into its first buffer.

    Accessor and image edges pointing at secondary buffers are re-pointed at
    the first one and the secondary buffer nodes are removed. Accessors and
    images without a buffer are assigned to it; a buffer is created when the
    document has none.
    """

    store = doc.store
    buffers = doc.buffers()
    primary = buffers[0] if buffers else doc.create_buffer()

    for extra in buffers[1:]:
        for relation, source, _ in list(store.edges_from(extra.index, Direction.INCOMING)):
            if relation.kind in (EdgeType.ACCESSOR_BUFFER, EdgeType.IMAGE_BUFFER):
                store.add_edge(source, primary.index, relation)
        LOGGER.debug("Merging buffer %s into buffer %s", extra.index, primary.index)
        extra.remove()

    for accessor in doc.accessors():
        if accessor.buffer() is None:
            accessor.set_buffer(primary)
    for image in doc.images():
        if image.buffer() is None:
            image.set_buffer(primary)
    return primary


__all__ = [
    "ALIGNMENT",
    "BufferPacker",
    "accessor_types",
    "align",
    "lookup",
    "merge_buffers",
    "read_accessor",
    "read_buffer_view",
    "read_sparse_accessor",
]
