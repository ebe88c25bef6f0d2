"""Tests for :mod:`gltfgraph.io.layout`."""

from __future__ import annotations

import struct

import pytest

from gltfgraph.errors import (
    ExceedsLengthError,
    FormatError,
    InvalidAccessorError,
    InvalidIndexError,
)
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf import Document
from gltfgraph.io.layout import (
    BufferPacker,
    align,
    merge_buffers,
    read_accessor,
    read_buffer_view,
    read_sparse_accessor,
)


def test_align_rounds_up_to_four():
    assert [align(value) for value in (0, 1, 4, 5, 8)] == [0, 4, 4, 8, 8]


def test_packer_aligns_each_view():
    packer = BufferPacker()

    first = packer.add(0, b"\x01\x02\x03")
    second = packer.add(0, b"\x04\x05", target=34963)
    third = packer.add(1, b"\x06")

    assert (first, second, third) == (0, 1, 2)
    assert packer.views[1] == {"buffer": 0, "byteLength": 2, "byteOffset": 4, "target": 34963}
    assert packer.buffer_bytes(0) == b"\x01\x02\x03\x00\x04\x05"
    assert packer.byte_length(0) == 6
    assert packer.byte_length(1) == 1
    assert packer.byte_length(7) == 0


def test_read_buffer_view_bounds():
    buffers = [b"\x00" * 8]

    assert read_buffer_view({"buffer": 0, "byteOffset": 4, "byteLength": 4}, buffers) == b"\x00" * 4
    with pytest.raises(ExceedsLengthError):
        read_buffer_view({"buffer": 0, "byteOffset": 6, "byteLength": 4}, buffers)
    with pytest.raises(InvalidIndexError):
        read_buffer_view({"buffer": 3, "byteLength": 1}, buffers)
    with pytest.raises(FormatError):
        read_buffer_view({"buffer": 0, "byteLength": -1}, buffers)
    with pytest.raises(FormatError):
        read_buffer_view([0, 1], buffers)


def test_read_accessor_gathers_strided_elements():
    data = struct.pack("<HHHH", 1, 99, 2, 99)
    views = [{"buffer": 0, "byteLength": 8, "byteStride": 4}]
    accessor = {"bufferView": 0, "componentType": 5123, "type": "SCALAR", "count": 2}

    assert read_accessor(accessor, views, [data]) == struct.pack("<HH", 1, 2)


def test_read_accessor_without_view_is_zeros():
    accessor = {"componentType": 5126, "type": "VEC3", "count": 2}

    assert read_accessor(accessor, [], []) == bytes(24)


def test_read_accessor_rejects_overflow_and_bad_types():
    views = [{"buffer": 0, "byteLength": 4}]

    with pytest.raises(ExceedsLengthError):
        read_accessor({"bufferView": 0, "componentType": 5126, "type": "SCALAR", "count": 2}, views, [bytes(4)])
    with pytest.raises(InvalidAccessorError):
        read_accessor({"bufferView": 0, "componentType": 1, "type": "SCALAR", "count": 1}, views, [bytes(4)])
    with pytest.raises(InvalidIndexError):
        read_accessor({"bufferView": 5, "componentType": 5126, "type": "SCALAR", "count": 1}, views, [bytes(4)])


def test_sparse_accessor_overlays_zeros():
    buffer = struct.pack("<B", 2) + b"\x00\x00\x00" + struct.pack("<f", 9.0)
    views = [
        {"buffer": 0, "byteLength": 1},
        {"buffer": 0, "byteOffset": 4, "byteLength": 4},
    ]
    accessor = {
        "componentType": 5126,
        "type": "SCALAR",
        "count": 4,
        "sparse": {
            "count": 1,
            "indices": {"bufferView": 0, "componentType": 5121},
            "values": {"bufferView": 1},
        },
    }

    assert read_sparse_accessor(accessor, views, [buffer]) == struct.pack("<4f", 0.0, 0.0, 9.0, 0.0)
    assert read_accessor(accessor, views, [buffer]) == struct.pack("<4f", 0.0, 0.0, 9.0, 0.0)


def test_sparse_accessor_overlays_base_view():
    buffer = struct.pack("<4H", 1, 2, 3, 4) + struct.pack("<H", 1) + b"\x00\x00" + struct.pack("<H", 9)
    views = [
        {"buffer": 0, "byteLength": 8},
        {"buffer": 0, "byteOffset": 8, "byteLength": 2},
        {"buffer": 0, "byteOffset": 12, "byteLength": 2},
    ]
    accessor = {
        "bufferView": 0,
        "componentType": 5123,
        "type": "SCALAR",
        "count": 4,
        "sparse": {
            "count": 1,
            "indices": {"bufferView": 1, "componentType": 5123},
            "values": {"bufferView": 2},
        },
    }

    data = read_accessor(accessor, views, [buffer])

    assert struct.unpack("<4H", data) == (1, 9, 3, 4)


def test_sparse_indices_must_be_in_range():
    buffer = struct.pack("<B", 7) + b"\x00\x00\x00" + struct.pack("<f", 1.0)
    views = [
        {"buffer": 0, "byteLength": 1},
        {"buffer": 0, "byteOffset": 4, "byteLength": 4},
    ]
    accessor = {
        "componentType": 5126,
        "type": "SCALAR",
        "count": 2,
        "sparse": {
            "count": 1,
            "indices": {"bufferView": 0, "componentType": 5121},
            "values": {"bufferView": 1},
        },
    }

    with pytest.raises(InvalidIndexError):
        read_sparse_accessor(accessor, views, [buffer])


def test_merge_buffers_folds_into_first_buffer():
    store = GraphStore()
    doc = Document.new(store)
    buffers = [doc.create_buffer() for _ in range(3)]
    owned = doc.create_accessor()
    owned.set_buffer(buffers[2])
    orphan = doc.create_accessor()
    image = doc.create_image()
    image.set_buffer(buffers[1])

    primary = merge_buffers(doc)

    assert primary == buffers[0]
    assert doc.buffers() == [primary]
    assert owned.buffer() == primary
    assert orphan.buffer() == primary
    assert image.buffer() == primary
    assert not buffers[1].exists()


def test_merge_buffers_creates_a_buffer_when_missing():
    store = GraphStore()
    doc = Document.new(store)
    accessor = doc.create_accessor()

    primary = merge_buffers(doc)

    assert doc.buffers() == [primary]
    assert accessor.buffer() == primary
