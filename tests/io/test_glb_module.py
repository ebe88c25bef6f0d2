"""Tests for :mod:`gltfgraph.io.glb`."""

from __future__ import annotations

import struct

import pytest

from gltfgraph.config import ImportOptions
from gltfgraph.errors import GlbError
from gltfgraph.graph.model import ComponentType, ElementType
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf import Accessor, Document
from gltfgraph.io.glb import CHUNK_BIN, CHUNK_JSON, build_glb, export_glb, import_glb, parse_glb


@pytest.fixture
def anyio_backend() -> str:
    """Force the anyio plugin to use the asyncio backend only."""

    return "asyncio"


def chunk_headers(data: bytes):
    headers = []
    offset = 12
    while offset < len(data):
        length, kind = struct.unpack_from("<II", data, offset)
        headers.append((length, kind))
        offset += 8 + length
    return headers


def test_build_glb_frames_and_pads_chunks():
    data = build_glb({"asset": {"version": "2.0"}}, b"\x01\x02\x03")

    magic, version, length = struct.unpack_from("<4sII", data, 0)
    assert (magic, version, length) == (b"glTF", 2, len(data))
    json_length, bin_length = (header[0] for header in chunk_headers(data))
    assert [kind for _, kind in chunk_headers(data)] == [CHUNK_JSON, CHUNK_BIN]
    assert json_length % 4 == 0 and bin_length == 4
    assert data[20 + json_length - 1 : 20 + json_length] == b" "
    assert data.endswith(b"\x01\x02\x03\x00")


def test_parse_glb_round_trips_framing():
    root = {"asset": {"version": "2.0"}, "extras": {"k": "v"}}

    parsed, binary = parse_glb(build_glb(root, b"abcd"))

    assert parsed == root
    assert binary == b"abcd"
    assert parse_glb(build_glb(root)) == (root, None)


@pytest.mark.parametrize(
    "data",
    [
        b"glTF",
        struct.pack("<4sII", b"glTX", 2, 12),
        struct.pack("<4sII", b"glTF", 1, 12),
        struct.pack("<4sII", b"glTF", 2, 100),
        struct.pack("<4sII", b"glTF", 2, 12),
        struct.pack("<4sIIII", b"glTF", 2, 24, 64, CHUNK_JSON) + b"    ",
        struct.pack("<4sIIII", b"glTF", 2, 24, 4, CHUNK_BIN) + b"\x00" * 4,
        struct.pack("<4sIIII", b"glTF", 2, 24, 4, CHUNK_JSON) + b"[1] ",
    ],
)
def test_parse_glb_rejects_bad_framing(data):
    with pytest.raises(GlbError):
        parse_glb(data)


@pytest.mark.anyio("asyncio")
async def test_export_glb_merges_three_buffers_into_one():
    store = GraphStore()
    doc = Document.new(store)
    for position in range(3):
        buffer = doc.create_buffer(f"part{position}")
        accessor = Accessor.from_array(store, [float(position)] * 3, ComponentType.F32, ElementType.SCALAR)
        doc.add_accessor(accessor)
        accessor.set_buffer(buffer)

    data = export_glb(store, doc)
    root, binary = parse_glb(data)

    assert len(root["buffers"]) == 1
    assert "uri" not in root["buffers"][0]
    assert root["buffers"][0]["byteLength"] == 36
    assert len(binary) == 36
    assert {view["buffer"] for view in root["bufferViews"]} == {0}
    assert len(doc.buffers()) == 3

    imported = await import_glb(GraphStore(), data, options=ImportOptions())

    assert len(imported.buffers()) == 1
    assert [list(accessor.iter()) for accessor in imported.accessors()] == [
        list(accessor.iter()) for accessor in doc.accessors()
    ]
    assert [accessor.get().data for accessor in imported.accessors()] == [
        accessor.get().data for accessor in doc.accessors()
    ]
    assert list(imported.accessors()[2].iter()) == [2.0, 2.0, 2.0]


def test_export_glb_without_binary_data():
    store = GraphStore()
    doc = Document.new(store)
    doc.create_scene("empty")

    root, binary = parse_glb(export_glb(store, doc))

    assert binary is None
    assert "buffers" not in root
    assert root["scenes"] == [{"name": "empty", "nodes": []}]


@pytest.mark.anyio("asyncio")
async def test_glb_round_trip_embeds_images():
    store = GraphStore()
    doc = Document.new(store)
    image = doc.create_image()
    image.get().mime_type = "image/png"
    image.get().data = b"\x89PNG"
    accessor = Accessor.from_array(store, [[1, 2, 3]], ComponentType.U16, ElementType.VEC3)
    doc.add_accessor(accessor)

    data = export_glb(store, doc)
    root, _ = parse_glb(data)
    assert root["images"] == [{"bufferView": 1, "mimeType": "image/png"}]

    imported = await import_glb(GraphStore(), data, options=ImportOptions())

    assert imported.images()[0].get().data == b"\x89PNG"
    assert imported.images()[0].get().mime_type == "image/png"
    assert list(imported.accessors()[0].iter()) == [(1, 2, 3)]
    assert len(imported.buffers()) == 1


@pytest.mark.anyio("asyncio")
async def test_import_glb_uses_bin_chunk_for_uri_less_buffer():
    payload = struct.pack("<2f", 0.5, 1.5)
    root = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": 8}],
        "bufferViews": [{"buffer": 0, "byteLength": 8}],
        "accessors": [{"bufferView": 0, "componentType": 5126, "count": 2, "type": "SCALAR"}],
    }

    doc = await import_glb(GraphStore(), build_glb(root, payload), options=ImportOptions())

    assert list(doc.accessors()[0].iter()) == [0.5, 1.5]
