"""Tests for :mod:`gltfgraph.api`."""

from __future__ import annotations

import json

import pytest

from gltfgraph import GltfToolkit
from gltfgraph.config import ImportOptions
from gltfgraph.errors import FormatError
from gltfgraph.graph.model import ComponentType, ElementType
from gltfgraph.gltf import Accessor
from gltfgraph.io.format import GltfFormat
from gltfgraph.io.glb import parse_glb


def make_toolkit() -> GltfToolkit:
    return GltfToolkit(options=ImportOptions())


def populate(toolkit: GltfToolkit):
    doc = toolkit.new_document()
    buffer = doc.create_buffer("data")
    accessor = Accessor.from_array(toolkit.store, [[0.0, 1.0], [2.0, 3.0]], ComponentType.F32, ElementType.VEC2)
    doc.add_accessor(accessor)
    accessor.set_buffer(buffer)
    node = doc.create_node("origin")
    scene = doc.create_scene("main")
    scene.add_node(node)
    doc.set_default_scene(scene)
    return doc


def test_read_gltf_accepts_mapping_text_and_bytes():
    toolkit = make_toolkit()
    root = {"asset": {"version": "2.0"}, "nodes": [{"name": "a"}]}

    from_mapping = toolkit.read_gltf(root)
    from_text = toolkit.read_gltf(json.dumps(root))
    from_bytes = toolkit.read_gltf(json.dumps(root).encode("utf-8"))

    for doc in (from_mapping, from_text, from_bytes):
        assert [node.get().name for node in doc.nodes()] == ["a"]
    assert from_mapping != from_text
    assert toolkit.events.warnings() == ()


def test_read_gltf_merges_extra_resources():
    toolkit = make_toolkit()
    source = GltfFormat(
        {
            "asset": {"version": "2.0"},
            "buffers": [{"uri": "data.bin", "byteLength": 4}],
        }
    )

    doc = toolkit.read_gltf(source, {"data.bin": b"\x01\x02\x03\x04"})

    assert doc.buffers()[0].get().data == b"\x01\x02\x03\x04"


def test_write_and_read_glb():
    toolkit = make_toolkit()
    doc = populate(toolkit)

    data = toolkit.write_glb(doc)
    root, binary = parse_glb(data)
    again = make_toolkit().read_glb(data)

    assert root["scene"] == 0
    assert len(binary) == 16
    assert list(again.accessors()[0].iter()) == [(0.0, 1.0), (2.0, 3.0)]


def test_save_and_load_gltf(tmp_path):
    toolkit = make_toolkit()
    doc = populate(toolkit)

    written = toolkit.save(doc, tmp_path / "out" / "model.gltf")

    assert sorted(written) == ["buffer_0.bin", "model.gltf"]
    assert written["buffer_0.bin"].read_bytes() == toolkit.write_gltf(doc).resources["buffer_0.bin"]

    loaded = make_toolkit().load(tmp_path / "out" / "model.gltf")
    assert loaded.default_scene().nodes()[0].get().name == "origin"
    assert list(loaded.accessors()[0].iter()) == [(0.0, 1.0), (2.0, 3.0)]


def test_save_and_load_glb(tmp_path):
    toolkit = make_toolkit()
    doc = populate(toolkit)

    written = toolkit.save(doc, tmp_path / "model.glb")

    assert list(written) == ["model.glb"]
    loaded = make_toolkit().load(written["model.glb"])
    assert [node.get().name for node in loaded.nodes()] == ["origin"]
    assert len(loaded.buffers()) == 1


def test_load_reports_missing_resources(tmp_path):
    path = tmp_path / "broken.gltf"
    path.write_text(json.dumps({"asset": {"version": "2.0"}, "buffers": [{"uri": "gone.bin", "byteLength": 4}]}))
    toolkit = make_toolkit()

    toolkit.load(path)

    assert [event.stage for event in toolkit.events.warnings()] == ["buffers"]


@pytest.mark.parametrize("payload", [b"[]", b"{not json"])
def test_read_gltf_rejects_invalid_json(payload):
    with pytest.raises(FormatError):
        make_toolkit().read_gltf(payload)
