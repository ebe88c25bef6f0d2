"""Round-trip tests for :mod:`gltfgraph.io.gltf_import` and :mod:`gltfgraph.io.gltf_export`."""

from __future__ import annotations

import pytest

from gltfgraph.config import ImportOptions
from gltfgraph.errors import FormatError, InvalidIndexError
from gltfgraph.graph.model import (
    AlphaMode,
    ComponentType,
    ElementType,
    Interpolation,
    Semantic,
    TargetPath,
    TextureSlot,
    WrappingMode,
)
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf import Accessor, Document
from gltfgraph.io.format import GltfFormat
from gltfgraph.io.gltf_export import export_gltf
from gltfgraph.io.gltf_import import import_gltf
from gltfgraph.obs.events import EventBus

LENIENT = ImportOptions(strict=False)


@pytest.fixture
def anyio_backend() -> str:
    """Force the anyio plugin to use the asyncio backend only."""

    return "asyncio"


def build_document(store: GraphStore) -> Document:
    doc = Document.new(store)
    doc.get().copyright = "test"
    buffer = doc.create_buffer("main")

    def add(values, component_type=ComponentType.F32, element_type=ElementType.SCALAR):
        accessor = Accessor.from_array(store, values, component_type, element_type)
        doc.add_accessor(accessor)
        accessor.set_buffer(buffer)
        return accessor

    positions = add([[0, 0, 0], [1, 0, 0], [0, 1, 0]], element_type=ElementType.VEC3)
    indices = add([0, 1, 2], ComponentType.U16)
    times = add([0.0, 1.0])
    offsets = add([[0, 0, 0], [0, 2, 0]], element_type=ElementType.VEC3)

    image = doc.create_image("albedo")
    image.get().uri = "albedo.png"
    image.get().data = b"\x89PNG-data"
    texture = doc.create_texture()
    texture.get().wrap_s = WrappingMode.CLAMP_TO_EDGE
    texture.set_image(image)

    material = doc.create_material("paint")
    material.get().base_color_factor = (1.0, 0.0, 0.0, 1.0)
    material.get().alpha_mode = AlphaMode.MASK
    material.get().extras = {"tag": "red"}
    material.set_texture(TextureSlot.BASE_COLOR, texture, tex_coord=1)

    mesh = doc.create_mesh("triangle")
    primitive = mesh.create_primitive()
    primitive.set_attribute(Semantic.POSITION, positions)
    primitive.set_indices(indices)
    primitive.set_material(material)

    root = doc.create_node("root")
    root.get().translation = (1.0, 2.0, 3.0)
    child = doc.create_node("child")
    child.set_mesh(mesh)
    root.add_child(child)

    skin = doc.create_skin("rig")
    skin.set_joints([root, child])
    skin.set_skeleton(root)
    child.set_skin(skin)

    scene = doc.create_scene("main")
    scene.add_node(root)
    doc.set_default_scene(scene)

    animation = doc.create_animation("bounce")
    channel = animation.create_channel()
    channel.get().path = TargetPath.TRANSLATION
    channel.set_target(child)
    sampler = channel.create_sampler()
    sampler.get().interpolation = Interpolation.STEP
    sampler.set_input(times)
    sampler.set_output(offsets)
    return doc


def test_export_writes_expected_json():
    store = GraphStore()
    doc = build_document(store)

    result = export_gltf(store, doc)
    root = result.json

    assert root["asset"] == {"version": "2.0", "generator": "gltfgraph", "copyright": "test"}
    assert root["scene"] == 0
    assert root["nodes"][0] == {"name": "root", "translation": [1.0, 2.0, 3.0], "children": [1]}
    assert root["nodes"][1] == {"name": "child", "mesh": 0, "skin": 0}
    assert root["meshes"][0]["primitives"][0] == {"attributes": {"POSITION": 0}, "indices": 1, "material": 0}
    assert root["accessors"][0]["min"] == [0.0, 0.0, 0.0]
    assert root["accessors"][0]["max"] == [1.0, 1.0, 0.0]
    assert root["bufferViews"][0]["target"] == 34962
    assert root["bufferViews"][1]["target"] == 34963
    assert root["materials"][0]["pbrMetallicRoughness"] == {
        "baseColorFactor": [1.0, 0.0, 0.0, 1.0],
        "baseColorTexture": {"index": 0, "texCoord": 1},
    }
    assert root["materials"][0]["alphaMode"] == "MASK"
    assert root["samplers"] == [{"wrapS": 33071}]
    assert root["images"][0] == {"name": "albedo", "uri": "albedo.png"}
    assert root["skins"][0] == {"name": "rig", "joints": [0, 1], "skeleton": 0}
    assert root["animations"][0]["samplers"] == [{"input": 2, "output": 3, "interpolation": "STEP"}]
    assert "extensionsUsed" not in root


def test_buffer_byte_length_matches_resource():
    store = GraphStore()
    doc = build_document(store)

    result = export_gltf(store, doc)

    buffer = result.json["buffers"][0]
    assert buffer["uri"] == "buffer_0.bin"
    assert buffer["byteLength"] == len(result.resources["buffer_0.bin"])
    for view in result.json["bufferViews"]:
        assert view.get("byteOffset", 0) % 4 == 0
        assert view.get("byteOffset", 0) + view["byteLength"] <= buffer["byteLength"]
    assert result.resources["albedo.png"] == b"\x89PNG-data"


@pytest.mark.anyio("asyncio")
async def test_round_trip_preserves_document():
    store = GraphStore()
    result = export_gltf(store, build_document(store))

    target = GraphStore()
    events = EventBus()
    source = GltfFormat.from_bytes(result.to_bytes(), result.resources)
    doc = await import_gltf(target, source, events=events, options=LENIENT)

    assert events.warnings() == ()
    root, child = doc.nodes()
    assert root.get().translation == (1.0, 2.0, 3.0)
    assert root.children() == [child]
    assert doc.default_scene().nodes() == [root]

    primitive = child.mesh().primitives()[0]
    assert list(primitive.attribute("POSITION").iter()) == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
    assert list(primitive.indices().iter()) == [0, 1, 2]
    material = primitive.material()
    assert material.get().extras == {"tag": "red"}
    assert material.tex_coord(TextureSlot.BASE_COLOR) == 1
    image = material.texture(TextureSlot.BASE_COLOR).image()
    assert image.get().data == b"\x89PNG-data"
    assert image.mime_type() == "image/png"

    assert child.skin().joints() == [root, child]
    channel = doc.animations()[0].channels()[0]
    assert channel.target() == child
    assert channel.sampler().get().interpolation is Interpolation.STEP
    assert list(channel.sampler().output().iter()) == [(0.0, 0.0, 0.0), (0.0, 2.0, 0.0)]

    again = export_gltf(target, doc)
    assert again.json == result.json


@pytest.mark.anyio("asyncio")
async def test_import_reads_data_uris_and_matrices():
    uri = "data:application/octet-stream;base64,AACAPwAAAEAAAEBA"
    json_root = {
        "asset": {"version": "2.0"},
        "buffers": [{"uri": uri, "byteLength": 12}],
        "bufferViews": [{"buffer": 0, "byteLength": 12}],
        "accessors": [{"bufferView": 0, "componentType": 5126, "count": 3, "type": "SCALAR"}],
        "nodes": [{"matrix": [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 5, 6, 7, 1]}],
    }

    store = GraphStore()
    doc = await import_gltf(store, GltfFormat(json_root), options=LENIENT)

    assert list(doc.accessors()[0].iter()) == [1.0, 2.0, 3.0]
    assert doc.buffers()[0].uri is None
    assert doc.nodes()[0].get().translation == (5.0, 6.0, 7.0)


@pytest.mark.anyio("asyncio")
async def test_invalid_references_warn_and_skip():
    json_root = {
        "asset": {"version": "2.0"},
        "nodes": [{"mesh": 4, "children": [0]}],
        "scenes": [{"nodes": [0, 9]}],
    }
    events = EventBus()

    doc = await import_gltf(GraphStore(), GltfFormat(json_root), events=events, options=LENIENT)

    node = doc.nodes()[0]
    assert node.mesh() is None
    assert node.children() == []
    assert doc.scenes()[0].nodes() == [node]
    assert len(events.warnings()) == 3


@pytest.mark.anyio("asyncio")
async def test_strict_import_raises_on_invalid_references():
    json_root = {"asset": {"version": "2.0"}, "nodes": [{"mesh": 4}]}

    with pytest.raises(InvalidIndexError):
        await import_gltf(GraphStore(), GltfFormat(json_root), options=ImportOptions(strict=True))


@pytest.mark.anyio("asyncio")
async def test_unsupported_version_is_rejected():
    with pytest.raises(FormatError):
        await import_gltf(GraphStore(), GltfFormat({"asset": {"version": "1.0"}}), options=LENIENT)


@pytest.mark.anyio("asyncio")
async def test_unresolved_buffer_is_reported():
    json_root = {"asset": {"version": "2.0"}, "buffers": [{"uri": "missing.bin", "byteLength": 4}]}
    events = EventBus()

    doc = await import_gltf(GraphStore(), GltfFormat(json_root), events=events, options=LENIENT)

    assert doc.buffers()[0].get().data == b""
    assert [event.stage for event in events.warnings()] == ["buffers"]


@pytest.mark.anyio("asyncio")
async def test_unregistered_extensions_are_reported_and_dropped():
    json_root = {
        "asset": {"version": "2.0"},
        "extensionsUsed": ["KHR_materials_unlit"],
        "materials": [{"extensions": {"KHR_materials_unlit": {}}}],
    }
    events = EventBus()
    store = GraphStore()

    doc = await import_gltf(store, GltfFormat(json_root), events=events, options=LENIENT)

    assert [event.msg for event in events.warnings()] == ["ignoring unregistered extension KHR_materials_unlit"]
    exported = export_gltf(store, doc)
    assert "extensionsUsed" not in exported.json
    assert exported.json["materials"] == [{}]


@pytest.mark.anyio("asyncio")
async def test_skin_joint_limit_only_warns():
    json_root = {
        "asset": {"version": "2.0"},
        "nodes": [{}, {}, {}],
        "skins": [{"joints": [0, 1, 2]}],
    }
    events = EventBus()

    doc = await import_gltf(
        GraphStore(), GltfFormat(json_root), events=events, options=ImportOptions(max_joints=2)
    )

    assert len(doc.skins()[0].joints()) == 3
    assert events.warnings()[0].stage == "skins"


def test_accessor_without_buffer_falls_back_to_implicit_buffer():
    store = GraphStore()
    doc = Document.new(store)
    accessor = Accessor.from_array(store, [1.0, 2.0])
    doc.add_accessor(accessor)
    events = EventBus()

    result = export_gltf(store, doc, events=events)

    assert result.json["buffers"] == [{"uri": "buffer_0.bin", "byteLength": 8}]
    assert result.json["accessors"][0]["bufferView"] == 0
    assert events.warnings()[0].stage == "accessors"


@pytest.mark.anyio("asyncio")
async def test_failing_resolver_leaves_payloads_empty():
    class MissingFiles:
        async def resolve(self, uri: str) -> bytes:
            raise FileNotFoundError(uri)

    json_root = {
        "asset": {"version": "2.0"},
        "buffers": [{"uri": "gone.bin", "byteLength": 4}],
        "images": [{"uri": "missing.png"}],
    }
    events = EventBus()

    doc = await import_gltf(GraphStore(), GltfFormat(json_root), MissingFiles(), events=events, options=LENIENT)

    assert doc.buffers()[0].get().data == b""
    image = doc.images()[0].get()
    assert image.data == b""
    assert image.uri == "missing.png"
    assert [event.stage for event in events.warnings()] == ["buffers", "images"]


@pytest.mark.anyio("asyncio")
async def test_export_omits_buffers_without_data():
    store = GraphStore()
    doc = Document.new(store)
    doc.create_buffer("unused")
    used = doc.create_buffer("used")
    accessor = Accessor.from_array(store, [1.0, 2.0])
    doc.add_accessor(accessor)
    accessor.set_buffer(used)
    events = EventBus()

    result = export_gltf(store, doc, events=events)

    assert result.json["buffers"] == [{"name": "used", "uri": "buffer_0.bin", "byteLength": 8}]
    assert result.json["bufferViews"][0]["buffer"] == 0
    assert [event.stage for event in events.warnings()] == ["buffers"]

    again = await import_gltf(GraphStore(), GltfFormat(result.json, result.resources), options=LENIENT)
    assert list(again.accessors()[0].iter()) == [1.0, 2.0]
