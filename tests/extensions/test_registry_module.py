"""Tests for :mod:`gltfgraph.extensions.registry`."""

from __future__ import annotations

import pytest

from gltfgraph.config import ImportOptions
from gltfgraph.errors import ExtensionError
from gltfgraph.extensions import ExtensionRegistry, default_registry
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf import Document
from gltfgraph.io.format import GltfFormat
from gltfgraph.io.gltf_export import export_gltf
from gltfgraph.io.gltf_import import import_gltf
from gltfgraph.obs.events import EventBus


@pytest.fixture
def anyio_backend() -> str:
    """Force the anyio plugin to use the asyncio backend only."""

    return "asyncio"


class RecordingCodec:
    """Codec stub copying a root-level payload through ``extras``."""

    name = "EXT_recording"

    def __init__(self) -> None:
        self.imported = []

    def import_extension(self, ctx) -> None:
        payload = (ctx.json.get("extensions") or {}).get(self.name)
        if payload is not None:
            self.imported.append(payload)
            ctx.doc.get().extras = {"recorded": payload}

    def export_extension(self, ctx) -> bool:
        extras = ctx.doc.get().extras or {}
        if "recorded" not in extras:
            return False
        ctx.json.setdefault("extensions", {})[self.name] = extras["recorded"]
        return True


class BrokenCodec:
    name = "EXT_broken"

    def import_extension(self, ctx) -> None:
        raise ValueError("cannot decode")

    def export_extension(self, ctx) -> bool:
        return False


def test_default_registry_orders_shapes_before_bodies():
    registry = default_registry()

    assert registry.names() == ["OMI_physics_shape", "OMI_physics_body"]
    assert "OMI_physics_body" in registry
    assert len(registry) == 2


def test_register_replaces_and_unregister_removes():
    registry = ExtensionRegistry()
    first, second = RecordingCodec(), RecordingCodec()

    registry.register(first)
    registry.register(second)
    assert registry.get("EXT_recording") is second
    assert list(registry) == [second]

    registry.unregister("EXT_recording")
    assert registry.get("EXT_recording") is None
    with pytest.raises(KeyError):
        registry.unregister("EXT_recording")


@pytest.mark.anyio("asyncio")
async def test_custom_codec_round_trip():
    codec = RecordingCodec()
    registry = ExtensionRegistry()
    registry.register(codec)
    events = EventBus()
    store = GraphStore()
    source = {
        "asset": {"version": "2.0"},
        "extensionsUsed": ["EXT_recording"],
        "extensions": {"EXT_recording": {"value": 3}},
    }

    doc = await import_gltf(store, GltfFormat(source), registry=registry, events=events, options=ImportOptions())
    exported = export_gltf(store, doc, registry=registry).json

    assert codec.imported == [{"value": 3}]
    assert events.warnings() == ()
    assert exported["extensionsUsed"] == ["EXT_recording"]
    assert exported["extensions"] == {"EXT_recording": {"value": 3}}


@pytest.mark.anyio("asyncio")
async def test_codec_failures_are_wrapped():
    registry = ExtensionRegistry()
    registry.register(BrokenCodec())

    with pytest.raises(ExtensionError, match="EXT_broken"):
        await import_gltf(
            GraphStore(), GltfFormat({"asset": {"version": "2.0"}}), registry=registry, options=ImportOptions()
        )


def test_export_without_extensions_leaves_json_clean():
    store = GraphStore()
    doc = Document.new(store)

    exported = export_gltf(store, doc, registry=default_registry()).json

    assert exported == {"asset": {"version": "2.0", "generator": "gltfgraph"}}
