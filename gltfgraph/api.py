"""Public API surface for gltfgraph."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Dict, Mapping, Optional, TypeVar, Union

from gltfgraph.config import ImportOptions
from gltfgraph.extensions.registry import ExtensionRegistry, default_registry
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf.document import Document
from gltfgraph.io.format import GltfFormat
from gltfgraph.io.glb import export_glb, import_glb
from gltfgraph.io.gltf_export import export_gltf
from gltfgraph.io.gltf_import import import_gltf
from gltfgraph.io.resolver import FileResolver, Resolver
from gltfgraph.obs.events import EventBus

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

GltfSource = Union[bytes, str, Mapping[str, Any], GltfFormat]


def _run_sync(coro: Awaitable[T]) -> T:
    """Execute ``coro`` synchronously with a defensive event-loop guard."""

    try:
        return asyncio.run(coro)
    except RuntimeError as exc:  # pragma: no cover - running loop edge case
        if "asyncio.run() cannot be called" in str(exc):
            raise RuntimeError(
                "GltfToolkit cannot read synchronously because an event loop is already running. "
                "Await the async variant (aread_gltf / aread_glb) instead."
            ) from exc
        raise


def _as_format(source: GltfSource, resources: Optional[Mapping[str, bytes]]) -> GltfFormat:
    if isinstance(source, GltfFormat):
        if resources:
            return GltfFormat(json=source.json, resources={**source.resources, **resources})
        return source
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        return GltfFormat.from_bytes(bytes(source), dict(resources or {}))
    return GltfFormat(json=dict(source), resources=dict(resources or {}))


@dataclass
class GltfToolkit:
    """Container wiring a graph store, event bus, extension registry and resolver."""

    store: GraphStore = field(default_factory=GraphStore)
    events: EventBus = field(default_factory=EventBus)
    registry: ExtensionRegistry = field(default_factory=default_registry)
    resolver: Optional[Resolver] = None
    options: ImportOptions = field(default_factory=ImportOptions.from_env)

    def new_document(self) -> Document:
        """Create an empty document in the toolkit's store."""

        return Document.new(self.store)

    async def aread_gltf(
        self,
        source: GltfSource,
        resources: Optional[Mapping[str, bytes]] = None,
        *,
        resolver: Optional[Resolver] = None,
    ) -> Document:
        return await import_gltf(
            self.store,
            _as_format(source, resources),
            resolver if resolver is not None else self.resolver,
            registry=self.registry,
            events=self.events,
            options=self.options,
        )

    async def aread_glb(self, data: bytes, *, resolver: Optional[Resolver] = None) -> Document:
        return await import_glb(
            self.store,
            data,
            resolver if resolver is not None else self.resolver,
            registry=self.registry,
            events=self.events,
            options=self.options,
        )

    def read_gltf(
        self,
        source: GltfSource,
        resources: Optional[Mapping[str, bytes]] = None,
        *,
        resolver: Optional[Resolver] = None,
    ) -> Document:
        """Import a ``.gltf`` document given as bytes, text, a JSON mapping or a :class:`GltfFormat`."""

        return _run_sync(self.aread_gltf(source, resources, resolver=resolver))

    def read_glb(self, data: bytes, *, resolver: Optional[Resolver] = None) -> Document:
        """Import a ``.glb`` container."""

        return _run_sync(self.aread_glb(data, resolver=resolver))

    def write_gltf(self, doc: Document) -> GltfFormat:
        return export_gltf(self.store, doc, registry=self.registry, events=self.events)

    def write_glb(self, doc: Document) -> bytes:
        return export_glb(self.store, doc, registry=self.registry, events=self.events)

    def load(self, path: Union[str, Path]) -> Document:
        """Read a ``.gltf`` or ``.glb`` file; relative URIs resolve next to it."""

        path = Path(path)
        resolver = self.resolver if self.resolver is not None else FileResolver(path.parent)
        data = path.read_bytes()
        LOGGER.debug("Loading %s", path)
        if path.suffix.lower() == ".glb":
            return self.read_glb(data, resolver=resolver)
        return self.read_gltf(data, resolver=resolver)

    def save(self, doc: Document, path: Union[str, Path]) -> Dict[str, Path]:
        """Write ``doc`` to ``path`` and return every file written, keyed by URI.

        ``.glb`` paths produce a single container. Other paths produce the JSON
        file plus its external resources beside it.
        """

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() == ".glb":
            path.write_bytes(self.write_glb(doc))
            return {path.name: path}

        result = self.write_gltf(doc)
        written = {path.name: path}
        path.write_bytes(result.to_bytes(indent=2))
        resolver = FileResolver(path.parent)
        for uri, data in result.resources.items():
            target = resolver.path_for(uri)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            written[uri] = target
        LOGGER.debug("Saved %s with %d resources", path, len(result.resources))
        return written


__all__ = ["GltfToolkit"]
