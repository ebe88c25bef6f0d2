"""Binary glTF (``.glb``) container: framing plus import and export helpers."""
from __future__ import annotations

import json
import logging
import struct
from typing import Any, Dict, Optional, Tuple

from gltfgraph.config import ImportOptions
from gltfgraph.errors import GlbError
from gltfgraph.extensions.registry import ExtensionRegistry
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf.document import Document
from gltfgraph.obs.events import EventBus

from .format import GltfFormat
from .gltf_export import export_gltf
from .gltf_import import import_gltf
from .layout import align, merge_buffers
from .resolver import Resolver

LOGGER = logging.getLogger(__name__)

MAGIC = b"glTF"
VERSION = 2
CHUNK_JSON = 0x4E4F534A
CHUNK_BIN = 0x004E4942
HEADER = struct.Struct("<4sII")
CHUNK_HEADER = struct.Struct("<II")
BIN_RESOURCE = "bin"


def _pad(data: bytes, fill: bytes) -> bytes:
    return data + fill * (align(len(data)) - len(data))


def parse_glb(data: bytes) -> Tuple[Dict[str, Any], Optional[bytes]]:
    """Split a GLB container into its JSON root and optional BIN chunk."""

    if len(data) < HEADER.size:
        raise GlbError("file is too short for a GLB header")
    magic, version, length = HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise GlbError(f"bad magic {magic!r}")
    if version != VERSION:
        raise GlbError(f"unsupported GLB version {version}")
    if length > len(data):
        raise GlbError(f"header declares {length} bytes but only {len(data)} are present")

    chunks = []
    offset = HEADER.size
    while offset < length:
        if offset + CHUNK_HEADER.size > length:
            raise GlbError("truncated chunk header")
        chunk_length, chunk_type = CHUNK_HEADER.unpack_from(data, offset)
        start = offset + CHUNK_HEADER.size
        end = start + chunk_length
        if end > length:
            raise GlbError(f"chunk of {chunk_length} bytes runs past the end of the file")
        chunks.append((chunk_type, data[start:end]))
        offset = align(end)

    if not chunks or chunks[0][0] != CHUNK_JSON:
        raise GlbError("first chunk must be JSON")
    try:
        root = json.loads(chunks[0][1].decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise GlbError(f"invalid JSON chunk: {exc}") from exc
    if not isinstance(root, dict):
        raise GlbError("JSON chunk must hold an object")

    binary = None
    for chunk_type, payload in chunks[1:]:
        if chunk_type == CHUNK_BIN:
            binary = bytes(payload)
            break
        LOGGER.debug("Ignoring GLB chunk of type 0x%08X", chunk_type)
    return root, binary


def build_glb(root: Dict[str, Any], binary: Optional[bytes] = None) -> bytes:
    """Frame ``root`` and ``binary`` as a GLB container."""

    json_chunk = _pad(json.dumps(root, separators=(",", ":")).encode("utf-8"), b" ")
    parts = [CHUNK_HEADER.pack(len(json_chunk), CHUNK_JSON), json_chunk]
    if binary is not None:
        bin_chunk = _pad(binary, b"\x00")
        parts += [CHUNK_HEADER.pack(len(bin_chunk), CHUNK_BIN), bin_chunk]
    body = b"".join(parts)
    return HEADER.pack(MAGIC, VERSION, HEADER.size + len(body)) + body


def export_glb(
    store: GraphStore,
    doc: Document,
    *,
    registry: Optional[ExtensionRegistry] = None,
    events: Optional[EventBus] = None,
) -> bytes:
    """Serialize ``doc`` as a GLB container with a single binary buffer.

    Buffers are merged on a copy of ``store``; the caller's graph is left
    untouched. Every accessor and image ends up in the binary chunk.
    """

    working = store.copy()
    working_doc = Document(working, doc.index)
    merge_buffers(working_doc)
    result = export_gltf(working, working_doc, registry=registry, events=events)

    root = result.json
    binary: Optional[bytes] = None
    buffers = root.get("buffers", [])
    if buffers:
        uri = buffers[0].pop("uri", None)
        binary = result.resources.get(uri, b"") if uri is not None else b""
        if not binary and not root.get("bufferViews"):
            del root["buffers"]
            binary = None
    return build_glb(root, binary)


async def import_glb(
    store: GraphStore,
    data: bytes,
    resolver: Optional[Resolver] = None,
    *,
    registry: Optional[ExtensionRegistry] = None,
    events: Optional[EventBus] = None,
    options: Optional[ImportOptions] = None,
) -> Document:
    """Parse a GLB container and import it into ``store``."""

    root, binary = parse_glb(data)
    resources = {BIN_RESOURCE: binary} if binary is not None else {}
    return await import_gltf(
        store,
        GltfFormat(json=root, resources=resources),
        resolver,
        registry=registry,
        events=events,
        options=options,
    )


__all__ = [
    "BIN_RESOURCE",
    "CHUNK_BIN",
    "CHUNK_JSON",
    "build_glb",
    "export_glb",
    "import_glb",
    "parse_glb",
]
