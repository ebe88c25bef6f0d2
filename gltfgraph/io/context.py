"""State shared between orchestrator stages and extension codecs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gltfgraph.config import ImportOptions
from gltfgraph.errors import InvalidIndexError
from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf.document import Document
from gltfgraph.obs.events import EventBus


def is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class ImportContext:
    """Index maps built while importing a JSON document.

    ``entities`` maps a top-level JSON collection name (``"nodes"``,
    ``"meshes"``, ...) to the handles created for it, in JSON order. Entries
    are ``None`` where the JSON item was skipped.
    """

    store: GraphStore
    doc: Document
    json: Dict[str, Any]
    events: EventBus
    options: ImportOptions = field(default_factory=ImportOptions)
    entities: Dict[str, List[Optional[GraphNode]]] = field(default_factory=dict)

    def items(self, collection: str) -> List[Any]:
        """Return the JSON list ``collection`` (empty when absent)."""

        value = self.json.get(collection, [])
        return value if isinstance(value, list) else []

    def resolve(self, collection: str, index: Any, *, stage: str) -> Optional[GraphNode]:
        """Look up the handle created for ``collection[index]``.

        Out-of-range references are skipped with a warning, or raise
        :class:`InvalidIndexError` when the import is strict.
        """

        handles = self.entities.get(collection, [])
        if is_index(index) and 0 <= index < len(handles) and handles[index] is not None:
            return handles[index]
        if self.options.strict:
            raise InvalidIndexError(collection, index, len(handles))
        self.events.warn(
            f"skipping reference to {collection}[{index!r}]",
            stage=stage,
            collection=collection,
            index=index,
        )
        return None


@dataclass
class ExportContext:
    """Reverse index maps built while exporting a document to JSON."""

    store: GraphStore
    doc: Document
    json: Dict[str, Any]
    events: EventBus
    indices: Dict[str, Dict[GraphNode, int]] = field(default_factory=dict)

    def index_of(self, collection: str, handle: Optional[GraphNode]) -> Optional[int]:
        if handle is None:
            return None
        return self.indices.get(collection, {}).get(handle)

    def use_extension(self, name: str, *, required: bool = False) -> None:
        used = self.json.setdefault("extensionsUsed", [])
        if name not in used:
            used.append(name)
        if required:
            required_names = self.json.setdefault("extensionsRequired", [])
            if name not in required_names:
                required_names.append(name)
