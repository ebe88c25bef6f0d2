"""In-memory form of a ``.gltf`` document: JSON root plus named resources."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from gltfgraph.errors import FormatError


@dataclass
class GltfFormat:
    """A parsed glTF JSON root and the binary resources it refers to.

    ``resources`` maps a URI (or ``"bin"`` for the binary container chunk) to
    its bytes.
    """

    json: Dict[str, Any]
    resources: Dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def from_bytes(cls, data: bytes, resources: Optional[Dict[str, bytes]] = None) -> "GltfFormat":
        """Parse UTF-8 JSON ``data``."""

        try:
            root = json.loads(data)
        except (UnicodeDecodeError, ValueError) as exc:
            raise FormatError(f"invalid glTF JSON: {exc}") from exc
        if not isinstance(root, dict):
            raise FormatError("glTF root must be a JSON object")
        return cls(json=root, resources=dict(resources or {}))

    def to_bytes(self, *, indent: Optional[int] = None) -> bytes:
        """Serialize the JSON root; resources are not included."""

        if indent is None:
            return json.dumps(self.json, separators=(",", ":")).encode("utf-8")
        return json.dumps(self.json, indent=indent).encode("utf-8")


__all__ = ["GltfFormat"]
