"""Extension slots: opaque byte nodes projected to typed values."""
from __future__ import annotations

import json
from typing import Any, ClassVar, Generic, TypeVar

from gltfgraph.errors import ExtensionError
from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import BytesWeight, EdgeType

V = TypeVar("V")


class ByteNode(GraphNode[BytesWeight], Generic[V]):
    """Graph node whose payload is a JSON-encoded typed value.

    Subclasses implement :meth:`decode` and :meth:`encode` to move between the
    JSON form and their value type, and :meth:`default_value` for empty nodes.
    """

    __slots__ = ()

    WEIGHT = BytesWeight

    @classmethod
    def default_value(cls) -> V:
        raise NotImplementedError

    @classmethod
    def decode(cls, payload: Any) -> V:
        raise NotImplementedError

    @classmethod
    def encode(cls, value: V) -> Any:
        raise NotImplementedError

    def read(self) -> V:
        """Decode the stored payload; an empty payload yields the default value."""

        data = self.get().data
        if not data:
            return self.default_value()
        try:
            return self.decode(json.loads(data))
        except (ValueError, TypeError, KeyError) as exc:
            raise ExtensionError(f"{type(self).__name__} payload is invalid: {exc}") from exc

    def write(self, value: V) -> None:
        self.get().data = json.dumps(self.encode(value)).encode("utf-8")


class Extension(ByteNode[V]):
    """Byte node attached to an entity under ``EXTENSION_NAME``."""

    __slots__ = ()

    EXTENSION_NAME: ClassVar[str] = ""

    def owner(self) -> GraphNode | None:
        """Return the raw handle of the entity this extension hangs off."""

        return self._find_edge_source(EdgeType.EXTENSION, GraphNode, self.EXTENSION_NAME)


def require_object(payload: Any, what: str) -> dict:
    """Return ``payload`` if it is a JSON object, else raise :class:`ExtensionError`."""

    if not isinstance(payload, dict):
        raise ExtensionError(f"{what} must be a JSON object, got {type(payload).__name__}")
    return payload


def float_list(payload: dict, key: str, default: tuple, what: str) -> tuple:
    """Read a fixed-length list of numbers, falling back to ``default``."""

    value = payload.get(key)
    if value is None:
        return default
    if (
        not isinstance(value, list)
        or len(value) != len(default)
        or not all(isinstance(item, (int, float)) and not isinstance(item, bool) for item in value)
    ):
        raise ExtensionError(f"{what}.{key} must be a list of {len(default)} numbers")
    return tuple(float(item) for item in value)


def number(payload: dict, key: str, default: float, what: str) -> float:
    value = payload.get(key, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ExtensionError(f"{what}.{key} must be a number")
    return float(value)


__all__ = ["ByteNode", "Extension", "float_list", "number", "require_object"]
