"""Registry of extension codecs invoked by the import/export orchestrators."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Protocol

from gltfgraph.errors import ExtensionError, GltfGraphError

if TYPE_CHECKING:
    from gltfgraph.io.context import ExportContext, ImportContext

LOGGER = logging.getLogger(__name__)


class ExtensionCodec(Protocol):
    """Capability object moving one named extension between JSON and the graph."""

    name: str

    def import_extension(self, ctx: "ImportContext") -> None:  # pragma: no cover - interface
        ...

    def export_extension(self, ctx: "ExportContext") -> bool:  # pragma: no cover - interface
        """Write the extension into ``ctx.json``; return whether it was used."""
        ...


@dataclass
class ExtensionRegistry:
    """Ordered mapping of extension name to codec.

    Codecs run in registration order on both import and export, so an
    extension that references another (a physics body pointing at shapes)
    must be registered after the one it depends on.
    """

    codecs: Dict[str, ExtensionCodec] = field(default_factory=dict)

    def register(self, codec: ExtensionCodec) -> None:
        """Register ``codec`` under its ``name``, replacing any previous codec."""

        self.codecs[codec.name] = codec

    def unregister(self, name: str) -> None:
        if name not in self.codecs:
            raise KeyError(f"Unknown extension: {name}")
        del self.codecs[name]

    def get(self, name: str) -> Optional[ExtensionCodec]:
        return self.codecs.get(name)

    def names(self) -> List[str]:
        return list(self.codecs)

    def __contains__(self, name: object) -> bool:
        return name in self.codecs

    def __iter__(self) -> Iterator[ExtensionCodec]:
        return iter(list(self.codecs.values()))

    def __len__(self) -> int:
        return len(self.codecs)

    def import_all(self, ctx: "ImportContext") -> None:
        """Run every registered codec's import step."""

        for codec in self:
            LOGGER.debug("Importing extension %s", codec.name)
            try:
                codec.import_extension(ctx)
            except GltfGraphError:
                raise
            except (KeyError, TypeError, ValueError) as exc:
                raise ExtensionError(f"{codec.name}: {exc}") from exc

    def export_all(self, ctx: "ExportContext") -> List[str]:
        """Run every registered codec's export step and return the names used."""

        used = []
        for codec in self:
            if codec.export_extension(ctx):
                ctx.use_extension(codec.name)
                used.append(codec.name)
        return used


def default_registry() -> ExtensionRegistry:
    """Return a registry holding the built-in extensions in dependency order."""

    from .omi_physics_body import OmiPhysicsBodyCodec
    from .omi_physics_shape import OmiPhysicsShapeCodec

    registry = ExtensionRegistry()
    registry.register(OmiPhysicsShapeCodec())
    registry.register(OmiPhysicsBodyCodec())
    return registry


__all__ = ["ExtensionCodec", "ExtensionRegistry", "default_registry"]
