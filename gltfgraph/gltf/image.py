"""Image handle."""
from __future__ import annotations

from typing import Optional

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, ImageWeight

from .buffer import Buffer

_MIME_BY_EXTENSION = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
    ".ktx2": "image/ktx2",
}

_EXTENSION_BY_MIME = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/webp": ".webp",
    "image/ktx2": ".ktx2",
}


def guess_mime_type(uri: Optional[str]) -> Optional[str]:
    """Guess an image MIME type from the extension of ``uri``."""

    if not uri or uri.startswith("data:"):
        return None
    path = uri.split("?", 1)[0].split("#", 1)[0].lower()
    for extension, mime in _MIME_BY_EXTENSION.items():
        if path.endswith(extension):
            return mime
    return None


def extension_for_mime(mime_type: Optional[str]) -> str:
    """Return the file extension used when writing an image of ``mime_type``."""

    return _EXTENSION_BY_MIME.get(mime_type or "", ".png")


class Image(GraphNode[ImageWeight]):
    """Image payload, either standalone (URI) or embedded in a buffer."""

    __slots__ = ()

    WEIGHT = ImageWeight

    def buffer(self) -> Optional[Buffer]:
        return self._find_edge_target(EdgeType.IMAGE_BUFFER, Buffer)

    def set_buffer(self, buffer: Optional[Buffer]) -> None:
        self._set_edge_target(EdgeType.IMAGE_BUFFER, buffer)

    def mime_type(self) -> Optional[str]:
        """Declared MIME type, falling back to a guess from the URI."""

        weight = self.get()
        return weight.mime_type or guess_mime_type(weight.uri)
