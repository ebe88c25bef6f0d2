"""Reading and writing glTF JSON and GLB containers."""

from .context import ExportContext, ImportContext
from .format import GltfFormat
from .glb import build_glb, export_glb, import_glb, parse_glb
from .gltf_export import export_gltf
from .gltf_import import import_gltf
from .layout import BufferPacker, merge_buffers, read_accessor
from .resolver import DataUriResolver, FileResolver, HttpResolver, Resolver, resolve_uri

__all__ = [
    "BufferPacker",
    "DataUriResolver",
    "ExportContext",
    "FileResolver",
    "GltfFormat",
    "HttpResolver",
    "ImportContext",
    "Resolver",
    "build_glb",
    "export_glb",
    "export_gltf",
    "import_glb",
    "import_gltf",
    "merge_buffers",
    "parse_glb",
    "read_accessor",
    "resolve_uri",
]
