"""gltfgraph package initialization.

glTF 2.0 documents are held as a property graph: every entity (scene, node,
mesh, accessor, ...) is a node with a typed weight and relations are typed
edges. :class:`GltfToolkit` is the primary entry point for reading and
writing ``.gltf`` and ``.glb`` files.
"""

from .api import GltfToolkit
from .graph.store import GraphStore
from .gltf.document import Document

__all__ = ["Document", "GltfToolkit", "GraphStore"]
