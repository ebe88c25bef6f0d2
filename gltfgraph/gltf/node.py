"""Scene graph node handle."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import numpy as np

from gltfgraph.graph.handles import GraphNode
from gltfgraph.graph.model import EdgeType, NodeWeight

from .mesh import Mesh

if TYPE_CHECKING:
    from .skin import Skin


class Node(GraphNode[NodeWeight]):
    """Transform in the scene hierarchy, optionally carrying a mesh and a skin."""

    __slots__ = ()

    WEIGHT = NodeWeight

    def children(self) -> List["Node"]:
        return self._edge_targets(EdgeType.CHILD, Node)

    def add_child(self, child: "Node") -> None:
        """Attach ``child``, detaching it from any previous parent first."""

        previous = child.parent()
        if previous is not None:
            previous.remove_child(child)
        self._add_edge_target(EdgeType.CHILD, child)

    def create_child(self) -> "Node":
        return self._create_edge_target(EdgeType.CHILD, Node)

    def remove_child(self, child: "Node") -> None:
        self._remove_edge_target(EdgeType.CHILD, child)

    def parent(self) -> Optional["Node"]:
        return self._find_edge_source(EdgeType.CHILD, Node)

    def mesh(self) -> Optional[Mesh]:
        return self._find_edge_target(EdgeType.NODE_MESH, Mesh)

    def set_mesh(self, mesh: Optional[Mesh]) -> None:
        self._set_edge_target(EdgeType.NODE_MESH, mesh)

    def skin(self) -> Optional["Skin"]:
        from .skin import Skin

        return self._find_edge_target(EdgeType.NODE_SKIN, Skin)

    def set_skin(self, skin: Optional["Skin"]) -> None:
        self._set_edge_target(EdgeType.NODE_SKIN, skin)

    def matrix(self) -> np.ndarray:
        """Local transform as a 4x4 row-major matrix."""

        weight = self.get()
        return compose_matrix(weight.translation, weight.rotation, weight.scale)


def compose_matrix(translation, rotation, scale) -> np.ndarray:
    """Build a 4x4 row-major TRS matrix from a translation, quaternion and scale."""

    x, y, z, w = (float(value) for value in rotation)
    rot = np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
    )
    matrix = np.identity(4)
    matrix[:3, :3] = rot * np.asarray(scale, dtype=float)
    matrix[:3, 3] = translation
    return matrix


def decompose_matrix(values: Sequence[float]) -> Tuple[tuple, tuple, tuple]:
    """Split a column-major glTF ``matrix`` into translation, rotation and scale."""

    matrix = np.asarray(values, dtype=float).reshape(4, 4).T
    translation = matrix[:3, 3]
    basis = matrix[:3, :3]
    scale = np.linalg.norm(basis, axis=0)
    if np.linalg.det(basis) < 0:
        scale[0] = -scale[0]
    safe = np.where(scale == 0, 1.0, scale)
    rot = basis / safe

    trace = rot[0, 0] + rot[1, 1] + rot[2, 2]
    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (rot[2, 1] - rot[1, 2]) * s
        y = (rot[0, 2] - rot[2, 0]) * s
        z = (rot[1, 0] - rot[0, 1]) * s
    elif rot[0, 0] > rot[1, 1] and rot[0, 0] > rot[2, 2]:
        s = 2.0 * np.sqrt(1.0 + rot[0, 0] - rot[1, 1] - rot[2, 2])
        w = (rot[2, 1] - rot[1, 2]) / s
        x = 0.25 * s
        y = (rot[0, 1] + rot[1, 0]) / s
        z = (rot[0, 2] + rot[2, 0]) / s
    elif rot[1, 1] > rot[2, 2]:
        s = 2.0 * np.sqrt(1.0 + rot[1, 1] - rot[0, 0] - rot[2, 2])
        w = (rot[0, 2] - rot[2, 0]) / s
        x = (rot[0, 1] + rot[1, 0]) / s
        y = 0.25 * s
        z = (rot[1, 2] + rot[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + rot[2, 2] - rot[0, 0] - rot[1, 1])
        w = (rot[1, 0] - rot[0, 1]) / s
        x = (rot[0, 2] + rot[2, 0]) / s
        y = (rot[1, 2] + rot[2, 1]) / s
        z = 0.25 * s
    quat = np.array([x, y, z, w])
    quat /= np.linalg.norm(quat)
    return (
        tuple(float(v) for v in translation),
        tuple(float(v) for v in quat),
        tuple(float(v) for v in scale),
    )
