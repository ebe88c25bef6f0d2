"""Tests for :mod:`gltfgraph.graph.handles`."""

from __future__ import annotations

import pytest

from gltfgraph.errors import NotFoundError, WeightTypeError
from gltfgraph.graph.model import MeshWeight, NodeWeight
from gltfgraph.graph.store import GraphStore
from gltfgraph.gltf import Mesh, Node


def test_handles_compare_by_store_and_index():
    store = GraphStore()
    node = Node.new(store, NodeWeight(name="a"))

    assert Node(store, node.index) == node
    assert hash(Node(store, node.index)) == hash(node)
    assert Node(GraphStore(), node.index) != node


def test_handle_get_and_set_weight():
    store = GraphStore()
    node = Node.new(store)

    node.get().name = "renamed"
    assert store.node_weight(node.index).name == "renamed"

    node.set(NodeWeight(name="replaced"))
    assert node.get().name == "replaced"


def test_handle_rejects_mismatched_weight_types():
    store = GraphStore()

    with pytest.raises(WeightTypeError):
        Node.new(store, MeshWeight())

    mesh = Mesh.new(store)
    with pytest.raises(WeightTypeError):
        Node(store, mesh.index).get()
    with pytest.raises(TypeError):
        Node.new(store).set(MeshWeight())


def test_handle_remove_invalidates_node():
    store = GraphStore()
    node = Node.new(store)

    node.remove()

    assert not node.exists()
    with pytest.raises(NotFoundError):
        node.get()


def test_edges_cannot_cross_stores():
    parent = Node.new(GraphStore())
    stranger = Node.new(GraphStore())

    with pytest.raises(NotFoundError):
        parent.add_child(stranger)


def test_setting_a_single_edge_replaces_the_previous_target():
    store = GraphStore()
    node = Node.new(store)
    first = Mesh.new(store)
    second = Mesh.new(store)

    node.set_mesh(first)
    node.set_mesh(second)
    assert node.mesh() == second

    node.set_mesh(None)
    assert node.mesh() is None
    assert first.exists() and second.exists()
