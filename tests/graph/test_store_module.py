"""Tests for :mod:`gltfgraph.graph.store`."""

from __future__ import annotations

import pytest

from gltfgraph.errors import NotFoundError
from gltfgraph.graph.model import Direction, EdgeType, NodeWeight, Relation, SceneWeight
from gltfgraph.graph.store import GraphStore


def test_graph_store_adds_nodes_and_edges():
    store = GraphStore()
    scene = store.new_node(SceneWeight(name="main"))
    node = store.new_node(NodeWeight(name="root"))

    store.add_edge(scene, node, Relation(EdgeType.SCENE_NODE))

    assert store.node_weight(scene).name == "main"
    assert list(store.edges()) == [(scene, node, Relation(EdgeType.SCENE_NODE))]
    assert list(store.edges_from(scene)) == [(Relation(EdgeType.SCENE_NODE), node, 0)]
    assert [other for _, other, _ in store.edges_from(node, Direction.INCOMING)] == [scene]


def test_graph_store_indices_are_never_reused():
    store = GraphStore()
    first = store.new_node(NodeWeight())
    store.remove_node(first)
    second = store.new_node(NodeWeight())

    assert second != first
    assert first not in store
    assert len(store) == 1


def test_graph_store_missing_index_raises_not_found():
    store = GraphStore()

    with pytest.raises(NotFoundError):
        store.node_weight(42)
    with pytest.raises(KeyError):
        store.add_edge(0, 1, Relation(EdgeType.CHILD))
    with pytest.raises(NotFoundError):
        store.remove_edge(0, 1, 0)


def test_graph_store_remove_node_drops_touching_edges():
    store = GraphStore()
    parent = store.new_node(NodeWeight())
    child = store.new_node(NodeWeight())
    store.add_edge(parent, child, Relation(EdgeType.CHILD))

    store.remove_node(child)

    assert list(store.edges()) == []
    assert list(store.edges_from(parent)) == []


def test_graph_store_parallel_edges_have_distinct_keys():
    store = GraphStore()
    skin = store.new_node(NodeWeight())
    joint = store.new_node(NodeWeight())

    first = store.add_edge(skin, joint, Relation(EdgeType.JOINT, 0))
    second = store.add_edge(skin, joint, Relation(EdgeType.JOINT, 1))
    store.remove_edge(skin, joint, first)

    assert first != second
    assert [relation.key for relation, _, _ in store.edges_from(skin)] == [1]


def test_graph_store_copy_is_independent():
    store = GraphStore()
    index = store.new_node(NodeWeight(name="a"))

    clone = store.copy()
    clone.node_weight(index).name = "b"
    added = clone.new_node(NodeWeight())

    assert store.node_weight(index).name == "a"
    assert added not in store
    assert store.new_node(NodeWeight()) == added
