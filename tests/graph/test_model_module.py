"""Tests covering :mod:`gltfgraph.graph.model`."""

from __future__ import annotations

import pytest

from gltfgraph.graph.model import (
    ComponentType,
    EdgeType,
    ElementType,
    MaterialWeight,
    NodeWeight,
    Relation,
    Semantic,
)


def test_component_type_sizes_and_dtypes():
    assert ComponentType(5121).size == 1
    assert ComponentType.U16.dtype == "<u2"
    assert ComponentType.U32.size == 4
    assert ComponentType.F32.is_float and not ComponentType.I16.is_float


def test_element_type_multiplicity():
    assert [element.multiplicity for element in ElementType] == [1, 2, 3, 4, 4, 9, 16]


def test_unknown_enumerants_are_rejected():
    with pytest.raises(ValueError):
        ComponentType(5124)
    with pytest.raises(ValueError):
        ElementType("VEC5")


def test_relations_are_hashable_values():
    assert Relation(EdgeType.ATTRIBUTE, "POSITION") == Relation(EdgeType.ATTRIBUTE, "POSITION")
    assert len({Relation(EdgeType.JOINT, 0), Relation(EdgeType.JOINT, 1)}) == 2


def test_weight_defaults():
    node = NodeWeight()
    material = MaterialWeight()

    assert node.translation == (0.0, 0.0, 0.0)
    assert node.rotation == (0.0, 0.0, 0.0, 1.0)
    assert node.scale == (1.0, 1.0, 1.0)
    assert material.alpha_cutoff == 0.5
    assert material.tex_coords == {}
    assert MaterialWeight().tex_coords is not material.tex_coords


def test_semantic_helpers():
    assert Semantic.texcoord(1) == "TEXCOORD_1"
    assert Semantic.joints(0) == "JOINTS_0"
    assert "TEXCOORD_0" not in Semantic.MORPH_TARGET
