"""Tests for :mod:`gltfgraph.codec.normalize`."""

from __future__ import annotations

import numpy as np
import pytest

from gltfgraph.codec import normalize
from gltfgraph.graph.model import ComponentType


def test_unsigned_extremes_map_to_unit_range():
    assert normalize.normalize(255, ComponentType.U8) == 1.0
    assert normalize.normalize(0, ComponentType.U8) == 0.0
    assert normalize.normalize(65535, ComponentType.U16) == 1.0


def test_signed_minimum_clamps_to_minus_one():
    assert normalize.normalize(-128, ComponentType.I8) == -1.0
    assert normalize.normalize(-127, ComponentType.I8) == -1.0
    assert normalize.normalize(32767, ComponentType.I16) == 1.0


def test_float_to_integer_rounds_and_clamps():
    assert normalize.denormalize(1.0, ComponentType.U8) == 255
    assert normalize.denormalize(0.5, ComponentType.U8) == 128
    assert normalize.denormalize(2.0, ComponentType.U8) == 255
    assert normalize.denormalize(-0.5, ComponentType.U8) == 0
    assert normalize.denormalize(-1.0, ComponentType.I16) == -32767


def test_integer_conversion_goes_through_float():
    converted = normalize.convert(np.array([0, 255]), ComponentType.U8, ComponentType.U16)
    assert converted.tolist() == [0, 65535]
    assert converted.dtype == np.dtype("<u2")

    narrowed = normalize.convert(np.array([65535, 32768]), ComponentType.U16, ComponentType.U8)
    assert narrowed.tolist() == [255, 128]


def test_to_float_returns_float32():
    result = normalize.to_float([0, 51, 255], ComponentType.U8)

    assert result.dtype == np.float32
    assert result.tolist() == pytest.approx([0.0, 0.2, 1.0])
    assert normalize.component_max(ComponentType.I16) == 32767
