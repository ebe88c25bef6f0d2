"""Tests for :mod:`gltfgraph.graph.ids`."""

from __future__ import annotations

from gltfgraph.graph import ids


def test_unique_name_skips_taken_names():
    taken = {"buffer_0.bin", "buffer_1.bin"}

    assert ids.unique_name("buffer_{}.bin", taken) == "buffer_2.bin"
    assert ids.unique_name("image_{}.png", taken, start=3) == "image_3.png"


def test_utc_now_returns_iso_format():
    timestamp = ids.utc_now()
    assert "T" in timestamp and timestamp.endswith("+00:00")
