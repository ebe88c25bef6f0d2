"""Tests for :mod:`gltfgraph.config`."""

from __future__ import annotations

import pytest

from gltfgraph import config


@pytest.fixture(autouse=True)
def fresh_environment():
    config._load_environment.cache_clear()
    yield
    config._load_environment.cache_clear()


def test_get_env_prefers_process_environment(monkeypatch):
    """Explicit environment variables should win over any ``.env`` contents."""

    monkeypatch.setenv("GLTFGRAPH_TEST_VALUE", "in-memory")

    assert config.get_env("GLTFGRAPH_TEST_VALUE") == "in-memory"


def test_get_env_returns_default_when_missing(monkeypatch):
    """Missing keys should fall back to the provided default value."""

    monkeypatch.delenv("GLTFGRAPH_DOES_NOT_EXIST", raising=False)

    assert config.get_env("GLTFGRAPH_DOES_NOT_EXIST", default="fallback") == "fallback"


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("TRUE", True), (" yes ", True), ("on", True), ("0", False), ("off", False), ("", False)],
)
def test_get_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("GLTFGRAPH_TEST_FLAG", raw)

    assert config.get_bool("GLTFGRAPH_TEST_FLAG") is expected


def test_numeric_helpers(monkeypatch):
    monkeypatch.setenv("GLTFGRAPH_TEST_INT", "12")
    monkeypatch.setenv("GLTFGRAPH_TEST_FLOAT", "2.5")
    monkeypatch.setenv("GLTFGRAPH_TEST_BLANK", "  ")
    monkeypatch.delenv("GLTFGRAPH_TEST_UNSET", raising=False)

    assert config.get_int("GLTFGRAPH_TEST_INT", 1) == 12
    assert config.get_float("GLTFGRAPH_TEST_FLOAT", 1.0) == 2.5
    assert config.get_int("GLTFGRAPH_TEST_BLANK", 7) == 7
    assert config.get_float("GLTFGRAPH_TEST_UNSET", 0.5) == 0.5
    assert config.get_bool("GLTFGRAPH_TEST_UNSET", default=True) is True

    monkeypatch.setenv("GLTFGRAPH_TEST_INT", "twelve")
    with pytest.raises(ValueError):
        config.get_int("GLTFGRAPH_TEST_INT", 1)


def test_import_options_from_env(monkeypatch):
    monkeypatch.setenv("GLTFGRAPH_STRICT", "true")
    monkeypatch.setenv("GLTFGRAPH_MAX_JOINTS", "64")

    options = config.ImportOptions.from_env()

    assert options == config.ImportOptions(strict=True, max_joints=64)


def test_import_options_defaults(monkeypatch):
    monkeypatch.delenv("GLTFGRAPH_STRICT", raising=False)
    monkeypatch.delenv("GLTFGRAPH_MAX_JOINTS", raising=False)

    options = config.ImportOptions.from_env()

    assert options.strict is False
    assert options.max_joints == config.DEFAULT_MAX_JOINTS
