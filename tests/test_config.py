#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest
import yaml

from trustroute.config import ROUTING_CONFIG_FILE, RouterConfig, deep_merge, load_yaml


def test_load_yaml_missing_file_is_empty(tmp_path):
    assert load_yaml(tmp_path / "absent.yaml") == {}


def test_load_yaml_malformed_raises(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("cache: [unclosed\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        load_yaml(path)


def test_deep_merge_keeps_untouched_keys():
    base = {"cache": {"discovery": 30, "decision": 300}, "default_trust": 7.0}
    merged = deep_merge(base, {"cache": {"discovery": 5}})
    assert merged == {"cache": {"discovery": 5, "decision": 300}, "default_trust": 7.0}
    assert base["cache"]["discovery"] == 30


def test_shipped_defaults(monkeypatch):
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    monkeypatch.delenv("TRUSTROUTE_MODELS_DIR", raising=False)
    config = RouterConfig.load(ROUTING_CONFIG_FILE, user_file=None)

    assert config.get_cache_ttl("discovery") == 30
    assert config.get_cache_ttl("decision") == 300
    assert config.get_cache_ttl("resources") == 10
    assert config.get_backend_timeout() == 5
    assert config.get_backend_setting("ollama", "host") == "http://localhost:11434"
    assert config.get_default_trust() == 7.0
    assert config.get_trust_table()["llama"] > 0

    catalog = config.get_file_catalog()
    assert catalog
    for entry in catalog:
        assert entry["name"] and entry["file"].endswith(".gguf")
        assert 0 <= entry["trust_score"] <= 10

    assert {m["name"] for m in config.get_cloud_models()} >= {"gpt-4"}


def test_user_file_overrides_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    monkeypatch.delenv("TRUSTROUTE_MODELS_DIR", raising=False)
    user_file = tmp_path / "user_config.yaml"
    user_file.write_text(
        "cache:\n  discovery: 5\nbackends:\n  cloud:\n    enabled: false\n",
        encoding="utf-8",
    )
    config = RouterConfig.load(ROUTING_CONFIG_FILE, user_file)

    assert config.get_cache_ttl("discovery") == 5
    assert config.get_cache_ttl("decision") == 300
    assert not config.is_backend_enabled("cloud")
    assert config.is_backend_enabled("ollama")


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("OLLAMA_HOST", "http://gpu-box:11434")
    monkeypatch.setenv("TRUSTROUTE_MODELS_DIR", str(tmp_path))
    config = RouterConfig.load(ROUTING_CONFIG_FILE, user_file=None)

    assert config.get_backend_setting("ollama", "host") == "http://gpu-box:11434"
    assert config.get_models_dir() == Path(tmp_path)


def test_empty_config_falls_back_to_builtin_values():
    config = RouterConfig()
    assert config.get_cache_ttl("decision") == 300
    assert config.get_backend_timeout() == 5
    assert config.is_backend_enabled("ollama")
    assert config.get_file_catalog() == []
    assert config.get_context_defaults() is None
