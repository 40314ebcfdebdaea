#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for name-based metadata inference."""

import pytest

from trustroute import heuristics


@pytest.mark.parametrize("name, expected", [
    ("llama3.2:3b", "3B"),
    ("qwen2.5:1.5b", "1.5B"),
    ("llama3:70b-instruct", "70B"),
    ("smollm:135m", "135M"),
    ("phi-3-mini", None),
    ("mistral", None),
])
def test_infer_parameters(name, expected):
    assert heuristics.infer_parameters(name) == expected


def test_parameter_pattern_ignores_letter_suffix():
    # "4mini" is not a parameter count
    assert heuristics.infer_parameters("phi4mini") is None


@pytest.mark.parametrize("value, expected", [
    ("3.8B", 3.8),
    ("135M", 0.135),
    ("7", 7.0),
    (None, None),
    ("", None),
    ("unknown", None),
])
def test_parse_parameters(value, expected):
    result = heuristics.parse_parameters(value)
    if expected is None:
        assert result is None
    else:
        assert result == pytest.approx(expected)


@pytest.mark.parametrize("billions, expected", [
    (70, "48GB"),
    (34, "24GB"),
    (13, "16GB"),
    (8, "8GB"),
    (7, "8GB"),
    (3.8, "4GB"),
    (3, "4GB"),
    (1.5, "2GB"),
    (0.135, "2GB"),
    (None, "8GB"),
])
def test_ram_step_table(billions, expected):
    assert heuristics.ram_for_parameters(billions) == expected


def test_infer_ram_requirement_from_name():
    assert heuristics.infer_ram_requirement("llama3:70b") == "48GB"
    assert heuristics.infer_ram_requirement("mystery-model") == "8GB"


@pytest.mark.parametrize("value, expected", [
    ("8GB", 8.0),
    ("2.5GB", 2.5),
    ("512MB", 0.5),
    ("0GB", 8.0),
    ("lots", 8.0),
    (None, 8.0),
])
def test_parse_ram_is_always_positive(value, expected):
    assert heuristics.parse_ram(value) == pytest.approx(expected)


def test_format_gb():
    assert heuristics.format_gb(4.0) == "4GB"
    assert heuristics.format_gb(2.5) == "2.5GB"


def test_context_from_explicit_token():
    assert heuristics.infer_context_size("mistral-nemo-32k") == 32768
    assert heuristics.infer_context_size("model-8k-instruct") == 8192


def test_context_from_family_default():
    assert heuristics.infer_context_size("llama3.2:3b") == 8192
    assert heuristics.infer_context_size("qwen2.5:7b") == 32768
    assert heuristics.infer_context_size("mystery") == heuristics.DEFAULT_CONTEXT


def test_context_custom_family_table():
    assert heuristics.infer_context_size("llama3", "llama", {"llama": 131072}) == 131072


@pytest.mark.parametrize("name, family", [
    ("codellama:7b", "codellama"),
    ("llama3.2:3b", "llama"),
    ("deepseek-r1:7b", "deepseek"),
    ("mixtral:8x7b", "mistral"),
    ("gemma2:9b", "gemma"),
    ("something-else", "unknown"),
])
def test_infer_family(name, family):
    assert heuristics.infer_family(name) == family


def test_task_suitability_keywords():
    scores = heuristics.infer_task_suitability("qwen2.5-coder:7b")
    assert scores == {"coding": 9.0, "reasoning": 5.0, "general": 7.0, "creative": 5.0}

    scores = heuristics.infer_task_suitability("llama3-instruct", description="story writer")
    assert scores["general"] == 9.0
    assert scores["creative"] == 9.0
    assert scores["coding"] == 5.0


def test_task_suitability_defaults_when_nothing_matches():
    assert heuristics.infer_task_suitability("llama3.2:3b") == heuristics.DEFAULT_SUITABILITY


def test_task_suitability_is_deterministic():
    assert heuristics.infer_task_suitability("deepseek-coder") == heuristics.infer_task_suitability("deepseek-coder")


def test_complete_task_suitability_fills_and_clamps():
    scores = heuristics.complete_task_suitability({"coding": 12, "reasoning": -1})
    assert scores == {"coding": 10.0, "reasoning": 0.0, "general": 7.0, "creative": 5.0}


def test_infer_trust_score():
    table = {"llama": 8.5}
    assert heuristics.infer_trust_score("llama", table) == 8.5
    assert heuristics.infer_trust_score("unknown", table) == heuristics.DEFAULT_TRUST
    assert heuristics.infer_trust_score("llama", {"llama": 15}) == 10.0
