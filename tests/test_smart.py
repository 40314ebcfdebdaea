#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for smart defaults, decision caching and the fallback chain."""

import asyncio

import pytest

from trustroute.errors import BackendUnavailable
from trustroute.models import HardwareConstraints, RawModelDescriptor, RoutingConfig, SmartContext
from trustroute.routing.smart import SYSTEM_DEFAULT_MODEL, SmartRoutingService, compute_confidence

from conftest import FakeCatalog, make_stack


def count_routes(stack):
    """Record every pipeline.route call."""
    calls = []
    original = stack.pipeline.route

    async def counting(config=None):
        calls.append(config)
        return await original(config)

    stack.pipeline.route = counting
    return calls


def smart_default(stack, context=None):
    return asyncio.run(stack.service.get_smart_default(context))


# -----------------------------------------------------------------------------
# Routing and cache
# -----------------------------------------------------------------------------

def test_first_call_routes(stack):
    selection = smart_default(stack, SmartContext(task="coding"))

    assert selection.reason == "intelligent_routing"
    assert selection.selected_model.name == "phi-3.5-mini-instruct"
    assert 0.1 <= selection.confidence <= 1.0
    assert stack.service.last_decision is not None


def test_second_call_is_cached(stack):
    calls = count_routes(stack)

    first = smart_default(stack)
    second = smart_default(stack)

    assert len(calls) == 1
    assert second.reason == "cached"
    assert second.confidence == 0.9
    assert second.selected_model == first.selected_model
    assert second.reasoning.startswith("Using cached routing decision")


def test_cached_decision_expires(stack):
    calls = count_routes(stack)

    smart_default(stack)
    stack.clock.advance(299)
    assert smart_default(stack).reason == "cached"

    stack.clock.advance(2)
    assert smart_default(stack).reason == "intelligent_routing"
    assert len(calls) == 2


def test_clear_cache(stack):
    smart_default(stack)
    stack.service.clear_cache()
    assert stack.service.last_decision is None
    assert smart_default(stack).reason == "intelligent_routing"


def test_context_is_turned_into_config(stack):
    calls = count_routes(stack)

    smart_default(stack, SmartContext(task="reasoning", preferred_backends=("ollama",)))

    config = calls[0]
    assert config.task == "reasoning"
    assert config.preferred_backends == ("ollama",)
    assert config.hardware_constraints is None


def test_high_urgency_caps_ram():
    stack = make_stack(available_ram=16.0)
    calls = count_routes(stack)

    selection = smart_default(stack, SmartContext(urgency="high"))

    assert calls[0].hardware_constraints.available_ram == 4.0
    assert selection.selected_model.ram_gb <= 4.0


def test_high_urgency_on_small_host():
    stack = make_stack(available_ram=5.0)
    calls = count_routes(stack)

    selection = smart_default(stack, SmartContext(urgency="high"))

    assert calls[0].hardware_constraints.available_ram == 2.5
    assert selection.selected_model.name == "qwen2.5-1.5b-instruct"


# -----------------------------------------------------------------------------
# Fallback chain
# -----------------------------------------------------------------------------

def test_fallback_picks_smallest_available_model():
    # 0.5GB headroom under high urgency filters everything out
    stack = make_stack(available_ram=1.0)

    selection = smart_default(stack, SmartContext(urgency="high"))

    assert selection.reason == "fallback"
    assert selection.confidence == 0.3
    assert selection.selected_model.name == "qwen2.5-1.5b-instruct"
    assert [m.name for m in selection.alternatives] == ["llama3.2:3b", "phi-3.5-mini-instruct"]
    assert "Routing failed" in selection.reasoning
    assert "No suitable models found" in selection.reasoning
    assert stack.service.last_decision is None


def test_fallback_sorts_unknown_sizes_last():
    stack = make_stack(catalogs=[FakeCatalog("ollama", [
        RawModelDescriptor(name="mystery", backend="ollama"),
        RawModelDescriptor(name="llama3:8b", backend="ollama"),
        RawModelDescriptor(name="llama3.2:1b", backend="ollama"),
    ])])

    selection = smart_default(stack, SmartContext(task="coding"))

    assert selection.reason == "fallback"
    assert [selection.selected_model.name] + [m.name for m in selection.alternatives] == [
        "llama3.2:1b", "llama3:8b", "mystery",
    ]


def test_all_backends_failing_returns_system_default():
    stack = make_stack(catalogs=[
        FakeCatalog("ollama", error=BackendUnavailable("ollama", "connection refused")),
        FakeCatalog("huggingface", error=OSError("disk gone")),
    ])

    selection = smart_default(stack)

    assert selection.reason == "system_default"
    assert selection.confidence <= 0.1
    assert selection.selected_model is SYSTEM_DEFAULT_MODEL
    assert not selection.selected_model.available
    assert selection.alternatives == []
    assert "No suitable models found" in selection.reasoning


def test_fallback_discovery_error_returns_system_default(stack):
    async def broken_route(config=None):
        raise RuntimeError("pipeline exploded")

    async def broken_discover(force_refresh=False):
        raise RuntimeError("discovery exploded")

    stack.pipeline.route = broken_route
    stack.pipeline.consolidator.discover = broken_discover

    selection = smart_default(stack)

    assert selection.reason == "system_default"
    assert "pipeline exploded" in selection.reasoning


def test_system_default_placeholder():
    assert SYSTEM_DEFAULT_MODEL.name == "system-default"
    assert SYSTEM_DEFAULT_MODEL.backend == "huggingface"
    assert SYSTEM_DEFAULT_MODEL.parameters == "1B"
    assert SYSTEM_DEFAULT_MODEL.ram_requirement == "2GB"
    assert SYSTEM_DEFAULT_MODEL.trust_score == 5.0


# -----------------------------------------------------------------------------
# Confidence
# -----------------------------------------------------------------------------

def test_confidence_formula(stack):
    decision = asyncio.run(stack.pipeline.route(RoutingConfig()))
    top = decision.selection.top_candidates[0].composite_score

    # 3 candidates out of 4 models, no filtering penalty
    assert compute_confidence(decision) == pytest.approx(min(1.0, 0.6 + 0.2 + top * 0.2))


def test_confidence_penalizes_heavy_filtering(stack):
    decision = asyncio.run(stack.pipeline.route(RoutingConfig(
        hardware_constraints=HardwareConstraints(available_ram=2.5),
    )))
    top = decision.selection.top_candidates[0].composite_score

    # 1 candidate out of 4 models survived
    assert compute_confidence(decision) == pytest.approx(0.6 + top * 0.2 - 0.1)


def test_routing_confidence_without_decision(stack):
    assert stack.service.get_routing_confidence() == 0.5


def test_routing_confidence_uses_last_decision(stack):
    selection = smart_default(stack)
    assert stack.service.get_routing_confidence() == pytest.approx(selection.confidence)


# -----------------------------------------------------------------------------
# Recommendation and policy
# -----------------------------------------------------------------------------

def test_smart_recommendation():
    stack = make_stack(available_ram=10.0)

    recommendation = asyncio.run(stack.service.get_routing_recommendation("coding"))

    assert recommendation.primary.name == "phi-3.5-mini-instruct"
    assert recommendation.system_analysis == {
        "availableRAM": 10.0,
        "recommendedRAM": 7.0,
        "recommendedTask": "coding",
    }
    assert recommendation.reasoning.startswith("System Analysis: System has 10GB available RAM")
    assert "Intelligent Routing:" in recommendation.reasoning
    assert recommendation.fallback_strategy.startswith("Switch to qwen2.5-1.5b-instruct (huggingface)")
    assert recommendation.fallback_strategy.endswith("Use cloud models if local resources insufficient")
    assert 0.1 <= recommendation.confidence <= 1.0


@pytest.mark.parametrize("explicit, load, complexity, expected", [
    (True, "high", "simple", True),
    (False, "high", "simple", False),
    (False, "high", "complex", True),
    (False, "low", "simple", True),
    (False, None, None, True),
])
def test_should_use_intelligent_routing(explicit, load, complexity, expected):
    assert SmartRoutingService.should_use_intelligent_routing(explicit, load, complexity) is expected
