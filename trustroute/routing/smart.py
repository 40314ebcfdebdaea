#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SMART ROUTING - Default Model Selection
=======================================

Wraps the routing pipeline for callers that just want "a model":

1. A decision younger than the cache TTL (5 minutes) is reused
2. Otherwise the pipeline routes with a config built from the context
3. If routing fails, the smallest available model is picked
4. If nothing is available, an unavailable placeholder is returned

get_smart_default() never raises.

Usage:
    service = build_service(RouterConfig.load())
    selection = await service.get_smart_default(SmartContext(task="coding"))
    print(selection.selected_model.name, selection.reason)

Author: Léon
"""

from typing import Callable, Optional
import logging
import time

from ..backends import build_registry
from ..config import RouterConfig
from ..consolidator import ModelConsolidator
from ..errors import NoSuitableModels
from ..heuristics import parse_parameters
from ..models import (
    Backend,
    DefaultModelSelection,
    HardwareConstraints,
    ModelRoutingDecision,
    RoutingConfig,
    SmartContext,
    SmartRoutingRecommendation,
    UnifiedModel,
)
from ..resources import SystemResourceProbe
from .pipeline import RoutingPipeline

logger = logging.getLogger(__name__)

# Selection reasons
REASON_CACHED = "cached"
REASON_ROUTED = "intelligent_routing"
REASON_FALLBACK = "fallback"
REASON_SYSTEM_DEFAULT = "system_default"

DEFAULT_DECISION_TTL = 300.0

CACHED_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.3
SYSTEM_DEFAULT_CONFIDENCE = 0.1
UNKNOWN_CONFIDENCE = 0.5

# High urgency caps RAM to bias toward small, fast models
URGENT_RAM_SHARE = 0.5
URGENT_RAM_CAP = 4.0

SYSTEM_DEFAULT_MODEL = UnifiedModel(
    name="system-default",
    backend=Backend.HUGGINGFACE.value,
    model_type="fallback",
    parameters="1B",
    context_size=4096,
    ram_requirement="2GB",
    trust_score=5.0,
    task_suitability={"coding": 5.0, "reasoning": 5.0, "general": 5.0, "creative": 5.0},
    available=False,
    description="Placeholder returned when no model can be found",
)


def compute_confidence(decision: ModelRoutingDecision) -> float:
    """
    Confidence in a routing decision, 0.1 to 1.0.

    0.6 base, +0.2 when at least 3 candidates were compared, up to +0.2
    for a high winning score, -0.1 when fewer than 30% of the discovered
    models survived filtering.
    """
    confidence = 0.6

    candidates = decision.selection.top_candidates
    if len(candidates) >= 3:
        confidence += 0.2
    if candidates:
        confidence += min(candidates[0].composite_score, 1.0) * 0.2

    total = decision.consolidation.total_models
    if total and decision.filtering.remaining / total < 0.3:
        confidence -= 0.1

    return max(0.1, min(1.0, confidence))


def _size_key(model: UnifiedModel) -> float:
    billions = parse_parameters(model.parameters)
    return billions if billions is not None else float("inf")


class SmartRoutingService:
    """
    Smart default model selection with a short-lived decision cache.

    Usage:
        service = SmartRoutingService(pipeline)
        selection = await service.get_smart_default()
    """

    def __init__(
        self,
        pipeline: RoutingPipeline,
        decision_ttl: float = DEFAULT_DECISION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            pipeline: Routing pipeline
            decision_ttl: Seconds a routing decision stays reusable
            clock: Time source, must match the pipeline's clock
        """
        self.pipeline = pipeline
        self._decision_ttl = decision_ttl
        self._clock = clock
        self._last_decision: Optional[ModelRoutingDecision] = None

    @property
    def last_decision(self) -> Optional[ModelRoutingDecision]:
        """Most recent successful routing decision."""
        return self._last_decision

    # =========================================================================
    # SMART DEFAULT
    # =========================================================================

    async def get_smart_default(self, context: Optional[SmartContext] = None) -> DefaultModelSelection:
        """
        Pick a default model. Never raises.

        Args:
            context: Task, preferred backends and urgency hints

        Returns:
            DefaultModelSelection
        """
        context = context or SmartContext()

        if self._decision_is_fresh():
            decision = self._last_decision
            logger.debug(f"Reusing routing decision for {decision.selected_model.name}")
            return DefaultModelSelection(
                selected_model=decision.selected_model,
                reason=REASON_CACHED,
                alternatives=list(decision.alternatives),
                reasoning=f"Using cached routing decision: {decision.reasoning}",
                confidence=CACHED_CONFIDENCE,
            )

        try:
            config = await self._config_from_context(context)
            decision = await self.pipeline.route(config)
        except NoSuitableModels as e:
            logger.warning(f"Routing failed: {e}")
            return await self._fallback(str(e))
        except Exception as e:
            logger.error(f"Routing failed unexpectedly: {e}")
            return await self._fallback(str(e))

        self._last_decision = decision
        return DefaultModelSelection(
            selected_model=decision.selected_model,
            reason=REASON_ROUTED,
            alternatives=list(decision.alternatives),
            reasoning=decision.reasoning,
            confidence=compute_confidence(decision),
        )

    def _decision_is_fresh(self) -> bool:
        if self._last_decision is None:
            return False
        return self._clock() - self._last_decision.created_at < self._decision_ttl

    async def _config_from_context(self, context: SmartContext) -> RoutingConfig:
        constraints = None
        if context.urgency == "high":
            resources = await self.pipeline.probe.detect()
            constraints = HardwareConstraints(
                available_ram=min(resources.available_ram * URGENT_RAM_SHARE, URGENT_RAM_CAP),
            )
        return RoutingConfig(
            task=context.task,
            hardware_constraints=constraints,
            preferred_backends=tuple(context.preferred_backends),
        )

    async def _fallback(self, error_message: str) -> DefaultModelSelection:
        """Smallest available model, or the placeholder."""
        try:
            models = await self.pipeline.consolidator.discover()
        except Exception as e:
            logger.error(f"Fallback discovery failed: {e}")
            models = []

        available = sorted((m for m in models if m.available), key=_size_key)
        if available:
            selected = available[0]
            logger.info(f"Falling back to smallest available model {selected.name}")
            return DefaultModelSelection(
                selected_model=selected,
                reason=REASON_FALLBACK,
                alternatives=available[1:4],
                reasoning=f"Routing failed ({error_message}). Selected smallest available model.",
                confidence=FALLBACK_CONFIDENCE,
            )

        logger.warning("No available model at all, returning system default")
        return DefaultModelSelection(
            selected_model=SYSTEM_DEFAULT_MODEL,
            reason=REASON_SYSTEM_DEFAULT,
            alternatives=[],
            reasoning=(f"System default fallback: {error_message}. "
                       "Please download models or check configuration."),
            confidence=SYSTEM_DEFAULT_CONFIDENCE,
        )

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def get_routing_confidence(self, decision: Optional[ModelRoutingDecision] = None) -> float:
        """Confidence of a decision, the last one by default."""
        decision = decision or self._last_decision
        if decision is None:
            return UNKNOWN_CONFIDENCE
        return compute_confidence(decision)

    async def get_routing_recommendation(self, task: Optional[str] = None) -> SmartRoutingRecommendation:
        """
        Recommend a config for this host and route with it.

        Raises:
            NoSuitableModels: If the recommended config leaves no candidate
        """
        recommendation = await self.pipeline.get_routing_recommendation(task)
        decision = await self.pipeline.route(recommendation.recommended_config)
        confidence = compute_confidence(decision)
        constraints = recommendation.recommended_config.hardware_constraints

        parts = [
            f"System Analysis: {recommendation.reasoning}",
            f"Intelligent Routing: {decision.reasoning}",
            f"Confidence: {confidence * 100:.0f}%",
            f"Performance: {decision.total_duration:.1f}ms routing time",
        ]
        if decision.alternatives:
            parts.append(f"{len(decision.alternatives)} alternative(s) available")

        return SmartRoutingRecommendation(
            primary=decision.selected_model,
            alternatives=list(decision.alternatives),
            reasoning=" | ".join(parts),
            system_analysis={
                "availableRAM": recommendation.system_info.available_ram,
                "recommendedRAM": (constraints.available_ram if constraints and constraints.available_ram
                                   else recommendation.system_info.available_ram),
                "recommendedTask": task,
            },
            confidence=confidence,
            fallback_strategy=self._fallback_strategy(decision),
        )

    @staticmethod
    def _fallback_strategy(decision: ModelRoutingDecision) -> str:
        steps = []
        if decision.alternatives:
            alternative = decision.alternatives[0]
            steps.append(f"Switch to {alternative.name} ({alternative.backend})")
        if decision.selected_model.backend == Backend.OLLAMA.value:
            steps.append("Fall back to local GGUF models if Ollama fails")
        elif decision.selected_model.backend == Backend.HUGGINGFACE.value:
            steps.append("Fall back to Ollama models if available")
        steps.append("Use cloud models if local resources insufficient")
        return " → ".join(steps)

    @staticmethod
    def should_use_intelligent_routing(
        explicit_choice: bool = False,
        system_load: Optional[str] = None,
        complexity: Optional[str] = None,
    ) -> bool:
        """
        Whether a request deserves a full routing run.

        Args:
            explicit_choice: User asked for routing
            system_load: low, medium or high
            complexity: simple, moderate or complex
        """
        if explicit_choice:
            return True
        if system_load == "high" and complexity == "simple":
            return False
        return True

    def clear_cache(self) -> None:
        """Forget the last decision."""
        self._last_decision = None


# =============================================================================
# FACTORY
# =============================================================================

def build_service(config: Optional[RouterConfig] = None, clock: Callable[[], float] = time.monotonic) -> SmartRoutingService:
    """
    Wire the routing stack from configuration.

    Args:
        config: Routing configuration (loaded from disk if omitted)
        clock: Time source shared by every cache

    Returns:
        SmartRoutingService; its pipeline, consolidator and probe are
        reachable through service.pipeline
    """
    config = config or RouterConfig.load()
    registry = build_registry(config)
    consolidator = ModelConsolidator(
        registry,
        cache_ttl=config.get_cache_ttl("discovery"),
        backend_timeout=config.get_backend_timeout(),
        trust_table=config.get_trust_table(),
        default_trust=config.get_default_trust(),
        context_defaults=config.get_context_defaults(),
        clock=clock,
    )
    probe = SystemResourceProbe(cache_ttl=config.get_cache_ttl("resources"), clock=clock)
    pipeline = RoutingPipeline(consolidator, probe, registry, clock=clock)
    return SmartRoutingService(pipeline, decision_ttl=config.get_cache_ttl("decision"), clock=clock)
