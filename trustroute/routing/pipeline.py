#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PIPELINE - Four-Step Model Routing
==================================

Consolidate -> Filter -> Select -> Route.

1. CONSOLIDATING: probe the host, discover every model, count per backend
2. FILTERING: availability, task and hardware predicates, then the hard
   trust threshold
3. SCORING: weighted multi-factor scoring, soft preferred-backend bonus,
   keep the top candidates
4. ROUTING: dispatch to the selected model's backend

Every step is timed and counted so the decision doubles as an audit
record. When nothing survives filtering the pipeline raises
NoSuitableModels; falling back is the caller's job.

Usage:
    pipeline = RoutingPipeline(consolidator, probe, registry)
    decision = await pipeline.route(RoutingConfig(task="coding"))
    print(decision.selected_model.name, decision.reasoning)

Author: Léon
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import math
import time

from ..backends import BackendRegistry
from ..consolidator import ModelConsolidator
from ..errors import NoSuitableModels
from ..models import (
    Backend,
    ConsolidationStep,
    DispatchStep,
    FilteringStep,
    HardwareConstraints,
    ModelRoutingDecision,
    RoutingConfig,
    RoutingRecommendation,
    ScoredCandidate,
    SelectionStep,
    SystemResources,
    UnifiedModel,
)
from ..resources import SystemResourceProbe
from .filters import apply_predicate, filter_candidates
from .scoring import score_candidates

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3

SCORING_SINGLE = "single_candidate"
SCORING_MULTI = "weighted_multi_factor"
ROUTING_DIRECT = "direct_backend_routing"

# Advisory recommendation
RECOMMENDED_RAM_SHARE = 0.7
RECOMMENDED_MIN_TRUST = 7.0

# Trust wording in the reasoning
HIGH_TRUST = 8.0
LOW_TRUST = 6.0


class PipelineStage(Enum):
    """Stages of one routing run, strictly in this order."""
    IDLE = "idle"
    CONSOLIDATING = "consolidating"
    FILTERING = "filtering"
    SCORING = "scoring"
    ROUTING = "routing"
    DONE = "done"
    FAILED = "failed"


def elapsed_ms(start: float) -> float:
    """Milliseconds since a perf_counter reading."""
    return (time.perf_counter() - start) * 1000


def count_by_backend(models: Sequence[UnifiedModel]) -> Dict[str, int]:
    """Number of models per backend, in discovery order."""
    counts: Dict[str, int] = {}
    for model in models:
        counts[model.backend] = counts.get(model.backend, 0) + 1
    return counts


def trust_label(trust_score: float) -> str:
    """Reasoning wording for a trust score."""
    if trust_score >= HIGH_TRUST:
        return "High trust score"
    if trust_score < LOW_TRUST:
        return "Low trust score"
    return "Trust score"


def preferred_size_for_ram(available_ram: float) -> str:
    """Model size class a host can comfortably run."""
    if available_ram >= 16:
        return "large"
    if available_ram >= 8:
        return "medium"
    return "small"


def preferred_backends_for_ram(available_ram: float) -> List[str]:
    """Backends worth favouring on a host with this much free RAM."""
    backends = []
    if available_ram >= 4:
        backends.append(Backend.OLLAMA.value)
    backends.append(Backend.HUGGINGFACE.value)
    if available_ram < 8:
        backends.append(Backend.CLOUD.value)
    return backends


class RoutingPipeline:
    """
    Routes a request to the best available model.

    The pipeline holds no routing state between runs apart from the
    stage of the latest run; caching lives in the consolidator, the
    probe and the smart routing service.
    """

    def __init__(
        self,
        consolidator: ModelConsolidator,
        probe: SystemResourceProbe,
        registry: BackendRegistry,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            consolidator: Model discovery
            probe: Host resource probe
            registry: Registered backends, used for dispatch
            clock: Time source stamped on decisions
        """
        self.consolidator = consolidator
        self.probe = probe
        self.registry = registry
        self._clock = clock
        self.stage = PipelineStage.IDLE

    # =========================================================================
    # ROUTING
    # =========================================================================

    async def route(self, config: Optional[RoutingConfig] = None) -> ModelRoutingDecision:
        """
        Run the four routing steps.

        Args:
            config: Routing options (defaults: no task, no constraints)

        Returns:
            ModelRoutingDecision

        Raises:
            NoSuitableModels: If every model was filtered out
        """
        config = config or RoutingConfig()
        constraints = config.hardware_constraints or HardwareConstraints()
        started = time.perf_counter()

        try:
            # --- Step 1: consolidate ---
            self.stage = PipelineStage.CONSOLIDATING
            step_start = time.perf_counter()
            resources = await self.probe.detect()
            models = await self.consolidator.discover()
            consolidation = ConsolidationStep(
                total_models=len(models),
                backend_counts=count_by_backend(models),
                duration=elapsed_ms(step_start),
            )
            logger.debug(f"Consolidated {len(models)} models: {consolidation.backend_counts}")

            # --- Step 2: filter ---
            self.stage = PipelineStage.FILTERING
            step_start = time.perf_counter()
            result = filter_candidates(models, config.task, constraints)
            survivors, trust_filtered = self._apply_trust_threshold(result.models, config.minimum_trust_score)
            filtering = FilteringStep(
                availability_filtered=result.availability_filtered,
                task_filtered=result.task_filtered,
                hardware_filtered=result.hardware_filtered,
                trust_filtered=trust_filtered,
                remaining=len(survivors),
                duration=elapsed_ms(step_start),
            )

            if not survivors:
                raise NoSuitableModels(
                    total_models=len(models),
                    availability_filtered=result.availability_filtered,
                    task_filtered=result.task_filtered,
                    hardware_filtered=result.hardware_filtered,
                    trust_filtered=trust_filtered,
                    task=config.task,
                    available_ram=constraints.available_ram,
                    minimum_trust_score=config.minimum_trust_score,
                )

            # --- Step 3: select ---
            self.stage = PipelineStage.SCORING
            step_start = time.perf_counter()
            available_ram = (constraints.available_ram
                             if constraints.available_ram is not None
                             else resources.available_ram)
            ranked = score_candidates(survivors, config.task, available_ram, config.preferred_backends)
            top = ranked[:max(1, config.max_candidates)]
            selection = SelectionStep(
                scoring_method=SCORING_SINGLE if len(survivors) == 1 else SCORING_MULTI,
                top_candidates=tuple(top),
                preferred_boosted=sum(1 for c in ranked if c.bonus > 0),
                duration=elapsed_ms(step_start),
            )

            # --- Step 4: route ---
            self.stage = PipelineStage.ROUTING
            step_start = time.perf_counter()
            selected = top[0].model
            if selected.backend not in self.registry:
                logger.warning(f"Selected model {selected.name} belongs to unregistered backend {selected.backend}")
            dispatch = DispatchStep(
                target_backend=selected.backend,
                routing_method=ROUTING_DIRECT,
                duration=elapsed_ms(step_start),
            )
        except Exception:
            self.stage = PipelineStage.FAILED
            raise

        decision = ModelRoutingDecision(
            selected_model=selected,
            alternatives=tuple(c.model for c in top[1:1 + MAX_ALTERNATIVES]),
            reasoning=self._build_reasoning(selected, config, len(survivors), ranked),
            consolidation=consolidation,
            filtering=filtering,
            selection=selection,
            dispatch=dispatch,
            total_duration=elapsed_ms(started),
            created_at=self._clock(),
        )
        self.stage = PipelineStage.DONE

        logger.info(
            f"Routed to {selected.name} ({selected.backend}) "
            f"from {len(survivors)}/{len(models)} candidates in {decision.total_duration:.1f}ms"
        )
        return decision

    @staticmethod
    def _apply_trust_threshold(models: List[UnifiedModel], minimum: Optional[float]) -> Tuple[List[UnifiedModel], int]:
        """Hard trust filter, returns (survivors, removed)."""
        if minimum is None:
            return models, 0
        return apply_predicate(models, lambda m: m.trust_score >= minimum)

    @staticmethod
    def _build_reasoning(
        selected: UnifiedModel,
        config: RoutingConfig,
        candidate_count: int,
        ranked: List[ScoredCandidate],
    ) -> str:
        """Human-readable explanation of the selection."""
        reasons = []

        if config.task:
            reasons.append(f"Optimized for {config.task} tasks (score: {selected.suitability(config.task):g}/10)")

        reasons.append(f"{trust_label(selected.trust_score)} ({selected.trust_score:g}/10)")

        constraints = config.hardware_constraints
        if constraints is not None and constraints.available_ram:
            reasons.append(f"Fits within {constraints.available_ram:g}GB RAM constraint")

        if candidate_count > 1:
            reasons.append(f"Selected from {candidate_count} suitable candidates")

        # Mention the bonus only when it changed the winner
        if ranked and ranked[0].bonus > 0:
            best_unboosted = max(ranked, key=lambda c: c.composite_score)
            if best_unboosted.model is not selected:
                reasons.append(f"Preferred backend {selected.backend} boosted the ranking")

        reasons.append(f"Available on {selected.backend} backend")
        return ", ".join(reasons)

    # =========================================================================
    # RECOMMENDATION
    # =========================================================================

    async def get_routing_recommendation(self, task: Optional[str] = None) -> RoutingRecommendation:
        """
        Propose a routing config for this host without routing.

        Args:
            task: Task type to put in the config

        Returns:
            RoutingRecommendation
        """
        resources = await self.probe.detect()
        recommended = RoutingConfig(
            task=task,
            hardware_constraints=HardwareConstraints(
                available_ram=float(math.floor(resources.available_ram * RECOMMENDED_RAM_SHARE)),
                preferred_size=preferred_size_for_ram(resources.available_ram),
            ),
            preferred_backends=tuple(preferred_backends_for_ram(resources.available_ram)),
            minimum_trust_score=RECOMMENDED_MIN_TRUST,
            allow_fallback=True,
            max_candidates=5,
        )
        return RoutingRecommendation(
            recommended_config=recommended,
            reasoning=self._build_system_reasoning(resources, recommended),
            system_info=resources,
        )

    @staticmethod
    def _build_system_reasoning(resources: SystemResources, config: RoutingConfig) -> str:
        reasons = [f"System has {resources.available_ram:g}GB available RAM"]
        constraints = config.hardware_constraints
        if constraints is not None and constraints.preferred_size:
            reasons.append(f"Recommending {constraints.preferred_size} models for optimal performance")
        if config.preferred_backends:
            reasons.append(f"Prioritizing {', '.join(config.preferred_backends)} backends")
        return ". ".join(reasons)
