#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SCORING - Weighted Multi-Factor Candidate Scoring
=================================================

composite = 0.3 * trust
          + 0.3 * task_suitability
          + 0.2 * performance
          + 0.1 * availability
          + 0.1 * efficiency

Every factor is normalized to [0, 1] and kept in the breakdown so the
decision can be audited. Ordering is stable: equal scores keep
discovery order.

Author: Léon
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models import ScoredCandidate, UnifiedModel

WEIGHTS: Dict[str, float] = {
    "trust": 0.3,
    "task_suitability": 0.3,
    "performance": 0.2,
    "availability": 0.1,
    "efficiency": 0.1,
}

PREFERRED_BACKEND_BONUS = 0.15

# (minimum billions, score) - bigger models answer better
PERFORMANCE_STEPS: List[Tuple[float, float]] = [
    (70, 1.0),
    (30, 0.9),
    (13, 0.8),
    (7, 0.7),
    (3, 0.6),
    (1, 0.5),
]
SMALLEST_PERFORMANCE = 0.3
UNKNOWN_PERFORMANCE = 0.5

# (maximum RAM share, score) - smaller share of the headroom is better
EFFICIENCY_STEPS: List[Tuple[float, float]] = [
    (0.3, 1.0),
    (0.5, 0.8),
    (0.7, 0.6),
    (0.9, 0.4),
]
WORST_EFFICIENCY = 0.2
UNKNOWN_EFFICIENCY = 0.5


# =============================================================================
# FACTORS
# =============================================================================

def performance_proxy(model: UnifiedModel) -> float:
    """Quality proxy from the parameter count."""
    billions = model.parameter_count
    if billions is None:
        return UNKNOWN_PERFORMANCE
    for minimum, score in PERFORMANCE_STEPS:
        if billions >= minimum:
            return score
    return SMALLEST_PERFORMANCE


def efficiency_proxy(model: UnifiedModel, available_ram: Optional[float]) -> float:
    """How lightly the model sits in the RAM headroom."""
    if not available_ram or available_ram <= 0:
        return UNKNOWN_EFFICIENCY
    ratio = model.ram_gb / available_ram
    for maximum, score in EFFICIENCY_STEPS:
        if ratio <= maximum:
            return score
    return WORST_EFFICIENCY


def score_breakdown(
    model: UnifiedModel,
    task: Optional[str] = None,
    available_ram: Optional[float] = None,
) -> Dict[str, float]:
    """Normalized factor values of one model."""
    return {
        "trust": model.trust_score / 10,
        "task_suitability": model.suitability(task) / 10,
        "performance": performance_proxy(model),
        "availability": 1.0,
        "efficiency": efficiency_proxy(model, available_ram),
    }


def composite_score(breakdown: Dict[str, float]) -> float:
    """Weighted sum of a breakdown."""
    return sum(WEIGHTS[factor] * value for factor, value in breakdown.items())


# =============================================================================
# RANKING
# =============================================================================

def rank(candidates: Iterable[ScoredCandidate]) -> List[ScoredCandidate]:
    """Sort by rank score, highest first, ties in input order."""
    return sorted(candidates, key=lambda c: c.rank_score, reverse=True)


def score_candidates(
    models: Sequence[UnifiedModel],
    task: Optional[str] = None,
    available_ram: Optional[float] = None,
    preferred_backends: Sequence[str] = (),
) -> List[ScoredCandidate]:
    """
    Score and rank filtered models.

    Preferred backends get a fixed bonus on top of the composite score.
    It is a soft preference: a non-preferred model still wins when no
    preferred one survived filtering, or when it outscores them by more
    than the bonus.

    Args:
        models: Filtered candidates, in discovery order
        task: Requested task type
        available_ram: RAM headroom in GB for the efficiency factor
        preferred_backends: Backends to boost

    Returns:
        ScoredCandidates, best first
    """
    scored = []
    for model in models:
        breakdown = score_breakdown(model, task, available_ram)
        scored.append(ScoredCandidate(
            model=model,
            composite_score=composite_score(breakdown),
            breakdown=breakdown,
            bonus=PREFERRED_BACKEND_BONUS if model.backend in preferred_backends else 0.0,
        ))
    return rank(scored)
