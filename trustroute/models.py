#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MODELS - Routing Data Model
===========================

Records exchanged between the routing components.

- UnifiedModel: one model from one backend, metadata completed
- RoutingConfig / HardwareConstraints: what the caller asks for
- SystemResources: what the host has
- ScoredCandidate: a filtered model with its score breakdown
- ModelRoutingDecision: the immutable audit record of one routing run

UnifiedModel and the decision records are frozen: they are rebuilt on
every discovery / routing pass, never patched.

Author: Léon
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .heuristics import parse_parameters, parse_ram


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Backend(Enum):
    """Model sources."""
    OLLAMA = "ollama"              # Local model-serving daemon
    HUGGINGFACE = "huggingface"    # Local GGUF file store
    CLOUD = "cloud"                # Cloud APIs


class TaskType(Enum):
    """Task categories models are rated against."""
    CODING = "coding"
    REASONING = "reasoning"
    GENERAL = "general"
    CREATIVE = "creative"


TASK_TYPES = [t.value for t in TaskType]
BACKENDS = [b.value for b in Backend]


# =============================================================================
# MODEL RECORDS
# =============================================================================

@dataclass
class RawModelDescriptor:
    """
    A model as reported by one backend catalog.

    Only name, backend and available are mandatory; the consolidator
    fills in everything else from the name when a backend has no
    structured metadata.
    """
    name: str
    backend: str
    available: bool = True
    model_type: Optional[str] = None
    parameters: Optional[str] = None
    context_size: Optional[int] = None
    ram_requirement: Optional[str] = None
    trust_score: Optional[float] = None
    task_suitability: Optional[Dict[str, float]] = None
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UnifiedModel:
    """A model from one backend with complete metadata."""
    name: str
    backend: str
    model_type: str
    parameters: Optional[str]          # "3.8B", "135M" or None when unknown
    context_size: int                  # Tokens
    ram_requirement: str               # "NGB"
    trust_score: float                 # 0-10
    task_suitability: Dict[str, float] # task -> 0-10
    available: bool
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def ram_gb(self) -> float:
        """RAM requirement in GB, always positive."""
        return parse_ram(self.ram_requirement)

    @property
    def parameter_count(self) -> Optional[float]:
        """Parameter count in billions, None when unknown."""
        return parse_parameters(self.parameters)

    @property
    def expected_size(self) -> Optional[int]:
        """Download size in bytes, when the backend knows it."""
        return self.metadata.get("expected_size")

    def suitability(self, task: Optional[str]) -> float:
        """Suitability for a task, general when no task is given."""
        return self.task_suitability.get(task or TaskType.GENERAL.value, 0.0)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "backend": self.backend,
            "type": self.model_type,
            "parameters": self.parameters,
            "contextSize": self.context_size,
            "ramRequirement": self.ram_requirement,
            "trustScore": self.trust_score,
            "taskSuitability": dict(self.task_suitability),
            "available": self.available,
            "description": self.description,
            "metadata": dict(self.metadata),
        }


# =============================================================================
# ROUTING INPUTS
# =============================================================================

@dataclass(frozen=True)
class HardwareConstraints:
    """Hardware limits for one routing call."""
    available_ram: Optional[float] = None      # GB
    max_download_size: Optional[int] = None    # Bytes
    preferred_size: Optional[str] = None       # small, medium, large (advisory)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "availableRAM": self.available_ram,
            "maxDownloadSize": self.max_download_size,
            "preferredSize": self.preferred_size,
        }


@dataclass(frozen=True)
class RoutingConfig:
    """Options for one routing call."""
    task: Optional[str] = None
    hardware_constraints: Optional[HardwareConstraints] = None
    preferred_backends: Tuple[str, ...] = ()
    minimum_trust_score: Optional[float] = None
    allow_fallback: bool = True
    max_candidates: int = 5

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "task": self.task,
            "hardwareConstraints": (self.hardware_constraints.to_dict()
                                    if self.hardware_constraints else None),
            "preferredBackends": list(self.preferred_backends),
            "minimumTrustScore": self.minimum_trust_score,
            "allowFallback": self.allow_fallback,
            "maxCandidates": self.max_candidates,
        }


@dataclass(frozen=True)
class SystemResources:
    """Host resources, sizes in GB."""
    available_ram: float
    total_ram: float
    cpu_cores: int
    disk_space: float
    platform: str
    gpu_memory: Optional[float] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "availableRAM": self.available_ram,
            "totalRAM": self.total_ram,
            "cpuCores": self.cpu_cores,
            "diskSpace": self.disk_space,
            "gpuMemory": self.gpu_memory,
            "platform": self.platform,
        }


# =============================================================================
# ROUTING OUTPUTS
# =============================================================================

@dataclass
class FilterResult:
    """Survivors of the filter chain and what each stage removed."""
    models: List[UnifiedModel]
    availability_filtered: int = 0
    task_filtered: int = 0
    hardware_filtered: int = 0


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its composite score and per-factor breakdown."""
    model: UnifiedModel
    composite_score: float             # 0-1, weighted sum of breakdown
    breakdown: Dict[str, float]        # Each factor 0-1
    bonus: float = 0.0                 # Preferred-backend boost

    @property
    def rank_score(self) -> float:
        """Score used for ordering."""
        return self.composite_score + self.bonus

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "model": self.model.to_dict(),
            "score": round(self.composite_score, 4),
            "bonus": self.bonus,
            "breakdown": {k: round(v, 4) for k, v in self.breakdown.items()},
        }


@dataclass(frozen=True)
class ConsolidationStep:
    """Step 1 record."""
    total_models: int
    backend_counts: Dict[str, int]
    duration: float                    # Milliseconds


@dataclass(frozen=True)
class FilteringStep:
    """Step 2 record. Each counter is what that predicate removed."""
    availability_filtered: int
    task_filtered: int
    hardware_filtered: int
    trust_filtered: int
    remaining: int
    duration: float


@dataclass(frozen=True)
class SelectionStep:
    """Step 3 record."""
    scoring_method: str
    top_candidates: Tuple[ScoredCandidate, ...]
    preferred_boosted: int
    duration: float


@dataclass(frozen=True)
class DispatchStep:
    """Step 4 record."""
    target_backend: str
    routing_method: str
    duration: float


@dataclass(frozen=True)
class ModelRoutingDecision:
    """Result of one routing run."""
    selected_model: UnifiedModel
    alternatives: Tuple[UnifiedModel, ...]
    reasoning: str
    consolidation: ConsolidationStep
    filtering: FilteringStep
    selection: SelectionStep
    dispatch: DispatchStep
    total_duration: float
    created_at: float = 0.0

    def to_dict(self) -> Dict:
        """Convert to dictionary (audit trail layout)."""
        return {
            "selectedModel": self.selected_model.to_dict(),
            "alternatives": [m.to_dict() for m in self.alternatives],
            "reasoning": self.reasoning,
            "step1_consolidation": {
                "totalModels": self.consolidation.total_models,
                "backendCounts": dict(self.consolidation.backend_counts),
                "duration": self.consolidation.duration,
            },
            "step2_filtering": {
                "availabilityFiltered": self.filtering.availability_filtered,
                "taskFiltered": self.filtering.task_filtered,
                "hardwareFiltered": self.filtering.hardware_filtered,
                "trustFiltered": self.filtering.trust_filtered,
                "remaining": self.filtering.remaining,
                "duration": self.filtering.duration,
            },
            "step3_selection": {
                "scoringMethod": self.selection.scoring_method,
                "topCandidates": [c.to_dict() for c in self.selection.top_candidates],
                "preferredBoosted": self.selection.preferred_boosted,
                "duration": self.selection.duration,
            },
            "step4_routing": {
                "targetBackend": self.dispatch.target_backend,
                "routingMethod": self.dispatch.routing_method,
                "duration": self.dispatch.duration,
            },
            "totalDuration": self.total_duration,
            "createdAt": self.created_at,
        }


# =============================================================================
# SMART ROUTING RECORDS
# =============================================================================

@dataclass(frozen=True)
class SmartContext:
    """Caller hints for a smart default."""
    task: Optional[str] = None
    preferred_backends: Tuple[str, ...] = ()
    urgency: Optional[str] = None      # low, medium, high


@dataclass
class DefaultModelSelection:
    """Smart default result."""
    selected_model: UnifiedModel
    reason: str                        # cached, intelligent_routing, fallback, system_default
    alternatives: List[UnifiedModel]
    reasoning: str
    confidence: float

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "selectedModel": self.selected_model.to_dict(),
            "reason": self.reason,
            "alternatives": [m.to_dict() for m in self.alternatives],
            "reasoning": self.reasoning,
            "confidence": self.confidence,
        }


@dataclass
class RoutingRecommendation:
    """Advisory config proposed from the host resources."""
    recommended_config: RoutingConfig
    reasoning: str
    system_info: SystemResources

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "recommended": self.recommended_config.to_dict(),
            "reasoning": self.reasoning,
            "systemInfo": self.system_info.to_dict(),
        }


@dataclass
class SmartRoutingRecommendation:
    """Recommendation backed by an actual routing run."""
    primary: UnifiedModel
    alternatives: List[UnifiedModel]
    reasoning: str
    system_analysis: Dict[str, Any]
    confidence: float
    fallback_strategy: str

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "primary": self.primary.to_dict(),
            "alternatives": [m.to_dict() for m in self.alternatives],
            "reasoning": self.reasoning,
            "systemAnalysis": dict(self.system_analysis),
            "confidence": self.confidence,
            "fallbackStrategy": self.fallback_strategy,
        }
