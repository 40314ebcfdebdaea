#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TRUSTROUTE - Trust-Aware Model Routing
======================================

Picks the right language model for a request across a local Ollama
daemon, a local GGUF file store and cloud APIs.

Features:
    - Concurrent model discovery with per-backend timeouts
    - Metadata inference for models without a catalog entry
    - Task, hardware and trust filtering
    - Weighted multi-factor scoring with an auditable breakdown
    - Cached smart defaults with a fallback chain

Usage:
    # Command line
    trustroute route --task coding --ram 8

    # Or import components
    from trustroute import build_service, RoutingConfig
    service = build_service()
    decision = await service.pipeline.route(RoutingConfig(task="coding"))

Author: Léon
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Léon"
__license__ = "MIT"

from .config import RouterConfig, DATA_DIR, CONFIG_DIR
from .errors import BackendUnavailable, NoSuitableModels, ProbeFailure, RoutingError
from .models import (
    DefaultModelSelection,
    HardwareConstraints,
    ModelRoutingDecision,
    RoutingConfig,
    SmartContext,
    SystemResources,
    UnifiedModel,
)
from .consolidator import ModelConsolidator
from .resources import SystemResourceProbe
from .routing import RoutingPipeline, SmartRoutingService, build_service

__all__ = [
    # Version info
    "__version__",
    "__author__",

    # Configuration
    "RouterConfig",
    "DATA_DIR",
    "CONFIG_DIR",

    # Errors
    "RoutingError",
    "BackendUnavailable",
    "NoSuitableModels",
    "ProbeFailure",

    # Records
    "UnifiedModel",
    "HardwareConstraints",
    "RoutingConfig",
    "SystemResources",
    "ModelRoutingDecision",
    "SmartContext",
    "DefaultModelSelection",

    # Components
    "ModelConsolidator",
    "SystemResourceProbe",
    "RoutingPipeline",
    "SmartRoutingService",
    "build_service",
]
