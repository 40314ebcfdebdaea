#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ROUTING - Model Selection
=========================

Filter, score and select a model for a request.

Components:
- filters: candidate filter chain
- scoring: weighted multi-factor scoring
- RoutingPipeline: four-step routing with an audit record
- SmartRoutingService: cached smart defaults with fallback

Author: Léon
"""

from .filters import filter_candidates
from .scoring import score_candidates
from .pipeline import PipelineStage, RoutingPipeline
from .smart import SmartRoutingService, build_service

__all__ = [
    "filter_candidates",
    "score_candidates",
    "PipelineStage",
    "RoutingPipeline",
    "SmartRoutingService",
    "build_service",
]
