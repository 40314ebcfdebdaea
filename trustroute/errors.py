#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ERRORS - Routing Error Taxonomy
===============================

Only NoSuitableModels ever leaves RoutingPipeline.route().
BackendUnavailable and ProbeFailure are raised internally and absorbed
into degraded data (empty catalog, default resources).

Author: Léon
"""

from typing import Dict, List, Optional


class RoutingError(Exception):
    """Base class for routing errors."""


class BackendUnavailable(RoutingError):
    """A backend catalog could not be queried."""

    def __init__(self, backend: str, reason: str):
        self.backend = backend
        self.reason = reason
        super().__init__(f"Backend '{backend}' unavailable: {reason}")


class ProbeFailure(RoutingError):
    """The host resource query failed."""


class NoSuitableModels(RoutingError):
    """
    Every discovered model was removed during filtering.

    Carries the per-stage removal counts so the CLI can explain
    what to change.
    """

    def __init__(
        self,
        total_models: int,
        availability_filtered: int = 0,
        task_filtered: int = 0,
        hardware_filtered: int = 0,
        trust_filtered: int = 0,
        task: Optional[str] = None,
        available_ram: Optional[float] = None,
        minimum_trust_score: Optional[float] = None,
    ):
        self.total_models = total_models
        self.availability_filtered = availability_filtered
        self.task_filtered = task_filtered
        self.hardware_filtered = hardware_filtered
        self.trust_filtered = trust_filtered
        self.task = task
        self.available_ram = available_ram
        self.minimum_trust_score = minimum_trust_score
        super().__init__(
            f"No suitable models found after filtering "
            f"({total_models} discovered, {availability_filtered} unavailable, "
            f"{task_filtered} unsuited to task, {hardware_filtered} over hardware limits, "
            f"{trust_filtered} below trust threshold)"
        )

    @property
    def counts(self) -> Dict[str, int]:
        """Removal counts per filtering stage."""
        return {
            "totalModels": self.total_models,
            "availabilityFiltered": self.availability_filtered,
            "taskFiltered": self.task_filtered,
            "hardwareFiltered": self.hardware_filtered,
            "trustFiltered": self.trust_filtered,
        }

    def hints(self) -> List[str]:
        """Remediation hints, most relevant stage first."""
        hints = []
        if self.total_models == 0:
            hints.append("No models were discovered: start Ollama (ollama serve) "
                         "or download a model into the models directory")
        if self.availability_filtered:
            hints.append(f"{self.availability_filtered} model(s) are known but not available locally: "
                         "download them or configure cloud API keys")
        if self.task_filtered:
            hints.append(f"{self.task_filtered} model(s) scored below 6/10 for '{self.task}': "
                         "try --task general")
        if self.hardware_filtered:
            ram = f" ({self.available_ram:g}GB)" if self.available_ram is not None else ""
            hints.append(f"{self.hardware_filtered} model(s) exceed the hardware limits{ram}: "
                         "raise the RAM limit or install a smaller model")
        if self.trust_filtered:
            hints.append(f"{self.trust_filtered} model(s) are below the minimum trust score "
                         f"({self.minimum_trust_score}): lower --min-trust")
        return hints
