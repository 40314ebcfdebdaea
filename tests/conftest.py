#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared test fixtures.

- FakeCatalog: in-memory backend catalog with optional delay/failure
- FakeClock: manually advanced time source
- StaticProbe: resource probe returning fixed resources
- seed_descriptors: four models, exactly one unavailable
- make_stack: registry + consolidator + pipeline + service wired together
"""

from types import SimpleNamespace
from typing import List, Optional
import asyncio

import pytest

from trustroute.backends import BackendCatalog, BackendRegistry
from trustroute.consolidator import ModelConsolidator
from trustroute.models import RawModelDescriptor, SystemResources
from trustroute.routing.pipeline import RoutingPipeline
from trustroute.routing.smart import SmartRoutingService

TRUST_TABLE = {"llama": 8.5, "qwen": 8.5, "phi": 8.5, "mistral": 8.0}


class FakeCatalog(BackendCatalog):
    """Catalog serving fixed descriptors."""

    def __init__(
        self,
        backend: str,
        descriptors: Optional[List[RawModelDescriptor]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        healthy: bool = True,
    ):
        self.backend = backend
        self.descriptors = descriptors or []
        self.delay = delay
        self.error = error
        self.healthy = healthy
        self.calls = 0

    async def list_models(self) -> List[RawModelDescriptor]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.descriptors)

    async def health_check(self) -> bool:
        if self.error is not None:
            raise self.error
        return self.healthy


class FakeClock:
    """Time source advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProbe:
    """Resource probe returning fixed resources."""

    def __init__(self, available_ram: float = 16.0, total_ram: float = 32.0):
        self.resources = SystemResources(
            available_ram=available_ram,
            total_ram=total_ram,
            cpu_cores=8,
            disk_space=200.0,
            platform="linux",
        )
        self.calls = 0

    async def detect(self) -> SystemResources:
        self.calls += 1
        return self.resources

    def clear_cache(self) -> None:
        pass


def seed_descriptors():
    """
    Four models across two backends, one unavailable.

    phi-3.5-mini-instruct is the only model rated 9 for coding.
    """
    file_store = [
        RawModelDescriptor(
            name="phi-3.5-mini-instruct",
            backend="huggingface",
            model_type="phi",
            parameters="3.8B",
            context_size=4096,
            ram_requirement="4GB",
            trust_score=9.5,
            task_suitability={"coding": 9, "reasoning": 7, "general": 8, "creative": 6},
            metadata={"expected_size": 2_390_000_000},
        ),
        RawModelDescriptor(
            name="qwen2.5-1.5b-instruct",
            backend="huggingface",
            model_type="qwen",
            parameters="1.5B",
            context_size=32768,
            ram_requirement="2GB",
            trust_score=8.5,
            task_suitability={"coding": 7, "reasoning": 7, "general": 8, "creative": 6},
            metadata={"expected_size": 1_120_000_000},
        ),
        RawModelDescriptor(
            name="mistral-7b-instruct",
            backend="huggingface",
            available=False,
            model_type="mistral",
            parameters="7B",
            ram_requirement="8GB",
            trust_score=8.0,
            task_suitability={"coding": 6, "reasoning": 7, "general": 8, "creative": 7},
        ),
    ]
    ollama = [
        # Bare name, everything inferred
        RawModelDescriptor(name="llama3.2:3b", backend="ollama"),
    ]
    return ollama, file_store


def make_stack(
    catalogs: Optional[List[BackendCatalog]] = None,
    available_ram: float = 16.0,
    backend_timeout: float = 5.0,
):
    """Wire a test routing stack on a shared fake clock."""
    if catalogs is None:
        ollama, file_store = seed_descriptors()
        catalogs = [FakeCatalog("ollama", ollama), FakeCatalog("huggingface", file_store)]

    clock = FakeClock()
    registry = BackendRegistry(catalogs)
    consolidator = ModelConsolidator(
        registry,
        cache_ttl=30,
        backend_timeout=backend_timeout,
        trust_table=TRUST_TABLE,
        clock=clock,
    )
    probe = StaticProbe(available_ram=available_ram)
    pipeline = RoutingPipeline(consolidator, probe, registry, clock=clock)
    service = SmartRoutingService(pipeline, decision_ttl=300, clock=clock)
    return SimpleNamespace(
        clock=clock,
        catalogs=catalogs,
        registry=registry,
        consolidator=consolidator,
        probe=probe,
        pipeline=pipeline,
        service=service,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stack():
    return make_stack()
