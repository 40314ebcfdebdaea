#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CONSOLIDATOR - Unified Model Discovery
======================================

Builds the master model list from every registered backend.

- Catalogs are queried concurrently, each with its own timeout
- A failing or hanging backend contributes zero models, never an error
- Missing metadata is completed from the model name (see heuristics)
- The same name on two backends stays two entries (trust and
  availability differ per backend)
- Results are cached for a short time; the cache is the only shared
  mutable state and is guarded by a single lock

Author: Léon
"""

from typing import Callable, Dict, List, Optional
import asyncio
import logging
import time

from . import heuristics
from .backends import BackendCatalog, BackendRegistry
from .models import RawModelDescriptor, UnifiedModel

logger = logging.getLogger(__name__)


class ModelConsolidator:
    """
    Discovers models across backends.

    Usage:
        consolidator = ModelConsolidator(registry)
        models = await consolidator.discover()
        models = await consolidator.discover(force_refresh=True)
    """

    def __init__(
        self,
        registry: BackendRegistry,
        cache_ttl: float = 30.0,
        backend_timeout: float = 5.0,
        trust_table: Optional[Dict[str, float]] = None,
        default_trust: float = heuristics.DEFAULT_TRUST,
        context_defaults: Optional[Dict[str, int]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            registry: Backend catalogs to query
            cache_ttl: Seconds a discovered list stays valid
            backend_timeout: Seconds allowed per catalog query
            trust_table: Trust score per family for uncurated models
            default_trust: Trust score for unrated families
            context_defaults: Context size per family
            clock: Time source for the cache
        """
        self._registry = registry
        self._cache_ttl = cache_ttl
        self._backend_timeout = backend_timeout
        self._trust_table = trust_table or {}
        self._default_trust = default_trust
        self._context_defaults = context_defaults
        self._clock = clock

        self._cached_models: List[UnifiedModel] = []
        self._last_cache_update: float = 0.0
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    async def discover(self, force_refresh: bool = False) -> List[UnifiedModel]:
        """
        Get every model from every backend.

        Args:
            force_refresh: Ignore the cache

        Returns:
            Models in registry order, then catalog order
        """
        async with self._loop_lock():
            if not force_refresh and self._cache_is_valid():
                logger.debug(f"Using cached model list ({len(self._cached_models)} models)")
                return list(self._cached_models)

            catalogs = self._registry.catalogs()
            results = await asyncio.gather(*(self._query_catalog(c) for c in catalogs))

            models: List[UnifiedModel] = []
            for descriptors in results:
                models.extend(self.unify(d) for d in descriptors)

            self._cached_models = models
            self._last_cache_update = self._clock()
            logger.info(f"Discovered {len(models)} models across {len(catalogs)} backends")
            return list(models)

    def _loop_lock(self) -> asyncio.Lock:
        """The cache lock of the running event loop."""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _cache_is_valid(self) -> bool:
        if not self._cached_models:
            return False
        return self._clock() - self._last_cache_update < self._cache_ttl

    async def _query_catalog(self, catalog: BackendCatalog) -> List[RawModelDescriptor]:
        """Query one catalog; failures and timeouts give an empty list."""
        try:
            return await asyncio.wait_for(catalog.list_models(), timeout=self._backend_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Backend {catalog.backend} timed out after {self._backend_timeout}s")
        except Exception as e:
            logger.warning(f"Failed to discover models from {catalog.backend}: {e}")
        return []

    def clear_cache(self) -> None:
        """Drop the cached model list."""
        self._cached_models = []
        self._last_cache_update = 0.0

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------

    def unify(self, descriptor: RawModelDescriptor) -> UnifiedModel:
        """
        Turn a catalog descriptor into a complete UnifiedModel.

        Structured metadata from the catalog wins; anything missing is
        inferred from the name.
        """
        name = descriptor.name
        family = heuristics.infer_family(name)
        if family == heuristics.UNKNOWN_FAMILY and descriptor.model_type:
            family = descriptor.model_type.lower()

        parameters = (descriptor.parameters
                      or heuristics.infer_parameters(name)
                      or descriptor.metadata.get("reported_parameters"))

        ram_requirement = descriptor.ram_requirement
        if not ram_requirement:
            ram_requirement = heuristics.ram_for_parameters(heuristics.parse_parameters(parameters))
        ram_requirement = heuristics.format_gb(heuristics.parse_ram(ram_requirement))

        context_size = descriptor.context_size or heuristics.infer_context_size(
            name, family, self._context_defaults
        )

        if descriptor.trust_score is not None:
            trust_score = heuristics.clamp_score(descriptor.trust_score)
        else:
            trust_score = heuristics.infer_trust_score(family, self._trust_table, self._default_trust)

        if descriptor.task_suitability:
            task_suitability = heuristics.complete_task_suitability(descriptor.task_suitability)
        else:
            task_suitability = heuristics.infer_task_suitability(
                name, descriptor.model_type or family, descriptor.description
            )

        metadata = {k: v for k, v in descriptor.metadata.items() if v is not None}

        return UnifiedModel(
            name=name,
            backend=descriptor.backend,
            model_type=descriptor.model_type or family,
            parameters=parameters,
            context_size=int(context_size),
            ram_requirement=ram_requirement,
            trust_score=trust_score,
            task_suitability=task_suitability,
            available=descriptor.available,
            description=descriptor.description or f"{descriptor.backend} model with {family} architecture",
            metadata=metadata,
        )

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    async def models_by_backend(self) -> Dict[str, List[UnifiedModel]]:
        """Discovered models grouped by backend."""
        grouped: Dict[str, List[UnifiedModel]] = {}
        for model in await self.discover():
            grouped.setdefault(model.backend, []).append(model)
        return grouped

    async def check_backends(self) -> Dict[str, bool]:
        """Health probe of every registered backend."""
        catalogs = self._registry.catalogs()
        results = await asyncio.gather(*(self._probe(c) for c in catalogs))
        return {c.backend: ok for c, ok in zip(catalogs, results)}

    async def _probe(self, catalog: BackendCatalog) -> bool:
        try:
            return await asyncio.wait_for(catalog.health_check(), timeout=self._backend_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Health check of {catalog.backend} timed out")
        except Exception as e:
            logger.warning(f"Health check of {catalog.backend} failed: {e}")
        return False
