#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
BACKENDS - Model Catalogs
=========================

One catalog per model source. Each catalog lists the models it knows
about (as RawModelDescriptor) and answers a health probe.

Available catalogs:
- OllamaCatalog: local Ollama daemon
- FileStoreCatalog: local GGUF file store
- CloudCatalog: configured cloud APIs

Usage:
    from trustroute.backends import build_registry

    registry = build_registry(config)
    for catalog in registry.catalogs():
        models = await catalog.list_models()

Author: Léon
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging

from ..config import RouterConfig
from ..models import Backend, RawModelDescriptor

logger = logging.getLogger(__name__)


# =============================================================================
# CATALOG INTERFACE
# =============================================================================

class BackendCatalog(ABC):
    """Enumerates the models of one backend."""

    backend: str = ""

    @abstractmethod
    async def list_models(self) -> List[RawModelDescriptor]:
        """
        List the models of this backend.

        Raises:
            BackendUnavailable or any I/O error; the consolidator
            absorbs them.
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the backend answers right now."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.backend}>"


# =============================================================================
# REGISTRY
# =============================================================================

class BackendRegistry:
    """
    Ordered set of catalogs, populated once at startup.

    Registration order is discovery order, which is also the tie-break
    order when two candidates score the same.
    """

    def __init__(self, catalogs: Optional[List[BackendCatalog]] = None):
        self._catalogs: Dict[str, BackendCatalog] = {}
        for catalog in catalogs or []:
            self.register(catalog)

    def register(self, catalog: BackendCatalog) -> None:
        """Add a catalog, replacing any catalog of the same backend."""
        if catalog.backend in self._catalogs:
            logger.warning(f"Replacing catalog for backend {catalog.backend}")
        self._catalogs[catalog.backend] = catalog
        logger.debug(f"Catalog registered: {catalog!r}")

    def get(self, backend: str) -> Optional[BackendCatalog]:
        """Catalog of a backend, None if not registered."""
        return self._catalogs.get(backend)

    def catalogs(self) -> List[BackendCatalog]:
        """Catalogs in registration order."""
        return list(self._catalogs.values())

    def backends(self) -> List[str]:
        """Registered backend identifiers."""
        return list(self._catalogs.keys())

    def __contains__(self, backend: str) -> bool:
        return backend in self._catalogs

    def __len__(self) -> int:
        return len(self._catalogs)


def build_registry(config: RouterConfig) -> BackendRegistry:
    """
    Register a catalog for every enabled backend.

    Args:
        config: Routing configuration

    Returns:
        BackendRegistry (ollama, huggingface, cloud order)
    """
    from .ollama_daemon import OllamaCatalog
    from .file_store import FileStoreCatalog
    from .cloud import CloudCatalog

    registry = BackendRegistry()

    if config.is_backend_enabled(Backend.OLLAMA.value):
        registry.register(OllamaCatalog(
            host=config.get_backend_setting(Backend.OLLAMA.value, "host", "http://localhost:11434"),
            timeout=config.get_backend_timeout(),
        ))

    if config.is_backend_enabled(Backend.HUGGINGFACE.value):
        registry.register(FileStoreCatalog(
            models_dir=config.get_models_dir(),
            catalog=config.get_file_catalog(),
        ))

    if config.is_backend_enabled(Backend.CLOUD.value):
        registry.register(CloudCatalog(models=config.get_cloud_models()))

    logger.info(f"Backends registered: {registry.backends()}")
    return registry


__all__ = [
    "BackendCatalog",
    "BackendRegistry",
    "build_registry",
]
