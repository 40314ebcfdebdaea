#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CLOUD - Cloud API Catalog
=========================

Cloud models declared in configuration. A model is available when its
provider API key is present in the environment. No network calls are
made here; generation adapters handle the actual API.

Author: Léon
"""

from typing import Any, Dict, List, Optional
import logging
import os

from . import BackendCatalog
from ..models import Backend, RawModelDescriptor

logger = logging.getLogger(__name__)

# Local footprint of a cloud model (client only)
CLOUD_RAM_REQUIREMENT = "1GB"


class CloudCatalog(BackendCatalog):
    """Catalog of configured cloud models."""

    backend = Backend.CLOUD.value

    def __init__(self, models: Optional[List[Dict[str, Any]]] = None):
        """
        Args:
            models: Cloud model entries (name, provider, api_key_env, ...)
        """
        self._models = models or []

    async def list_models(self) -> List[RawModelDescriptor]:
        """List configured cloud models."""
        descriptors = []
        for entry in self._models:
            descriptors.append(RawModelDescriptor(
                name=entry["name"],
                backend=self.backend,
                available=self._has_key(entry),
                model_type=entry.get("type"),
                parameters=entry.get("parameters"),
                context_size=entry.get("context_size"),
                ram_requirement=entry.get("ram_requirement", CLOUD_RAM_REQUIREMENT),
                trust_score=entry.get("trust_score"),
                task_suitability=entry.get("task_suitability"),
                description=entry.get("description", f"{entry.get('provider', 'cloud')} hosted model"),
                metadata={"provider": entry.get("provider")},
            ))
        return descriptors

    async def health_check(self) -> bool:
        """Healthy when at least one provider key is configured."""
        return any(self._has_key(entry) for entry in self._models)

    @staticmethod
    def _has_key(entry: Dict[str, Any]) -> bool:
        env_name = entry.get("api_key_env")
        return bool(env_name and os.environ.get(env_name))
