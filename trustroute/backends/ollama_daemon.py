#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
OLLAMA DAEMON - Local Model-Serving Catalog
===========================================

Lists the models pulled into the local Ollama daemon.

Ollama reports little more than a name, so parameter count, RAM,
context and task ratings are left to the consolidator heuristics.
The parameter size Ollama does report is only used when the name
carries none.

Author: Léon
"""

from typing import Any, Callable, List, Optional
import asyncio
import logging

import ollama
import requests

from . import BackendCatalog
from ..errors import BackendUnavailable
from ..models import Backend, RawModelDescriptor

logger = logging.getLogger(__name__)


class OllamaCatalog(BackendCatalog):
    """
    Catalog of the local Ollama daemon.

    Usage:
        catalog = OllamaCatalog(host="http://localhost:11434")
        models = await catalog.list_models()
    """

    backend = Backend.OLLAMA.value

    def __init__(
        self,
        host: str = "http://localhost:11434",
        timeout: float = 5.0,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Args:
            host: Ollama base URL
            timeout: Health probe timeout in seconds
            client_factory: Builds the async client (tests inject a fake)
        """
        self.host = host.rstrip("/")
        self.timeout = timeout
        self._client_factory = client_factory or (lambda h: ollama.AsyncClient(host=h))

    async def list_models(self) -> List[RawModelDescriptor]:
        """List pulled models."""
        try:
            async with self._client_factory(self.host) as client:
                response = await client.list()
        except (ollama.ResponseError, ConnectionError, OSError) as e:
            raise BackendUnavailable(self.backend, str(e)) from e

        descriptors = []
        for entry in self._iter_entries(response):
            name = self._field(entry, "model") or self._field(entry, "name")
            if not name:
                continue
            details = self._field(entry, "details")
            parameter_size = self._field(details, "parameter_size") if details else None
            descriptors.append(RawModelDescriptor(
                name=name,
                backend=self.backend,
                available=True,
                model_type=self._field(details, "family") if details else None,
                metadata={
                    "size_on_disk": self._field(entry, "size"),
                    "quantization": self._field(details, "quantization_level") if details else None,
                    "reported_parameters": parameter_size,
                },
            ))

        logger.debug(f"Ollama models detected: {[d.name for d in descriptors]}")
        return descriptors

    async def health_check(self) -> bool:
        """Ping /api/version."""
        try:
            response = await asyncio.to_thread(
                requests.get, f"{self.host}/api/version", timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.exceptions.ConnectionError:
            logger.warning(f"Cannot connect to Ollama ({self.host}), is 'ollama serve' running?")
            return False
        except requests.exceptions.RequestException as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    # -------------------------------------------------------------------------
    # Response parsing (typed objects or plain dicts depending on version)
    # -------------------------------------------------------------------------

    @staticmethod
    def _iter_entries(response: Any) -> List[Any]:
        if hasattr(response, "models"):
            return list(response.models or [])
        if isinstance(response, dict):
            return list(response.get("models", []))
        return []

    @staticmethod
    def _field(obj: Any, name: str) -> Any:
        if obj is None:
            return None
        if isinstance(obj, dict):
            return obj.get(name)
        return getattr(obj, name, None)
