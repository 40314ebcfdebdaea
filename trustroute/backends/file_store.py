#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FILE STORE - Local GGUF Model Catalog
=====================================

Curated GGUF models with full metadata (trust, size, RAM, task
ratings) come from configuration. A curated model is available once
its file sits in the models directory.

Other *.gguf files found in the directory are listed too, with only
their name; the consolidator infers the rest.

Author: Léon
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import asyncio
import logging

from . import BackendCatalog
from ..errors import BackendUnavailable
from ..models import Backend, RawModelDescriptor

logger = logging.getLogger(__name__)


class FileStoreCatalog(BackendCatalog):
    """
    Catalog of the local GGUF store.

    Usage:
        catalog = FileStoreCatalog(models_dir=Path("~/.trustroute/models"), catalog=[...])
        models = await catalog.list_models()
    """

    backend = Backend.HUGGINGFACE.value

    def __init__(self, models_dir: Path, catalog: Optional[List[Dict[str, Any]]] = None):
        """
        Args:
            models_dir: Folder holding downloaded GGUF files
            catalog: Curated model entries (see config/routing.yaml)
        """
        self.models_dir = Path(models_dir).expanduser()
        self._catalog = catalog or []

    async def list_models(self) -> List[RawModelDescriptor]:
        """List curated models plus untracked GGUF files."""
        return await asyncio.to_thread(self._scan)

    async def health_check(self) -> bool:
        """The store is healthy when its folder exists."""
        return await asyncio.to_thread(self.models_dir.is_dir)

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _scan(self) -> List[RawModelDescriptor]:
        try:
            present = {p.name: p for p in self.models_dir.glob("*.gguf")} if self.models_dir.is_dir() else {}
        except OSError as e:
            raise BackendUnavailable(self.backend, str(e)) from e

        descriptors = []
        tracked = set()

        for entry in self._catalog:
            filename = entry.get("file", "")
            tracked.add(filename)
            path = present.get(filename)
            descriptors.append(self._curated_descriptor(entry, path))

        for filename in sorted(present):
            if filename in tracked:
                continue
            path = present[filename]
            descriptors.append(RawModelDescriptor(
                name=path.stem,
                backend=self.backend,
                available=True,
                metadata={"path": str(path), "size_on_disk": self._file_size(path)},
            ))

        logger.debug(
            f"File store {self.models_dir}: {len(present)} GGUF files, "
            f"{sum(1 for d in descriptors if d.available)} available models"
        )
        return descriptors

    def _curated_descriptor(self, entry: Dict[str, Any], path: Optional[Path]) -> RawModelDescriptor:
        """Descriptor of a curated catalog entry."""
        return RawModelDescriptor(
            name=entry["name"],
            backend=self.backend,
            available=path is not None,
            model_type=entry.get("type"),
            parameters=entry.get("parameters"),
            context_size=entry.get("context_size"),
            ram_requirement=entry.get("ram_requirement"),
            trust_score=entry.get("trust_score"),
            task_suitability=entry.get("task_suitability"),
            description=entry.get("description", ""),
            metadata={
                "path": str(path or self.models_dir / entry.get("file", "")),
                "quantization": entry.get("quantization"),
                "download_url": entry.get("download_url"),
                "expected_size": entry.get("expected_size"),
            },
        )

    @staticmethod
    def _file_size(path: Path) -> Optional[int]:
        try:
            return path.stat().st_size
        except OSError:
            return None
