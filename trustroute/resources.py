#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
RESOURCES - Host Resource Probe
===============================

Reads RAM, CPU, disk, GPU and platform information.

The probe never fails: any OS query error falls back to conservative
defaults (8 of 16GB RAM, 4 cores, 100GB disk). Results are cached for
a few seconds to avoid hammering the OS on every routing call.

Author: Léon
"""

from pathlib import Path
from typing import Callable, Optional
import asyncio
import logging
import os
import subprocess
import sys
import time

import psutil

from .errors import ProbeFailure
from .models import SystemResources

logger = logging.getLogger(__name__)

GB = 1024 ** 3

DEFAULT_RESOURCES = SystemResources(
    available_ram=8.0,
    total_ram=16.0,
    cpu_cores=4,
    disk_space=100.0,
    platform=sys.platform,
)


class SystemResourceProbe:
    """
    Host resource probe with a short-lived cache.

    Usage:
        probe = SystemResourceProbe()
        resources = await probe.detect()
        print(resources.available_ram)
    """

    def __init__(
        self,
        cache_ttl: float = 10.0,
        disk_path: Optional[Path] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            cache_ttl: Seconds a probe result stays valid
            disk_path: Where to measure free disk space (home by default)
            clock: Time source for the cache
        """
        self._cache_ttl = cache_ttl
        self._disk_path = disk_path or Path.home()
        self._clock = clock
        self._cached: Optional[SystemResources] = None
        self._cached_at: float = 0.0

    async def detect(self) -> SystemResources:
        """
        Detect host resources.

        Returns:
            SystemResources, defaults if the OS query fails
        """
        now = self._clock()
        if self._cached is not None and now - self._cached_at < self._cache_ttl:
            return self._cached

        try:
            resources = await asyncio.to_thread(self._read_resources)
        except ProbeFailure as e:
            logger.warning(f"Resource probe failed, using defaults: {e}")
            resources = DEFAULT_RESOURCES

        self._cached = resources
        self._cached_at = now
        logger.debug(f"Resources detected: {resources}")
        return resources

    def clear_cache(self) -> None:
        """Forget the cached probe result."""
        self._cached = None
        self._cached_at = 0.0

    # -------------------------------------------------------------------------
    # OS queries
    # -------------------------------------------------------------------------

    def _read_resources(self) -> SystemResources:
        """Blocking OS queries. Raises ProbeFailure."""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage(str(self._disk_path))
            cores = psutil.cpu_count(logical=True) or os.cpu_count() or DEFAULT_RESOURCES.cpu_cores
            return SystemResources(
                available_ram=round(memory.available / GB, 1),
                total_ram=round(memory.total / GB, 1),
                cpu_cores=cores,
                disk_space=round(disk.free / GB, 1),
                platform=sys.platform,
                gpu_memory=self._read_gpu_memory(),
            )
        except Exception as e:
            raise ProbeFailure(f"{type(e).__name__}: {e}") from e

    def _read_gpu_memory(self) -> Optional[float]:
        """Total NVIDIA GPU memory in GB, None without nvidia-smi."""
        try:
            output = subprocess.run(
                ["nvidia-smi", "--query-gpu=memory.total", "--format=csv,noheader,nounits"],
                capture_output=True,
                text=True,
                timeout=2,
                check=True,
            ).stdout
        except (OSError, subprocess.SubprocessError):
            return None

        try:
            total_mb = sum(float(line) for line in output.split() if line.strip())
        except ValueError:
            return None
        return round(total_mb / 1024, 1) if total_mb else None
