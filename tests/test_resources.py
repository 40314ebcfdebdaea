#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for the host resource probe."""

from types import SimpleNamespace
import asyncio
import subprocess

import psutil
import pytest

from trustroute import resources
from trustroute.resources import DEFAULT_RESOURCES, GB, SystemResourceProbe

from conftest import FakeClock


@pytest.fixture
def fake_psutil(monkeypatch):
    calls = {"memory": 0}

    def virtual_memory():
        calls["memory"] += 1
        return SimpleNamespace(available=6 * GB, total=16 * GB)

    monkeypatch.setattr(resources.psutil, "virtual_memory", virtual_memory)
    monkeypatch.setattr(resources.psutil, "disk_usage", lambda path: SimpleNamespace(free=120 * GB))
    monkeypatch.setattr(resources.psutil, "cpu_count", lambda logical=True: 12)
    return calls


@pytest.fixture
def no_gpu(monkeypatch):
    def run(*args, **kwargs):
        raise FileNotFoundError("nvidia-smi")

    monkeypatch.setattr(resources.subprocess, "run", run)


def test_detect_reads_psutil(fake_psutil, no_gpu, tmp_path):
    probe = SystemResourceProbe(disk_path=tmp_path)

    result = asyncio.run(probe.detect())

    assert result.available_ram == 6.0
    assert result.total_ram == 16.0
    assert result.cpu_cores == 12
    assert result.disk_space == 120.0
    assert result.gpu_memory is None
    assert result.platform


def test_detect_reads_gpu_memory(fake_psutil, monkeypatch, tmp_path):
    def run(*args, **kwargs):
        return subprocess.CompletedProcess(args, 0, stdout="8192\n8192\n", stderr="")

    monkeypatch.setattr(resources.subprocess, "run", run)
    result = asyncio.run(SystemResourceProbe(disk_path=tmp_path).detect())
    assert result.gpu_memory == 16.0


def test_detect_is_cached_within_ttl(fake_psutil, no_gpu, tmp_path):
    clock = FakeClock()
    probe = SystemResourceProbe(cache_ttl=10, disk_path=tmp_path, clock=clock)

    asyncio.run(probe.detect())
    clock.advance(5)
    asyncio.run(probe.detect())
    assert fake_psutil["memory"] == 1

    clock.advance(6)
    asyncio.run(probe.detect())
    assert fake_psutil["memory"] == 2

    probe.clear_cache()
    asyncio.run(probe.detect())
    assert fake_psutil["memory"] == 3


def test_probe_failure_falls_back_to_defaults(monkeypatch, no_gpu, tmp_path):
    def broken():
        raise OSError("/proc/meminfo unreadable")

    monkeypatch.setattr(resources.psutil, "virtual_memory", broken)

    result = asyncio.run(SystemResourceProbe(disk_path=tmp_path).detect())

    assert result == DEFAULT_RESOURCES
    assert result.available_ram == 8.0
    assert result.total_ram == 16.0
    assert result.cpu_cores == 4
    assert result.disk_space == 100.0


@pytest.mark.parametrize("query, error", [
    ("virtual_memory", psutil.AccessDenied()),
    ("virtual_memory", psutil.NoSuchProcess(1)),
    ("disk_usage", ValueError("bad path")),
])
def test_any_query_error_falls_back_to_defaults(fake_psutil, no_gpu, monkeypatch, tmp_path, query, error):
    def broken(*args, **kwargs):
        raise error

    monkeypatch.setattr(resources.psutil, query, broken)

    result = asyncio.run(SystemResourceProbe(disk_path=tmp_path).detect())

    assert result == DEFAULT_RESOURCES
