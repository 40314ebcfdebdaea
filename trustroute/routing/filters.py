#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FILTERS - Candidate Filter Chain
================================

Removes models that cannot serve the request. Pure functions, no I/O.

Chain order (each stage only sees the survivors of the previous one):
1. availability - model must be usable right now
2. task         - suitability >= 6 for the requested task (skipped for general)
3. hardware     - RAM and download size within the constraints

Trust threshold and backend preferences are applied by the pipeline so
the decision record can report them separately.

Author: Léon
"""

from typing import Callable, List, Optional, Sequence, Tuple

from ..models import FilterResult, HardwareConstraints, TaskType, UnifiedModel

MIN_TASK_SUITABILITY = 6.0

Predicate = Callable[[UnifiedModel], bool]


def is_available(model: UnifiedModel) -> bool:
    """Availability predicate."""
    return model.available


def suits_task(task: str) -> Predicate:
    """Task predicate for one task."""
    def predicate(model: UnifiedModel) -> bool:
        return model.task_suitability.get(task, 0.0) >= MIN_TASK_SUITABILITY
    return predicate


def fits_hardware(constraints: HardwareConstraints) -> Predicate:
    """Hardware predicate for one set of constraints."""
    def predicate(model: UnifiedModel) -> bool:
        if constraints.available_ram is not None and model.ram_gb > constraints.available_ram:
            return False
        if constraints.max_download_size is not None:
            size = model.expected_size
            if size is not None and size > constraints.max_download_size:
                return False
        return True
    return predicate


def apply_predicate(models: Sequence[UnifiedModel], predicate: Predicate) -> Tuple[List[UnifiedModel], int]:
    """
    Keep the models matching a predicate.

    Returns:
        (survivors in input order, number removed)
    """
    kept = [m for m in models if predicate(m)]
    return kept, len(models) - len(kept)


def filter_candidates(
    models: Sequence[UnifiedModel],
    task: Optional[str] = None,
    constraints: Optional[HardwareConstraints] = None,
) -> FilterResult:
    """
    Run the filter chain.

    Args:
        models: Discovered models
        task: Requested task type (None or "general" skips the task stage)
        constraints: Hardware limits

    Returns:
        FilterResult with survivors and per-stage removal counts
    """
    working, availability_filtered = apply_predicate(models, is_available)

    task_filtered = 0
    if task and task != TaskType.GENERAL.value:
        working, task_filtered = apply_predicate(working, suits_task(task))

    hardware_filtered = 0
    if constraints is not None:
        working, hardware_filtered = apply_predicate(working, fits_hardware(constraints))

    return FilterResult(
        models=working,
        availability_filtered=availability_filtered,
        task_filtered=task_filtered,
        hardware_filtered=hardware_filtered,
    )
