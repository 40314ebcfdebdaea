#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HEURISTICS - Name-Based Model Metadata Inference
================================================

Ollama (and stray GGUF files) only give us a model name. Everything
routing needs is inferred here from that name:

- Parameter count ("qwen2.5:1.5b" -> "1.5B")
- RAM requirement (step table on the parameter count)
- Context size (explicit "32k" tokens, else family default)
- Model family ("llama3.2:3b" -> "llama")
- Task suitability (keyword matching)
- Trust score (per-family table)

All functions are pure and table-driven: same name, same answer.

Author: Léon
"""

from typing import Dict, List, Mapping, Optional, Tuple
import re

# =============================================================================
# TABLES
# =============================================================================

# "1.5b", "70B", "135m" - but not "4mini"
PARAMETER_PATTERN = re.compile(r"(\d+(?:\.\d+)?)([bm])(?![a-z])", re.IGNORECASE)

# Parsing of already formatted values ("3.8B", "8GB", "512MB")
_NUMBER_UNIT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]*)", re.IGNORECASE)

# Explicit context window in the name ("mistral-nemo-32k")
CONTEXT_PATTERN = re.compile(r"(?<!\d)(32|16|8|4)k(?![a-z0-9])", re.IGNORECASE)

# (minimum billions, RAM requirement), first match wins
RAM_STEPS: List[Tuple[float, str]] = [
    (70, "48GB"),
    (30, "24GB"),
    (13, "16GB"),
    (7, "8GB"),
    (3, "4GB"),
]
SMALLEST_RAM = "2GB"
UNKNOWN_RAM = "8GB"
DEFAULT_RAM_GB = 8.0

# Order matters: more specific names first
FAMILY_PATTERNS: List[Tuple[str, str]] = [
    ("codellama", "codellama"),
    ("deepseek", "deepseek"),
    ("llama", "llama"),
    ("qwen", "qwen"),
    ("phi", "phi"),
    ("mixtral", "mistral"),
    ("mistral", "mistral"),
    ("gemma", "gemma"),
    ("starcoder", "starcoder"),
    ("gemini", "gemini"),
    ("gpt", "gpt"),
    ("claude", "claude"),
]
UNKNOWN_FAMILY = "unknown"

DEFAULT_FAMILY_CONTEXT: Dict[str, int] = {
    "codellama": 16384,
    "deepseek": 32768,
    "llama": 8192,
    "qwen": 32768,
    "phi": 4096,
    "mistral": 32768,
    "gemma": 8192,
    "starcoder": 8192,
    "gemini": 1048576,
    "gpt": 128000,
    "claude": 200000,
}
DEFAULT_CONTEXT = 4096

TASK_KEYWORDS: Dict[str, List[str]] = {
    "coding": ["code", "coding", "coder"],
    "reasoning": ["reason", "logic"],
    "general": ["instruct", "chat"],
    "creative": ["creative", "story"],
}
DEFAULT_SUITABILITY: Dict[str, float] = {
    "coding": 5.0,
    "reasoning": 5.0,
    "general": 7.0,
    "creative": 5.0,
}
MATCHED_SUITABILITY = 9.0

DEFAULT_TRUST = 7.0


# =============================================================================
# PARSING
# =============================================================================

def clamp_score(value: float) -> float:
    """Clamp a rating into [0, 10]."""
    return max(0.0, min(10.0, float(value)))


def parse_parameters(parameters: Optional[str]) -> Optional[float]:
    """
    Parse a parameter string into billions.

    Args:
        parameters: "3.8B", "135M", "7"

    Returns:
        Billions of parameters, None if unparseable
    """
    if not parameters:
        return None
    match = _NUMBER_UNIT_PATTERN.search(str(parameters))
    if not match:
        return None
    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit.startswith("m"):
        return value / 1000
    return value


def parse_ram(ram: Optional[str]) -> float:
    """
    Parse a RAM requirement into GB.

    Args:
        ram: "8GB", "512MB", "3"

    Returns:
        Positive GB value, 8.0 when unparseable
    """
    if not ram:
        return DEFAULT_RAM_GB
    match = _NUMBER_UNIT_PATTERN.search(str(ram))
    if not match:
        return DEFAULT_RAM_GB
    value = float(match.group(1))
    if match.group(2).lower().startswith("m"):
        value = value / 1024
    if value <= 0:
        return DEFAULT_RAM_GB
    return value


def format_gb(value: float) -> str:
    """8.0 -> "8GB", 2.5 -> "2.5GB"."""
    return f"{value:g}GB"


# =============================================================================
# INFERENCE
# =============================================================================

def infer_parameters(name: str) -> Optional[str]:
    """Parameter count from a model name ("llama3.2:3b" -> "3B")."""
    match = PARAMETER_PATTERN.search(name)
    if not match:
        return None
    return f"{match.group(1)}{match.group(2).upper()}"


def ram_for_parameters(billions: Optional[float]) -> str:
    """RAM requirement from a parameter count in billions."""
    if billions is None:
        return UNKNOWN_RAM
    for minimum, ram in RAM_STEPS:
        if billions >= minimum:
            return ram
    return SMALLEST_RAM


def infer_ram_requirement(name: str) -> str:
    """RAM requirement from a model name ("llama3:70b" -> "48GB")."""
    return ram_for_parameters(parse_parameters(infer_parameters(name)))


def infer_family(name: str) -> str:
    """Model family from a model name."""
    lowered = name.lower()
    for pattern, family in FAMILY_PATTERNS:
        if pattern in lowered:
            return family
    return UNKNOWN_FAMILY


def infer_context_size(
    name: str,
    family: Optional[str] = None,
    family_defaults: Optional[Mapping[str, int]] = None,
) -> int:
    """
    Context size in tokens.

    Explicit tokens in the name win ("32k" -> 32768), otherwise the
    family default applies.
    """
    match = CONTEXT_PATTERN.search(name)
    if match:
        return int(match.group(1)) * 1024
    defaults = DEFAULT_FAMILY_CONTEXT if family_defaults is None else family_defaults
    return defaults.get(family or infer_family(name), DEFAULT_CONTEXT)


def infer_task_suitability(
    name: str,
    model_type: str = "",
    description: str = "",
) -> Dict[str, float]:
    """
    Task ratings from keywords in the name, type and description.

    A matched keyword rates that task 9; unmatched tasks keep their
    default (general 7, others 5).
    """
    text = f"{name} {model_type} {description}".lower()
    suitability = dict(DEFAULT_SUITABILITY)
    for task, keywords in TASK_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            suitability[task] = MATCHED_SUITABILITY
    return suitability


def complete_task_suitability(partial: Optional[Mapping[str, float]]) -> Dict[str, float]:
    """Fill missing task keys with defaults and clamp every rating."""
    suitability = dict(DEFAULT_SUITABILITY)
    for task, value in (partial or {}).items():
        suitability[task] = value
    return {task: clamp_score(value) for task, value in suitability.items()}


def infer_trust_score(
    family: str,
    trust_table: Optional[Mapping[str, float]] = None,
    default: float = DEFAULT_TRUST,
) -> float:
    """Trust score for a family, default when the family is not rated."""
    return clamp_score((trust_table or {}).get(family, default))
