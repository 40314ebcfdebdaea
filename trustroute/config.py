#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CENTRALIZED CONFIGURATION - TRUSTROUTE
======================================

Loads and manages routing configuration from YAML files.

Sources, later ones win:
1. config/routing.yaml shipped with the package
2. $TRUSTROUTE_HOME/user_config.yaml (default ~/.trustroute)
3. Environment: OLLAMA_HOST, TRUSTROUTE_MODELS_DIR

Author: Léon
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import copy
import logging
import os

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# DEFAULT PATHS
# =============================================================================

# Package root (trustroute/ folder)
PROJECT_ROOT = Path(__file__).parent

# Configuration folder
CONFIG_DIR = PROJECT_ROOT / "config"

# Shipped defaults
ROUTING_CONFIG_FILE = CONFIG_DIR / "routing.yaml"

# User data folder
DATA_DIR = Path(os.environ.get("TRUSTROUTE_HOME", Path.home() / ".trustroute"))
USER_CONFIG_FILE = DATA_DIR / "user_config.yaml"

# =============================================================================
# CONFIGURATION LOADING
# =============================================================================

def load_yaml(filepath: Path) -> Dict[str, Any]:
    """
    Safely load a YAML file.

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary with file contents, empty if the file doesn't exist

    Raises:
        yaml.YAMLError: If file is malformed
    """
    if not filepath.exists():
        logger.debug(f"Config file not found: {filepath}")
        return {}

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
            logger.debug(f"Config loaded from {filepath}")
            return data
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error {filepath}: {e}")
        raise
    except OSError as e:
        logger.error(f"Error reading {filepath}: {e}")
        return {}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, recursing into nested dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# =============================================================================
# MAIN CONFIGURATION CLASS
# =============================================================================

class RouterConfig:
    """
    Routing configuration.

    Usage:
        config = RouterConfig.load()
        ttl = config.get_cache_ttl("discovery")
        host = config.get_backend_setting("ollama", "host")
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        """
        Wrap an already loaded configuration dictionary.

        Args:
            data: Configuration data (empty means built-in defaults only)
        """
        self._data: Dict[str, Any] = data or {}

    @classmethod
    def load(
        cls,
        defaults_file: Path = ROUTING_CONFIG_FILE,
        user_file: Optional[Path] = USER_CONFIG_FILE,
    ) -> 'RouterConfig':
        """
        Load defaults, user overrides and environment overrides.

        Args:
            defaults_file: Shipped defaults
            user_file: User overrides (None to skip)

        Returns:
            RouterConfig
        """
        data = load_yaml(defaults_file)
        if user_file is not None:
            data = deep_merge(data, load_yaml(user_file))

        backends = data.setdefault("backends", {})
        if os.environ.get("OLLAMA_HOST"):
            backends.setdefault("ollama", {})["host"] = os.environ["OLLAMA_HOST"]
        if os.environ.get("TRUSTROUTE_MODELS_DIR"):
            backends.setdefault("huggingface", {})["models_dir"] = os.environ["TRUSTROUTE_MODELS_DIR"]

        logger.info("Configuration loaded")
        return cls(data)

    # -------------------------------------------------------------------------
    # Caches and timeouts
    # -------------------------------------------------------------------------

    def get_cache_ttl(self, cache_name: str) -> float:
        """
        Get a cache lifetime in seconds.

        Args:
            cache_name: discovery, decision or resources
        """
        defaults = {"discovery": 30.0, "decision": 300.0, "resources": 10.0}
        ttls = self._data.get("cache", {})
        return float(ttls.get(cache_name, defaults.get(cache_name, 30.0)))

    def get_backend_timeout(self) -> float:
        """Per-backend catalog query timeout in seconds."""
        return float(self._data.get("timeouts", {}).get("backend", 5.0))

    # -------------------------------------------------------------------------
    # Backends
    # -------------------------------------------------------------------------

    def get_backend_settings(self, backend: str) -> Dict[str, Any]:
        """Settings block of one backend."""
        return self._data.get("backends", {}).get(backend, {}) or {}

    def get_backend_setting(self, backend: str, key: str, default: Any = None) -> Any:
        """Single setting of one backend."""
        return self.get_backend_settings(backend).get(key, default)

    def is_backend_enabled(self, backend: str) -> bool:
        """Whether a backend should be registered."""
        return bool(self.get_backend_setting(backend, "enabled", True))

    def get_models_dir(self) -> Path:
        """Local GGUF store location."""
        models_dir = self.get_backend_setting("huggingface", "models_dir")
        if models_dir:
            return Path(models_dir).expanduser()
        return DATA_DIR / "models"

    # -------------------------------------------------------------------------
    # Model metadata
    # -------------------------------------------------------------------------

    def get_file_catalog(self) -> List[Dict[str, Any]]:
        """Curated GGUF models of the local file store."""
        return self._data.get("catalog", []) or []

    def get_cloud_models(self) -> List[Dict[str, Any]]:
        """Configured cloud models."""
        return self._data.get("cloud_models", []) or []

    def get_trust_table(self) -> Dict[str, float]:
        """Trust score per model family."""
        return self._data.get("trust_scores", {}) or {}

    def get_default_trust(self) -> float:
        """Trust score for unrated families."""
        return float(self._data.get("default_trust", 7.0))

    def get_context_defaults(self) -> Optional[Dict[str, int]]:
        """Context size per family, None to use the built-in table."""
        return self._data.get("context_defaults") or None

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def as_dict(self) -> Dict[str, Any]:
        """Return all configuration as a dictionary."""
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        backends = list(self._data.get("backends", {}).keys())
        return f"<RouterConfig: backends={backends}, {len(self.get_file_catalog())} catalog models>"
