"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_int_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .hub import HubConfig, ProcessingSettings, ValidationSettings, load_hub_config
from .logging import configure_logging
from .reconcile import ReconcileConfig, get_reconcile_config
from .registry import RegistryConfig, get_registry_config

__all__ = [
    "ConfigurationError",
    "HubConfig",
    "MissingConfigurationError",
    "ProcessingSettings",
    "RateLimit",
    "ReconcileConfig",
    "RegistryConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "ValidationSettings",
    "configure_logging",
    "get_reconcile_config",
    "get_registry_config",
    "load_hub_config",
    "optional_env_var",
    "optional_int_env_var",
    "require_env_vars",
]
