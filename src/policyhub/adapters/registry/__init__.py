"""Policy registry adapter."""

from __future__ import annotations

from .client import IDEMPOTENCY_HEADER, RegistryAPIError, RegistryClient
from .schema import PublishRequest, RegistryMessage, RegistryPolicy

__all__ = [
    "IDEMPOTENCY_HEADER",
    "PublishRequest",
    "RegistryAPIError",
    "RegistryClient",
    "RegistryMessage",
    "RegistryPolicy",
]
