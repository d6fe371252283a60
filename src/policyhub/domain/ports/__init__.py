"""Domain port definitions for adapters."""

from __future__ import annotations

from .ledger import LedgerStore
from .registry import (
    Conflict,
    Delivered,
    Failed,
    ProbeResult,
    ProbeStatus,
    Publisher,
    PublishResult,
    Registry,
    RegistryProber,
)
from .source import ChangeDetector, ChangeSet
from .validation import PayloadBuilder, ValidationReport, Validator

__all__ = [
    "ChangeDetector",
    "ChangeSet",
    "Conflict",
    "Delivered",
    "Failed",
    "LedgerStore",
    "PayloadBuilder",
    "ProbeResult",
    "ProbeStatus",
    "PublishResult",
    "Publisher",
    "Registry",
    "RegistryProber",
    "ValidationReport",
    "Validator",
]
