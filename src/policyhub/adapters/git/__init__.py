"""Git source adapter."""

from __future__ import annotations

from .detector import GitChangeDetector, SourceRepositoryError

__all__ = ["GitChangeDetector", "SourceRepositoryError"]
