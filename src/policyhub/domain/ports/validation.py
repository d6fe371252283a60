"""Ports for the artifact validator and payload packaging collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from policyhub.domain.model import ChangeRecord


@dataclass(frozen=True, slots=True)
class ValidationReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


@runtime_checkable
class Validator(Protocol):
    """Structural/content check for one artifact directory."""

    def __call__(self, artifact_dir: Path) -> ValidationReport: ...


@runtime_checkable
class PayloadBuilder(Protocol):
    """Turn an artifact directory into the body of a publish request."""

    def __call__(self, change: ChangeRecord, artifact_dir: Path) -> Mapping[str, object]: ...


__all__ = ["PayloadBuilder", "ValidationReport", "Validator"]
