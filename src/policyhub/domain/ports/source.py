"""Ports for reading changes out of the version-controlled source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from policyhub.domain.model import ChangeRecord


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Artifacts changed between ``baseline`` and the resolved ``head`` commit."""

    baseline: str | None
    head: str
    changes: tuple[ChangeRecord, ...] = field(default_factory=tuple["ChangeRecord", ...])

    def __len__(self) -> int:
        return len(self.changes)


@runtime_checkable
class ChangeDetector(Protocol):
    """Compute the changed artifacts between two commits.

    ``baseline`` is ``None`` on a first run, in which case every artifact present
    at ``head`` is reported. Implementations raise ``InvalidBaselineError`` when
    the baseline cannot be resolved or is not an ancestor of ``head``.

    ``recorded_baseline`` is the ledger's baseline when ``baseline`` overrides
    it. It must also resolve to an ancestor of ``head``, otherwise advancing to
    ``head`` would move the ledger backwards.
    """

    def __call__(
        self,
        *,
        baseline: str | None,
        head: str,
        recorded_baseline: str | None = None,
    ) -> ChangeSet: ...


__all__ = ["ChangeDetector", "ChangeSet"]
