"""Per-artifact results of a single run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from policyhub.domain.model.enums import DeliverySource, OutcomeStatus

if TYPE_CHECKING:
    from policyhub.domain.model.identity import ArtifactId


@dataclass(frozen=True, slots=True, kw_only=True)
class RunOutcome:
    id: ArtifactId
    status: OutcomeStatus
    reason: str | None = None
    source: DeliverySource | None = None
    latest_commit: str | None = None
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    @property
    def produces_record(self) -> bool:
        return self.status is OutcomeStatus.DELIVERED

    @classmethod
    def skipped(
        cls, artifact: ArtifactId, *, reason: str, latest_commit: str | None = None
    ) -> RunOutcome:
        return cls(
            id=artifact,
            status=OutcomeStatus.SKIPPED,
            reason=reason,
            latest_commit=latest_commit,
        )

    @classmethod
    def delivered(
        cls,
        artifact: ArtifactId,
        *,
        source: DeliverySource,
        latest_commit: str | None = None,
        warnings: tuple[str, ...] = (),
        reason: str | None = None,
    ) -> RunOutcome:
        return cls(
            id=artifact,
            status=OutcomeStatus.DELIVERED,
            source=source,
            latest_commit=latest_commit,
            warnings=warnings,
            reason=reason,
        )
