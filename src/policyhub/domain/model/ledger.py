"""Delivery records and the ledger value that carries them between runs."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from policyhub.domain.model.identity import ArtifactId


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """An artifact touched between baseline and head.

    ``latest_commit`` is the newest commit touching the artifact directory. It is
    diagnostic only and never decides whether an artifact is delivered again.
    """

    id: ArtifactId
    latest_commit: str | None = None


@dataclass(frozen=True, slots=True)
class DeliveryRecord:
    """Proof that an artifact version reached the registry."""

    delivered_at: datetime
    release: str
    note: str | None = None


@dataclass(frozen=True, slots=True)
class Ledger:
    """Baseline pointer plus delivery records, replaced wholesale at the end of a run."""

    baseline: str | None = None
    records: Mapping[ArtifactId, DeliveryRecord] = field(
        default_factory=dict["ArtifactId", "DeliveryRecord"]
    )

    def __contains__(self, artifact: object) -> bool:
        return artifact in self.records

    def __len__(self) -> int:
        return len(self.records)

    def record_for(self, artifact: ArtifactId) -> DeliveryRecord | None:
        return self.records.get(artifact)

    def merge(self, records: Mapping[ArtifactId, DeliveryRecord]) -> Ledger:
        """Union ``records`` into a new ledger; an existing record always wins.

        The result depends only on the key sets involved, never on the order the
        records were produced in.
        """

        merged: dict[ArtifactId, DeliveryRecord] = dict(records)
        merged.update(self.records)
        return replace(self, records=merged)

    def advance(self, head: str) -> Ledger:
        return replace(self, baseline=head)
