"""Public domain model surface."""

from __future__ import annotations

from policyhub.domain.model.enums import DeliverySource, OutcomeStatus
from policyhub.domain.model.identity import (
    DEFAULT_COLLECTION_ROOT,
    VERSION_PATTERN,
    ArtifactId,
)
from policyhub.domain.model.ledger import ChangeRecord, DeliveryRecord, Ledger
from policyhub.domain.model.outcomes import RunOutcome

__all__ = [
    "DEFAULT_COLLECTION_ROOT",
    "VERSION_PATTERN",
    "ArtifactId",
    "ChangeRecord",
    "DeliveryRecord",
    "DeliverySource",
    "Ledger",
    "OutcomeStatus",
    "RunOutcome",
]
