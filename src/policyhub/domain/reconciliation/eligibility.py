"""Immutability rule: a delivered version is never delivered again.

This is a fast path only. It reads the ledger snapshot taken at the start of the
run; correctness under concurrent runs comes from the idempotent publisher.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from policyhub.domain.model import ArtifactId, ChangeRecord, Ledger

log = getLogger(__name__)


class DeliveryReason(StrEnum):
    NEVER_DELIVERED = "never-delivered"
    VERSION_IMMUTABLE = "version-immutable"


@dataclass(frozen=True, slots=True)
class DeliveryDecision:
    should_deliver: bool
    reason: DeliveryReason
    message: str
    last_delivered_at: datetime | None = None


def delivery_decision(artifact: ArtifactId, ledger: Ledger) -> DeliveryDecision:
    record = ledger.record_for(artifact)
    if record is None:
        return DeliveryDecision(
            should_deliver=True,
            reason=DeliveryReason.NEVER_DELIVERED,
            message="Policy version has never been delivered",
        )
    return DeliveryDecision(
        should_deliver=False,
        reason=DeliveryReason.VERSION_IMMUTABLE,
        message=(
            "Policy version already delivered and is immutable "
            f"(delivered at {record.delivered_at.isoformat()}, release {record.release})"
        ),
        last_delivered_at=record.delivered_at,
    )


def filter_eligible(
    changes: Iterable[ChangeRecord],
    ledger: Ledger,
) -> tuple[list[ChangeRecord], list[ChangeRecord]]:
    """Split ``changes`` into ``(pending, skipped)``, preserving input order."""

    pending: list[ChangeRecord] = []
    skipped: list[ChangeRecord] = []
    for change in changes:
        if change.id in ledger:
            # Content edits under a delivered version are never re-published.
            log.warning(
                "Skipping %s: version already delivered and immutable; "
                "changes in commit %s will not be published",
                change.id,
                change.latest_commit or "unknown",
            )
            skipped.append(change)
        else:
            pending.append(change)
    log.info(
        "Eligibility: %s changed, %s pending, %s skipped",
        len(pending) + len(skipped),
        len(pending),
        len(skipped),
    )
    return pending, skipped
