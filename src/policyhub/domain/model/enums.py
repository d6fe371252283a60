"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class OutcomeStatus(StrEnum):
    """Terminal state of one artifact within one run."""

    SKIPPED = "skipped"
    DELIVERED = "delivered"
    VALIDATION_FAILED = "validation-failed"
    PUBLISH_FAILED = "publish-failed"

    @property
    def is_success(self) -> bool:
        return self in {OutcomeStatus.SKIPPED, OutcomeStatus.DELIVERED}


class DeliverySource(StrEnum):
    """How a delivery was proven."""

    PUBLISHED = "published"
    CONFLICT = "conflict"
    REGISTRY = "registry"
