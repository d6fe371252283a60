"""Orchestrator for one delivery reconciliation run.

The engine composes the ports but does not prescribe concrete adapters:

1) load the ledger once
2) detect changed artifacts between baseline and head
3) split them into pending and already-delivered
4) run probe -> validate -> publish for every pending artifact in a bounded pool
5) merge delivered outcomes into a new ledger value
6) advance the baseline only if no artifact failed
7) persist records and baseline in a single all-or-nothing save

Workers never touch the ledger. Each one returns a tagged outcome and the
aggregation happens after the pool has drained.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from policyhub.domain.model import DeliveryRecord, DeliverySource, OutcomeStatus, RunOutcome
from policyhub.domain.ports.registry import Conflict, Delivered, Failed, ProbeStatus

from .eligibility import DeliveryReason, filter_eligible
from .summary import DeliveryPlan, RunSummary

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from policyhub.domain.model import ArtifactId, ChangeRecord, Ledger
    from policyhub.domain.ports import (
        ChangeDetector,
        LedgerStore,
        PayloadBuilder,
        Registry,
        Validator,
    )

log = getLogger(__name__)

DEFAULT_WORKERS = 3
REGISTRY_EXISTING_NOTE = "exists in registry; recorded without publish"
CONFLICT_NOTE = "registry reported conflict; already published"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class Reconciler:
    """Drive detect -> filter -> probe -> validate -> publish -> record."""

    detector: ChangeDetector
    ledger_store: LedgerStore
    registry: Registry
    validator: Validator
    payload_builder: PayloadBuilder
    workspace: Path
    release: str
    workers: int = DEFAULT_WORKERS
    probe: bool = True
    clock: Callable[[], datetime] = field(default=_utcnow)

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"Worker pool width must be positive, got {self.workers}")

    def plan(self, *, head: str, baseline: str | None = None) -> DeliveryPlan:
        """Detect and filter without side effects."""

        ledger = self.ledger_store.load()
        return self._plan(ledger, head=head, baseline=baseline)

    def run(self, *, head: str, baseline: str | None = None) -> RunSummary:
        """Run one reconciliation for ``head``.

        ``baseline`` overrides the persisted baseline, e.g. to bootstrap a ledger;
        ``head`` must still descend from the persisted one. Fatal errors
        (unresolvable baseline, unreadable or unwritable ledger) propagate and
        leave the ledger untouched.
        """

        return asyncio.run(self.run_async(head=head, baseline=baseline))

    async def run_async(self, *, head: str, baseline: str | None = None) -> RunSummary:
        ledger = self.ledger_store.load()
        plan = self._plan(ledger, head=head, baseline=baseline)

        skipped = [
            RunOutcome.skipped(
                change.id,
                reason=DeliveryReason.VERSION_IMMUTABLE,
                latest_commit=change.latest_commit,
            )
            for change in plan.skipped
        ]
        delivered = await self._deliver_all(plan.pending)
        outcomes = sorted([*skipped, *delivered], key=lambda outcome: outcome.id.sort_key)

        updated, new_records = self._merge(ledger, outcomes)
        if all(outcome.is_success for outcome in outcomes):
            updated = updated.advance(plan.head)
        else:
            log.warning(
                "Baseline stays at %s: %s artifact(s) failed and remain pending",
                plan.baseline or "<none>",
                sum(1 for outcome in outcomes if not outcome.is_success),
            )

        if updated != ledger:
            self.ledger_store.save(updated)
            log.info(
                "Ledger saved: %s new record(s), baseline %s",
                new_records,
                updated.baseline or "<none>",
            )
        else:
            log.info("Ledger unchanged")

        return RunSummary(
            head=plan.head,
            release=self.release,
            baseline_before=ledger.baseline,
            baseline_after=updated.baseline,
            outcomes=tuple(outcomes),
            records_written=new_records,
        )

    def _plan(self, ledger: Ledger, *, head: str, baseline: str | None) -> DeliveryPlan:
        return plan_delivery(self.detector, ledger, head=head, baseline=baseline)

    def _merge(self, ledger: Ledger, outcomes: Sequence[RunOutcome]) -> tuple[Ledger, int]:
        delivered_at = self.clock()
        records = {
            outcome.id: DeliveryRecord(
                delivered_at=delivered_at,
                release=self.release,
                note=_note_for(outcome.source),
            )
            for outcome in outcomes
            if outcome.produces_record
        }
        merged = ledger.merge(records)
        return merged, len(merged) - len(ledger)

    async def _deliver_all(self, pending: Sequence[ChangeRecord]) -> list[RunOutcome]:
        if not pending:
            return []
        semaphore = asyncio.Semaphore(self.workers)
        log.info("Delivering %s pending artifact(s) with %s worker(s)", len(pending), self.workers)
        async with self.registry as registry:

            async def bounded(change: ChangeRecord) -> RunOutcome:
                async with semaphore:
                    return await self._deliver_isolated(registry, change)

            return list(await asyncio.gather(*(bounded(change) for change in pending)))

    async def _deliver_isolated(self, registry: Registry, change: ChangeRecord) -> RunOutcome:
        try:
            return await self._deliver(registry, change)
        except Exception as exc:
            log.exception("Unexpected error while delivering %s", change.id)
            return RunOutcome(
                id=change.id,
                status=OutcomeStatus.PUBLISH_FAILED,
                reason=f"unexpected error: {exc}",
                latest_commit=change.latest_commit,
            )

    async def _deliver(self, registry: Registry, change: ChangeRecord) -> RunOutcome:
        artifact = change.id

        if self.probe:
            probe = await registry.probe(artifact)
            if probe.status is ProbeStatus.EXISTS:
                log.info("%s already exists in registry; marking as delivered", artifact)
                return RunOutcome.delivered(
                    artifact,
                    source=DeliverySource.REGISTRY,
                    latest_commit=change.latest_commit,
                    reason="exists-in-registry",
                )
            if probe.status is ProbeStatus.UNKNOWN:
                log.warning(
                    "Registry existence check failed for %s (%s); proceeding with publish",
                    artifact,
                    probe.detail,
                )

        artifact_dir = self._artifact_dir(artifact)
        report = await asyncio.to_thread(self.validator, artifact_dir)
        for warning in report.warnings:
            log.warning("%s: %s", artifact, warning)
        if not report.valid:
            log.error("Validation failed for %s with %s error(s)", artifact, len(report.errors))
            for error in report.errors:
                log.error("%s: %s", artifact, error)
            return RunOutcome(
                id=artifact,
                status=OutcomeStatus.VALIDATION_FAILED,
                reason=f"{len(report.errors)} validation error(s)",
                latest_commit=change.latest_commit,
                errors=report.errors,
                warnings=report.warnings,
            )

        payload = await asyncio.to_thread(self.payload_builder, change, artifact_dir)
        log.info("Publishing %s", artifact)
        result = await registry.publish(
            artifact,
            payload=payload,
            idempotency_key=artifact.idempotency_key,
        )
        match result:
            case Delivered():
                log.info("Published %s (HTTP %s)", artifact, result.status_code)
                return RunOutcome.delivered(
                    artifact,
                    source=DeliverySource.PUBLISHED,
                    latest_commit=change.latest_commit,
                    warnings=report.warnings,
                )
            case Conflict():
                log.info(
                    "%s already published (HTTP %s); treating as delivered",
                    artifact,
                    result.status_code,
                )
                return RunOutcome.delivered(
                    artifact,
                    source=DeliverySource.CONFLICT,
                    latest_commit=change.latest_commit,
                    warnings=report.warnings,
                    reason="already-published",
                )
            case Failed():
                log.error("Failed to publish %s: %s", artifact, result.reason)
                return RunOutcome(
                    id=artifact,
                    status=OutcomeStatus.PUBLISH_FAILED,
                    reason=result.reason,
                    latest_commit=change.latest_commit,
                    warnings=report.warnings,
                )

    def _artifact_dir(self, artifact: ArtifactId) -> Path:
        return self.workspace / artifact.collection / artifact.name / artifact.version


def _note_for(source: DeliverySource | None) -> str | None:
    if source is DeliverySource.REGISTRY:
        return REGISTRY_EXISTING_NOTE
    if source is DeliverySource.CONFLICT:
        return CONFLICT_NOTE
    return None


def plan_delivery(
    detector: ChangeDetector,
    ledger: Ledger,
    *,
    head: str,
    baseline: str | None = None,
) -> DeliveryPlan:
    """Detect changes since ``baseline`` (default: the ledger's) and apply eligibility.

    An overriding ``baseline`` may reach further back than the ledger's, but
    ``head`` must still descend from the ledger's baseline.
    """

    if baseline is None:
        effective_baseline, recorded_baseline = ledger.baseline, None
    else:
        effective_baseline, recorded_baseline = baseline, ledger.baseline
    log.info("Detecting policy changes since %s up to %s", effective_baseline or "<none>", head)
    change_set = detector(
        baseline=effective_baseline, head=head, recorded_baseline=recorded_baseline
    )
    pending, skipped = filter_eligible(change_set.changes, ledger)
    return DeliveryPlan(
        baseline=change_set.baseline,
        head=change_set.head,
        pending=tuple(pending),
        skipped=tuple(skipped),
    )
