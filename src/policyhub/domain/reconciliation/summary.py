"""Run reports produced by the reconciler."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from policyhub.domain.model import OutcomeStatus

if TYPE_CHECKING:
    from policyhub.domain.model import ChangeRecord, RunOutcome


class RunState(StrEnum):
    SUCCESS = "success"
    PARTIAL = "partial"


@dataclass(frozen=True, slots=True)
class DeliveryPlan:
    """Detected work for one head commit, before anything is probed or published."""

    baseline: str | None
    head: str
    pending: tuple[ChangeRecord, ...] = field(default_factory=tuple["ChangeRecord", ...])
    skipped: tuple[ChangeRecord, ...] = field(default_factory=tuple["ChangeRecord", ...])

    @property
    def changed(self) -> int:
        return len(self.pending) + len(self.skipped)

    def matrix(self) -> dict[str, list[dict[str, str]]]:
        """Pending artifacts in the ``{"include": [...]}`` shape CI job matrices expect."""

        return {
            "include": [
                {
                    "path": change.id.path,
                    "name": change.id.name,
                    "version": change.id.version,
                }
                for change in self.pending
            ]
        }


@dataclass(frozen=True, slots=True)
class RunSummary:
    head: str
    release: str
    baseline_before: str | None
    baseline_after: str | None
    outcomes: tuple[RunOutcome, ...] = field(default_factory=tuple["RunOutcome", ...])
    records_written: int = 0

    @property
    def counts(self) -> dict[OutcomeStatus, int]:
        counter = Counter(outcome.status for outcome in self.outcomes)
        return {status: counter.get(status, 0) for status in OutcomeStatus}

    @property
    def failures(self) -> tuple[RunOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.is_success)

    @property
    def state(self) -> RunState:
        return RunState.PARTIAL if self.failures else RunState.SUCCESS

    @property
    def baseline_advanced(self) -> bool:
        return self.baseline_after != self.baseline_before

    def to_dict(self) -> dict[str, object]:
        return {
            "state": str(self.state),
            "head": self.head,
            "release": self.release,
            "baselineBefore": self.baseline_before,
            "baselineAfter": self.baseline_after,
            "recordsWritten": self.records_written,
            "counts": {str(status): count for status, count in self.counts.items()},
            "outcomes": [
                {
                    "path": outcome.id.path,
                    "name": outcome.id.name,
                    "version": outcome.id.version,
                    "status": str(outcome.status),
                    "reason": outcome.reason,
                    "source": str(outcome.source) if outcome.source else None,
                    "latestCommit": outcome.latest_commit,
                    "errors": list(outcome.errors),
                    "warnings": list(outcome.warnings),
                }
                for outcome in self.outcomes
            ],
        }

    def render_lines(self) -> list[str]:
        """Plain-text table suitable for CI logs."""

        lines = [
            f"Release {self.release} at {self.head}: {self.state}",
            f"Baseline {self.baseline_before or '<none>'} -> {self.baseline_after or '<none>'}",
        ]
        if not self.outcomes:
            lines.append("No policy changes detected")
            return lines
        width = max(len(outcome.id.path) for outcome in self.outcomes)
        for outcome in self.outcomes:
            detail = outcome.reason or (str(outcome.source) if outcome.source else "")
            lines.append(f"  {outcome.id.path:<{width}}  {outcome.status:<17}  {detail}".rstrip())
        counts = ", ".join(f"{status}={count}" for status, count in self.counts.items())
        lines.append(f"Totals: {counts}")
        return lines
