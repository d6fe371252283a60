"""Run-level error taxonomy.

Only fatal conditions are exceptions. Per-artifact failures travel as tagged
outcomes and never abort sibling work.
"""

from __future__ import annotations


class PolicyHubError(RuntimeError):
    """Base class for errors raised by the delivery core."""


class FatalReconciliationError(PolicyHubError):
    """Aborts the whole run; the ledger is left untouched."""


class InvalidBaselineError(FatalReconciliationError):
    """Raised when the baseline commit cannot be resolved or is not an ancestor of head."""

    def __init__(self, baseline: str, reason: str) -> None:
        super().__init__(f"Baseline {baseline} is unusable: {reason}")
        self.baseline = baseline
        self.reason = reason


class InvalidHeadError(FatalReconciliationError):
    """Raised when the head commit cannot be resolved or is not checked out."""

    def __init__(self, head: str, reason: str) -> None:
        super().__init__(f"Head {head} is unusable: {reason}")
        self.head = head
        self.reason = reason


class LedgerReadError(FatalReconciliationError):
    """Raised when the persisted ledger exists but cannot be parsed."""


class LedgerWriteError(FatalReconciliationError):
    """Raised when the ledger could not be persisted; nothing was changed."""


class InvalidArtifactPathError(PolicyHubError, ValueError):
    """Raised when a path does not name a ``<collection>/<name>/<version>`` directory."""
