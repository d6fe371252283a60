"""Ports for persisting the delivery ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from policyhub.domain.model import Ledger


@runtime_checkable
class LedgerStore(Protocol):
    """Single source of truth across runs.

    ``load`` is called once at the start of a run and ``save`` at most once at the
    end. ``save`` must be all-or-nothing: it either persists records and baseline
    together or raises ``LedgerWriteError`` leaving the previous state intact.
    """

    def load(self) -> Ledger: ...

    def save(self, ledger: Ledger) -> None: ...


__all__ = ["LedgerStore"]
