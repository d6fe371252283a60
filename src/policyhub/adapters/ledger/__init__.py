"""File-backed ledger adapter."""

from __future__ import annotations

from .json_store import JsonLedgerStore
from .schema import DeliveryMapModel, DeliveryRecordModel

__all__ = ["DeliveryMapModel", "DeliveryRecordModel", "JsonLedgerStore"]
