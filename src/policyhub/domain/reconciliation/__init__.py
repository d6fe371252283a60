"""Delivery reconciliation core.

Layered flow for one release event:
1) detect artifacts changed since the persisted baseline
2) filter out versions that are already delivered (immutable)
3) probe the registry, validate and publish the rest in a bounded worker pool
4) merge delivered outcomes into the ledger and decide baseline advancement
"""

from __future__ import annotations

from .detect import collect_artifacts, collect_changes
from .eligibility import DeliveryDecision, DeliveryReason, delivery_decision, filter_eligible
from .engine import DEFAULT_WORKERS, Reconciler, plan_delivery
from .summary import DeliveryPlan, RunState, RunSummary

__all__ = [
    "DEFAULT_WORKERS",
    "DeliveryDecision",
    "DeliveryPlan",
    "DeliveryReason",
    "Reconciler",
    "RunState",
    "RunSummary",
    "collect_artifacts",
    "collect_changes",
    "delivery_decision",
    "filter_eligible",
    "plan_delivery",
]
