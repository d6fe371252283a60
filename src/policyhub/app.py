"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from policyhub.adapters.git import GitChangeDetector
from policyhub.adapters.ledger import JsonLedgerStore
from policyhub.adapters.policy_files import PolicyDirectoryValidator, PolicyPayloadBuilder
from policyhub.adapters.registry import RegistryClient
from policyhub.config import (
    ReconcileConfig,
    get_registry_config,
    load_hub_config,
)
from policyhub.domain.model import ArtifactId
from policyhub.domain.reconciliation import (
    DeliveryDecision,
    DeliveryPlan,
    Reconciler,
    RunSummary,
    delivery_decision,
    plan_delivery,
)

if TYPE_CHECKING:
    from policyhub.config import HubConfig
    from policyhub.domain.ports import (
        ChangeDetector,
        LedgerStore,
        PayloadBuilder,
        Registry,
        ValidationReport,
        Validator,
    )


log = getLogger(__name__)


def build_ledger_store(config: ReconcileConfig) -> JsonLedgerStore:
    return JsonLedgerStore(
        baseline_path=config.baseline_path(),
        records_path=config.records_path(),
        collection_root=config.collection_root,
    )


def build_reconciler(
    config: ReconcileConfig,
    *,
    hub: HubConfig | None = None,
    detector: ChangeDetector | None = None,
    ledger_store: LedgerStore | None = None,
    registry: Registry | None = None,
    validator: Validator | None = None,
    payload_builder: PayloadBuilder | None = None,
) -> Reconciler:
    """Wire the default adapters; any of them can be replaced."""

    effective_hub = hub or load_hub_config(config.hub_config_path())
    workspace = config.resolve_workspace()
    return Reconciler(
        detector=detector or GitChangeDetector(workspace, collection_root=config.collection_root),
        ledger_store=ledger_store or build_ledger_store(config),
        registry=registry
        or RegistryClient(
            config=get_registry_config(timeout_seconds=float(effective_hub.registry.timeout))
        ),
        validator=validator or PolicyDirectoryValidator(effective_hub.validation),
        payload_builder=payload_builder or PolicyPayloadBuilder(),
        workspace=workspace,
        release=config.require_release(),
        workers=config.workers or effective_hub.processing.max_parallel_jobs,
        probe=config.probe,
    )


def reconcile_release(
    config: ReconcileConfig,
    *,
    head: str,
    baseline: str | None = None,
    reconciler: Reconciler | None = None,
) -> RunSummary:
    """Run one reconciliation for a release event and log the summary."""

    effective = reconciler or build_reconciler(config)
    log.info(
        "Starting reconciliation: release=%s, head=%s, workers=%s, probe=%s",
        effective.release,
        head,
        effective.workers,
        effective.probe,
    )
    summary = effective.run(head=head, baseline=baseline)
    for line in summary.render_lines():
        log.info(line)
    return summary


def plan_release(
    config: ReconcileConfig,
    *,
    head: str,
    baseline: str | None = None,
    detector: ChangeDetector | None = None,
) -> DeliveryPlan:
    """Detect pending artifacts without touching the registry or the ledger."""

    ledger = build_ledger_store(config).load()
    effective_detector = detector or GitChangeDetector(
        config.resolve_workspace(),
        collection_root=config.collection_root,
        require_checkout=False,
    )
    return plan_delivery(effective_detector, ledger, head=head, baseline=baseline)


def validate_artifact(
    config: ReconcileConfig,
    path: str,
    *,
    hub: HubConfig | None = None,
) -> ValidationReport:
    artifact = ArtifactId.from_path(path, collection_root=config.collection_root)
    effective_hub = hub or load_hub_config(config.hub_config_path())
    validator = PolicyDirectoryValidator(effective_hub.validation)
    return validator(Path(config.resolve_workspace(), artifact.path))


def delivery_status(config: ReconcileConfig, path: str) -> DeliveryDecision:
    artifact = ArtifactId.from_path(path, collection_root=config.collection_root)
    ledger = build_ledger_store(config).load()
    return delivery_decision(artifact, ledger)
