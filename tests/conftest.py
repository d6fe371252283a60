from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from policyhub.domain.reconciliation import Reconciler
from tests.support.fakes import (
    FakePayloadBuilder,
    FakeRegistry,
    FakeValidator,
    InMemoryLedgerStore,
    fixed_clock,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from policyhub.domain.ports import ChangeDetector


@pytest.fixture(autouse=True)
def _clear_policyhub_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "POLICYHUB_API_URL",
        "POLICYHUB_API_KEY",
        "POLICYHUB_API_RESOURCE",
        "POLICYHUB_RELEASE_TAG",
        "POLICYHUB_WORKSPACE",
        "POLICYHUB_WORKERS",
        "POLICYHUB_COLLECTION_ROOT",
        "POLICYHUB_BASELINE_FILE",
        "POLICYHUB_STATE_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_policy(tmp_path: Path) -> Callable[..., Path]:
    """Create a complete, valid policy version directory under ``tmp_path``."""

    def factory(
        name: str = "rate-limiter",
        version: str = "v1.0.0",
        *,
        root: Path | None = None,
        metadata: dict[str, object] | None = None,
    ) -> Path:
        base = (root or tmp_path) / "policies" / name / version
        (base / "src").mkdir(parents=True)
        (base / "docs").mkdir()
        (base / "src" / "main.go").write_text("package main\n", encoding="utf-8")
        for doc in ("overview.md", "configuration.md", "examples.md"):
            (base / "docs" / doc).write_text(f"# {doc}\n", encoding="utf-8")
        (base / "policy-definition.yaml").write_text(
            f"name: {name}\nversion: {version}\nparameters: []\n", encoding="utf-8"
        )
        document = metadata or {
            "name": name,
            "version": version,
            "description": "Limits request rates",
            "author": "Platform Team",
        }
        (base / "metadata.json").write_text(json.dumps(document), encoding="utf-8")
        return base

    return factory


@pytest.fixture
def make_reconciler(tmp_path: Path) -> Callable[..., Reconciler]:
    def factory(
        detector: ChangeDetector,
        *,
        ledger_store: InMemoryLedgerStore | None = None,
        registry: FakeRegistry | None = None,
        validator: FakeValidator | None = None,
        release: str = "r1",
        workers: int = 3,
        probe: bool = True,
    ) -> Reconciler:
        return Reconciler(
            detector=detector,
            ledger_store=ledger_store or InMemoryLedgerStore(),
            registry=registry or FakeRegistry(),
            validator=validator or FakeValidator(),
            payload_builder=FakePayloadBuilder(),
            workspace=tmp_path,
            release=release,
            workers=workers,
            probe=probe,
            clock=fixed_clock,
        )

    return factory
