from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from policyhub.adapters.ledger import JsonLedgerStore
from policyhub.domain.errors import LedgerReadError, LedgerWriteError
from policyhub.domain.model import DeliveryRecord, Ledger
from tests.support.fakes import FIXED_NOW, artifact

if TYPE_CHECKING:
    from pathlib import Path

VALID_RECORD = {"deliveredAt": "2024-05-01T08:30:00Z", "release": "r"}


def _store(tmp_path: Path) -> JsonLedgerStore:
    return JsonLedgerStore(
        baseline_path=tmp_path / ".state" / "baseline",
        records_path=tmp_path / ".state" / "delivered.json",
    )


def test_missing_files_load_as_empty_ledger(tmp_path: Path) -> None:
    assert _store(tmp_path).load() == Ledger()


def test_save_writes_sorted_camel_case_records(tmp_path: Path) -> None:
    store = _store(tmp_path)
    ledger = Ledger(
        baseline="abc123",
        records={
            artifact("set-header", "v1.0.2"): DeliveryRecord(
                delivered_at=FIXED_NOW, release="v2025.03.01"
            ),
            artifact("rate-limiter", "v1.0.6"): DeliveryRecord(
                delivered_at=FIXED_NOW,
                release="v2025.03.01",
                note="exists in registry; recorded without publish",
            ),
        },
    )

    store.save(ledger)

    raw = store.records_path.read_text(encoding="utf-8")
    document = json.loads(raw)
    assert list(document) == ["policies/rate-limiter/v1.0.6", "policies/set-header/v1.0.2"]
    assert document["policies/set-header/v1.0.2"] == {
        "deliveredAt": "2025-03-01T12:00:00Z",
        "release": "v2025.03.01",
    }
    assert document["policies/rate-limiter/v1.0.6"]["note"].startswith("exists in registry")
    assert raw.endswith("}\n")
    assert store.baseline_path.read_text(encoding="utf-8") == "abc123\n"
    assert store.load() == ledger


def test_load_accepts_naive_timestamps_as_utc(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.records_path.parent.mkdir(parents=True)
    record = {"deliveredAt": "2024-05-01T08:30:00", "release": "r"}
    store.records_path.write_text(json.dumps({"policies/cors/v1.0.0": record}), encoding="utf-8")
    store.baseline_path.write_text("  deadbeef \n", encoding="utf-8")

    ledger = store.load()

    record = ledger.record_for(artifact("cors"))
    assert record is not None
    assert record.delivered_at == datetime(2024, 5, 1, 8, 30, tzinfo=UTC)
    assert ledger.baseline == "deadbeef"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"policies/cors/v1.0.0": {"release": "r"}}),
        json.dumps({"policies/cors/latest": VALID_RECORD}),
        json.dumps(["policies/cors/v1.0.0"]),
    ],
)
def test_malformed_records_raise_read_error(tmp_path: Path, content: str) -> None:
    store = _store(tmp_path)
    store.records_path.parent.mkdir(parents=True)
    store.records_path.write_text(content, encoding="utf-8")

    with pytest.raises(LedgerReadError):
        store.load()


@pytest.mark.parametrize("target", ["baseline_path", "records_path"])
def test_undecodable_ledger_files_raise_read_error(tmp_path: Path, target: str) -> None:
    store = _store(tmp_path)
    path: Path = getattr(store, target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(LedgerReadError):
        store.load()


def test_failed_baseline_replace_restores_previous_records(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = _store(tmp_path)
    original = Ledger(
        baseline="c1",
        records={artifact("a"): DeliveryRecord(delivered_at=FIXED_NOW, release="r1")},
    )
    store.save(original)
    before = store.records_path.read_bytes()

    real_replace = os.replace

    def flaky_replace(src: str | os.PathLike[str], dst: str | os.PathLike[str]) -> None:
        if os.fspath(dst) == os.fspath(store.baseline_path):
            raise OSError("read-only file system")
        real_replace(src, dst)

    monkeypatch.setattr(os, "replace", flaky_replace)
    updated = original.merge(
        {artifact("b"): DeliveryRecord(delivered_at=FIXED_NOW, release="r2")}
    ).advance("c2")

    with pytest.raises(LedgerWriteError):
        store.save(updated)

    monkeypatch.setattr(os, "replace", real_replace)
    assert store.records_path.read_bytes() == before
    assert store.load() == original
    leftovers = [path.name for path in store.records_path.parent.iterdir()]
    assert sorted(leftovers) == ["baseline", "delivered.json"]


def test_save_without_baseline_writes_records_only(tmp_path: Path) -> None:
    store = _store(tmp_path)

    store.save(Ledger(records={artifact("a"): DeliveryRecord(delivered_at=FIXED_NOW, release="r")}))

    assert store.records_path.is_file()
    assert not store.baseline_path.exists()
