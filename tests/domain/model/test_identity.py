from __future__ import annotations

from uuid import UUID

import pytest

from policyhub.domain.errors import InvalidArtifactPathError
from policyhub.domain.model import ArtifactId, DeliveryRecord, Ledger
from tests.support.fakes import FIXED_NOW, artifact


def test_match_path_extracts_artifact_from_nested_file() -> None:
    found = ArtifactId.match_path("policies/rate-limiter/v1.0.6/src/main.go")

    assert found == ArtifactId("policies", "rate-limiter", "v1.0.6")
    assert found is not None
    assert found.path == "policies/rate-limiter/v1.0.6"
    assert str(found) == "policies/rate-limiter/v1.0.6"


@pytest.mark.parametrize(
    "path",
    [
        "README.md",
        "policies/README.md",
        "policies/rate-limiter/latest/src/main.go",
        "policies/rate-limiter/1.0.0/metadata.json",
        "policies/rate-limiter/v1.0/metadata.json",
        "examples/sample-policy/v1.0.0/src/main.go",
        "policies//v1.0.0/metadata.json",
    ],
)
def test_match_path_ignores_paths_outside_artifacts(path: str) -> None:
    assert ArtifactId.match_path(path) is None


def test_match_path_supports_custom_and_nested_roots() -> None:
    found = ArtifactId.match_path(
        "catalog/policies/cors/v2.0.0/docs/overview.md",
        collection_root="catalog/policies/",
    )

    assert found == ArtifactId("catalog/policies", "cors", "v2.0.0")


def test_from_path_requires_exact_artifact_directory() -> None:
    assert ArtifactId.from_path("policies/cors/v2.0.0") == artifact("cors", "v2.0.0")
    assert ArtifactId.from_path("policies/cors/v2.0.0/") == artifact("cors", "v2.0.0")

    with pytest.raises(InvalidArtifactPathError):
        ArtifactId.from_path("policies/cors/v2.0.0/src")
    with pytest.raises(InvalidArtifactPathError):
        ArtifactId.from_path("policies/cors")


def test_constructor_rejects_invalid_version() -> None:
    with pytest.raises(InvalidArtifactPathError):
        ArtifactId("policies", "cors", "2.0.0")


def test_sort_key_orders_versions_numerically() -> None:
    ids = [artifact("b", "v1.10.0"), artifact("a", "v2.0.0"), artifact("b", "v1.9.3")]

    ordered = sorted(ids, key=lambda item: item.sort_key)

    assert [item.path for item in ordered] == [
        "policies/a/v2.0.0",
        "policies/b/v1.9.3",
        "policies/b/v1.10.0",
    ]


def test_idempotency_key_is_stable_per_identity() -> None:
    first = artifact("cors", "v1.0.0").idempotency_key
    again = ArtifactId.from_path("policies/cors/v1.0.0").idempotency_key
    other = artifact("cors", "v1.0.1").idempotency_key

    assert first == again
    assert first != other
    assert UUID(first).version == 5


def test_ledger_merge_keeps_existing_record() -> None:
    existing = DeliveryRecord(delivered_at=FIXED_NOW, release="r1")
    incoming = DeliveryRecord(delivered_at=FIXED_NOW, release="r2")
    ledger = Ledger(records={artifact("a"): existing})

    merged = ledger.merge({artifact("a"): incoming, artifact("b"): incoming})

    assert merged.record_for(artifact("a")) == existing
    assert merged.record_for(artifact("b")) == incoming
    assert len(ledger) == 1
    assert len(merged) == 2


def test_ledger_merge_is_order_independent() -> None:
    record_a = DeliveryRecord(delivered_at=FIXED_NOW, release="r1")
    record_b = DeliveryRecord(delivered_at=FIXED_NOW, release="r1")
    ledger = Ledger(baseline="c0")

    forward = ledger.merge({artifact("a"): record_a}).merge({artifact("b"): record_b})
    backward = ledger.merge({artifact("b"): record_b}).merge({artifact("a"): record_a})

    assert forward == backward
    assert forward.baseline == "c0"


def test_ledger_advance_returns_new_value() -> None:
    ledger = Ledger(baseline="c1")

    advanced = ledger.advance("c2")

    assert advanced.baseline == "c2"
    assert ledger.baseline == "c1"
