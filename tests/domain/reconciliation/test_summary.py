from __future__ import annotations

from policyhub.domain.model import DeliverySource, OutcomeStatus, RunOutcome
from policyhub.domain.reconciliation import RunState, RunSummary
from tests.support.fakes import artifact


def _summary(*outcomes: RunOutcome, baseline_after: str | None = "c5") -> RunSummary:
    return RunSummary(
        head="c5",
        release="r1",
        baseline_before="c1",
        baseline_after=baseline_after,
        outcomes=outcomes,
    )


def test_counts_include_every_status() -> None:
    summary = _summary(RunOutcome.skipped(artifact("a"), reason="version-immutable"))

    assert summary.counts == {
        OutcomeStatus.SKIPPED: 1,
        OutcomeStatus.DELIVERED: 0,
        OutcomeStatus.VALIDATION_FAILED: 0,
        OutcomeStatus.PUBLISH_FAILED: 0,
    }
    assert summary.state is RunState.SUCCESS
    assert summary.baseline_advanced


def test_partial_summary_renders_failures() -> None:
    summary = _summary(
        RunOutcome.delivered(artifact("alpha"), source=DeliverySource.REGISTRY),
        RunOutcome(
            id=artifact("beta"),
            status=OutcomeStatus.VALIDATION_FAILED,
            reason="2 validation error(s)",
            errors=("Missing required file: metadata.json", "No source files found"),
        ),
        baseline_after="c1",
    )

    lines = summary.render_lines()

    assert summary.state is RunState.PARTIAL
    assert not summary.baseline_advanced
    assert lines[0] == "Release r1 at c5: partial"
    assert lines[1] == "Baseline c1 -> c1"
    assert lines[2].split() == ["policies/alpha/v1.0.0", "delivered", "registry"]
    assert "2 validation error(s)" in lines[3]
    assert lines[-1].startswith("Totals: skipped=0, delivered=1")

    payload = summary.to_dict()
    assert payload["state"] == "partial"
    outcomes = payload["outcomes"]
    assert isinstance(outcomes, list)
    assert outcomes[1]["errors"] == [
        "Missing required file: metadata.json",
        "No source files found",
    ]


def test_empty_run_renders_placeholder() -> None:
    assert _summary(baseline_after="c1").render_lines()[-1] == "No policy changes detected"
