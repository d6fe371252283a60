from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from policyhub.app import delivery_status, plan_release, reconcile_release, validate_artifact
from policyhub.config import ConfigurationError, configure_logging, get_reconcile_config
from policyhub.domain.errors import InvalidArtifactPathError
from policyhub.domain.reconciliation import RunState

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from policyhub.config import ReconcileConfig

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_PARTIAL = 3


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1, got {parsed}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deliver policy artifacts to the policy hub")
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Repository root with policies and ledger (default: POLICYHUB_WORKSPACE or cwd)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Deliver every changed, undelivered policy")
    reconcile.add_argument("--head", type=str, required=True, help="Commit of the release event")
    reconcile.add_argument(
        "--release",
        type=str,
        help="Release tag recorded on deliveries (defaults to POLICYHUB_RELEASE_TAG)",
    )
    reconcile.add_argument(
        "--baseline",
        type=str,
        help="Override the persisted baseline commit, e.g. to bootstrap the ledger",
    )
    reconcile.add_argument(
        "--workers",
        type=_positive_int,
        help="Number of artifacts delivered in parallel (defaults to config)",
    )
    reconcile.add_argument(
        "--no-probe",
        action="store_true",
        help="Skip the registry existence check before publishing",
    )
    reconcile.add_argument(
        "--dry-run",
        action="store_true",
        help="Report pending artifacts without probing, publishing or writing the ledger",
    )
    reconcile.add_argument(
        "--summary-json",
        type=Path,
        help="Write the run summary as JSON to this path",
    )

    detect = subparsers.add_parser("detect", help="Print pending artifacts as a job matrix")
    detect.add_argument("--head", type=str, required=True, help="Commit to detect changes up to")
    detect.add_argument("--baseline", type=str, help="Override the persisted baseline commit")

    validate = subparsers.add_parser("validate", help="Validate one policy directory")
    validate.add_argument("path", type=str, help="Artifact path, e.g. policies/<name>/vX.Y.Z")

    status = subparsers.add_parser("status", help="Show whether a policy version is delivered")
    status.add_argument("path", type=str, help="Artifact path, e.g. policies/<name>/vX.Y.Z")

    return parser.parse_args(list(argv))


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2))  # noqa: T201


def _run_reconcile(args: argparse.Namespace, config: ReconcileConfig) -> int:
    if args.dry_run:
        plan = plan_release(config, head=args.head, baseline=args.baseline)
        log.info(
            "Dry run: %s changed, %s pending, %s already delivered",
            plan.changed,
            len(plan.pending),
            len(plan.skipped),
        )
        for change in plan.pending:
            log.info("Would deliver %s (last commit %s)", change.id, change.latest_commit)
        return EXIT_OK

    summary = reconcile_release(config, head=args.head, baseline=args.baseline)
    if args.summary_json is not None:
        args.summary_json.parent.mkdir(parents=True, exist_ok=True)
        args.summary_json.write_text(
            json.dumps(summary.to_dict(), indent=2) + "\n", encoding="utf-8"
        )
        log.info("Wrote run summary to %s", args.summary_json)
    return EXIT_PARTIAL if summary.state is RunState.PARTIAL else EXIT_OK


def _run_detect(args: argparse.Namespace, config: ReconcileConfig) -> int:
    plan = plan_release(config, head=args.head, baseline=args.baseline)
    _print_json(plan.matrix())
    return EXIT_OK


def _run_validate(args: argparse.Namespace, config: ReconcileConfig) -> int:
    report = validate_artifact(config, args.path)
    for warning in report.warnings:
        log.warning("%s: %s", args.path, warning)
    for error in report.errors:
        log.error("%s: %s", args.path, error)
    if not report.valid:
        log.error("%s failed validation with %s error(s)", args.path, len(report.errors))
        return EXIT_FATAL
    log.info("%s is valid (%s warning(s))", args.path, len(report.warnings))
    return EXIT_OK


def _run_status(args: argparse.Namespace, config: ReconcileConfig) -> int:
    decision = delivery_status(config, args.path)
    _print_json(
        {
            "path": args.path,
            "shouldDeliver": decision.should_deliver,
            "reason": str(decision.reason),
            "message": decision.message,
            "lastDeliveredAt": (
                decision.last_delivered_at.isoformat() if decision.last_delivered_at else None
            ),
        }
    )
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        config = get_reconcile_config(
            release=getattr(parsed_args, "release", None),
            workspace=parsed_args.workspace,
            workers=getattr(parsed_args, "workers", None),
            probe=not getattr(parsed_args, "no_probe", False),
        )
        if parsed_args.command == "reconcile" and not parsed_args.dry_run:
            config.require_release()
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)

    try:
        if parsed_args.command == "reconcile":
            code = _run_reconcile(parsed_args, config)
        elif parsed_args.command == "detect":
            code = _run_detect(parsed_args, config)
        elif parsed_args.command == "validate":
            code = _run_validate(parsed_args, config)
        elif parsed_args.command == "status":
            code = _run_status(parsed_args, config)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ConfigurationError, InvalidArtifactPathError):
        log.exception("Invalid input")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FATAL)

    sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C); an interrupted run never reports success."""
    log.warning("Interrupted by user (Ctrl+C); ledger may not reflect this run")
    sys.exit(EXIT_FATAL)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
