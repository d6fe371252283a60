"""Ledger persisted as two files committed back to version control.

- baseline pointer: plain text commit reference
- delivery map: JSON object keyed by ``<collection>/<name>/<version>``, keys sorted

``save`` stages both files next to their targets, replaces the delivery map
first and the baseline second. If the baseline replace fails the previous
delivery map is put back, so a failed save leaves the pair as it was.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import UTC
from logging import getLogger
from pathlib import Path

from pydantic import ValidationError

from policyhub.domain.errors import InvalidArtifactPathError, LedgerReadError, LedgerWriteError
from policyhub.domain.model import DEFAULT_COLLECTION_ROOT, ArtifactId, DeliveryRecord, Ledger

from .schema import DeliveryMapModel, DeliveryRecordModel

log = getLogger(__name__)


class JsonLedgerStore:
    """Implements the ``LedgerStore`` port on the local filesystem."""

    def __init__(
        self,
        *,
        baseline_path: Path,
        records_path: Path,
        collection_root: str = DEFAULT_COLLECTION_ROOT,
    ) -> None:
        self.baseline_path = baseline_path
        self.records_path = records_path
        self.collection_root = collection_root

    def load(self) -> Ledger:
        return Ledger(baseline=self._load_baseline(), records=self._load_records())

    def save(self, ledger: Ledger) -> None:
        records_text = self.serialize_records(ledger)
        baseline_text = f"{ledger.baseline}\n" if ledger.baseline else None

        previous_records = self._read_previous(self.records_path)
        staged: list[Path] = []
        try:
            staged_records = self._stage(self.records_path, records_text)
            staged.append(staged_records)
            staged_baseline = None
            if baseline_text is not None:
                staged_baseline = self._stage(self.baseline_path, baseline_text)
                staged.append(staged_baseline)

            os.replace(staged_records, self.records_path)
            staged.remove(staged_records)
            if staged_baseline is not None:
                try:
                    os.replace(staged_baseline, self.baseline_path)
                except OSError:
                    self._restore(self.records_path, previous_records)
                    raise
                staged.remove(staged_baseline)
        except OSError as exc:
            raise LedgerWriteError(f"Failed to write delivery ledger: {exc}") from exc
        finally:
            for leftover in staged:
                leftover.unlink(missing_ok=True)

        log.debug("Wrote %s record(s) to %s", len(ledger), self.records_path)

    def serialize_records(self, ledger: Ledger) -> str:
        payload = {
            artifact.path: DeliveryRecordModel(
                delivered_at=record.delivered_at,
                release=record.release,
                note=record.note,
            ).model_dump(by_alias=True, exclude_none=True, mode="json")
            for artifact, record in ledger.records.items()
        }
        return json.dumps(payload, indent=2, sort_keys=True) + "\n"

    def _load_baseline(self) -> str | None:
        try:
            text = self.baseline_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise LedgerReadError(f"Failed to read baseline {self.baseline_path}: {exc}") from exc
        return text.strip() or None

    def _load_records(self) -> dict[ArtifactId, DeliveryRecord]:
        try:
            raw = self.records_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            raise LedgerReadError(
                f"Failed to read delivery state {self.records_path}: {exc}"
            ) from exc
        if not raw.strip():
            return {}

        try:
            parsed = DeliveryMapModel.model_validate_json(raw)
        except ValidationError as exc:
            raise LedgerReadError(
                f"Failed to read delivery state {self.records_path}: {exc}"
            ) from exc

        records: dict[ArtifactId, DeliveryRecord] = {}
        for key, model in parsed.root.items():
            try:
                artifact = ArtifactId.from_path(key, collection_root=self.collection_root)
            except InvalidArtifactPathError as exc:
                raise LedgerReadError(f"Invalid key in {self.records_path}: {exc}") from exc
            delivered_at = model.delivered_at
            if delivered_at.tzinfo is None:
                delivered_at = delivered_at.replace(tzinfo=UTC)
            records[artifact] = DeliveryRecord(
                delivered_at=delivered_at,
                release=model.release,
                note=model.note,
            )
        return records

    @staticmethod
    def _read_previous(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise LedgerWriteError(f"Failed to read {path} before writing: {exc}") from exc

    @staticmethod
    def _stage(target: Path, content: str) -> Path:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        staged = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError:
            staged.unlink(missing_ok=True)
            raise
        return staged

    @staticmethod
    def _restore(path: Path, previous: bytes | None) -> None:
        if previous is None:
            path.unlink(missing_ok=True)
        else:
            path.write_bytes(previous)
        log.warning("Restored %s after a failed ledger write", path)
