"""Default publish payload: metadata and definition read from the policy directory."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from policyhub.adapters.registry.schema import PublishRequest

from .validator import DEFINITION_FILE, METADATA_FILE

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from policyhub.domain.model import ChangeRecord

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PolicyPayloadBuilder:
    """Implements the ``PayloadBuilder`` port.

    Unreadable optional files are logged and left out of the payload; the
    registry decides whether it accepts the request.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def __call__(self, change: ChangeRecord, artifact_dir: Path) -> dict[str, object]:
        request = PublishRequest(
            name=change.id.name,
            version=change.id.version,
            commit_sha=change.latest_commit or "unknown",
            timestamp=self._clock().isoformat(),
            metadata=self._read_metadata(artifact_dir),
            definition=self._read_definition(artifact_dir),
        )
        return request.to_payload()

    @staticmethod
    def _read_metadata(artifact_dir: Path) -> dict[str, object] | None:
        try:
            metadata = json.loads((artifact_dir / METADATA_FILE).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            log.warning("Could not read %s: %s", METADATA_FILE, exc)
            return None
        if not isinstance(metadata, dict):
            log.warning("Ignoring %s: expected a JSON object", METADATA_FILE)
            return None
        return metadata

    @staticmethod
    def _read_definition(artifact_dir: Path) -> str | None:
        try:
            return (artifact_dir / DEFINITION_FILE).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read %s: %s", DEFINITION_FILE, exc)
            return None
