"""Path-level change extraction shared by every change detector adapter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from policyhub.domain.model import DEFAULT_COLLECTION_ROOT, ArtifactId, ChangeRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

log = getLogger(__name__)


def collect_artifacts(
    paths: Iterable[str],
    *,
    collection_root: str = DEFAULT_COLLECTION_ROOT,
) -> list[ArtifactId]:
    """Collapse changed file paths into unique artifacts, sorted by name then version.

    Paths outside ``<collection>/<name>/<version>/`` are discarded.
    """

    artifacts: set[ArtifactId] = set()
    ignored = 0
    for path in paths:
        if not path:
            continue
        artifact = ArtifactId.match_path(path, collection_root=collection_root)
        if artifact is None:
            ignored += 1
            continue
        artifacts.add(artifact)
    if ignored:
        log.debug("Ignored %s path(s) outside %s/<name>/<version>", ignored, collection_root)
    return sorted(artifacts, key=lambda artifact: artifact.sort_key)


def collect_changes(
    paths: Iterable[str],
    *,
    collection_root: str = DEFAULT_COLLECTION_ROOT,
    latest_commit: Callable[[ArtifactId], str | None] | None = None,
) -> tuple[ChangeRecord, ...]:
    """Build ordered change records, looking up each artifact's newest commit once."""

    artifacts = collect_artifacts(paths, collection_root=collection_root)
    if latest_commit is None:
        return tuple(ChangeRecord(id=artifact) for artifact in artifacts)
    return tuple(
        ChangeRecord(id=artifact, latest_commit=latest_commit(artifact)) for artifact in artifacts
    )
