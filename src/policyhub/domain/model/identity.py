"""Artifact identity derived from repository paths.

An artifact lives at ``<collection>/<name>/<version>/`` where ``<version>`` is a
``vMAJOR.MINOR.PATCH`` tag. Two artifacts with the same identity are the same
immutable unit forever, regardless of what their directory contains.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final
from uuid import NAMESPACE_URL, uuid5

from policyhub.domain.errors import InvalidArtifactPathError

DEFAULT_COLLECTION_ROOT: Final[str] = "policies"
VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(r"^v(\d+)\.(\d+)\.(\d+)$")

_IDEMPOTENCY_PREFIX: Final[str] = "policyhub:"


def _normalize_root(collection_root: str) -> str:
    root = collection_root.strip().strip("/")
    if not root:
        raise ValueError("Collection root must not be empty")
    return root


@dataclass(frozen=True, slots=True)
class ArtifactId:
    collection: str
    name: str
    version: str

    def __post_init__(self) -> None:
        if not self.name or "/" in self.name:
            raise InvalidArtifactPathError(f"Invalid artifact name: {self.name!r}")
        if VERSION_PATTERN.match(self.version) is None:
            raise InvalidArtifactPathError(f"Invalid artifact version: {self.version!r}")

    def __str__(self) -> str:
        return self.path

    @property
    def path(self) -> str:
        """Canonical ``<collection>/<name>/<version>`` form, also used as ledger key."""
        return f"{self.collection}/{self.name}/{self.version}"

    @property
    def version_key(self) -> tuple[int, int, int]:
        match = VERSION_PATTERN.match(self.version)
        if match is None:
            raise InvalidArtifactPathError(f"Invalid artifact version: {self.version!r}")
        major, minor, patch = match.groups()
        return int(major), int(minor), int(patch)

    @property
    def sort_key(self) -> tuple[str, tuple[int, int, int], str]:
        return self.name, self.version_key, self.collection

    @property
    def idempotency_key(self) -> str:
        """Deterministic token the registry deduplicates publish requests on."""
        return str(uuid5(NAMESPACE_URL, _IDEMPOTENCY_PREFIX + self.path))

    @classmethod
    def match_path(
        cls,
        path: str,
        *,
        collection_root: str = DEFAULT_COLLECTION_ROOT,
    ) -> ArtifactId | None:
        """Return the artifact owning ``path`` or ``None`` if the path is not inside one."""

        root = _normalize_root(collection_root)
        normalized = path.strip().replace("\\", "/").lstrip("/")
        prefix = root + "/"
        if not normalized.startswith(prefix):
            return None
        parts = normalized[len(prefix) :].split("/")
        if len(parts) < 2:
            return None
        name, version = parts[0], parts[1]
        if not name or VERSION_PATTERN.match(version) is None:
            return None
        return cls(collection=root, name=name, version=version)

    @classmethod
    def from_path(
        cls,
        path: str,
        *,
        collection_root: str = DEFAULT_COLLECTION_ROOT,
    ) -> ArtifactId:
        """Parse an artifact directory path exactly, rejecting anything deeper or shallower."""

        artifact = cls.match_path(path, collection_root=collection_root)
        if artifact is None or artifact.path != path.strip().strip("/"):
            raise InvalidArtifactPathError(
                f"Invalid artifact path format: {path} "
                f"(expected {_normalize_root(collection_root)}/<name>/vX.Y.Z)"
            )
        return artifact
