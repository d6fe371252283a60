"""Ports for the remote policy registry.

Publishing yields a tagged union. ``Conflict`` stays distinct here and is
normalised to a successful delivery by the reconciler, not by adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from policyhub.domain.model import ArtifactId


class ProbeStatus(StrEnum):
    EXISTS = "exists"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    status: ProbeStatus
    detail: str | None = None

    @classmethod
    def exists(cls, detail: str | None = None) -> ProbeResult:
        return cls(ProbeStatus.EXISTS, detail)

    @classmethod
    def not_found(cls) -> ProbeResult:
        return cls(ProbeStatus.NOT_FOUND)

    @classmethod
    def unknown(cls, detail: str) -> ProbeResult:
        return cls(ProbeStatus.UNKNOWN, detail)


@dataclass(frozen=True, slots=True)
class Delivered:
    status_code: int
    message: str | None = None


@dataclass(frozen=True, slots=True)
class Conflict:
    status_code: int = 409
    message: str | None = None


@dataclass(frozen=True, slots=True)
class Failed:
    reason: str
    status_code: int | None = None


type PublishResult = Delivered | Conflict | Failed


@runtime_checkable
class RegistryProber(Protocol):
    async def probe(self, artifact: ArtifactId) -> ProbeResult: ...


@runtime_checkable
class Publisher(Protocol):
    async def publish(
        self,
        artifact: ArtifactId,
        *,
        payload: Mapping[str, object],
        idempotency_key: str,
    ) -> PublishResult: ...


@runtime_checkable
class Registry(RegistryProber, Publisher, Protocol):
    """Registry session opened once per run around all probe/publish calls."""

    async def __aenter__(self) -> Registry: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


__all__ = [
    "Conflict",
    "Delivered",
    "Failed",
    "ProbeResult",
    "ProbeStatus",
    "PublishResult",
    "Publisher",
    "Registry",
    "RegistryProber",
]
