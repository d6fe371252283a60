"""HTTP client for the policy registry.

``probe`` maps ``GET /<resource>/<name>/<version>`` onto exists / not-found /
unknown and never raises. ``publish`` maps ``POST /<resource>`` onto the
publish result union and never raises either: transport errors become
``Failed`` because publishing is not retried within a run.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from policyhub.adapters.http_resilience import ResilientClient
from policyhub.domain.ports.registry import (
    Conflict,
    Delivered,
    Failed,
    ProbeResult,
    PublishResult,
)

from .schema import RegistryMessage, RegistryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from policyhub.config.http_resilience import ResilienceConfig
    from policyhub.config.registry import RegistryConfig
    from policyhub.domain.model import ArtifactId

log = getLogger(__name__)

IDEMPOTENCY_HEADER = "X-Idempotency-Key"


class RegistryAPIError(RuntimeError):
    """Raised when the registry client is used outside an open session."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _response_message(response: httpx.Response) -> str:
    try:
        message = RegistryMessage.model_validate(response.json()).message
    except (json.JSONDecodeError, ValidationError, UnicodeDecodeError):
        message = None
    if message:
        return message
    text = response.text.strip()
    return text or f"registry returned status {response.status_code}"


class RegistryClient:
    """Registry session implementing the ``Registry`` port."""

    def __init__(
        self,
        *,
        config: RegistryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> RegistryClient:
        self._client = self._client_factory(self._config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    @property
    def client(self) -> ResilientClient:
        if self._client is None:
            raise RegistryAPIError("Registry client used outside of an open session")
        return self._client

    def _artifact_url(self, artifact: ArtifactId) -> str:
        return "/".join(
            (
                self._config.resource,
                quote(artifact.name, safe=""),
                quote(artifact.version, safe=""),
            )
        )

    async def probe(self, artifact: ArtifactId) -> ProbeResult:
        try:
            response = await self.client.get(self._artifact_url(artifact))
        except httpx.HTTPError as exc:
            return ProbeResult.unknown(f"request failed: {exc}")

        if response.status_code == httpx.codes.OK:
            try:
                remote = RegistryPolicy.model_validate(response.json())
            except (json.JSONDecodeError, ValidationError, UnicodeDecodeError):
                remote = RegistryPolicy()
            log.debug("Registry holds %s: %s", artifact, remote.model_dump(exclude_none=True))
            return ProbeResult.exists()
        if response.status_code == httpx.codes.NOT_FOUND:
            return ProbeResult.not_found()
        return ProbeResult.unknown(
            f"unexpected status {response.status_code}: {_response_message(response)}"
        )

    async def publish(
        self,
        artifact: ArtifactId,
        *,
        payload: Mapping[str, object],
        idempotency_key: str,
    ) -> PublishResult:
        try:
            response = await self.client.post(
                self._config.resource,
                json=dict(payload),
                headers={IDEMPOTENCY_HEADER: idempotency_key},
            )
        except httpx.HTTPError as exc:
            return Failed(reason=f"request failed: {exc}")

        if response.is_success:
            return Delivered(status_code=response.status_code, message=_response_message(response))
        if response.status_code == httpx.codes.CONFLICT:
            log.debug("Registry reported %s as already published", artifact)
            return Conflict(status_code=response.status_code, message=_response_message(response))
        return Failed(reason=_response_message(response), status_code=response.status_code)
