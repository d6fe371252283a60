from __future__ import annotations

import asyncio

import httpx
import pytest

from policyhub.adapters.http_resilience import ResilientClient
from policyhub.config import ConfigurationError, RateLimit, ResilienceConfig, RetryPolicy


def _config(**overrides: object) -> ResilienceConfig:
    retry = RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0)
    values: dict[str, object] = {
        "name": "test",
        "base_url": "https://hub.example.com/api",
        "retry": retry,
    }
    values.update(overrides)
    return ResilienceConfig(**values)  # type: ignore[arg-type]


def _flaky_handler(calls: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler)


def test_get_is_retried_on_transient_status() -> None:
    calls: list[str] = []

    async def scenario() -> httpx.Response:
        async with ResilientClient(_config(), transport=_flaky_handler(calls)) as client:
            return await client.get("policies/a/v1.0.0")

    response = asyncio.run(scenario())

    assert response.status_code == 200
    assert calls == ["GET", "GET"]


def test_post_is_never_retried() -> None:
    calls: list[str] = []

    async def scenario() -> httpx.Response:
        async with ResilientClient(_config(), transport=_flaky_handler(calls)) as client:
            return await client.post("policies", json={"name": "a"})

    response = asyncio.run(scenario())

    assert response.status_code == 503
    assert calls == ["POST"]


def test_response_hooks_and_default_headers() -> None:
    seen_status: list[int] = []
    seen_headers: list[str] = []

    async def hook(response: httpx.Response) -> None:
        seen_status.append(response.status_code)

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers["Authorization"])
        return httpx.Response(204)

    config = _config(
        response_hooks=(hook,),
        default_headers={"Authorization": "Bearer token"},
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )

    async def scenario() -> None:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.get("policies/a/v1.0.0")
            await client.get("policies/b/v1.0.0")

    asyncio.run(scenario())

    assert seen_status == [204, 204]
    assert seen_headers == ["Bearer token", "Bearer token"]


def test_invalid_settings_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        RateLimit(max_calls=0, per_seconds=1.0)
    with pytest.raises(ConfigurationError):
        RetryPolicy(total=-1)
