"""Policy registry configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

REGISTRY_TIMEOUT_SECONDS = 30.0
USER_AGENT = "policyhub-publisher/1.0"
DEFAULT_RESOURCE = "policies"


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Holds the registry endpoint, credentials and HTTP behaviour."""

    api_url: str
    api_key: str
    resilience: ResilienceConfig
    resource: str = DEFAULT_RESOURCE


def get_registry_config(
    *,
    timeout_seconds: float = REGISTRY_TIMEOUT_SECONDS,
    ratelimit: RateLimit | None = None,
) -> RegistryConfig:
    values = require_env_vars(("POLICYHUB_API_URL", "POLICYHUB_API_KEY"))
    api_url = values["POLICYHUB_API_URL"].rstrip("/")
    api_key = values["POLICYHUB_API_KEY"]

    resilience = ResilienceConfig(
        name="registry",
        base_url=api_url,
        timeout_seconds=timeout_seconds,
        retry=RetryPolicy(),
        ratelimit=ratelimit,
        default_headers={
            "Authorization": f"Bearer {api_key}",
            "User-Agent": USER_AGENT,
        },
    )
    resource = (optional_env_var("POLICYHUB_API_RESOURCE") or DEFAULT_RESOURCE).strip("/")
    return RegistryConfig(
        api_url=api_url,
        api_key=api_key,
        resilience=resilience,
        resource=resource,
    )
