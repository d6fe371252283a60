"""Registry wire schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegistryBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PublishRequest(RegistryBaseModel):
    """Body of ``POST /<resource>``."""

    name: str
    version: str
    commit_sha: str = Field(alias="commitSha")
    timestamp: str
    metadata: dict[str, object] | None = None
    definition: str | None = None

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RegistryMessage(RegistryBaseModel):
    """Free-form JSON answer; only ``message`` and ``url`` are interpreted."""

    message: str | None = None
    url: str | None = None


class RegistryPolicy(RegistryBaseModel):
    name: str | None = None
    version: str | None = None
