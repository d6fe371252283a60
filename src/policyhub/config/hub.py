"""Repository-level settings read from ``config/policy-hub-config.json``."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

DEFAULT_HUB_CONFIG_PATH = "config/policy-hub-config.json"


class HubBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ValidationSettings(HubBaseModel):
    required_files: tuple[str, ...] = Field(
        default=("metadata.json", "policy-definition.yaml"), alias="requiredFiles"
    )
    required_dirs: tuple[str, ...] = Field(default=("src", "docs"), alias="requiredDirs")
    required_docs_files: tuple[str, ...] = Field(
        default=("overview.md", "configuration.md", "examples.md"), alias="requiredDocsFiles"
    )
    required_metadata_fields: tuple[str, ...] = Field(
        default=("name", "version", "description", "author"), alias="requiredMetadataFields"
    )
    optional_dirs: tuple[str, ...] = Field(default=(), alias="optionalDirs")
    allowed_file_extensions: tuple[str, ...] = Field(
        default=(".go", ".js", ".ts", ".py"), alias="allowedFileExtensions"
    )
    version_regex: str = Field(default=r"^v\d+\.\d+\.\d+$", alias="versionRegex")
    max_policy_name_length: int | None = Field(default=64, alias="maxPolicyNameLength", ge=1)
    strict_validation: bool = Field(default=True, alias="strictValidation")


class RegistrySettings(HubBaseModel):
    timeout: int = Field(default=30, ge=1, le=300)


class ProcessingSettings(HubBaseModel):
    max_parallel_jobs: int = Field(default=3, alias="maxParallelJobs", ge=1, le=10)


class HubConfig(HubBaseModel):
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings, alias="policyHub")
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)


def load_hub_config(path: Path) -> HubConfig:
    """Load hub settings, falling back to defaults when the file does not exist."""

    if not path.is_file():
        log.info("No hub config at %s, using defaults", path)
        return HubConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Could not read hub config {path}: {exc}") from exc
    try:
        return HubConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid hub config {path}: {exc}") from exc
