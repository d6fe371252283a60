"""Reconciliation run defaults and workspace layout."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from policyhub.domain.model import DEFAULT_COLLECTION_ROOT

from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .hub import DEFAULT_HUB_CONFIG_PATH

DEFAULT_BASELINE_FILE: Final[str] = ".state/baseline"
DEFAULT_RECORDS_FILE: Final[str] = ".state/delivered.json"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    """Where the repository, ledger and hub config live for one invocation.

    ``release`` is only needed by runs that record deliveries; ``workers`` falls
    back to the hub config's ``processing.maxParallelJobs`` when unset.
    """

    workspace: Path
    release: str | None = None
    collection_root: str = DEFAULT_COLLECTION_ROOT
    baseline_file: str = DEFAULT_BASELINE_FILE
    records_file: str = DEFAULT_RECORDS_FILE
    hub_config_file: str = DEFAULT_HUB_CONFIG_PATH
    workers: int | None = None
    probe: bool = True

    def __post_init__(self) -> None:
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"Worker count must be positive, got {self.workers}")
        if self.release is not None and not self.release.strip():
            raise MissingConfigurationError(["POLICYHUB_RELEASE_TAG"])

    def require_release(self) -> str:
        if self.release is None:
            raise MissingConfigurationError(["POLICYHUB_RELEASE_TAG"])
        return self.release

    def resolve_workspace(self) -> Path:
        return self.workspace.expanduser().resolve()

    def baseline_path(self) -> Path:
        return self.resolve_workspace() / self.baseline_file

    def records_path(self) -> Path:
        return self.resolve_workspace() / self.records_file

    def hub_config_path(self) -> Path:
        return self.resolve_workspace() / self.hub_config_file


def get_reconcile_config(
    *,
    release: str | None = None,
    workspace: Path | None = None,
    workers: int | None = None,
    probe: bool = True,
) -> ReconcileConfig:
    """Build run settings from explicit arguments, then ``POLICYHUB_*`` variables."""

    env_workspace = optional_env_var("POLICYHUB_WORKSPACE")
    effective_workspace = workspace or (Path(env_workspace) if env_workspace else Path.cwd())

    return ReconcileConfig(
        workspace=effective_workspace,
        release=release or optional_env_var("POLICYHUB_RELEASE_TAG"),
        collection_root=optional_env_var("POLICYHUB_COLLECTION_ROOT") or DEFAULT_COLLECTION_ROOT,
        baseline_file=optional_env_var("POLICYHUB_BASELINE_FILE") or DEFAULT_BASELINE_FILE,
        records_file=optional_env_var("POLICYHUB_STATE_FILE") or DEFAULT_RECORDS_FILE,
        workers=workers or optional_int_env_var("POLICYHUB_WORKERS"),
        probe=probe,
    )
