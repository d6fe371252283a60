"""Change detection over a local git checkout, using GitPython."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from policyhub.domain.errors import (
    FatalReconciliationError,
    InvalidBaselineError,
    InvalidHeadError,
)
from policyhub.domain.model import DEFAULT_COLLECTION_ROOT
from policyhub.domain.ports.source import ChangeSet
from policyhub.domain.reconciliation.detect import collect_changes

if TYPE_CHECKING:
    from policyhub.domain.model import ArtifactId

log = getLogger(__name__)


class SourceRepositoryError(FatalReconciliationError):
    """Raised when the workspace is not a readable git repository."""


class GitChangeDetector:
    """Implements the ``ChangeDetector`` port with ``git diff --name-only``.

    Artifacts are validated and published from the working tree, so by default
    ``head`` must be the checked-out commit. Read-only planning can lift that
    with ``require_checkout=False``.
    """

    def __init__(
        self,
        repo_path: Path | str,
        *,
        collection_root: str = DEFAULT_COLLECTION_ROOT,
        require_checkout: bool = True,
    ) -> None:
        self.repo_path = Path(repo_path)
        self.collection_root = collection_root
        self.require_checkout = require_checkout

    def __call__(
        self,
        *,
        baseline: str | None,
        head: str,
        recorded_baseline: str | None = None,
    ) -> ChangeSet:
        with self._open() as repo:
            head_sha = _resolve(repo, head)
            if head_sha is None:
                raise InvalidHeadError(head, "commit does not exist in repository")

            baseline_sha = None if baseline is None else _ancestor(repo, baseline, head_sha)
            if recorded_baseline is not None:
                _ancestor(repo, recorded_baseline, head_sha, recorded=True)
            if self.require_checkout:
                _require_checked_out(repo, head, head_sha)

            if baseline_sha is None:
                log.info("No baseline recorded; all policies at %s count as changed", head_sha[:12])
                paths = _split_z(repo.git.ls_tree("-r", "--name-only", "-z", head_sha))
            elif baseline_sha == head_sha:
                log.info("No changes detected since baseline")
                return ChangeSet(baseline=baseline_sha, head=head_sha)
            else:
                paths = _split_z(
                    repo.git.diff("--name-only", "--no-renames", "-z", baseline_sha, head_sha)
                )

            def latest_commit(artifact: ArtifactId) -> str | None:
                output = repo.git.log("-1", "--format=%H", head_sha, "--", artifact.path)
                return output.strip() or None

            changes = collect_changes(
                paths,
                collection_root=self.collection_root,
                latest_commit=latest_commit,
            )
            if baseline_sha is not None:
                changes = tuple(
                    change for change in changes if _present_at(repo, head_sha, change.id)
                )

        log.info("Detected %s changed policy version(s) in %s path(s)", len(changes), len(paths))
        return ChangeSet(baseline=baseline_sha, head=head_sha, changes=changes)

    def _open(self) -> Repo:
        try:
            return Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise SourceRepositoryError(f"Not a git repository: {self.repo_path}") from exc


def _resolve(repo: Repo, ref: str) -> str | None:
    try:
        output = repo.git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}")
    except GitCommandError:
        return None
    return output.strip() or None


def _ancestor(repo: Repo, ref: str, head_sha: str, *, recorded: bool = False) -> str:
    label = "recorded baseline " if recorded else ""
    sha = _resolve(repo, ref)
    if sha is None:
        raise InvalidBaselineError(ref, f"{label}commit does not exist in repository")
    if not repo.is_ancestor(sha, head_sha):
        raise InvalidBaselineError(ref, f"{label}not an ancestor of {head_sha}")
    return sha


def _require_checked_out(repo: Repo, head: str, head_sha: str) -> None:
    try:
        checked_out = repo.head.commit.hexsha
    except ValueError as exc:
        raise InvalidHeadError(head, "repository has no checked-out commit") from exc
    if checked_out != head_sha:
        raise InvalidHeadError(head, f"working tree is at {checked_out}, not {head_sha}")


def _present_at(repo: Repo, head_sha: str, artifact: ArtifactId) -> bool:
    if repo.git.ls_tree("--name-only", head_sha, "--", artifact.path).strip():
        return True
    log.warning("Ignoring %s: directory was removed at %s", artifact, head_sha[:12])
    return False


def _split_z(output: str) -> list[str]:
    return [path for path in output.split("\0") if path]
