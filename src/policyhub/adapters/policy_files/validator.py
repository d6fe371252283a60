"""Default structural validator for policy version directories.

Requirements come from the ``validation`` section of the hub config. With
``strictValidation`` disabled every error is reported as a warning instead, so
the artifact is still published.
"""

from __future__ import annotations

import json
import re
from logging import getLogger
from typing import TYPE_CHECKING

import yaml

from policyhub.config.hub import ValidationSettings
from policyhub.domain.ports.validation import ValidationReport

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

METADATA_FILE = "metadata.json"
DEFINITION_FILE = "policy-definition.yaml"
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_METADATA_FILE_REFERENCES = ("logoUrl", "bannerUrl")


def _is_external(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))


class PolicyDirectoryValidator:
    """Implements the ``Validator`` port."""

    def __init__(self, settings: ValidationSettings | None = None) -> None:
        self.settings = settings or ValidationSettings()

    def __call__(self, artifact_dir: Path) -> ValidationReport:
        errors: list[str] = []
        warnings: list[str] = []
        name, version = artifact_dir.parent.name, artifact_dir.name

        if not artifact_dir.is_dir():
            errors.append(f"Policy directory does not exist: {artifact_dir}")
            return self._report(errors, warnings)

        self._check_name(name, errors)
        self._check_version(version, errors)
        self._check_structure(artifact_dir, errors, warnings)
        metadata = self._check_metadata(artifact_dir, name, version, errors)
        if metadata is not None:
            self._check_metadata_references(artifact_dir, metadata, errors)
        self._check_source(artifact_dir, errors)
        self._check_definition(artifact_dir, errors)
        return self._report(errors, warnings)

    def _report(self, errors: list[str], warnings: list[str]) -> ValidationReport:
        if errors and not self.settings.strict_validation:
            log.debug("Permissive validation: demoting %s error(s) to warnings", len(errors))
            return ValidationReport(warnings=(*warnings, *errors))
        return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))

    def _check_name(self, name: str, errors: list[str]) -> None:
        max_length = self.settings.max_policy_name_length
        if max_length is not None and len(name) > max_length:
            errors.append(f"Policy name too long: {len(name)} characters (max: {max_length})")
        if _NAME_PATTERN.match(name) is None:
            errors.append(
                f"Invalid policy name format: {name} "
                "(only alphanumeric, hyphens, underscores allowed)"
            )

    def _check_version(self, version: str, errors: list[str]) -> None:
        try:
            pattern = re.compile(self.settings.version_regex)
        except re.error as exc:
            errors.append(f"Invalid versionRegex in configuration: {exc}")
            return
        if pattern.search(version) is None:
            errors.append(
                f"Invalid version format: {version} "
                f"(expected pattern: {self.settings.version_regex})"
            )

    def _check_structure(self, artifact_dir: Path, errors: list[str], warnings: list[str]) -> None:
        for file_name in self.settings.required_files:
            if not (artifact_dir / file_name).is_file():
                errors.append(f"Missing required file: {file_name}")
        for dir_name in self.settings.required_dirs:
            if not (artifact_dir / dir_name).is_dir():
                errors.append(f"Missing required directory: {dir_name}")
        docs_dir = artifact_dir / "docs"
        if docs_dir.is_dir():
            for doc in self.settings.required_docs_files:
                if not (docs_dir / doc).is_file():
                    errors.append(f"Missing required documentation file: docs/{doc}")
        for dir_name in self.settings.optional_dirs:
            if not (artifact_dir / dir_name).is_dir():
                warnings.append(f"Optional directory missing: {dir_name}")

    def _check_metadata(
        self, artifact_dir: Path, name: str, version: str, errors: list[str]
    ) -> dict[str, object] | None:
        path = artifact_dir / METADATA_FILE
        if not path.is_file():
            return None
        try:
            metadata = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            errors.append(f"Invalid JSON in {METADATA_FILE}: {exc}")
            return None
        if not isinstance(metadata, dict):
            errors.append(f"{METADATA_FILE} must contain a JSON object")
            return None

        for field_name in self.settings.required_metadata_fields:
            value = metadata.get(field_name)
            if value is None or value == "":
                errors.append(f"{METADATA_FILE} missing required field: {field_name}")

        declared_name = metadata.get("name")
        if declared_name and declared_name != name:
            errors.append(
                f'{METADATA_FILE} name "{declared_name}" does not match folder name "{name}"'
            )
        declared_version = metadata.get("version")
        if declared_version and declared_version != version:
            errors.append(
                f'{METADATA_FILE} version "{declared_version}" does not match '
                f'folder version "{version}"'
            )
        return metadata

    def _check_metadata_references(
        self, artifact_dir: Path, metadata: dict[str, object], errors: list[str]
    ) -> None:
        references: list[tuple[str, str]] = []
        for key in _METADATA_FILE_REFERENCES:
            value = metadata.get(key)
            if isinstance(value, str) and value:
                references.append((key, value))
        documentation = metadata.get("documentation")
        if isinstance(documentation, dict):
            for key, value in documentation.items():
                if isinstance(value, str) and value:
                    references.append((f"documentation.{key}", value))

        for key, reference in references:
            if _is_external(reference):
                continue
            if not (artifact_dir / reference).is_file():
                errors.append(
                    f"File referenced in {METADATA_FILE} does not exist: {reference} (key: {key})"
                )

    def _check_source(self, artifact_dir: Path, errors: list[str]) -> None:
        src_dir = artifact_dir / "src"
        if not src_dir.is_dir():
            return
        extensions = tuple(self.settings.allowed_file_extensions)
        try:
            has_source = any(
                path.is_file() and path.name.endswith(extensions) for path in src_dir.rglob("*")
            )
        except OSError as exc:
            errors.append(f"Failed to read src/ directory: {exc}")
            return
        if not has_source:
            errors.append("No source files found in src/ directory")

    def _check_definition(self, artifact_dir: Path, errors: list[str]) -> None:
        path = artifact_dir / DEFINITION_FILE
        if not path.is_file():
            return
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            errors.append(f"Failed to read {DEFINITION_FILE}: {exc}")
            return
        if not content.strip():
            errors.append(f"{DEFINITION_FILE} is empty")
            return
        try:
            yaml.safe_load(content)
        except yaml.YAMLError as exc:
            errors.append(f"Invalid YAML in {DEFINITION_FILE}: {exc}")
