from __future__ import annotations

import json
from typing import TYPE_CHECKING

from policyhub.adapters.policy_files import PolicyDirectoryValidator
from policyhub.config import ValidationSettings

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def test_complete_policy_is_valid(write_policy: Callable[..., Path]) -> None:
    report = PolicyDirectoryValidator()(write_policy())

    assert report.valid
    assert report.errors == ()


def test_missing_directory_is_reported(tmp_path: Path) -> None:
    report = PolicyDirectoryValidator()(tmp_path / "policies" / "ghost" / "v1.0.0")

    assert not report.valid
    assert "does not exist" in report.errors[0]


def test_missing_files_and_docs_are_errors(write_policy: Callable[..., Path]) -> None:
    policy = write_policy()
    (policy / "policy-definition.yaml").unlink()
    (policy / "docs" / "examples.md").unlink()

    report = PolicyDirectoryValidator()(policy)

    assert "Missing required file: policy-definition.yaml" in report.errors
    assert "Missing required documentation file: docs/examples.md" in report.errors


def test_metadata_must_match_folder(write_policy: Callable[..., Path]) -> None:
    policy = write_policy(
        metadata={"name": "other", "version": "v9.9.9", "description": "d", "author": ""}
    )

    errors = PolicyDirectoryValidator()(policy).errors

    assert any('name "other" does not match' in error for error in errors)
    assert any('version "v9.9.9" does not match' in error for error in errors)
    assert "metadata.json missing required field: author" in errors


def test_invalid_metadata_json(write_policy: Callable[..., Path]) -> None:
    policy = write_policy()
    (policy / "metadata.json").write_text("{broken", encoding="utf-8")

    errors = PolicyDirectoryValidator()(policy).errors

    assert any(error.startswith("Invalid JSON in metadata.json") for error in errors)


def test_local_file_references_must_exist(write_policy: Callable[..., Path]) -> None:
    policy = write_policy(
        metadata={
            "name": "rate-limiter",
            "version": "v1.0.0",
            "description": "d",
            "author": "a",
            "logoUrl": "assets/logo.png",
            "bannerUrl": "https://cdn.example.com/banner.png",
            "documentation": {"overview": "docs/overview.md", "faq": "docs/faq.md"},
        }
    )

    errors = PolicyDirectoryValidator()(policy).errors

    assert errors == (
        "File referenced in metadata.json does not exist: assets/logo.png (key: logoUrl)",
        "File referenced in metadata.json does not exist: docs/faq.md (key: documentation.faq)",
    )


def test_source_directory_needs_allowed_extension(write_policy: Callable[..., Path]) -> None:
    policy = write_policy()
    (policy / "src" / "main.go").rename(policy / "src" / "main.rs")

    errors = PolicyDirectoryValidator()(policy).errors

    assert errors == ("No source files found in src/ directory",)


def test_definition_must_be_parseable_yaml(write_policy: Callable[..., Path]) -> None:
    policy = write_policy()
    (policy / "policy-definition.yaml").write_text("key: [unclosed\n", encoding="utf-8")

    errors = PolicyDirectoryValidator()(policy).errors

    assert len(errors) == 1
    assert errors[0].startswith("Invalid YAML in policy-definition.yaml")


def test_name_and_version_rules(write_policy: Callable[..., Path]) -> None:
    policy = write_policy("bad.name", "v1.0.0-beta")
    settings = ValidationSettings(max_policy_name_length=4)

    errors = PolicyDirectoryValidator(settings)(policy).errors

    assert any(error.startswith("Policy name too long") for error in errors)
    assert any(error.startswith("Invalid policy name format") for error in errors)
    assert any(error.startswith("Invalid version format") for error in errors)


def test_optional_directories_only_warn(write_policy: Callable[..., Path]) -> None:
    settings = ValidationSettings.model_validate({"optionalDirs": ["assets"]})

    report = PolicyDirectoryValidator(settings)(write_policy())

    assert report.valid
    assert report.warnings == ("Optional directory missing: assets",)


def test_permissive_mode_demotes_errors(write_policy: Callable[..., Path]) -> None:
    policy = write_policy()
    (policy / "metadata.json").write_text(json.dumps({"name": "rate-limiter"}), encoding="utf-8")
    settings = ValidationSettings(strict_validation=False)

    report = PolicyDirectoryValidator(settings)(policy)

    assert report.valid
    assert "metadata.json missing required field: version" in report.warnings
