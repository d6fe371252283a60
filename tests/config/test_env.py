from __future__ import annotations

import pytest

from policyhub.config import (
    ConfigurationError,
    MissingConfigurationError,
    optional_env_var,
    optional_int_env_var,
    require_env_vars,
)


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POLICYHUB_API_URL", "https://hub.example.com")
    monkeypatch.setenv("POLICYHUB_API_KEY", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(("POLICYHUB_API_URL", "POLICYHUB_API_KEY", "POLICYHUB_WORKERS"))

    assert exc.value.names == ("POLICYHUB_API_KEY", "POLICYHUB_WORKERS")
    assert str(exc.value) == "Missing configuration for: POLICYHUB_API_KEY, POLICYHUB_WORKERS"


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POLICYHUB_WORKSPACE", "  ")

    assert optional_env_var("POLICYHUB_WORKSPACE") is None


def test_optional_int_env_var(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POLICYHUB_WORKERS", " 4 ")
    assert optional_int_env_var("POLICYHUB_WORKERS") == 4

    monkeypatch.setenv("POLICYHUB_WORKERS", "four")
    with pytest.raises(ConfigurationError, match="must be an integer"):
        optional_int_env_var("POLICYHUB_WORKERS")
