"""Unit tests for install option assembly."""

from __future__ import annotations

import dataclasses

import pytest

from abctl_local.errors import ValidationError
from abctl_local.options import DeprecatedField, build_install_options, normalize_chart_version, warn_deprecated


def _build(**overrides):
    kwargs = {
        "chart_version": "latest",
        "values_file": "",
        "secret_files": [],
        "migrate": False,
        "host": "localhost",
        "port": 8000,
        "docker_server": "https://index.docker.io/v1/",
    }
    kwargs.update(overrides)
    return build_install_options(**kwargs)


class TestNormalizeChartVersion:
    """Tests for the "latest" sentinel."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [("latest", ""), ("0.50.0", "0.50.0"), ("", ""), ("Latest", "Latest"), ("1.0.0-latest", "1.0.0-latest")],
    )
    def test_normalization(self, version: str, expected: str) -> None:
        """Should only rewrite the exact sentinel literal."""
        assert normalize_chart_version(version) == expected


class TestBuildInstallOptions:
    """Tests for build_install_options."""

    def test_merges_flags_and_effective_port(self) -> None:
        """Should carry every flag value plus the effective port."""
        options = _build(
            chart_version="0.50.0",
            values_file="values.yaml",
            secret_files=["a.yaml", "b.yaml"],
            migrate=True,
            host="airbyte.local",
            port=8001,
            no_browser=True,
            low_resource_mode=True,
            insecure_cookies=True,
        )

        assert options.chart_version == "0.50.0"
        assert options.values_file == "values.yaml"
        assert options.secret_files == ("a.yaml", "b.yaml")
        assert options.migrate is True
        assert (options.host, options.port) == ("airbyte.local", 8001)
        assert (options.no_browser, options.low_resource_mode, options.insecure_cookies) == (True, True, True)

    def test_latest_becomes_empty(self) -> None:
        """Should hand the installer an empty chart version for latest."""
        assert _build().chart_version == ""

    def test_env_overrides_registry_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should apply registry env overrides on top of flags."""
        monkeypatch.setenv("ABCTL_LOCAL_INSTALL_DOCKER_SERVER", "https://registry.example")
        monkeypatch.setenv("ABCTL_LOCAL_INSTALL_DOCKER_USERNAME", "env-user")
        monkeypatch.setenv("ABCTL_LOCAL_INSTALL_DOCKER_PASSWORD", "env-pass")
        monkeypatch.setenv("ABCTL_LOCAL_INSTALL_DOCKER_EMAIL", "")

        options = _build(docker_username="flag-user", docker_password="flag-pass", docker_email="me@example.com")

        assert options.registry.server == "https://registry.example"
        assert options.registry.username == "env-user"
        assert options.registry.password == "env-pass"
        assert options.registry.email == "me@example.com"

    def test_incomplete_credentials_raise_validation_error(self) -> None:
        """Should reject partial registry credentials."""
        with pytest.raises(ValidationError, match="must be specified together"):
            _build(docker_username="user", docker_password="pass")

    def test_options_are_immutable(self) -> None:
        """Should produce a frozen options object."""
        options = _build()

        with pytest.raises(dataclasses.FrozenInstanceError):
            options.port = 9000


class TestDeprecatedFields:
    """Tests for deprecated flag reporting."""

    def test_unused_fields_are_silent(self) -> None:
        """Should not warn when the legacy flags were not given."""
        fields = [DeprecatedField("--username", "ABCTL_LOCAL_INSTALL_USERNAME")]

        assert warn_deprecated(fields) == []

    def test_used_field_warns(self) -> None:
        """Should warn once per legacy flag that was given."""
        fields = [
            DeprecatedField("--username", "ABCTL_LOCAL_INSTALL_USERNAME", "airbyte"),
            DeprecatedField("--password", "ABCTL_LOCAL_INSTALL_PASSWORD"),
        ]

        warnings = warn_deprecated(fields)

        assert len(warnings) == 1
        assert "--username" in warnings[0]

    def test_deprecated_values_do_not_reach_options(self) -> None:
        """Should not thread legacy values into the install options."""
        options = _build(deprecated=[DeprecatedField("--password", "ABCTL_LOCAL_INSTALL_PASSWORD", "password")])

        assert "password" not in {options.registry.username, options.registry.password}
