# /*
# Copyright 2026 The abctl Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Assembly of the final install options."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pydantic

from abctl_local import console
from abctl_local.config import InstallOptions, RegistryCredentials
from abctl_local.constants import CHART_VERSION_LATEST
from abctl_local.errors import ValidationError


@dataclass(frozen=True)
class DeprecatedField:
    """A legacy flag kept only so its use can be reported.

    Attributes:
        flag: CLI flag name (e.g. ``--username``).
        env_var: Environment variable the flag used to mirror.
        value: Value supplied on the command line, or None.
    """

    flag: str
    env_var: str
    value: str | None = None

    @property
    def used(self) -> bool:
        return self.value is not None

    @property
    def warning(self) -> str:
        return (
            f"The {self.flag} flag (and {self.env_var}) is deprecated and ignored. "
            "Credentials are generated during installation and can be retrieved "
            "with 'abctl local credentials'."
        )


def normalize_chart_version(version: str) -> str:
    """Map the "latest" sentinel to the empty string the installer expects."""
    if version == CHART_VERSION_LATEST:
        return ""
    return version


def warn_deprecated(fields: Sequence[DeprecatedField]) -> list[str]:
    """Print a warning for every deprecated field that was used.

    Returns:
        The warnings printed.
    """
    warnings = [field.warning for field in fields if field.used]
    for warning in warnings:
        console.print(f"[yellow]\u26a0\ufe0f  {warning}[/yellow]")
    return warnings


def build_install_options(
    *,
    chart_version: str,
    values_file: str,
    secret_files: Sequence[str],
    migrate: bool,
    host: str,
    port: int,
    docker_server: str,
    docker_username: str = "",
    docker_password: str = "",
    docker_email: str = "",
    no_browser: bool = False,
    low_resource_mode: bool = False,
    insecure_cookies: bool = False,
    deprecated: Sequence[DeprecatedField] = (),
) -> InstallOptions:
    """Merge flag values, the effective port and env overrides.

    Registry environment overrides are resolved here, once, by
    :class:`RegistryCredentials`.

    Args:
        chart_version: Chart version flag; "latest" selects the newest chart.
        values_file: Helm values file path, or empty string.
        secret_files: Secret manifest paths.
        migrate: Migrate docker compose data.
        host: Ingress host.
        port: Effective ingress port from provisioning.
        docker_server: Registry server flag.
        docker_username: Registry username flag.
        docker_password: Registry password flag.
        docker_email: Registry email flag.
        no_browser: Skip opening the browser.
        low_resource_mode: Reduce resource requests.
        insecure_cookies: Allow cookies over http.
        deprecated: Legacy fields to report if used.

    Returns:
        Immutable install options.

    Raises:
        ValidationError: If the registry credentials are incomplete.
    """
    warn_deprecated(deprecated)

    try:
        registry = RegistryCredentials(
            server=docker_server,
            username=docker_username,
            password=docker_password,
            email=docker_email,
        )
    except pydantic.ValidationError as err:
        messages = "; ".join(error["msg"].removeprefix("Value error, ") for error in err.errors())
        raise ValidationError(messages) from err

    return InstallOptions(
        chart_version=normalize_chart_version(chart_version),
        values_file=values_file,
        secret_files=tuple(secret_files),
        migrate=migrate,
        host=host,
        port=port,
        registry=registry,
        no_browser=no_browser,
        low_resource_mode=low_resource_mode,
        insecure_cookies=insecure_cookies,
    )
