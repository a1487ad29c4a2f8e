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

"""Local subcommands (install)."""

from __future__ import annotations

import typer

from abctl_local.constants import (
    CHART_VERSION_LATEST,
    DEFAULT_DOCKER_SERVER,
    DEFAULT_INGRESS_HOST,
    DEFAULT_INGRESS_PORT,
    ENV_BASIC_AUTH_PASS,
    ENV_BASIC_AUTH_USER,
    ENV_DOCKER_EMAIL,
    ENV_DOCKER_PASS,
    ENV_DOCKER_SERVER,
    ENV_DOCKER_USER,
)
from abctl_local.options import DeprecatedField
from abctl_local.orchestrator import InstallRequest, run_install
from abctl_local.utils import split_csv_flags

app = typer.Typer(help="Manage the local Airbyte installation.", no_args_is_help=True)


@app.command()
def install(
    port: int = typer.Option(DEFAULT_INGRESS_PORT, "--port", help="Ingress http port"),
    host: str = typer.Option(DEFAULT_INGRESS_HOST, "--host", help="Ingress http host"),
    chart_version: str = typer.Option(
        CHART_VERSION_LATEST, "--chart-version", help="Airbyte helm chart version to install"),
    values: str = typer.Option("", "--values", help="Airbyte helm chart values file to load"),
    secret: list[str] | None = typer.Option(
        None, "--secret", help="Airbyte helm chart secret file (repeatable)"),
    volume: list[str] | None = typer.Option(
        None, "--volume", help="Additional volume mounts (format: <HOST_PATH>:<GUEST_PATH>)"),
    migrate: bool = typer.Option(
        False, "--migrate", help="Migrate data from docker compose installation"),
    docker_server: str = typer.Option(
        DEFAULT_DOCKER_SERVER, "--docker-server",
        help=f"Docker registry, can also be specified via {ENV_DOCKER_SERVER}"),
    docker_username: str = typer.Option(
        "", "--docker-username", help=f"Docker username, can also be specified via {ENV_DOCKER_USER}"),
    docker_password: str = typer.Option(
        "", "--docker-password", help=f"Docker password, can also be specified via {ENV_DOCKER_PASS}"),
    docker_email: str = typer.Option(
        "", "--docker-email", help=f"Docker email, can also be specified via {ENV_DOCKER_EMAIL}"),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Disable launching the web-browser post install"),
    low_resource_mode: bool = typer.Option(
        False, "--low-resource-mode", help="Run Airbyte in low resource mode"),
    insecure_cookies: bool = typer.Option(
        False, "--insecure-cookies", help="Allow insecure cookies to be served over http"),
    # Deprecated, kept so their use can be reported.
    username: str | None = typer.Option(None, "--username", "-u", hidden=True),
    password: str | None = typer.Option(None, "--password", "-p", hidden=True),
) -> None:
    """Install Airbyte locally."""
    request = InstallRequest(
        port=port,
        host=host,
        chart_version=chart_version,
        values_file=values,
        secret_files=tuple(split_csv_flags(secret)),
        migrate=migrate,
        volumes=tuple(split_csv_flags(volume, keep_empty=True)),
        docker_server=docker_server,
        docker_username=docker_username,
        docker_password=docker_password,
        docker_email=docker_email,
        no_browser=no_browser,
        low_resource_mode=low_resource_mode,
        insecure_cookies=insecure_cookies,
        deprecated=(
            DeprecatedField("--username", ENV_BASIC_AUTH_USER, username),
            DeprecatedField("--password", ENV_BASIC_AUTH_PASS, password),
        ),
    )
    run_install(request)
