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

"""Install workflow: pre-checks, provisioning, option assembly, install."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from rich.panel import Panel

from abctl_local import console
from abctl_local.cluster import ClusterManager, KindClusterManager, Provider, provider_for
from abctl_local.config import ChartConfig, ClusterConfig, InstallOptions
from abctl_local.constants import (
    CHART_VERSION_LATEST,
    DEFAULT_DOCKER_SERVER,
    DEFAULT_INGRESS_HOST,
    DEFAULT_INGRESS_PORT,
    TELEMETRY_OP_INSTALL,
)
from abctl_local.errors import LocalInstallError
from abctl_local.installer import HelmInstaller, Installer
from abctl_local.options import DeprecatedField, build_install_options
from abctl_local.provisioner import ClusterProvisioner
from abctl_local.runtime import DockerRuntime, RuntimeClient, ensure_port_available
from abctl_local.telemetry import LoggingTelemetry, TelemetryClient


@dataclass(frozen=True)
class InstallRequest:
    """Everything the user asked for on the command line.

    Attributes:
        port: Requested ingress port.
        host: Ingress host.
        chart_version: Chart version, or "latest".
        values_file: Helm values file path, or empty string.
        secret_files: Secret manifest paths.
        migrate: Migrate docker compose data.
        volumes: Raw ``<HOST_PATH>:<GUEST_PATH>`` mount specs.
        docker_server: Registry server.
        docker_username: Registry username.
        docker_password: Registry password.
        docker_email: Registry email.
        no_browser: Skip opening the browser.
        low_resource_mode: Reduce resource requests.
        insecure_cookies: Allow cookies over http.
        deprecated: Legacy flags, reported if used.
    """

    port: int = DEFAULT_INGRESS_PORT
    host: str = DEFAULT_INGRESS_HOST
    chart_version: str = CHART_VERSION_LATEST
    values_file: str = ""
    secret_files: tuple[str, ...] = ()
    migrate: bool = False
    volumes: tuple[str, ...] = ()
    docker_server: str = DEFAULT_DOCKER_SERVER
    docker_username: str = ""
    docker_password: str = field(default="", repr=False)
    docker_email: str = ""
    no_browser: bool = False
    low_resource_mode: bool = False
    insecure_cookies: bool = False
    deprecated: tuple[DeprecatedField, ...] = ()


class InstallPipeline:
    """Runs one install as a single telemetry operation.

    Stages run in order and the first failure aborts the rest; its
    exception propagates unchanged.

    Args:
        provider: Provider of the local cluster.
        runtime: Container runtime client.
        clusters: Cluster-management collaborator.
        installer: Chart installer collaborator.
        telemetry: Observability sink.
        port_check: Host port availability check for new clusters.
    """

    def __init__(
        self,
        provider: Provider,
        runtime: RuntimeClient,
        clusters: ClusterManager,
        installer: Installer,
        telemetry: TelemetryClient,
        port_check: Callable[[int], None] = ensure_port_available,
    ) -> None:
        self._provider = provider
        self._runtime = runtime
        self._clusters = clusters
        self._installer = installer
        self._telemetry = telemetry
        self._port_check = port_check

    def run(self, request: InstallRequest) -> InstallOptions:
        """Run the install.

        Returns:
            The options the installer was invoked with.

        Raises:
            LocalInstallError: The stage-tagged error of the failing stage.
        """
        return self._telemetry.wrap(TELEMETRY_OP_INSTALL, lambda: self._run(request))

    def _run(self, request: InstallRequest) -> InstallOptions:
        console.print(Panel.fit("Starting installation", style="bold blue"))
        self._pre_check()

        provisioner = ClusterProvisioner(self._provider, self._clusters, self._runtime, self._port_check)
        outcome = provisioner.provision(request.port, request.volumes)
        outcome.raise_for_abort()

        options = build_install_options(
            chart_version=request.chart_version,
            values_file=request.values_file,
            secret_files=request.secret_files,
            migrate=request.migrate,
            host=request.host,
            port=outcome.port,
            docker_server=request.docker_server,
            docker_username=request.docker_username,
            docker_password=request.docker_password,
            docker_email=request.docker_email,
            no_browser=request.no_browser,
            low_resource_mode=request.low_resource_mode,
            insecure_cookies=request.insecure_cookies,
            deprecated=request.deprecated,
        )

        try:
            self._installer.install(options)
        except LocalInstallError:
            console.print("[red]Unable to install Airbyte locally[/red]")
            raise

        console.print(
            "[green]\u2705 Airbyte installation complete.[/green]\n"
            "  A password may be required to login. The password can by found by running\n"
            "  the command [bright_blue]abctl local credentials[/bright_blue]"
        )
        return options

    def _pre_check(self) -> None:
        console.print("[yellow]\u2139\ufe0f  Checking for Docker installation[/yellow]")
        try:
            version = self._runtime.version()
        except LocalInstallError:
            console.print("[red]Unable to determine if Docker is installed[/red]")
            raise
        self._telemetry.attr("docker_version", version.version)
        self._telemetry.attr("docker_arch", version.arch)
        self._telemetry.attr("docker_platform", version.platform)
        console.print(f"[green]\u2705 Found Docker installation: version {version.version}[/green]")


def run_install(
    request: InstallRequest,
    *,
    cluster_cfg: ClusterConfig | None = None,
    chart_cfg: ChartConfig | None = None,
    telemetry: TelemetryClient | None = None,
) -> InstallOptions:
    """Install Airbyte locally with the default collaborators.

    The Docker client is owned by this call and closed when it returns.

    Args:
        request: User request.
        cluster_cfg: Cluster configuration, or None to load from env.
        chart_cfg: Chart configuration, or None to load from env.
        telemetry: Observability sink, or None for log-based telemetry.

    Returns:
        The options the installer was invoked with.

    Raises:
        LocalInstallError: The stage-tagged error of the failing stage.
    """
    cluster_cfg = cluster_cfg or ClusterConfig()
    chart_cfg = chart_cfg or ChartConfig()
    provider = provider_for(cluster_cfg)

    with DockerRuntime(timeout=cluster_cfg.command_timeout) as runtime:
        pipeline = InstallPipeline(
            provider=provider,
            runtime=runtime,
            clusters=KindClusterManager(cluster_cfg),
            installer=HelmInstaller(provider, cluster_cfg, chart_cfg, runtime),
            telemetry=telemetry or LoggingTelemetry(),
        )
        return pipeline.run(request)
