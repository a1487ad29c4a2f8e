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

"""Airbyte chart installation via Helm and kubectl."""

from __future__ import annotations

import webbrowser
from pathlib import Path
from typing import Protocol

import yaml
from rich.panel import Panel

from abctl_local import console, logger
from abctl_local.cluster import Provider
from abctl_local.config import ChartConfig, ClusterConfig, InstallOptions
from abctl_local.constants import (
    COMPOSE_DB_VOLUME,
    HELM_KEY_AIRBYTE_URL,
    HELM_KEY_AUTH_ENABLED,
    HELM_KEY_AUTH_SECURITY_COOKIE_SECURE,
    HELM_KEY_IMAGE_PULL_SECRET,
    HELM_KEY_JOBS_RESOURCES_CPU,
    HELM_KEY_JOBS_RESOURCES_MEMORY,
    IMAGE_PULL_SECRET_NAME,
    MIGRATE_DEST_DIR,
)
from abctl_local.errors import InstallError
from abctl_local.runtime import DockerRuntime
from abctl_local.utils import run_command


class Installer(Protocol):
    """Chart installer collaborator."""

    def install(self, options: InstallOptions) -> None: ...


def collect_airbyte_helm_overrides(options: InstallOptions) -> list[str]:
    """Build helm override strings from install options.

    Args:
        options: Final install options.

    Returns:
        List of ``key=value`` strings for ``helm --set`` arguments.
    """
    overrides: list[tuple[bool, str, str]] = [
        (True, HELM_KEY_AUTH_ENABLED, "true"),
        (True, HELM_KEY_AIRBYTE_URL, options.url),
        (options.registry.configured, HELM_KEY_IMAGE_PULL_SECRET, IMAGE_PULL_SECRET_NAME),
        (options.low_resource_mode, HELM_KEY_JOBS_RESOURCES_CPU, "0"),
        (options.low_resource_mode, HELM_KEY_JOBS_RESOURCES_MEMORY, "0"),
        (options.insecure_cookies, HELM_KEY_AUTH_SECURITY_COOKIE_SECURE, "false"),
    ]
    return [f"{key}={value}" for enabled, key, value in overrides if enabled]


def ingress_manifest(options: InstallOptions, chart_cfg: ChartConfig) -> dict:
    """Build the Ingress routing the host to the Airbyte web app."""
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {"name": chart_cfg.release, "namespace": chart_cfg.namespace},
        "spec": {
            "ingressClassName": "nginx",
            "rules": [{
                "host": options.host,
                "http": {"paths": [{
                    "path": "/",
                    "pathType": "Prefix",
                    "backend": {"service": {
                        "name": f"{chart_cfg.release}-airbyte-webapp-svc",
                        "port": {"number": 80},
                    }},
                }]},
            }],
        },
    }


class HelmInstaller:
    """Installs Airbyte and its ingress controller into the local cluster.

    Args:
        provider: Provider whose cluster is targeted.
        cluster_cfg: Cluster configuration (timeouts, data directory).
        chart_cfg: Helm chart coordinates.
        runtime: Docker runtime, used only for data migration.
    """

    def __init__(
        self,
        provider: Provider,
        cluster_cfg: ClusterConfig,
        chart_cfg: ChartConfig,
        runtime: DockerRuntime,
    ) -> None:
        self._provider = provider
        self._cluster_cfg = cluster_cfg
        self._chart_cfg = chart_cfg
        self._runtime = runtime

    def install(self, options: InstallOptions) -> None:
        """Install Airbyte.

        Raises:
            InstallError: If any installation step fails.
        """
        self._check_files(options)
        if options.migrate:
            self._migrate()

        console.print(Panel.fit("Installing Airbyte", style="bold blue"))
        self._add_repos()
        self._ensure_namespace(self._chart_cfg.namespace)
        if options.registry.configured:
            self._create_pull_secret(options)
        for secret_file in options.secret_files:
            self._kubectl("apply", "-n", self._chart_cfg.namespace, "-f", secret_file)
            console.print(f"[green]  \u2713 Applied secret file {secret_file}[/green]")

        self._install_nginx()
        self._install_airbyte(options)
        self._kubectl("apply", "-f", "-", _in=yaml.safe_dump(ingress_manifest(options, self._chart_cfg)))
        console.print(f"[green]\u2705 Ingress configured for {options.url}[/green]")

        if not options.no_browser:
            webbrowser.open(options.url)

    @staticmethod
    def _check_files(options: InstallOptions) -> None:
        paths = ([options.values_file] if options.values_file else []) + list(options.secret_files)
        for path in paths:
            if not Path(path).is_file():
                raise InstallError(f"file {path} does not exist")

    def _migrate(self) -> None:
        console.print(Panel.fit("Migrating docker compose data", style="bold blue"))
        self._runtime.copy_volume(COMPOSE_DB_VOLUME, self._cluster_cfg.data_dir / MIGRATE_DEST_DIR)
        console.print("[green]\u2705 Docker compose data migrated[/green]")

    def _add_repos(self) -> None:
        for name, url in (
            (self._chart_cfg.repo_name, self._chart_cfg.repo_url),
            (self._chart_cfg.nginx_repo_name, self._chart_cfg.nginx_repo_url),
        ):
            self._helm("repo", "add", name, url, "--force-update")
        self._helm("repo", "update")

    def _ensure_namespace(self, namespace: str) -> None:
        try:
            self._kubectl("create", "namespace", namespace)
        except InstallError as err:
            if "AlreadyExists" not in str(err):
                raise
            logger.debug("namespace %s already exists", namespace)

    def _create_pull_secret(self, options: InstallOptions) -> None:
        registry = options.registry
        manifest = self._kubectl(
            "create", "secret", "docker-registry", IMAGE_PULL_SECRET_NAME,
            "-n", self._chart_cfg.namespace,
            "--docker-server", registry.server,
            "--docker-username", registry.username,
            "--docker-password", registry.password,
            "--docker-email", registry.email,
            "--dry-run=client", "-o", "yaml",
        )
        self._kubectl("apply", "-f", "-", _in=manifest)
        console.print(f"[green]  \u2713 Registry credentials stored in secret '{IMAGE_PULL_SECRET_NAME}'[/green]")

    def _install_nginx(self) -> None:
        console.print("[yellow]\u2139\ufe0f  Installing ingress-nginx...[/yellow]")
        self._helm(
            "upgrade", "--install", self._chart_cfg.nginx_release, self._chart_cfg.nginx_chart,
            "-n", self._chart_cfg.nginx_namespace,
            "--create-namespace",
            "--set", "controller.hostPort.enabled=true",
            "--set", "controller.service.type=NodePort",
            "--set-string", "controller.nodeSelector.ingress-ready=true",
            "--wait",
            "--timeout", f"{self._cluster_cfg.command_timeout}s",
        )
        console.print("[green]\u2705 ingress-nginx installed[/green]")

    def _install_airbyte(self, options: InstallOptions) -> None:
        label = options.chart_version or "latest"
        console.print(f"[yellow]\u2139\ufe0f  Installing Airbyte chart ({label})...[/yellow]")
        helm_args = [
            "upgrade", "--install", self._chart_cfg.release, self._chart_cfg.chart,
            "-n", self._chart_cfg.namespace,
            "--wait",
            "--timeout", f"{self._cluster_cfg.command_timeout}s",
        ]
        if options.chart_version:
            helm_args += ["--version", options.chart_version]
        if options.values_file:
            helm_args += ["-f", options.values_file]
        for override in collect_airbyte_helm_overrides(options):
            helm_args += ["--set", override]
        self._helm(*helm_args)
        console.print("[green]\u2705 Airbyte chart installed[/green]")

    def _helm(self, *args: str, **kwargs) -> str:
        return run_command(
            "helm", *args, "--kube-context", self._provider.kube_context,
            timeout=self._cluster_cfg.command_timeout,
            error=InstallError,
            **kwargs,
        )

    def _kubectl(self, *args: str, **kwargs) -> str:
        return run_command(
            "kubectl", *args, "--context", self._provider.kube_context,
            timeout=self._cluster_cfg.command_timeout,
            error=InstallError,
            **kwargs,
        )
