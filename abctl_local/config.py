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

"""Configuration classes and install options."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from abctl_local.constants import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    DEFAULT_DATA_DIR,
    DEFAULT_DOCKER_SERVER,
    DEFAULT_NODE_IMAGE,
    ENV_PREFIX,
    ENV_REGISTRY_PREFIX,
    HELM_CHART_AIRBYTE,
    HELM_CHART_NGINX,
    HELM_RELEASE_AIRBYTE,
    HELM_RELEASE_NGINX,
    HELM_REPO_AIRBYTE,
    HELM_REPO_AIRBYTE_URL,
    HELM_REPO_NGINX,
    HELM_REPO_NGINX_URL,
    NS_AIRBYTE,
    NS_INGRESS_NGINX,
    PROVIDER_KIND,
)


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """Local cluster configuration, auto-loaded from ABCTL_* env vars.

    Attributes:
        cluster_name: Name of the kind cluster.
        provider: Local cluster provider backing the installation.
        node_image: kind node image used when creating the cluster.
        command_timeout: Deadline in seconds for every external command.
        data_dir: Host directory persisted into the cluster node.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    cluster_name: str = DEFAULT_CLUSTER_NAME
    provider: Literal["kind", "test"] = PROVIDER_KIND
    node_image: str = DEFAULT_NODE_IMAGE
    command_timeout: int = Field(default=DEFAULT_COMMAND_TIMEOUT_SECONDS, ge=1, le=3600)
    data_dir: Path = DEFAULT_DATA_DIR


class ChartConfig(BaseSettings):
    """Helm chart coordinates, auto-loaded from ABCTL_CHART_* env vars.

    Attributes:
        repo_name: Name of the Airbyte Helm repository.
        repo_url: URL of the Airbyte Helm repository.
        chart: Airbyte chart reference.
        release: Helm release name for Airbyte.
        namespace: Kubernetes namespace Airbyte is installed into.
        nginx_repo_name: Name of the ingress-nginx Helm repository.
        nginx_repo_url: URL of the ingress-nginx Helm repository.
        nginx_chart: ingress-nginx chart reference.
        nginx_release: Helm release name for ingress-nginx.
        nginx_namespace: Namespace ingress-nginx is installed into.
    """

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}CHART_", extra="ignore")

    repo_name: str = HELM_REPO_AIRBYTE
    repo_url: str = HELM_REPO_AIRBYTE_URL
    chart: str = HELM_CHART_AIRBYTE
    release: str = HELM_RELEASE_AIRBYTE
    namespace: str = NS_AIRBYTE
    nginx_repo_name: str = HELM_REPO_NGINX
    nginx_repo_url: str = HELM_REPO_NGINX_URL
    nginx_chart: str = HELM_CHART_NGINX
    nginx_release: str = HELM_RELEASE_NGINX
    nginx_namespace: str = NS_INGRESS_NGINX


# ============================================================================
# Registry credentials and environment overrides
# ============================================================================

@dataclass(frozen=True)
class EnvOverrideRule:
    """Maps an environment variable onto a configuration field.

    Attributes:
        env_var: Environment variable consulted for the override.
        field: Name of the field it replaces when set and non-empty.
    """

    env_var: str
    field: str


class RegistryCredentials(BaseSettings):
    """Container registry credentials for pulling chart images.

    Values passed at construction are the flag values. A non-empty
    ABCTL_LOCAL_INSTALL_DOCKER_* variable replaces the matching field; an
    unset or empty variable leaves it untouched. Overrides are resolved once,
    at construction, and the model is frozen afterwards.

    Attributes:
        server: Registry server URL.
        username: Registry username.
        password: Registry password.
        email: Registry account email.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_REGISTRY_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    server: str = DEFAULT_DOCKER_SERVER
    username: str = ""
    password: str = Field(default="", repr=False)
    email: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats flags.
        return env_settings, init_settings

    @model_validator(mode="after")
    def _check_group(self) -> RegistryCredentials:
        provided = [name for name in ("username", "password", "email") if getattr(self, name)]
        if provided and len(provided) != 3:
            missing = sorted({"username", "password", "email"} - set(provided))
            raise ValueError(
                "docker username, password and email must be specified together "
                f"(missing: {', '.join(missing)})"
            )
        return self

    @property
    def configured(self) -> bool:
        """Whether a full set of credentials is present."""
        return bool(self.username)

    @classmethod
    def override_rules(cls) -> list[EnvOverrideRule]:
        """Return the environment override rule for every field."""
        return [
            EnvOverrideRule(env_var=f"{ENV_REGISTRY_PREFIX}{name.upper()}", field=name)
            for name in cls.model_fields
        ]


# ============================================================================
# Install options
# ============================================================================

@dataclass(frozen=True)
class InstallOptions:
    """Final options handed to the chart installer.

    Attributes:
        chart_version: Chart version, or empty string for the latest.
        values_file: Path to a Helm values file, or empty string.
        secret_files: Kubernetes secret manifests applied before install.
        migrate: Whether to migrate docker compose data first.
        host: Ingress host.
        port: Effective ingress port.
        registry: Registry credentials after environment overrides.
        no_browser: Skip launching the browser after install.
        low_resource_mode: Run with reduced resource requests.
        insecure_cookies: Allow auth cookies over plain http.
    """

    chart_version: str
    values_file: str
    secret_files: tuple[str, ...]
    migrate: bool
    host: str
    port: int
    registry: RegistryCredentials
    no_browser: bool = False
    low_resource_mode: bool = False
    insecure_cookies: bool = False

    @property
    def url(self) -> str:
        """URL the installed platform is reachable on."""
        return f"http://{self.host}:{self.port}"
