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

"""kind cluster lookup and creation."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

import yaml

from abctl_local import logger
from abctl_local.config import ClusterConfig
from abctl_local.constants import (
    CONTROL_PLANE_SUFFIX,
    DEFAULT_CLUSTER_NAME,
    INGRESS_CONTAINER_PORT,
    LABEL_INGRESS_READY,
    NODE_DATA_PATH,
    TEST_CLUSTER_NAME,
)
from abctl_local.errors import IndeterminateStateError, ResourceCreationError
from abctl_local.mounts import VolumeMount
from abctl_local.utils import run_command


class ProviderName(str, Enum):
    """Local cluster backends."""

    KIND = "kind"
    TEST = "test"


@dataclass(frozen=True)
class Provider:
    """The local cluster backend selected for this installation.

    Attributes:
        name: Provider backend.
        cluster_name: Name of the cluster managed through this provider.
    """

    name: ProviderName
    cluster_name: str

    @property
    def supports_port_introspection(self) -> bool:
        """Whether the control-plane ingress port can be read from Docker."""
        return self.name is ProviderName.KIND

    @property
    def control_plane_container(self) -> str:
        """Docker container name of the control-plane node."""
        return f"{self.cluster_name}{CONTROL_PLANE_SUFFIX}"

    @property
    def kube_context(self) -> str:
        """kubeconfig context kind writes for the cluster."""
        return f"kind-{self.cluster_name}"


def provider_for(cluster_cfg: ClusterConfig) -> Provider:
    """Resolve the provider from configuration.

    The test provider uses its own cluster name unless one is set
    explicitly, so it never touches a real installation.
    """
    name = ProviderName(cluster_cfg.provider)
    cluster_name = cluster_cfg.cluster_name
    if name is ProviderName.TEST and cluster_name == DEFAULT_CLUSTER_NAME:
        cluster_name = TEST_CLUSTER_NAME
    return Provider(name=name, cluster_name=cluster_name)


@dataclass(frozen=True)
class ClusterHandle:
    """A named cluster as observed at lookup time.

    Attributes:
        name: Cluster name.
        exists: Whether the cluster existed when looked up.
        provider: Provider the cluster belongs to.
    """

    name: str
    exists: bool
    provider: Provider


class ClusterManager(Protocol):
    """Cluster-management collaborator."""

    def lookup(self, provider: Provider) -> ClusterHandle: ...

    def create(self, provider: Provider, port: int, mounts: list[VolumeMount]) -> None: ...


# ============================================================================
# kind
# ============================================================================

def render_kind_config(port: int, mounts: list[VolumeMount], data_dir: Path) -> str:
    """Build the kind cluster configuration document.

    Args:
        port: Host port mapped to the ingress controller's port 80.
        mounts: Extra volume mounts requested by the user.
        data_dir: Host directory backing the local-path provisioner.

    Returns:
        The kind configuration as YAML.
    """
    container_port = int(INGRESS_CONTAINER_PORT.split("/")[0])
    node = {
        "role": "control-plane",
        "kubeadmConfigPatches": [
            yaml.safe_dump({
                "kind": "InitConfiguration",
                "nodeRegistration": {"kubeletExtraArgs": {"node-labels": LABEL_INGRESS_READY}},
            }),
        ],
        "extraPortMappings": [
            {"containerPort": container_port, "hostPort": port, "protocol": "TCP"},
        ],
        "extraMounts": [
            {"hostPath": str(data_dir), "containerPath": NODE_DATA_PATH},
            *(mount.as_kind_mount() for mount in mounts),
        ],
    }
    document = {
        "kind": "Cluster",
        "apiVersion": "kind.x-k8s.io/v1alpha4",
        "nodes": [node],
    }
    return yaml.safe_dump(document, sort_keys=False)


class KindClusterManager:
    """Cluster manager backed by the ``kind`` CLI."""

    def __init__(self, cluster_cfg: ClusterConfig) -> None:
        self._cfg = cluster_cfg

    def lookup(self, provider: Provider) -> ClusterHandle:
        """Look up whether the provider's cluster exists.

        Raises:
            IndeterminateStateError: If kind cannot be queried.
        """
        output = run_command(
            "kind", "get", "clusters",
            timeout=self._cfg.command_timeout,
            error=IndeterminateStateError,
        )
        names = {line.strip() for line in output.splitlines() if line.strip()}
        logger.debug("kind clusters: %s", sorted(names))
        return ClusterHandle(
            name=provider.cluster_name,
            exists=provider.cluster_name in names,
            provider=provider,
        )

    def create(self, provider: Provider, port: int, mounts: list[VolumeMount]) -> None:
        """Create the cluster once. Failures are not retried.

        Args:
            provider: Provider whose cluster is created.
            port: Host ingress port.
            mounts: Extra volume mounts for the control-plane node.

        Raises:
            ResourceCreationError: If a mount path is empty or kind fails.
        """
        for mount in mounts:
            if not mount.host_path or not mount.container_path:
                raise ResourceCreationError(
                    f"volume {mount.host_path}:{mount.container_path} must have "
                    "both a host and a guest path"
                )

        try:
            self._cfg.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise ResourceCreationError(f"unable to create data directory {self._cfg.data_dir}: {err}") from err

        config = render_kind_config(port, mounts, self._cfg.data_dir)
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", prefix="kind-") as config_file:
            config_file.write(config)
            config_file.flush()
            run_command(
                "kind", "create", "cluster",
                "--name", provider.cluster_name,
                "--image", self._cfg.node_image,
                "--config", config_file.name,
                timeout=self._cfg.command_timeout,
                error=ResourceCreationError,
            )
