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

"""Create-or-reuse decision for the local cluster."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from rich.panel import Panel

from abctl_local import console, logger
from abctl_local.cluster import ClusterManager, Provider
from abctl_local.errors import LocalInstallError
from abctl_local.mounts import VolumeMount, parse_volume_mounts
from abctl_local.ports import PortResolution, reconcile_port
from abctl_local.runtime import RuntimeClient, ensure_port_available


class ProvisionState(str, Enum):
    """Terminal states of the provisioner."""

    VALIDATED = "validated"
    CREATED = "created"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ProvisionOutcome:
    """Result of provisioning.

    Attributes:
        state: Terminal state reached.
        port: Effective ingress port (requested port when aborted).
        port_resolution: Port reconciliation result, for reused kind clusters.
        mounts: Volume mounts the cluster was created with.
        reason: Error that aborted provisioning.
    """

    state: ProvisionState
    port: int
    port_resolution: PortResolution | None = None
    mounts: tuple[VolumeMount, ...] = ()
    reason: LocalInstallError | None = None

    @property
    def ok(self) -> bool:
        """Whether a cluster is ready for installation."""
        return self.state is not ProvisionState.ABORTED

    def raise_for_abort(self) -> None:
        """Re-raise the original error of an aborted outcome."""
        if self.reason is not None:
            raise self.reason


class ClusterProvisioner:
    """Reuses an existing cluster or creates a new one.

    Args:
        provider: Provider of the cluster.
        clusters: Cluster-management collaborator.
        runtime: Runtime client, used for port introspection.
        port_check: Host port availability check run before creation.
    """

    def __init__(
        self,
        provider: Provider,
        clusters: ClusterManager,
        runtime: RuntimeClient,
        port_check: Callable[[int], None] = ensure_port_available,
    ) -> None:
        self._provider = provider
        self._clusters = clusters
        self._runtime = runtime
        self._port_check = port_check

    def provision(self, port: int, mount_specs: Sequence[str] = ()) -> ProvisionOutcome:
        """Run the provisioner to a terminal state.

        Args:
            port: Requested ingress port.
            mount_specs: Raw ``<HOST_PATH>:<GUEST_PATH>`` specs, used only
                when a cluster is created.

        Returns:
            The outcome. Failures are returned as ``ABORTED`` with the
            original error as reason, never raised.
        """
        name = self._provider.cluster_name
        console.print(f"[yellow]\u2139\ufe0f  Checking for existing Kubernetes cluster '{name}'[/yellow]")
        try:
            cluster = self._clusters.lookup(self._provider)
        except LocalInstallError as err:
            console.print(f"[red]Unable to determine status of any existing '{name}' cluster[/red]")
            return self._abort(port, err)

        if cluster.exists:
            return self._validate(port)
        try:
            return self._create(port, mount_specs)
        except LocalInstallError as err:
            return self._abort(port, err)

    def _validate(self, port: int) -> ProvisionOutcome:
        name = self._provider.cluster_name
        console.print(f"[green]\u2705 Existing cluster '{name}' found[/green]")
        console.print(f"[yellow]\u2139\ufe0f  Validating existing cluster '{name}'[/yellow]")

        resolution = None
        if self._provider.supports_port_introspection:
            resolution = reconcile_port(self._runtime, self._provider.control_plane_container, port)
            if resolution.warning:
                console.print(f"[yellow]\u26a0\ufe0f  {resolution.warning}[/yellow]")
            port = resolution.effective_port

        console.print(f"[green]\u2705 Cluster '{name}' validation complete[/green]")
        return ProvisionOutcome(state=ProvisionState.VALIDATED, port=port, port_resolution=resolution)

    def _create(self, port: int, mount_specs: Sequence[str]) -> ProvisionOutcome:
        name = self._provider.cluster_name
        console.print(f"[yellow]\u2139\ufe0f  No existing cluster found, cluster '{name}' will be created[/yellow]")

        mounts = parse_volume_mounts(mount_specs)
        self._port_check(port)

        console.print(Panel.fit(f"Creating cluster '{name}'", style="bold blue"))
        try:
            self._clusters.create(self._provider, port, mounts)
        except LocalInstallError:
            console.print(f"[red]Cluster '{name}' could not be created[/red]")
            raise
        console.print(f"[green]\u2705 Cluster '{name}' created[/green]")
        return ProvisionOutcome(state=ProvisionState.CREATED, port=port, mounts=tuple(mounts))

    def _abort(self, port: int, err: LocalInstallError) -> ProvisionOutcome:
        logger.debug("provisioning aborted at stage %r: %s", err.stage, err)
        return ProvisionOutcome(state=ProvisionState.ABORTED, port=port, reason=err)
