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

"""Reconciliation of the requested ingress port with an existing cluster."""

from __future__ import annotations

from dataclasses import dataclass

from abctl_local import logger
from abctl_local.errors import IndeterminateStateError
from abctl_local.runtime import RuntimeClient


@dataclass(frozen=True)
class PortResolution:
    """Outcome of comparing the requested port to the observed one.

    Attributes:
        requested_port: Port the user asked for.
        effective_port: Port the installation will use.
        conflict: The existing cluster uses a different port.
        determinable: The existing port could be read at all.
    """

    requested_port: int
    effective_port: int
    conflict: bool = False
    determinable: bool = True

    @property
    def warning(self) -> str | None:
        """Message the caller must surface, or None when nothing is wrong."""
        if not self.determinable:
            return (
                "Unable to determine which port the existing cluster was configured to use.\n"
                "Installation will continue but may ultimately fail, in which case it will be "
                "necessary to uninstall first."
            )
        if self.conflict:
            return (
                f"The existing cluster was found to be using port {self.effective_port}, "
                f"which differs from the provided port {self.requested_port}.\n"
                "The existing port will be used, as changing ports currently requires the "
                "existing installation to be uninstalled first."
            )
        return None


def reconcile_port(runtime: RuntimeClient, container: str, requested_port: int) -> PortResolution:
    """Determine the ingress port to use against an existing cluster.

    The existing cluster's port always wins. If it cannot be read the
    requested port is used and the resolution is marked indeterminate;
    this never raises.

    Args:
        runtime: Runtime client able to read the control-plane port.
        container: Control-plane container name.
        requested_port: Port the user asked for.

    Returns:
        The port resolution.
    """
    try:
        observed = runtime.exposed_port(container)
    except IndeterminateStateError as err:
        logger.debug("port introspection failed: %s", err)
        return PortResolution(
            requested_port=requested_port,
            effective_port=requested_port,
            determinable=False,
        )
    return PortResolution(
        requested_port=requested_port,
        effective_port=observed,
        conflict=observed != requested_port,
    )
