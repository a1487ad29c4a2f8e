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

"""Stage-tagged exceptions raised by the install workflow."""

from __future__ import annotations

from abctl_local.constants import (
    STAGE_CLUSTER_CREATION,
    STAGE_CLUSTER_LOOKUP,
    STAGE_INSTALL,
    STAGE_PORT_INTROSPECTION,
    STAGE_PRE_CHECK,
    STAGE_VALIDATION,
)


class LocalInstallError(Exception):
    """Base error for the local install workflow.

    Attributes:
        stage: Name of the workflow stage that failed.
    """

    stage = "local install"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"{self.stage}: {super().__str__()}"


class ValidationError(LocalInstallError):
    """User input is malformed. Raised before anything is mutated."""

    stage = STAGE_VALIDATION


class RuntimeUnavailableError(LocalInstallError):
    """The container runtime could not be reached."""

    stage = STAGE_PRE_CHECK


class PortUnavailableError(LocalInstallError):
    """The requested ingress port is already bound on the host."""

    stage = STAGE_PRE_CHECK


class IndeterminateStateError(LocalInstallError):
    """External state could not be observed (cluster existence, port)."""

    stage = STAGE_CLUSTER_LOOKUP


class PortIntrospectionError(IndeterminateStateError):
    """The port of a running control-plane container could not be read."""

    stage = STAGE_PORT_INTROSPECTION


class ResourceCreationError(LocalInstallError):
    """Cluster creation failed. Never retried internally."""

    stage = STAGE_CLUSTER_CREATION


class InstallError(LocalInstallError):
    """The chart installer failed."""

    stage = STAGE_INSTALL


class OperationCancelledError(LocalInstallError):
    """A blocking call hit its deadline and was aborted."""
