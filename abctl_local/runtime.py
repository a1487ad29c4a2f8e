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

"""Docker runtime access: reachability, port introspection, volume copy."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import docker
import requests

from abctl_local import logger
from abctl_local.constants import (
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    INGRESS_CONTAINER_PORT,
    MIGRATE_IMAGE,
    STAGE_INSTALL,
    STAGE_PRE_CHECK,
)
from abctl_local.errors import (
    InstallError,
    OperationCancelledError,
    PortIntrospectionError,
    PortUnavailableError,
    RuntimeUnavailableError,
)


@dataclass(frozen=True)
class RuntimeVersion:
    """Docker daemon version details recorded as telemetry attributes."""

    version: str
    arch: str
    platform: str


class RuntimeClient(Protocol):
    """Container-runtime collaborator."""

    def version(self) -> RuntimeVersion: ...

    def exposed_port(self, container: str) -> int: ...


class DockerRuntime:
    """Caller-owned Docker client, connected lazily on first use.

    The underlying client is created at most once and closed when the
    context exits::

        with DockerRuntime() as runtime:
            runtime.version()
    """

    def __init__(self, timeout: int = DEFAULT_COMMAND_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout
        self._client: docker.DockerClient | None = None

    def __enter__(self) -> DockerRuntime:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def client(self) -> docker.DockerClient:
        """Return the Docker client, connecting on first access.

        Raises:
            RuntimeUnavailableError: If the Docker daemon is unreachable.
        """
        if self._client is None:
            try:
                self._client = docker.from_env(timeout=self._timeout)
            except docker.errors.DockerException as err:
                raise RuntimeUnavailableError(f"unable to connect to docker: {err}") from err
        return self._client

    def close(self) -> None:
        """Close the client if one was created."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def version(self) -> RuntimeVersion:
        """Query the daemon version; doubles as the reachability check.

        Raises:
            RuntimeUnavailableError: If the daemon cannot be queried.
            OperationCancelledError: If the daemon does not answer in time.
        """
        try:
            info = self.client.version()
        except docker.errors.DockerException as err:
            raise RuntimeUnavailableError(f"unable to determine docker installation status: {err}") from err
        except requests.exceptions.Timeout as err:
            raise OperationCancelledError(
                f"docker did not respond within {self._timeout}s", stage=STAGE_PRE_CHECK
            ) from err
        except requests.exceptions.RequestException as err:
            raise RuntimeUnavailableError(f"unable to determine docker installation status: {err}") from err
        return RuntimeVersion(
            version=info.get("Version", ""),
            arch=info.get("Arch", ""),
            platform=info.get("Os", ""),
        )

    def exposed_port(self, container: str) -> int:
        """Return the host port bound to a container's ingress port.

        Args:
            container: Container name (e.g. ``airbyte-abctl-control-plane``).

        Returns:
            Host port mapped to container port 80/tcp.

        Raises:
            PortIntrospectionError: If the container or its binding cannot
                be read.
        """
        try:
            ports = self.client.containers.get(container).ports
        except (
            docker.errors.DockerException,
            requests.exceptions.RequestException,
            RuntimeUnavailableError,
        ) as err:
            raise PortIntrospectionError(f"unable to inspect container {container}: {err}") from err
        port = parse_host_port(ports.get(INGRESS_CONTAINER_PORT))
        if port is None:
            raise PortIntrospectionError(
                f"container {container} has no host binding for {INGRESS_CONTAINER_PORT}"
            )
        return port

    def copy_volume(self, volume: str, dest: Path) -> None:
        """Copy the contents of a named Docker volume into a host directory.

        Args:
            volume: Source Docker volume name.
            dest: Host directory receiving the files.

        Raises:
            InstallError: If the volume is missing or the copy fails.
            OperationCancelledError: If the daemon does not answer in time.
        """
        try:
            self.client.volumes.get(volume)
        except docker.errors.NotFound as err:
            raise InstallError(f"docker volume {volume} not found, nothing to migrate") from err
        except docker.errors.DockerException as err:
            raise InstallError(f"unable to inspect docker volume {volume}: {err}") from err
        except requests.exceptions.Timeout as err:
            raise OperationCancelledError(
                f"docker did not respond within {self._timeout}s", stage=STAGE_INSTALL
            ) from err
        except requests.exceptions.RequestException as err:
            raise InstallError(f"unable to inspect docker volume {volume}: {err}") from err

        dest.mkdir(parents=True, exist_ok=True)
        logger.info("copying volume %s to %s", volume, dest)
        try:
            self.client.containers.run(
                MIGRATE_IMAGE,
                ["sh", "-c", "cp -a /src/. /dest/"],
                volumes={
                    volume: {"bind": "/src", "mode": "ro"},
                    str(dest): {"bind": "/dest", "mode": "rw"},
                },
                remove=True,
            )
        except docker.errors.DockerException as err:
            raise InstallError(f"unable to migrate docker volume {volume}: {err}") from err
        except requests.exceptions.Timeout as err:
            raise OperationCancelledError(
                f"docker volume {volume} copy did not finish within {self._timeout}s", stage=STAGE_INSTALL
            ) from err
        except requests.exceptions.RequestException as err:
            raise InstallError(f"unable to migrate docker volume {volume}: {err}") from err


def parse_host_port(mappings: list[dict] | None) -> int | None:
    """Return the first valid host port from a Docker port mapping list."""
    for mapping in mappings or []:
        try:
            port = int(mapping.get("HostPort", ""))
        except ValueError:
            continue
        if 1 <= port <= 65535:
            return port
    return None


def ensure_port_available(port: int) -> None:
    """Check that nothing on the host is listening on *port*.

    Raises:
        PortUnavailableError: If the port cannot be bound.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("localhost", port))
        except OSError as err:
            raise PortUnavailableError(f"port {port} is not available: {err}") from err
