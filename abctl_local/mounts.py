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

"""Parsing of ``<HOST_PATH>:<GUEST_PATH>`` volume mount specs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from abctl_local.constants import VOLUME_SPEC_SEPARATOR
from abctl_local.errors import ValidationError


@dataclass(frozen=True)
class VolumeMount:
    """A single host to cluster-node path binding.

    Attributes:
        host_path: Path on the host machine.
        container_path: Path inside the cluster node container.
    """

    host_path: str
    container_path: str

    def as_kind_mount(self) -> dict[str, str]:
        """Render the mount as a kind ``extraMounts`` entry."""
        return {"hostPath": self.host_path, "containerPath": self.container_path}


def parse_volume_mount(spec: str) -> VolumeMount:
    """Parse a single volume spec.

    Empty paths are accepted here; the cluster manager validates path
    semantics when it creates the cluster.

    Args:
        spec: Raw spec in the form ``<HOST_PATH>:<GUEST_PATH>``.

    Returns:
        The parsed volume mount.

    Raises:
        ValidationError: If the spec does not contain exactly one separator.
    """
    parts = spec.split(VOLUME_SPEC_SEPARATOR)
    if len(parts) != 2:
        raise ValidationError(
            f"volume {spec} is not a valid volume spec, must be <HOST_PATH>:<GUEST_PATH>"
        )
    return VolumeMount(host_path=parts[0], container_path=parts[1])


def parse_volume_mounts(specs: Iterable[str]) -> list[VolumeMount]:
    """Parse volume specs in order, failing on the first malformed one.

    Args:
        specs: Raw specs in the form ``<HOST_PATH>:<GUEST_PATH>``.

    Returns:
        One mount per spec, in input order.

    Raises:
        ValidationError: Naming the first malformed spec. No partial list
            is returned.
    """
    return [parse_volume_mount(spec) for spec in specs]
