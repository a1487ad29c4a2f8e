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

"""Utility functions for external commands and flag handling."""

from __future__ import annotations

from collections.abc import Iterable

import sh

from abctl_local import logger
from abctl_local.errors import LocalInstallError, OperationCancelledError


def run_command(
    command: str,
    *args: str,
    timeout: int,
    error: type[LocalInstallError],
    **kwargs,
) -> str:
    """Run an external command once and return its stdout.

    Args:
        command: Name of the executable (e.g. ``kind``, ``helm``).
        *args: Command arguments.
        timeout: Deadline in seconds; the process is killed when exceeded.
        error: Exception type raised when the command fails.
        **kwargs: Extra ``sh`` special keyword arguments (e.g. ``_in``).

    Returns:
        The command's stdout.

    Raises:
        OperationCancelledError: If the deadline expires.
        LocalInstallError: Of type *error* if the command is missing or exits
            non-zero.
    """
    logger.debug("running: %s %s", command, " ".join(args))
    try:
        return str(sh.Command(command)(*args, _timeout=timeout, **kwargs))
    except sh.CommandNotFound as err:
        raise error(f"Required command '{command}' not found. Please install it first.") from err
    except sh.TimeoutException as err:
        raise OperationCancelledError(
            f"'{command} {' '.join(args[:2])}' did not finish within {timeout}s",
            stage=error.stage,
        ) from err
    except sh.ErrorReturnCode as err:
        raise error(f"'{command} {' '.join(args[:2])}' failed: {_stderr(err)}") from err


def _stderr(err: sh.ErrorReturnCode) -> str:
    """Best-effort decoding of a failed command's stderr."""
    raw = err.stderr or err.stdout or b""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.strip() or f"exit code {err.exit_code}"


def split_csv_flags(values: Iterable[str] | None, *, keep_empty: bool = False) -> list[str]:
    """Flatten repeatable flag values that may also be comma-separated.

    Args:
        values: Raw values as received from the CLI, or None.
        keep_empty: Keep empty items so a downstream parser can reject them.

    Returns:
        Individual values in order.
    """
    return [item for value in values or [] for item in value.split(",") if item or keep_empty]
