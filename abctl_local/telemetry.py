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

"""Operation-level telemetry recorded through the package logger."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol, TypeVar

from abctl_local import logger

T = TypeVar("T")


class TelemetryClient(Protocol):
    """Observability sink."""

    def attr(self, key: str, value: str) -> None: ...

    def wrap(self, operation: str, fn: Callable[[], T]) -> T: ...


class LoggingTelemetry:
    """Records start, success and failure of named operations as log events.

    Attributes collected with :meth:`attr` are attached to every event.
    """

    def __init__(self) -> None:
        self.attrs: dict[str, str] = {}
        self.events: list[tuple[str, str]] = []

    def attr(self, key: str, value: str) -> None:
        self.attrs[key] = value

    def wrap(self, operation: str, fn: Callable[[], T]) -> T:
        """Run *fn* as one operation and record its result.

        Any exception, including cancellation, is recorded as a failure of
        *operation* and re-raised unchanged.
        """
        self._record(operation, "start")
        started = time.monotonic()
        try:
            result = fn()
        except BaseException as err:
            self._record(operation, "failed", error=repr(err), duration=_elapsed(started))
            raise
        self._record(operation, "success", duration=_elapsed(started))
        return result

    def _record(self, operation: str, state: str, **extra: str) -> None:
        self.events.append((operation, state))
        logger.info("telemetry %s %s %s", operation, state, {**self.attrs, **extra})


def _elapsed(started: float) -> str:
    return f"{time.monotonic() - started:.2f}s"
