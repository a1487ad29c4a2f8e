#!/usr/bin/env python3
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

"""
abctl.py - CLI for managing a local Airbyte installation.

Subcommands:
    local install    Create (or reuse) a local kind cluster and install Airbyte

Environment Variables:
    - ABCTL_CLUSTER_NAME (default: airbyte-abctl)
    - ABCTL_PROVIDER (default: kind)
    - ABCTL_COMMAND_TIMEOUT (default: 600)
    - ABCTL_LOCAL_INSTALL_DOCKER_SERVER / _USERNAME / _PASSWORD / _EMAIL
      override the matching --docker-* flags when set and non-empty

Examples:
    # Install with defaults (port 8000, latest chart)
    ./abctl.py local install

    # Install a pinned chart with an extra host mount
    ./abctl.py local install --chart-version 0.50.0 --volume /data:/var/data

For detailed usage information, run: ./abctl.py --help
"""

from __future__ import annotations

import logging
import sys

import typer

from abctl_local import console
from abctl_local.commands import local_cmd

app = typer.Typer(
    help="Airbyte's command line tool for local installations.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(local_cmd.app, name="local")


def main() -> None:
    """Console script entry point."""
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
