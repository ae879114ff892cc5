#
# Copyright (C) 2026 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Provisioning of the build host."""
from __future__ import annotations

import logging
from typing import Iterable, List

from v8android.errors import CommandFailedError, PrerequisiteInstallError
from v8android.hosts import Host
from v8android.paths import WorkspaceLayout
from v8android.process import CommandRunner


SYSTEM_PACKAGES = (
    # Cloning depot_tools and V8.
    "git",
    # Unpacking the NDK.
    "unzip",
    # Packing artifacts.
    "zip",
    # depot_tools downloads its own dependencies with these.
    "curl",
    "wget",
    # V8's build scripts.
    "python3",
    # install-build-deps.sh uses these to detect missing dependencies...
    "lsb-release",
    "file",
    # ...and this to install them.
    "sudo",
    # 32-bit Android builds run 32-bit host tools.
    "lib32gcc-s1",
    "lib32stdc++6",
)

# Tools that must be runnable once SYSTEM_PACKAGES are installed.
REQUIRED_TOOLS = ("git", "unzip", "zip", "curl", "python3")


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


def check_host(host: Host) -> None:
    """Raises if V8 for Android can't be built on host."""
    if not host.can_build_v8_for_android:
        raise PrerequisiteInstallError(
            f"Building V8 for Android requires a Linux host, not {host.value}"
        )


def install_system_packages(runner: CommandRunner) -> None:
    """Installs SYSTEM_PACKAGES with apt-get.

    Raises:
        PrerequisiteInstallError: apt-get failed.
    """
    logger().info("Installing system packages")
    try:
        runner.run(["apt-get", "update"])
        runner.run(["apt-get", "install", "--assume-yes"] + list(SYSTEM_PACKAGES))
    except CommandFailedError as ex:
        raise PrerequisiteInstallError.wrap(
            "Could not install system packages", ex
        ) from ex


def find_missing_tools(runner: CommandRunner, tools: Iterable[str]) -> List[str]:
    """Returns the tools that can't be found on the runner's PATH."""
    return [tool for tool in tools if runner.which(tool) is None]


def check_required_tools(
    runner: CommandRunner, tools: Iterable[str] = REQUIRED_TOOLS
) -> None:
    """Raises if any of tools is not on the runner's PATH.

    Raises:
        PrerequisiteInstallError: At least one tool is missing. All missing
            tools are named in the message.
    """
    missing = find_missing_tools(runner, tools)
    if missing:
        raise PrerequisiteInstallError(
            "Required tools not found on PATH: {}".format(", ".join(missing))
        )


def prepare_workspace(layout: WorkspaceLayout) -> None:
    """Creates the workspace directories. Idempotent.

    Raises:
        PrerequisiteInstallError: The directories could not be created.
    """
    logger().info("Creating workspace at %s", layout.root)
    try:
        layout.create()
    except OSError as ex:
        raise PrerequisiteInstallError(
            f"Could not create workspace at {layout.root}: {ex}"
        ) from ex
