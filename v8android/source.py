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
"""Acquisition of depot_tools and the V8 source tree."""
from __future__ import annotations

import enum
import logging
from pathlib import Path
import textwrap

from v8android.errors import (
    AcquisitionError,
    CommandFailedError,
    PrerequisiteInstallError,
)
from v8android.process import CommandRunner


DEPOT_TOOLS_URL = "https://chromium.googlesource.com/chromium/tools/depot_tools.git"

# Answers for the prompts install-build-deps.sh would otherwise block on.
DEBCONF_SELECTIONS = textwrap.dedent(
    """\
    debconf debconf/frontend select Noninteractive
    keyboard-configuration keyboard-configuration/layout select English (US)
    keyboard-configuration keyboard-configuration/layoutcode select us
    """
)


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


@enum.unique
class SyncOutcome(enum.Enum):
    """Result of a dependency sync whose failure is not fatal."""

    SUCCEEDED = enum.auto()
    TOLERATED_FAILURE = enum.auto()


class DepotTools:
    """A depot_tools checkout."""

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        self.path = path
        self._runner = runner

    def ensure_checkout(self) -> None:
        """Clones depot_tools unless a checkout already exists.

        Raises:
            AcquisitionError: The clone failed.
        """
        if (self.path / ".git").exists():
            logger().info("Reusing depot_tools checkout at %s", self.path)
            return
        logger().info("Cloning depot_tools to %s", self.path)
        try:
            self._runner.run(["git", "clone", DEPOT_TOOLS_URL, str(self.path)])
        except CommandFailedError as ex:
            raise AcquisitionError.wrap("Could not clone depot_tools", ex) from ex

    def bootstrap(self) -> None:
        """Runs gclient once so depot_tools installs its own dependencies."""
        try:
            self.runner().run([str(self.path / "gclient")], cwd=self.path)
        except CommandFailedError as ex:
            raise AcquisitionError.wrap(
                "Could not bootstrap depot_tools", ex
            ) from ex

    def runner(self) -> CommandRunner:
        """Returns a runner that finds the depot_tools executables."""
        return self._runner.with_search_path(self.path)


class V8Checkout:
    """The V8 source tree and its gclient dependencies.

    The runner must be able to find depot_tools (see DepotTools.runner).
    """

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        self.path = path
        self.runner = runner

    @property
    def gclient_root(self) -> Path:
        """The directory holding the .gclient file."""
        return self.path.parent

    def fetch(self) -> None:
        """Fetches V8 with `fetch v8` unless it is already checked out.

        Raises:
            AcquisitionError: fetch failed.
        """
        if (self.gclient_root / ".gclient").exists() and self.path.is_dir():
            logger().info("Reusing V8 checkout at %s", self.path)
            return
        logger().info("Fetching V8 into %s", self.path)
        try:
            self.runner.run(["fetch", "v8"], cwd=self.gclient_root)
        except CommandFailedError as ex:
            raise AcquisitionError.wrap("Could not fetch V8", ex) from ex

    def checkout(self, ref: str) -> None:
        """Switches the V8 tree to ref.

        Raises:
            AcquisitionError: ref does not exist or the tree is dirty.
        """
        logger().info("Switching V8 to %s", ref)
        try:
            self.runner.run(["git", "checkout", ref], cwd=self.path)
        except CommandFailedError as ex:
            raise AcquisitionError.wrap(f"Could not check out {ref}", ex) from ex

    def sync(self) -> None:
        """Syncs the dependencies pinned for the current ref.

        Raises:
            AcquisitionError: gclient sync failed.
        """
        try:
            self.runner.run(["gclient", "sync"], cwd=self.path)
        except CommandFailedError as ex:
            raise AcquisitionError.wrap("Could not sync V8 dependencies", ex) from ex

    def sync_all_deps(self) -> SyncOutcome:
        """Syncs the full dependency superset, tolerating failure.

        This pulls third_party/catapult, which v8gen.py needs. The sync of
        one of the other optional subtrees fails upstream, but by then
        catapult is in place, so the exit status is ignored.
        """
        returncode = self.runner.run(
            ["gclient", "sync", "--deps=all"], cwd=self.path, check=False
        )
        if returncode != 0:
            logger().warning(
                "gclient sync --deps=all exited with status %d; continuing",
                returncode,
            )
            return SyncOutcome.TOLERATED_FAILURE
        return SyncOutcome.SUCCEEDED

    def install_build_deps(self) -> None:
        """Installs the host packages V8's build needs.

        Raises:
            PrerequisiteInstallError: install-build-deps.sh failed.
        """
        logger().info("Installing V8 build dependencies")
        try:
            self.runner.run(
                ["debconf-set-selections"], cwd=self.path, input_text=DEBCONF_SELECTIONS
            )
            self.runner.run(
                [str(self.path / "build/install-build-deps.sh"), "--no-prompt"],
                cwd=self.path,
            )
        except CommandFailedError as ex:
            raise PrerequisiteInstallError.wrap(
                "Could not install V8 build dependencies", ex
            ) from ex
