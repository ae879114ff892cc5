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
"""Builds V8 for Android as a monolithic static library.

Run with `poetry run v8android-build 64 branch-heads/13.6 r28c`.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import Optional, Sequence

import click

import v8android.artifacts
from v8android.environment import (
    check_host,
    check_required_tools,
    install_system_packages,
    prepare_workspace,
)
from v8android.errors import PipelineError
from v8android.ext.os import cd
from v8android.gn import BuildConfiguration, GnProject, PlatformBits
from v8android.hosts import Host
from v8android.ninja import build_target
from v8android.paths import WorkspaceLayout, get_workspace_root
from v8android.process import CommandRunner
from v8android.source import DepotTools, SyncOutcome, V8Checkout
from v8android.timer import StageTimings, Timer
from v8android.toolchain import Downloader, NdkInstaller, download


USAGE_EXIT_STATUS = 1


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationParameters:
    """The caller's choices for a run."""

    platform_bits: PlatformBits
    v8_branch: str
    ndk_release: str


class Pipeline:
    """Runs every step from a bare host to a directory of artifacts."""

    def __init__(
        self,
        params: InvocationParameters,
        layout: WorkspaceLayout,
        runner: Optional[CommandRunner] = None,
        downloader: Downloader = download,
        jobs: Optional[int] = None,
        host: Optional[Host] = None,
    ) -> None:
        self.params = params
        self.layout = layout
        self.runner = runner if runner is not None else CommandRunner()
        self.downloader = downloader
        self.jobs = jobs
        self.host = host if host is not None else Host.current()
        self.timings = StageTimings()
        self.full_sync_outcome: Optional[SyncOutcome] = None

    def run(self) -> BuildConfiguration:
        """Runs the pipeline.

        Returns:
            The configuration that was built.

        Raises:
            PipelineError: A step failed. No later step was run.
        """
        layout = self.layout
        check_host(self.host)

        with self.timings.stage("Installing system packages"):
            install_system_packages(self.runner)
            check_required_tools(self.runner)

        with self.timings.stage("Creating workspace"):
            prepare_workspace(layout)

        depot_tools = DepotTools(layout.depot_tools_dir, self.runner)
        with self.timings.stage("Setting up depot_tools"):
            depot_tools.ensure_checkout()
            depot_tools.bootstrap()
        tools = depot_tools.runner()

        v8 = V8Checkout(layout.v8_dir, tools)
        with self.timings.stage("Fetching V8"):
            with cd(layout.root):
                v8.fetch()
            with cd(layout.v8_dir):
                v8.checkout(self.params.v8_branch)
                v8.sync()
                self.full_sync_outcome = v8.sync_all_deps()
                v8.install_build_deps()

        with self.timings.stage("Setting up NDK"):
            with cd(layout.root):
                NdkInstaller(layout, tools, self.downloader).install(
                    self.params.ndk_release
                )

        config = BuildConfiguration.for_platform(
            self.params.platform_bits, layout.ndk_dir
        )
        project = GnProject(layout.v8_dir, tools)
        with cd(layout.v8_dir):
            with self.timings.stage("Generating V8 configuration"):
                v8android.artifacts.clear(layout.artifacts_dir)
                project.generate(config)
                v8android.artifacts.capture_build_provenance(
                    project, config, layout.artifacts_dir
                )

            with self.timings.stage("Building V8"):
                build_target(tools, config.out_dir, jobs=self.jobs, cwd=layout.v8_dir)

            with self.timings.stage("Copying artifacts"):
                v8android.artifacts.collect(
                    project, config, layout.artifacts_dir, tools
                )
                v8android.artifacts.verify(layout.artifacts_dir)

        return config

    def log_timings(self) -> None:
        self.timings.log()


def _require_value(_ctx: click.Context, param: click.Parameter, value: str) -> str:
    if not value:
        raise click.BadParameter("must not be empty", param=param)
    return value


@click.command(
    epilog="Example: v8android-build 64 branch-heads/13.6 r28c",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    default=0,
    help="Increase verbosity (repeatable).",
)
@click.option(
    "--working-directory",
    type=click.Path(file_okay=False, resolve_path=True, path_type=Path),
    help=(
        "Workspace holding depot_tools, V8, the NDK and the artifacts. Defaults "
        "to $V8_BUILD_ROOT, or /home/v8-building if that is not set."
    ),
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    help="Number of parallel compile jobs. Defaults to ninja's choice.",
)
@click.argument("platform_bits", type=click.Choice([b.value for b in PlatformBits]))
@click.argument("v8_branch", callback=_require_value)
@click.argument("ndk_release", callback=_require_value)
def cli(
    verbose: int,
    working_directory: Optional[Path],
    jobs: Optional[int],
    platform_bits: str,
    v8_branch: str,
    ndk_release: str,
) -> None:
    """Builds V8 for Android as libv8_monolith.a.

    PLATFORM_BITS selects 32-bit ARM or 64-bit ARM. V8_BRANCH is the V8 ref to
    build, such as branch-heads/13.6. NDK_RELEASE is the NDK release to build
    with, such as r28c.

    The library, headers and build flags are written to the artifacts
    directory of the workspace.
    """
    log_levels = [logging.INFO, logging.DEBUG]
    logging.basicConfig(level=log_levels[min(verbose, len(log_levels) - 1)])

    params = InvocationParameters(
        PlatformBits.from_str(platform_bits), v8_branch, ndk_release
    )
    logger().info(
        "Arguments: platform bits %s, V8 branch %s, NDK release %s",
        params.platform_bits.value,
        params.v8_branch,
        params.ndk_release,
    )
    layout = WorkspaceLayout(get_workspace_root(working_directory))
    pipeline = Pipeline(params, layout, jobs=jobs)
    total_timer = Timer()
    try:
        with total_timer:
            pipeline.run()
    finally:
        pipeline.log_timings()
        logger().info("Total: %s", total_timer)
    logger().info("Artifacts written to %s", layout.artifacts_dir)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Program entry point.

    Exits with status 1 on usage errors, and with the status of the failed
    step if the pipeline fails.
    """
    try:
        cli.main(
            args=list(argv) if argv is not None else None,
            prog_name="v8android-build",
            standalone_mode=False,
        )
    except click.UsageError as ex:
        ex.show()
        sys.exit(USAGE_EXIT_STATUS)
    except click.Abort:
        sys.exit(1)
    except PipelineError as ex:
        logger().error("%s", ex)
        sys.exit(ex.exit_code)


if __name__ == "__main__":
    main()
