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
"""Collection of the build outputs.

The artifacts directory is the externally consumed product of a run. It holds
the static library, the public headers and the build provenance needed to
reproduce or debug the build.
"""
from __future__ import annotations

import logging
from pathlib import Path
import shutil
from typing import List

from v8android.archive import make_zip
from v8android.errors import ArtifactMissingError, CommandFailedError
import v8android.ext.shutil
from v8android.gn import BuildConfiguration, GnProject
from v8android.process import CommandRunner


LIBRARY = "libv8_monolith.a"
HEADERS_ZIP = "include.zip"
BUILD_FLAGS = "v8_build_flags.txt"
ARGS_GN = "args.gn"
GN_ARGS_LIST = "gn-args-list.txt"

ARTIFACT_NAMES = (LIBRARY, HEADERS_ZIP, BUILD_FLAGS, ARGS_GN, GN_ARGS_LIST)


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


def _write_and_echo(path: Path, title: str, contents: str) -> None:
    try:
        path.write_text(contents, encoding="utf-8")
    except OSError as ex:
        raise ArtifactMissingError(f"Could not write {path}: {ex}") from ex
    print(f"{title} ({path}):")
    print(contents)


def _copy(src: Path, dst: Path) -> None:
    try:
        shutil.copyfile(src, dst)
    except OSError as ex:
        raise ArtifactMissingError(f"Could not copy {src} to {dst}: {ex}") from ex


def clear(artifacts_dir: Path) -> None:
    """Removes every artifact a previous run left in artifacts_dir.

    A run that fails part way must not leave older outputs next to its own.

    Raises:
        ArtifactMissingError: An old artifact could not be removed.
    """
    for name in ARTIFACT_NAMES:
        path = artifacts_dir / name
        try:
            v8android.ext.shutil.remove_tree(path)
        except OSError as ex:
            raise ArtifactMissingError(f"Could not remove {path}: {ex}") from ex


def capture_build_provenance(
    project: GnProject, config: BuildConfiguration, artifacts_dir: Path
) -> None:
    """Records how the build directory was configured.

    Writes the monolith's preprocessor defines, a copy of args.gn and the
    full listing of recognized GN arguments to artifacts_dir.

    Raises:
        ConfigGenerationError: gn could not be queried.
        ArtifactMissingError: The generator did not write args.gn.
    """
    _write_and_echo(
        artifacts_dir / BUILD_FLAGS,
        "Build flags",
        project.describe_defines(config),
    )

    args_file = project.args_file(config)
    if not args_file.is_file():
        raise ArtifactMissingError(f"Generator did not write {args_file}")
    _copy(args_file, artifacts_dir / ARGS_GN)

    _write_and_echo(
        artifacts_dir / GN_ARGS_LIST,
        "GN arguments",
        project.list_args(config),
    )


def collect(
    project: GnProject,
    config: BuildConfiguration,
    artifacts_dir: Path,
    runner: CommandRunner,
) -> None:
    """Copies the library and packages the public headers.

    Raises:
        ArtifactMissingError: The build did not produce what it should have.
    """
    library = project.build_dir(config) / "obj" / LIBRARY
    if not library.is_file():
        raise ArtifactMissingError(f"Build succeeded but {library} does not exist")
    logger().info("Copying %s", library)
    _copy(library, artifacts_dir / LIBRARY)

    include_dir = project.v8_dir / "include"
    if not include_dir.is_dir():
        raise ArtifactMissingError(f"{include_dir} does not exist")
    logger().info("Packaging %s", include_dir)
    try:
        make_zip(
            runner,
            artifacts_dir / Path(HEADERS_ZIP).stem,
            project.v8_dir,
            ["include"],
        )
    except CommandFailedError as ex:
        raise ArtifactMissingError.wrap("Could not package headers", ex) from ex


def find_missing(artifacts_dir: Path) -> List[str]:
    """Returns the artifact names that are absent or empty."""
    missing = []
    for name in ARTIFACT_NAMES:
        path = artifacts_dir / name
        if not path.is_file() or path.stat().st_size == 0:
            missing.append(name)
    return missing


def verify(artifacts_dir: Path) -> None:
    """Raises unless the whole artifact set is present and non-empty.

    Raises:
        ArtifactMissingError: Names every missing or empty artifact.
    """
    missing = find_missing(artifacts_dir)
    if missing:
        raise ArtifactMissingError(
            "Missing or empty artifacts in {}: {}".format(
                artifacts_dir, ", ".join(missing)
            )
        )
