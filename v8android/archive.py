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
"""Helper functions for reading and writing .zip archives.

The zip and unzip commands are used rather than the zipfile module because
zipfile does not restore permissions when extracting, and the NDK's
executables need their executable bits. https://bugs.python.org/issue15795
"""
from pathlib import Path
from typing import List

from v8android.process import CommandRunner


def make_zip(
    runner: CommandRunner, base_name: Path, root_dir: Path, paths: List[str]
) -> Path:
    """Creates a zip archive.

    Args:
        runner: Runner used to invoke zip.
        base_name: Path (without extension) to the output archive. An existing
            archive is replaced.
        root_dir: Path to the directory from which to perform the packaging
                  (identical to tar's -C).
        paths: Paths to files and directories to package, relative to root_dir.

    Returns:
        Path to the created archive.
    """
    if not root_dir.is_dir():
        raise RuntimeError(f"Not a directory: {root_dir}")

    zip_file = base_name.with_suffix(".zip")
    if zip_file.exists():
        zip_file.unlink()
    runner.run(["zip", "-9qr", "--symlinks", str(zip_file)] + paths, cwd=root_dir)
    return zip_file


def unzip(runner: CommandRunner, zip_file: Path, dest_dir: Path) -> None:
    """Unzip zip_file into dest_dir."""
    if not zip_file.is_file() or zip_file.suffix != ".zip":
        raise RuntimeError(f"Not a .zip file: {zip_file}")
    if not dest_dir.is_dir():
        raise RuntimeError(f"Not a directory: {dest_dir}")
    runner.run(["unzip", "-qq", str(zip_file), "-d", str(dest_dir)])
