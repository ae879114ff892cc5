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
"""Extensions for shutil APIs."""
from pathlib import Path
import shutil


def create_directory(path: Path) -> bool:
    """Creates a directory and its parents, ignoring an existing directory.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        FileExistsError: path exists but is not a directory.
    """
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True


def move_contents(src_dir: Path, dst_dir: Path) -> None:
    """Moves every entry of src_dir into dst_dir.

    dst_dir is created if needed. Entries are renamed where possible, so
    src_dir and dst_dir should live on the same file system to avoid copies.
    """
    create_directory(dst_dir)
    for item in src_dir.iterdir():
        shutil.move(str(item), str(dst_dir / item.name))


def remove_tree(path: Path) -> None:
    """Removes path if it exists, whether it's a file or a directory."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
