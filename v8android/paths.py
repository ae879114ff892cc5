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
"""Paths of the build workspace.

The workspace is a single root directory holding depot_tools, the V8 checkout,
the unpacked NDK and the collected artifacts. It is never cleaned up by the
pipeline so that re-runs can reuse the expensive checkouts.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

import v8android.ext.shutil


DEFAULT_WORKSPACE_ROOT = Path("/home/v8-building")

# Environment variable that overrides DEFAULT_WORKSPACE_ROOT.
WORKSPACE_ROOT_ENV = "V8_BUILD_ROOT"


def get_workspace_root(override: Optional[Path] = None) -> Path:
    """Returns the absolute workspace root.

    Args:
        override: Explicit root, typically from the command line. Takes
            precedence over $V8_BUILD_ROOT.

    Returns:
        override if given, else $V8_BUILD_ROOT if set, else
        DEFAULT_WORKSPACE_ROOT. The directory is not created.
    """
    if override is not None:
        return override.resolve()
    env_root = os.getenv(WORKSPACE_ROOT_ENV)
    if env_root:
        return Path(env_root).resolve()
    return DEFAULT_WORKSPACE_ROOT


@dataclass(frozen=True)
class WorkspaceLayout:
    """Fixed layout of a workspace root."""

    root: Path

    @property
    def depot_tools_dir(self) -> Path:
        return self.root / "depot_tools"

    @property
    def v8_dir(self) -> Path:
        """The V8 checkout. `fetch v8` names it after the solution."""
        return self.root / "v8"

    @property
    def ndk_dir(self) -> Path:
        """Stable location of the unpacked NDK, whatever its release."""
        return self.root / "ndk"

    @property
    def artifacts_dir(self) -> Path:
        return self.root / "artifacts"

    def create(self) -> None:
        """Creates the root and artifacts directories.

        Safe to call on an existing workspace.
        """
        v8android.ext.shutil.create_directory(self.root)
        v8android.ext.shutil.create_directory(self.artifacts_dir)
