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
"""Errors raised by the V8 build pipeline.

Every fatal failure is a PipelineError. The exit status of the process is
taken from the error, which in turn inherits the status of the subprocess that
failed, if any.
"""
from __future__ import annotations

import shlex
from pathlib import Path
from typing import Optional, Sequence


class PipelineError(RuntimeError):
    """Base class for errors that abort the pipeline."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    @classmethod
    def wrap(cls, message: str, cause: CommandFailedError) -> PipelineError:
        """Creates a stage error that carries the exit status of cause."""
        return cls(f"{message}: {cause}", exit_code=cause.exit_code)


class UsageError(PipelineError):
    """The command line was malformed."""


class CommandFailedError(PipelineError):
    """An external command exited with a non-zero status."""

    def __init__(
        self, cmd: Sequence[str], returncode: int, cwd: Optional[Path] = None
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.cwd = cwd
        location = f" (cwd={cwd})" if cwd is not None else ""
        super().__init__(
            f"Command failed with exit status {returncode}{location}: "
            f"{shlex.join(self.cmd)}",
            # Statuses outside 1-255 (signals, Windows codes) don't survive
            # sys.exit intact.
            exit_code=returncode if 0 < returncode < 256 else 1,
        )


class PrerequisiteInstallError(PipelineError):
    """Installing or locating host prerequisites failed."""


class AcquisitionError(PipelineError):
    """Cloning, fetching, checking out or syncing source failed."""


class ToolchainSetupError(PipelineError):
    """Downloading or unpacking the NDK failed."""


class ConfigGenerationError(PipelineError):
    """The build configuration was invalid or gn rejected it."""


class BuildError(PipelineError):
    """The build executor failed."""


class ArtifactMissingError(PipelineError):
    """An expected output file was absent or empty."""
