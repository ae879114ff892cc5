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
"""Logged execution of external tools.

All subprocesses of the pipeline go through a CommandRunner. The runner owns
the tool search path, so components that need depot_tools on the PATH are
handed a runner that has it rather than relying on a mutated os.environ.
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
import shlex
import shutil
import subprocess
from typing import Mapping, Optional, Sequence, Tuple

from v8android.errors import CommandFailedError


# Conventional shell status for "command not found".
COMMAND_NOT_FOUND = 127


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


class CommandRunner:
    """Runs and logs external commands."""

    def __init__(
        self,
        search_path: Sequence[Path] = (),
        base_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initializes a command runner.

        Args:
            search_path: Directories searched for executables before the PATH
                of base_env.
            base_env: Environment passed to subprocesses. Defaults to a
                snapshot of os.environ.
        """
        self.search_path: Tuple[Path, ...] = tuple(search_path)
        self.base_env = dict(os.environ if base_env is None else base_env)

    def with_search_path(self, *dirs: Path) -> CommandRunner:
        """Returns a copy of this runner that also searches dirs, first."""
        runner = copy.copy(self)
        runner.search_path = tuple(dirs) + self.search_path
        return runner

    @property
    def env(self) -> dict[str, str]:
        """The environment subprocesses are run with."""
        env = dict(self.base_env)
        if self.search_path:
            paths = [str(p) for p in self.search_path]
            if env.get("PATH"):
                paths.append(env["PATH"])
            env["PATH"] = os.pathsep.join(paths)
        return env

    def which(self, tool: str) -> Optional[str]:
        """Returns the path tool resolves to on this runner's PATH, if any."""
        return shutil.which(tool, path=self.env.get("PATH"))

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path] = None,
        check: bool = True,
        input_text: Optional[str] = None,
    ) -> int:
        """Runs cmd to completion, streaming its output to ours.

        Args:
            cmd: argv style command.
            cwd: Working directory. Defaults to the current directory.
            check: Raise on a non-zero exit rather than returning the status.
            input_text: Text written to the command's stdin.

        Returns:
            The exit status of the command.

        Raises:
            CommandFailedError: check is set and the command failed.
        """
        returncode, _ = self._run_logged(cmd, cwd, input_text, capture=False)
        if check and returncode != 0:
            raise CommandFailedError(cmd, returncode, cwd or Path.cwd())
        return returncode

    def run_piped(self, cmd: Sequence[str], cwd: Optional[Path] = None) -> str:
        """Runs cmd and returns its stdout.

        Raises:
            CommandFailedError: The command failed.
        """
        returncode, output = self._run_logged(cmd, cwd, None, capture=True)
        if returncode != 0:
            raise CommandFailedError(cmd, returncode, cwd or Path.cwd())
        return output

    def _run_logged(
        self,
        cmd: Sequence[str],
        cwd: Optional[Path],
        input_text: Optional[str],
        capture: bool,
    ) -> Tuple[int, str]:
        logger().info("Running: %s (cwd=%s)", shlex.join(cmd), cwd or Path.cwd())
        return self._execute(list(cmd), cwd, input_text, capture)

    def _execute(
        self,
        cmd: list[str],
        cwd: Optional[Path],
        input_text: Optional[str],
        capture: bool,
    ) -> Tuple[int, str]:
        """Executes cmd. Returns the exit status and captured stdout."""
        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                env=self.env,
                input=input_text,
                stdout=subprocess.PIPE if capture else None,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger().error("%s: command not found", cmd[0])
            return COMMAND_NOT_FOUND, ""
        return proc.returncode, proc.stdout if capture else ""
