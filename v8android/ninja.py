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
"""Driver for the ninja build."""
from pathlib import Path
from typing import List, Optional

from v8android.errors import BuildError, CommandFailedError
from v8android.gn import MONOLITH_TARGET
from v8android.process import CommandRunner


def ninja_command(
    build_dir: Path, target: str = MONOLITH_TARGET, jobs: Optional[int] = None
) -> List[str]:
    """Returns the ninja invocation for target.

    >>> ninja_command(Path('out.gn/arm64.release'))
    ['ninja', '-C', 'out.gn/arm64.release', 'v8_monolith']
    """
    cmd = ["ninja", "-C", str(build_dir)]
    if jobs is not None:
        cmd.append(f"-j{jobs}")
    cmd.append(target)
    return cmd


def build_target(
    runner: CommandRunner,
    build_dir: Path,
    target: str = MONOLITH_TARGET,
    jobs: Optional[int] = None,
    cwd: Optional[Path] = None,
) -> None:
    """Builds target in build_dir.

    A failed build is not retried; the compiler would only fail the same way.

    Raises:
        BuildError: ninja exited with a non-zero status.
    """
    try:
        runner.run(ninja_command(build_dir, target, jobs), cwd=cwd)
    except CommandFailedError as ex:
        raise BuildError.wrap(f"Building {target} failed", ex) from ex
