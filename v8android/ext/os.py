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
"""Helpers for os APIs."""
import contextlib
import logging
import os
from pathlib import Path
from typing import Iterator


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


@contextlib.contextmanager
def cd(path: Path) -> Iterator[Path]:
    """Moves into path for the duration of the context.

    The previous working directory is restored when the context exits, whether
    or not the body raised.

    Yields:
        The directory that will be restored.
    """
    curdir = Path.cwd()
    logger().debug("Entering %s", path)
    os.chdir(path)
    try:
        yield curdir
    finally:
        logger().debug("Returning to %s", curdir)
        os.chdir(curdir)
