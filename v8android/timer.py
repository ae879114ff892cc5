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
"""Wall clock timing of pipeline stages."""
from __future__ import annotations

import contextlib
import datetime
import logging
import time
from types import TracebackType
from typing import Iterator, List, Optional, Tuple, Type


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


class Timer:
    """Measures the time spent in a with block, to whole seconds.

    A V8 build takes hours, so partial seconds are dropped.

    >>> with Timer() as timer:
    ...     pass
    >>> timer.duration
    datetime.timedelta(0)
    """

    def __init__(self) -> None:
        self.start_time: Optional[float] = None
        self.duration: Optional[datetime.timedelta] = None

    def __enter__(self) -> Timer:
        self.start_time = time.monotonic()
        return self

    def __exit__(
        self,
        _exc_type: Optional[Type[BaseException]],
        _exc_value: Optional[BaseException],
        _traceback: Optional[TracebackType],
    ) -> None:
        assert self.start_time is not None
        elapsed = int(time.monotonic() - self.start_time)
        self.duration = datetime.timedelta(seconds=elapsed)

    def __str__(self) -> str:
        if self.duration is None:
            return "unfinished"
        return str(self.duration)


class StageTimings:
    """Named timers in the order their stages ran."""

    def __init__(self) -> None:
        self.stages: List[Tuple[str, Timer]] = []

    def __iter__(self) -> Iterator[Tuple[str, Timer]]:
        return iter(self.stages)

    @contextlib.contextmanager
    def stage(self, description: str) -> Iterator[Timer]:
        """Announces a stage and times it.

        The stage is recorded even if it raises, so a failed run still
        reports where its time went.
        """
        logger().info("%s", description)
        timer = Timer()
        self.stages.append((description, timer))
        with timer:
            yield timer

    def log(self) -> None:
        for description, timer in self.stages:
            logger().info("%s: %s", description, timer)
