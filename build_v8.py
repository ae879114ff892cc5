#!/usr/bin/env python3
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
"""Shortcut for v8android/pipeline.py.

This would normally be installed by pip, but it is kept in the source directory
so the build can be started from a bare checkout.
"""
import v8android.pipeline


def main() -> None:
    """Trampoline into the build pipeline defined in the v8android package."""
    v8android.pipeline.main()


if __name__ == "__main__":
    main()
