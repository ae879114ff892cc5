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
"""Constants and helper functions for build hosts."""
from __future__ import annotations

import enum
import sys


@enum.unique
class Host(enum.Enum):
    """Enumeration of hosts the NDK is published for."""

    Darwin = "darwin"
    Linux = "linux"
    Windows64 = "windows64"

    @property
    def ndk_package_tag(self) -> str:
        """Returns the host suffix used in NDK release package names.

        >>> Host.Linux.ndk_package_tag
        'linux'
        >>> Host.Windows64.ndk_package_tag
        'windows'
        """
        if self is Host.Windows64:
            return "windows"
        return self.value

    @property
    def can_build_v8_for_android(self) -> bool:
        """Returns True if V8 can be cross-compiled for Android on this host.

        V8's Android configurations are only supported from Linux, and the
        host provisioning relies on apt.
        """
        return self is Host.Linux

    @classmethod
    def current(cls) -> Host:
        """Returns the Host matching the current machine."""
        if sys.platform in ("linux", "linux2"):
            return Host.Linux
        elif sys.platform == "darwin":
            return Host.Darwin
        elif sys.platform == "win32":
            return Host.Windows64
        else:
            raise RuntimeError(f"Unsupported host: {sys.platform}")
