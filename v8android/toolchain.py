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
"""Installation of the Android NDK into the workspace."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Awaitable, Callable, Optional

import aiohttp
from aiohttp import ClientSession

from v8android.archive import unzip
from v8android.errors import CommandFailedError, ToolchainSetupError
import v8android.ext.shutil
from v8android.hosts import Host
from v8android.paths import WorkspaceLayout
from v8android.process import CommandRunner


NDK_URL_TEMPLATE = (
    "https://dl.google.com/android/repository/android-ndk-{release}-{host}.zip"
)

DOWNLOAD_CHUNK_SIZE = 4 * 1024 * 1024

# NDK packages are several hundred MiB, so only stalls are treated as errors.
DOWNLOAD_TIMEOUT = aiohttp.ClientTimeout(total=None, sock_connect=60, sock_read=300)

Downloader = Callable[[str, Path], Awaitable[None]]


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


def ndk_url(release: str, host: Host = Host.Linux) -> str:
    """Returns the download URL of an NDK release.

    >>> ndk_url('r28c')
    'https://dl.google.com/android/repository/android-ndk-r28c-linux.zip'
    """
    return NDK_URL_TEMPLATE.format(release=release, host=host.ndk_package_tag)


async def download(url: str, destination: Path) -> None:
    """Downloads url to destination.

    Raises:
        ToolchainSetupError: The server could not be reached or did not
            respond with a success status.
    """
    logger().info("Downloading %s", url)
    try:
        async with ClientSession(
            raise_for_status=True, timeout=DOWNLOAD_TIMEOUT
        ) as session:
            async with session.get(url) as response:
                with destination.open("wb") as output:
                    async for chunk in response.content.iter_chunked(
                        DOWNLOAD_CHUNK_SIZE
                    ):
                        output.write(chunk)
    except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
        raise ToolchainSetupError(f"Could not download {url}: {ex}") from ex
    except OSError as ex:
        raise ToolchainSetupError(f"Could not write {destination}: {ex}") from ex


def read_source_properties(ndk_dir: Path) -> dict[str, str]:
    """Parses the NDK's source.properties, if present."""
    properties: dict[str, str] = {}
    path = ndk_dir / "source.properties"
    if not path.exists():
        return properties
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.partition("=")
        if sep:
            properties[key.strip()] = value.strip()
    return properties


class NdkInstaller:
    """Installs an NDK release to the workspace's fixed NDK directory."""

    def __init__(
        self,
        layout: WorkspaceLayout,
        runner: CommandRunner,
        downloader: Downloader = download,
        host: Host = Host.Linux,
    ) -> None:
        self.layout = layout
        self.runner = runner
        self.downloader = downloader
        self.host = host

    def install(self, release: str) -> Path:
        """Downloads and unpacks release to layout.ndk_dir.

        Any NDK already at layout.ndk_dir is replaced. The archive is staged
        in the workspace root (so that the final move is a rename) and the
        staging directory is removed however this function exits.

        Returns:
            The NDK directory.

        Raises:
            ToolchainSetupError: The download or extraction failed, or the
                archive was not laid out as expected.
        """
        url = ndk_url(release, self.host)
        try:
            self._install_from(url)
        except OSError as ex:
            raise ToolchainSetupError(
                f"Could not install {url} to {self.layout.ndk_dir}: {ex}"
            ) from ex

        revision = read_source_properties(self.layout.ndk_dir).get("Pkg.Revision")
        if revision is None:
            logger().warning("%s has no source.properties", self.layout.ndk_dir)
        else:
            logger().info("Installed NDK %s (%s)", release, revision)
        return self.layout.ndk_dir

    def _install_from(self, url: str) -> None:
        v8android.ext.shutil.create_directory(self.layout.root)
        with TemporaryDirectory(prefix=".ndk-staging-", dir=self.layout.root) as tmp:
            staging = Path(tmp)
            archive = staging / "ndk.zip"
            asyncio.run(self.downloader(url, archive))

            extract_dir = staging / "extract"
            extract_dir.mkdir()
            try:
                unzip(self.runner, archive, extract_dir)
            except CommandFailedError as ex:
                raise ToolchainSetupError.wrap(f"Could not unpack {url}", ex) from ex
            except RuntimeError as ex:
                raise ToolchainSetupError(f"Could not unpack {url}: {ex}") from ex

            unpacked = self._find_single_subdir(extract_dir)
            logger().info("Installing %s to %s", unpacked.name, self.layout.ndk_dir)
            v8android.ext.shutil.remove_tree(self.layout.ndk_dir)
            v8android.ext.shutil.move_contents(unpacked, self.layout.ndk_dir)

    @staticmethod
    def _find_single_subdir(extract_dir: Path) -> Path:
        """Returns the one top-level directory of an unpacked NDK archive."""
        entries = list(extract_dir.iterdir())
        if len(entries) != 1 or not entries[0].is_dir():
            names = ", ".join(sorted(e.name for e in entries)) or "nothing"
            raise ToolchainSetupError(
                f"Expected a single top-level directory in the NDK archive, found: "
                f"{names}"
            )
        return entries[0]
