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
"""Generation of the GN build configuration for V8 on Android.

V8 can't be built as a single shared library from GN arguments alone
(https://stackoverflow.com/a/71221645), so the configuration produces the
monolithic static library instead.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import enum
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Union

from v8android.errors import CommandFailedError, ConfigGenerationError
from v8android.process import CommandRunner


GnValue = Union[bool, int, str]

# Base configuration passed to v8gen.py. Defaults to a 32-bit ARM release.
V8GEN_BUILDER = "android.arm.release"

MONOLITH_TARGET = "v8_monolith"

# Fixed policy shared by both platform variants, in the order it is passed.
COMMON_ARGS: Mapping[str, GnValue] = {
    # Required by v8_monolithic and by official builds.
    "is_component_build": False,
    # ICU data is compiled in rather than loaded from the file system.
    "icu_use_data_file": False,
    # Parity with the legacy configuration.
    "v8_enable_sandbox": False,
    "v8_enable_i18n_support": False,
    # Removes WebAssembly; shrinks the library considerably.
    "v8_enable_webassembly": False,
    # The startup snapshot is bundled into the library.
    "v8_use_external_startup_data": False,
    "is_official_build": True,
    # No profile data is available for Android.
    "chrome_pgo_phase": 0,
    # The NDK's lld can't read the bitcode produced by V8's clang.
    "use_thin_lto": False,
    "v8_monolithic": True,
}

# Consumers link against the NDK's libc++, so V8 must too.
TOOLCHAIN_ARGS: Mapping[str, GnValue] = {
    "use_custom_libcxx": False,
}


def logger() -> logging.Logger:
    """Returns the module level logger."""
    return logging.getLogger(__name__)


@enum.unique
class PlatformBits(enum.Enum):
    """Supported Android ARM word sizes."""

    ARM32 = "32"
    ARM64 = "64"

    @classmethod
    def from_str(cls, value: str) -> PlatformBits:
        """Parses "32" or "64".

        >>> PlatformBits.from_str('64')
        <PlatformBits.ARM64: '64'>
        >>> PlatformBits.from_str('x86')
        Traceback (most recent call last):
            ...
        ValueError: Unsupported platform bits: x86 (expected 32 or 64)
        """
        for bits in cls:
            if bits.value == value:
                return bits
        raise ValueError(f"Unsupported platform bits: {value} (expected 32 or 64)")

    @property
    def out_dir_name(self) -> str:
        if self is PlatformBits.ARM32:
            return "arm32.release"
        return "arm64.release"

    @property
    def cpu_args(self) -> Dict[str, GnValue]:
        """GN args overriding the CPU of the V8GEN_BUILDER base config."""
        if self is PlatformBits.ARM32:
            return {}
        return {"target_cpu": "arm64", "v8_target_cpu": "arm64"}


def format_gn_value(value: Any) -> str:
    """Formats a Python value as a GN literal.

    >>> format_gn_value(True)
    'true'
    >>> format_gn_value(0)
    '0'
    >>> format_gn_value('/home/v8-building/ndk')
    '"/home/v8-building/ndk"'
    """
    # bool is a subclass of int, so it has to be checked first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    raise TypeError(f"Cannot represent {value!r} as a GN value")


@dataclass(frozen=True)
class BuildConfiguration:
    """The resolved GN arguments and output directory of a build."""

    platform_bits: PlatformBits
    out_dir_name: str
    args: Mapping[str, GnValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only copy. Later changes to the caller's mapping are not seen.
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    @classmethod
    def for_platform(
        cls, platform_bits: PlatformBits, ndk_root: Path
    ) -> BuildConfiguration:
        """Returns the configuration for platform_bits using the NDK at ndk_root."""
        args: Dict[str, GnValue] = {}
        args.update(platform_bits.cpu_args)
        args.update(COMMON_ARGS)
        args["android_ndk_root"] = str(ndk_root)
        args.update(TOOLCHAIN_ARGS)
        config = cls(platform_bits, platform_bits.out_dir_name, args)
        config.validate()
        return config

    @property
    def out_dir(self) -> Path:
        """The build directory, relative to the V8 checkout."""
        return Path("out.gn") / self.out_dir_name

    @property
    def has_cpu_override(self) -> bool:
        return "target_cpu" in self.args or "v8_target_cpu" in self.args

    def gn_args(self) -> List[str]:
        """Returns the arguments as key=value strings, in order."""
        return [f"{k}={format_gn_value(v)}" for k, v in self.args.items()]

    def validate(self) -> None:
        """Checks that the arguments are consistent with each other.

        Raises:
            ConfigGenerationError: Describes every inconsistency found.
        """
        args = self.args
        problems = []
        if args.get("v8_monolithic") and args.get("is_component_build", True):
            problems.append("v8_monolithic requires is_component_build=false")
        if args.get("is_official_build"):
            if args.get("chrome_pgo_phase") != 0:
                problems.append(
                    "is_official_build enables PGO, which needs chrome_pgo_phase=0 "
                    "without profile data"
                )
            if args.get("use_thin_lto") is not False:
                problems.append(
                    "is_official_build enables ThinLTO, which needs "
                    "use_thin_lto=false with the NDK linker"
                )
        if args.get("icu_use_data_file") and not args.get(
            "v8_enable_i18n_support", True
        ):
            problems.append("icu_use_data_file has no effect without i18n support")
        if not args.get("v8_use_external_startup_data", True) and args.get(
            "icu_use_data_file", True
        ):
            problems.append(
                "without external startup data, ICU data must be compiled in "
                "(icu_use_data_file=false)"
            )
        if not args.get("android_ndk_root"):
            problems.append("android_ndk_root is not set")
        if problems:
            raise ConfigGenerationError(
                f"Invalid {self.out_dir_name} configuration: " + "; ".join(problems)
            )


class GnProject:
    """A V8 checkout driven through gn."""

    def __init__(self, v8_dir: Path, runner: CommandRunner) -> None:
        self.v8_dir = v8_dir
        self.runner = runner

    def build_dir(self, config: BuildConfiguration) -> Path:
        return self.v8_dir / config.out_dir

    def args_file(self, config: BuildConfiguration) -> Path:
        """The args.gn written by the generator."""
        return self.build_dir(config) / "args.gn"

    def generate(self, config: BuildConfiguration) -> Path:
        """Materializes the build directory for config.

        Returns:
            The build directory.

        Raises:
            ConfigGenerationError: gn rejected the arguments.
        """
        logger().info("Generating %s", config.out_dir)
        cmd = [
            "python3",
            "tools/dev/v8gen.py",
            "-b",
            V8GEN_BUILDER,
            config.out_dir_name,
            "--",
        ] + config.gn_args()
        try:
            self.runner.run(cmd, cwd=self.v8_dir)
        except CommandFailedError as ex:
            raise ConfigGenerationError.wrap(
                f"Could not generate {config.out_dir}", ex
            ) from ex
        return self.build_dir(config)

    def describe_defines(self, config: BuildConfiguration) -> str:
        """Returns the preprocessor defines of the monolith target."""
        return self._gn_query(
            ["gn", "desc", str(config.out_dir), f"//:{MONOLITH_TARGET}", "defines"]
        )

    def list_args(self, config: BuildConfiguration) -> str:
        """Returns every argument gn recognizes with its resolved value."""
        return self._gn_query(["gn", "args", str(config.out_dir), "--list"])

    def _gn_query(self, cmd: List[str]) -> str:
        try:
            return self.runner.run_piped(cmd, cwd=self.v8_dir)
        except CommandFailedError as ex:
            raise ConfigGenerationError.wrap("gn query failed", ex) from ex
