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
"""Tests for v8android.artifacts."""
from pathlib import Path
import tempfile
import unittest
import zipfile

import pytest

from v8android.artifacts import (
    ARGS_GN,
    ARTIFACT_NAMES,
    BUILD_FLAGS,
    GN_ARGS_LIST,
    HEADERS_ZIP,
    LIBRARY,
    capture_build_provenance,
    clear,
    collect,
    find_missing,
    verify,
)
from v8android.errors import ArtifactMissingError, ConfigGenerationError
from v8android.gn import BuildConfiguration, GnProject, PlatformBits
from v8android.testing.fake_tools import FAKE_ARGS_LIST, FAKE_DEFINES, FakeRunner


def make_project(tmp_path: Path, runner: FakeRunner) -> GnProject:
    v8_dir = tmp_path / "v8"
    (v8_dir / "include/cppgc").mkdir(parents=True)
    (v8_dir / "include/v8.h").write_text("#pragma once\n")
    (v8_dir / "include/cppgc/heap.h").write_text("#pragma once\n")
    return GnProject(v8_dir, runner)


class ArtifactsTest(unittest.TestCase):
    def setUp(self) -> None:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.tmp_path = Path(temp_dir.name)
        self.artifacts_dir = self.tmp_path / "artifacts"
        self.artifacts_dir.mkdir()
        self.runner = FakeRunner()
        self.project = make_project(self.tmp_path, self.runner)
        self.config = BuildConfiguration.for_platform(
            PlatformBits.ARM64, self.tmp_path / "ndk"
        )

    def test_capture_build_provenance(self) -> None:
        self.project.generate(self.config)
        capture_build_provenance(self.project, self.config, self.artifacts_dir)
        self.assertEqual(
            FAKE_DEFINES, (self.artifacts_dir / BUILD_FLAGS).read_text()
        )
        self.assertEqual(
            FAKE_ARGS_LIST, (self.artifacts_dir / GN_ARGS_LIST).read_text()
        )
        self.assertEqual(
            self.project.args_file(self.config).read_text(),
            (self.artifacts_dir / ARGS_GN).read_text(),
        )

    def test_provenance_is_overwritten(self) -> None:
        self.project.generate(self.config)
        (self.artifacts_dir / BUILD_FLAGS).write_text("from a previous run\n")
        capture_build_provenance(self.project, self.config, self.artifacts_dir)
        self.assertEqual(
            FAKE_DEFINES, (self.artifacts_dir / BUILD_FLAGS).read_text()
        )

    def test_provenance_requires_args_gn(self) -> None:
        with self.assertRaises(ArtifactMissingError):
            capture_build_provenance(self.project, self.config, self.artifacts_dir)

    def test_provenance_gn_failure(self) -> None:
        runner = FakeRunner(program_failures={"gn": 1})
        project = GnProject(self.project.v8_dir, runner)
        with self.assertRaises(ConfigGenerationError):
            capture_build_provenance(project, self.config, self.artifacts_dir)

    def test_collect(self) -> None:
        library = self.project.build_dir(self.config) / "obj" / LIBRARY
        library.parent.mkdir(parents=True)
        library.write_bytes(b"!<arch>\n")
        collect(self.project, self.config, self.artifacts_dir, self.runner)

        self.assertEqual(b"!<arch>\n", (self.artifacts_dir / LIBRARY).read_bytes())
        with zipfile.ZipFile(self.artifacts_dir / HEADERS_ZIP) as archive:
            names = set(archive.namelist())
        self.assertIn("include/v8.h", names)
        self.assertIn("include/cppgc/heap.h", names)
        self.assertEqual(
            [f"zip -9qr --symlinks {self.artifacts_dir / HEADERS_ZIP} include"],
            self.runner.lines(),
        )

    def test_collect_without_library(self) -> None:
        with self.assertRaisesRegex(ArtifactMissingError, LIBRARY):
            collect(self.project, self.config, self.artifacts_dir, self.runner)
        self.assertFalse((self.artifacts_dir / HEADERS_ZIP).exists())

    def test_unwritable_artifacts_dir(self) -> None:
        library = self.project.build_dir(self.config) / "obj" / LIBRARY
        library.parent.mkdir(parents=True)
        library.write_bytes(b"!<arch>\n")
        self.artifacts_dir.rmdir()
        with self.assertRaisesRegex(ArtifactMissingError, "Could not write"):
            capture_build_provenance(self.project, self.config, self.artifacts_dir)
        with self.assertRaisesRegex(ArtifactMissingError, "Could not copy"):
            collect(self.project, self.config, self.artifacts_dir, self.runner)

    def test_clear(self) -> None:
        for name in ARTIFACT_NAMES:
            (self.artifacts_dir / name).write_text("old")
        (self.artifacts_dir / "notes.txt").write_text("keep")
        clear(self.artifacts_dir)
        self.assertEqual(
            ["notes.txt"], [p.name for p in self.artifacts_dir.iterdir()]
        )
        clear(self.artifacts_dir)


def test_verify(tmp_path: Path) -> None:
    assert find_missing(tmp_path) == list(ARTIFACT_NAMES)
    with pytest.raises(ArtifactMissingError):
        verify(tmp_path)

    for name in ARTIFACT_NAMES:
        (tmp_path / name).write_text("x")
    verify(tmp_path)

    (tmp_path / ARGS_GN).write_text("")
    (tmp_path / LIBRARY).unlink()
    with pytest.raises(ArtifactMissingError, match=f"{LIBRARY}, {ARGS_GN}"):
        verify(tmp_path)
