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
"""End to end tests of the build pipeline against simulated tools."""
import os
from pathlib import Path
from typing import List, Optional

import pytest

import v8android.pipeline
from v8android.artifacts import ARTIFACT_NAMES, verify
from v8android.errors import (
    AcquisitionError,
    ArtifactMissingError,
    BuildError,
    PipelineError,
    PrerequisiteInstallError,
)
from v8android.gn import PlatformBits
from v8android.hosts import Host
from v8android.paths import WorkspaceLayout
from v8android.pipeline import InvocationParameters, Pipeline, main
from v8android.source import SyncOutcome
from v8android.testing.fake_tools import FakeNdkDownloader, FakeRunner


def make_pipeline(
    tmp_path: Path, runner: FakeRunner, bits: PlatformBits = PlatformBits.ARM64
) -> Pipeline:
    params = InvocationParameters(bits, "branch-heads/13.6", "r28c")
    return Pipeline(
        params,
        WorkspaceLayout(tmp_path / "ws"),
        runner=runner,
        downloader=FakeNdkDownloader(),
        host=Host.Linux,
    )


def v8gen_calls(runner: FakeRunner) -> List[str]:
    return [line for line in runner.lines() if line.startswith("python3 ")]


@pytest.mark.parametrize(
    "bits,out_dir_name",
    [(PlatformBits.ARM64, "arm64.release"), (PlatformBits.ARM32, "arm32.release")],
)
def test_full_run(tmp_path: Path, bits: PlatformBits, out_dir_name: str) -> None:
    runner = FakeRunner()
    pipeline = make_pipeline(tmp_path, runner, bits)
    config = pipeline.run()

    assert config.out_dir_name == out_dir_name
    layout = pipeline.layout
    for name in ARTIFACT_NAMES:
        path = layout.artifacts_dir / name
        assert path.is_file(), name
        assert path.stat().st_size > 0, name

    args_gn = (layout.artifacts_dir / "args.gn").read_text()
    assert f'android_ndk_root="{layout.ndk_dir}"' in args_gn
    if bits is PlatformBits.ARM64:
        assert 'target_cpu="arm64"' in args_gn
    else:
        assert "target_cpu" not in args_gn

    assert (layout.ndk_dir / "source.properties").is_file()
    assert pipeline.full_sync_outcome is SyncOutcome.SUCCEEDED
    assert runner.ran(f"ninja -C out.gn/{out_dir_name} v8_monolith")
    assert [description for description, _ in pipeline.timings] == [
        "Installing system packages",
        "Creating workspace",
        "Setting up depot_tools",
        "Fetching V8",
        "Setting up NDK",
        "Generating V8 configuration",
        "Building V8",
        "Copying artifacts",
    ]


def test_step_order(tmp_path: Path) -> None:
    runner = FakeRunner()
    make_pipeline(tmp_path, runner).run()
    programs = [line.split()[0] for line in runner.lines()]
    expected = [
        "apt-get",
        "git",
        "gclient",
        "fetch",
        "debconf-set-selections",
        "install-build-deps.sh",
        "unzip",
        "python3",
        "gn",
        "ninja",
        "zip",
    ]
    positions = [programs.index(program) for program in expected]
    assert positions == sorted(positions)


def test_depot_tools_on_path(tmp_path: Path) -> None:
    runner = FakeRunner()
    pipeline = make_pipeline(tmp_path, runner)
    pipeline.run()
    depot_tools = str(pipeline.layout.depot_tools_dir)
    for call in runner.calls:
        if call.line.startswith(("fetch ", "gclient ", "gn ", "ninja ")):
            assert call.path_env.split(os.pathsep)[0] == depot_tools
    assert os.environ.get("PATH", "").split(os.pathsep)[0] != depot_tools


def test_build_flags_are_echoed(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    make_pipeline(tmp_path, FakeRunner()).run()
    out = capsys.readouterr().out
    assert "Build flags" in out
    assert "V8_MONOLITHIC" in out


def test_rerun_reuses_checkouts(tmp_path: Path) -> None:
    make_pipeline(tmp_path, FakeRunner()).run()
    runner = FakeRunner()
    make_pipeline(tmp_path, runner).run()
    assert not runner.ran_any("fetch")
    assert not any(line.startswith("git clone") for line in runner.lines())
    assert runner.ran("git checkout branch-heads/13.6")
    assert runner.ran_any("ninja")


def test_full_sync_failure_is_tolerated(tmp_path: Path) -> None:
    runner = FakeRunner(failures={"gclient sync --deps=all": 1})
    pipeline = make_pipeline(tmp_path, runner)
    pipeline.run()
    assert pipeline.full_sync_outcome is SyncOutcome.TOLERATED_FAILURE
    assert v8gen_calls(runner)
    assert runner.ran_any("gn")


def test_sync_failure_is_fatal(tmp_path: Path) -> None:
    runner = FakeRunner(failures={"gclient sync": 5})
    with pytest.raises(AcquisitionError) as excinfo:
        make_pipeline(tmp_path, runner).run()
    assert excinfo.value.exit_code == 5
    assert not v8gen_calls(runner)
    assert not runner.ran_any("unzip")


def test_build_deps_failure_is_fatal(tmp_path: Path) -> None:
    runner = FakeRunner(program_failures={"install-build-deps.sh": 100})
    with pytest.raises(PrerequisiteInstallError) as excinfo:
        make_pipeline(tmp_path, runner).run()
    assert excinfo.value.exit_code == 100
    assert not v8gen_calls(runner)


def test_build_failure(tmp_path: Path) -> None:
    runner = FakeRunner(program_failures={"ninja": 3})
    pipeline = make_pipeline(tmp_path, runner)
    with pytest.raises(BuildError) as excinfo:
        pipeline.run()
    assert excinfo.value.exit_code == 3
    artifacts_dir = pipeline.layout.artifacts_dir
    assert not (artifacts_dir / "libv8_monolith.a").exists()
    assert not (artifacts_dir / "include.zip").exists()
    assert not runner.ran_any("zip")
    # Provenance is captured before the build starts.
    assert (artifacts_dir / "args.gn").is_file()


def test_failed_rerun_drops_previous_artifacts(tmp_path: Path) -> None:
    pipeline = make_pipeline(tmp_path, FakeRunner())
    pipeline.run()
    artifacts_dir = pipeline.layout.artifacts_dir
    assert (artifacts_dir / "libv8_monolith.a").is_file()

    runner = FakeRunner(program_failures={"ninja": 3})
    with pytest.raises(BuildError):
        make_pipeline(tmp_path, runner, PlatformBits.ARM32).run()
    assert not (artifacts_dir / "libv8_monolith.a").exists()
    assert not (artifacts_dir / "include.zip").exists()
    assert "target_cpu" not in (artifacts_dir / "args.gn").read_text()
    with pytest.raises(ArtifactMissingError):
        verify(artifacts_dir)


def test_working_directory_is_restored(tmp_path: Path) -> None:
    cwd = os.getcwd()
    runner = FakeRunner(program_failures={"ninja": 3})
    with pytest.raises(BuildError):
        make_pipeline(tmp_path, runner).run()
    assert os.getcwd() == cwd


def test_non_linux_host_is_rejected(tmp_path: Path) -> None:
    runner = FakeRunner()
    pipeline = make_pipeline(tmp_path, runner)
    pipeline.host = Host.Darwin
    with pytest.raises(PrerequisiteInstallError):
        pipeline.run()
    assert not runner.calls
    assert not pipeline.layout.root.exists()


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["64"],
        ["64", "branch-heads/13.6"],
        ["64", "branch-heads/13.6", "r28c", "extra"],
        ["128", "branch-heads/13.6", "r28c"],
        ["arm64", "branch-heads/13.6", "r28c"],
        ["64", "", "r28c"],
        ["64", "branch-heads/13.6", ""],
    ],
)
def test_usage_errors(tmp_path: Path, argv: List[str]) -> None:
    workspace = tmp_path / "ws"
    with pytest.raises(SystemExit) as excinfo:
        main(["--working-directory", str(workspace)] + argv)
    assert excinfo.value.code == 1
    assert not workspace.exists()


class FailingPipeline:
    def __init__(self, *args: object, **kwargs: object) -> None:
        pass

    def run(self) -> None:
        raise BuildError("ninja failed", exit_code=3)

    def log_timings(self) -> None:
        pass


class RecordingPipeline:
    instances: List["RecordingPipeline"] = []

    def __init__(
        self,
        params: InvocationParameters,
        layout: WorkspaceLayout,
        jobs: Optional[int],
    ) -> None:
        self.params = params
        self.layout = layout
        self.jobs = jobs
        RecordingPipeline.instances.append(self)

    def run(self) -> None:
        pass

    def log_timings(self) -> None:
        pass


def test_pipeline_error_exit_status(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(v8android.pipeline, "Pipeline", FailingPipeline)
    with pytest.raises(SystemExit) as excinfo:
        main(["--working-directory", str(tmp_path), "64", "main", "r28c"])
    assert excinfo.value.code == 3
    assert issubclass(BuildError, PipelineError)


def test_arguments_reach_pipeline(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(v8android.pipeline, "Pipeline", RecordingPipeline)
    monkeypatch.setattr(RecordingPipeline, "instances", [])
    main(["-j", "8", "--working-directory", str(tmp_path), "32", "main", "r27"])
    (pipeline,) = RecordingPipeline.instances
    assert pipeline.params == InvocationParameters(PlatformBits.ARM32, "main", "r27")
    assert pipeline.layout.root == tmp_path.resolve()
    assert pipeline.jobs == 8


def test_workspace_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(v8android.pipeline, "Pipeline", RecordingPipeline)
    monkeypatch.setattr(RecordingPipeline, "instances", [])
    monkeypatch.setenv("V8_BUILD_ROOT", str(tmp_path))
    main(["64", "branch-heads/13.6", "r28c"])
    (pipeline,) = RecordingPipeline.instances
    assert pipeline.layout.root == tmp_path.resolve()


def test_trampoline_is_executable() -> None:
    script = Path(__file__).resolve().parent.parent / "build_v8.py"
    assert script.read_text().startswith("#!/usr/bin/env python3\n")
    assert os.access(script, os.X_OK)
