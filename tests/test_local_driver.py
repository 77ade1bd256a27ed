from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

import pytest

from nvidia_update_checker.errors import LocalArtifactMissing, ParseFailure
from services import local_driver
from services.local_driver import find_nvidia_smi, get_installed_driver_version


class FakeRunner:
    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.commands: list[tuple[str, ...]] = []

    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        self.commands.append(tuple(command))
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


def test_reads_first_gpu_driver_version() -> None:
    runner = FakeRunner("552.22\n552.22\n")
    assert get_installed_driver_version(runner=runner, executable="nvidia-smi") == 55222
    assert runner.commands == [("nvidia-smi", "--query-gpu=driver_version", "--format=csv,noheader")]


def test_missing_executable_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(local_driver, "find_nvidia_smi", lambda: None)
    with pytest.raises(LocalArtifactMissing) as excinfo:
        get_installed_driver_version(runner=FakeRunner("552.22"))
    assert excinfo.value.exit_code == 2


def test_failing_executable_is_fatal() -> None:
    runner = FakeRunner(returncode=9, stderr="NVIDIA-SMI has failed")
    with pytest.raises(LocalArtifactMissing):
        get_installed_driver_version(runner=runner, executable="nvidia-smi")


@pytest.mark.parametrize("stdout", ["", "\n", "[N/A]\n"])
def test_unreadable_output_is_a_parse_failure(stdout: str) -> None:
    with pytest.raises(ParseFailure):
        get_installed_driver_version(runner=FakeRunner(stdout), executable="nvidia-smi")


def test_find_nvidia_smi_falls_back_to_known_locations(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(local_driver.shutil, "which", lambda name: None)
    candidate = tmp_path / "NVSMI" / "nvidia-smi.exe"
    assert find_nvidia_smi([candidate]) is None
    candidate.parent.mkdir()
    candidate.write_text("")
    assert find_nvidia_smi([tmp_path / "missing.exe", candidate]) == str(candidate)
