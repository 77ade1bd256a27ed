"""Installed NVIDIA driver version, read through nvidia-smi."""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from nvidia_update_checker.errors import LocalArtifactMissing, ParseFailure
from services.version import normalize

logger = logging.getLogger(__name__)

NVIDIA_SMI = "nvidia-smi"
QUERY_ARGS = ("--query-gpu=driver_version", "--format=csv,noheader")


class CommandRunner(Protocol):
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:  # pragma: no cover - protocol
        ...


class SubprocessRunner:
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(command, capture_output=True, text=True, check=False, timeout=30)


def _candidate_paths() -> list[Path]:
    program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
    system_root = os.environ.get("SystemRoot", r"C:\Windows")
    return [
        Path(program_files) / "NVIDIA Corporation" / "NVSMI" / "nvidia-smi.exe",
        Path(system_root) / "System32" / "nvidia-smi.exe",
    ]


def find_nvidia_smi(candidates: Sequence[Path] | None = None) -> str | None:
    found = shutil.which(NVIDIA_SMI)
    if found:
        return found
    for path in candidates if candidates is not None else _candidate_paths():
        if path.is_file():
            return str(path)
    return None


def get_installed_driver_version(
    *,
    runner: CommandRunner | None = None,
    executable: str | None = None,
) -> int:
    executable = executable or find_nvidia_smi()
    if not executable:
        raise LocalArtifactMissing(
            "nvidia-smi was not found. Are you sure NVIDIA GPU drivers have been installed at least once?"
        )
    runner = runner or SubprocessRunner()
    try:
        result = runner.run([executable, *QUERY_ARGS])
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise LocalArtifactMissing(f"Failed to run {executable}: {exc}") from exc
    if result.returncode != 0:
        raise LocalArtifactMissing(f"{executable} exited with {result.returncode}: {result.stderr.strip()}")

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if not lines:
        raise ParseFailure(f"{executable} reported no driver version")
    # every GPU reports the same driver; the first line is enough
    version = normalize(lines[0])
    logger.info("Installed driver version %s (%s)", lines[0], version)
    return version
