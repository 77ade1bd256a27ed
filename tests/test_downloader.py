from __future__ import annotations

from pathlib import Path

import pytest
import requests

from nvidia_update_checker.errors import NetworkFailure
from services.downloader import default_destination, download_driver, driver_file_name

URL = "https://us.download.nvidia.com/Windows/552.22/552.22-desktop-win10-win11-64bit-international-dch-whql.exe"


class FakeStreamResponse:
    def __init__(self, chunks: list[bytes], status_code: int = 200) -> None:
        self.chunks = chunks
        self.status_code = status_code
        self.headers = {"Content-Length": str(sum(len(c) for c in chunks))}

    def __enter__(self) -> "FakeStreamResponse":
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Not Found")

    def iter_content(self, chunk_size: int):
        yield from self.chunks


class FakeSession:
    def __init__(self, response: FakeStreamResponse) -> None:
        self.response = response
        self.kwargs: dict = {}

    def get(self, url: str, **kwargs) -> FakeStreamResponse:
        self.kwargs = kwargs
        return self.response


def test_driver_file_name() -> None:
    assert driver_file_name(URL) == "552.22-desktop-win10-win11-64bit-international-dch-whql.exe"
    assert driver_file_name("https://us.download.nvidia.com/") == "nvidia-driver.exe"
    assert default_destination(URL).name == driver_file_name(URL)


def test_download_writes_file_and_reports_progress(tmp_path: Path) -> None:
    session = FakeSession(FakeStreamResponse([b"MZ", b"", b"driver"]))
    progress: list[tuple[int, int]] = []
    dest = tmp_path / "out" / "driver.exe"
    saved = download_driver(URL, dest, session=session, progress_callback=lambda done, total: progress.append((done, total)))
    assert saved == dest
    assert dest.read_bytes() == b"MZdriver"
    assert not (tmp_path / "out" / "driver.exe.download").exists()
    assert progress == [(2, 8), (8, 8)]
    assert session.kwargs["stream"] is True


def test_download_failure_removes_partial_file(tmp_path: Path) -> None:
    session = FakeSession(FakeStreamResponse([b"partial"], status_code=404))
    dest = tmp_path / "driver.exe"
    with pytest.raises(NetworkFailure):
        download_driver(URL, dest, session=session)
    assert not dest.exists()
    assert not (tmp_path / "driver.exe.download").exists()


def test_unwritable_destination_is_reported_as_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    session = FakeSession(FakeStreamResponse([b"MZ"]))
    with pytest.raises(NetworkFailure):
        download_driver(URL, blocker / "driver.exe", session=session)
    assert blocker.read_text() == "not a directory"
