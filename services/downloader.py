"""Fetch the resolved driver package to disk."""
from __future__ import annotations

import logging
import tempfile
from pathlib import Path, PurePosixPath
from typing import Callable
from urllib.parse import urlparse

import requests

from nvidia_update_checker.constants import IMMUTABLE_CONFIG
from nvidia_update_checker.errors import NetworkFailure

logger = logging.getLogger(__name__)

CHUNK_SIZE = 81920


def driver_file_name(url: str) -> str:
    name = PurePosixPath(urlparse(url).path).name
    return name or "nvidia-driver.exe"


def default_destination(url: str) -> Path:
    return Path(tempfile.gettempdir()) / driver_file_name(url)


def download_driver(
    url: str,
    destination: Path,
    *,
    session: requests.Session | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> Path:
    session = session or requests.Session()
    temp_path = destination.with_suffix(destination.suffix + ".download")
    headers = {"User-Agent": IMMUTABLE_CONFIG.catalog.user_agent}
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with session.get(url, headers=headers, stream=True, timeout=IMMUTABLE_CONFIG.catalog.timeout) as response:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length", 0) or 0)
            received = 0
            with temp_path.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    handle.write(chunk)
                    received += len(chunk)
                    if progress_callback:
                        progress_callback(received, total)
        temp_path.replace(destination)
    except (requests.RequestException, OSError) as exc:
        if temp_path.exists():
            temp_path.unlink()
        raise NetworkFailure(f"Download failed for {url}: {exc}") from exc
    logger.info("Downloaded %s to %s", url, destination)
    return destination
