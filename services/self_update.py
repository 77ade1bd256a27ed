"""Check the hosted page for a newer release of this tool."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from nvidia_update_checker.constants import APP_VERSION, IMMUTABLE_CONFIG, SelfUpdateConfig
from nvidia_update_checker.errors import NetworkFailure, ParseFailure
from services.drivers import PageFetcher, RequestsFetcher, find_single_element_text
from services.version import Comparison, align_segments, compare, normalize

logger = logging.getLogger(__name__)


@dataclass
class SelfUpdateResult:
    current_version: int
    remote_version: int | None
    update_available: bool
    release_url: str
    error: str | None = None


class SelfUpdateChecker:
    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        *,
        current_version: str = APP_VERSION,
        config: SelfUpdateConfig = IMMUTABLE_CONFIG.self_update,
    ) -> None:
        self._fetcher = fetcher or RequestsFetcher()
        self._current_version = current_version
        self._config = config

    def check(self) -> SelfUpdateResult:
        current = normalize(self._current_version)
        try:
            page = self._fetcher.get_text(self._config.page_url)
            local_text, remote_text = align_segments(
                self._current_version, find_single_element_text(page, self._config.version_element_id)
            )
            current, remote = normalize(local_text), normalize(remote_text)
        except (NetworkFailure, ParseFailure) as exc:
            logger.error("Self-update check against %s failed: %s", self._config.page_url, exc, exc_info=exc)
            return SelfUpdateResult(
                current_version=current,
                remote_version=None,
                update_available=False,
                release_url=self._config.release_page_url,
                error=str(exc),
            )

        logger.debug("Self-update: local %s, remote %s", current, remote)
        return SelfUpdateResult(
            current_version=current,
            remote_version=remote,
            update_available=compare(remote, current) is Comparison.GREATER,
            release_url=self._config.release_page_url,
        )
