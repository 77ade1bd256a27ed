"""NVIDIA driver lookup: catalog query, product page, confirmation page."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Protocol, TypeVar
from urllib.parse import urlencode, urljoin

import requests
from bs4 import BeautifulSoup

from nvidia_update_checker.constants import IMMUTABLE_CONFIG, CatalogConfig, ProductSelection
from nvidia_update_checker.errors import NetworkFailure, ParseFailure
from services.platform_identity import PlatformIdentity
from services.version import Comparison, compare, extract_version_prefix, normalize

logger = logging.getLogger(__name__)

T = TypeVar("T")

STAGE_CATALOG = "catalog"
STAGE_PRODUCT_PAGE = "product_page"
STAGE_PRODUCT_VERSION = "product_page:version"
STAGE_PRODUCT_LINK = "product_page:confirmation_link"
STAGE_CONFIRMATION = "confirmation_page"


@dataclass(frozen=True)
class DriverQuery:
    series_id: int
    product_id: int
    os_id: int
    lang_id: int

    @classmethod
    def for_gpu(cls, selection: ProductSelection, identity: PlatformIdentity) -> "DriverQuery":
        return cls(
            series_id=selection.series_id,
            product_id=selection.product_id,
            os_id=identity.os_id,
            lang_id=identity.lang_id,
        )


@dataclass
class StageFailure:
    stage: str
    url: str | None
    message: str


@dataclass
class DriverResolutionResult:
    remote_version: int | None = None
    download_url: str | None = None
    catalog_url: str | None = None
    product_page_url: str | None = None
    confirmation_url: str | None = None
    failures: list[StageFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and self.remote_version is not None and self.download_url is not None


class UpdateStatus(Enum):
    UPDATE_AVAILABLE = "update_available"
    UP_TO_DATE = "up_to_date"
    LOCAL_NEWER = "local_newer"
    UNKNOWN = "unknown"


def evaluate_update(local_version: int | None, remote_version: int | None) -> UpdateStatus:
    if local_version is None or remote_version is None:
        return UpdateStatus.UNKNOWN
    result = compare(remote_version, local_version)
    if result is Comparison.GREATER:
        return UpdateStatus.UPDATE_AVAILABLE
    if result is Comparison.LESS:
        return UpdateStatus.LOCAL_NEWER
    return UpdateStatus.UP_TO_DATE


class PageFetcher(Protocol):
    def get_text(self, url: str) -> str:  # pragma: no cover - protocol
        ...


class RequestsFetcher:
    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        config: CatalogConfig = IMMUTABLE_CONFIG.catalog,
    ) -> None:
        self._session = session or requests.Session()
        self._headers = {"User-Agent": config.user_agent}
        self._timeout = config.timeout

    def get_text(self, url: str) -> str:
        try:
            response = self._session.get(url, headers=self._headers, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkFailure(f"Request to {url} failed: {exc}") from exc
        return response.text


def build_catalog_url(query: DriverQuery, *, config: CatalogConfig = IMMUTABLE_CONFIG.catalog) -> str:
    params = [
        ("psid", query.series_id),
        ("pfid", query.product_id),
        ("rpf", config.rpf),
        ("osid", query.os_id),
        ("lid", query.lang_id),
        ("ctk", config.ctk),
    ]
    return f"{config.vendor_host}{config.process_driver_path}?{urlencode(params)}"


def _absolute_url(href: str, base: str) -> str:
    if href.startswith("//"):
        return "https:" + href
    return urljoin(base + "/", href)


def find_single_element_text(html: str, element_id: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    matches = soup.find_all(id=element_id)
    if len(matches) != 1:
        raise ParseFailure(f"Expected exactly one element with id '{element_id}', found {len(matches)}")
    return matches[0].get_text(strip=True)


def find_single_link(html: str, fragment: str) -> str:
    """Return the only distinct ``<a href>`` containing ``fragment``.

    A page repeating the same link is not ambiguous; two different targets are.
    """
    soup = BeautifulSoup(html, "html.parser")
    targets: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if fragment in href and href not in targets:
            targets.append(href)
    if len(targets) != 1:
        raise ParseFailure(f"Expected exactly one link containing '{fragment}', found {len(targets)}")
    return targets[0]


class DriverResolver:
    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        *,
        config: CatalogConfig = IMMUTABLE_CONFIG.catalog,
    ) -> None:
        self._config = config
        self._fetcher = fetcher or RequestsFetcher(config=config)

    def resolve(self, query: DriverQuery) -> DriverResolutionResult:
        catalog_url = build_catalog_url(query, config=self._config)
        result = DriverResolutionResult(catalog_url=catalog_url)
        logger.debug("Resolving driver for %s", query)

        result.product_page_url = self._run_stage(result, STAGE_CATALOG, catalog_url, self._query_catalog)
        if result.product_page_url is None:
            return result

        try:
            page = self._fetcher.get_text(result.product_page_url)
        except (NetworkFailure, ParseFailure) as exc:
            self._record(result, STAGE_PRODUCT_PAGE, result.product_page_url, exc)
            return result

        result.remote_version = self._run_stage(
            result, STAGE_PRODUCT_VERSION, result.product_page_url, lambda _: self._extract_version(page)
        )
        result.confirmation_url = self._run_stage(
            result, STAGE_PRODUCT_LINK, result.product_page_url, lambda _: self._extract_confirmation_url(page)
        )
        if result.confirmation_url is None:
            return result

        result.download_url = self._run_stage(
            result, STAGE_CONFIRMATION, result.confirmation_url, self._fetch_download_url
        )
        return result

    def _run_stage(
        self,
        result: DriverResolutionResult,
        stage: str,
        url: str,
        step: Callable[[str], T],
    ) -> T | None:
        try:
            return step(url)
        except (NetworkFailure, ParseFailure) as exc:
            self._record(result, stage, url, exc)
            return None

    def _record(self, result: DriverResolutionResult, stage: str, url: str | None, exc: Exception) -> None:
        logger.error("Driver lookup stage '%s' failed for %s: %s", stage, url, exc, exc_info=exc)
        result.failures.append(StageFailure(stage=stage, url=url, message=str(exc)))

    def _query_catalog(self, catalog_url: str) -> str:
        body = self._fetcher.get_text(catalog_url).strip()
        if not body:
            raise ParseFailure("Catalog query returned an empty body")
        if "<" in body or any(ch.isspace() for ch in body):
            raise ParseFailure(f"Catalog query did not return a URL: {body[:80]!r}")
        return _absolute_url(body, self._config.vendor_host)

    def _extract_version(self, page: str) -> int:
        text = find_single_element_text(page, self._config.version_element_id)
        return normalize(extract_version_prefix(text))

    def _extract_confirmation_url(self, page: str) -> str:
        href = find_single_link(page, self._config.confirmation_link_fragment)
        return _absolute_url(href, self._config.vendor_host)

    def _fetch_download_url(self, confirmation_url: str) -> str:
        page = self._fetcher.get_text(confirmation_url)
        href = find_single_link(page, self._config.download_link_fragment)
        return _absolute_url(href, self._config.vendor_host)
