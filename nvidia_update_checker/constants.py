"""Immutable settings for the NVIDIA catalog and the self-update host."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Mapping, Tuple

APP_NAME: Final[str] = "TinyNvidiaUpdateChecker"
APP_VERSION: Final[str] = "1.6.0"


@dataclass(frozen=True)
class ProductSelection:
    series_id: int
    product_id: int
    description: str


@dataclass(frozen=True)
class OsSignature:
    prefix: str
    name: str
    os_id_64: int
    os_id_32: int


@dataclass(frozen=True)
class CatalogConfig:
    vendor_host: str
    process_driver_path: str
    rpf: int
    ctk: int
    version_element_id: str
    confirmation_link_fragment: str
    download_link_fragment: str
    user_agent: str
    timeout: int


@dataclass(frozen=True)
class PlatformTables:
    os_signatures: Tuple[OsSignature, ...]
    languages: Mapping[str, int]
    international_lang_id: int


@dataclass(frozen=True)
class SelfUpdateConfig:
    page_url: str
    version_element_id: str
    release_page_url: str


@dataclass(frozen=True)
class ImmutableConfig:
    catalog: CatalogConfig
    platform: PlatformTables
    self_update: SelfUpdateConfig
    gpu_types: Mapping[str, ProductSelection] = field(default_factory=dict)


CATALOG_CONFIG = CatalogConfig(
    vendor_host="https://www.nvidia.com",
    process_driver_path="/Download/processDriver.aspx",
    rpf=1,
    ctk=0,
    version_element_id="tdVersion",
    confirmation_link_fragment="/content/DriverDownload-March2009/",
    download_link_fragment="download.nvidia",
    user_agent=f"Mozilla/5.0 (compatible; {APP_NAME}/{APP_VERSION})",
    timeout=30,
)

# The same driver package covers the whole GeForce family, so one series/product
# pair per form factor is enough to select it.
GPU_TYPES: Mapping[str, ProductSelection] = {
    "desktop": ProductSelection(series_id=98, product_id=756, description="GeForce 900 Series (GTX 970)"),
    "mobile": ProductSelection(series_id=99, product_id=758, description="GeForce 900M Series (GTX 970M)"),
}

PLATFORM_TABLES = PlatformTables(
    os_signatures=(
        OsSignature(prefix="10.0", name="10", os_id_64=57, os_id_32=56),
        OsSignature(prefix="6.3", name="8.1", os_id_64=41, os_id_32=40),
        OsSignature(prefix="6.2", name="8", os_id_64=41, os_id_32=40),
        OsSignature(prefix="6.1", name="7", os_id_64=41, os_id_32=40),
    ),
    languages={
        "en-us": 1,
        "en-gb": 2,
        "zh-chs": 5,
        "zh-cn": 5,
        "zh-sg": 5,
        "zh-cht": 6,
        "zh-tw": 6,
        "zh-hk": 6,
        "ja-jp": 7,
        "ko-kr": 8,
        "de-de": 9,
        "es-es": 10,
        "fr-fr": 12,
        "it-it": 13,
        "pl-pl": 14,
        "pt-br": 15,
        "ru-ru": 16,
        "tr-tr": 19,
    },
    international_lang_id=17,
)

SELF_UPDATE_CONFIG = SelfUpdateConfig(
    page_url="https://elpumpo.github.io/TinyNvidiaUpdateChecker/",
    version_element_id="currentVersion",
    release_page_url="https://github.com/ElPumpo/TinyNvidiaUpdateChecker/releases",
)

IMMUTABLE_CONFIG = ImmutableConfig(
    catalog=CATALOG_CONFIG,
    platform=PLATFORM_TABLES,
    self_update=SELF_UPDATE_CONFIG,
    gpu_types=GPU_TYPES,
)
