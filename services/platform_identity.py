"""Map the local Windows version and UI locale to NVIDIA catalog identifiers."""
from __future__ import annotations

import ctypes
import locale
import logging
import platform
from dataclasses import dataclass

from nvidia_update_checker.constants import IMMUTABLE_CONFIG, PlatformTables
from nvidia_update_checker.errors import PlatformUnsupported

logger = logging.getLogger(__name__)

LOCALE_NAME_MAX_LENGTH = 85


@dataclass(frozen=True)
class PlatformIdentity:
    os_id: int
    lang_id: int
    os_name: str = ""
    locale_tag: str = ""


def _match_signature(os_version: str, tables: PlatformTables):
    version = (os_version or "").strip()
    for signature in tables.os_signatures:
        if version == signature.prefix or version.startswith(signature.prefix + "."):
            return signature
    return None


def resolve_os(os_version: str, is_64bit: bool, *, tables: PlatformTables = IMMUTABLE_CONFIG.platform) -> int:
    signature = _match_signature(os_version, tables)
    if signature is None:
        raise PlatformUnsupported(f"Unsupported Windows version: {os_version!r}")
    return signature.os_id_64 if is_64bit else signature.os_id_32


def resolve_language(locale_tag: str | None, *, tables: PlatformTables = IMMUTABLE_CONFIG.platform) -> int:
    tag = (locale_tag or "").strip().replace("_", "-").lower()
    # "en-US.UTF-8" style POSIX names carry an encoding suffix
    tag = tag.split(".", 1)[0]
    return tables.languages.get(tag, tables.international_lang_id)


def _windows_locale_name() -> str | None:
    try:
        buffer = ctypes.create_unicode_buffer(LOCALE_NAME_MAX_LENGTH)
        if ctypes.windll.kernel32.GetUserDefaultLocaleName(buffer, LOCALE_NAME_MAX_LENGTH):
            return buffer.value
    except AttributeError:
        return None
    return None


def get_ui_locale() -> str:
    name = _windows_locale_name() if platform.system() == "Windows" else None
    if not name:
        name = locale.getlocale()[0]
    return name or ""


def is_64bit_os() -> bool:
    machine = platform.machine().lower()
    return machine.endswith("64") or machine in {"arm64", "aarch64"}


def detect_platform_identity(
    *,
    system: str | None = None,
    os_version: str | None = None,
    is_64bit: bool | None = None,
    locale_tag: str | None = None,
    tables: PlatformTables = IMMUTABLE_CONFIG.platform,
) -> PlatformIdentity:
    system = system if system is not None else platform.system()
    if system != "Windows":
        raise PlatformUnsupported(f"Unsupported operating system: {system}")
    os_version = os_version if os_version is not None else platform.version()
    is_64bit = is_64bit if is_64bit is not None else is_64bit_os()
    locale_tag = locale_tag if locale_tag is not None else get_ui_locale()

    os_id = resolve_os(os_version, is_64bit, tables=tables)
    lang_id = resolve_language(locale_tag, tables=tables)
    signature = _match_signature(os_version, tables)
    identity = PlatformIdentity(
        os_id=os_id,
        lang_id=lang_id,
        os_name=signature.name if signature else "",
        locale_tag=locale_tag,
    )
    logger.info("Windows %s (%s-bit): osID=%s", identity.os_name, 64 if is_64bit else 32, os_id)
    logger.info("Locale %r: langID=%s", locale_tag, lang_id)
    return identity
