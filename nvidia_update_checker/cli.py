"""Command line entry point: check for a newer NVIDIA driver and offer to download it."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Protocol, Sequence, TextIO

from nvidia_update_checker.constants import APP_NAME, APP_VERSION, IMMUTABLE_CONFIG
from nvidia_update_checker.errors import (
    EXIT_FAILURE,
    EXIT_OK,
    NetworkFailure,
    ParseFailure,
    UpdateCheckerError,
)
from nvidia_update_checker.logs import configure_logging
from nvidia_update_checker.paths import get_log_path
from nvidia_update_checker.user_settings import (
    CHECK_FOR_UPDATES,
    GPU_TYPE,
    SETTING_CHOICES,
    SettingPrompter,
    SettingsStore,
)
from services.downloader import default_destination, download_driver
from services.drivers import (
    DriverQuery,
    DriverResolutionResult,
    DriverResolver,
    PageFetcher,
    RequestsFetcher,
    UpdateStatus,
    evaluate_update,
)
from services.local_driver import get_installed_driver_version
from services.platform_identity import PlatformIdentity, detect_platform_identity
from services.self_update import SelfUpdateChecker
from ui.console import Console
from ui.prompts import ConsolePrompter

logger = logging.getLogger(__name__)

USAGE_LINES = (
    "--quiet        Run application quiet.",
    "--eraseConfig  Erase local configuration file.",
    "--debug        Enable debugging for extended information.",
    "--help         Displays this message.",
)


class UserOffers(Protocol):
    def confirm(self, message: str) -> bool:  # pragma: no cover - protocol
        ...

    def choose_save_path(self, suggested: Path) -> Path | None:  # pragma: no cover - protocol
        ...

    def open_url(self, url: str) -> None:  # pragma: no cover - protocol
        ...


class UsageError(UpdateCheckerError):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=APP_NAME, add_help=False, allow_abbrev=False)
    parser.add_argument("--quiet", action="store_true")
    parser.add_argument("--eraseConfig", dest="erase_config", action="store_true")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--help", dest="show_help", action="store_true")
    return parser


def _intro(console: Console) -> None:
    console.line(f"{APP_NAME} v{APP_VERSION}")
    console.line()
    console.line("This program comes with ABSOLUTELY NO WARRANTY.")
    console.line("This is free software, and you are welcome to redistribute it under certain conditions.")
    console.line()


def _usage(console: Console) -> None:
    console.line(f"Usage: {APP_NAME} [--quiet] [--eraseConfig] [--debug] [--help]")
    console.line()
    for line in USAGE_LINES:
        console.line(line)


def _default_prompter(quiet: bool) -> SettingPrompter:
    if quiet:
        from ui.dialogs import DialogPrompter

        return DialogPrompter()
    return ConsolePrompter()


def _default_offers() -> UserOffers:
    from ui.dialogs import DialogOffers

    return DialogOffers()


def _check_for_client_update(console: Console, fetcher: PageFetcher, offers: Callable[[], UserOffers]) -> None:
    console.write("Searching for Updates . . . ")
    result = SelfUpdateChecker(fetcher).check()
    if result.error:
        console.line("ERROR!")
        console.line(result.error)
    else:
        console.line("OK!")
    logger.debug("Client version local=%s remote=%s", result.current_version, result.remote_version)
    if result.update_available:
        console.line(f"There is an update available for {APP_NAME}!")
        chooser = offers()
        if chooser.confirm(
            "There is a new client update available to download, "
            "do you want to be navigated to the official GitHub download section?"
        ):
            chooser.open_url(result.release_url)
    console.line()


def _resolve_driver(
    console: Console,
    resolver: DriverResolver,
    query: DriverQuery,
) -> DriverResolutionResult:
    console.write("Looking up GPU information . . . ")
    result = resolver.resolve(query)
    if result.ok:
        console.line("OK!")
    else:
        console.line("ERROR!")
        for failure in result.failures:
            console.line(f"  {failure.stage}: {failure.message}")
    logger.debug("psID=%s pfID=%s osID=%s langID=%s", query.series_id, query.product_id, query.os_id, query.lang_id)
    logger.debug("catalogURL: %s", result.catalog_url)
    logger.debug("productPageURL: %s", result.product_page_url)
    logger.debug("confirmURL: %s", result.confirmation_url)
    logger.debug("downloadURL: %s", result.download_url)
    return result


def _offer_download(
    console: Console,
    offers: UserOffers,
    download_url: str,
    downloader: Callable[[str, Path], Path],
) -> Path | None:
    if not offers.confirm("There is a new update available to download, do you want to download the update?"):
        return None
    suggested = default_destination(download_url)
    # a cancelled save dialog falls back to the temp directory
    destination = offers.choose_save_path(suggested) or suggested
    logger.debug("savePath: %s", destination)
    console.line()
    console.write("Downloading driver file . . . ")
    try:
        saved = downloader(download_url, destination)
    except NetworkFailure as exc:
        logger.error("Driver download failed: %s", exc, exc_info=exc)
        console.line("ERROR!")
        console.line(str(exc))
        return None
    console.line("OK!")
    console.line(f"The downloaded file has been saved at: {saved}")
    return saved


def _report(console: Console, status: UpdateStatus) -> None:
    if status is UpdateStatus.UP_TO_DATE:
        console.line("Your GPU drivers are up-to-date!")
    elif status is UpdateStatus.LOCAL_NEWER:
        console.line("Your current GPU driver is newer than remote!")
    elif status is UpdateStatus.UPDATE_AVAILABLE:
        console.line("There are new drivers available to download!")
    else:
        console.line("Unable to determine whether a newer GPU driver is available.")


def run(
    argv: Sequence[str] | None = None,
    *,
    stream: TextIO | None = None,
    input_func: Callable[[], str] = input,
    store: SettingsStore | None = None,
    prompter: SettingPrompter | None = None,
    offers: UserOffers | None = None,
    fetcher: PageFetcher | None = None,
    identity_provider: Callable[[], PlatformIdentity] = detect_platform_identity,
    local_version_provider: Callable[[], int] = get_installed_driver_version,
    downloader: Callable[[str, Path], Path] = download_driver,
    log_file: Path | None = None,
) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except UsageError:
        args, unknown = None, argv
    if args is None or unknown:
        console = Console(stream=stream)
        _intro(console)
        console.line("Unknown command, type --help for help.")
        return EXIT_FAILURE
    if args.show_help:
        console = Console(stream=stream)
        _intro(console)
        _usage(console)
        return EXIT_OK

    console = Console(quiet=args.quiet, stream=stream, input_func=input_func)
    configure_logging(log_file if log_file is not None else get_log_path(), debug=args.debug, quiet=args.quiet)
    logger.info("%s v%s", APP_NAME, APP_VERSION)
    _intro(console)

    store = store or SettingsStore(prompter=prompter or _default_prompter(args.quiet))
    fetcher = fetcher or RequestsFetcher()

    def _offers() -> UserOffers:
        nonlocal offers
        if offers is None:
            offers = _default_offers()
        return offers

    try:
        if args.erase_config and store.delete_all():
            console.line("Erased local configuration file.")
        logger.info("Settings file: %s", store.path)
        if not store.exists():
            console.line("Generating configuration file, this only happens once.")
            console.line(f"The configuration file is located at: {store.path.parent}")
            store.ensure_initialized()
            console.line()

        identity = identity_provider()

        if store.resolve(CHECK_FOR_UPDATES, SETTING_CHOICES[CHECK_FOR_UPDATES]) == "true":
            _check_for_client_update(console, fetcher, _offers)

        local_version: int | None
        try:
            local_version = local_version_provider()
        except ParseFailure as exc:
            logger.error("Cannot read the installed driver version: %s", exc, exc_info=exc)
            console.line(f"ERROR! {exc}")
            local_version = None

        gpu_type = store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE])
        query = DriverQuery.for_gpu(IMMUTABLE_CONFIG.gpu_types[gpu_type], identity)
        result = _resolve_driver(console, DriverResolver(fetcher), query)
    except UpdateCheckerError as exc:
        logger.error("%s", exc, exc_info=exc)
        console.line(str(exc))
        console.wait_for_exit("Press Enter to exit.")
        return exc.exit_code

    logger.debug("offlineGPUDriverVersion: %s", local_version)
    logger.debug("onlineGPUDriverVersion: %s", result.remote_version)
    status = evaluate_update(local_version, result.remote_version)
    logger.info("Update status: %s", status.value)
    _report(console, status)
    if status is UpdateStatus.UPDATE_AVAILABLE:
        if result.download_url:
            _offer_download(console, _offers(), result.download_url, downloader)
        else:
            console.line("The download link for the new driver could not be resolved.")

    console.line()
    console.wait_for_exit()
    logger.info("BYE!")
    return EXIT_OK


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
