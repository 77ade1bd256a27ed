"""Logging setup: a log file in the settings directory plus console output."""
from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_file: Path | None, *, debug: bool = False, quiet: bool = False) -> None:
    """Route all records to ``log_file`` and warnings (or everything, with ``debug``) to stderr.

    ``quiet`` keeps the console down to errors. Calling this again replaces the
    handlers installed by a previous call.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    if quiet:
        console.setLevel(logging.ERROR)
    elif debug:
        console.setLevel(logging.DEBUG)
    else:
        console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root.addHandler(console)

    if log_file is None:
        return
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("Cannot open log file %s: %s", log_file, exc)
        return
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
