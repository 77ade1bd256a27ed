"""Per-user locations for settings and logs."""
from __future__ import annotations

import os
from pathlib import Path

from nvidia_update_checker.constants import APP_NAME

HOME_ENV_VAR = "TINY_NVIDIA_UPDATE_CHECKER_HOME"
SETTINGS_FILE_NAME = "settings.json"
LOG_FILE_NAME = "app.log"


def get_application_directory() -> Path:
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override)
    local_appdata = os.environ.get("LOCALAPPDATA", "").strip()
    if local_appdata:
        return Path(local_appdata) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_settings_path() -> Path:
    return get_application_directory() / SETTINGS_FILE_NAME


def get_log_path() -> Path:
    return get_application_directory() / LOG_FILE_NAME
