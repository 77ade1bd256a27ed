"""Persisted user choices with a validate-or-reprompt resolution loop."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Mapping, Protocol, Sequence

from nvidia_update_checker.errors import SettingPromptExhausted
from nvidia_update_checker.paths import get_settings_path

logger = logging.getLogger(__name__)

CHECK_FOR_UPDATES = "Check for Updates"
GPU_TYPE = "GPU Type"

SETTING_CHOICES: Mapping[str, tuple[str, ...]] = {
    CHECK_FOR_UPDATES: ("true", "false"),
    GPU_TYPE: ("desktop", "mobile"),
}

DEFAULT_MAX_ATTEMPTS = 5


class SettingPrompter(Protocol):
    def prompt(self, key: str, valid_values: Sequence[str]) -> str:  # pragma: no cover - protocol
        ...


class SettingsStore:
    """Key to string mapping stored as a JSON object.

    Every read goes back to disk, so a value written by ``prompt_and_write`` is
    what the next ``resolve`` iteration sees.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        *,
        prompter: SettingPrompter | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.path = Path(path) if path is not None else get_settings_path()
        self._prompter = prompter
        self._max_attempts = max(1, max_attempts)

    def exists(self) -> bool:
        return self.path.is_file()

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load settings from %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def read(self, key: str) -> str | None:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        temp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(self.path)
        logger.info("Saved setting '%s' = '%s' to %s", key, value, self.path)

    def delete_all(self) -> bool:
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info("Erased settings file %s", self.path)
        return True

    def prompt_and_write(self, key: str, valid_values: Sequence[str]) -> str:
        if self._prompter is None:
            raise SettingPromptExhausted(key, 0)
        answer = self._prompter.prompt(key, list(valid_values)).strip().lower()
        if answer in valid_values:
            self.write(key, answer)
        else:
            logger.warning("Rejected value '%s' for setting '%s'", answer, key)
        return answer

    def resolve(self, key: str, valid_values: Iterable[str]) -> str:
        """Return the persisted value of ``key``, prompting until it is one of ``valid_values``.

        The prompter gets ``max_attempts`` chances; after that
        :class:`SettingPromptExhausted` is raised instead of looping forever.
        """
        choices = tuple(valid_values)
        attempts = 0
        while True:
            value = self.read(key)
            if value in choices:
                return value
            if value is not None:
                logger.warning("Setting '%s' has invalid value '%s'", key, value)
            if attempts >= self._max_attempts:
                raise SettingPromptExhausted(key, attempts)
            attempts += 1
            self.prompt_and_write(key, choices)

    def ensure_initialized(self, keys: Iterable[str] = tuple(SETTING_CHOICES)) -> bool:
        """Prompt for every key once when no settings file exists yet. Returns True if it did."""
        if self.exists():
            return False
        logger.info("Generating settings file at %s", self.path)
        for key in keys:
            self.resolve(key, SETTING_CHOICES[key])
        return True
