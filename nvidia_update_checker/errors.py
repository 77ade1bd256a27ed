"""Failure types shared by the services and the command line."""
from __future__ import annotations

from typing import Final

EXIT_OK: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_LOCAL_ARTIFACT_MISSING: Final[int] = 2


class UpdateCheckerError(RuntimeError):
    exit_code: int = EXIT_FAILURE


class ConfigurationInvalid(UpdateCheckerError):
    """A persisted setting is outside its key's vocabulary."""


class SettingPromptExhausted(ConfigurationInvalid):
    def __init__(self, key: str, attempts: int) -> None:
        super().__init__(f"No valid value for setting '{key}' after {attempts} prompt(s)")
        self.key = key
        self.attempts = attempts


class PlatformUnsupported(UpdateCheckerError):
    pass


class NetworkFailure(UpdateCheckerError):
    pass


class ParseFailure(UpdateCheckerError):
    pass


class VersionParseError(ParseFailure, ValueError):
    pass


class LocalArtifactMissing(UpdateCheckerError):
    exit_code = EXIT_LOCAL_ARTIFACT_MISSING
