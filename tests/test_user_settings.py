from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

import pytest

from nvidia_update_checker.errors import ConfigurationInvalid, SettingPromptExhausted
from nvidia_update_checker.user_settings import CHECK_FOR_UPDATES, GPU_TYPE, SETTING_CHOICES, SettingsStore


class FakePrompter:
    def __init__(self, answers: Sequence[str]) -> None:
        self.answers = list(answers)
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def prompt(self, key: str, valid_values: Sequence[str]) -> str:
        self.calls.append((key, tuple(valid_values)))
        if not self.answers:
            return "garbage"
        return self.answers.pop(0)


def _persisted(path: Path) -> dict[str, str]:
    return json.loads(path.read_text(encoding="utf-8"))


def test_write_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "cfg" / "settings.json"
    SettingsStore(path).write(GPU_TYPE, "mobile")
    assert SettingsStore(path).read(GPU_TYPE) == "mobile"
    assert SettingsStore(path).read(CHECK_FOR_UPDATES) is None


def test_delete_all_removes_file(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    assert store.delete_all() is False
    store.write(GPU_TYPE, "desktop")
    assert store.delete_all() is True
    assert not store.exists()
    assert store.read(GPU_TYPE) is None


def test_resolve_returns_valid_value_without_prompting(tmp_path: Path) -> None:
    prompter = FakePrompter([])
    store = SettingsStore(tmp_path / "settings.json", prompter=prompter)
    store.write(GPU_TYPE, "desktop")
    assert store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE]) == "desktop"
    assert prompter.calls == []


def test_resolve_reprompts_for_corrupted_value(tmp_path: Path) -> None:
    prompter = FakePrompter(["mobile"])
    store = SettingsStore(tmp_path / "settings.json", prompter=prompter)
    store.write(GPU_TYPE, "tablet")
    assert store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE]) == "mobile"
    assert prompter.calls == [(GPU_TYPE, ("desktop", "mobile"))]
    assert _persisted(store.path)[GPU_TYPE] == "mobile"


def test_resolve_prompts_once_per_iteration_until_valid(tmp_path: Path) -> None:
    prompter = FakePrompter(["yes", "", "FALSE"])
    store = SettingsStore(tmp_path / "settings.json", prompter=prompter)
    assert store.resolve(CHECK_FOR_UPDATES, SETTING_CHOICES[CHECK_FOR_UPDATES]) == "false"
    assert len(prompter.calls) == 3
    assert _persisted(store.path) == {CHECK_FOR_UPDATES: "false"}


def test_resolve_gives_up_after_max_attempts(tmp_path: Path) -> None:
    prompter = FakePrompter(["nope"] * 10)
    store = SettingsStore(tmp_path / "settings.json", prompter=prompter, max_attempts=3)
    with pytest.raises(SettingPromptExhausted) as excinfo:
        store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE])
    assert isinstance(excinfo.value, ConfigurationInvalid)
    assert excinfo.value.attempts == 3
    assert len(prompter.calls) == 3
    assert not store.exists()


def test_resolve_without_prompter_fails(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    with pytest.raises(SettingPromptExhausted):
        store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE])


def test_corrupt_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    prompter = FakePrompter(["desktop"])
    store = SettingsStore(path, prompter=prompter)
    assert store.read(GPU_TYPE) is None
    assert store.resolve(GPU_TYPE, SETTING_CHOICES[GPU_TYPE]) == "desktop"
    assert _persisted(path) == {GPU_TYPE: "desktop"}


def test_ensure_initialized_prompts_every_key_once(tmp_path: Path) -> None:
    prompter = FakePrompter(["true", "mobile"])
    store = SettingsStore(tmp_path / "settings.json", prompter=prompter)
    assert store.ensure_initialized() is True
    assert [key for key, _ in prompter.calls] == [CHECK_FOR_UPDATES, GPU_TYPE]
    assert _persisted(store.path) == {CHECK_FOR_UPDATES: "true", GPU_TYPE: "mobile"}
    assert store.ensure_initialized() is False
