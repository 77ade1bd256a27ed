"""Console prompt for settings that are missing or invalid."""
from __future__ import annotations

from typing import Callable, Sequence

PROMPT_QUESTIONS = {
    "Check for Updates": "Do you want to search for client updates on every start?",
    "GPU Type": "Are you running a desktop or mobile (laptop) GPU?",
}


class ConsolePrompter:
    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def prompt(self, key: str, valid_values: Sequence[str]) -> str:
        question = PROMPT_QUESTIONS.get(key, f"Choose a value for '{key}'")
        self._output(question)
        for index, value in enumerate(valid_values, start=1):
            self._output(f"  {index}) {value}")
        try:
            response = self._input(f"{key} [1-{len(valid_values)}]: ").strip()
        except EOFError:
            # stdin is closed; an empty answer lets the store's attempt limit end the loop
            return ""
        if response.isdigit() and 1 <= int(response) <= len(valid_values):
            return valid_values[int(response) - 1]
        # typing the value itself is accepted too; the store validates it
        return response.lower()
