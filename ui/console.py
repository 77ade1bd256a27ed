"""User-facing console lines, silenced by --quiet."""
from __future__ import annotations

import sys
from typing import Callable, TextIO


class Console:
    def __init__(
        self,
        *,
        quiet: bool = False,
        stream: TextIO | None = None,
        input_func: Callable[[], str] = input,
    ) -> None:
        self.quiet = quiet
        self._stream = stream
        self._input = input_func

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def write(self, text: str = "") -> None:
        if self.quiet:
            return
        self.stream.write(text)
        self.stream.flush()

    def line(self, text: str = "") -> None:
        self.write(text + "\n")

    def wait_for_exit(self, message: str = "Job done! Press Enter to exit.") -> None:
        self.line(message)
        if self.quiet:
            return
        try:
            self._input()
        except EOFError:
            pass
