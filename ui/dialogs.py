"""Qt dialogs for prompts and offers when no console is attached."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication, QFileDialog, QInputDialog, QMessageBox

from nvidia_update_checker.constants import APP_NAME
from ui.prompts import PROMPT_QUESTIONS


def _ensure_application() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([APP_NAME])
    return app


class DialogPrompter:
    def prompt(self, key: str, valid_values: Sequence[str]) -> str:
        _ensure_application()
        question = PROMPT_QUESTIONS.get(key, f"Choose a value for '{key}'")
        value, accepted = QInputDialog.getItem(None, APP_NAME, question, list(valid_values), 0, False)
        return value if accepted else ""


class DialogOffers:
    def confirm(self, message: str) -> bool:
        _ensure_application()
        answer = QMessageBox.question(
            None,
            APP_NAME,
            message,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.Yes,
        )
        return answer == QMessageBox.Yes

    def choose_save_path(self, suggested: Path) -> Path | None:
        _ensure_application()
        path, _ = QFileDialog.getSaveFileName(
            None,
            "Choose save file for GPU driver",
            str(suggested),
            "Executable (*.exe);;All Files (*)",
        )
        return Path(path) if path else None

    def open_url(self, url: str) -> None:
        _ensure_application()
        QDesktopServices.openUrl(QUrl(url))
