"""User-visible notifications: console output and best-effort desktop toasts."""

from __future__ import annotations

import subprocess
import sys

from stm import log


def _run_quiet(*cmd: str) -> None:
    """Fire-and-forget subprocess, ignore failures."""
    try:
        subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except (FileNotFoundError, OSError):
        pass


class ConsoleNotifier:
    """Prints notifications through :mod:`stm.log` and keeps a record of them."""

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)
        log.warn(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        log.error(message)


class DesktopNotifier(ConsoleNotifier):
    """Console notifier that also raises a desktop toast where the OS has one."""

    title = "Simple Task Manager"

    def add_warning(self, message: str) -> None:
        super().add_warning(message)
        _toast(self.title, message, critical=False)

    def add_error(self, message: str) -> None:
        super().add_error(message)
        _toast(f"{self.title} - Error", message, critical=True)


def _applescript_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _toast(title: str, message: str, *, critical: bool) -> None:
    if sys.platform == "darwin":
        _run_quiet(
            "osascript", "-e",
            f"display notification {_applescript_string(message)}"
            f" with title {_applescript_string(title)}",
        )
    elif sys.platform.startswith("linux"):
        urgency = "critical" if critical else "normal"
        _run_quiet("notify-send", "-u", urgency, title, message)
    elif sys.platform == "win32":
        sound = "Hand" if critical else "Asterisk"
        _run_quiet(
            "powershell.exe", "-Command",
            f"[System.Media.SystemSounds]::{sound}.Play()",
        )


def make_notifier(desktop: bool) -> ConsoleNotifier:
    return DesktopNotifier() if desktop else ConsoleNotifier()
