"""Logging helpers with colored output via Rich.

Messages are printed literally: interpolated text is escaped so user
names, routes or exception reprs holding ``[...]`` never parse as markup.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
_err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def info(msg: str) -> None:
    console.print(f"[blue]\\[INFO][/blue] {escape(msg)}")


def success(msg: str) -> None:
    console.print(f"[green]\\[OK][/green] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str) -> None:
    _err_console.print(f"[red]\\[ERROR][/red] {escape(msg)}")


def debug(msg: str) -> None:
    if _verbose:
        console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")


def transition(project_id: str, old: str, new: str, reason: str = "") -> None:
    """Debug line for a project view state change."""
    suffix = f" ({reason})" if reason else ""
    debug(f"Project {project_id}: {old} -> {new}{suffix}")


def dropped(stream: str, project_id: str, active_id: str) -> None:
    """Debug line for an event that does not belong to the active project."""
    debug(f"Dropped stale {stream} event for {project_id} (viewing {active_id})")
