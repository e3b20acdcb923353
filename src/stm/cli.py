"""stm CLI — developer tooling around the project/task core.

Installed as ``stm`` console_script via pip.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from stm import __version__
from stm.config import Config
from stm.io_utils import load_json
from stm.replay import ReplayResult, ScenarioError, run_scenario


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="stm")
def main(verbose: bool) -> None:
    """STM — project/task consistency core of the simple task manager.

    \b
    EXAMPLES:
      stm replay scenario.json              # Replay as the scenario's viewer
      stm replay --as u2 scenario.json      # Replay as another user
      stm -v replay scenario.json           # Show state transitions
    """
    from stm import log as slog

    slog.set_verbose(verbose)


# ── Subcommand: replay ───────────────────────────────────────────


@main.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--as", "viewer", default="", help="User id to open the project as")
@click.option("--manager-route", default="", help="Eviction destination (default: /manager)")
@click.option("--desktop", is_flag=True, help="Also show desktop notifications")
def replay(script: Path, viewer: str, manager_route: str, desktop: bool) -> None:
    """Replay a JSON scenario of project events against a fresh session.

    Prints the final view state, the selected task, every notification and
    every navigation the core produced.
    """
    cfg = Config(manager_route=manager_route, desktop_notifications=desktop or None)

    try:
        data = load_json(script)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="SCRIPT") from e

    try:
        result = run_scenario(data, viewer=viewer, config=cfg)
    except ScenarioError as e:
        raise click.BadParameter(str(e), param_hint="SCRIPT") from e

    _print_summary(result)


def _print_summary(result: ReplayResult) -> None:
    from stm import log as slog

    def cell(lines: list[str]) -> str:
        return escape("\n".join(lines)) or "-"

    table = Table(
        title=escape(f"Project {result.project_id} as {result.viewer}"),
        show_header=False,
    )
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("state", result.state.value)
    table.add_row("selected task", escape(result.selected_task or "-"))
    table.add_row(
        "progress",
        f"{result.done_points}/{result.total_points} points, "
        f"{result.tasks_done}/{result.task_count} tasks done, "
        f"{result.tasks_assigned} assigned",
    )
    table.add_row("warnings", cell(result.warnings))
    table.add_row("errors", cell(result.errors))
    table.add_row("navigations", cell(result.navigations))
    table.add_row("requests", cell([f"{op} {' '.join(map(str, args))}" for op, args in result.requests]))
    slog.console.print(table)
    slog.success(f"Replayed {result.events} events")
