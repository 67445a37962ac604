"""CLI entry point for it2open."""

import sys
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from it2open import __version__
from it2open.config import (
    Config,
    Placement,
    config_to_dict,
    display_config_warnings,
    load_config,
    save_config,
)
from it2open.errors import ExternalExecutionError, InputError, It2OpenError
from it2open.layout import Cell
from it2open.runner import Plan, build_plan, read_commands, run_script
from it2open.script import count_splits
from it2open.xdg_paths import ensure_directories, get_config_file_path

app = typer.Typer(
    name="it2open",
    help="Run commands read from stdin in a grid of iTerm2 panes.",
    no_args_is_help=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"it2open {__version__}")
        raise typer.Exit()


def _grid_table(plan: Plan) -> Table:
    """Build a table showing which command runs in which pane."""
    table = Table(show_lines=True)
    for column in range(plan.grid.columns):
        table.add_column(f"col {column}")
    for row in range(plan.grid.rows):
        cells: list[Text] = []
        for column in range(plan.grid.columns):
            index = plan.assignment.command_at(Cell(column=column, row=row))
            cells.append(Text("" if index is None else plan.commands[index]))
        table.add_row(*cells)
    return table


_OPTION_NAMES = {"columns": "--cols", "new_tab": "--tab", "delay": "--delay", "placement": "--placement"}


def _merge_options(
    config: Config,
    cols: int | None,
    tab: bool | None,
    delay: float | None,
    placement: Placement | None,
) -> Config:
    """Apply CLI options on top of the loaded config (CLI wins)."""
    overrides: dict[str, object] = {}
    if cols is not None:
        overrides["columns"] = cols
    if tab is not None:
        overrides["new_tab"] = tab
    if delay is not None:
        overrides["delay"] = delay
    if placement is not None:
        overrides["placement"] = placement
    try:
        return Config.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        item = e.errors()[0]
        option = _OPTION_NAMES.get(str(item["loc"][0]) if item["loc"] else "", "option")
        raise typer.BadParameter(f"{item['msg']} (got {item.get('input')!r})", param_hint=option) from None


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    cols: Annotated[
        int | None,
        typer.Option("--cols", "-c", min=1, help="Number of columns (default 4)."),
    ] = None,
    tab: Annotated[
        bool | None,
        typer.Option("--tab/--no-tab", help="Open a new tab instead of splitting the current one."),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option("--delay", "-d", min=0, help="Pause in seconds between steps (default 0.25)."),
    ] = None,
    placement: Annotated[
        Placement | None,
        typer.Option("--placement", "-p", help="Fill the grid across rows or down columns."),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-D", help="Print the AppleScript instead of running it."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-C", help="Config file path."),
    ] = None,
    dump_config: Annotated[
        bool,
        typer.Option("--dump-config", help="Output current configuration."),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with error on config validation warnings."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Open one iTerm2 pane per line of stdin and run each line in it."""
    if ctx.invoked_subcommand is not None:
        return

    config, config_warnings = load_config(config_path, project_dir=Path.cwd(), strict=strict)
    if config_warnings:
        display_config_warnings(config_warnings, err_console)
        if strict:
            raise typer.Exit(1)

    config = _merge_options(config, cols, tab, delay, placement)

    if dump_config:
        console.print(yaml.safe_dump(config_to_dict(config), default_flow_style=False, sort_keys=False))
        raise typer.Exit()

    if verbose > 0:
        err_console.print(f"[dim]Config file: {escape(str(config_path or get_config_file_path()))}[/]")
        err_console.print(
            f"[dim]Columns: {config.columns}  New tab: {config.new_tab}  "
            f"Delay: {config.delay}  Placement: {config.placement.value}[/]"
        )

    try:
        commands = read_commands(sys.stdin, skip_blank_lines=config.skip_blank_lines)
        if not commands:
            raise InputError("no commands on stdin")
        plan = build_plan(commands, config)

        if verbose > 0:
            err_console.print(f"[dim]Grid: {plan.grid.columns} columns x {plan.grid.rows} rows[/]")
            err_console.print(_grid_table(plan))
        if verbose > 1:
            err_console.print(f"[dim]Operations: {len(plan.operations)}  Splits: {count_splits(plan.operations)}[/]")
            for operation in plan.operations:
                err_console.print(f"  {operation!r}", style="dim", markup=False)

        if debug:
            console.out(plan.script, highlight=False, end="")
            return

        run_script(plan.script, osascript=config.osascript, timeout=config.timeout)
    except ExternalExecutionError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(e.returncode) from None
    except It2OpenError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1) from None


@app.command()
def init_config() -> None:
    """Create default configuration file."""
    ensure_directories()
    config_file = get_config_file_path()

    if config_file.exists():
        err_console.print(f"[yellow]Config file already exists:[/] {config_file}")
        raise typer.Exit(1)

    save_config(Config())
    console.print(f"[green]✓[/] Created config file: {config_file}")


if __name__ == "__main__":
    app()
