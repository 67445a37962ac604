"""Input reading and script execution for it2open."""

import os
import subprocess
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from it2open.applescript import render_applescript
from it2open.config import Config
from it2open.errors import ExternalExecutionError, InputError
from it2open.layout import GridSpec, PaneAssignment, compute_layout
from it2open.script import Operation, ScriptOptions, generate_operations


@dataclass(frozen=True)
class Plan:
    """Everything derived from one list of commands."""

    commands: tuple[str, ...]
    grid: GridSpec
    assignment: PaneAssignment
    operations: list[Operation]
    script: str


def read_commands(stream: TextIO, skip_blank_lines: bool = True) -> tuple[str, ...]:
    """Read one command per line from a stream.

    Args:
        stream: The input stream, normally stdin.
        skip_blank_lines: Drop lines that are empty or only whitespace.

    Returns:
        Commands in input order, without line terminators.

    Raises:
        InputError: If the stream is an interactive terminal or cannot be
            decoded.
    """
    if stream.isatty():
        raise InputError("expecting lines on stdin")
    try:
        return parse_commands(stream, skip_blank_lines)
    except UnicodeDecodeError as e:
        bad = e.object[e.start : e.end]
        raise InputError(f"stdin is not valid {e.encoding}: byte {bad!r} at offset {e.start}") from e


def parse_commands(lines: Iterable[str], skip_blank_lines: bool = True) -> tuple[str, ...]:
    """Strip line terminators and optionally drop blank lines."""
    commands = (line.rstrip("\r\n") for line in lines)
    if skip_blank_lines:
        return tuple(cmd for cmd in commands if cmd.strip())
    return tuple(commands)


def build_plan(commands: Iterable[str], config: Config) -> Plan:
    """Lay out commands and render the script for them.

    Args:
        commands: Commands in input order.
        config: Effective configuration.

    Returns:
        The plan, including the rendered AppleScript.
    """
    commands = tuple(commands)
    grid, assignment = compute_layout(commands, config.columns, config.placement)
    options = ScriptOptions(delay=config.delay, new_tab=config.new_tab)
    operations = generate_operations(grid, assignment, commands, options)
    return Plan(
        commands=commands,
        grid=grid,
        assignment=assignment,
        operations=operations,
        script=render_applescript(operations),
    )


def run_script(script: str, osascript: str = "osascript", timeout: float | None = None) -> None:
    """Write a script to a temporary file and run it.

    The interpreter's stdout and stderr are not captured.

    Args:
        script: AppleScript source.
        osascript: Interpreter executable.
        timeout: Optional limit in seconds.

    Raises:
        ExternalExecutionError: If the interpreter is missing, times out or
            exits with a non-zero status.
    """
    fd, path = tempfile.mkstemp(prefix="it2open", suffix=".applescript")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(script)

        cmd = [osascript, path]
        try:
            result = subprocess.run(cmd, check=False, timeout=timeout)
        except FileNotFoundError as e:
            raise ExternalExecutionError(f"{osascript} not found", returncode=127) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalExecutionError(f"{osascript} timed out after {timeout}s") from e

        if result.returncode != 0:
            raise ExternalExecutionError(
                f"{osascript} exited with status {result.returncode}",
                returncode=result.returncode,
            )
    finally:
        os.unlink(path)
