"""Operation sequence that builds the pane grid and types the commands.

iTerm2 has no random pane addressing: every step acts on the focused pane.
Splitting a pane puts the new pane right after it in "next pane" order and
focuses it; "next pane" wraps from the last pane back to the first.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from it2open.errors import TemplateError
from it2open.layout import GridSpec, PaneAssignment


@dataclass(frozen=True)
class NewTab:
    """Open a new tab; its single pane becomes the top of column 0."""


@dataclass(frozen=True)
class SplitVertical:
    """Split the focused pane into left/right halves, focusing the right one."""


@dataclass(frozen=True)
class SplitHorizontal:
    """Split the focused pane into top/bottom halves, focusing the bottom one."""


@dataclass(frozen=True)
class FocusNext:
    """Move focus to the next pane."""


@dataclass(frozen=True)
class Delay:
    """Pause so the terminal can catch up."""

    seconds: float


@dataclass(frozen=True)
class WriteText:
    """Type a line of text into the focused pane."""

    text: str


Operation = NewTab | SplitVertical | SplitHorizontal | FocusNext | Delay | WriteText

SPLIT_OPERATIONS = (SplitVertical, SplitHorizontal)


@dataclass(frozen=True)
class ScriptOptions:
    """Settings for operation generation.

    Attributes:
        delay: Pause in seconds before each split and between commands.
            Zero disables pauses.
        new_tab: Open a new tab instead of splitting the current one.
    """

    delay: float = 0.25
    new_tab: bool = True


class _Sequencer:
    """Emits operations while tracking the focused pane."""

    def __init__(self, options: ScriptOptions) -> None:
        self.options = options
        self.operations: list[Operation] = []
        self.focus = 0
        self.panes = 1

    def pause(self) -> None:
        if self.options.delay > 0:
            self.operations.append(Delay(self.options.delay))

    def focus_pane(self, target: int) -> None:
        steps = (target - self.focus) % self.panes
        self.operations.extend(FocusNext() for _ in range(steps))
        self.focus = target

    def split(self, operation: SplitVertical | SplitHorizontal) -> None:
        self.pause()
        self.operations.append(operation)
        self.panes += 1
        self.focus += 1


def _validate(grid: GridSpec, assignment: PaneAssignment, commands: Sequence[str], options: ScriptOptions) -> None:
    if not math.isfinite(options.delay):
        raise TemplateError(f"delay must be a finite number, got {options.delay}")
    if options.delay < 0:
        raise TemplateError(f"delay cannot be negative, got {options.delay}")
    if len(commands) != grid.count or len(assignment) != grid.count:
        raise TemplateError(
            f"grid holds {grid.count} panes but got {len(commands)} commands and {len(assignment)} cells"
        )
    for column in range(grid.columns):
        rows = [assignment.cell_of(i).row for i in assignment.column(column)]
        if rows != list(range(grid.rows_in_column(column))):
            raise TemplateError(f"column {column} does not match the grid: rows {rows}")
    stray = [cell for cell in assignment.cells if not 0 <= cell.column < grid.columns]
    if stray:
        raise TemplateError(f"cells outside the grid: {stray}")


def generate_operations(
    grid: GridSpec,
    assignment: PaneAssignment,
    commands: Sequence[str],
    options: ScriptOptions,
) -> list[Operation]:
    """Generate the operations that realize a grid and run its commands.

    Columns are split off first, then each column is stacked from its top
    pane, then focus returns to the first pane and every pane receives its
    command in focus order.

    Args:
        grid: Grid dimensions.
        assignment: Cell of every command.
        commands: Commands in input order.
        options: Delay and tab settings.

    Returns:
        Ordered operations. Empty when there are no commands.

    Raises:
        TemplateError: If the assignment does not fit the grid or the delay
            is negative or not finite.
    """
    _validate(grid, assignment, commands, options)
    if grid.count == 0:
        return []

    seq = _Sequencer(options)
    if options.new_tab:
        seq.operations.append(NewTab())

    for _ in range(grid.columns - 1):
        seq.split(SplitVertical())

    # Column c's top pane sits after all panes of the columns to its left
    top = 0
    for column in range(grid.columns):
        rows = grid.rows_in_column(column)
        if rows > 1:
            seq.focus_pane(top)
            for _ in range(rows - 1):
                seq.split(SplitHorizontal())
        top += rows

    seq.focus_pane(0)
    if seq.panes > 1:
        seq.pause()
    order = assignment.traversal_order
    for position, index in enumerate(order):
        seq.operations.append(WriteText(commands[index]))
        if position < len(order) - 1:
            seq.operations.append(FocusNext())
            seq.focus += 1
            seq.pause()

    return seq.operations


def count_splits(operations: Sequence[Operation]) -> int:
    """Count the split operations in a sequence."""
    return sum(1 for op in operations if isinstance(op, SPLIT_OPERATIONS))
