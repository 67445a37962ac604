"""Grid layout for it2open.

Maps an ordered list of commands onto a rectangular grid of panes:

    ---------------------
    | a    | b    | c    |
    |------|------|------|
    | d    | e    |      |
    ---------------------

Columns are built left to right and each column is stacked top to bottom.
A short column simply has fewer panes; no empty panes are created.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from it2open.config import Placement
from it2open.errors import LayoutError


@dataclass(frozen=True)
class Cell:
    """Position of a pane in the grid."""

    column: int
    row: int


@dataclass(frozen=True)
class GridSpec:
    """Dimensions of the pane grid.

    Attributes:
        columns: Number of columns actually used.
        rows: Number of panes in the tallest column.
        count: Number of panes (one per command).
    """

    columns: int
    rows: int
    count: int

    def rows_in_column(self, column: int) -> int:
        """Get the number of panes present in a column.

        The first ``count - columns * (rows - 1)`` columns are full height,
        the remaining ones are one pane short.

        Args:
            column: Zero-based column index.

        Returns:
            Number of panes in the column, 0 if the column does not exist.
        """
        if column < 0 or column >= self.columns:
            return 0
        full_columns = self.count - self.columns * (self.rows - 1)
        return self.rows if column < full_columns else self.rows - 1


@dataclass(frozen=True)
class PaneAssignment:
    """Cell of every command, indexed by command position."""

    cells: tuple[Cell, ...]

    def __len__(self) -> int:
        return len(self.cells)

    def cell_of(self, index: int) -> Cell:
        return self.cells[index]

    def command_at(self, cell: Cell) -> int | None:
        """Get the index of the command placed in a cell, if any."""
        for index, candidate in enumerate(self.cells):
            if candidate == cell:
                return index
        return None

    def column(self, column: int) -> list[int]:
        """Get command indices in a column, top to bottom."""
        members = [i for i, cell in enumerate(self.cells) if cell.column == column]
        return sorted(members, key=lambda i: self.cells[i].row)

    @property
    def traversal_order(self) -> list[int]:
        """Command indices in pane focus order (down each column, then right)."""
        return sorted(range(len(self.cells)), key=lambda i: (self.cells[i].column, self.cells[i].row))


def compute_grid(count: int, columns: int) -> GridSpec:
    """Compute grid dimensions for a number of panes.

    Args:
        count: Number of panes to place.
        columns: Requested number of columns (at least 1).

    Returns:
        The grid, with columns clamped to the pane count.

    Raises:
        LayoutError: If columns is less than 1 or count is negative.
    """
    if columns < 1:
        raise LayoutError(f"columns must be at least 1, got {columns}")
    if count < 0:
        raise LayoutError(f"pane count cannot be negative, got {count}")
    if count == 0:
        return GridSpec(columns=0, rows=0, count=0)

    columns = min(columns, count)
    rows = -(-count // columns)
    return GridSpec(columns=columns, rows=rows, count=count)


def _row_major(grid: GridSpec) -> list[Cell]:
    return [Cell(column=i % grid.columns, row=i // grid.columns) for i in range(grid.count)]


def _column_major(grid: GridSpec) -> list[Cell]:
    cells: list[Cell] = []
    for column in range(grid.columns):
        for row in range(grid.rows_in_column(column)):
            cells.append(Cell(column=column, row=row))
    return cells


def compute_layout(
    commands: Sequence[str],
    columns: int,
    placement: Placement = Placement.ROW_MAJOR,
) -> tuple[GridSpec, PaneAssignment]:
    """Place each command in a grid cell.

    Args:
        commands: Commands in input order.
        columns: Requested number of columns.
        placement: How commands are distributed over the grid.

    Returns:
        Tuple of (grid dimensions, cell of each command).

    Raises:
        LayoutError: If columns is less than 1.
    """
    grid = compute_grid(len(commands), columns)
    if placement == Placement.COLUMN_MAJOR:
        cells = _column_major(grid)
    else:
        cells = _row_major(grid)
    return grid, PaneAssignment(cells=tuple(cells))
