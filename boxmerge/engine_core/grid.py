"""
Grid Store - The board's data model.

Design principles:
- Immutable: every mutator returns a new Grid, so a snapshot handed to
  another component can never change underneath it
- Cells are replaced wholesale, never edited in place
- Addressed (x=column, y=row); rows[y][x]
- Bounds-checked: out-of-range access raises OutOfRangeError
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, ClassVar, Iterator, Sequence
import uuid

from .errors import OutOfRangeError


@dataclass(frozen=True)
class Vector:
    """A grid position or a move direction."""
    x: int
    y: int

    LEFT: ClassVar[Vector]
    RIGHT: ClassVar[Vector]
    UP: ClassVar[Vector]
    DOWN: ClassVar[Vector]

    def is_unit_axis(self) -> bool:
        """True iff exactly one axis is nonzero and it is +1 or -1."""
        return (self.x == 0) != (self.y == 0) and abs(self.x + self.y) == 1


Vector.LEFT = Vector(-1, 0)
Vector.RIGHT = Vector(1, 0)
# y grows downward, row 0 is the top edge
Vector.UP = Vector(0, -1)
Vector.DOWN = Vector(0, 1)


@dataclass(frozen=True)
class Block:
    """
    A single numbered tile with a stable identity.

    The id survives merges: a merged block keeps the id of the member
    nearer the destination edge.
    """
    id: str
    value: int
    is_new: bool = False

    @classmethod
    def spawn(cls, value: int = 2) -> Block:
        """Create a freshly spawned block."""
        return cls(id=uuid.uuid4().hex, value=value, is_new=True)


@dataclass(frozen=True)
class Cell:
    """
    One board position.

    merged_block is only set during the ACTIVE phase, holding the block
    absorbed by a merge in this cell so it can still be animated.
    """
    block: Block | None = None
    merged_block: Block | None = None

    EMPTY: ClassVar[Cell]

    @property
    def is_empty(self) -> bool:
        return self.block is None

    @property
    def has_transient_state(self) -> bool:
        return self.merged_block is not None or (
            self.block is not None and self.block.is_new
        )

    def cleared(self) -> Cell:
        """Return the cell with its transient flags dropped."""
        if not self.has_transient_state:
            return self
        block = replace(self.block, is_new=False) if self.block else None
        return Cell(block=block)


Cell.EMPTY = Cell()


Row = tuple[Cell, ...]


@dataclass(frozen=True)
class Grid:
    """
    An N x N board snapshot.

    rows is a tuple of tuples, so cloning is plain value construction and
    no transition can alias a snapshot still referenced elsewhere.
    """
    size: int
    rows: tuple[Row, ...] = field(default=())

    def __post_init__(self):
        if len(self.rows) != self.size or any(len(r) != self.size for r in self.rows):
            raise OutOfRangeError(f"Grid rows do not form a {self.size}x{self.size} matrix")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def empty(cls, size: int) -> Grid:
        """Create a grid with no blocks."""
        if size < 1:
            raise OutOfRangeError(f"Grid size must be positive, got {size}")
        return cls(size=size, rows=tuple((Cell.EMPTY,) * size for _ in range(size)))

    @classmethod
    def from_values(cls, values: Sequence[Sequence[int | None]]) -> Grid:
        """
        Build a grid from a matrix of block values (None or 0 = empty).

        Block ids are assigned "1", "2", ... in row-major order.
        """
        next_id = 1
        rows = []
        for row_values in values:
            row = []
            for value in row_values:
                if value:
                    row.append(Cell(block=Block(id=str(next_id), value=value)))
                    next_id += 1
                else:
                    row.append(Cell.EMPTY)
            rows.append(tuple(row))
        return cls(size=len(rows), rows=tuple(rows))

    def clone(self) -> Grid:
        """Return an independent snapshot with fresh row containers."""
        return Grid(size=self.size, rows=tuple(tuple(row) for row in self.rows))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def _check_index(self, index: int, axis: str):
        if not 0 <= index < self.size:
            raise OutOfRangeError(f"{axis}={index} outside [0, {self.size})")

    def _check_position(self, position: Vector):
        self._check_index(position.x, "x")
        self._check_index(position.y, "y")

    def _check_line(self, cells: Sequence[Cell]):
        if len(cells) != self.size:
            raise OutOfRangeError(f"Line has {len(cells)} cells, grid size is {self.size}")

    def cell_at(self, position: Vector) -> Cell:
        self._check_position(position)
        return self.rows[position.y][position.x]

    def with_cell(self, position: Vector, cell: Cell) -> Grid:
        """Return new grid with the cell at position replaced."""
        self._check_position(position)
        row = list(self.rows[position.y])
        row[position.x] = cell
        return self.with_row(position.y, row)

    def with_block(self, position: Vector, block: Block | None) -> Grid:
        """Return new grid with a fresh cell holding block at position."""
        return self.with_cell(position, Cell(block=block))

    def row_at(self, y: int) -> Row:
        self._check_index(y, "y")
        return self.rows[y]

    def with_row(self, y: int, cells: Sequence[Cell]) -> Grid:
        """Return new grid with row y replaced."""
        self._check_index(y, "y")
        self._check_line(cells)
        rows = list(self.rows)
        rows[y] = tuple(cells)
        return Grid(size=self.size, rows=tuple(rows))

    def column_at(self, x: int) -> Row:
        self._check_index(x, "x")
        return tuple(row[x] for row in self.rows)

    def with_column(self, x: int, cells: Sequence[Cell]) -> Grid:
        """Return new grid with column x replaced."""
        self._check_index(x, "x")
        self._check_line(cells)
        rows = []
        for y, row in enumerate(self.rows):
            new_row = list(row)
            new_row[x] = cells[y]
            rows.append(tuple(new_row))
        return Grid(size=self.size, rows=tuple(rows))

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def iter_cells(self) -> Iterator[tuple[Vector, Cell]]:
        """
        Yield (position, cell) pairs in row-major order.

        It's a generator, so callers stop early with break.
        """
        for y, row in enumerate(self.rows):
            for x, cell in enumerate(row):
                yield Vector(x, y), cell

    def update_cells(self, update: Callable[[Cell, Vector], Cell]) -> Grid:
        """Return new grid with every cell replaced by update(cell, position)."""
        return Grid(
            size=self.size,
            rows=tuple(
                tuple(update(cell, Vector(x, y)) for x, cell in enumerate(row))
                for y, row in enumerate(self.rows)
            ),
        )

    def values(self) -> list[list[int | None]]:
        """Block values as a matrix, None for empty cells."""
        return [
            [cell.block.value if cell.block else None for cell in row]
            for row in self.rows
        ]

    def total_value(self) -> int:
        """Sum of live block values (merged blocks are not counted)."""
        return sum(cell.block.value for _, cell in self.iter_cells() if cell.block)
