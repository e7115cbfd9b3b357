from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Sequence, Tuple

Cell = Tuple[int, int]


# ---------------- errors ----------------

class PolyominoError(Exception):
    """Base class for every failure ``solve`` can report."""

    kind = "error"


class EmptyPieceError(PolyominoError):
    kind = "empty_piece"


class MalformedMaskError(PolyominoError):
    kind = "malformed_mask"


class Unsatisfiable(PolyominoError):
    kind = "unsatisfiable"


class SolverInternalError(PolyominoError):
    kind = "solver_internal"


# ---------------- geometry ----------------

def _coord(v) -> int:
    iv = int(v)
    if iv != v:
        raise ValueError(f"Cell coordinate {v!r} is not an integer")
    return iv


class Piece:
    """An immutable set of grid cells.

    Equality and hashing ignore translation: two pieces are equal when their
    normalized cell sets match. Ordering compares the minimum corner first and
    then the sorted cell lists.
    """

    __slots__ = ("cells",)

    def __init__(self, cells: Iterable[Cell] = ()):
        self.cells: Tuple[Cell, ...] = tuple(sorted({(_coord(x), _coord(y)) for x, y in cells}))

    @classmethod
    def from_cells(cls, cells: Iterable[Sequence[int]]) -> "Piece":
        return cls((c[0], c[1]) for c in cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def __repr__(self) -> str:
        return f"Piece({list(self.cells)!r})"

    def bounding_box(self) -> Tuple[Cell, Cell]:
        """Return ``((min_x, min_y), (max_x, max_y))``."""
        if not self.cells:
            raise EmptyPieceError("Piece has no cells; bounding box is undefined")
        xs = [x for x, _ in self.cells]
        ys = [y for _, y in self.cells]
        return (min(xs), min(ys)), (max(xs), max(ys))

    def normalize(self) -> "Piece":
        (min_x, min_y), _ = self.bounding_box()
        return self.translate(-min_x, -min_y)

    def translate(self, dx: int, dy: int) -> "Piece":
        return Piece((x + dx, y + dy) for x, y in self.cells)

    def rotate90(self) -> "Piece":
        _, (_, max_y) = self.bounding_box()
        return Piece((max_y - y, x) for x, y in self.cells).normalize()

    def reflect_x(self) -> "Piece":
        _, (max_x, _) = self.bounding_box()
        return Piece((max_x - x, y) for x, y in self.cells).normalize()

    def reflect_y(self) -> "Piece":
        _, (_, max_y) = self.bounding_box()
        return Piece((x, max_y - y) for x, y in self.cells).normalize()

    def _key(self) -> Tuple[Cell, Tuple[Cell, ...]]:
        (min_x, min_y), _ = self.bounding_box()
        return (min_x, min_y), self.cells

    def _shape(self) -> Tuple[Cell, ...]:
        if not self.cells:
            return ()
        return self.normalize().cells

    def __eq__(self, other) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self._shape() == other._shape()

    def __hash__(self) -> int:
        return hash(self._shape())

    def __lt__(self, other: "Piece") -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self._key() < other._key()

    def render(self) -> str:
        (min_x, min_y), (max_x, max_y) = self.bounding_box()
        occupied = set(self.cells)
        return "\n".join(
            "".join("X" if (x, y) in occupied else "." for x in range(min_x, max_x + 1))
            for y in range(min_y, max_y + 1)
        )


# ---------------- region ----------------

def _mask_row(row) -> Tuple[bool, ...]:
    # 'X' rows may be mixed with boolean rows
    if isinstance(row, str):
        return tuple(ch == "X" for ch in row)
    out = []
    for v in row:
        if isinstance(v, str):
            raise MalformedMaskError(f"Region mask cell {v!r} is a string; use 'X' rows or booleans")
        out.append(bool(v))
    return tuple(out)


@dataclass(frozen=True)
class RegionMask:
    rows: Tuple[Tuple[bool, ...], ...]

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[bool]]) -> "RegionMask":
        try:
            grid = tuple(_mask_row(row) for row in rows)
        except TypeError as e:
            raise MalformedMaskError(f"Region mask rows must be iterables of booleans: {e}") from e
        if not grid:
            raise MalformedMaskError("Region mask has no rows")
        width = len(grid[0])
        if width == 0:
            raise MalformedMaskError("Region mask has no columns")
        for y, row in enumerate(grid):
            if len(row) != width:
                raise MalformedMaskError(
                    f"Region mask row {y} has length {len(row)}, expected {width}"
                )
        return cls(grid)

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return len(self.rows[0])

    def is_open(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and self.rows[y][x]

    def open_cells(self) -> List[Cell]:
        """Mask-true cells, column-major (``x`` outer, ``y`` inner)."""
        return [
            (x, y)
            for x in range(self.width)
            for y in range(self.height)
            if self.rows[y][x]
        ]


@dataclass(frozen=True)
class Placement:
    piece_index: int
    orientation: Piece
    offset: Cell
    cells: FrozenSet[Cell] = field(default_factory=frozenset)

    def sorted_cells(self) -> List[Cell]:
        return sorted(self.cells)


__all__ = [
    "Cell",
    "Piece",
    "RegionMask",
    "Placement",
    "PolyominoError",
    "EmptyPieceError",
    "MalformedMaskError",
    "Unsatisfiable",
    "SolverInternalError",
]
