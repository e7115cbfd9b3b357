# puzzles.py — bundled demo puzzles
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Puzzle:
    name: str
    pieces: Tuple[Tuple[Cell, ...], ...]
    mask: Tuple[str, ...]
    allow_reflections: bool = False
    # dense blocks grow with the square of the placement count
    occupancy: Optional[str] = None

    def piece_lists(self) -> List[List[Cell]]:
        return [list(p) for p in self.pieces]


_TETROMINOES = (
    ((0, 0), (0, 1), (0, 2), (0, 3)),  # I
    ((0, 0), (0, 1), (1, 0), (1, 1)),  # O
    ((0, 0), (0, 1), (0, 2), (1, 1)),  # T
    ((1, 0), (1, 1), (0, 1), (0, 2)),  # S
    ((0, 0), (0, 1), (0, 2), (1, 2)),  # L
)

PUZZLES: Dict[str, Puzzle] = {
    "tromino": Puzzle(
        name="tromino",
        pieces=(
            ((0, 0), (0, 1), (0, 2)),
            ((0, 0), (0, 1), (1, 1)),
        ),
        mask=("XXX", "XX.", "X.."),
    ),
    # two each of the I, O, T, S and L tetrominoes on an 8 x 5 board
    "tetromino": Puzzle(
        name="tetromino",
        pieces=_TETROMINOES + _TETROMINOES,
        mask=("X" * 8,) * 5,
        occupancy="sparse",
    ),
    # the 12 free pentominoes on a 10 x 6 board
    "pentomino": Puzzle(
        name="pentomino",
        pieces=(
            ((0, 0), (0, 1), (0, 2), (1, 2), (2, 2)),
            ((2, 0), (2, 1), (1, 1), (0, 1), (0, 2)),
            ((0, 0), (0, 1), (1, 1), (0, 2), (0, 3)),
            ((0, 0), (1, 0), (1, 1), (1, 2), (0, 2)),
            ((2, 0), (2, 1), (1, 1), (1, 2), (0, 1)),
            ((0, 0), (1, 0), (1, 1), (1, 2), (1, 3)),
            ((1, 0), (1, 1), (0, 1), (2, 1), (1, 2)),
            ((1, 0), (1, 1), (0, 1), (0, 2), (0, 3)),
            ((1, 0), (0, 1), (1, 1), (0, 2), (1, 2)),
            ((2, 0), (2, 1), (1, 1), (1, 2), (0, 2)),
            ((2, 0), (2, 1), (1, 1), (0, 1), (2, 2)),
            ((0, 0), (0, 1), (0, 2), (0, 3), (0, 4)),
        ),
        mask=("X" * 10,) * 6,
        allow_reflections=True,
        occupancy="sparse",
    ),
}


def get_puzzle(name: str) -> Puzzle:
    try:
        return PUZZLES[name.strip().lower()]
    except KeyError:
        raise KeyError(f"unknown puzzle {name!r}; expected one of {sorted(PUZZLES)}") from None
