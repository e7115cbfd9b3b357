# solver/decode.py
from __future__ import annotations

from typing import List, Optional, Sequence, Set, Tuple

from models import Cell, RegionMask
from solver.backends import SatOutcome
from solver.encoding import Encoding, PlacementBlock

Decoded = Tuple[PlacementBlock, List[Cell]]


def decode_model(encoding: Encoding, outcome: SatOutcome) -> List[Decoded]:
    """Map a satisfying assignment back onto per-placement cell lists.

    Blocks are visited in allocation order, so the result is piece-major.
    Blocks with no true occupancy literal are skipped.
    """
    mask = encoding.mask
    decoded: List[Decoded] = []
    for block in encoding.blocks:
        cells: List[Cell] = []
        for x in range(mask.width):
            for y in range(mask.height):
                if not mask.rows[y][x]:
                    continue
                lit = block.occupancy.get((x, y))
                if lit is not None and outcome.value(lit):
                    cells.append((x, y))
        if cells:
            decoded.append((block, cells))
    return decoded


def tiling_problem(mask: RegionMask, pieces: Sequence[Sequence[Cell]]) -> Optional[str]:
    """Return why ``pieces`` is not an exact cover of ``mask``, or ``None``."""
    seen: Set[Cell] = set()
    for idx, cells in enumerate(pieces):
        for cell in cells:
            if cell in seen:
                return f"cell {cell} covered twice (piece {idx})"
            if not mask.is_open(*cell):
                return f"cell {cell} lies outside the region (piece {idx})"
            seen.add(cell)
    missing = set(mask.open_cells()) - seen
    if missing:
        return f"{len(missing)} region cell(s) left uncovered, e.g. {min(missing)}"
    return None
