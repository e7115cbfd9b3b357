# solver/placements.py
from __future__ import annotations

from typing import List

from models import Piece, Placement, RegionMask


def generate_placements(
    orientation: Piece,
    mask: RegionMask,
    piece_index: int = 0,
) -> List[Placement]:
    """Every translation of ``orientation`` that lands on mask-true cells only."""
    shape = orientation.normalize()
    _, (max_x, max_y) = shape.bounding_box()
    placements: List[Placement] = []

    # Slide the shape over the grid; empty ranges when it does not fit.
    for dx in range(mask.width - max_x):
        for dy in range(mask.height - max_y):
            placed = shape.translate(dx, dy)
            if all(mask.is_open(x, y) for x, y in placed.cells):
                placements.append(
                    Placement(
                        piece_index=piece_index,
                        orientation=shape,
                        offset=(dx, dy),
                        cells=frozenset(placed.cells),
                    )
                )

    return placements
