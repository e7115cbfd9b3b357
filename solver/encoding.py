# solver/encoding.py
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import Cell, Placement, RegionMask

OCCUPANCY_MODES = ("dense", "sparse")


class LiteralAllocator:
    """Hands out SAT variable numbers; 0 is never issued."""

    def __init__(self) -> None:
        self._next = 1

    @property
    def count(self) -> int:
        """Number of variables allocated so far."""
        return self._next - 1

    def next_literal(self) -> int:
        lit = self._next
        self._next += 1
        return lit

    def allocate_block(self, size: int) -> range:
        if size < 0:
            raise ValueError(f"Block size must be non-negative, got {size}")
        block = range(self._next, self._next + size)
        self._next += size
        return block


class CnfInstance:
    """Ordered clause list over signed integer literals."""

    def __init__(self) -> None:
        self.clauses: List[Tuple[int, ...]] = []
        self.num_vars = 0

    def __len__(self) -> int:
        return len(self.clauses)

    def __iter__(self):
        return iter(self.clauses)

    def add(self, literals: Iterable[int]) -> None:
        clause = tuple(int(l) for l in literals)
        for lit in clause:
            if lit == 0:
                raise ValueError("Literal 0 is not a valid SAT variable")
            self.num_vars = max(self.num_vars, abs(lit))
        self.clauses.append(clause)

    def at_least_one(self, literals: Sequence[int]) -> None:
        self.add(literals)

    def at_most_one(self, literals: Sequence[int]) -> None:
        for a, b in combinations(literals, 2):
            self.add((-a, -b))

    def to_dimacs(self) -> str:
        lines = [f"p cnf {self.num_vars} {len(self.clauses)}"]
        lines.extend(" ".join(str(l) for l in clause) + " 0" for clause in self.clauses)
        return "\n".join(lines) + "\n"


@dataclass
class PlacementBlock:
    placement: Placement
    literal: int
    occupancy: Dict[Cell, int] = field(default_factory=dict)


@dataclass
class Encoding:
    mask: RegionMask
    occupancy_mode: str
    cnf: CnfInstance
    blocks: List[PlacementBlock]
    piece_literals: List[List[int]]
    num_vars: int
    counts: Dict[str, int] = field(default_factory=dict)


def _allocate(
    placements_by_piece: Sequence[Sequence[Placement]],
    mask: RegionMask,
    occupancy_mode: str,
    allocator: LiteralAllocator,
) -> Tuple[List[PlacementBlock], List[List[int]]]:
    W, H = mask.width, mask.height
    blocks: List[PlacementBlock] = []
    piece_literals: List[List[int]] = []

    for placements in placements_by_piece:
        lits: List[int] = []
        for placement in placements:
            if occupancy_mode == "dense":
                # column-major: x outer, y inner
                grid = allocator.allocate_block(W * H)
                occupancy = {(x, y): grid[x * H + y] for x in range(W) for y in range(H)}
            else:
                cells = placement.sorted_cells()
                grid = allocator.allocate_block(len(cells))
                occupancy = dict(zip(cells, grid))
            literal = allocator.next_literal()
            blocks.append(PlacementBlock(placement, literal, occupancy))
            lits.append(literal)
        piece_literals.append(lits)

    return blocks, piece_literals


def _pairs(n: int) -> int:
    return n * (n - 1) // 2


def estimate_clauses(
    placements_by_piece: Sequence[Sequence[Placement]],
    mask: RegionMask,
    occupancy_mode: str = "dense",
) -> int:
    """Clause count ``compile_clauses`` would emit, without allocating anything."""
    open_cells = mask.open_cells()
    total = sum(len(p) for p in placements_by_piece)
    footprint = sum(len(pl.cells) for p in placements_by_piece for pl in p)

    if occupancy_mode == "dense":
        # every block carries a literal at every open cell
        linking = total * len(open_cells) + footprint
        cells = len(open_cells) * (1 + _pairs(total))
    else:
        linking = 2 * footprint
        coverers: Dict[Cell, int] = {}
        for placements in placements_by_piece:
            for placement in placements:
                for cell in placement.cells:
                    coverers[cell] = coverers.get(cell, 0) + 1
        cells = sum(1 + _pairs(coverers.get(cell, 0)) for cell in open_cells)

    pieces = sum(1 + _pairs(len(p)) for p in placements_by_piece)
    return linking + pieces + cells


def compile_clauses(
    placements_by_piece: Sequence[Sequence[Placement]],
    mask: RegionMask,
    occupancy_mode: str = "dense",
    allocator: Optional[LiteralAllocator] = None,
) -> Encoding:
    """Allocate literals for every placement and emit the exact-cover CNF.

    Clause families, in order: placement/occupancy linking, each piece placed
    exactly once, each mask-true cell covered exactly once.
    """
    if occupancy_mode not in OCCUPANCY_MODES:
        raise ValueError(f"Unknown occupancy mode {occupancy_mode!r}; expected one of {OCCUPANCY_MODES}")
    allocator = allocator or LiteralAllocator()
    blocks, piece_literals = _allocate(placements_by_piece, mask, occupancy_mode, allocator)
    open_cells = mask.open_cells()
    cnf = CnfInstance()
    counts: Dict[str, int] = {}

    # --- linking ---
    for block in blocks:
        footprint = block.placement.cells
        for cell in block.placement.sorted_cells():
            cnf.add((-block.literal, block.occupancy[cell]))
            cnf.add((-block.occupancy[cell], block.literal))
        if occupancy_mode == "dense":
            for cell in open_cells:
                if cell not in footprint:
                    cnf.add((-block.occupancy[cell],))
    counts["linking"] = len(cnf)

    # --- piece exactly once ---
    for lits in piece_literals:
        cnf.at_least_one(lits)
        cnf.at_most_one(lits)
    counts["pieces"] = len(cnf) - counts["linking"]

    # --- cell exactly one coverer ---
    for cell in open_cells:
        coverers = [block.occupancy[cell] for block in blocks if cell in block.occupancy]
        cnf.at_least_one(coverers)
        cnf.at_most_one(coverers)
    counts["cells"] = len(cnf) - counts["linking"] - counts["pieces"]

    cnf.num_vars = max(cnf.num_vars, allocator.count)
    return Encoding(
        mask=mask,
        occupancy_mode=occupancy_mode,
        cnf=cnf,
        blocks=blocks,
        piece_literals=piece_literals,
        num_vars=allocator.count,
        counts=counts,
    )
