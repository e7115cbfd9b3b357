# solver/engine.py — pieces + region mask -> CNF -> tiling
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from config import CFG
from masks import coerce_mask
from models import (
    Cell,
    EmptyPieceError,
    Piece,
    Placement,
    PolyominoError,
    SolverInternalError,
    Unsatisfiable,
)
from progress import PhaseTimer, emit_log, reset as progress_reset, set_done
from render import render_text
from solver.backends import SAT, UNSAT, SatBackend, default_backend
from solver.decode import decode_model, tiling_problem
from solver.encoding import OCCUPANCY_MODES, Encoding, compile_clauses, estimate_clauses
from solver.orientations import generate_orientations
from solver.placements import generate_placements


@dataclass
class SolveResult:
    ok: bool
    pieces: List[List[Cell]] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    error: Optional[PolyominoError] = None
    reason: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def unwrap(self) -> List[List[Cell]]:
        if self.error is not None:
            raise self.error
        return self.pieces

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "pieces": [[list(c) for c in cells] for cells in self.pieces],
            "piece_indices": [p.piece_index for p in self.placements],
            "error": self.error.kind if self.error is not None else None,
            "reason": self.reason,
            "meta": self.meta,
        }


def prepare_pieces(pieces: Sequence[Sequence[Sequence[int]]]) -> List[Piece]:
    prepared: List[Piece] = []
    for idx, cells in enumerate(pieces):
        piece = Piece.from_cells(cells)
        if not piece.cells:
            raise EmptyPieceError(f"Piece {idx} has no cells")
        prepared.append(piece)
    return prepared


def build_encoding(
    pieces: Sequence[Sequence[Sequence[int]]],
    region_mask: Any,
    allow_reflections: bool = False,
    occupancy: Optional[str] = None,
    *,
    timer: Optional[PhaseTimer] = None,
) -> Encoding:
    """Orientations, placements and CNF for one puzzle; raises on fail-fast cases."""
    timer = timer or PhaseTimer()
    mask = coerce_mask(region_mask)
    prepared = prepare_pieces(pieces)
    occupancy_mode = (occupancy or CFG.OCCUPANCY or "dense").lower()

    with timer.phase("orientations") as info:
        orientations = [generate_orientations(p, allow_reflections) for p in prepared]
        info["orientations"] = sum(len(o) for o in orientations)

    with timer.phase("placements") as info:
        placements_by_piece: List[List[Placement]] = []
        for idx, variants in enumerate(orientations):
            placements: List[Placement] = []
            for orientation in variants:
                placements.extend(generate_placements(orientation, mask, idx))
            placements_by_piece.append(placements)
        total = sum(len(p) for p in placements_by_piece)
        info["placements"] = total

    for idx, placements in enumerate(placements_by_piece):
        if not placements:
            raise Unsatisfiable(f"Piece {idx} has no legal placement in the region")

    max_placements = int(getattr(CFG, "MAX_PLACEMENTS", 200000))
    if total > max_placements:
        raise SolverInternalError(
            f"Model capped: {total:,} placements > limit ({max_placements:,})"
        )

    covered = set()
    for placements in placements_by_piece:
        for placement in placements:
            covered.update(placement.cells)
    uncoverable = [c for c in mask.open_cells() if c not in covered]
    if uncoverable:
        raise Unsatisfiable(
            f"Coverage impossible: {len(uncoverable)} un-coverable cell(s), e.g. {uncoverable[0]}"
        )

    if occupancy_mode in OCCUPANCY_MODES:
        estimate = estimate_clauses(placements_by_piece, mask, occupancy_mode)
        max_clauses = int(getattr(CFG, "MAX_CLAUSES", 5000000))
        if estimate > max_clauses:
            raise SolverInternalError(
                f"Model capped: {estimate:,} clauses ({occupancy_mode}) > limit ({max_clauses:,})"
            )

    with timer.phase("encoding") as info:
        encoding = compile_clauses(placements_by_piece, mask, occupancy_mode)
        info["variables"] = encoding.num_vars
        info["clauses"] = len(encoding.cnf)
        info["mode"] = occupancy_mode

    encoding.counts["orientations"] = sum(len(o) for o in orientations)
    encoding.counts["placements"] = total
    return encoding


def _run_backend(encoding: Encoding, backend: SatBackend):
    try:
        for clause in encoding.cnf:
            backend.add_clause(clause)
        return backend.solve()
    except PolyominoError:
        raise
    except Exception as e:
        raise SolverInternalError(f"SAT backend failed: {e}") from e


def solve(
    pieces: Sequence[Sequence[Sequence[int]]],
    region_mask: Any,
    allow_reflections: bool = False,
    verbose: bool = False,
    *,
    backend: Optional[SatBackend] = None,
    occupancy: Optional[str] = None,
) -> SolveResult:
    """Tile ``region_mask`` with every piece exactly once.

    Never raises the typed solver errors: failures come back as
    ``SolveResult(ok=False, error=...)``. ``verbose`` adds phase timings and a
    lettered rendering of the solution to ``meta``.
    """
    progress_reset()
    timer = PhaseTimer()
    meta: Dict[str, Any] = {
        "allow_reflections": bool(allow_reflections),
        "piece_count": len(pieces),
    }
    result = SolveResult(ok=False, meta=meta)

    try:
        encoding = build_encoding(
            pieces, region_mask, allow_reflections, occupancy, timer=timer
        )
        meta["occupancy"] = encoding.occupancy_mode
        meta["variables"] = encoding.num_vars
        meta["clauses"] = len(encoding.cnf)
        meta["counts"] = dict(encoding.counts)

        with timer.phase("solver") as info:
            outcome = _run_backend(encoding, backend or default_backend())
            info["status"] = outcome.status

        if outcome.status == UNSAT:
            raise Unsatisfiable("No solution found")
        if outcome.status != SAT:
            raise SolverInternalError(outcome.reason or f"Solver returned {outcome.status}")

        with timer.phase("decoding"):
            decoded = decode_model(encoding, outcome)
            cells = [c for _, c in decoded]
            problem = tiling_problem(encoding.mask, cells)
        if problem is not None:
            raise SolverInternalError(f"Model does not decode to an exact cover: {problem}")

        result.ok = True
        result.pieces = cells
        result.placements = [block.placement for block, _ in decoded]
        if verbose:
            rendering = render_text(cells, encoding.mask)
            meta["rendering"] = rendering
            emit_log("Solution", grid="\n" + rendering)
    except PolyominoError as e:
        result.ok = False
        result.error = e
        result.reason = str(e)
        result.pieces = []
        result.placements = []
        emit_log("Solve failed", kind=e.kind, reason=str(e))
    finally:
        if verbose:
            meta["timings"] = dict(timer.timings)
        set_done(result.ok, reason=result.reason)

    return result


__all__ = ["SolveResult", "build_encoding", "prepare_pieces", "solve"]
