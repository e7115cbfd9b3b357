from typing import List

import pytest

from config import CFG
from masks import coerce_mask
from models import EmptyPieceError, MalformedMaskError, SolverInternalError, Unsatisfiable
from solver.backends import SAT, UNKNOWN, SatBackend, SatOutcome
from solver.engine import build_encoding, solve

I_TROMINO = [(0, 0), (0, 1), (0, 2)]
L_TROMINO = [(0, 0), (0, 1), (1, 1)]
STAIRS = ["XXX", "XX.", "X.."]


class RecordingBackend(SatBackend):
    def __init__(self, outcome=None, exc=None):
        self.clauses: List[tuple] = []
        self.solved = False
        self._outcome = outcome
        self._exc = exc

    def add_clause(self, literals):
        self.clauses.append(tuple(literals))

    def solve(self):
        self.solved = True
        if self._exc is not None:
            raise self._exc
        return self._outcome


def _assert_exact_cover(mask_rows, pieces):
    open_cells = set(coerce_mask(mask_rows).open_cells())
    seen = set()
    for cells in pieces:
        assert not seen & set(cells)
        seen |= set(cells)
    assert seen == open_cells


@pytest.mark.parametrize("mode", ["dense", "sparse"])
def test_tromino_scenario(mode):
    result = solve([I_TROMINO, L_TROMINO], STAIRS, allow_reflections=False, occupancy=mode)
    assert result.ok, result.reason
    assert result.error is None
    assert len(result.pieces) == 2
    _assert_exact_cover(STAIRS, result.pieces)
    assert sorted(map(sorted, result.pieces)) == [
        [(0, 0), (0, 1), (0, 2)],
        [(1, 0), (1, 1), (2, 0)],
    ]
    assert [p.piece_index for p in result.placements] == [0, 1]
    assert result.unwrap() == result.pieces


@pytest.mark.parametrize("mode", ["dense", "sparse"])
def test_square_of_two_bars_and_two_squares(mode):
    bar = [(0, 0), (1, 0), (2, 0), (3, 0)]
    square = [(0, 0), (1, 0), (0, 1), (1, 1)]
    mask = ["XXXX"] * 4
    result = solve([bar, square, bar, square], mask, occupancy=mode)
    assert result.ok, result.reason
    assert len(result.pieces) == 4
    _assert_exact_cover(mask, result.pieces)


@pytest.mark.parametrize("mode", ["dense", "sparse"])
def test_single_cell_cannot_cover_two_cells(mode):
    result = solve([[(0, 0)]], ["XX"], occupancy=mode)
    assert not result.ok
    assert isinstance(result.error, Unsatisfiable)
    assert result.pieces == []
    with pytest.raises(Unsatisfiable):
        result.unwrap()


def test_empty_piece_fails_before_backend():
    backend = RecordingBackend()
    result = solve([[(0, 0)], []], ["XX"], backend=backend)
    assert isinstance(result.error, EmptyPieceError)
    assert backend.clauses == []
    assert not backend.solved


@pytest.mark.parametrize("mask", [[], [""], ["XX", "X"]])
def test_malformed_mask(mask):
    result = solve([[(0, 0)]], mask)
    assert isinstance(result.error, MalformedMaskError)


def test_piece_without_placement_fails_fast():
    backend = RecordingBackend()
    result = solve([[(0, 0), (0, 1), (0, 2), (0, 3)]], ["XXX"] * 3, backend=backend)
    assert isinstance(result.error, Unsatisfiable)
    assert "no legal placement" in result.reason
    assert not backend.solved


def test_uncoverable_cell_fails_fast():
    backend = RecordingBackend()
    result = solve([[(0, 0), (1, 0)]], ["XX.", "..X"], backend=backend)
    assert isinstance(result.error, Unsatisfiable)
    assert "un-coverable" in result.reason
    assert not backend.solved


def test_mirror_image_requires_reflections():
    s_piece = [(1, 0), (1, 1), (0, 1), (0, 2)]
    z_region = ["X.", "XX", ".X"]
    assert isinstance(solve([s_piece], z_region).error, Unsatisfiable)
    flipped = solve([s_piece], z_region, allow_reflections=True)
    assert flipped.ok, flipped.reason
    assert sorted(flipped.pieces[0]) == [(0, 0), (0, 1), (1, 1), (1, 2)]


def test_backend_receives_every_clause_in_order():
    enc = build_encoding([I_TROMINO, L_TROMINO], STAIRS, occupancy="sparse")
    backend = RecordingBackend(outcome=SatOutcome(UNKNOWN, reason="gave up"))
    result = solve([I_TROMINO, L_TROMINO], STAIRS, backend=backend, occupancy="sparse")
    assert backend.clauses == enc.cnf.clauses
    assert isinstance(result.error, SolverInternalError)
    assert result.reason == "gave up"


def test_backend_exception_becomes_internal_error():
    backend = RecordingBackend(exc=RuntimeError("native crash"))
    result = solve([I_TROMINO, L_TROMINO], STAIRS, backend=backend)
    assert isinstance(result.error, SolverInternalError)
    assert "native crash" in result.reason
    assert isinstance(result.error.__cause__, RuntimeError)


def test_model_that_is_not_a_tiling_is_rejected():
    backend = RecordingBackend(outcome=SatOutcome(SAT, {}))
    result = solve([I_TROMINO, L_TROMINO], STAIRS, backend=backend)
    assert isinstance(result.error, SolverInternalError)
    assert result.pieces == []


def test_placement_cap(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_PLACEMENTS", 3)
    result = solve([I_TROMINO, L_TROMINO], STAIRS)
    assert isinstance(result.error, SolverInternalError)
    assert result.reason.startswith("Model capped")


def test_config_selects_occupancy_mode(monkeypatch):
    monkeypatch.setattr(CFG, "OCCUPANCY", "sparse")
    result = solve([I_TROMINO, L_TROMINO], STAIRS)
    assert result.ok
    assert result.meta["occupancy"] == "sparse"
    assert result.meta["variables"] == 32


def test_verbose_reports_timings_and_rendering():
    result = solve([I_TROMINO, L_TROMINO], STAIRS, verbose=True)
    assert result.ok
    assert set(result.meta["timings"]) == {
        "orientations", "placements", "encoding", "solver", "decoding",
    }
    rows = result.meta["rendering"].splitlines()
    assert len(rows) == 3
    assert "".join(rows).count("A") == 3
    assert "".join(rows).count("B") == 3


def test_quiet_run_omits_diagnostics():
    result = solve([I_TROMINO, L_TROMINO], STAIRS)
    assert "timings" not in result.meta
    assert "rendering" not in result.meta


def test_repeated_runs_agree_on_outcome():
    first = solve([I_TROMINO, L_TROMINO], STAIRS)
    second = solve([I_TROMINO, L_TROMINO], STAIRS)
    assert first.ok and second.ok
    assert len(first.pieces) == len(second.pieces)


def test_to_dict_is_json_shaped():
    body = solve([[(0, 0)]], ["XX"]).to_dict()
    assert body["ok"] is False
    assert body["error"] == "unsatisfiable"
    assert body["pieces"] == []


def test_mixed_string_and_boolean_mask():
    result = solve([[(0, 0)]], ["X.", [False, False]])
    assert result.ok, result.reason
    assert result.pieces == [[(0, 0)]]


def test_clause_cap_guards_dense_growth(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_CLAUSES", 100)
    dense = solve([I_TROMINO, L_TROMINO], STAIRS, occupancy="dense")
    assert isinstance(dense.error, SolverInternalError)
    assert dense.reason.startswith("Model capped: 264 clauses")
    sparse = solve([I_TROMINO, L_TROMINO], STAIRS, occupancy="sparse")
    assert sparse.ok, sparse.reason
