import pytest

from models import Piece
from puzzles import PUZZLES, get_puzzle
from solver.engine import solve
from solver.orientations import generate_orientations


@pytest.mark.parametrize("name", sorted(PUZZLES))
def test_piece_area_matches_region(name):
    puzzle = PUZZLES[name]
    area = sum(len(set(p)) for p in puzzle.pieces)
    open_cells = sum(row.count("X") for row in puzzle.mask)
    assert area == open_cells


def test_pentomino_set_is_the_twelve_free_shapes():
    pieces = [Piece(p) for p in PUZZLES["pentomino"].pieces]
    canonical = {min(generate_orientations(p, allow_reflections=True)) for p in pieces}
    assert len(canonical) == 12


def test_lookup_is_case_insensitive():
    assert get_puzzle(" Tromino ").name == "tromino"
    with pytest.raises(KeyError):
        get_puzzle("hexomino")


def test_tromino_puzzle_solves():
    puzzle = get_puzzle("tromino")
    result = solve(puzzle.piece_lists(), list(puzzle.mask), puzzle.allow_reflections)
    assert result.ok, result.reason


def _assert_exact_cover(puzzle, result):
    assert result.ok, result.reason
    assert len(result.pieces) == len(puzzle.pieces)
    assert [p.piece_index for p in result.placements] == list(range(len(puzzle.pieces)))
    covered = [cell for cells in result.pieces for cell in cells]
    open_cells = {(x, y) for y, row in enumerate(puzzle.mask) for x, ch in enumerate(row) if ch == "X"}
    assert len(covered) == len(set(covered))
    assert set(covered) == open_cells
    for placement, cells in zip(result.placements, result.pieces):
        source = Piece(puzzle.pieces[placement.piece_index])
        assert Piece(cells) in set(generate_orientations(source, puzzle.allow_reflections))
        assert frozenset(cells) == placement.cells


def test_tetromino_puzzle_solves():
    puzzle = get_puzzle("tetromino")
    result = solve(
        puzzle.piece_lists(), list(puzzle.mask), puzzle.allow_reflections, occupancy=puzzle.occupancy
    )
    _assert_exact_cover(puzzle, result)


@pytest.mark.slow
def test_pentomino_puzzle_solves(monkeypatch):
    from config import CFG

    monkeypatch.setattr(CFG, "WORKERS", 8)
    puzzle = get_puzzle("pentomino")
    result = solve(
        puzzle.piece_lists(), list(puzzle.mask), puzzle.allow_reflections, occupancy=puzzle.occupancy
    )
    _assert_exact_cover(puzzle, result)
