# app.py — JSON solve endpoint, demo puzzles, latest-result page
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Optional

from flask import Flask, request, jsonify

from config import CFG
from io_files import layout_page, write_coords, write_layout_view_html
from masks import coerce_mask, parse_payload
from models import EmptyPieceError, MalformedMaskError, Unsatisfiable
from progress import snapshot as progress_snapshot
from puzzles import PUZZLES, get_puzzle
from render import render_svg, render_text
from solver.cp_isolate import run_solve_isolated
from solver.engine import SolveResult, solve

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "reason": "No run yet",
    "svg": "",
    "legend": "",
    "elapsed_str": "0s",
    "placed_count": 0,
    "piece_count": 0,
}

_CLIENT_ERRORS = (EmptyPieceError.kind, MalformedMaskError.kind)

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _run(
    pieces: List,
    mask: Any,
    allow_reflections: bool,
    verbose: bool,
    occupancy: Optional[str] = None,
) -> SolveResult:
    if CFG.ISOLATE:
        return run_solve_isolated(
            pieces,
            mask,
            allow_reflections,
            max_seconds=CFG.ISOLATE_SECONDS,
            occupancy=occupancy,
            verbose=verbose,
        )
    return solve(pieces, mask, allow_reflections, verbose, occupancy=occupancy)


def _remember(result: SolveResult, mask: Any, elapsed: float, piece_count: int) -> None:
    """Refresh the latest-result page and optionally write it to disk."""
    LAST_RESULT.update(
        ok=result.ok,
        reason=result.reason or ("Solved" if result.ok else "No solution"),
        elapsed_str=_fmt_elapsed(elapsed),
        placed_count=len(result.pieces),
        piece_count=piece_count,
        svg="",
        legend="",
    )
    if not result.ok:
        return
    region = coerce_mask(mask)
    svg, legend = render_svg(result.pieces, region)
    LAST_RESULT.update(svg=svg, legend=legend)
    if CFG.WRITE_OUTPUTS:
        write_coords(result.pieces, BASE_DIR, render_text(result.pieces, region))
        write_layout_view_html(svg, legend, BASE_DIR)


def _respond(result: SolveResult, elapsed: float):
    body = result.to_dict()
    body["elapsed_str"] = _fmt_elapsed(elapsed)
    if result.ok or body["error"] == Unsatisfiable.kind:
        return jsonify(body), 200
    if body["error"] in _CLIENT_ERRORS:
        return jsonify(body), 400
    return jsonify(body), 500


@app.route("/solve", methods=["POST"])
def solve_route():
    payload = request.get_json(silent=True)
    try:
        pieces, mask, allow_reflections, verbose = parse_payload(payload)
    except ValueError as e:
        return jsonify({"ok": False, "error": "bad_request", "reason": str(e)}), 400

    t0 = time.time()
    result = _run(pieces, mask, allow_reflections, verbose)
    elapsed = time.time() - t0
    _remember(result, mask, elapsed, len(pieces))
    return _respond(result, elapsed)


@app.route("/puzzles")
def list_puzzles():
    return jsonify({
        name: {
            "pieces": [list(map(list, p)) for p in puzzle.pieces],
            "mask": list(puzzle.mask),
            "allow_reflections": puzzle.allow_reflections,
        }
        for name, puzzle in PUZZLES.items()
    })


@app.route("/puzzles/<name>")
def solve_puzzle(name: str):
    try:
        puzzle = get_puzzle(name)
    except KeyError as e:
        return jsonify({"ok": False, "error": "not_found", "reason": str(e.args[0])}), 404

    verbose = request.args.get("verbose", "0") in ("1", "true", "yes")
    t0 = time.time()
    result = _run(
        puzzle.piece_lists(), list(puzzle.mask), puzzle.allow_reflections, verbose, puzzle.occupancy
    )
    elapsed = time.time() - t0
    _remember(result, list(puzzle.mask), elapsed, len(puzzle.pieces))
    return _respond(result, elapsed)


@app.route("/result/latest")
def result_latest():
    if LAST_RESULT["ok"]:
        title = f"Solved: {LAST_RESULT['placed_count']} pieces in {LAST_RESULT['elapsed_str']}"
        return layout_page(LAST_RESULT["svg"], LAST_RESULT["legend"], title=title)
    return layout_page("", "", title=f"No solution: {LAST_RESULT['reason']}")


@app.route("/progress")
def progress():
    return jsonify(progress_snapshot())


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=False)
