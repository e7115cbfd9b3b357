# solver/cp_isolate.py
import multiprocessing as mp
import queue
import time
import traceback
from typing import List, Optional, Sequence

from models import SolverInternalError

# Worker must be top-level (picklable on Windows spawn)
def _solve_worker(q, pieces, mask_rows, allow_reflections: bool, verbose: bool, occupancy: Optional[str]):
    try:
        from solver.engine import solve  # import inside child
        q.put(("ok", solve(pieces, mask_rows, allow_reflections, verbose, occupancy=occupancy)))
    except MemoryError:
        q.put(("err", "Child ran out of memory"))
    except Exception as e:
        q.put(("exc", f"{e}\n{traceback.format_exc()}"))

def _failed(reason: str, crash_note: str):
    from solver.engine import SolveResult
    return SolveResult(
        ok=False,
        error=SolverInternalError(reason),
        reason=reason,
        meta={"crash_note": crash_note},
    )

def run_solve_isolated(
    pieces: Sequence[Sequence[Sequence[int]]],
    mask_rows: List[List[bool]],
    allow_reflections: bool = False,
    max_seconds: float = 60.0,
    occupancy: Optional[str] = None,
    verbose: bool = False,
):
    """
    Run ``solve`` in a child process and kill it after ``max_seconds``.
    Crashes, kills and timeouts come back as ``SolverInternalError`` results
    with ``meta["crash_note"]`` set.
    """
    ctx = mp.get_context("spawn")  # safest on Windows
    q = ctx.Queue()
    p = ctx.Process(
        target=_solve_worker,
        args=(
            q,
            [list(map(tuple, cells)) for cells in pieces],
            mask_rows,
            bool(allow_reflections),
            bool(verbose),
            occupancy,
        ),
    )
    p.daemon = True
    p.start()

    # Read before join(): a child with a pending large result never exits.
    deadline = time.monotonic() + float(max_seconds)
    tag, payload = None, None
    while True:
        try:
            tag, payload = q.get(timeout=0.1)
            break
        except queue.Empty:
            pass
        if not p.is_alive():
            try:
                tag, payload = q.get(timeout=0.5)
            except queue.Empty:
                pass
            break
        if time.monotonic() >= deadline:
            p.terminate()
            p.join(2.0)
            return _failed("Stopped before solution (timebox)", "killed: timeout")

    if tag is None:
        if p.exitcode not in (0, None):
            return _failed(f"Stopped before solution (child exit {p.exitcode})", "child crashed")
        return _failed("No result from child process", "no-result")

    p.join(2.0)
    if tag == "ok":
        return payload
    if tag == "err":
        return _failed(payload, "out-of-memory")
    return _failed(payload, "exception")
