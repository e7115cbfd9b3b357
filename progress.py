from __future__ import annotations

import logging
import time
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from config import CFG

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_path() -> Path:
    configured = (CFG.LOG_FILE or "").strip()
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "solver_attempts.log"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    if logger.handlers:
        return logger

    log_path = _log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # An unwritable log directory must not stop the solver.
        logger.handlers.clear()
    return logger


ATTEMPT_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(ATTEMPT_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.3f}s"
    except (TypeError, ValueError):
        return None


def emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        ATTEMPT_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        ATTEMPT_LOGGER.info("%s", event)


# Single source of truth for the service's progress endpoint
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "phase": "",               # orientations | placements | encoding | solver | decoding
    "started": None,           # t0 (float) when solving started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,               # monotonically increasing identifier
}


def _now() -> float:
    return time.time()


def reset() -> None:
    with PROGRESS_LOCK:
        run_id = int(PROGRESS.get("run_id", 0)) + 1
        PROGRESS.update(
            status="Solving",
            phase="",
            started=_now(),
            elapsed=0.0,
            message="",
            done=False,
            ok=None,
            run_id=run_id,
        )
    emit_log("Run started", run_id=run_id)


def set_phase(phase: str) -> None:
    with PROGRESS_LOCK:
        PROGRESS["phase"] = phase
        started = PROGRESS.get("started")
        if isinstance(started, (int, float)):
            PROGRESS["elapsed"] = max(0.0, _now() - float(started))


def set_done(ok: bool = True, *, reason: Optional[str] = None) -> None:
    with PROGRESS_LOCK:
        PROGRESS["done"] = True
        PROGRESS["ok"] = bool(ok)
        PROGRESS["status"] = "Solved" if ok else "Error"
        PROGRESS["message"] = reason or ""
        started = PROGRESS.get("started")
        if isinstance(started, (int, float)):
            PROGRESS["elapsed"] = max(0.0, _now() - float(started))
        run_id = PROGRESS["run_id"]
        elapsed = PROGRESS["elapsed"]
    emit_log("Run finished", run_id=run_id, ok=bool(ok), reason=reason, duration=_fmt_seconds(elapsed))


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        return dict(PROGRESS)


class PhaseTimer:
    """Collects wall-clock durations of the named solve phases."""

    def __init__(self) -> None:
        self.timings: Dict[str, float] = {}

    @contextmanager
    def phase(self, name: str) -> Iterator[Dict[str, Any]]:
        """Time a phase; keys added to the yielded dict are logged with it."""
        set_phase(name)
        fields: Dict[str, Any] = {}
        start = time.perf_counter()
        try:
            yield fields
        finally:
            elapsed = time.perf_counter() - start
            self.timings[name] = elapsed
            emit_log("Phase finished", phase=name, duration=_fmt_seconds(elapsed), **fields)


__all__ = [
    "ATTEMPT_LOGGER",
    "PROGRESS",
    "PROGRESS_LOCK",
    "PhaseTimer",
    "emit_log",
    "reset",
    "set_done",
    "set_phase",
    "snapshot",
]
