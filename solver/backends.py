# solver/backends.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import SolverInternalError

SAT = "SAT"
UNSAT = "UNSAT"
UNKNOWN = "UNKNOWN"


@dataclass
class SatOutcome:
    status: str
    model: Dict[int, bool] = field(default_factory=dict)
    reason: Optional[str] = None

    @property
    def satisfiable(self) -> bool:
        return self.status == SAT

    def value(self, literal: int) -> bool:
        v = self.model.get(abs(literal), False)
        return v if literal > 0 else not v


class SatBackend:
    """Narrow solver contract: feed clauses, then solve once."""

    def add_clause(self, literals: Iterable[int]) -> None:
        raise NotImplementedError

    def solve(self) -> SatOutcome:
        raise NotImplementedError


class CpSatBackend(SatBackend):
    """Clause-by-clause bridge onto an OR-Tools CP-SAT model."""

    def __init__(self, max_seconds: Optional[float] = None) -> None:
        self._model = _cp.CpModel()
        self._vars: Dict[int, _cp.IntVar] = {}
        self._clauses = 0
        self._max_seconds = CFG.MAX_SECONDS if max_seconds is None else max_seconds

    def _var(self, index: int):
        v = self._vars.get(index)
        if v is None:
            v = self._model.NewBoolVar(f"v_{index}")
            self._vars[index] = v
        return v

    def add_clause(self, literals: Iterable[int]) -> None:
        terms: List = []
        for lit in literals:
            lit = int(lit)
            if lit == 0:
                raise ValueError("Literal 0 is not a valid SAT variable")
            v = self._var(abs(lit))
            terms.append(v if lit > 0 else v.Not())
        self._model.AddBoolOr(terms)
        self._clauses += 1

    def solve(self) -> SatOutcome:
        solver = _cp.CpSolver()
        if self._max_seconds and float(self._max_seconds) > 0:
            solver.parameters.max_time_in_seconds = float(self._max_seconds)
        solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
        solver.parameters.num_workers = max(1, int(getattr(CFG, "WORKERS", 1)))
        solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
        solver.parameters.log_search_progress = False

        res = solver.Solve(self._model)

        if res in (_cp.OPTIMAL, _cp.FEASIBLE):
            model = {index: bool(solver.BooleanValue(v)) for index, v in self._vars.items()}
            return SatOutcome(SAT, model)
        if res == _cp.INFEASIBLE:
            return SatOutcome(UNSAT, reason="Proven infeasible")
        if res == _cp.MODEL_INVALID:
            raise SolverInternalError("Model invalid (configuration error)")
        return SatOutcome(UNKNOWN, reason="Stopped before solution (timebox)")


def default_backend() -> SatBackend:
    return CpSatBackend()
