"""Conjunctive linear-arithmetic core backed by SciPy's HiGHS interface."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np
from scipy.optimize import linprog

from ..constraints import VariableId
from .expressions import LinearRow

logger = logging.getLogger(__name__)

# linprog status codes
_STATUS_OPTIMAL = 0
_STATUS_INFEASIBLE = 2

_CONSTANT_TOL = 1e-9


class CoreSolverError(RuntimeError):
    """Raised when the linear backend fails for a reason other than infeasibility."""


@dataclass
class CoreResult:
    satisfiable: bool
    values: Dict[VariableId, float] = field(default_factory=dict)
    status: int = _STATUS_OPTIMAL
    message: str = ""


class ConjunctiveCore:
    """A mutable set of linear rows solved as one feasibility problem."""

    def __init__(self) -> None:
        self._rows: List[LinearRow] = []
        self._declared: Dict[VariableId, None] = {}
        self._disposed = False
        self.solves = 0

    def _ensure_open(self) -> None:
        if self._disposed:
            raise CoreSolverError("core has been disposed")

    def declare(self, variables: Iterable[VariableId]) -> None:
        """Register variables that must be reported even when no row mentions them."""

        self._ensure_open()
        for var in variables:
            self._declared.setdefault(var, None)

    def add(self, row: LinearRow) -> None:
        self._ensure_open()
        self._rows.append(row)

    def add_all(self, rows: Iterable[LinearRow]) -> None:
        self._ensure_open()
        self._rows.extend(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def _variable_order(self) -> List[VariableId]:
        order: Dict[VariableId, None] = dict(self._declared)
        for row in self._rows:
            for var in row.expression.variables:
                order.setdefault(var, None)
        return list(order)

    def solve(self) -> CoreResult:
        self._ensure_open()
        self.solves += 1
        variables = self._variable_order()
        index = {var: idx for idx, var in enumerate(variables)}

        ub_rows: List[LinearRow] = []
        eq_rows: List[LinearRow] = []
        for row in self._rows:
            if not row.expression.terms:
                # constant rows never reach the backend
                value = row.expression.constant
                holds = abs(value) <= _CONSTANT_TOL if row.relation == "==" else value <= _CONSTANT_TOL
                if not holds:
                    logger.debug("Constant row %s is violated", row)
                    return CoreResult(False, status=_STATUS_INFEASIBLE, message=f"constant row violated: {row}")
                continue
            (eq_rows if row.relation == "==" else ub_rows).append(row)

        if not variables:
            return CoreResult(True)
        if not ub_rows and not eq_rows:
            return CoreResult(True, {var: 0.0 for var in variables})

        def assemble(rows: Sequence[LinearRow]):
            if not rows:
                return None, None
            matrix = np.zeros((len(rows), len(variables)))
            rhs = np.zeros(len(rows))
            for r, row in enumerate(rows):
                for var, coef in row.expression.terms:
                    matrix[r, index[var]] += coef
                rhs[r] = -row.expression.constant
            return matrix, rhs

        a_ub, b_ub = assemble(ub_rows)
        a_eq, b_eq = assemble(eq_rows)
        logger.debug(
            "Solving core with %d variables, %d inequalities, %d equalities",
            len(variables),
            len(ub_rows),
            len(eq_rows),
        )
        try:
            res = linprog(
                np.zeros(len(variables)),
                A_ub=a_ub,
                b_ub=b_ub,
                A_eq=a_eq,
                b_eq=b_eq,
                bounds=(None, None),
                method="highs",
            )
        except ValueError as exc:
            raise CoreSolverError(f"linear backend rejected the problem: {exc}") from exc

        if res.status == _STATUS_INFEASIBLE:
            return CoreResult(False, status=res.status, message=res.message)
        if res.status != _STATUS_OPTIMAL:
            raise CoreSolverError(f"linear backend failed with status {res.status}: {res.message}")
        values = {var: float(res.x[idx]) for var, idx in index.items()}
        return CoreResult(True, values, status=res.status, message=res.message)

    def reset(self) -> None:
        self._rows.clear()
        self._declared.clear()

    def dispose(self) -> None:
        self.reset()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed


class CorePool:
    """Bounded pool of reusable :class:`ConjunctiveCore` instances."""

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError(f"pool capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._idle: List[ConjunctiveCore] = []
        self.in_use = 0
        self.created = 0
        self.reused = 0
        self.checks = 0
        self._disposed = False

    def acquire(self) -> ConjunctiveCore:
        if self._disposed:
            raise CoreSolverError("core pool has been disposed")
        if self._idle:
            core = self._idle.pop()
            self.reused += 1
        else:
            core = ConjunctiveCore()
            self.created += 1
        self.in_use += 1
        return core

    def release(self, core: ConjunctiveCore) -> None:
        self.in_use -= 1
        if self._disposed or len(self._idle) >= self.capacity:
            core.dispose()
            return
        core.reset()
        self._idle.append(core)

    @contextmanager
    def lease(self) -> Iterator[ConjunctiveCore]:
        core = self.acquire()
        try:
            yield core
        finally:
            self.release(core)

    def check(self, rows: Sequence[LinearRow], variables: Iterable[VariableId] = ()) -> CoreResult:
        """Solve ``rows`` on a pooled core and hand the core back."""

        self.checks += 1
        with self.lease() as core:
            core.declare(variables)
            core.add_all(rows)
            return core.solve()

    @property
    def idle(self) -> int:
        return len(self._idle)

    def stats(self) -> Dict[str, int]:
        return {
            "capacity": self.capacity,
            "idle": len(self._idle),
            "in_use": self.in_use,
            "created": self.created,
            "reused": self.reused,
            "checks": self.checks,
        }

    def dispose(self) -> None:
        logger.debug("Disposing core pool with %d idle cores", len(self._idle))
        for core in self._idle:
            core.dispose()
        self._idle.clear()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed


__all__ = ["ConjunctiveCore", "CorePool", "CoreResult", "CoreSolverError"]
