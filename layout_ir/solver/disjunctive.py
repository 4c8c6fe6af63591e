"""Backtracking search over disjunctions of translated constraint sets.

The search walks the disjunctions in list order and, within each, the
alternatives in list order.  Before descending it checks that the required
rows plus every alternative chosen so far are still jointly satisfiable on a
pooled core, so infeasible prefixes are cut immediately.  The first complete
feasible combination wins.

Chosen alternatives form an immutable chain of ``(disjunction, alternative)``
indices into the translated arena; backtracking simply drops the chain link.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..constraints import VariableId
from .core import CorePool, CoreResult
from .expressions import LinearRow
from .model import STATUS_BUDGET, STATUS_SAT, STATUS_UNSAT, SearchBudget

logger = logging.getLogger(__name__)

Rows = Tuple[LinearRow, ...]
AlternativeRows = Tuple[Rows, ...]


@dataclass(frozen=True)
class _Choice:
    parent: Optional["_Choice"]
    disjunction: int
    alternative: int
    depth: int

    def indices(self) -> Tuple[int, ...]:
        out: List[int] = []
        link: Optional[_Choice] = self
        while link is not None:
            out.append(link.alternative)
            link = link.parent
        return tuple(reversed(out))


@dataclass
class SearchOutcome:
    status: str
    values: Dict[VariableId, float] = field(default_factory=dict)
    choices: Tuple[int, ...] = ()
    nodes_visited: int = 0
    max_depth_reached: int = 0
    required_infeasible: bool = False

    @property
    def satisfiable(self) -> bool:
        return self.status == STATUS_SAT


class _BudgetExhausted(Exception):
    pass


class DisjunctiveSolver:
    """Depth-first search with pruning over a :class:`CorePool`."""

    def __init__(
        self,
        pool: CorePool,
        budget: Optional[SearchBudget] = None,
        variables: Iterable[VariableId] = (),
    ) -> None:
        self.pool = pool
        self.budget = budget or SearchBudget()
        self.variables = tuple(variables)
        self.nodes_visited = 0

    def _check(self, rows: Sequence[LinearRow]) -> CoreResult:
        limit = self.budget.max_nodes
        if limit is not None and self.nodes_visited >= limit:
            raise _BudgetExhausted()
        self.nodes_visited += 1
        return self.pool.check(rows, self.variables)

    @staticmethod
    def _path_rows(link: Optional[_Choice], disjunctions: Sequence[AlternativeRows]) -> List[LinearRow]:
        chosen: List[Rows] = []
        while link is not None:
            chosen.append(disjunctions[link.disjunction][link.alternative])
            link = link.parent
        rows: List[LinearRow] = []
        for alternative in reversed(chosen):
            rows.extend(alternative)
        return rows

    def solve(self, required: Sequence[LinearRow], disjunctions: Sequence[AlternativeRows]) -> SearchOutcome:
        """Find the first combination of alternatives consistent with ``required``."""

        self.nodes_visited = 0
        required = tuple(required)
        disjunctions = tuple(tuple(alternatives) for alternatives in disjunctions)
        max_depth_reached = 0

        def outcome(status: str, **kwargs) -> SearchOutcome:
            result = SearchOutcome(
                status,
                nodes_visited=self.nodes_visited,
                max_depth_reached=max_depth_reached,
                **kwargs,
            )
            logger.info(
                "Disjunctive search finished: status=%s nodes=%d depth=%d",
                status,
                self.nodes_visited,
                max_depth_reached,
            )
            return result

        try:
            root = self._check(required)
            if not root.satisfiable:
                return outcome(STATUS_UNSAT, required_infeasible=True)
            if not disjunctions:
                return outcome(STATUS_SAT, values=root.values)

            # frame: [depth, chain, next alternative index]
            stack: List[list] = [[0, None, 0]]
            while stack:
                frame = stack[-1]
                depth, chain, alt = frame
                alternatives = disjunctions[depth]
                if alt >= len(alternatives):
                    stack.pop()
                    continue
                frame[2] = alt + 1

                max_depth = self.budget.max_depth
                if max_depth is not None and depth + 1 > max_depth:
                    raise _BudgetExhausted()

                rows = list(required)
                rows.extend(self._path_rows(chain, disjunctions))
                rows.extend(alternatives[alt])
                result = self._check(rows)
                if not result.satisfiable:
                    logger.debug("Pruned alternative %d of disjunction %d", alt, depth)
                    continue

                link = _Choice(chain, depth, alt, depth + 1)
                max_depth_reached = max(max_depth_reached, link.depth)
                if link.depth == len(disjunctions):
                    # the last partial check already covers required plus every choice
                    return outcome(STATUS_SAT, values=result.values, choices=link.indices())
                stack.append([depth + 1, link, 0])
        except _BudgetExhausted:
            logger.warning("Search budget exhausted after %d nodes", self.nodes_visited)
            return outcome(STATUS_BUDGET)

        return outcome(STATUS_UNSAT)


def solve_disjunctive(
    pool: CorePool,
    required: Sequence[LinearRow],
    disjunctions: Sequence[AlternativeRows],
    budget: Optional[SearchBudget] = None,
    variables: Iterable[VariableId] = (),
) -> SearchOutcome:
    return DisjunctiveSolver(pool, budget, variables).solve(required, disjunctions)


__all__ = ["DisjunctiveSolver", "SearchOutcome", "solve_disjunctive"]
