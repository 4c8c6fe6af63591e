"""Solve sessions: per-solve ownership of the cache, the pool and the pipeline."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..constraints import (
    ConflictEntry,
    Disjunction,
    LayoutProblem,
    NodeId,
    PositionalConstraint,
    SourceGroup,
    VariableId,
    node_variable,
)
from ..consistency import drop_hidden_nodes, find_group_overlaps
from ..cyclic import expand
from ..printer import describe_constraint
from ..validate import validate
from .alignment import implicit_order_constraints
from .config import get_layout_config
from .core import CorePool
from .diagnose import ConflictDiagnoser
from .disjunctive import DisjunctiveSolver, SearchOutcome
from .expressions import ExpressionCache, LinearRow
from .model import (
    ChosenAlternative,
    LayoutConfig,
    STATUS_BUDGET,
    STATUS_SAT,
    STATUS_UNSAT,
    SolveOptions,
    SolveResult,
    SolveStats,
)
from .translator import ConstraintTranslator, group_boundary_sources, group_separation_disjunctions
from .utils import unique_in_order

logger = logging.getLogger(__name__)

RequiredInput = Union[SourceGroup, PositionalConstraint]


def _as_sources(required: Iterable[RequiredInput]) -> List[SourceGroup]:
    sources: List[SourceGroup] = []
    for item in required:
        if isinstance(item, SourceGroup):
            sources.append(item)
        else:
            sources.append(SourceGroup(describe_constraint(item), (item,)))
    return sources


def _union(sources: Sequence[SourceGroup]) -> List[PositionalConstraint]:
    return unique_in_order(c for source in sources for c in source.constraints)


class LayoutSession:
    """Owns the expression cache, the translation memo and the core pool of one solve.

    Use as a context manager; leaving the block disposes every resource.
    """

    def __init__(self, options: Optional[SolveOptions] = None, config: Optional[LayoutConfig] = None) -> None:
        self.options = (options or SolveOptions()).resolved(config or get_layout_config())
        self.cache = ExpressionCache()
        self.translator = ConstraintTranslator(self.cache)
        self.pool = CorePool(self.options.pool_size)
        self._disposed = False

    def __enter__(self) -> "LayoutSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Oracles

    def _ensure_open(self) -> None:
        if self._disposed:
            raise RuntimeError("layout session has been disposed")

    def _translate_disjunctions(self, disjunctions: Sequence[Disjunction]) -> List[Tuple[Tuple[LinearRow, ...], ...]]:
        return [
            tuple(self.translator.translate_all(alternative) for alternative in disjunction.alternatives)
            for disjunction in disjunctions
        ]

    def check(self, constraints: Sequence[PositionalConstraint], variables: Iterable[VariableId] = ()) -> bool:
        """Return whether ``constraints`` hold jointly."""

        self._ensure_open()
        return self.pool.check(self.translator.translate_all(constraints), variables).satisfiable

    def search(
        self,
        required: Sequence[PositionalConstraint],
        disjunctions: Sequence[Disjunction],
        variables: Iterable[VariableId] = (),
    ) -> SearchOutcome:
        self._ensure_open()
        solver = DisjunctiveSolver(self.pool, self.options.budget, variables)
        return solver.solve(self.translator.translate_all(required), self._translate_disjunctions(disjunctions))

    # ------------------------------------------------------------------
    # Solving

    def solve_constraints(
        self,
        required: Sequence[RequiredInput],
        disjunctions: Sequence[Disjunction] = (),
    ) -> SolveResult:
        """Solve bare constraints: each non-:class:`SourceGroup` item is its own source."""

        self._ensure_open()
        return self._run(_as_sources(required), list(disjunctions), ())

    def solve(self, problem: LayoutProblem) -> SolveResult:
        """Run the whole pipeline on ``problem``."""

        self._ensure_open()
        opts = self.options
        validate(problem)
        logger.info(
            "Solving layout with %d nodes, %d required sources, %d disjunctions, %d cyclic, %d groups",
            len(problem.nodes),
            len(problem.required),
            len(problem.disjunctions),
            len(problem.cyclic),
            len(problem.groups),
        )

        disjunctions = list(problem.disjunctions)
        for cyclic in problem.cyclic:
            expanded = expand(cyclic, opts.min_radius, opts.min_separation, opts.min_separation)
            if not any(expanded.alternatives):
                logger.debug("Skipping %s: no fragment has more than two nodes", cyclic.source_label)
                continue
            disjunctions.append(expanded)

        report = drop_hidden_nodes(problem, disjunctions)
        visible: List[NodeId] = [node.id for node in problem.visible_nodes()]

        overlaps = find_group_overlaps(report.groups)
        if overlaps:
            return SolveResult(False, STATUS_UNSAT, conflict=overlaps, dropped=report.entries, stats=self._stats())

        sources = list(report.required)
        sources.extend(group_boundary_sources(report.groups, visible, opts.group_padding))
        disjunctions = list(report.disjunctions)
        if opts.separate_groups:
            disjunctions.extend(group_separation_disjunctions(report.groups, visible, opts.min_separation))

        variables = [node_variable(node_id, axis) for node_id in visible for axis in ("x", "y")]
        return self._run(sources, disjunctions, variables, report.entries)

    def _run(
        self,
        sources: List[SourceGroup],
        disjunctions: List[Disjunction],
        variables: Sequence[VariableId],
        dropped: Optional[List[ConflictEntry]] = None,
    ) -> SolveResult:
        dropped = list(dropped or [])
        required = _union(sources)
        outcome = self.search(required, disjunctions, variables)
        stats = self._stats(outcome)

        if outcome.status == STATUS_BUDGET:
            return SolveResult(False, STATUS_BUDGET, dropped=dropped, stats=stats)

        if outcome.status == STATUS_UNSAT:
            conflict: List[ConflictEntry] = []
            if self.options.diagnose:
                diagnoser = ConflictDiagnoser(self.check, self._search_status)
                if outcome.required_infeasible:
                    conflict = diagnoser.diagnose(sources)
                else:
                    conflict = diagnoser.diagnose_disjunctive(sources, disjunctions)
            logger.info("Layout unsatisfiable; %d conflict entries", len(conflict))
            return SolveResult(False, STATUS_UNSAT, conflict=conflict, dropped=dropped, stats=self._stats(outcome))

        chosen = [
            ChosenAlternative(disjunction.source, index, alternative, disjunction.alternatives[alternative])
            for index, (disjunction, alternative) in enumerate(zip(disjunctions, outcome.choices))
        ]
        assignment = dict(outcome.values)
        implicit: List[PositionalConstraint] = []
        if self.options.order_aligned:
            active = required + [c for choice in chosen for c in choice.constraints]
            assignment, implicit = self._order_aligned(active, assignment, variables)

        logger.info("Layout solved with %d variables and %d chosen alternatives", len(assignment), len(chosen))
        return SolveResult(
            True,
            STATUS_SAT,
            assignment=assignment,
            chosen_alternatives=chosen,
            dropped=dropped,
            implicit=implicit,
            stats=self._stats(outcome),
        )

    def _search_status(self, required: Sequence[PositionalConstraint], disjunctions: Sequence[Disjunction]) -> str:
        return self.search(required, disjunctions).status

    def _order_aligned(
        self,
        active: List[PositionalConstraint],
        assignment: Dict[VariableId, float],
        variables: Sequence[VariableId],
    ) -> Tuple[Dict[VariableId, float], List[PositionalConstraint]]:
        positions: Dict[str, Tuple[float, float]] = {}
        for var, value in assignment.items():
            if var.axis in ("x", "y"):
                x, y = positions.get(var.owner, (0.0, 0.0))
                positions[var.owner] = (value, y) if var.axis == "x" else (x, value)
        implicit = implicit_order_constraints(active, positions, self.options.min_separation)
        if not implicit:
            return assignment, []

        result = self.pool.check(self.translator.translate_all(active + implicit), variables)
        if not result.satisfiable:
            logger.warning(
                "Aligned-node ordering made the layout unsatisfiable; keeping the unordered assignment"
            )
            return assignment, []
        return result.values, implicit

    # ------------------------------------------------------------------
    # Resources

    def _stats(self, outcome: Optional[SearchOutcome] = None) -> SolveStats:
        return SolveStats(
            nodes_visited=outcome.nodes_visited if outcome else 0,
            max_depth_reached=outcome.max_depth_reached if outcome else 0,
            core_checks=self.pool.checks,
            cores_created=self.pool.created,
            cores_reused=self.pool.reused,
            cache_hits=self.cache.hits,
            cache_misses=self.cache.misses,
        )

    def memory_stats(self) -> Dict[str, int]:
        return {
            "cached_expressions": len(self.cache),
            "translated_constraints": len(self.translator),
            "idle_cores": self.pool.idle,
            "cores_in_use": self.pool.in_use,
        }

    def dispose(self) -> None:
        if self._disposed:
            return
        logger.debug("Disposing layout session: %s", self.memory_stats())
        self.translator.clear()
        self.cache.clear()
        self.pool.dispose()
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed


def solve_layout(problem: LayoutProblem, options: Optional[SolveOptions] = None) -> SolveResult:
    with LayoutSession(options) as session:
        return session.solve(problem)


def solve(
    required: Sequence[RequiredInput],
    disjunctions: Sequence[Disjunction] = (),
    options: Optional[SolveOptions] = None,
) -> SolveResult:
    with LayoutSession(options) as session:
        return session.solve_constraints(required, disjunctions)


__all__ = ["LayoutSession", "solve", "solve_layout"]
