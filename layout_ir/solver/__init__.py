"""Solver façade orchestrating expansion, search and diagnosis."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..constraints import LayoutProblem
from .alignment import IMPLICIT_SOURCE, alignment_classes, implicit_order_constraints
from .config import get_layout_config, set_layout_config
from .core import ConjunctiveCore, CorePool, CoreResult, CoreSolverError
from .diagnose import ConflictDiagnoser, deletion_filter, diagnose
from .disjunctive import DisjunctiveSolver, SearchOutcome, solve_disjunctive
from .expressions import ExpressionCache, ExpressionKey, LinearExpression, LinearRow, eq, le
from .model import (
    ChosenAlternative,
    LayoutConfig,
    STATUS_BUDGET,
    STATUS_SAT,
    STATUS_UNSAT,
    SearchBudget,
    SolveOptions,
    SolveResult,
    SolveStats,
)
from .session import LayoutSession, solve, solve_layout
from .translator import ConstraintTranslator, group_boundary_sources, group_separation_disjunctions
from .utils import translate_to_origin

logger = logging.getLogger(__name__)

if not logging.getLogger().handlers:  # pragma: no cover - depends on host application
    logging.basicConfig(level=logging.INFO)


def solve_many(problems: Sequence[LayoutProblem], options: Optional[SolveOptions] = None) -> list:
    """Solve each problem in its own session; sessions never share caches."""

    logger.info("Solving %d layout problems", len(problems))
    return [solve_layout(problem, options) for problem in problems]


__all__ = [
    "ChosenAlternative",
    "ConflictDiagnoser",
    "ConjunctiveCore",
    "ConstraintTranslator",
    "CorePool",
    "CoreResult",
    "CoreSolverError",
    "DisjunctiveSolver",
    "ExpressionCache",
    "ExpressionKey",
    "IMPLICIT_SOURCE",
    "LayoutConfig",
    "LayoutSession",
    "LinearExpression",
    "LinearRow",
    "STATUS_BUDGET",
    "STATUS_SAT",
    "STATUS_UNSAT",
    "SearchBudget",
    "SearchOutcome",
    "SolveOptions",
    "SolveResult",
    "SolveStats",
    "alignment_classes",
    "deletion_filter",
    "diagnose",
    "eq",
    "get_layout_config",
    "group_boundary_sources",
    "group_separation_disjunctions",
    "implicit_order_constraints",
    "le",
    "set_layout_config",
    "solve",
    "solve_disjunctive",
    "solve_layout",
    "solve_many",
    "translate_to_origin",
]
