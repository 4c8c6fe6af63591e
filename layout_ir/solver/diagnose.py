"""Minimal conflict explanations for unsatisfiable layouts.

Diagnosis runs a deletion filter over source units: a unit is dropped when
the remaining units are still unsatisfiable and kept otherwise, which leaves
an irreducible set.  Each kept unit is then filtered again constraint by
constraint so the report lists only the derived constraints involved.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..constraints import ConflictEntry, Disjunction, PositionalConstraint, SourceGroup
from ..printer import describe_constraint, describe_disjunction
from .model import STATUS_UNSAT
from .utils import unique_in_order

logger = logging.getLogger(__name__)

T = TypeVar("T")

SatCheck = Callable[[Sequence[PositionalConstraint]], bool]
SearchCheck = Callable[[Sequence[PositionalConstraint], Sequence[Disjunction]], str]


def deletion_filter(units: Sequence[T], is_unsat: Callable[[List[T]], bool]) -> List[T]:
    """Return an irreducible subsequence of ``units`` that ``is_unsat`` still rejects.

    ``is_unsat(units)`` must hold on entry.  Units are visited in order; the
    result keeps the original relative order.
    """

    kept = list(range(len(units)))
    for index in range(len(units)):
        trial = [i for i in kept if i != index]
        if is_unsat([units[i] for i in trial]):
            kept = trial
    return [units[i] for i in kept]


def merge_sources(sources: Sequence[SourceGroup]) -> List[SourceGroup]:
    """Merge units that share a label, keeping first-seen order of labels and constraints."""

    merged: Dict[str, Dict[PositionalConstraint, None]] = {}
    for source in sources:
        bucket = merged.setdefault(source.label, {})
        for constraint in source.constraints:
            bucket.setdefault(constraint, None)
    return [SourceGroup(label, tuple(bucket)) for label, bucket in merged.items()]


def _union(sources: Sequence[SourceGroup]) -> List[PositionalConstraint]:
    return unique_in_order(c for source in sources for c in source.constraints)


def _entry(source: SourceGroup) -> ConflictEntry:
    return ConflictEntry(
        source.label,
        source.constraints,
        tuple(describe_constraint(constraint) for constraint in source.constraints),
    )


def _disjunction_entry(disjunction: Disjunction) -> ConflictEntry:
    return ConflictEntry(disjunction.source, disjunction.constraints(), describe_disjunction(disjunction))


def _refine(
    units: List[SourceGroup],
    is_unsat_constraints: Callable[[List[PositionalConstraint]], bool],
) -> List[SourceGroup]:
    """Shrink each unit to the constraints needed, holding the other units fixed."""

    refined = list(units)
    for index, unit in enumerate(units):
        if len(unit.constraints) <= 1:
            continue
        others = refined[:index] + refined[index + 1 :]

        def is_unsat(candidate: List[PositionalConstraint], _others=others) -> bool:
            return is_unsat_constraints(_union(_others) + candidate)

        kept = deletion_filter(list(unit.constraints), is_unsat)
        refined[index] = SourceGroup(unit.label, tuple(kept))
        logger.debug("Refined %s from %d to %d constraints", unit.label, len(unit.constraints), len(kept))
    return refined


class ConflictDiagnoser:
    """Builds conflict tables from a satisfiability oracle.

    ``check`` answers whether a conjunctive list of constraints is
    satisfiable; ``search`` (optional) runs the disjunctive search on a
    subproblem and returns its status string.
    """

    def __init__(self, check: SatCheck, search: Optional[SearchCheck] = None, refine: bool = True) -> None:
        self.check = check
        self.search = search
        self.refine = refine
        self.oracle_calls = 0

    def _sat(self, constraints: Sequence[PositionalConstraint]) -> bool:
        self.oracle_calls += 1
        return self.check(constraints)

    def _search_unsat(self, required: Sequence[PositionalConstraint], disjunctions: Sequence[Disjunction]) -> bool:
        self.oracle_calls += 1
        if self.search is None:
            raise ValueError("disjunctive diagnosis needs a search oracle")
        # a budget-exhausted check counts as "not proven unsat", so the unit stays
        return self.search(required, disjunctions) == STATUS_UNSAT

    def diagnose(self, sources: Sequence[SourceGroup]) -> List[ConflictEntry]:
        """Explain why the conjunction of ``sources`` is unsatisfiable."""

        units = [unit for unit in merge_sources(sources) if unit.constraints]
        if self._sat(_union(units)):
            logger.info("Diagnosis requested for a satisfiable set; nothing to report")
            return []

        kept = deletion_filter(units, lambda trial: not self._sat(_union(trial)))
        if self.refine:
            kept = _refine(kept, lambda constraints: not self._sat(constraints))
        logger.info("Conflict narrowed to %d of %d sources after %d checks", len(kept), len(units), self.oracle_calls)
        return [_entry(unit) for unit in kept]

    def diagnose_disjunctive(
        self, sources: Sequence[SourceGroup], disjunctions: Sequence[Disjunction]
    ) -> List[ConflictEntry]:
        """Explain a failure that only appears once disjunctions are involved.

        Each disjunction is one unit; removing it removes the requirement.
        """

        required_units = [unit for unit in merge_sources(sources) if unit.constraints]
        units: List[Tuple[str, object]] = [("required", unit) for unit in required_units]
        units.extend(("disjunction", disjunction) for disjunction in disjunctions)

        def split(trial: Sequence[Tuple[str, object]]):
            req = [unit for kind, unit in trial if kind == "required"]
            dis = [unit for kind, unit in trial if kind == "disjunction"]
            return req, dis

        def is_unsat(trial: List[Tuple[str, object]]) -> bool:
            req, dis = split(trial)
            return self._search_unsat(_union(req), dis)

        kept = deletion_filter(units, is_unsat)
        kept_required, kept_disjunctions = split(kept)
        if self.refine and kept_required:
            kept_required = _refine(
                kept_required, lambda constraints: self._search_unsat(constraints, kept_disjunctions)
            )
        refined = iter(kept_required)

        entries: List[ConflictEntry] = []
        for kind, unit in kept:
            if kind == "required":
                entries.append(_entry(next(refined)))
            else:
                entries.append(_disjunction_entry(unit))  # type: ignore[arg-type]
        logger.info(
            "Disjunctive conflict narrowed to %d of %d units after %d checks",
            len(entries),
            len(units),
            self.oracle_calls,
        )
        return entries


def diagnose(sources: Sequence[SourceGroup], check: SatCheck, refine: bool = True) -> List[ConflictEntry]:
    """Return one :class:`ConflictEntry` per source in an irreducible conflicting set."""

    return ConflictDiagnoser(check, refine=refine).diagnose(sources)


__all__ = ["ConflictDiagnoser", "deletion_filter", "diagnose", "merge_sources"]
