"""Core data structures for the solver pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..constraints import (
    ConflictEntry,
    ConjunctiveSet,
    GROUP_AXES,
    NODE_AXES,
    PositionalConstraint,
    VariableId,
)

Point2D = Tuple[float, float]
Assignment = Dict[VariableId, float]

STATUS_SAT = "sat"
STATUS_UNSAT = "unsat"
STATUS_BUDGET = "budget-exhausted"


@dataclass
class LayoutConfig:
    """Numeric defaults shared by expansion, translation and search."""

    min_separation: float = 15.0
    min_radius: float = 100.0
    group_padding: float = 15.0
    pool_size: int = 10
    max_nodes: Optional[int] = None
    max_depth: Optional[int] = None


@dataclass(frozen=True)
class SearchBudget:
    """Caps on the disjunctive search; ``None`` means unbounded.

    ``max_nodes`` counts core checks, ``max_depth`` counts disjunctions
    committed along one path.
    """

    max_nodes: Optional[int] = None
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("max_nodes", "max_depth"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass
class SolveOptions:
    """Solver façade options.

    Numeric fields left at ``None`` are filled from the active
    :class:`LayoutConfig` when the session starts.
    """

    budget: Optional[SearchBudget] = None
    separate_groups: bool = True
    order_aligned: bool = True
    diagnose: bool = True
    min_separation: Optional[float] = None
    min_radius: Optional[float] = None
    group_padding: Optional[float] = None
    pool_size: Optional[int] = None

    def resolved(self, config: LayoutConfig) -> "SolveOptions":
        return SolveOptions(
            budget=self.budget or SearchBudget(config.max_nodes, config.max_depth),
            separate_groups=self.separate_groups,
            order_aligned=self.order_aligned,
            diagnose=self.diagnose,
            min_separation=config.min_separation if self.min_separation is None else self.min_separation,
            min_radius=config.min_radius if self.min_radius is None else self.min_radius,
            group_padding=config.group_padding if self.group_padding is None else self.group_padding,
            pool_size=config.pool_size if self.pool_size is None else self.pool_size,
        )


@dataclass
class SolveStats:
    nodes_visited: int = 0
    max_depth_reached: int = 0
    core_checks: int = 0
    cores_created: int = 0
    cores_reused: int = 0
    cache_hits: int = 0
    cache_misses: int = 0

    def to_dict(self) -> Dict[str, int]:
        return dict(self.__dict__)


@dataclass
class ChosenAlternative:
    source: str
    disjunction_index: int
    alternative_index: int
    constraints: ConjunctiveSet


@dataclass
class SolveResult:
    satisfiable: bool
    status: str
    assignment: Optional[Assignment] = None
    chosen_alternatives: Optional[List[ChosenAlternative]] = None
    conflict: Optional[List[ConflictEntry]] = None
    dropped: List[ConflictEntry] = field(default_factory=list)
    implicit: List[PositionalConstraint] = field(default_factory=list)
    stats: SolveStats = field(default_factory=SolveStats)

    @property
    def budget_exhausted(self) -> bool:
        return self.status == STATUS_BUDGET

    def positions(self) -> Dict[str, Point2D]:
        """Return ``{node_id: (x, y)}`` for every solved node."""

        if not self.assignment:
            return {}
        owners: Dict[str, Dict[str, float]] = {}
        for var, value in self.assignment.items():
            owners.setdefault(var.owner, {})[var.axis] = value
        return {
            owner: (axes["x"], axes["y"])
            for owner, axes in sorted(owners.items())
            if set(NODE_AXES) <= set(axes)
        }

    def group_boxes(self) -> Dict[str, Tuple[float, float, float, float]]:
        """Return ``{group: (left, right, top, bottom)}`` for every solved group rectangle."""

        if not self.assignment:
            return {}
        owners: Dict[str, Dict[str, float]] = {}
        for var, value in self.assignment.items():
            if var.axis in GROUP_AXES:
                owners.setdefault(var.owner, {})[var.axis] = value
        return {
            owner: tuple(axes[side] for side in GROUP_AXES)  # type: ignore[misc]
            for owner, axes in sorted(owners.items())
            if len(axes) == len(GROUP_AXES)
        }

    def normalized_positions(self) -> Dict[str, Point2D]:
        """Return node positions translated so the top-left node sits at the origin."""

        from .utils import translate_to_origin

        return translate_to_origin(self.positions())

    def to_dict(self) -> Dict[str, Any]:
        from ..printer import describe_constraint

        def entries(items: Optional[List[ConflictEntry]]) -> Optional[List[Dict[str, Any]]]:
            if items is None:
                return None
            return [{"source": entry.source, "elements": list(entry.elements)} for entry in items]

        return {
            "satisfiable": self.satisfiable,
            "status": self.status,
            "positions": {name: list(point) for name, point in self.positions().items()} if self.assignment else None,
            "groups": {name: list(box) for name, box in self.group_boxes().items()} if self.assignment else None,
            "chosen_alternatives": (
                [
                    {
                        "source": choice.source,
                        "disjunction": choice.disjunction_index,
                        "alternative": choice.alternative_index,
                    }
                    for choice in self.chosen_alternatives
                ]
                if self.chosen_alternatives is not None
                else None
            ),
            "conflict": entries(self.conflict),
            "dropped": entries(self.dropped),
            "implicit": [describe_constraint(constraint) for constraint in self.implicit],
            "stats": self.stats.to_dict(),
        }
