"""Expansion of cyclic orientation constraints into disjunctions.

A cyclic constraint says that the nodes of a fragment sit on a ring in a
given rotation direction, without saying which node sits where.  Each of the
``n`` rotational offsets ("perturbations") of the fragment is one concrete
arrangement; the arrangement is turned into pairwise left/top/alignment
constraints by placing the nodes on a circle and reading off their relative
order along each axis.  The cyclic requirement holds when any one of the
resulting constraint sets holds.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence, Tuple

from .constraints import (
    AlignmentConstraint,
    ConjunctiveSet,
    CyclicConstraint,
    Disjunction,
    Fragment,
    LeftConstraint,
    NodeId,
    PositionalConstraint,
    StructuralError,
    TopConstraint,
)
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

ALIGNMENT_TOLERANCE = 1e-6

Point2D = Tuple[float, float]


def circular_positions(fragment: Sequence[NodeId], perturbation: int, radius: float) -> Dict[NodeId, Point2D]:
    """Place node ``i`` at angle ``(i + perturbation) * 2pi / n`` on a circle."""

    count = len(fragment)
    if count == 0:
        return {}
    step = 2.0 * math.pi / count
    positions: Dict[NodeId, Point2D] = {}
    for index, node in enumerate(fragment):
        angle = (index + perturbation) * step
        positions[node] = (radius * math.cos(angle), radius * math.sin(angle))
    return positions


def _horizontal(u: NodeId, v: NodeId, pu: Point2D, pv: Point2D, min_sep: float) -> PositionalConstraint:
    delta = pu[0] - pv[0]
    if abs(delta) <= ALIGNMENT_TOLERANCE:
        return AlignmentConstraint("x", u, v)
    if delta > 0:
        return LeftConstraint(v, u, min_sep)
    return LeftConstraint(u, v, min_sep)


def _vertical(u: NodeId, v: NodeId, pu: Point2D, pv: Point2D, min_sep: float) -> PositionalConstraint:
    delta = pu[1] - pv[1]
    if abs(delta) <= ALIGNMENT_TOLERANCE:
        return AlignmentConstraint("y", u, v)
    if delta > 0:
        return TopConstraint(v, u, min_sep)
    return TopConstraint(u, v, min_sep)


def perturbation_constraints(
    fragment: Sequence[NodeId],
    perturbation: int,
    min_radius: float,
    min_sep_x: float,
    min_sep_y: float,
) -> ConjunctiveSet:
    """Return the pairwise constraints of one rotational arrangement."""

    # Two points on a circle carry no orientation.
    if len(fragment) <= 2:
        return ()

    positions = circular_positions(fragment, perturbation, min_radius)
    constraints: List[PositionalConstraint] = []
    for i, u in enumerate(fragment):
        for v in fragment[i + 1 :]:
            constraints.append(_horizontal(u, v, positions[u], positions[v], min_sep_x))
            constraints.append(_vertical(u, v, positions[u], positions[v], min_sep_y))
    return tuple(constraints)


def expand_fragment(
    fragment: Fragment,
    direction: str = "clockwise",
    min_radius: float = 100.0,
    min_sep_x: float = 15.0,
    min_sep_y: float = 15.0,
) -> List[ConjunctiveSet]:
    """Return one conjunctive set per perturbation of ``fragment``."""

    if direction not in ("clockwise", "counterclockwise"):
        raise StructuralError(f"unknown cyclic direction '{direction}'")
    ordered = tuple(reversed(fragment)) if direction == "counterclockwise" else tuple(fragment)
    return [
        perturbation_constraints(ordered, perturbation, min_radius, min_sep_x, min_sep_y)
        for perturbation in range(len(ordered))
    ]


def expand_alternatives(
    cyclic: CyclicConstraint,
    min_radius: float = 100.0,
    min_sep_x: float = 15.0,
    min_sep_y: float = 15.0,
) -> List[ConjunctiveSet]:
    """Concatenate the perturbation sets of every fragment of ``cyclic``."""

    alternatives: List[ConjunctiveSet] = []
    for fragment in cyclic.fragments:
        alternatives.extend(expand_fragment(fragment, cyclic.direction, min_radius, min_sep_x, min_sep_y))
    logger.debug(
        "Expanded %s: %d fragment(s) -> %d alternative(s)",
        cyclic.source_label,
        len(cyclic.fragments),
        len(alternatives),
    )
    return alternatives


def expand(
    cyclic: CyclicConstraint,
    min_radius: float = 100.0,
    min_sep_x: float = 15.0,
    min_sep_y: float = 15.0,
) -> Disjunction:
    """Translate ``cyclic`` into the disjunction of all its arrangements."""

    alternatives = expand_alternatives(cyclic, min_radius, min_sep_x, min_sep_y)
    if not alternatives:
        raise StructuralError(f"{cyclic.source_label} has no nodes to arrange")
    return Disjunction(tuple(alternatives), source=cyclic.source_label)


apply_debug_logging(globals(), logger=logger)
