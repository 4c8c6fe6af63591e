"""Utility helpers shared across solver modules."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from ..constraints import VariableId
from .expressions import LinearRow

logger = logging.getLogger(__name__)

T = TypeVar("T")

Point2D = Tuple[float, float]


def unique_in_order(items: Iterable[T]) -> List[T]:
    """Drop repeated items while keeping first-seen order."""

    seen: Dict[T, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


def translate_to_origin(coords: Mapping[str, Point2D]) -> Dict[str, Point2D]:
    """Shift a coordinate mapping so its minimum x and y are both zero."""

    if not coords:
        return {}

    min_x = min(pt[0] for pt in coords.values())
    min_y = min(pt[1] for pt in coords.values())
    translated = {name: (x - min_x, y - min_y) for name, (x, y) in coords.items()}

    logger.debug("Translated %d positions by (%.6g, %.6g)", len(coords), -min_x, -min_y)
    return translated


def violated_rows(
    rows: Sequence[LinearRow], assignment: Mapping[VariableId, float], tol: float = 1e-6
) -> List[LinearRow]:
    """Return the rows that ``assignment`` does not satisfy within ``tol``."""

    violated: List[LinearRow] = []
    for row in rows:
        value = row.expression.evaluate(assignment)
        if row.relation == "==":
            if abs(value) > tol:
                violated.append(row)
        elif value > tol:
            violated.append(row)
    return violated
