"""Linear expressions and the session-scoped expression cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Literal, Mapping, NamedTuple, Tuple

from ..constraints import VariableId

logger = logging.getLogger(__name__)

Operation = Literal["plus", "minus"]
Relation = Literal["<=", "=="]

Term = Tuple[VariableId, float]


class ExpressionKey(NamedTuple):
    variable: VariableId
    operation: str
    constant: float


@dataclass(frozen=True)
class LinearExpression:
    """``sum(coefficient * variable) + constant`` with terms kept sorted by variable."""

    terms: Tuple[Term, ...] = ()
    constant: float = 0.0

    @classmethod
    def of_variable(cls, variable: VariableId) -> "LinearExpression":
        return cls(((variable, 1.0),), 0.0)

    @classmethod
    def from_mapping(cls, coefficients: Mapping[VariableId, float], constant: float = 0.0) -> "LinearExpression":
        terms = tuple(sorted((var, float(coef)) for var, coef in coefficients.items() if coef != 0.0))
        return cls(terms, float(constant))

    def _coefficients(self) -> Dict[VariableId, float]:
        return dict(self.terms)

    def __sub__(self, other: "LinearExpression") -> "LinearExpression":
        coefficients = self._coefficients()
        for var, coef in other.terms:
            coefficients[var] = coefficients.get(var, 0.0) - coef
        return LinearExpression.from_mapping(coefficients, self.constant - other.constant)

    def __add__(self, other: "LinearExpression") -> "LinearExpression":
        coefficients = self._coefficients()
        for var, coef in other.terms:
            coefficients[var] = coefficients.get(var, 0.0) + coef
        return LinearExpression.from_mapping(coefficients, self.constant + other.constant)

    @property
    def variables(self) -> Tuple[VariableId, ...]:
        return tuple(var for var, _ in self.terms)

    def evaluate(self, assignment: Mapping[VariableId, float]) -> float:
        return self.constant + sum(coef * assignment.get(var, 0.0) for var, coef in self.terms)

    def __str__(self) -> str:
        parts = []
        for var, coef in self.terms:
            if coef == 1.0:
                parts.append(f"+ {var}")
            elif coef == -1.0:
                parts.append(f"- {var}")
            else:
                parts.append(f"{'+' if coef > 0 else '-'} {abs(coef):g}*{var}")
        if self.constant or not parts:
            parts.append(f"{'+' if self.constant >= 0 else '-'} {abs(self.constant):g}")
        text = " ".join(parts)
        return text[2:] if text.startswith("+ ") else "-" + text[2:]


@dataclass(frozen=True)
class LinearRow:
    """``expression <= 0`` or ``expression == 0``."""

    expression: LinearExpression
    relation: Relation = "<="

    def __str__(self) -> str:
        return f"{self.expression} {self.relation} 0"


def le(lhs: LinearExpression, rhs: LinearExpression) -> LinearRow:
    """Row for ``lhs <= rhs``."""

    return LinearRow(lhs - rhs, "<=")


def eq(lhs: LinearExpression, rhs: LinearExpression) -> LinearRow:
    """Row for ``lhs == rhs``."""

    return LinearRow(lhs - rhs, "==")


class ExpressionCache:
    """Memoizes ``variable`` and ``variable +/- constant`` expressions for one session.

    Structurally identical requests return the identical object until
    :meth:`clear` is called.
    """

    def __init__(self) -> None:
        self._variables: Dict[VariableId, LinearExpression] = {}
        self._derived: Dict[ExpressionKey, LinearExpression] = {}
        self.hits = 0
        self.misses = 0

    def variable(self, var: VariableId) -> LinearExpression:
        expr = self._variables.get(var)
        if expr is None:
            self.misses += 1
            expr = LinearExpression.of_variable(var)
            self._variables[var] = expr
        else:
            self.hits += 1
        return expr

    def _derive(self, key: ExpressionKey) -> LinearExpression:
        expr = self._derived.get(key)
        if expr is not None:
            self.hits += 1
            return expr
        self.misses += 1
        sign = 1.0 if key.operation == "plus" else -1.0
        expr = LinearExpression(((key.variable, 1.0),), sign * key.constant)
        self._derived[key] = expr
        return expr

    def plus(self, var: VariableId, constant: float) -> LinearExpression:
        return self._derive(ExpressionKey(var, "plus", float(constant)))

    def minus(self, var: VariableId, constant: float) -> LinearExpression:
        return self._derive(ExpressionKey(var, "minus", float(constant)))

    def offset(self, var: VariableId, constant: float) -> LinearExpression:
        """``var + constant`` for any sign; zero returns the bare variable."""

        if constant == 0:
            return self.variable(var)
        if constant > 0:
            return self.plus(var, constant)
        return self.minus(var, -constant)

    def __len__(self) -> int:
        return len(self._variables) + len(self._derived)

    def clear(self) -> None:
        logger.debug("Clearing expression cache with %d entries", len(self))
        self._variables.clear()
        self._derived.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, int]:
        return {
            "variables": len(self._variables),
            "derived": len(self._derived),
            "hits": self.hits,
            "misses": self.misses,
        }
