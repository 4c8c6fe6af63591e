"""Ordering pass that keeps aligned nodes from landing on top of each other."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Tuple

from ..constraints import AlignmentConstraint, LeftConstraint, NodeId, PositionalConstraint, TopConstraint

logger = logging.getLogger(__name__)

IMPLICIT_SOURCE = "implicit: preventing overlap of aligned nodes"


class _UnionFind:
    def __init__(self) -> None:
        self.parent: Dict[NodeId, NodeId] = {}

    def find(self, item: NodeId) -> NodeId:
        self.parent.setdefault(item, item)
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: NodeId, b: NodeId) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra != rb:
            # smaller id wins so classes are stable
            if rb < ra:
                ra, rb = rb, ra
            self.parent[rb] = ra


def alignment_classes(constraints: Iterable[PositionalConstraint]) -> Dict[str, List[List[NodeId]]]:
    """Transitive classes of nodes sharing an ``x`` or ``y`` coordinate."""

    finders = {"x": _UnionFind(), "y": _UnionFind()}
    for constraint in constraints:
        if isinstance(constraint, AlignmentConstraint):
            finders[constraint.axis].union(constraint.node1, constraint.node2)

    classes: Dict[str, List[List[NodeId]]] = {}
    for axis, finder in finders.items():
        members: Dict[NodeId, List[NodeId]] = {}
        for node in finder.parent:
            members.setdefault(finder.find(node), []).append(node)
        classes[axis] = [sorted(group) for _, group in sorted(members.items()) if len(group) > 1]
    return classes


def implicit_order_constraints(
    constraints: Iterable[PositionalConstraint],
    positions: Mapping[NodeId, Tuple[float, float]],
    min_separation: float = 15.0,
) -> List[PositionalConstraint]:
    """Separate the members of each alignment class in their solved order.

    A class aligned on ``y`` is a row, ordered left to right by ``x``; a
    class aligned on ``x`` is a column, ordered top to bottom by ``y``.
    """

    implicit: List[PositionalConstraint] = []
    classes = alignment_classes(constraints)
    for node_ids in classes["y"]:
        row = sorted((node for node in node_ids if node in positions), key=lambda n: (positions[n][0], n))
        implicit.extend(LeftConstraint(a, b, min_separation) for a, b in zip(row, row[1:]))
    for node_ids in classes["x"]:
        column = sorted((node for node in node_ids if node in positions), key=lambda n: (positions[n][1], n))
        implicit.extend(TopConstraint(a, b, min_separation) for a, b in zip(column, column[1:]))
    logger.debug(
        "Derived %d implicit ordering constraints from %d row(s) and %d column(s)",
        len(implicit),
        len(classes["y"]),
        len(classes["x"]),
    )
    return implicit
