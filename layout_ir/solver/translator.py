"""Translation of positional constraints into linear rows."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    Disjunction,
    Group,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    LeftConstraint,
    NodeId,
    PositionalConstraint,
    SIDES,
    SourceGroup,
    StructuralError,
    TopConstraint,
    group_variable,
    node_variable,
)
from ..logging_utils import apply_debug_logging
from .expressions import ExpressionCache, LinearRow, eq, le

logger = logging.getLogger(__name__)

Rows = Tuple[LinearRow, ...]


class ConstraintTranslator:
    """Maps each positional constraint to linear rows, memoized per session."""

    def __init__(self, cache: ExpressionCache) -> None:
        self.cache = cache
        self._memo: Dict[PositionalConstraint, Rows] = {}

    # ------------------------------------------------------------------
    # Public API

    def translate(self, constraint: PositionalConstraint) -> Rows:
        rows = self._memo.get(constraint)
        if rows is None:
            rows = self._dispatch(constraint)
            self._memo[constraint] = rows
        return rows

    def translate_all(self, constraints: Iterable[PositionalConstraint]) -> Rows:
        rows: List[LinearRow] = []
        for constraint in constraints:
            rows.extend(self.translate(constraint))
        return tuple(rows)

    def __len__(self) -> int:
        return len(self._memo)

    def clear(self) -> None:
        self._memo.clear()

    # ------------------------------------------------------------------
    # Dispatch & handlers

    def _dispatch(self, constraint: PositionalConstraint) -> Rows:
        if isinstance(constraint, LeftConstraint):
            return self._handle_left(constraint)
        if isinstance(constraint, TopConstraint):
            return self._handle_top(constraint)
        if isinstance(constraint, AlignmentConstraint):
            return self._handle_alignment(constraint)
        if isinstance(constraint, BoundingBoxConstraint):
            return self._handle_bounding_box(constraint)
        if isinstance(constraint, GroupBoundaryConstraint):
            return self._handle_group_boundary(constraint)
        if isinstance(constraint, GroupSeparationConstraint):
            return self._handle_group_separation(constraint)
        raise StructuralError(f"unsupported constraint type {type(constraint).__name__}", constraint)

    def _before(self, first, second, gap: float) -> LinearRow:
        """Row for ``first + gap <= second``."""

        return le(self.cache.offset(first, gap), self.cache.variable(second))

    def _handle_left(self, c: LeftConstraint) -> Rows:
        return (self._before(node_variable(c.left, "x"), node_variable(c.right, "x"), c.min_gap),)

    def _handle_top(self, c: TopConstraint) -> Rows:
        return (self._before(node_variable(c.top, "y"), node_variable(c.bottom, "y"), c.min_gap),)

    def _handle_alignment(self, c: AlignmentConstraint) -> Rows:
        if c.axis not in ("x", "y"):
            raise StructuralError(f"unknown alignment axis '{c.axis}'", c)
        return (
            eq(
                self.cache.variable(node_variable(c.node1, c.axis)),
                self.cache.variable(node_variable(c.node2, c.axis)),
            ),
        )

    def _handle_bounding_box(self, c: BoundingBoxConstraint) -> Rows:
        x = node_variable(c.node, "x")
        y = node_variable(c.node, "y")
        edge = group_variable(c.group, c.side)
        if c.side == "left":
            return (self._before(x, edge, c.min_gap),)
        if c.side == "right":
            return (self._before(edge, x, c.min_gap),)
        if c.side == "top":
            return (self._before(y, edge, c.min_gap),)
        if c.side == "bottom":
            return (self._before(edge, y, c.min_gap),)
        raise StructuralError(f"unknown side '{c.side}'", c)

    def _handle_group_boundary(self, c: GroupBoundaryConstraint) -> Rows:
        left = group_variable(c.group, "left")
        right = group_variable(c.group, "right")
        top = group_variable(c.group, "top")
        bottom = group_variable(c.group, "bottom")
        rows: List[LinearRow] = []
        for member in c.members:
            x = node_variable(member, "x")
            y = node_variable(member, "y")
            rows.append(self._before(left, x, c.padding))
            rows.append(self._before(x, right, c.padding))
            rows.append(self._before(top, y, c.padding))
            rows.append(self._before(y, bottom, c.padding))
        return tuple(rows)

    def _handle_group_separation(self, c: GroupSeparationConstraint) -> Rows:
        if c.side == "left":
            return (self._before(group_variable(c.group, "right"), group_variable(c.other, "left"), c.min_gap),)
        if c.side == "right":
            return (self._before(group_variable(c.other, "right"), group_variable(c.group, "left"), c.min_gap),)
        if c.side == "top":
            return (self._before(group_variable(c.group, "bottom"), group_variable(c.other, "top"), c.min_gap),)
        if c.side == "bottom":
            return (self._before(group_variable(c.other, "bottom"), group_variable(c.group, "top"), c.min_gap),)
        raise StructuralError(f"unknown side '{c.side}'", c)


# ----------------------------------------------------------------------
# Group helpers


def _visible_members(group: Group, visible: Optional[Iterable[NodeId]]) -> Tuple[NodeId, ...]:
    if visible is None:
        return group.node_ids
    allowed = set(visible)
    return tuple(node for node in group.node_ids if node in allowed)


def boxed_groups(groups: Sequence[Group], visible: Optional[Iterable[NodeId]] = None) -> List[Group]:
    """Groups that own a rectangle: two or more visible members."""

    visible_set = None if visible is None else set(visible)
    return [group for group in groups if len(_visible_members(group, visible_set)) >= 2]


def group_boundary_sources(
    groups: Sequence[Group],
    visible: Optional[Iterable[NodeId]] = None,
    padding: float = 15.0,
) -> List[SourceGroup]:
    """One containment unit per boxed group, labelled with the group's source."""

    visible_set = None if visible is None else set(visible)
    sources: List[SourceGroup] = []
    for group in groups:
        members = _visible_members(group, visible_set)
        if len(members) < 2:
            continue
        pad = padding if group.padding is None else group.padding
        sources.append(SourceGroup(group.source_label, (GroupBoundaryConstraint(group.name, members, pad),)))
    return sources


def group_separation_disjunctions(
    groups: Sequence[Group],
    visible: Sequence[NodeId],
    min_gap: float = 15.0,
) -> List[Disjunction]:
    """Keep non-members out of group rectangles and disjoint groups apart.

    A node is exempt from a group's rectangle only when it is a member of
    that group, or a member of another boxed group disjoint from it; the
    pairwise group separation already covers the latter.
    """

    visible_set = set(visible)
    boxed = boxed_groups(groups, visible_set)
    members = {group.name: set(_visible_members(group, visible_set)) for group in boxed}

    def separated_by_group(node: NodeId, group: Group) -> bool:
        return any(
            node in members[other.name] and not members[other.name] & members[group.name]
            for other in boxed
            if other.name != group.name
        )

    disjunctions: List[Disjunction] = []
    for group in boxed:
        for node in visible:
            if node in members[group.name] or separated_by_group(node, group):
                continue
            disjunctions.append(
                Disjunction(
                    tuple((BoundingBoxConstraint(node, group.name, side, min_gap),) for side in SIDES),
                    source=group.source_label,
                )
            )

    for i, first in enumerate(boxed):
        for second in boxed[i + 1 :]:
            if members[first.name] & members[second.name]:
                continue
            disjunctions.append(
                Disjunction(
                    tuple((GroupSeparationConstraint(first.name, second.name, side, min_gap),) for side in SIDES),
                    source=f"{first.source_label} / {second.source_label}",
                )
            )

    logger.info(
        "Generated %d group separation disjunctions for %d boxed groups", len(disjunctions), len(boxed)
    )
    return disjunctions


apply_debug_logging(globals(), logger=logger)
