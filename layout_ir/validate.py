from typing import Iterable, Set

from .constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    DIRECTIONS,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    LayoutProblem,
    LeftConstraint,
    NODE_AXES,
    POSITIONAL_CONSTRAINT_TYPES,
    SIDES,
    StructuralError,
    TopConstraint,
)


class ValidationError(StructuralError):
    pass


def _check_nodes(constraint, where: str, node_ids: Iterable[str], known: Set[str]) -> None:
    for node_id in node_ids:
        if node_id not in known:
            raise ValidationError(f"{where}: unknown node '{node_id}'", constraint)


def _check_gap(constraint, where: str, value: float, name: str = "gap") -> None:
    if value < 0:
        raise ValidationError(f"{where}: {name} must be non-negative (got {value})", constraint)


def _validate_constraint(constraint, where: str, known: Set[str], groups: Set[str]) -> None:
    if not isinstance(constraint, POSITIONAL_CONSTRAINT_TYPES):
        raise ValidationError(f"{where}: unsupported constraint {constraint!r}", constraint)
    _check_nodes(constraint, where, constraint.node_ids, known)
    for group in constraint.group_names:
        if group not in groups:
            raise ValidationError(f"{where}: unknown group '{group}'", constraint)

    if isinstance(constraint, (LeftConstraint, TopConstraint)):
        a, b = constraint.node_ids
        if a == b:
            raise ValidationError(f"{where}: node '{a}' cannot be related to itself", constraint)
        _check_gap(constraint, where, constraint.min_gap)
    elif isinstance(constraint, AlignmentConstraint):
        if constraint.axis not in NODE_AXES:
            raise ValidationError(f"{where}: unknown axis '{constraint.axis}'", constraint)
        if constraint.node1 == constraint.node2:
            raise ValidationError(f"{where}: node '{constraint.node1}' cannot be aligned with itself", constraint)
    elif isinstance(constraint, BoundingBoxConstraint):
        if constraint.side not in SIDES:
            raise ValidationError(f"{where}: unknown side '{constraint.side}'", constraint)
        _check_gap(constraint, where, constraint.min_gap)
    elif isinstance(constraint, GroupBoundaryConstraint):
        if not constraint.members:
            raise ValidationError(f"{where}: group boundary for '{constraint.group}' has no members", constraint)
        _check_gap(constraint, where, constraint.padding, "padding")
    elif isinstance(constraint, GroupSeparationConstraint):
        if constraint.side not in SIDES:
            raise ValidationError(f"{where}: unknown side '{constraint.side}'", constraint)
        if constraint.group == constraint.other:
            raise ValidationError(f"{where}: group '{constraint.group}' cannot be separated from itself", constraint)
        _check_gap(constraint, where, constraint.min_gap)


def validate(problem: LayoutProblem) -> None:
    node_ids = problem.node_ids
    seen: Set[str] = set()
    for node_id in node_ids:
        if node_id in seen:
            raise ValidationError(f"duplicate node id '{node_id}'")
        seen.add(node_id)
    # hide directives may name nodes that only exist upstream
    known = seen | set(problem.hidden_node_ids)

    group_names: Set[str] = set()
    for group in problem.groups:
        if group.name in group_names:
            raise ValidationError(f"duplicate group name '{group.name}'")
        group_names.add(group.name)
        for node_id in group.node_ids:
            if node_id not in known:
                raise ValidationError(f"{group.source_label}: unknown node '{node_id}'")
        if group.padding is not None and group.padding < 0:
            raise ValidationError(f"{group.source_label}: padding must be non-negative (got {group.padding})")

    for source in problem.required:
        for constraint in source.constraints:
            _validate_constraint(constraint, source.label, known, group_names)

    for disjunction in problem.disjunctions:
        for alternative in disjunction.alternatives:
            for constraint in alternative:
                _validate_constraint(constraint, disjunction.source, known, group_names)

    for cyclic in problem.cyclic:
        where = cyclic.source_label
        if cyclic.direction not in DIRECTIONS:
            raise ValidationError(f"{where}: unknown direction '{cyclic.direction}'")
        for fragment in cyclic.fragments:
            if len(set(fragment)) != len(fragment):
                raise ValidationError(f"{where}: fragment {list(fragment)} repeats a node")
            for node_id in fragment:
                if node_id not in known:
                    raise ValidationError(f"{where}: unknown node '{node_id}'")

    for directive in problem.hidden:
        if not directive.node_ids:
            raise ValidationError(f"{directive.label}: hide directive names no nodes")
