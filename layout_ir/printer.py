from typing import List, Mapping, Optional, Sequence, Tuple

from .constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    ConflictEntry,
    Disjunction,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    LeftConstraint,
    Node,
    TopConstraint,
)

MAX_ATTRIBUTES = 2
MAX_VALUE_LENGTH = 20

SOURCE_HEADER = "source constraint"
ELEMENTS_HEADER = "affected diagram elements"


def _gap(value: float) -> str:
    return f"{value:g}"


def describe_node(node: Node, max_attributes: int = MAX_ATTRIBUTES, max_value_length: int = MAX_VALUE_LENGTH) -> str:
    """Short human-readable name of a node.

    Nodes with attributes show at most ``max_attributes`` of them, each
    value cut to ``max_value_length`` characters followed by ``...``.
    """

    if not node.attributes:
        return f"id = {node.id}"
    parts = []
    for key, values in list(node.attributes.items())[:max_attributes]:
        text = ", ".join(str(value) for value in values)
        if len(text) > max_value_length:
            text = text[:max_value_length] + "..."
        parts.append(f"{key}: {text}")
    if len(node.attributes) > max_attributes:
        parts.append("...")
    return f"{node.display_label} ({'; '.join(parts)})"


def _name(node_id: str, nodes: Optional[Mapping[str, Node]]) -> str:
    if nodes is None or node_id not in nodes:
        return node_id
    return describe_node(nodes[node_id])


def describe_constraint(constraint: object, nodes: Optional[Mapping[str, Node]] = None) -> str:
    if isinstance(constraint, LeftConstraint):
        return (
            f"{_name(constraint.left, nodes)} left of {_name(constraint.right, nodes)}"
            f" (gap {_gap(constraint.min_gap)})"
        )
    if isinstance(constraint, TopConstraint):
        return (
            f"{_name(constraint.top, nodes)} above {_name(constraint.bottom, nodes)}"
            f" (gap {_gap(constraint.min_gap)})"
        )
    if isinstance(constraint, AlignmentConstraint):
        kind = "vertically" if constraint.axis == "x" else "horizontally"
        return f"{_name(constraint.node1, nodes)} {kind} aligned with {_name(constraint.node2, nodes)}"
    if isinstance(constraint, BoundingBoxConstraint):
        where = {"left": "left of", "right": "right of", "top": "above", "bottom": "below"}[constraint.side]
        return f"{_name(constraint.node, nodes)} {where} group {constraint.group} (gap {_gap(constraint.min_gap)})"
    if isinstance(constraint, GroupBoundaryConstraint):
        members = ", ".join(_name(member, nodes) for member in constraint.members)
        return f"group {constraint.group} contains {members} (padding {_gap(constraint.padding)})"
    if isinstance(constraint, GroupSeparationConstraint):
        where = {"left": "left of", "right": "right of", "top": "above", "bottom": "below"}[constraint.side]
        return f"group {constraint.group} {where} group {constraint.other} (gap {_gap(constraint.min_gap)})"
    raise ValueError(f"unsupported constraint {constraint!r}")


def describe_disjunction(disjunction: Disjunction, nodes: Optional[Mapping[str, Node]] = None) -> Tuple[str, ...]:
    """One line per alternative, numbered from 1."""

    lines = []
    for index, alternative in enumerate(disjunction.alternatives):
        if alternative:
            body = "; ".join(describe_constraint(constraint, nodes) for constraint in alternative)
        else:
            body = "(no constraints)"
        lines.append(f"alternative {index + 1}: {body}")
    return tuple(lines)


def format_conflict_table(entries: Sequence[ConflictEntry]) -> str:
    """Render ``entries`` as a two-column plain-text table."""

    rows: List[Tuple[str, str]] = []
    for entry in entries:
        elements = list(entry.elements) or [""]
        rows.append((entry.source, elements[0]))
        rows.extend(("", element) for element in elements[1:])

    width = max([len(SOURCE_HEADER)] + [len(source) for source, _ in rows])
    lines = [f"{SOURCE_HEADER.ljust(width)} | {ELEMENTS_HEADER}", f"{'-' * width}-+-{'-' * len(ELEMENTS_HEADER)}"]
    for source, element in rows:
        lines.append(f"{source.ljust(width)} | {element}".rstrip())
    return "\n".join(lines)


def format_positions(positions: Mapping[str, Tuple[float, float]], nodes: Optional[Mapping[str, Node]] = None) -> str:
    lines = []
    for node_id, (x, y) in positions.items():
        lines.append(f"{_name(node_id, nodes)}: x={x:.2f} y={y:.2f}")
    return "\n".join(lines)
