"""Data model shared by the expander, the solver and the diagnoser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from typing import Literal

NodeId = str
Axis = Literal["x", "y"]
Side = Literal["left", "right", "top", "bottom"]
Direction = Literal["clockwise", "counterclockwise"]

NODE_AXES: Tuple[str, ...] = ("x", "y")
GROUP_AXES: Tuple[str, ...] = ("left", "right", "top", "bottom")
SIDES: Tuple[str, ...] = GROUP_AXES
DIRECTIONS: Tuple[str, ...] = ("clockwise", "counterclockwise")


class StructuralError(ValueError):
    """Raised for malformed input that must be rejected before solving."""

    def __init__(self, message: str, constraint: Optional[object] = None):
        super().__init__(message)
        self.constraint = constraint


@dataclass(frozen=True, order=True)
class VariableId:
    """A scalar unknown: one per node per axis, four per group rectangle."""

    owner: str
    axis: str

    def __str__(self) -> str:
        return f"{self.owner}.{self.axis}"


@dataclass
class Node:
    id: NodeId
    label: Optional[str] = None
    attributes: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def display_label(self) -> str:
        return self.label if self.label else self.id


@dataclass
class Group:
    """Named set of nodes that share a rectangle in the layout."""

    name: str
    node_ids: Tuple[NodeId, ...]
    source: Optional[str] = None
    padding: Optional[float] = None

    def __post_init__(self) -> None:
        self.node_ids = tuple(self.node_ids)

    @property
    def source_label(self) -> str:
        return self.source or f"group {self.name}"

    def contains(self, other: "Group") -> bool:
        return set(other.node_ids) <= set(self.node_ids)


# ----------------------------------------------------------------------
# Positional constraints


@dataclass(frozen=True)
class LeftConstraint:
    left: NodeId
    right: NodeId
    min_gap: float = 15.0

    kind: ClassVar[str] = "left"

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return (self.left, self.right)

    @property
    def group_names(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class TopConstraint:
    top: NodeId
    bottom: NodeId
    min_gap: float = 15.0

    kind: ClassVar[str] = "top"

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return (self.top, self.bottom)

    @property
    def group_names(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class AlignmentConstraint:
    axis: Axis
    node1: NodeId
    node2: NodeId

    kind: ClassVar[str] = "align"

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return (self.node1, self.node2)

    @property
    def group_names(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class BoundingBoxConstraint:
    """Keep ``node`` outside the rectangle of ``group`` on ``side``."""

    node: NodeId
    group: str
    side: Side
    min_gap: float = 15.0

    kind: ClassVar[str] = "bounding-box"

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return (self.node,)

    @property
    def group_names(self) -> Tuple[str, ...]:
        return (self.group,)


@dataclass(frozen=True)
class GroupBoundaryConstraint:
    """Keep every node of ``members`` inside the rectangle of ``group``."""

    group: str
    members: Tuple[NodeId, ...]
    padding: float = 15.0

    kind: ClassVar[str] = "group-boundary"

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return self.members

    @property
    def group_names(self) -> Tuple[str, ...]:
        return (self.group,)


@dataclass(frozen=True)
class GroupSeparationConstraint:
    """Place the rectangle of ``group`` on ``side`` of the rectangle of ``other``."""

    group: str
    other: str
    side: Side
    min_gap: float = 15.0

    kind: ClassVar[str] = "group-separation"

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return ()

    @property
    def group_names(self) -> Tuple[str, ...]:
        return (self.group, self.other)


PositionalConstraint = Union[
    LeftConstraint,
    TopConstraint,
    AlignmentConstraint,
    BoundingBoxConstraint,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
]

POSITIONAL_CONSTRAINT_TYPES = (
    LeftConstraint,
    TopConstraint,
    AlignmentConstraint,
    BoundingBoxConstraint,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
)

ConjunctiveSet = Tuple[PositionalConstraint, ...]
Fragment = Tuple[NodeId, ...]


def touches_any(constraint: PositionalConstraint, node_ids: Iterable[NodeId]) -> bool:
    wanted = set(node_ids)
    return any(node in wanted for node in constraint.node_ids)


@dataclass(frozen=True)
class SourceGroup:
    """The constraints derived from one source construct; the unit of diagnosis."""

    label: str
    constraints: ConjunctiveSet = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraints", tuple(self.constraints))


@dataclass(frozen=True)
class Disjunction:
    """Alternatives of which one must hold."""

    alternatives: Tuple[ConjunctiveSet, ...]
    source: str = "disjunction"

    def __post_init__(self) -> None:
        alternatives = tuple(tuple(alternative) for alternative in self.alternatives)
        if not alternatives:
            raise StructuralError(f"disjunction '{self.source}' must have at least one alternative")
        object.__setattr__(self, "alternatives", alternatives)

    def __len__(self) -> int:
        return len(self.alternatives)

    def constraints(self) -> ConjunctiveSet:
        """Return every distinct constraint mentioned by an alternative, in order."""

        seen: Dict[PositionalConstraint, None] = {}
        for alternative in self.alternatives:
            for constraint in alternative:
                seen.setdefault(constraint, None)
        return tuple(seen)


@dataclass(frozen=True)
class CyclicConstraint:
    fragments: Tuple[Fragment, ...]
    direction: Direction = "clockwise"
    label: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fragments", tuple(tuple(fragment) for fragment in self.fragments))

    @property
    def source_label(self) -> str:
        return self.label or f"cyclic ({self.direction})"


@dataclass(frozen=True)
class HideDirective:
    label: str
    node_ids: Tuple[NodeId, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_ids", tuple(self.node_ids))


@dataclass(frozen=True)
class ConflictEntry:
    """One row of the "source constraint" -> "affected diagram elements" table."""

    source: str
    constraints: ConjunctiveSet = ()
    elements: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraints", tuple(self.constraints))
        object.__setattr__(self, "elements", tuple(self.elements))


@dataclass
class LayoutProblem:
    nodes: List[Node] = field(default_factory=list)
    required: List[SourceGroup] = field(default_factory=list)
    disjunctions: List[Disjunction] = field(default_factory=list)
    cyclic: List[CyclicConstraint] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    hidden: List[HideDirective] = field(default_factory=list)

    @property
    def node_ids(self) -> List[NodeId]:
        return [node.id for node in self.nodes]

    @property
    def hidden_node_ids(self) -> List[NodeId]:
        order: Dict[NodeId, None] = {}
        for directive in self.hidden:
            for node_id in directive.node_ids:
                order.setdefault(node_id, None)
        return list(order)

    def node_map(self) -> Dict[NodeId, Node]:
        return {node.id: node for node in self.nodes}

    def visible_nodes(self) -> List[Node]:
        hidden = set(self.hidden_node_ids)
        return [node for node in self.nodes if node.id not in hidden]


def node_variable(node_id: NodeId, axis: str) -> VariableId:
    return VariableId(node_id, axis)


def group_variable(group: str, side: str) -> VariableId:
    return VariableId(group, side)


def flatten(groups: Sequence[SourceGroup]) -> List[PositionalConstraint]:
    return [constraint for group in groups for constraint in group.constraints]


__all__ = [
    "Axis",
    "AlignmentConstraint",
    "BoundingBoxConstraint",
    "ConflictEntry",
    "ConjunctiveSet",
    "CyclicConstraint",
    "DIRECTIONS",
    "Direction",
    "Disjunction",
    "Fragment",
    "GROUP_AXES",
    "Group",
    "GroupBoundaryConstraint",
    "GroupSeparationConstraint",
    "HideDirective",
    "LayoutProblem",
    "LeftConstraint",
    "NODE_AXES",
    "Node",
    "NodeId",
    "POSITIONAL_CONSTRAINT_TYPES",
    "PositionalConstraint",
    "SIDES",
    "Side",
    "SourceGroup",
    "StructuralError",
    "TopConstraint",
    "VariableId",
    "flatten",
    "group_variable",
    "node_variable",
    "touches_any",
]
