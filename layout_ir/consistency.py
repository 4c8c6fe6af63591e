import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .constraints import (
    ConflictEntry,
    Disjunction,
    Group,
    HideDirective,
    LayoutProblem,
    PositionalConstraint,
    SourceGroup,
)
from .printer import describe_constraint

logger = logging.getLogger(__name__)


@dataclass
class HiddenNodeReport:
    """Problem parts that survive hiding, plus one entry per drop."""

    required: List[SourceGroup] = field(default_factory=list)
    disjunctions: List[Disjunction] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    entries: List[ConflictEntry] = field(default_factory=list)
    dropped_count: int = 0


def _owner(constraint: PositionalConstraint, directives: Sequence[HideDirective]) -> Optional[int]:
    for index, directive in enumerate(directives):
        hidden = set(directive.node_ids)
        if any(node in hidden for node in constraint.node_ids):
            return index
    return None


class _DropLog:
    def __init__(self, directives: Sequence[HideDirective]) -> None:
        self.directives = list(directives)
        # directive index -> source label -> dropped constraints
        self.by_directive: List[Dict[str, Dict[PositionalConstraint, None]]] = [{} for _ in self.directives]
        self.count = 0

    def keep(self, source: str, constraint: PositionalConstraint) -> bool:
        owner = _owner(constraint, self.directives)
        if owner is None:
            return True
        bucket = self.by_directive[owner].setdefault(source, {})
        if constraint not in bucket:
            bucket[constraint] = None
            self.count += 1
        return False

    def entries(self) -> List[ConflictEntry]:
        entries: List[ConflictEntry] = []
        for directive, sources in zip(self.directives, self.by_directive):
            entries.append(ConflictEntry(directive.label, (), directive.node_ids))
            for source, dropped in sources.items():
                constraints = tuple(dropped)
                entries.append(
                    ConflictEntry(source, constraints, tuple(describe_constraint(c) for c in constraints))
                )
        return entries


def drop_hidden_nodes(
    problem: LayoutProblem,
    disjunctions: Optional[Sequence[Disjunction]] = None,
) -> HiddenNodeReport:
    """Remove every constraint and group membership that touches a hidden node.

    ``disjunctions`` defaults to ``problem.disjunctions``; callers pass the
    list that already includes expanded cyclic constraints.
    """

    if disjunctions is None:
        disjunctions = problem.disjunctions
    hidden: Set[str] = set(problem.hidden_node_ids)
    if not hidden:
        return HiddenNodeReport(list(problem.required), list(disjunctions), list(problem.groups))

    log = _DropLog(problem.hidden)

    required = [
        SourceGroup(source.label, tuple(c for c in source.constraints if log.keep(source.label, c)))
        for source in problem.required
    ]
    kept_disjunctions = [
        Disjunction(
            tuple(tuple(c for c in alternative if log.keep(disjunction.source, c)) for alternative in disjunction.alternatives),
            source=disjunction.source,
        )
        for disjunction in disjunctions
    ]
    groups = [
        Group(group.name, tuple(node for node in group.node_ids if node not in hidden), group.source, group.padding)
        for group in problem.groups
    ]

    entries = log.entries()
    logger.info(
        "Hidden %d node(s); dropped %d constraint(s) across %d source(s)",
        len(hidden),
        log.count,
        sum(len(sources) for sources in log.by_directive),
    )
    return HiddenNodeReport(required, kept_disjunctions, groups, entries, log.count)


def find_group_overlaps(groups: Sequence[Group]) -> List[ConflictEntry]:
    """Report pairs of groups that share nodes while neither contains the other."""

    entries: List[ConflictEntry] = []
    for i, first in enumerate(groups):
        for second in groups[i + 1 :]:
            shared: Tuple[str, ...] = tuple(node for node in first.node_ids if node in set(second.node_ids))
            if not shared or first.contains(second) or second.contains(first):
                continue
            logger.warning(
                "Groups %s and %s overlap on %s but are not nested", first.name, second.name, ", ".join(shared)
            )
            message = (
                f"{', '.join(shared)} in groups {first.name} and {second.name}, "
                "but neither group is contained in the other"
            )
            entries.append(ConflictEntry(first.source_label, (), (message,) + shared))
            entries.append(ConflictEntry(second.source_label, (), (message,) + shared))
    return entries
