"""Loading layout problems from JSON documents.

Document shape::

    {
      "nodes": ["A", {"id": "B", "label": "b", "attributes": {"k": ["v"]}}],
      "required": [{"source": "A left of B",
                    "constraints": [{"type": "left", "left": "A", "right": "B"}]}],
      "disjunctions": [{"source": "...", "alternatives": [[{...}], [{...}]]}],
      "cyclic": [{"fragments": [["A", "B", "C"]], "direction": "clockwise"}],
      "groups": [{"name": "g", "nodes": ["A", "B"]}],
      "hidden": [{"label": "hide B", "nodes": ["B"]}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Union

from .constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    CyclicConstraint,
    Disjunction,
    Group,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    HideDirective,
    LayoutProblem,
    LeftConstraint,
    Node,
    PositionalConstraint,
    SourceGroup,
    StructuralError,
    TopConstraint,
)
from .validate import ValidationError

logger = logging.getLogger(__name__)


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise ValidationError(f"{where}: missing '{key}'")
    return data[key]


def _gap(data: Mapping[str, Any], key: str = "min_gap", default: float = 15.0) -> float:
    return float(data.get(key, default))


def _left(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return LeftConstraint(_require(data, "left", where), _require(data, "right", where), _gap(data))


def _top(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return TopConstraint(_require(data, "top", where), _require(data, "bottom", where), _gap(data))


def _align(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return AlignmentConstraint(
        _require(data, "axis", where), _require(data, "node1", where), _require(data, "node2", where)
    )


def _bounding_box(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return BoundingBoxConstraint(
        _require(data, "node", where), _require(data, "group", where), _require(data, "side", where), _gap(data)
    )


def _group_boundary(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return GroupBoundaryConstraint(
        _require(data, "group", where), tuple(_require(data, "members", where)), _gap(data, "padding")
    )


def _group_separation(data: Mapping[str, Any], where: str) -> PositionalConstraint:
    return GroupSeparationConstraint(
        _require(data, "group", where), _require(data, "other", where), _require(data, "side", where), _gap(data)
    )


_CONSTRAINT_LOADERS: Dict[str, Callable[[Mapping[str, Any], str], PositionalConstraint]] = {
    LeftConstraint.kind: _left,
    TopConstraint.kind: _top,
    AlignmentConstraint.kind: _align,
    BoundingBoxConstraint.kind: _bounding_box,
    GroupBoundaryConstraint.kind: _group_boundary,
    GroupSeparationConstraint.kind: _group_separation,
}


def load_constraint(data: Mapping[str, Any], where: str = "constraint") -> PositionalConstraint:
    if not isinstance(data, Mapping):
        raise ValidationError(f"{where}: expected an object, got {type(data).__name__}")
    kind = _require(data, "type", where)
    loader = _CONSTRAINT_LOADERS.get(kind)
    if loader is None:
        raise ValidationError(f"{where}: unknown constraint type '{kind}'")
    return loader(data, where)


def _load_node(data: Union[str, Mapping[str, Any]]) -> Node:
    if isinstance(data, str):
        return Node(data)
    attributes = {key: [str(v) for v in values] for key, values in data.get("attributes", {}).items()}
    return Node(_require(data, "id", "node"), data.get("label"), attributes)


def _load_source(data: Mapping[str, Any], index: int) -> SourceGroup:
    where = data.get("source", f"required[{index}]")
    constraints = [load_constraint(item, where) for item in _require(data, "constraints", where)]
    return SourceGroup(where, tuple(constraints))


def _load_disjunction(data: Mapping[str, Any], index: int) -> Disjunction:
    where = data.get("source", f"disjunction[{index}]")
    alternatives = tuple(
        tuple(load_constraint(item, where) for item in alternative)
        for alternative in _require(data, "alternatives", where)
    )
    return Disjunction(alternatives, source=where)


def _load_cyclic(data: Mapping[str, Any], index: int) -> CyclicConstraint:
    where = data.get("label") or f"cyclic[{index}]"
    fragments = tuple(tuple(fragment) for fragment in _require(data, "fragments", where))
    return CyclicConstraint(fragments, data.get("direction", "clockwise"), data.get("label"))


def _load_group(data: Mapping[str, Any]) -> Group:
    name = _require(data, "name", "group")
    padding = data.get("padding")
    return Group(name, tuple(_require(data, "nodes", f"group {name}")), data.get("source"), padding)


def _load_hidden(data: Mapping[str, Any], index: int) -> HideDirective:
    label = data.get("label", f"hide[{index}]")
    return HideDirective(label, tuple(_require(data, "nodes", label)))


def load_problem(document: Mapping[str, Any]) -> LayoutProblem:
    """Build a :class:`LayoutProblem` from a decoded JSON document."""

    if not isinstance(document, Mapping):
        raise ValidationError(f"problem document must be an object, got {type(document).__name__}")
    try:
        problem = LayoutProblem(
            nodes=[_load_node(item) for item in document.get("nodes", [])],
            required=[_load_source(item, i) for i, item in enumerate(document.get("required", []))],
            disjunctions=[_load_disjunction(item, i) for i, item in enumerate(document.get("disjunctions", []))],
            cyclic=[_load_cyclic(item, i) for i, item in enumerate(document.get("cyclic", []))],
            groups=[_load_group(item) for item in document.get("groups", [])],
            hidden=[_load_hidden(item, i) for i, item in enumerate(document.get("hidden", []))],
        )
    except StructuralError:
        raise
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValidationError(f"malformed problem document: {exc}") from exc
    logger.info(
        "Loaded problem with %d nodes, %d required sources, %d disjunctions",
        len(problem.nodes),
        len(problem.required),
        len(problem.disjunctions),
    )
    return problem


def load_problem_file(path: Union[str, Path]) -> LayoutProblem:
    text = Path(path).read_text(encoding="utf-8")
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: invalid JSON: {exc}") from exc
    return load_problem(document)


def dump_problem(problem: LayoutProblem) -> Dict[str, Any]:
    """Inverse of :func:`load_problem`."""

    def constraint(c: PositionalConstraint) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": c.kind}
        for name, value in c.__dict__.items():
            data[name] = list(value) if isinstance(value, tuple) else value
        return data

    nodes: List[Any] = []
    for node in problem.nodes:
        if node.label is None and not node.attributes:
            nodes.append(node.id)
        else:
            nodes.append({"id": node.id, "label": node.label, "attributes": node.attributes})

    return {
        "nodes": nodes,
        "required": [
            {"source": s.label, "constraints": [constraint(c) for c in s.constraints]} for s in problem.required
        ],
        "disjunctions": [
            {"source": d.source, "alternatives": [[constraint(c) for c in alt] for alt in d.alternatives]}
            for d in problem.disjunctions
        ],
        "cyclic": [
            {"fragments": [list(f) for f in c.fragments], "direction": c.direction, "label": c.label}
            for c in problem.cyclic
        ],
        "groups": [
            {"name": g.name, "nodes": list(g.node_ids), "source": g.source, "padding": g.padding}
            for g in problem.groups
        ],
        "hidden": [{"label": h.label, "nodes": list(h.node_ids)} for h in problem.hidden],
    }
