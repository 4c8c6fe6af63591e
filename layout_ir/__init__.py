from .constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    ConflictEntry,
    CyclicConstraint,
    Disjunction,
    Group,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    HideDirective,
    LayoutProblem,
    LeftConstraint,
    Node,
    SourceGroup,
    StructuralError,
    TopConstraint,
    VariableId,
)
from .validate import validate, ValidationError
from .cyclic import expand, expand_fragment
from .consistency import drop_hidden_nodes, find_group_overlaps, HiddenNodeReport
from .printer import describe_constraint, describe_node, format_conflict_table, format_positions
from .loader import dump_problem, load_problem, load_problem_file
from .solver import (
    LayoutSession,
    solve,
    solve_layout,
    diagnose,
    SearchBudget,
    SolveOptions,
    SolveResult,
    CoreSolverError,
    LayoutConfig,
    get_layout_config,
    set_layout_config,
)

__all__ = [
    'AlignmentConstraint',
    'BoundingBoxConstraint',
    'ConflictEntry',
    'CoreSolverError',
    'CyclicConstraint',
    'Disjunction',
    'Group',
    'GroupBoundaryConstraint',
    'GroupSeparationConstraint',
    'HiddenNodeReport',
    'HideDirective',
    'LayoutConfig',
    'LayoutProblem',
    'LayoutSession',
    'LeftConstraint',
    'Node',
    'SearchBudget',
    'SolveOptions',
    'SolveResult',
    'SourceGroup',
    'StructuralError',
    'TopConstraint',
    'ValidationError',
    'VariableId',
    'describe_constraint',
    'describe_node',
    'diagnose',
    'drop_hidden_nodes',
    'dump_problem',
    'expand',
    'expand_fragment',
    'find_group_overlaps',
    'format_conflict_table',
    'format_positions',
    'get_layout_config',
    'load_problem',
    'load_problem_file',
    'set_layout_config',
    'solve',
    'solve_layout',
    'validate',
]
