import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from layout_ir import (
    SearchBudget,
    SolveOptions,
    StructuralError,
    describe_constraint,
    format_conflict_table,
    format_positions,
    load_problem_file,
    solve_layout,
)
from layout_ir.solver import IMPLICIT_SOURCE, STATUS_BUDGET, STATUS_SAT, get_layout_config

logger = logging.getLogger(__name__)

EXIT_SAT = 0
EXIT_UNSAT = 1
EXIT_BUDGET = 2
EXIT_INVALID = 3


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Solve a layout problem described as JSON")
    parser.add_argument("path", help="Path to the JSON problem document")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--max-nodes",
        type=int,
        default=None,
        help="Stop the disjunctive search after this many core checks",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Stop the disjunctive search beyond this many committed disjunctions",
    )
    parser.add_argument(
        "--no-group-separation",
        action="store_true",
        help="Do not keep ungrouped nodes and disjoint groups apart",
    )
    parser.add_argument(
        "--no-align-order",
        action="store_true",
        help="Skip the ordering pass for aligned nodes",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    config = get_layout_config()
    options = SolveOptions(
        budget=SearchBudget(
            args.max_nodes if args.max_nodes is not None else config.max_nodes,
            args.max_depth if args.max_depth is not None else config.max_depth,
        ),
        separate_groups=not args.no_group_separation,
        order_aligned=not args.no_align_order,
    )

    logger.info("Loading problem from %s", args.path)
    try:
        problem = load_problem_file(args.path)
        result = solve_layout(problem, options)
    except StructuralError as exc:
        logger.error("Invalid problem: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        nodes = problem.node_map()
        print(f"Status: {result.status}")
        if result.status == STATUS_SAT:
            print(format_positions(result.positions(), nodes))
            if result.implicit:
                print(f"\n{IMPLICIT_SOURCE}:")
                for constraint in result.implicit:
                    print(f"  - {describe_constraint(constraint)}")
        elif result.conflict:
            print(format_conflict_table(result.conflict))
        if result.dropped:
            print("\nDropped because of hidden nodes:")
            print(format_conflict_table(result.dropped))

    if result.status == STATUS_SAT:
        return EXIT_SAT
    if result.status == STATUS_BUDGET:
        return EXIT_BUDGET
    return EXIT_UNSAT


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
