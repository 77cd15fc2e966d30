"""Command-line front end: load or pick a puzzle, echo it, solve it with the three unit workers, print the result."""

# solve_cli.py
# End-to-end run:
# - Takes a puzzle (JSON/text file, an 81-char string, or the built-in example)
# - Echoes the initial board
# - Solves it with one row, one column and one box worker
# - Prints the final board (or the JSON report with --json)
#
# Usage:
#   python -m apps.cli.solve_cli --puzzle 059020460100403008... --transport thread
#   python -m apps.cli.solve_cli --grid puzzle.json --json

import argparse
import json
import sys

from sudoku_workers.config import SYNC_MODES, TRANSPORTS, SolverConfig
from sudoku_workers.errors import InvalidPuzzle
from sudoku_workers.logging_utils import set_level
from sudoku_workers.sudoku_tools import CANONICAL_PUZZLE, format_board, load_grid, parse_puzzle, solve_tool

EXIT_CODES = {"solved": 0, "stagnated": 1, "invalid_puzzle": 2, "protocol_error": 2}


def read_puzzle(args):
    if args.grid:
        return load_grid(args.grid)
    if args.puzzle:
        return parse_puzzle(args.puzzle)
    return [row[:] for row in CANONICAL_PUZZLE]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Solve a Sudoku with row/column/box worker roles.")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--grid", type=str, help="Path to a puzzle (.json with a 9x9 'grid', or 81 digits of text)")
    src.add_argument("--puzzle", type=str, help="81 characters, row by row; 0 or . for blanks")
    ap.add_argument("--transport", type=str, choices=TRANSPORTS, default=None,
                    help="Run workers as processes or threads (default from env, else process)")
    ap.add_argument("--sync", type=str, choices=SYNC_MODES, default=None,
                    help="Publish the round flag once per pass or after every cell")
    ap.add_argument("--timeout", type=float, default=None, help="Message/barrier timeout in seconds")
    ap.add_argument("--max-passes", type=int, default=None, help="Give up after this many passes")
    ap.add_argument("--json", action="store_true", help="Print the solve report as JSON")
    ap.add_argument("--log-level", type=str, default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    set_level(args.log_level)

    try:
        grid = read_puzzle(args)
    except (InvalidPuzzle, OSError, ValueError, KeyError) as exc:
        print(f"error: could not read puzzle: {exc}", file=sys.stderr)
        return EXIT_CODES["invalid_puzzle"]

    try:
        config = SolverConfig.from_env().replace(
            transport=args.transport,
            sync=args.sync,
            message_timeout=args.timeout,
            barrier_timeout=args.timeout,
            max_passes=args.max_passes,
        )
    except ValueError as exc:
        print(f"error: bad solver settings: {exc}", file=sys.stderr)
        return EXIT_CODES["invalid_puzzle"]

    if not args.json:
        print("Initial board:\n")
        print(format_board(grid))

    report = solve_tool(grid, config)

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        status = report["status"]
        if status == "solved":
            print("\nSudoku has been solved.\n")
            print(format_board(report["grid"]))
        elif status == "stagnated":
            print(f"\nUnsolved by naked-single elimination ({report['empty_cells']} cells left).\n")
            print(format_board(report["grid"]))
        else:
            print(f"\n{status}: {report.get('error', '')}", file=sys.stderr)
        if status in ("solved", "stagnated"):
            print(f"placements={len(report['placements'])} passes={report['passes']} rounds={report['rounds']}")
    return EXIT_CODES[report["status"]]


if __name__ == "__main__":
    sys.exit(main())
