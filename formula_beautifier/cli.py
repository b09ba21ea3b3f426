#!/usr/bin/env python3
"""
Formula Beautifier

Formats a spreadsheet formula as indented, readable text.

Usage:
    formula-beautifier '=IF(SUM(A1:A10)>100,"High","Low")'
    pbpaste | formula-beautifier --indent-size 2

Exit codes:
    0: Formula formatted
    1: No formula given, invalid options, or (with --strict) malformed formula
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from formula_beautifier.analysis import analyze
from formula_beautifier.beautifier import try_beautify
from formula_beautifier.errors import ConfigurationError
from formula_beautifier.formula_parser import FormulaParser
from formula_beautifier.options import FormattingOptions, load_options


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-beautifier",
        description="Format a spreadsheet formula as indented, readable text.",
    )
    parser.add_argument(
        "formula", nargs="?", help="Formula to format (read from standard input if omitted)"
    )
    parser.add_argument("--config", type=Path, help="YAML file with formatting options")
    parser.add_argument("--indent-size", type=int, help="Spaces per nesting level")
    parser.add_argument(
        "--max-inline-length",
        type=int,
        help="Longest combined argument text a call may have and stay on one line",
    )
    parser.add_argument(
        "--max-inline-params",
        type=int,
        help="Most arguments a call may have and stay on one line",
    )
    parser.add_argument(
        "--no-nesting-indicators",
        dest="use_nesting_indicators",
        action="store_false",
        default=None,
        help="Do not draw ├─/└─ connectors before wrapped arguments",
    )
    parser.add_argument(
        "--no-operator-spacing",
        dest="use_operator_spacing",
        action="store_false",
        default=None,
        help="Do not add spaces around operators inside plain text",
    )
    parser.add_argument(
        "--strict", action="store_true", help="Fail on malformed formulas instead of recovering"
    )
    parser.add_argument(
        "--stats", action="store_true", help="Print a summary of the formula after formatting it"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_cli_options(args: argparse.Namespace) -> FormattingOptions:
    """
    Combine the --config file and the individual option flags.

    Args:
        args: Parsed command-line arguments

    Returns:
        FormattingOptions; flags take precedence over the config file

    Raises:
        ConfigurationError: If the config file or a flag value is invalid
    """
    options = FormattingOptions()
    if args.config is not None:
        options = load_options(args.config)

    overrides = {
        name: getattr(args, name)
        for name in (
            "use_nesting_indicators",
            "use_operator_spacing",
            "indent_size",
            "max_inline_length",
            "max_inline_params",
        )
        if getattr(args, name) is not None
    }
    return FormattingOptions.from_mapping(overrides, base=options)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the command-line tool."""
    args = build_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    formula = args.formula if args.formula is not None else sys.stdin.read()
    if not formula.strip():
        print("❌ Error: No formula given", file=sys.stderr)
        return 1

    try:
        options = resolve_cli_options(args)
    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}", file=sys.stderr)
        return 1

    if not formula.strip().startswith("="):
        print("⚠️  Input doesn't start with '='. Treating it as a formula anyway.", file=sys.stderr)

    parser = FormulaParser(strict=args.strict)
    result = try_beautify(formula, options, parser=parser)

    if args.strict and not result.ok:
        for fault in result.faults:
            print(f"❌ {fault}", file=sys.stderr)
        return 1
    for fault in result.faults:
        print(f"⚠️  {fault}", file=sys.stderr)

    print(result.text)

    if args.stats:
        summary = analyze(FormulaParser().parse(formula))
        print()
        print(f"Functions:       {summary.function_count}")
        print(f"Cell references: {summary.cell_reference_count}")
        print(f"Max nesting:     {summary.max_nesting}")
        print(f"Nodes:           {summary.node_count}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
