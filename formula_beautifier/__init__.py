"""
Spreadsheet formula beautifier.

This package turns formula text into an expression tree and renders the tree
as indented, readable text:
- formula_parser: Recursive-descent parser producing the expression tree
- formatter: Layout engine rendering a tree under FormattingOptions
- beautifier: beautify / try_beautify, parse and format in one call
- analysis: Function call extraction and formula summaries
- cli: Command-line entry point

Public API::

    from formula_beautifier import beautify, parse_formula, format_expression
"""

from formula_beautifier.analysis import (
    FormulaAnalysis,
    FunctionCall,
    analyze,
    extract_function_calls,
)
from formula_beautifier.beautifier import BeautifyResult, beautify, try_beautify
from formula_beautifier.errors import (
    ConfigurationError,
    FormatError,
    FormulaError,
    FormulaParseError,
    ParseFault,
)
from formula_beautifier.expression import (
    Expression,
    ExpressionKind,
    FormulaExpr,
    OperatorExpression,
    SubExpression,
)
from formula_beautifier.formatter import (
    ExpressionFormatter,
    add_operator_spacing,
    format_expression,
)
from formula_beautifier.formula_parser import FormulaParser, ParseOutcome, parse_formula
from formula_beautifier.options import FormattingOptions, load_options

__all__ = [
    "BeautifyResult",
    "ConfigurationError",
    "Expression",
    "ExpressionFormatter",
    "ExpressionKind",
    "FormatError",
    "FormattingOptions",
    "FormulaAnalysis",
    "FormulaError",
    "FormulaExpr",
    "FormulaParseError",
    "FormulaParser",
    "FunctionCall",
    "OperatorExpression",
    "ParseFault",
    "ParseOutcome",
    "SubExpression",
    "add_operator_spacing",
    "analyze",
    "beautify",
    "extract_function_calls",
    "format_expression",
    "load_options",
    "parse_formula",
    "try_beautify",
]
