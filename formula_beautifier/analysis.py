"""
Summary information about a parsed formula.

- extract_function_calls: Every function call with its nesting depth
- analyze: Counts of calls, cell references and nodes, plus maximum nesting
"""

import re
from dataclasses import dataclass
from typing import List

from formula_beautifier.expression import Expression, ExpressionKind
from formula_beautifier.lexicon import mask_literals

# A1-style reference, optionally absolute ($A$1); each end of A1:B2 counts
_CELL_REFERENCE = re.compile(r"(?<![\w.$])\$?[A-Za-z]{1,3}\$?\d+(?![\w(])")


@dataclass(frozen=True)
class FunctionCall:
    """A function call found in a tree. ``depth`` is 0 for outermost calls."""

    name: str
    argument_count: int
    depth: int
    node: Expression


@dataclass(frozen=True)
class FormulaAnalysis:
    function_count: int
    cell_reference_count: int
    max_nesting: int
    node_count: int


def extract_function_calls(tree: Expression) -> List[FunctionCall]:
    """
    Extract function calls by walking the tree.

    Args:
        tree: Root Expression from the parser

    Returns:
        List of FunctionCall sorted by depth (deepest first)
    """
    calls = []

    def walk(node: Expression, depth: int) -> None:
        """Recursively walk the tree; only function calls add nesting."""
        if node.kind is ExpressionKind.FORMULA:
            calls.append(FunctionCall(node.formula, len(node.children), depth, node))
            for argument in node.children:
                walk(argument, depth + 1)
        else:
            for child in node.children:
                walk(child, depth)

    walk(tree, 0)

    # sorted() is stable, so calls at equal depth keep their source order
    return sorted(calls, key=lambda c: c.depth, reverse=True)


def count_cell_references(text: str) -> int:
    """Count A1-style references in text, ignoring quoted literals."""
    masked, _ = mask_literals(text)
    return len(_CELL_REFERENCE.findall(masked))


def analyze(tree: Expression) -> FormulaAnalysis:
    """
    Summarize a parsed formula.

    Args:
        tree: Root Expression from the parser

    Returns:
        FormulaAnalysis for the tree
    """
    calls = extract_function_calls(tree)
    nodes = [node for node, _ in tree.walk()]
    references = sum(
        count_cell_references(node.original)
        for node in nodes
        if node.is_leaf and node.kind is ExpressionKind.PLAIN
    )
    return FormulaAnalysis(
        function_count=len(calls),
        cell_reference_count=references,
        max_nesting=max((call.depth + 1 for call in calls), default=0),
        node_count=len(nodes),
    )
