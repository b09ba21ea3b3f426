"""
Expression tree types produced by the formula parser.

Every node records the source text it was built from (``original``) and an
ordered tuple of children. Childless nodes are rendered from ``original``;
nodes with children are rendered from their children only.

The node classes form a closed set, each tagged with an ExpressionKind:

- Expression: generic grouping or leaf
- SubExpression: parentheses not preceded by a recognized function name
- FormulaExpr: a function call; children are its arguments
- OperatorExpression: a single operator token
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, Tuple


class ExpressionKind(Enum):
    PLAIN = "plain"
    GROUP = "group"
    FORMULA = "formula"
    OPERATOR = "operator"


@dataclass(frozen=True)
class Expression:
    """A node of the expression tree."""

    kind: ClassVar[ExpressionKind] = ExpressionKind.PLAIN

    original: str = ""
    children: Tuple["Expression", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self, depth: int = 0) -> Iterator[Tuple["Expression", int]]:
        """
        Yield every node of the subtree in depth-first, left-to-right order.

        Args:
            depth: Depth assigned to this node

        Yields:
            (node, depth) pairs, starting with this node
        """
        yield self, depth
        for child in self.children:
            yield from child.walk(depth + 1)


@dataclass(frozen=True)
class SubExpression(Expression):
    """Parenthesized group that is not a function's argument list."""

    kind: ClassVar[ExpressionKind] = ExpressionKind.GROUP


@dataclass(frozen=True)
class FormulaExpr(Expression):
    """Function call. ``formula`` is the uppercased function name."""

    kind: ClassVar[ExpressionKind] = ExpressionKind.FORMULA

    formula: str = ""


@dataclass(frozen=True)
class OperatorExpression(Expression):
    """A recognized operator standing alone in the tree."""

    kind: ClassVar[ExpressionKind] = ExpressionKind.OPERATOR

    @property
    def operator(self) -> str:
        return self.original


def contains_function(expression: Expression) -> bool:
    """Return True if the subtree contains a function call anywhere."""
    return any(node.kind is ExpressionKind.FORMULA for node, _ in expression.walk())
