"""
Layout engine that renders an expression tree as indented formula text.

Function calls render inline when their arguments are short and contain no
nested calls, and expand to one argument per line otherwise:

    IF(
        ├─ SUM(A1:A10) > 100;
        ├─ AVERAGE(B1:B20);
        └─ 0
    )

Leaf text can additionally be passed through add_operator_spacing.
"""

import logging
import re
from typing import Any, Mapping, Optional, Sequence, Union

from formula_beautifier.errors import FormatError
from formula_beautifier.expression import Expression, ExpressionKind, contains_function
from formula_beautifier.lexicon import (
    BINARY_OPERATORS,
    MASK_START,
    SPACED_OPERATORS,
    UNARY_OPERATORS,
    mask_literals,
    unmask_literals,
)
from formula_beautifier.options import FormattingOptions, resolve_options

logger = logging.getLogger(__name__)

# Groups at least this long are always wrapped onto their own lines
GROUP_INLINE_LIMIT = 50

# Single pass over all operators; alternation order is longest lexeme first
_OPERATOR = re.compile(r"\s*(" + "|".join(re.escape(op) for op in SPACED_OPERATORS) + r")\s*")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_UNARY_MINUS = re.compile(r"(^\s*|[+\-*/=<>!&,(]\s*)-\s+(?=[\w$.(" + MASK_START + r"])")
_RANGE_COLON = re.compile(r"([A-Za-z]+\$?\d+)\s*:\s*(\$?[A-Za-z]+\$?\d+)")
_ABSOLUTE_COLUMN = re.compile(r"\$\s*([A-Za-z]+)\s*(\$?)\s*(\d+)")
_ABSOLUTE_ROW = re.compile(r"([A-Za-z]+)\s*\$\s*(\d+)")


def add_operator_spacing(text: str) -> str:
    """
    Put single spaces around the operators in a piece of leaf text.

    Literal content (strings, quoted sheet names, array constants) is never
    changed. After the generic pass, negative numbers, ranges like A1:B10
    and absolute references like $A$1 are glued back together.

    Args:
        text: Leaf text, e.g. 'A1>=-5'

    Returns:
        Spaced text, e.g. 'A1 >= -5', trimmed
    """
    if not text:
        return text

    result, literals = mask_literals(text)

    result = _OPERATOR.sub(r" \1 ", result)
    result = _WHITESPACE_RUN.sub(" ", result)

    result = _UNARY_MINUS.sub(r"\1-", result)
    result = _RANGE_COLON.sub(r"\1:\2", result)
    result = _ABSOLUTE_COLUMN.sub(r"$\1\2\3", result)
    result = _ABSOLUTE_ROW.sub(r"\1$\2", result)

    return unmask_literals(result, literals).strip()


def _needs_spacing(current: Expression, following: Expression) -> bool:
    current_text = current.original.strip()
    following_text = following.original.strip()
    if not current_text or not following_text:
        return False
    return current_text in BINARY_OPERATORS or following_text in BINARY_OPERATORS


def _is_sign(children: Sequence[Expression], index: int) -> bool:
    """A lone "+" or "-" leaf at the start of a sequence or right after an operator."""
    node = children[index]
    if node.kind is not ExpressionKind.PLAIN or not node.is_leaf:
        return False
    if node.original.strip() not in UNARY_OPERATORS:
        return False
    return index == 0 or children[index - 1].kind is ExpressionKind.OPERATOR


class ExpressionFormatter:
    """Renders expression trees under a FormattingOptions layout policy."""

    def __init__(
        self,
        options: Union[FormattingOptions, Mapping[str, Any], None] = None,
        strict: bool = False,
    ):
        """
        Initialize the formatter.

        Args:
            options: FormattingOptions, a partial mapping of option names,
                or None for the defaults
            strict: Raise FormatError instead of falling back to the
                tree's original text
        """
        self.options = resolve_options(options)
        self.strict = strict
        self._renderers = {
            ExpressionKind.PLAIN: self._format_plain,
            ExpressionKind.GROUP: self._format_group,
            ExpressionKind.FORMULA: self._format_function,
            ExpressionKind.OPERATOR: self._format_operator,
        }

    def format(self, expression: Expression) -> str:
        """
        Render a tree as formula text (without the leading '=').

        Args:
            expression: Root of the tree, as returned by the parser

        Returns:
            Formatted text, or the root's original text if rendering fails

        Raises:
            FormatError: In strict mode, if rendering fails
        """
        try:
            return self._render(expression, 0)
        except Exception as e:
            if self.strict:
                if isinstance(e, FormatError):
                    raise
                raise FormatError(f"{type(e).__name__}: {e}") from e
            logger.warning(
                "Could not format %r, keeping its original text", expression.original, exc_info=True
            )
            return expression.original

    def _render(self, expression: Expression, depth: int) -> str:
        renderer = self._renderers.get(expression.kind)
        if renderer is None:
            raise FormatError(f"No renderer for expression kind {expression.kind!r}")
        return renderer(expression, depth)

    def _format_plain(self, expression: Expression, depth: int) -> str:
        if expression.is_leaf:
            return self._leaf_text(expression.original)
        return self._format_sequence(expression.children, depth)

    def _format_operator(self, expression: Expression, depth: int) -> str:
        return expression.original

    def _format_sequence(self, children: Sequence[Expression], depth: int) -> str:
        parts = []
        for i, child in enumerate(children):
            if i > 0 and _needs_spacing(children[i - 1], child) and not _is_sign(children, i - 1):
                parts.append(" ")
            parts.append(self._render(child, depth))
        return "".join(parts)

    def _format_function(self, func: Expression, depth: int) -> str:
        name = func.formula
        arguments = func.children
        if not arguments:
            return f"{name}()"

        inline = self._format_inline(arguments, depth)
        if inline is not None:
            return f"{name}({inline})"

        # Multi-line formatting for complex functions
        indent = self._indent(depth + 1)
        last = len(arguments) - 1
        lines = [f"{name}("]
        for i, argument in enumerate(arguments):
            indicator = ""
            if self.options.use_nesting_indicators:
                indicator = self._nesting_indicator(depth + 1, i == last)
            separator = "" if i == last else ";"
            lines.append(f"{indent}{indicator}{self._render(argument, depth + 1)}{separator}")
        lines.append(f"{self._indent(depth)})")
        return "\n".join(lines)

    def _format_inline(self, arguments: Sequence[Expression], depth: int) -> Optional[str]:
        """Return the one-line argument list, or None if the call must wrap."""
        if len(arguments) > self.options.max_inline_params:
            return None
        if any(contains_function(argument) for argument in arguments):
            return None

        rendered = [self._render(argument, depth) for argument in arguments]
        if any("\n" in text for text in rendered):
            return None
        if sum(len(text) for text in rendered) > self.options.max_inline_length:
            return None
        return "; ".join(rendered)

    def _format_group(self, group: Expression, depth: int) -> str:
        if not group.children:
            return "()"

        content = self._format_sequence(group.children, depth + 1)
        inline = "\n" not in content and len(content) < GROUP_INLINE_LIMIT
        if inline and not contains_function(group):
            return f"({content})"

        return f"(\n{self._indent(depth + 1)}{content}\n{self._indent(depth)})"

    def _leaf_text(self, text: str) -> str:
        if self.options.use_operator_spacing:
            return add_operator_spacing(text)
        return text

    def _indent(self, depth: int) -> str:
        return " " * (self.options.indent_size * depth)

    @staticmethod
    def _nesting_indicator(depth: int, is_last: bool) -> str:
        if depth == 0:
            return ""
        # Two extra spaces per level below the first
        return "  " * (depth - 1) + ("└─ " if is_last else "├─ ")


def format_expression(
    expression: Expression,
    options: Union[FormattingOptions, Mapping[str, Any], None] = None,
    strict: bool = False,
) -> str:
    """
    Render an expression tree as formula text (without the leading '=').

    Args:
        expression: Root of the tree
        options: FormattingOptions, a partial mapping, or None for defaults
        strict: Raise FormatError instead of falling back to original text

    Returns:
        Formatted text
    """
    return ExpressionFormatter(options, strict=strict).format(expression)
