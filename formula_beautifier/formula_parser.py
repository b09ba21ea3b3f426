#!/usr/bin/env python3
"""
Formula parser module for spreadsheet formulas.

This module provides:
- FormulaParser: A recursive-descent parser that turns formula text into an
  expression tree (see formula_beautifier.expression)
- parse_formula: Convenience wrapper around FormulaParser
- detect_separator: Picks the argument separator for a whole formula

The parser supports:
- Function calls with arguments (including nested and zero-argument calls)
- String literals with doubled-quote escaping, quoted sheet names and array
  constants, all treated as opaque text
- Operators (arithmetic, comparison, string concatenation, range)
- Parenthesized expressions
- Comma or semicolon argument separators
- Unbalanced parentheses and unterminated strings, recovered by default or
  reported as FormulaParseError in strict mode
"""

import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Tuple

from formula_beautifier.errors import FormulaError, FormulaParseError, ParseFault
from formula_beautifier.expression import (
    Expression,
    ExpressionKind,
    FormulaExpr,
    OperatorExpression,
    SubExpression,
)
from formula_beautifier.functions import function_names
from formula_beautifier.lexicon import (
    ARRAY_LITERAL,
    NESTING_GLYPHS,
    OPAQUE_LITERAL,
    OPEN_SHEET_NAME,
    OPEN_STRING,
    OPERATORS,
    RANGE_OPERATOR,
    SHEET_NAME,
    STRING_LITERAL,
    UNARY_OPERATORS,
    match_length,
)

logger = logging.getLogger(__name__)

# Identifier directly in front of "(", e.g. SUM or STDEV.S
_TRAILING_NAME = re.compile(r"(?<![A-Za-z0-9_.$])[A-Za-z_][A-Za-z0-9_.]*$")

_GLYPHS_TO_SPACES = str.maketrans({glyph: " " for glyph in NESTING_GLYPHS})

_SIGNS_AND_SPACES = frozenset(" \t\r\n+-")


def split_leading_equals(formula: str) -> Tuple[str, bool]:
    """
    Trim formula text and remove a single leading '='.

    Args:
        formula: Formula text as pasted by the user

    Returns:
        Tuple of (text without the '=', whether it had one)
    """
    text = formula.strip()
    if text.startswith("="):
        return text[1:], True
    return text, False


def detect_separator(text: str) -> str:
    """
    Decide the argument separator for a whole formula.

    Semicolon-separated formulas come from locales that use the comma as the
    decimal mark, so any ';' outside a literal selects ';'.

    Args:
        text: Formula text without the leading '='

    Returns:
        ';' or ','
    """
    last = 0
    for _, start, end in OPAQUE_LITERAL.scan_string(text):
        if ";" in text[last:start]:
            return ";"
        last = end
    return ";" if ";" in text[last:] else ","


def _clean(text: str) -> str:
    return text.translate(_GLYPHS_TO_SPACES).strip()


def _flush(children: List[Expression], token: str) -> None:
    leaf = token.strip()
    if leaf:
        children.append(Expression(leaf))


def _is_unary_position(token: str, children: List[Expression], after_operand: bool) -> bool:
    if not set(token) <= _SIGNS_AND_SPACES:
        return False
    if not children:
        return not after_operand
    return children[-1].kind is ExpressionKind.OPERATOR


def _match_operator(text: str, pos: int, end: int) -> str:
    for operator in OPERATORS:
        if pos + len(operator) <= end and text.startswith(operator, pos):
            return operator
    return ""


class _Scanner:
    """State of a single parse: the text, its separator and faults seen so far."""

    def __init__(self, text: str, separator: str, functions: FrozenSet[str], strict: bool):
        self.text = text
        self.separator = separator
        self.functions = functions
        self.strict = strict
        self.faults: List[FormulaParseError] = []

    def fault(self, kind: ParseFault, message: str, position: int) -> None:
        error = FormulaParseError(kind, message, position)
        if self.strict:
            raise error
        # Argument spans are scanned twice; report each fault once
        if any(f.kind is kind and f.position == position for f in self.faults):
            return
        logger.debug("Recovered from malformed formula: %s", error)
        self.faults.append(error)

    def literal_length(self, pos: int, end: int) -> int:
        """Length of the opaque literal starting at ``pos``, or 0."""
        char = self.text[pos]
        if char == "{":
            return match_length(ARRAY_LITERAL, self.text, pos, end)
        if char == '"':
            closed, unclosed = STRING_LITERAL, OPEN_STRING
        elif char == "'":
            closed, unclosed = SHEET_NAME, OPEN_SHEET_NAME
        else:
            return 0

        length = match_length(closed, self.text, pos, end)
        if length:
            return length
        self.fault(ParseFault.UNTERMINATED_STRING, f"unterminated {char}...{char} literal", pos)
        return match_length(unclosed, self.text, pos, end)

    def parse_span(self, start: int, end: int) -> Tuple[Expression, ...]:
        """
        Parse text[start:end] into a sequence of sibling nodes.

        A ')' without a matching '(' ends the current sequence; it is kept
        as a leaf and parsing resumes right after it.
        """
        children, pos = self.parse_sequence(start, end)
        result = list(children)
        while pos < end:
            self.fault(ParseFault.UNMATCHED_CLOSE, "')' has no matching '('", pos)
            result.append(Expression(")"))
            children, pos = self.parse_sequence(pos + 1, end, after_operand=True)
            result.extend(children)
        return tuple(result)

    def parse_sequence(
        self, pos: int, end: int, after_operand: bool = False
    ) -> Tuple[Tuple[Expression, ...], int]:
        """
        Parse siblings until a closing ')' or ``end``.

        Args:
            pos: Start of the sequence
            end: Exclusive end of the text to scan
            after_operand: An operand precedes ``pos``, so a leading '+' or
                '-' is a binary operator rather than a sign

        Returns:
            Tuple of (children, position of the ')' or ``end``)
        """
        text = self.text
        children: List[Expression] = []
        token = ""
        i = pos

        while i < end:
            char = text[i]

            literal = self.literal_length(i, end)
            if literal:
                token += text[i : i + literal]
                i += literal
                continue

            if char == "(":
                match = _TRAILING_NAME.search(token)
                if match and match.group().upper() in self.functions:
                    name = match.group()
                    _flush(children, token[: match.start()])
                    arguments, close = self.parse_arguments(i + 1, end)
                    children.append(
                        FormulaExpr(
                            original=text[i - len(name) : min(close + 1, end)],
                            children=arguments,
                            formula=name.upper(),
                        )
                    )
                else:
                    _flush(children, token)
                    inner, close = self.parse_sequence(i + 1, end)
                    if close >= end:
                        self.fault(ParseFault.UNMATCHED_OPEN, "'(' is never closed", i)
                    children.append(
                        SubExpression(original=text[i : min(close + 1, end)], children=inner)
                    )
                token = ""
                i = close + 1
                continue

            if char == ")":
                _flush(children, token)
                return tuple(children), i

            if char in NESTING_GLYPHS:
                token += " "
                i += 1
                continue

            operator = _match_operator(text, i, end)
            if operator:
                unary = _is_unary_position(token, children, after_operand)
                if operator in UNARY_OPERATORS and unary:
                    token += operator
                elif operator == RANGE_OPERATOR and token.strip():
                    token += operator
                else:
                    _flush(children, token)
                    token = ""
                    children.append(OperatorExpression(operator))
                i += len(operator)
                continue

            token += char
            i += 1

        _flush(children, token)
        return tuple(children), end

    def parse_arguments(self, pos: int, end: int) -> Tuple[Tuple[Expression, ...], int]:
        """
        Parse a function's argument list, starting just after its '('.

        Returns:
            Tuple of (arguments, position of the closing ')' or ``end``)
        """
        text = self.text
        arguments: List[Expression] = []
        balance = 0
        start = pos
        i = pos

        while i < end:
            literal = self.literal_length(i, end)
            if literal:
                i += literal
                continue

            char = text[i]
            if char == "(":
                balance += 1
            elif char == ")":
                if balance == 0:
                    if arguments or _clean(text[start:i]):
                        arguments.append(self.parse_argument(start, i))
                    return tuple(arguments), i
                balance -= 1
            elif char == self.separator and balance == 0:
                arguments.append(self.parse_argument(start, i))
                start = i + 1
            i += 1

        self.fault(ParseFault.UNMATCHED_OPEN, "function call is never closed", pos - 1)
        if arguments or _clean(text[start:end]):
            arguments.append(self.parse_argument(start, end))
        return tuple(arguments), end

    def parse_argument(self, start: int, end: int) -> Expression:
        children = self.parse_span(start, end)
        if len(children) == 1:
            return children[0]
        original = _clean(self.text[start:end])
        if children:
            return Expression(original=original, children=children)
        return Expression(original=original)


@dataclass(frozen=True)
class ParseOutcome:
    """Expression tree plus the faults recovered while building it."""

    tree: Expression
    faults: Tuple[FormulaParseError, ...] = ()


class FormulaParser:
    """Recursive-descent parser for spreadsheet formulas."""

    def __init__(self, extra_functions: Iterable[str] = (), strict: bool = False):
        """
        Initialize the parser.

        The function table is read on first use, so a broken table surfaces
        as a parse fault rather than from the constructor.

        Args:
            extra_functions: Function names to recognize on top of the
                packaged table
            strict: Raise FormulaParseError on the first malformed construct
                instead of recovering
        """
        self.extra_functions = tuple(extra_functions)
        self.strict = strict

    @property
    def functions(self) -> FrozenSet[str]:
        """Uppercased names that start a function call when followed by '('."""
        return function_names(self.extra_functions)

    def parse(self, formula: str) -> Expression:
        """
        Parse formula and return its expression tree.

        Args:
            formula: Formula text, with or without the leading '='

        Returns:
            Root Expression whose children are the top-level nodes

        Raises:
            FormulaParseError: In strict mode, if the formula is malformed
            ConfigurationError: In strict mode, if the function table
                cannot be loaded
        """
        return self.parse_with_faults(formula).tree

    def parse_with_faults(self, formula: str) -> ParseOutcome:
        """
        Parse formula and report every fault that was recovered from.

        Args:
            formula: Formula text, with or without the leading '='

        Returns:
            ParseOutcome with the tree and the recovered faults. If parsing
            fails unexpectedly, the tree is a single leaf holding the text.

        Raises:
            FormulaParseError: In strict mode, if the formula is malformed
            ConfigurationError: In strict mode, if the function table
                cannot be loaded
        """
        text, _ = split_leading_equals(formula)
        try:
            scanner = _Scanner(text, detect_separator(text), self.functions, self.strict)
            children = scanner.parse_span(0, len(text))
        except Exception as e:
            if self.strict:
                if isinstance(e, FormulaError):
                    raise
                raise FormulaParseError(ParseFault.INTERNAL, f"{type(e).__name__}: {e}") from e
            logger.warning("Could not parse formula %r, keeping it as text", text, exc_info=True)
            fault = FormulaParseError(ParseFault.INTERNAL, f"{type(e).__name__}: {e}")
            return ParseOutcome(Expression(text), (fault,))
        return ParseOutcome(Expression(text, children), tuple(scanner.faults))


def parse_formula(formula: str, strict: bool = False) -> Expression:
    """
    Parse formula text into an expression tree.

    Args:
        formula: Formula text, with or without the leading '='
        strict: Raise on malformed input instead of recovering

    Returns:
        Root Expression of the tree
    """
    return FormulaParser(strict=strict).parse(formula)
