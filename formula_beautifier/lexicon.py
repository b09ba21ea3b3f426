"""
Lexical tables shared by the parser and the formatter.

Operator lexemes are plain tuples scanned in order; literal tokens (strings,
quoted sheet names, array constants) are pyparsing elements so that both
sides agree on where a literal starts and ends.
"""

import re
from typing import List, Optional, Tuple

from pyparsing import ParseException, ParserElement, Regex

# Two-character forms must come first so that "<=" never matches as "<"
OPERATORS = ("<=", ">=", "<>", "!=", "==", "+", "-", "*", "/", "^", "&", "=", "<", ">", ":")

# Operators the spacing transform pads inside leaf text, longest first
SPACED_OPERATORS = ("<=", ">=", "<>", "!=", "==", "=", "<", ">", "+", "-", "*", "/", "&")

# A sibling equal to one of these gets a space on either side
BINARY_OPERATORS = frozenset({"+", "-", "*", "/", "=", "<", ">", "<=", ">=", "<>", "&"})

UNARY_OPERATORS = frozenset({"+", "-"})
RANGE_OPERATOR = ":"

# Connector glyphs emitted by the formatter; whitespace to the parser
NESTING_GLYPHS = frozenset("├└─│")

# Double-quoted string with "" as the escaped quote
STRING_LITERAL = Regex(r'"(?:[^"]|"")*"').leave_whitespace().parse_with_tabs()

# Quoted sheet name, e.g. 'Q1 Sales'!B2
SHEET_NAME = Regex(r"'(?:[^']|'')*'").leave_whitespace().parse_with_tabs()

# Array constant, e.g. {1,2;3,4}
ARRAY_LITERAL = Regex(r"\{[^{}]*\}").leave_whitespace().parse_with_tabs()

# Unterminated quotes run to the end of the text
OPEN_STRING = Regex(r'"(?:[^"]|"")*').leave_whitespace().parse_with_tabs()
OPEN_SHEET_NAME = Regex(r"'(?:[^']|'')*").leave_whitespace().parse_with_tabs()

OPAQUE_LITERAL = (
    (STRING_LITERAL | SHEET_NAME | ARRAY_LITERAL | OPEN_STRING | OPEN_SHEET_NAME)
    .leave_whitespace()
    .parse_with_tabs()
)


def match_length(
    element: ParserElement, text: str, pos: int = 0, end: Optional[int] = None
) -> int:
    """
    Match a pyparsing element anchored at ``pos``.

    Args:
        element: Element to match (must not skip leading whitespace)
        text: Text to match against
        pos: Position the match must start at
        end: Exclusive upper bound of the match (defaults to len(text))

    Returns:
        Length of the match, or 0 if the element does not match at ``pos``
    """
    if end is None:
        end = len(text)
    try:
        return len(element.parse_string(text[pos:end])[0])
    except ParseException:
        return 0


# Private-use code points mark where a literal was cut out
MASK_START = "\ue000"
MASK_END = "\ue001"
_MASKED = re.compile(MASK_START + r"(\d+)" + MASK_END)


def mask_literals(text: str) -> Tuple[str, List[str]]:
    """
    Replace quoted strings, sheet names and array constants with markers.

    Args:
        text: Formula or leaf text

    Returns:
        Tuple of (text with numbered markers, the literals in marker order)
    """
    literals: List[str] = []
    pieces = []
    last = 0
    for _, start, end in OPAQUE_LITERAL.scan_string(text):
        pieces.append(text[last:start])
        pieces.append(f"{MASK_START}{len(literals)}{MASK_END}")
        literals.append(text[start:end])
        last = end
    pieces.append(text[last:])
    return "".join(pieces), literals


def unmask_literals(text: str, literals: List[str]) -> str:
    """Put back the literals removed by mask_literals."""
    return _MASKED.sub(lambda m: literals[int(m.group(1))], text)
