"""Error types for formula parsing, formatting and configuration."""

from enum import Enum
from typing import Optional


class ParseFault(Enum):
    """Kinds of malformed input the parser can recover from."""

    UNMATCHED_OPEN = "unmatched-open"
    UNMATCHED_CLOSE = "unmatched-close"
    UNTERMINATED_STRING = "unterminated-string"
    INTERNAL = "internal"


class FormulaError(Exception):
    """Base class for all formula-related errors."""


class FormulaParseError(FormulaError):
    """Malformed formula text.

    Attributes:
        kind: The ParseFault describing what went wrong.
        position: Character position (in the formula without its leading
            ``=``) where the fault was detected, if known.
    """

    def __init__(self, kind: ParseFault, message: str, position: Optional[int] = None):
        self.kind = kind
        self.position = position
        full = f"Formula parse error ({kind.value}): {message}"
        if position is not None:
            full += f" (at position {position})"
        super().__init__(full)


class FormatError(FormulaError):
    """Unexpected tree state while rendering."""


class ConfigurationError(FormulaError):
    """Invalid formatting options or function table."""
