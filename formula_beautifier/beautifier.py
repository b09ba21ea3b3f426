"""Parse-and-format entry points that always produce some text."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from formula_beautifier.errors import FormatError, FormulaError, ParseFault
from formula_beautifier.formatter import ExpressionFormatter
from formula_beautifier.formula_parser import FormulaParser, split_leading_equals
from formula_beautifier.options import FormattingOptions

logger = logging.getLogger(__name__)

Options = Union[FormattingOptions, Mapping[str, Any], None]


@dataclass(frozen=True)
class BeautifyResult:
    """
    Outcome of beautifying a formula.

    Attributes:
        text: The formatted formula. When an unexpected error occurred this
            is the trimmed input, unchanged.
        faults: Problems found on the way, in the order they were found.
            Malformed input that was recovered from is listed here too.
    """

    text: str
    faults: Tuple[FormulaError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.faults


def try_beautify(
    formula: str, options: Options = None, parser: Optional[FormulaParser] = None
) -> BeautifyResult:
    """
    Parse and format a formula, reporting what went wrong instead of raising.

    Args:
        formula: Formula text; a leading '=' is kept in the output
        options: FormattingOptions, a partial mapping, or None for defaults
        parser: Parser to use (defaults to a lenient FormulaParser)

    Returns:
        BeautifyResult with the formatted text and any faults

    Raises:
        ConfigurationError: If options are invalid
    """
    _, has_equals = split_leading_equals(formula)
    formatter = ExpressionFormatter(options, strict=True)

    try:
        outcome = (parser or FormulaParser()).parse_with_faults(formula)
        formatted = formatter.format(outcome.tree)
    except FormulaError as e:
        logger.warning("Could not beautify formula %r: %s", formula, e)
        return BeautifyResult(formula.strip(), (e,))
    except Exception as e:
        logger.warning("Could not beautify formula %r", formula, exc_info=True)
        return BeautifyResult(formula.strip(), (FormatError(f"{type(e).__name__}: {e}"),))

    # The parser kept the whole text as one leaf; return it untouched
    if any(getattr(f, "kind", None) is ParseFault.INTERNAL for f in outcome.faults):
        return BeautifyResult(formula.strip(), outcome.faults)

    # Connector glyphs before an '=' are dropped by the parser but not by strip()
    if not has_equals and formatted.startswith("="):
        logger.debug("Formula %r only starts with '=' after formatting, keeping it", formula)
        return BeautifyResult(formula.strip(), outcome.faults)

    return BeautifyResult(("=" if has_equals else "") + formatted, outcome.faults)


def beautify(formula: str, options: Options = None) -> str:
    """
    Parse and format a formula.

    Never raises for formula content; malformed input is recovered from,
    and any unexpected error returns the input unchanged (trimmed).

    Args:
        formula: Formula text, e.g. '=IF(A1>100,"High","Low")'
        options: FormattingOptions, a partial mapping, or None for defaults

    Returns:
        Formatted formula, starting with '=' exactly when the trimmed input does

    Raises:
        ConfigurationError: If options are invalid
    """
    return try_beautify(formula, options).text
