"""
Formatting options for the layout engine.

Options can be given as a FormattingOptions instance, as a partial mapping of
field names (missing fields keep their defaults), or loaded from a YAML file:

    use_nesting_indicators: false
    indent_size: 2
    max_inline_length: 60
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from formula_beautifier.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormattingOptions:
    """Layout policy used by ExpressionFormatter."""

    use_nesting_indicators: bool = True
    use_operator_spacing: bool = True
    indent_size: int = 4
    max_inline_length: int = 40
    max_inline_params: int = 3

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Any], base: Optional["FormattingOptions"] = None
    ) -> "FormattingOptions":
        """
        Build options from a partial mapping of field names.

        Args:
            mapping: Field overrides; '-' in keys is read as '_'
            base: Options supplying the values not in ``mapping``
                (defaults to FormattingOptions())

        Returns:
            New FormattingOptions

        Raises:
            ConfigurationError: If a key is unknown or a value has the wrong type
        """
        types = {f.name: f.type for f in fields(cls)}
        overrides: Dict[str, Any] = {}

        for key, value in mapping.items():
            name = str(key).replace("-", "_")
            if name not in types:
                raise ConfigurationError(
                    f"Unknown formatting option '{key}'. Valid options: {', '.join(sorted(types))}"
                )
            expected = types[name]
            # bool is a subclass of int; reject it for numeric fields
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise ConfigurationError(
                    f"Formatting option '{key}' must be {expected.__name__}, got {value!r}"
                )
            if expected is int and value < 0:
                raise ConfigurationError(f"Formatting option '{key}' must not be negative")
            overrides[name] = value

        return replace(base or cls(), **overrides)


def resolve_options(
    options: Union[FormattingOptions, Mapping[str, Any], None] = None
) -> FormattingOptions:
    """
    Turn the accepted option forms into a FormattingOptions.

    Args:
        options: None (defaults), a FormattingOptions, or a partial mapping

    Returns:
        FormattingOptions
    """
    if options is None:
        return FormattingOptions()
    if isinstance(options, FormattingOptions):
        return options
    return FormattingOptions.from_mapping(options)


def load_options(path: Path, base: Optional[FormattingOptions] = None) -> FormattingOptions:
    """
    Load formatting options from a YAML file.

    Args:
        path: YAML file holding a mapping of option names to values
        base: Options supplying the values the file does not set

    Returns:
        FormattingOptions

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or contains invalid options
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"{path}: Cannot read options file - {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: Invalid YAML syntax - {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: Invalid structure (expected a mapping of options)")

    logger.debug("Loaded formatting options from %s: %s", path, data)
    try:
        return FormattingOptions.from_mapping(data, base=base)
    except ConfigurationError as e:
        raise ConfigurationError(f"{path}: {e}") from e
