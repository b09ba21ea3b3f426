"""
Recognized spreadsheet function names.

The table lives in ``functions.yaml`` next to this module, as a mapping of
category name to a list of function names. It is loaded once per process.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List

import yaml

from formula_beautifier.errors import ConfigurationError

logger = logging.getLogger(__name__)

FUNCTIONS_FILE = Path(__file__).parent / "functions.yaml"


def load_function_table(path: Path) -> Dict[str, List[str]]:
    """
    Load and validate a function table YAML file.

    Args:
        path: Path to a YAML file mapping category -> list of names

    Returns:
        Dictionary of category to uppercased function names

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML, or
            does not have the expected structure
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"{path}: Cannot read function table - {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: Invalid YAML syntax - {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: Invalid structure (expected a mapping of categories)")

    table = {}
    for category, names in data.items():
        if not isinstance(names, list):
            raise ConfigurationError(f"{path}: Category '{category}' must be a list of names")
        for name in names:
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(
                    f"{path}: Category '{category}' contains an invalid name: {name!r}"
                )
        table[str(category)] = [name.strip().upper() for name in names]
    return table


@lru_cache(maxsize=None)
def builtin_functions() -> FrozenSet[str]:
    """Return the packaged function names, uppercased."""
    table = load_function_table(FUNCTIONS_FILE)
    names = frozenset(name for names in table.values() for name in names)
    logger.debug("Loaded %d function names from %s", len(names), FUNCTIONS_FILE)
    return names


def function_names(extra: Iterable[str] = ()) -> FrozenSet[str]:
    """
    Build the lookup set used by a parser.

    Args:
        extra: Additional function names (any case) to recognize

    Returns:
        Uppercased function names
    """
    extra_names = {name.strip().upper() for name in extra if name and name.strip()}
    if not extra_names:
        return builtin_functions()
    return builtin_functions() | extra_names
