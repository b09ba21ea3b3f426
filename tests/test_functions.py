#!/usr/bin/env python3
"""
Test suite for the function name table.
"""

import pytest
import yaml

from formula_beautifier.errors import ConfigurationError
from formula_beautifier.functions import (
    FUNCTIONS_FILE,
    builtin_functions,
    function_names,
    load_function_table,
)


class TestFunctionTable:
    """Test the packaged function table."""

    def test_packaged_file_is_valid(self):
        """Test that functions.yaml loads and every name is uppercase."""
        table = load_function_table(FUNCTIONS_FILE)

        assert table
        for names in table.values():
            assert names
            assert all(name == name.upper() for name in names)

    @pytest.mark.parametrize(
        "name", ["SUM", "IF", "VLOOKUP", "STDEV.S", "LET", "NOW", "TRUE", "FALSE"]
    )
    def test_common_functions_present(self, name):
        """Test that common spreadsheet functions are recognized."""
        assert name in builtin_functions()

    def test_boolean_names_stay_strings(self):
        """Test that TRUE and FALSE load as names, not YAML booleans."""
        names = load_function_table(FUNCTIONS_FILE)["Conditional"]

        assert "TRUE" in names
        assert "FALSE" in names
        assert all(isinstance(name, str) for name in names)

    def test_extra_names(self):
        """Test that extra names are added uppercased."""
        names = function_names(["myFunc", "  ", ""])

        assert "MYFUNC" in names
        assert "SUM" in names
        assert "" not in names

    def test_no_extra_names_reuses_table(self):
        """Test that the cached table is returned when nothing is added."""
        assert function_names() is builtin_functions()


class TestLoadFunctionTable:
    """Test validation of function table files."""

    def write(self, path, data):
        """Write data as YAML and return the path."""
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    def test_names_are_normalized(self, tmp_path):
        """Test that names are stripped and uppercased."""
        path = self.write(tmp_path / "f.yaml", {"Custom": [" myfunc ", "Other"]})

        assert load_function_table(path) == {"Custom": ["MYFUNC", "OTHER"]}

    @pytest.mark.parametrize(
        "data, message",
        [
            (["SUM"], "Invalid structure"),
            ({"Basic": "SUM"}, "must be a list"),
            ({"Basic": ["SUM", 3]}, "invalid name"),
        ],
    )
    def test_invalid_tables(self, tmp_path, data, message):
        """Test that malformed tables raise ConfigurationError."""
        path = self.write(tmp_path / "f.yaml", data)

        with pytest.raises(ConfigurationError, match=message):
            load_function_table(path)

    def test_missing_file(self, tmp_path):
        """Test that a missing table raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Cannot read function table"):
            load_function_table(tmp_path / "missing.yaml")
