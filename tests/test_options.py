#!/usr/bin/env python3
"""
Test suite for FormattingOptions and options files.
"""

import pytest

from formula_beautifier.errors import ConfigurationError
from formula_beautifier.options import FormattingOptions, load_options, resolve_options


class TestFormattingOptions:
    """Test building options from mappings."""

    def test_defaults(self):
        """Test the default layout policy."""
        options = FormattingOptions()

        assert options.use_nesting_indicators is True
        assert options.use_operator_spacing is True
        assert options.indent_size == 4
        assert options.max_inline_length == 40
        assert options.max_inline_params == 3

    def test_partial_mapping(self):
        """Test that missing fields keep their defaults."""
        options = FormattingOptions.from_mapping({"indent_size": 2})

        assert options == FormattingOptions(indent_size=2)

    def test_dashed_keys(self):
        """Test that 'indent-size' is read as 'indent_size'."""
        options = FormattingOptions.from_mapping({"indent-size": 2, "use-nesting-indicators": False})

        assert options.indent_size == 2
        assert options.use_nesting_indicators is False

    def test_base_options(self):
        """Test that values come from base when not overridden."""
        base = FormattingOptions(indent_size=8)
        options = FormattingOptions.from_mapping({"max_inline_params": 5}, base=base)

        assert options.indent_size == 8
        assert options.max_inline_params == 5

    @pytest.mark.parametrize(
        "mapping, message",
        [
            ({"indent": 2}, "Unknown formatting option"),
            ({"indent_size": "2"}, "must be int"),
            ({"indent_size": True}, "must be int"),
            ({"use_operator_spacing": 1}, "must be bool"),
            ({"max_inline_length": -1}, "must not be negative"),
        ],
    )
    def test_invalid_mappings(self, mapping, message):
        """Test that invalid keys and values raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match=message):
            FormattingOptions.from_mapping(mapping)

    def test_resolve_options(self):
        """Test each accepted form of options."""
        options = FormattingOptions(indent_size=2)

        assert resolve_options(None) == FormattingOptions()
        assert resolve_options(options) is options
        assert resolve_options({"indent_size": 2}) == options


class TestLoadOptions:
    """Test loading options from YAML files."""

    def test_load_file(self, tmp_path):
        """Test loading a valid options file."""
        path = tmp_path / "options.yaml"
        path.write_text("indent_size: 2\nuse-nesting-indicators: false\n", encoding="utf-8")

        options = load_options(path)

        assert options.indent_size == 2
        assert options.use_nesting_indicators is False
        assert options.max_inline_length == 40

    def test_empty_file_gives_defaults(self, tmp_path):
        """Test that an empty file means all defaults."""
        path = tmp_path / "options.yaml"
        path.write_text("", encoding="utf-8")

        assert load_options(path) == FormattingOptions()

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Cannot read options file"):
            load_options(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML raises ConfigurationError."""
        path = tmp_path / "options.yaml"
        path.write_text("indent_size: [2\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            load_options(path)

    def test_non_mapping_document(self, tmp_path):
        """Test that a list document raises ConfigurationError."""
        path = tmp_path / "options.yaml"
        path.write_text("- indent_size\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid structure"):
            load_options(path)

    def test_invalid_value_names_the_file(self, tmp_path):
        """Test that option errors mention the file they came from."""
        path = tmp_path / "options.yaml"
        path.write_text("indent_size: wide\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="options.yaml"):
            load_options(path)
