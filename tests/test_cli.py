#!/usr/bin/env python3
"""
Test suite for the formula-beautifier command.
"""

import io

from formula_beautifier.cli import main


class TestMain:
    """Test main() exit codes and output."""

    def test_formats_argument(self, capsys):
        """Test that the formula argument is printed formatted."""
        assert main(['=IF(A1>100,"High","Low")']) == 0

        captured = capsys.readouterr()
        assert captured.out == '=IF(A1 > 100; "High"; "Low")\n'
        assert captured.err == ""

    def test_reads_stdin(self, capsys, monkeypatch):
        """Test that the formula is read from stdin when not given."""
        monkeypatch.setattr("sys.stdin", io.StringIO("=SUM(A1:A10)\n"))

        assert main([]) == 0
        assert capsys.readouterr().out == "=SUM(A1:A10)\n"

    def test_empty_input(self, capsys):
        """Test that blank input is an error."""
        assert main(["   "]) == 1
        assert "No formula given" in capsys.readouterr().err

    def test_missing_equals_warns(self, capsys):
        """Test that input without '=' is formatted with a warning."""
        assert main(["SUM(A1)"]) == 0

        captured = capsys.readouterr()
        assert captured.out == "SUM(A1)\n"
        assert "doesn't start with '='" in captured.err

    def test_recovered_fault_is_reported(self, capsys):
        """Test that a recovered fault is printed as a warning."""
        assert main(["=SUM(A1,A2"]) == 0

        captured = capsys.readouterr()
        assert captured.out == "=SUM(A1; A2)\n"
        assert "unmatched-open" in captured.err

    def test_strict_mode_fails(self, capsys):
        """Test that --strict exits 1 on malformed input."""
        assert main(["--strict", "=SUM(A1,A2"]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "❌" in captured.err
        assert "unmatched-open" in captured.err

    def test_layout_flags(self, capsys):
        """Test --indent-size and --no-nesting-indicators."""
        assert main(["--indent-size", "2", "--no-nesting-indicators", "=ROUND(SUM(A1),2)"]) == 0

        assert capsys.readouterr().out == "=ROUND(\n  SUM(A1);\n  2\n)\n"

    def test_invalid_flag_value(self, capsys):
        """Test that a negative indent is a configuration error."""
        assert main(["--indent-size=-1", "=A1"]) == 1
        assert "Configuration Error" in capsys.readouterr().err

    def test_config_file_with_override(self, capsys, tmp_path):
        """Test that flags take precedence over the config file."""
        config = tmp_path / "options.yaml"
        config.write_text("indent_size: 2\nuse_nesting_indicators: false\n", encoding="utf-8")

        assert main(["--config", str(config), "--indent-size", "3", "=ROUND(SUM(A1),2)"]) == 0

        assert capsys.readouterr().out == "=ROUND(\n   SUM(A1);\n   2\n)\n"

    def test_invalid_config_file(self, capsys, tmp_path):
        """Test that an unreadable config file exits 1."""
        assert main(["--config", str(tmp_path / "missing.yaml"), "=A1"]) == 1
        assert "Configuration Error" in capsys.readouterr().err

    def test_stats(self, capsys):
        """Test that --stats prints the analysis after the formula."""
        assert main(["--stats", "=IF(SUM(A1:A10)>100,AVERAGE(B1:B20),0)"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("=IF(\n")
        assert "Functions:       3" in out
        assert "Cell references: 4" in out
        assert "Max nesting:     2" in out
        assert "Nodes:           10" in out
