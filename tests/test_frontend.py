"""
Tests for the frontend driver and the ternc command line.
"""
import io
import json

import pytest

import frontend
import ternc
from frontend import ParseResult, analyze_file, analyze_source, format_diagnostic
from tern.config import FrontendConfig


PLAIN = FrontendConfig(color=False)


class TestAnalyzeSource:
    """Tests for analyze_source() and ParseResult."""

    def test_valid_source(self, sample_program):
        result = analyze_source(sample_program, "sample.tern")
        assert result.is_ok()
        assert result.filename == "sample.tern"
        assert len(result.program.items) == 6
        assert repr(result) == "ParseResult('sample.tern', errors=0)"

    def test_invalid_source_never_raises(self):
        result = analyze_source("fn main( { }")
        assert not result.is_ok()
        assert result.filename == "<string>"

    def test_format_errors_lists_every_diagnostic(self):
        result = analyze_source("fn main() { let = 1; let y = ; }")
        text = result.format_errors(PLAIN)
        assert text.count("syntax error") == 2

    def test_format_errors_respects_max_errors(self):
        result = analyze_source("fn main() { let = 1; let y = ; let = 2; }")
        text = result.format_errors(FrontendConfig(color=False, max_errors=1))
        assert text.count("syntax error") == 1
        assert text.endswith("... and 2 more errors")

    def test_max_errors_does_not_change_result(self):
        result = analyze_source("fn main() { let = 1; let y = ; }")
        result.format_errors(FrontendConfig(max_errors=1))
        assert len(result.errors) == 2


class TestFormatDiagnostic:
    """Tests for diagnostic rendering."""

    @pytest.fixture
    def error(self):
        result = analyze_source("fn main() {\n    foo()\n}\n")
        return result.errors[0]

    def test_location_and_message(self, error):
        text = format_diagnostic(error, "fn main() {\n    foo()\n}\n", "demo.tern", PLAIN)
        first = text.splitlines()[0]
        assert first == "demo.tern:3:1: syntax error: expected ';', found '}'"

    def test_context_and_caret(self, error):
        lines = format_diagnostic(error, "fn main() {\n    foo()\n}\n", "demo.tern", PLAIN).splitlines()
        assert lines[1] == "   > }"
        assert lines[2] == "   > ^"
        assert lines[3] == "   hint: Statements should end with ';'"

    def test_context_and_hints_can_be_disabled(self, error):
        config = FrontendConfig(color=False, show_context=False, show_suggestions=False)
        text = format_diagnostic(error, "fn main() {\n    foo()\n}\n", "demo.tern", config)
        assert len(text.splitlines()) == 1

    def test_color(self, error):
        text = format_diagnostic(error, None, "demo.tern", FrontendConfig())
        assert "\033[91m" in text


class TestAnalyzeFile:
    """Tests for reading sources from disk and stdin."""

    def test_file(self, tmp_path, sample_program):
        path = tmp_path / "sample.tern"
        path.write_text(sample_program, encoding="utf-8")
        result = analyze_file(str(path))
        assert result.is_ok()
        assert result.filename == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            analyze_file(str(tmp_path / "missing.tern"))

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("fn main() {}"))
        result = analyze_file("-")
        assert result.filename == "<stdin>"
        assert result.is_ok()


class TestCommandLine:
    """Tests for ternc.main()."""

    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        frontend.set_verbose(False)

    @pytest.fixture
    def good_file(self, tmp_path, sample_program):
        path = tmp_path / "good.tern"
        path.write_text(sample_program, encoding="utf-8")
        return str(path)

    @pytest.fixture
    def bad_file(self, tmp_path):
        path = tmp_path / "bad.tern"
        path.write_text("fn main() { let = 1; }\n", encoding="utf-8")
        return str(path)

    def test_parse_ok(self, good_file, capsys):
        assert ternc.main(["parse", good_file]) == 0
        assert "no errors" in capsys.readouterr().err

    def test_parse_reports_diagnostics(self, bad_file, capsys):
        assert ternc.main(["--no-color", "parse", bad_file]) == 1
        err = capsys.readouterr().err
        assert f"{bad_file}:1:17: syntax error: expected identifier, found '='" in err

    def test_parse_json(self, good_file, capsys):
        assert ternc.main(["parse", "--json", good_file]) == 0
        tree = json.loads(capsys.readouterr().out)
        assert tree["kind"] == "program"
        assert tree["items"][0]["name"] == "MAX"

    def test_tokens(self, good_file, capsys):
        assert ternc.main(["tokens", good_file]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "keyword(import) @ 2:1"
        assert out[-1].startswith("eof()")

    def test_tokens_with_lexical_error(self, tmp_path, capsys):
        path = tmp_path / "lex.tern"
        path.write_text("let @", encoding="utf-8")
        assert ternc.main(["tokens", str(path)]) == 1
        assert "error(@)" in capsys.readouterr().out

    def test_outline(self, good_file, capsys):
        assert ternc.main(["outline", good_file]) == 0
        outline = json.loads(capsys.readouterr().out)
        assert [entry["type"] for entry in outline] == [
            "constant", "struct", "enum", "module", "function", "function",
        ]

    def test_check(self, good_file, bad_file, capsys):
        assert ternc.main(["check", good_file]) == 0
        assert ternc.main(["--max-errors", "1", "check", good_file, bad_file]) == 1
        assert "1 of 2 files have errors" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            ternc.main(["parse", str(tmp_path / "nope.tern")])
        assert exc.value.code == 2
        assert "not found" in capsys.readouterr().err

    def test_bad_config(self, good_file, tmp_path):
        config = tmp_path / "broken.json"
        config.write_text("[]")
        with pytest.raises(SystemExit) as exc:
            ternc.main(["--config", str(config), "parse", good_file])
        assert exc.value.code == 2

    def test_no_command(self, capsys):
        assert ternc.main([]) == 2
        assert "usage" in capsys.readouterr().out

    def test_verbose(self, good_file, capsys):
        ternc.main(["--verbose", "parse", good_file])
        assert "DEBUG" in capsys.readouterr().err
        frontend.set_verbose(False)
