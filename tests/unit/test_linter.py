"""
Unit tests for the linter module.

These tests cover:
- Casing predicates and style detection
- Identifier and keyword conversion
- Label, instruction and directive checks
- Diagnostic ordering and file-level linting
"""

import pytest

from lc3_toolchain.core.config import CaseStyle, LintStyle
from lc3_toolchain.core.diagnostics import DiagnosticKind, Severity
from lc3_toolchain.core.linter import (
    Linter, LintResult, convert_identifier, convert_keyword, detect_case_style,
    is_lower_camel_case, is_screaming_snake_case, is_snake_case, is_upper_camel_case,
    lint_program, matches_case_style, split_words,
)
from lc3_toolchain.core.parser import parse


class TestCasePredicates:
    """Test the four casing conventions."""

    @pytest.mark.parametrize("word,expected", [
        ("loop", True), ("loop_start", True), ("loop_2", True),
        ("loopStart", False), ("LOOP", False), ("_loop", False), ("loop__x", False), ("", False),
    ])
    def test_snake_case(self, word, expected):
        """Test snake_case recognition."""
        assert is_snake_case(word) is expected

    @pytest.mark.parametrize("word,expected", [
        ("LOOP", True), ("LOOP_1", True), ("ADD", True), ("R2D2", True),
        ("Loop1", False), ("LOOP_", False), ("loop", False),
    ])
    def test_screaming_snake_case(self, word, expected):
        """Test SCREAMING_SNAKE_CASE recognition."""
        assert is_screaming_snake_case(word) is expected

    @pytest.mark.parametrize("word,expected", [
        ("loop", True), ("loopStart", True), ("loopStart2", True),
        ("loop_start", False), ("LoopStart", False),
    ])
    def test_lower_camel_case(self, word, expected):
        """Test lowerCamelCase recognition."""
        assert is_lower_camel_case(word) is expected

    @pytest.mark.parametrize("word,expected", [
        ("Loop", True), ("LoopStart", True), ("Add", True),
        ("ADD", False), ("Loop_Start", False), ("loopStart", False),
    ])
    def test_upper_camel_case(self, word, expected):
        """Test UpperCamelCase recognition."""
        assert is_upper_camel_case(word) is expected

    def test_matches_case_style(self):
        """Test lookup of a predicate by style."""
        assert matches_case_style("loop_start", CaseStyle.SNAKE_CASE)
        assert not matches_case_style("loop_start", CaseStyle.LOWER_CAMEL_CASE)

    @pytest.mark.parametrize("word,style", [
        ("loop", CaseStyle.SNAKE_CASE),
        ("LOOP", CaseStyle.SCREAMING_SNAKE_CASE),
        ("loopStart", CaseStyle.LOWER_CAMEL_CASE),
        ("LoopStart", CaseStyle.UPPER_CAMEL_CASE),
        ("Loop_Start", None),
        ("", None),
    ])
    def test_detect_case_style(self, word, style):
        """Test detection order and unrecognised words."""
        assert detect_case_style(word) is style


class TestConversion:
    """Test suggested respellings."""

    def test_split_words(self):
        """Test word boundaries at underscores and case changes."""
        assert split_words("loopStart") == ["loop", "Start"]
        assert split_words("LOOP_START") == ["LOOP", "START"]
        assert split_words("parseHTTPReply") == ["parse", "HTTP", "Reply"]

    @pytest.mark.parametrize("name,style,expected", [
        ("loopStart", CaseStyle.SCREAMING_SNAKE_CASE, "LOOP_START"),
        ("LOOP_START", CaseStyle.LOWER_CAMEL_CASE, "loopStart"),
        ("LOOP_START", CaseStyle.UPPER_CAMEL_CASE, "LoopStart"),
        ("LoopStart", CaseStyle.SNAKE_CASE, "loop_start"),
        ("Loop", CaseStyle.SCREAMING_SNAKE_CASE, "LOOP"),
    ])
    def test_convert_identifier(self, name, style, expected):
        """Test conversion between conventions."""
        assert convert_identifier(name, style) == expected

    def test_no_conversion_to_keyword(self):
        """Test that a conversion yielding a keyword is withheld."""
        assert convert_identifier("in_", CaseStyle.SCREAMING_SNAKE_CASE) is None
        assert convert_identifier("Halt", CaseStyle.SCREAMING_SNAKE_CASE) is None

    def test_no_conversion_to_register(self):
        """Test that a conversion yielding a register name is withheld."""
        assert convert_identifier("r1", CaseStyle.SCREAMING_SNAKE_CASE) is None

    @pytest.mark.parametrize("keyword,style,expected", [
        ("add", CaseStyle.SCREAMING_SNAKE_CASE, "ADD"),
        ("ADD", CaseStyle.SNAKE_CASE, "add"),
        ("ADD", CaseStyle.LOWER_CAMEL_CASE, "add"),
        ("BRnzp", CaseStyle.UPPER_CAMEL_CASE, "Brnzp"),
    ])
    def test_convert_keyword(self, keyword, style, expected):
        """Test respelling of single-word keywords."""
        assert convert_keyword(keyword, style) == expected


class TestLabelChecks:
    """Test diagnostics for labels."""

    def test_upper_camel_label_with_colon(self):
        """Test both findings for a capitalised label with a colon."""
        diagnostics = lint_program(parse("Loop:"), LintStyle())

        assert [d.kind for d in diagnostics] == [DiagnosticKind.LABEL_CASE, DiagnosticKind.UNEXPECTED_COLON]
        for diagnostic in diagnostics:
            assert (diagnostic.span.start, diagnostic.span.end) == (0, 5)
            assert diagnostic.severity is Severity.WARNING
        assert "found UpperCamelCase, expected ScreamingSnakeCase" in diagnostics[0].message
        assert diagnostics[0].suggestion == "LOOP"
        assert diagnostics[0].rule == "label-style"
        assert diagnostics[1].rule == "colon-after-label"
        assert diagnostics[1].suggestion == "Loop"

    def test_missing_colon(self):
        """Test that a required colon is reported."""
        diagnostics = lint_program(parse("LOOP ADD R1, R1, #1"), LintStyle(colon_after_label=True))

        assert len(diagnostics) == 1
        assert diagnostics[0].kind is DiagnosticKind.MISSING_COLON
        assert diagnostics[0].suggestion == "LOOP:"
        assert "should end with a colon" in diagnostics[0].message

    def test_case_suggestion_follows_colon_option(self):
        """Test that the renamed label carries a colon only when one is required."""
        required = lint_program(parse("loop HALT"), LintStyle(colon_after_label=True))
        forbidden = lint_program(parse("loop: HALT"), LintStyle())

        assert [d.kind for d in required] == [DiagnosticKind.LABEL_CASE, DiagnosticKind.MISSING_COLON]
        assert required[0].suggestion == "LOOP:"
        assert [d.kind for d in forbidden] == [DiagnosticKind.LABEL_CASE, DiagnosticKind.UNEXPECTED_COLON]
        assert forbidden[0].suggestion == "LOOP"

    def test_unknown_case_style(self):
        """Test the message for a name matching no convention."""
        diagnostics = lint_program(parse("Loop_Start"), LintStyle())

        assert "unknown case style" in diagnostics[0].message

    def test_snake_case_labels(self):
        """Test a snake_case label style."""
        style = LintStyle(label_style=CaseStyle.SNAKE_CASE)

        assert lint_program(parse("loop_start HALT"), style) == []
        diagnostics = lint_program(parse("LOOP_START HALT"), style)
        assert diagnostics[0].suggestion == "loop_start"


class TestKeywordChecks:
    """Test diagnostics for instructions and directives."""

    def test_lower_case_instruction(self):
        """Test a lower-case mnemonic under the default style."""
        diagnostics = lint_program(parse("add R1, R1, #1"), LintStyle())

        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.kind is DiagnosticKind.INSTRUCTION_CASE
        assert diagnostic.rule == "instruction-style"
        assert diagnostic.suggestion == "ADD"
        assert (diagnostic.span.start, diagnostic.span.end) == (0, 3)

    def test_lower_camel_instructions(self):
        """Test lowerCamelCase mnemonics."""
        style = LintStyle(instruction_style=CaseStyle.LOWER_CAMEL_CASE)

        assert lint_program(parse("add R1, R1, #1"), style) == []
        assert lint_program(parse("ADD R1, R1, #1"), style)[0].suggestion == "add"

    def test_upper_camel_branch(self):
        """Test that branch keywords are checked as one word."""
        style = LintStyle(instruction_style=CaseStyle.UPPER_CAMEL_CASE)

        assert lint_program(parse("Brnzp LOOP"), style) == []
        assert lint_program(parse("BRnzp LOOP"), style) == []
        diagnostics = lint_program(parse("BRNZP LOOP"), style)
        assert len(diagnostics) == 1
        assert diagnostics[0].kind is DiagnosticKind.INSTRUCTION_CASE
        assert diagnostics[0].suggestion == "Brnzp"

    def test_directive_case(self):
        """Test that directives are checked without their dot."""
        diagnostics = lint_program(parse(".orig x3000"), LintStyle())

        assert diagnostics[0].kind is DiagnosticKind.DIRECTIVE_CASE
        assert diagnostics[0].suggestion == ".ORIG"
        assert "found SnakeCase" in diagnostics[0].message
        assert (diagnostics[0].span.start, diagnostics[0].span.end) == (0, 5)

    def test_operands_are_not_checked(self):
        """Test that register and literal spelling is not linted."""
        assert lint_program(parse("ADD r1, r2, xff"), LintStyle()) == []

    def test_diagnostics_in_source_order(self):
        """Test ordering by position."""
        diagnostics = lint_program(parse("add R1, R1, #1\nLoop: HALT\n.fill #1"), LintStyle())

        assert [d.kind for d in diagnostics] == [
            DiagnosticKind.INSTRUCTION_CASE,
            DiagnosticKind.LABEL_CASE,
            DiagnosticKind.UNEXPECTED_COLON,
            DiagnosticKind.DIRECTIVE_CASE,
        ]


class TestLinter:
    """Test the Linter class entry points."""

    def setup_method(self):
        """Set up test fixtures."""
        self.linter = Linter()

    def test_clean_source(self):
        """Test a source with no findings."""
        result = self.linter.lint_source(".ORIG x3000\nLOOP HALT\n.END\n", "ok.asm")

        assert isinstance(result, LintResult)
        assert result.success
        assert result.clean
        assert result.message == "No issues"

    def test_source_with_issues(self):
        """Test a source with findings."""
        result = self.linter.lint_source("halt")

        assert result.success
        assert not result.clean
        assert result.message == "1 style issue(s)"

    def test_syntax_error(self):
        """Test that a syntax error becomes a single error diagnostic."""
        result = self.linter.lint_source("ADD R1")

        assert not result.success
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].kind is DiagnosticKind.SYNTAX_ERROR
        assert result.diagnostics[0].severity is Severity.ERROR
        assert result.diagnostics[0].rule == "syntax"

    def test_lint_file(self, tmp_path):
        """Test linting a file on disk."""
        path = tmp_path / "prog.asm"
        path.write_text("loop HALT\n")

        result = self.linter.lint_file(str(path))

        assert result.filepath == str(path)
        assert result.source == "loop HALT\n"
        assert result.diagnostics[0].suggestion == "LOOP"

    def test_lint_missing_file(self, tmp_path):
        """Test linting a file that does not exist."""
        result = self.linter.lint_file(str(tmp_path / "missing.asm"))

        assert not result.success
        assert result.error is None
        assert result.diagnostics == []

    def test_lint_multiple_files(self, tmp_path):
        """Test that files are linted independently."""
        first = tmp_path / "a.asm"
        second = tmp_path / "b.asm"
        first.write_text("HALT\n")
        second.write_text("halt\n")

        results = self.linter.lint_multiple_files([str(first), str(second)])

        assert results[str(first)].clean
        assert not results[str(second)].clean

    def test_diagnostic_to_dict(self):
        """Test the serialisable form of a diagnostic."""
        data = self.linter.lint_source("\n  halt").diagnostics[0].to_dict()

        assert data['line'] == 2
        assert data['column'] == 3
        assert data['rule'] == "instruction-style"
        assert data['severity'] == "warning"
        assert data['suggestion'] == "HALT"
