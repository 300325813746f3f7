"""
Linter Module

This module checks the naming style of a parsed Program:

- label names against ``label-style``, and the presence or absence of a
  trailing colon against ``colon-after-label``
- instruction mnemonics against ``instruction-style``
- directive keywords (without the dot) against ``directive-style``

Every item is checked on its own; there is no cross-item analysis.
"""

import logging
import re
from typing import Callable, Dict, List, Optional

from .ast import Directive, Instruction, Label, Program
from .config import CaseStyle, LintStyle
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .errors import AsmSyntaxError
from .grammar import hex_digits, is_keyword, register_number
from .parser import parse_source

logger = logging.getLogger(__name__)

SNAKE_CASE_RE = re.compile(r"[a-z]+(?:_[a-z0-9]+)*")
SCREAMING_SNAKE_CASE_RE = re.compile(r"[A-Z0-9]+(?:_[A-Z0-9]+)*")
LOWER_CAMEL_CASE_RE = re.compile(r"[a-z]+(?:[A-Z][a-z0-9]*)*")
UPPER_CAMEL_CASE_RE = re.compile(r"[A-Z][a-z0-9]*(?:[A-Z][a-z0-9]*)*")

# Words inside one underscore-free chunk: acronyms, capitalised words, digit runs.
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])[0-9]*|[A-Z]?[a-z]+[0-9]*|[0-9]+")


def is_snake_case(identifier: str) -> bool:
    return SNAKE_CASE_RE.fullmatch(identifier) is not None


def is_screaming_snake_case(identifier: str) -> bool:
    return SCREAMING_SNAKE_CASE_RE.fullmatch(identifier) is not None


def is_lower_camel_case(identifier: str) -> bool:
    """A single lower-case word (``loop``) counts as lowerCamelCase."""
    return LOWER_CAMEL_CASE_RE.fullmatch(identifier) is not None


def is_upper_camel_case(identifier: str) -> bool:
    """All-capitals words such as ``ADD`` are ScreamingSnakeCase, not UpperCamelCase."""
    return (UPPER_CAMEL_CASE_RE.fullmatch(identifier) is not None
            and not is_screaming_snake_case(identifier))


VALIDATORS: Dict[CaseStyle, Callable[[str], bool]] = {
    CaseStyle.SNAKE_CASE: is_snake_case,
    CaseStyle.SCREAMING_SNAKE_CASE: is_screaming_snake_case,
    CaseStyle.LOWER_CAMEL_CASE: is_lower_camel_case,
    CaseStyle.UPPER_CAMEL_CASE: is_upper_camel_case,
}


def matches_case_style(identifier: str, style: CaseStyle) -> bool:
    """Whether ``identifier`` follows ``style``."""
    return VALIDATORS[style](identifier)


def detect_case_style(identifier: str) -> Optional[CaseStyle]:
    """
    Name the convention an identifier follows.

    Ambiguous words resolve in the order SnakeCase, ScreamingSnakeCase,
    LowerCamelCase, UpperCamelCase, so ``loop`` is reported as SnakeCase.

    Returns:
        The first matching CaseStyle, or None when none matches
    """
    for style in (CaseStyle.SNAKE_CASE, CaseStyle.SCREAMING_SNAKE_CASE,
                  CaseStyle.LOWER_CAMEL_CASE, CaseStyle.UPPER_CAMEL_CASE):
        if VALIDATORS[style](identifier):
            return style
    return None


def split_words(identifier: str) -> List[str]:
    """Break an identifier into words at underscores and case changes."""
    words = []
    for chunk in identifier.split('_'):
        words.extend(_WORD_RE.findall(chunk))
    return words


def convert_identifier(identifier: str, style: CaseStyle) -> Optional[str]:
    """
    Respell an identifier in another convention.

    Returns:
        The converted name, or None when no valid label name in that
        convention can be derived mechanically
    """
    words = split_words(identifier)
    if not words:
        return None

    if style is CaseStyle.SNAKE_CASE:
        converted = "_".join(word.lower() for word in words)
    elif style is CaseStyle.SCREAMING_SNAKE_CASE:
        converted = "_".join(word.upper() for word in words)
    elif style is CaseStyle.LOWER_CAMEL_CASE:
        converted = words[0].lower() + "".join(word.capitalize() for word in words[1:])
    else:
        converted = "".join(word.capitalize() for word in words)

    if not matches_case_style(converted, style):
        return None
    if is_keyword(converted) or register_number(converted) is not None or hex_digits(converted) is not None:
        return None
    return converted


def convert_keyword(keyword: str, style: CaseStyle) -> Optional[str]:
    """Respell a mnemonic or directive name; keywords are single words."""
    if style is CaseStyle.SCREAMING_SNAKE_CASE:
        converted = keyword.upper()
    elif style is CaseStyle.UPPER_CAMEL_CASE:
        converted = keyword.capitalize()
    else:
        converted = keyword.lower()
    return converted if matches_case_style(converted, style) else None


def _style_message(what: str, name: str, expected: CaseStyle, shown: Optional[str] = None) -> str:
    found = detect_case_style(name)
    shown = shown or name
    if found is None:
        return f"Invalid case style for {what} '{shown}': unknown case style, expected {expected.value}"
    return f"Invalid case style for {what} '{shown}': found {found.value}, expected {expected.value}"


class LintResult:
    """Result of linting one file."""

    def __init__(self, success: bool, message: str, filepath: str = "",
                 diagnostics: Optional[List[Diagnostic]] = None,
                 error: Optional[AsmSyntaxError] = None, source: str = ""):
        self.success = success
        self.message = message
        self.filepath = filepath
        self.diagnostics = diagnostics or []
        self.error = error
        self.source = source

    @property
    def clean(self) -> bool:
        """Parsed and produced no diagnostics."""
        return self.success and not self.diagnostics

    def __repr__(self):
        return f"LintResult(filepath='{self.filepath}', success={self.success}, diagnostics={len(self.diagnostics)})"


class Linter:
    """
    Style checker for LC-3 programs.

    This class provides:
    - Casing checks for labels, mnemonics and directive keywords
    - Colon checks for labels
    - Mechanical replacement suggestions where one exists
    - File-level linting with per-file results for batch runs
    """

    def __init__(self, style: Optional[LintStyle] = None):
        """
        Initialize the linter.

        Args:
            style: Lint options (defaults when omitted)
        """
        self.style = style or LintStyle()

    def _check_label(self, label: Label) -> List[Diagnostic]:
        diagnostics = []

        if not matches_case_style(label.name, self.style.label_style):
            converted = convert_identifier(label.name, self.style.label_style)
            diagnostics.append(Diagnostic(
                Severity.WARNING,
                DiagnosticKind.LABEL_CASE,
                "label-style",
                label.span,
                _style_message("label", label.name, self.style.label_style),
                converted + (":" if self.style.colon_after_label else "") if converted else None,
            ))

        if label.has_colon and not self.style.colon_after_label:
            diagnostics.append(Diagnostic(
                Severity.WARNING,
                DiagnosticKind.UNEXPECTED_COLON,
                "colon-after-label",
                label.span,
                f"Invalid colon style: label '{label.name}' should not end with a colon",
                label.name,
            ))
        elif not label.has_colon and self.style.colon_after_label:
            diagnostics.append(Diagnostic(
                Severity.WARNING,
                DiagnosticKind.MISSING_COLON,
                "colon-after-label",
                label.span,
                f"Invalid colon style: label '{label.name}' should end with a colon",
                label.name + ":",
            ))

        return diagnostics

    def _check_instruction(self, instruction: Instruction) -> List[Diagnostic]:
        expected = self.style.instruction_style
        if matches_case_style(instruction.keyword, expected):
            return []
        return [Diagnostic(
            Severity.WARNING,
            DiagnosticKind.INSTRUCTION_CASE,
            "instruction-style",
            instruction.keyword_span,
            _style_message("instruction", instruction.keyword, expected),
            convert_keyword(instruction.keyword, expected),
        )]

    def _check_directive(self, directive: Directive) -> List[Diagnostic]:
        expected = self.style.directive_style
        name = directive.keyword[1:]
        if matches_case_style(name, expected):
            return []
        converted = convert_keyword(name, expected)
        return [Diagnostic(
            Severity.WARNING,
            DiagnosticKind.DIRECTIVE_CASE,
            "directive-style",
            directive.keyword_span,
            _style_message("directive", name, expected, shown=directive.keyword),
            "." + converted if converted else None,
        )]

    def lint(self, program: Program) -> List[Diagnostic]:
        """
        Check a program against the configured style.

        Args:
            program: Parsed program

        Returns:
            Diagnostics ordered by source position
        """
        diagnostics: List[Diagnostic] = []

        for item in program.items:
            if isinstance(item, Label):
                diagnostics.extend(self._check_label(item))
            elif isinstance(item, Instruction):
                diagnostics.extend(self._check_instruction(item))
            elif isinstance(item, Directive):
                diagnostics.extend(self._check_directive(item))

        diagnostics.sort(key=lambda d: d.span.start)
        logger.debug(f"Lint produced {len(diagnostics)} diagnostics")
        return diagnostics

    def lint_source(self, source: str, filepath: str = "") -> LintResult:
        """Parse and lint a source string."""
        parsed = parse_source(source)
        if not parsed.success:
            return LintResult(False, f"Syntax error: {parsed.error}", filepath,
                              [Diagnostic.from_syntax_error(parsed.error)], parsed.error, source)

        diagnostics = self.lint(parsed.program)
        message = f"{len(diagnostics)} style issue(s)" if diagnostics else "No issues"
        return LintResult(True, message, filepath, diagnostics, source=source)

    def lint_file(self, filepath: str) -> LintResult:
        """
        Lint one file.

        Args:
            filepath: Path of the ``.asm`` file

        Returns:
            LintResult object
        """
        try:
            with open(filepath, 'r', encoding='utf-8', newline='') as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read file {filepath}: {e}")
            return LintResult(False, f"Failed to read file: {filepath}", filepath)

        return self.lint_source(source, filepath)

    def lint_multiple_files(self, filepaths: List[str]) -> Dict[str, LintResult]:
        """Lint several files independently, keyed by filepath."""
        return {filepath: self.lint_file(filepath) for filepath in filepaths}


def lint_program(program: Program, style: Optional[LintStyle] = None) -> List[Diagnostic]:
    """Lint a program with the given style."""
    return Linter(style).lint(program)
