"""
Formatter Module

This module rebuilds LC-3 assembly text from a parsed Program. The output is
derived from the program's semantic content alone; the source layout only
contributes blank-line positions and comment placement.

Formatting works in three steps:
- every label, statement and own-line comment becomes one output line
  (trailing comments ride along with the line they follow)
- blank lines are assigned: source runs collapse to one, and the spacing
  options around ``.ORIG``/``.END`` and labelled blocks are enforced
- lines are grouped into blocks separated by blank lines or by ``.ORIG`` and
  ``.END``, and each block aligns its trailing comments to one column

The result is deterministic and idempotent.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .ast import Comment, CommentPlacement, Directive, DirectiveKind, Instruction, Label, Program
from .config import FormatStyle
from .diff import DiffOp, diff_lines, unified_diff
from .errors import AsmSyntaxError
from .parser import parse_source

logger = logging.getLogger(__name__)

MAX_BLANK_LINES = 1


class LineKind(Enum):
    """What an output line holds."""
    LABEL = "label"
    STATEMENT = "statement"
    COMMENT = "comment"


@dataclass
class OutputLine:
    """A line under construction; ``code`` excludes the indentation."""
    kind: LineKind
    code: str
    indent: int = 0
    source_blank: int = 0
    trailing: Optional[str] = None
    is_orig: bool = False
    is_end: bool = False
    labelled: bool = False
    starts_label_group: bool = False
    blank: int = 0

    @property
    def is_code(self) -> bool:
        return self.kind is not LineKind.COMMENT

    @property
    def is_boundary(self) -> bool:
        return self.is_orig or self.is_end

    @property
    def width(self) -> int:
        return self.indent + len(self.code)


@dataclass(frozen=True)
class CheckResult:
    """Verdict of comparing a source text with its canonical form."""
    formatted: bool
    diff: Tuple[DiffOp, ...]
    original_text: str = ""
    formatted_text: str = ""

    def unified(self, filename: str = "source") -> str:
        """Unified diff text, empty when the source is already formatted."""
        if self.formatted:
            return ""
        return unified_diff(self.original_text, self.formatted_text, filename)


class FormatResult:
    """Result of formatting one file."""

    def __init__(self, success: bool, message: str, filepath: str = "", changed: bool = False,
                 original_content: str = "", formatted_content: str = "",
                 error: Optional[AsmSyntaxError] = None):
        self.success = success
        self.message = message
        self.filepath = filepath
        self.changed = changed
        self.original_content = original_content
        self.formatted_content = formatted_content
        self.error = error

    @property
    def check(self) -> CheckResult:
        """Check-mode view of this result."""
        diff = diff_lines(self.original_content, self.formatted_content) if self.success else ()
        return CheckResult(not self.changed, diff, self.original_content, self.formatted_content)

    def __repr__(self):
        return f"FormatResult(filepath='{self.filepath}', success={self.success}, changed={self.changed}, message='{self.message}')"


class Formatter:
    """
    Canonical pretty-printer for LC-3 programs.

    This class provides:
    - Formatting of a parsed Program into canonical text
    - Check mode: a formatted/not formatted verdict with a line diff
    - File-level formatting with per-file results for batch runs
    """

    def __init__(self, style: Optional[FormatStyle] = None):
        """
        Initialize the formatter.

        Args:
            style: Formatting options (defaults when omitted)
        """
        self.style = style or FormatStyle()

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def _label_text(self, label: Label) -> str:
        return label.name + (":" if self.style.colon_after_label else "")

    def _statement_indent(self, statement) -> int:
        if isinstance(statement, Instruction):
            return self.style.indent_instruction
        if statement.is_boundary:
            return 0
        return self.style.indent_directive

    @staticmethod
    def _statement_text(statement) -> str:
        if isinstance(statement, Instruction):
            if not statement.operands:
                return statement.keyword
            return f"{statement.keyword} {', '.join(op.text for op in statement.operands)}"
        if statement.argument is None:
            return statement.keyword
        return f"{statement.keyword} {statement.argument.text}"

    # ------------------------------------------------------------------
    # Step 1: items to lines
    # ------------------------------------------------------------------

    def _build_lines(self, program: Program) -> List[OutputLine]:
        lines: List[OutputLine] = []
        items = program.items
        joined_label: Optional[Label] = None
        label_seen = False

        for index, item in enumerate(items):
            if isinstance(item, Comment):
                last = lines[-1] if lines else None
                if (item.placement is CommentPlacement.TRAILING and last is not None
                        and last.is_code and last.trailing is None):
                    last.trailing = item.text
                else:
                    lines.append(OutputLine(LineKind.COMMENT, item.text, source_blank=item.blank_lines_before))
                continue

            if isinstance(item, Label):
                following = items[index + 1] if index + 1 < len(items) else None
                if (not self.style.directive_label_wrap and item.statement_on_same_line
                        and isinstance(following, Directive)):
                    joined_label = item
                    continue
                lines.append(OutputLine(
                    LineKind.LABEL,
                    self._label_text(item),
                    indent=self.style.indent_label,
                    source_blank=item.blank_lines_before,
                    starts_label_group=not label_seen,
                ))
                label_seen = True
                continue

            line = OutputLine(
                LineKind.STATEMENT,
                self._statement_text(item),
                indent=self._statement_indent(item),
                source_blank=item.blank_lines_before,
                is_orig=isinstance(item, Directive) and item.kind is DirectiveKind.ORIG,
                is_end=isinstance(item, Directive) and item.kind is DirectiveKind.END,
                labelled=label_seen or joined_label is not None,
            )
            if joined_label is not None:
                label = self._label_text(joined_label)
                gap = max(1, line.indent - self.style.indent_label - len(label))
                line.code = label + " " * gap + line.code
                line.indent = self.style.indent_label
                line.source_blank = joined_label.blank_lines_before
                line.starts_label_group = not label_seen
                joined_label = None
            lines.append(line)
            label_seen = False

        return lines

    # ------------------------------------------------------------------
    # Step 2: vertical spacing
    # ------------------------------------------------------------------

    def _assign_blank_lines(self, lines: List[OutputLine]) -> None:
        for index, line in enumerate(lines):
            if index == 0:
                line.blank = 0
                continue

            previous = lines[index - 1]
            blank = min(line.source_blank, MAX_BLANK_LINES)
            if previous.is_orig or line.is_end:
                blank = self.style.space_from_start_end_block
            elif (line.starts_label_group and previous.kind is LineKind.STATEMENT
                    and not previous.labelled):
                blank = max(blank, self.style.space_from_label_block)
            line.blank = blank

    # ------------------------------------------------------------------
    # Step 3: blocks and alignment
    # ------------------------------------------------------------------

    @staticmethod
    def _split_blocks(lines: List[OutputLine]) -> List[List[OutputLine]]:
        blocks: List[List[OutputLine]] = []
        current: List[OutputLine] = []

        for line in lines:
            if current and (line.blank > 0 or line.is_boundary or current[-1].is_boundary):
                blocks.append(current)
                current = []
            current.append(line)

        if current:
            blocks.append(current)
        return blocks

    def _comment_indent(self, block: List[OutputLine], position: int) -> int:
        """Indentation of the own-line comment at ``block[position]``."""
        minimum = self.style.indent_min_comment_from_block
        if self.style.fixed_body_comment_indent:
            return minimum

        following = next((block[i] for i in range(position + 1, len(block)) if block[i].is_code), None)
        if following is None:
            following = next((block[i] for i in range(position - 1, -1, -1) if block[i].is_code), None)
        if following is not None:
            return max(minimum, following.indent)
        return minimum

    def _render_block(self, block: List[OutputLine]) -> List[str]:
        widths = [line.width for line in block if line.is_code]
        column = (max(widths) if widths else 0) + self.style.space_block_to_comment
        stick = self.style.space_comment_stick_to_body
        rendered: List[str] = []

        for position, line in enumerate(block):
            rendered.extend([""] * line.blank)

            if line.kind is LineKind.COMMENT:
                rendered.append(" " * self._comment_indent(block, position) + line.code)
                continue

            text = " " * line.indent + line.code
            if line.trailing is not None:
                if stick > 0:
                    text = text + " " * stick + line.trailing
                else:
                    text = text.ljust(column) + line.trailing
            rendered.append(text)

        return rendered

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def format(self, program: Program) -> str:
        """
        Produce the canonical text of a program.

        Args:
            program: Parsed program

        Returns:
            Formatted text; empty for an empty program, otherwise ending in
            exactly one newline
        """
        lines = self._build_lines(program)
        self._assign_blank_lines(lines)

        output: List[str] = []
        for block in self._split_blocks(lines):
            output.extend(self._render_block(block))

        logger.debug(f"Formatted {len(program)} items into {len(output)} lines")
        return "\n".join(output) + "\n" if output else ""

    def check(self, original: str, program: Program) -> CheckResult:
        """
        Compare source text with the canonical form of its program.

        Args:
            original: Source text as read
            program: Program parsed from ``original``

        Returns:
            CheckResult; ``diff`` is empty exactly when the text is formatted
        """
        formatted = self.format(program)
        diff = diff_lines(original, formatted)
        return CheckResult(not diff, diff, original, formatted)

    def format_source(self, source: str, filepath: str = "") -> FormatResult:
        """Parse and format a source string without touching the file system."""
        parsed = parse_source(source)
        if not parsed.success:
            return FormatResult(False, f"Syntax error: {parsed.error}", filepath,
                                original_content=source, error=parsed.error)

        formatted = self.format(parsed.program)
        changed = formatted != source
        message = "Reformatted" if changed else "Already formatted"
        return FormatResult(True, message, filepath, changed, source, formatted)

    def _read_file(self, filepath: str) -> Optional[str]:
        """Read file content safely."""
        try:
            with open(filepath, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read file {filepath}: {e}")
            return None

    def _write_file(self, filepath: str, content: str) -> bool:
        """Write file content safely."""
        try:
            with open(filepath, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            return True
        except OSError as e:
            logger.error(f"Failed to write file {filepath}: {e}")
            return False

    def format_file(self, filepath: str, write: bool = True) -> FormatResult:
        """
        Format one file.

        Args:
            filepath: Path of the ``.asm`` file
            write: Rewrite the file when its content changes; pass False for
                check mode

        Returns:
            FormatResult object
        """
        original = self._read_file(filepath)
        if original is None:
            return FormatResult(False, f"Failed to read file: {filepath}", filepath)

        result = self.format_source(original, filepath)
        if not result.success or not result.changed or not write:
            return result

        if not self._write_file(filepath, result.formatted_content):
            return FormatResult(False, f"Failed to write formatted content to: {filepath}", filepath,
                                original_content=original)
        logger.info(f"Formatted {filepath}")
        return result

    def format_multiple_files(self, filepaths: List[str], write: bool = True) -> Dict[str, FormatResult]:
        """
        Format several files independently.

        Args:
            filepaths: Files to format
            write: Whether to write changes back

        Returns:
            Dictionary mapping filepaths to their FormatResult objects
        """
        results = {}

        for filepath in filepaths:
            result = self.format_file(filepath, write=write)
            results[filepath] = result

            if not result.success:
                logger.error(f"Failed to format {filepath}: {result.message}")

        return results


def format_program(program: Program, style: Optional[FormatStyle] = None) -> str:
    """Format a program with the given style."""
    return Formatter(style).format(program)


def check_program(original: str, program: Program, style: Optional[FormatStyle] = None) -> CheckResult:
    """Check whether ``original`` is the canonical text of ``program``."""
    return Formatter(style).check(original, program)
