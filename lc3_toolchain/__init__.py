"""
LC-3 Toolchain

A formatter and style linter for LC-3 assembly language.
"""

__version__ = "1.0.0"
__author__ = "lc3-toolchain contributors"

from .core.parser import parse, parse_source
from .core.formatter import Formatter, format_program, check_program
from .core.linter import Linter, lint_program
from .core.config import FormatStyle, LintStyle, CaseStyle

__all__ = [
    'parse',
    'parse_source',
    'Formatter',
    'format_program',
    'check_program',
    'Linter',
    'lint_program',
    'FormatStyle',
    'LintStyle',
    'CaseStyle',
]
