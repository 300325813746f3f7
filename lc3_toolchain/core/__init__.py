"""
Core modules for parsing, formatting and linting LC-3 assembly.
"""

from .errors import AsmSyntaxError, ConfigError
from .parser import Parser, ParseResult, parse, parse_source
from .formatter import Formatter, FormatResult, CheckResult, format_program, check_program
from .linter import Linter, LintResult, lint_program
from .scanner import SourceScanner
from .aggregator import ResultAggregator, FileStatus

__all__ = [
    'AsmSyntaxError',
    'ConfigError',
    'Parser',
    'ParseResult',
    'parse',
    'parse_source',
    'Formatter',
    'FormatResult',
    'CheckResult',
    'format_program',
    'check_program',
    'Linter',
    'LintResult',
    'lint_program',
    'SourceScanner',
    'ResultAggregator',
    'FileStatus',
]
