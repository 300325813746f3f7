"""
Error types raised by the toolchain core.
"""

from typing import Optional, Tuple

from .ast import Span


class AsmSyntaxError(Exception):
    """
    Source text that does not match the assembly grammar.

    Attributes:
        reason: Short description of the problem
        span: Location of the offending text
        expected: Alternatives that would have been accepted at that point
        found: The offending text itself (empty at end of line or input)
    """

    def __init__(self, reason: str, span: Span, expected: Tuple[str, ...] = (), found: str = ""):
        self.reason = reason
        self.span = span
        self.expected = tuple(expected)
        self.found = found
        super().__init__(f"Syntax error at L{span.line}:{span.column}: {self.describe()}")

    def describe(self) -> str:
        """Reason plus the expected alternatives, without the location prefix."""
        if not self.expected:
            return self.reason
        if len(self.expected) == 1:
            return f"{self.reason}; expected {self.expected[0]}"
        return f"{self.reason}; expected one of {{{', '.join(self.expected)}}}"


class ConfigError(ValueError):
    """Invalid value in a style configuration."""

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)
