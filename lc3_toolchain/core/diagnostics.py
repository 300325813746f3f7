"""
Diagnostic values reported by the linter and by the syntax checker.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .ast import Span
from .errors import AsmSyntaxError


class Severity(Enum):
    """Diagnostic severity levels."""
    WARNING = "warning"
    ERROR = "error"


class DiagnosticKind(Enum):
    """What a diagnostic is about."""
    SYNTAX_ERROR = "syntax-error"
    LABEL_CASE = "label-case"
    INSTRUCTION_CASE = "instruction-case"
    DIRECTIVE_CASE = "directive-case"
    MISSING_COLON = "missing-colon"
    UNEXPECTED_COLON = "unexpected-colon"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding anchored to a source span.

    Attributes:
        severity: How serious the finding is
        kind: Category of the finding
        rule: Name of the configuration option (or ``syntax``) that was violated
        span: Offending source range
        message: Human-readable description
        suggestion: Replacement text for the span, when one can be derived
    """
    severity: Severity
    kind: DiagnosticKind
    rule: str
    span: Span
    message: str
    suggestion: Optional[str] = None

    @classmethod
    def from_syntax_error(cls, error: AsmSyntaxError) -> 'Diagnostic':
        """Wrap a syntax error so it can be reported alongside style findings."""
        return cls(Severity.ERROR, DiagnosticKind.SYNTAX_ERROR, "syntax", error.span, error.describe())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'severity': self.severity.value,
            'kind': self.kind.value,
            'rule': self.rule,
            'line': self.span.line,
            'column': self.span.column,
            'start': self.span.start,
            'end': self.span.end,
            'message': self.message,
            'suggestion': self.suggestion,
        }

    def __repr__(self):
        return f"Diagnostic({self.kind.value} at L{self.span.line}:{self.span.column}, message='{self.message}')"
