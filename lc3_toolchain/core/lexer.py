"""
Lexer Module

Turns LC-3 assembly source into a flat list of tokens. Commas are treated
exactly like whitespace; newlines are kept as tokens because operands must
stay on the line of their mnemonic.

The scan is a single left-to-right pass over one compiled alternation, so its
cost is linear in the size of the input.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List

from .ast import Span
from .errors import AsmSyntaxError

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Token categories produced by the lexer."""
    WORD = "word"
    DIRECTIVE = "directive"
    DECIMAL = "decimal literal"
    STRING = "string literal"
    COMMENT = "comment"
    NEWLINE = "end of line"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location."""
    kind: TokenKind
    text: str
    span: Span

    @property
    def has_colon(self) -> bool:
        return self.kind is TokenKind.WORD and self.text.endswith(':')

    @property
    def word(self) -> str:
        """Token text without a label colon."""
        return self.text[:-1] if self.has_colon else self.text

    @property
    def ends_line(self) -> bool:
        return self.kind in (TokenKind.NEWLINE, TokenKind.EOF)

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, L{self.span.line}:{self.span.column})"


_TOKEN_SPEC = [
    ("NEWLINE", r"\r\n|\n|\r"),
    ("SKIP", r"[ \t\f\v,]+"),
    ("COMMENT", r";[^\r\n]*"),
    ("STRING", r'"[^"\r\n]*"'),
    ("UNTERMINATED", r'"[^"\r\n]*'),
    ("DIRECTIVE", r"\.[A-Za-z_][A-Za-z0-9_]*"),
    ("DECIMAL", r"#?[+-]?[0-9]+(?![A-Za-z0-9_])"),
    ("BAD_NUMBER", r"#[^\s,;]*|[+-]?[0-9][^\s,;]*"),
    ("WORD", r"[A-Za-z_][A-Za-z0-9_]*:?"),
    ("MISMATCH", r"."),
]

TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))


class Lexer:
    """Tokenizer for a single source string."""

    def __init__(self, source: str):
        self.source = source
        self.line = 1
        self.line_start = 0

    def _span(self, start: int, end: int) -> Span:
        return Span(start, end, self.line, start - self.line_start + 1)

    def tokenize(self) -> List[Token]:
        """
        Scan the whole source.

        Returns:
            List of tokens, always terminated by an EOF token

        Raises:
            AsmSyntaxError: On unterminated strings, malformed numbers or
                characters that cannot start any token
        """
        tokens: List[Token] = []
        pos = 0

        while pos < len(self.source):
            match = TOKEN_RE.match(self.source, pos)
            kind = match.lastgroup
            text = match.group()
            span = self._span(match.start(), match.end())
            pos = match.end()

            if kind == "SKIP":
                continue
            if kind == "NEWLINE":
                tokens.append(Token(TokenKind.NEWLINE, text, span))
                self.line += 1
                self.line_start = pos
                continue
            if kind == "UNTERMINATED":
                raise AsmSyntaxError("unterminated string literal", span, ('\'"\' to close the string',), text)
            if kind == "BAD_NUMBER":
                raise AsmSyntaxError(f"malformed decimal literal '{text}'", span, ("decimal literal",), text)
            if kind == "MISMATCH":
                raise AsmSyntaxError(
                    f"unexpected character {text!r}",
                    span,
                    ("label", "instruction", "directive", "operand", "comment"),
                    text,
                )

            tokens.append(Token(TokenKind[kind], text, span))

        tokens.append(Token(TokenKind.EOF, "", self._span(len(self.source), len(self.source))))
        logger.debug(f"Lexed {len(tokens)} tokens over {self.line} lines")
        return tokens


def tokenize(source: str) -> List[Token]:
    """Convenience wrapper around :class:`Lexer`."""
    return Lexer(source).tokenize()
