"""
Parser Module

Builds a Program from LC-3 assembly source. The grammar is small enough for a
hand-written recursive descent parser with a single token of lookahead:

    program     := { item | NEWLINE }
    item        := label | instruction | directive | comment
    label       := WORD [':']
    instruction := MNEMONIC operand*      (count and kinds fixed per mnemonic)
    directive   := DIRECTIVE [argument]   (kind fixed per directive)
    comment     := ';' text

Several items may share a line. Operands must be on their mnemonic's line.
Besides the semantic content, the parser records the layout facts the
formatter relies on: blank lines before each line's first item, whether a
comment trails other code, and whether a label shares its line with the
statement it marks.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .ast import (
    Comment, CommentPlacement, Directive, DirectiveArgument, Immediate, Instruction,
    Item, Label, LabelReference, Operand, Program, Radix, Register, Span, StringLiteral,
)
from .errors import AsmSyntaxError
from .grammar import (
    DIRECTIVE_SIGNATURES, DIRECTIVES, MAX_ADDRESS_DIGITS, SIGNATURES, OperandKind,
    describe_signature, hex_digits, lookup_directive, lookup_mnemonic, register_number,
)
from .lexer import Lexer, Token, TokenKind

logger = logging.getLogger(__name__)

ITEM_START = ("label", "instruction", "directive", "comment")


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one source: either a program or a syntax error."""
    program: Optional[Program] = None
    error: Optional[AsmSyntaxError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def __repr__(self):
        if self.success:
            return f"ParseResult(items={len(self.program)})"
        return f"ParseResult(error='{self.error.describe()}')"


def _describe(token: Token) -> str:
    if token.ends_line:
        return token.kind.value
    return f"'{token.text}'"


class Parser:
    """
    Recursive descent parser for one source string.

    The parser is single use: create one per source and call :meth:`parse`.
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.pos = 0
        self.last_line = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def _error(self, reason: str, token: Token, expected: Tuple[str, ...]) -> AsmSyntaxError:
        return AsmSyntaxError(reason, token.span, expected, token.text)

    def _join(self, first: Span, last: Span) -> Span:
        return Span(first.start, last.end, first.line, first.column)

    # ------------------------------------------------------------------
    # Layout bookkeeping
    # ------------------------------------------------------------------

    def _start_item(self, token: Token) -> Tuple[int, bool]:
        """
        Record that an item begins at ``token``.

        Returns:
            Tuple of (blank lines before the item, whether it is the first
            item on its line)
        """
        line = token.span.line
        if line > self.last_line:
            blank = line - self.last_line - 1
            self.last_line = line
            return blank, True
        return 0, False

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the whole source.

        Returns:
            The parsed Program

        Raises:
            AsmSyntaxError: On the first construct that does not match the grammar
        """
        items: List[Item] = []

        while True:
            token = self._peek()
            if token.kind is TokenKind.EOF:
                break
            if token.kind is TokenKind.NEWLINE:
                self._advance()
                continue
            items.append(self._parse_item())

        logger.debug(f"Parsed {len(items)} items")
        return Program(tuple(items))

    def _parse_item(self) -> Item:
        token = self._peek()
        blank, first_on_line = self._start_item(token)

        if token.kind is TokenKind.COMMENT:
            self._advance()
            placement = CommentPlacement.OWN_LINE if first_on_line else CommentPlacement.TRAILING
            return Comment(token.text.rstrip(), token.span, placement, blank)

        if token.kind is TokenKind.DIRECTIVE:
            return self._parse_directive(blank)

        if token.kind is TokenKind.WORD:
            if token.has_colon:
                return self._parse_label(blank)
            resolved = lookup_mnemonic(token.text)
            if resolved is not None:
                return self._parse_instruction(resolved[0], resolved[1], blank)
            if register_number(token.text) is not None:
                raise self._error(f"register '{token.text}' cannot start a statement", token, ITEM_START)
            if hex_digits(token.text) is not None:
                raise self._error(f"hex literal '{token.text}' cannot start a statement", token, ITEM_START)
            return self._parse_label(blank)

        raise self._error(f"unexpected {_describe(token)}", token, ITEM_START)

    def _parse_label(self, blank: int) -> Label:
        token = self._advance()
        name = token.word

        if lookup_mnemonic(name) is not None:
            raise self._error(f"reserved keyword '{name}' cannot be used as a label", token, ("label",))
        if register_number(name) is not None or hex_digits(name) is not None:
            raise self._error(f"'{name}' cannot be used as a label", token, ("label",))

        return Label(
            name=name,
            span=token.span,
            has_colon=token.has_colon,
            statement_on_same_line=self._statement_follows(),
            blank_lines_before=blank,
        )

    def _statement_follows(self) -> bool:
        """Whether the next token on the current line starts an instruction or directive."""
        token = self._peek()
        if token.kind is TokenKind.DIRECTIVE:
            return True
        return token.kind is TokenKind.WORD and not token.has_colon and lookup_mnemonic(token.text) is not None

    def _parse_instruction(self, mnemonic, condition: str, blank: int) -> Instruction:
        keyword = self._advance()
        signature = SIGNATURES[mnemonic]
        operands: List[Operand] = []

        for index, kind in enumerate(signature):
            token = self._peek()
            if token.ends_line or token.kind is TokenKind.COMMENT:
                raise self._error(
                    f"'{keyword.text}' takes {len(signature)} operand(s) ({describe_signature(signature)}), "
                    f"found {index}",
                    token,
                    (kind.value,),
                )
            operands.append(self._parse_operand(kind))

        self._expect_statement_end(keyword.text, signature)

        span = self._join(keyword.span, operands[-1].span) if operands else keyword.span
        return Instruction(
            mnemonic=mnemonic,
            keyword=keyword.text,
            operands=tuple(operands),
            condition=condition,
            span=span,
            keyword_span=keyword.span,
            blank_lines_before=blank,
        )

    def _parse_directive(self, blank: int) -> Directive:
        keyword = self._advance()
        kind = lookup_directive(keyword.text)
        if kind is None:
            expected = tuple(f".{name}" for name in DIRECTIVES)
            raise self._error(f"unknown directive '{keyword.text}'", keyword, expected)

        signature = DIRECTIVE_SIGNATURES[kind]
        argument: Optional[DirectiveArgument] = None
        if signature:
            token = self._peek()
            if token.ends_line or token.kind is TokenKind.COMMENT:
                raise self._error(f"'{keyword.text}' requires an argument", token, (signature[0].value,))
            argument = self._parse_operand(signature[0])

        self._expect_statement_end(keyword.text, signature)

        span = self._join(keyword.span, argument.span) if argument is not None else keyword.span
        return Directive(
            kind=kind,
            keyword=keyword.text,
            argument=argument,
            span=span,
            keyword_span=keyword.span,
            blank_lines_before=blank,
        )

    def _expect_statement_end(self, keyword: str, signature: Tuple[OperandKind, ...]) -> None:
        """
        Reject a surplus operand after a complete statement.

        Anything that can start a new item is left alone, since several
        items may share a line.
        """
        token = self._peek()
        if token.kind in (TokenKind.DECIMAL, TokenKind.STRING):
            raise self._error(
                f"too many operands for '{keyword}' ({describe_signature(signature)})",
                token,
                ("end of line",) + ITEM_START,
            )
        if token.kind is TokenKind.WORD and not token.has_colon:
            if register_number(token.text) is not None or hex_digits(token.text) is not None:
                raise self._error(
                    f"too many operands for '{keyword}' ({describe_signature(signature)})",
                    token,
                    ("end of line",) + ITEM_START,
                )

    # ------------------------------------------------------------------
    # Operands
    # ------------------------------------------------------------------

    def _parse_operand(self, kind: OperandKind):
        token = self._peek()

        if kind is OperandKind.REGISTER:
            return self._parse_register()
        if kind is OperandKind.REGISTER_OR_IMMEDIATE:
            if token.kind is TokenKind.WORD and register_number(token.text) is not None:
                return self._parse_register()
            if token.kind is TokenKind.DECIMAL or self._looks_hex(token):
                return self._parse_immediate()
            raise self._error(f"unexpected {_describe(token)}", token, ("register", "immediate"))
        if kind is OperandKind.IMMEDIATE:
            return self._parse_immediate()
        if kind is OperandKind.HEX_ADDRESS:
            return self._parse_address()
        if kind is OperandKind.LABEL:
            return self._parse_label_reference()
        return self._parse_string()

    def _looks_hex(self, token: Token) -> bool:
        """WORD tokens shaped like a hex literal, including malformed ones like ``x1G``."""
        text = token.text
        return (token.kind is TokenKind.WORD and len(text) > 1 and text[0] in "xX"
                and text[1] in "0123456789abcdefABCDEF")

    def _parse_register(self) -> Register:
        token = self._peek()
        number = register_number(token.text) if token.kind is TokenKind.WORD else None
        if number is None:
            raise self._error(f"unexpected {_describe(token)}", token, ("register R0-R7",))
        self._advance()
        return Register(number, token.text, token.span)

    def _parse_immediate(self) -> Immediate:
        token = self._peek()

        if token.kind is TokenKind.DECIMAL:
            self._advance()
            text = token.text
            has_hash = text.startswith('#')
            digits = text[1:] if has_hash else text
            sign = digits[0] if digits[0] in "+-" else None
            return Immediate(int(digits), Radix.DECIMAL, text, has_hash, sign, token.span)

        if self._looks_hex(token):
            digits = hex_digits(token.text)
            if digits is None:
                raise self._error(f"malformed hex literal '{token.text}'", token, ("hex literal",))
            self._advance()
            return Immediate(int(digits, 16), Radix.HEX, token.text, span=token.span)

        raise self._error(f"unexpected {_describe(token)}", token, ("immediate",))

    def _parse_address(self) -> Immediate:
        token = self._peek()
        if not self._looks_hex(token):
            raise self._error(f"unexpected {_describe(token)}", token, ("hex address",))

        digits = hex_digits(token.text)
        if digits is None:
            raise self._error(f"malformed hex literal '{token.text}'", token, ("hex address",))
        if len(digits) > MAX_ADDRESS_DIGITS:
            raise self._error(
                f"hex address '{token.text}' has more than {MAX_ADDRESS_DIGITS} digits",
                token,
                ("hex address",),
            )
        self._advance()
        return Immediate(int(digits, 16), Radix.HEX, token.text, span=token.span)

    def _parse_label_reference(self) -> LabelReference:
        token = self._peek()
        if (token.kind is not TokenKind.WORD or token.has_colon
                or lookup_mnemonic(token.text) is not None
                or register_number(token.text) is not None
                or hex_digits(token.text) is not None):
            raise self._error(f"unexpected {_describe(token)}", token, ("label",))
        self._advance()
        return LabelReference(token.text, token.span)

    def _parse_string(self) -> StringLiteral:
        token = self._peek()
        if token.kind is not TokenKind.STRING:
            raise self._error(f"unexpected {_describe(token)}", token, ("string literal",))
        self._advance()
        return StringLiteral(token.text, token.span)


def parse(source: str) -> Program:
    """
    Parse LC-3 assembly source.

    Args:
        source: Complete file contents

    Returns:
        The parsed Program

    Raises:
        AsmSyntaxError: If the source is not valid
    """
    return Parser(source).parse()


def parse_source(source: str) -> ParseResult:
    """Parse without raising; a syntax error is returned inside the result."""
    try:
        return ParseResult(program=parse(source))
    except AsmSyntaxError as e:
        logger.debug(f"Parse failed: {e}")
        return ParseResult(error=e)
