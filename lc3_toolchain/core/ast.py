"""
AST Module

This module defines the abstract syntax and layout model shared by the
formatter and the linter. A parsed source file becomes a Program: an ordered
tuple of items (labels, instructions, directives and comments) that carry both
their semantic content and the few pieces of layout information the formatter
needs to rebuild the file.

All nodes are immutable. Layout fields are excluded from equality, so two
programs compare equal whenever they say the same thing, however they were
laid out.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Span:
    """Half-open character range into the source, plus the 1-based position of its start."""
    start: int
    end: int
    line: int
    column: int

    def __repr__(self):
        return f"Span({self.line}:{self.column}, {self.start}..{self.end})"


class Mnemonic(Enum):
    """Closed set of instruction mnemonics."""
    ADD = "ADD"
    AND = "AND"
    NOT = "NOT"
    LD = "LD"
    LDI = "LDI"
    LDR = "LDR"
    LEA = "LEA"
    ST = "ST"
    STI = "STI"
    STR = "STR"
    BR = "BR"
    JMP = "JMP"
    JSR = "JSR"
    JSRR = "JSRR"
    NOP = "NOP"
    RET = "RET"
    HALT = "HALT"
    PUTS = "PUTS"
    GETC = "GETC"
    OUT = "OUT"
    IN = "IN"
    TRAP = "TRAP"


class DirectiveKind(Enum):
    """Assembler pseudo-operations."""
    ORIG = "ORIG"
    FILL = "FILL"
    BLKW = "BLKW"
    STRINGZ = "STRINGZ"
    END = "END"


class Radix(Enum):
    """Textual base an immediate was written in."""
    DECIMAL = "decimal"
    HEX = "hex"


class CommentPlacement(Enum):
    """Whether a comment sits alone on its line or follows other code."""
    OWN_LINE = "own_line"
    TRAILING = "trailing"


@dataclass(frozen=True)
class Register:
    """General purpose register R0-R7; ``text`` keeps the source spelling."""
    number: int
    text: str = field(compare=False)
    span: Optional[Span] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Immediate:
    """
    Numeric literal.

    The value is the signed integer the literal denotes. The original spelling
    is kept in ``text`` so the formatter never changes the radix, the ``#``
    prefix or an explicit ``+`` sign.
    """
    value: int
    radix: Radix
    text: str
    has_hash: bool = False
    sign: Optional[str] = None
    span: Optional[Span] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LabelReference:
    """Use of a label as an operand."""
    name: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @property
    def text(self) -> str:
        return self.name


@dataclass(frozen=True)
class StringLiteral:
    """Double-quoted string, kept verbatim including the quotes."""
    text: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @property
    def value(self) -> str:
        return self.text[1:-1]


Operand = Union[Register, Immediate, LabelReference]
DirectiveArgument = Union[Immediate, StringLiteral]


@dataclass(frozen=True)
class Label:
    """A user-defined symbol marking the following statement."""
    name: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)
    has_colon: bool = field(default=False, compare=False)
    statement_on_same_line: bool = field(default=False, compare=False)
    blank_lines_before: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class Instruction:
    """
    A machine instruction.

    ``keyword`` keeps the spelling found in the source (``brNZP``, ``Add``).
    ``condition`` holds the lower-cased branch flags for BR and is empty for
    every other mnemonic.
    """
    mnemonic: Mnemonic
    keyword: str
    operands: Tuple[Operand, ...] = ()
    condition: str = ""
    span: Optional[Span] = field(default=None, compare=False, repr=False)
    keyword_span: Optional[Span] = field(default=None, compare=False, repr=False)
    blank_lines_before: int = field(default=0, compare=False, repr=False)


@dataclass(frozen=True)
class Directive:
    """An assembler directive such as ``.ORIG x3000``."""
    kind: DirectiveKind
    keyword: str
    argument: Optional[DirectiveArgument] = None
    span: Optional[Span] = field(default=None, compare=False, repr=False)
    keyword_span: Optional[Span] = field(default=None, compare=False, repr=False)
    blank_lines_before: int = field(default=0, compare=False, repr=False)

    @property
    def is_boundary(self) -> bool:
        """True for ``.ORIG`` and ``.END``, which delimit a program section."""
        return self.kind in (DirectiveKind.ORIG, DirectiveKind.END)


@dataclass(frozen=True)
class Comment:
    """A ``;`` comment with trailing whitespace removed."""
    text: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)
    placement: CommentPlacement = field(default=CommentPlacement.OWN_LINE, compare=False)
    blank_lines_before: int = field(default=0, compare=False, repr=False)


Statement = Union[Instruction, Directive]
Item = Union[Label, Instruction, Directive, Comment]


@dataclass(frozen=True)
class Program:
    """Ordered items of one source file."""
    items: Tuple[Item, ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)

    @property
    def labels(self) -> Tuple[Label, ...]:
        return tuple(item for item in self.items if isinstance(item, Label))

    @property
    def statements(self) -> Tuple[Statement, ...]:
        return tuple(item for item in self.items if isinstance(item, (Instruction, Directive)))

    @property
    def comments(self) -> Tuple[Comment, ...]:
        return tuple(item for item in self.items if isinstance(item, Comment))
