"""
Grammar Tables Module

This module holds the static description of the LC-3 assembly language: the
reserved keyword table, the operand signature of every mnemonic and directive,
and the predicates used to classify identifier-shaped words.

A word is a mnemonic only when the whole word equals a keyword (compared
case-insensitively). Words that merely begin with a keyword, such as
``INDIRECT`` or ``br_loop``, are ordinary labels.
"""

import re
from enum import Enum
from typing import Dict, Optional, Tuple

from .ast import DirectiveKind, Mnemonic


class OperandKind(Enum):
    """What an operand slot accepts."""
    REGISTER = "register"
    REGISTER_OR_IMMEDIATE = "register or immediate"
    IMMEDIATE = "immediate"
    LABEL = "label"
    HEX_ADDRESS = "hex address"
    STRING = "string literal"


# Whole-word spellings, matched case-insensitively.
KEYWORDS: Tuple[Tuple[str, Mnemonic], ...] = (
    ("ADD", Mnemonic.ADD),
    ("AND", Mnemonic.AND),
    ("NOT", Mnemonic.NOT),
    ("LD", Mnemonic.LD),
    ("LDI", Mnemonic.LDI),
    ("LDR", Mnemonic.LDR),
    ("LEA", Mnemonic.LEA),
    ("ST", Mnemonic.ST),
    ("STI", Mnemonic.STI),
    ("STR", Mnemonic.STR),
    ("JMP", Mnemonic.JMP),
    ("JSR", Mnemonic.JSR),
    ("JSRR", Mnemonic.JSRR),
    ("NOP", Mnemonic.NOP),
    ("RET", Mnemonic.RET),
    ("HALT", Mnemonic.HALT),
    ("PUTS", Mnemonic.PUTS),
    ("GETC", Mnemonic.GETC),
    ("OUT", Mnemonic.OUT),
    ("IN", Mnemonic.IN),
    ("TRAP", Mnemonic.TRAP),
)

_KEYWORD_LOOKUP: Dict[str, Mnemonic] = {spelling: mnemonic for spelling, mnemonic in KEYWORDS}

BRANCH_RE = re.compile(r"BR(N?Z?P?)", re.IGNORECASE)

REGISTER_RE = re.compile(r"[Rr]([0-7])")

HEX_RE = re.compile(r"[xX]([0-9a-fA-F]+)")

MAX_ADDRESS_DIGITS = 4

SIGNATURES: Dict[Mnemonic, Tuple[OperandKind, ...]] = {
    Mnemonic.ADD: (OperandKind.REGISTER, OperandKind.REGISTER, OperandKind.REGISTER_OR_IMMEDIATE),
    Mnemonic.AND: (OperandKind.REGISTER, OperandKind.REGISTER, OperandKind.REGISTER_OR_IMMEDIATE),
    Mnemonic.NOT: (OperandKind.REGISTER, OperandKind.REGISTER),
    Mnemonic.LD: (OperandKind.REGISTER, OperandKind.LABEL),
    Mnemonic.LDI: (OperandKind.REGISTER, OperandKind.LABEL),
    Mnemonic.LEA: (OperandKind.REGISTER, OperandKind.LABEL),
    Mnemonic.ST: (OperandKind.REGISTER, OperandKind.LABEL),
    Mnemonic.STI: (OperandKind.REGISTER, OperandKind.LABEL),
    Mnemonic.LDR: (OperandKind.REGISTER, OperandKind.REGISTER, OperandKind.IMMEDIATE),
    Mnemonic.STR: (OperandKind.REGISTER, OperandKind.REGISTER, OperandKind.IMMEDIATE),
    Mnemonic.BR: (OperandKind.LABEL,),
    Mnemonic.JSR: (OperandKind.LABEL,),
    Mnemonic.JMP: (OperandKind.REGISTER,),
    Mnemonic.JSRR: (OperandKind.REGISTER,),
    Mnemonic.NOP: (),
    Mnemonic.RET: (),
    Mnemonic.HALT: (),
    Mnemonic.PUTS: (),
    Mnemonic.GETC: (),
    Mnemonic.OUT: (),
    Mnemonic.IN: (),
    Mnemonic.TRAP: (OperandKind.HEX_ADDRESS,),
}

DIRECTIVES: Dict[str, DirectiveKind] = {kind.value: kind for kind in DirectiveKind}

DIRECTIVE_SIGNATURES: Dict[DirectiveKind, Tuple[OperandKind, ...]] = {
    DirectiveKind.ORIG: (OperandKind.HEX_ADDRESS,),
    DirectiveKind.FILL: (OperandKind.IMMEDIATE,),
    DirectiveKind.BLKW: (OperandKind.IMMEDIATE,),
    DirectiveKind.STRINGZ: (OperandKind.STRING,),
    DirectiveKind.END: (),
}


def lookup_mnemonic(word: str) -> Optional[Tuple[Mnemonic, str]]:
    """
    Resolve a whole word to a mnemonic.

    Args:
        word: Identifier-shaped word without a trailing colon

    Returns:
        Tuple of (mnemonic, branch condition flags) or None if the word is
        not a keyword. The condition is the lower-cased ``nzp`` subset for
        branches and an empty string otherwise.
    """
    upper = word.upper()
    mnemonic = _KEYWORD_LOOKUP.get(upper)
    if mnemonic is not None:
        return mnemonic, ""

    match = BRANCH_RE.fullmatch(word)
    if match:
        return Mnemonic.BR, match.group(1).lower()

    return None


def lookup_directive(word: str) -> Optional[DirectiveKind]:
    """Resolve a directive keyword (with or without its leading dot)."""
    return DIRECTIVES.get(word.lstrip('.').upper())


def is_keyword(word: str) -> bool:
    """Whether a word is reserved as an instruction mnemonic."""
    return lookup_mnemonic(word) is not None


def register_number(word: str) -> Optional[int]:
    """Register index for ``R0``-``R7`` (either case), else None."""
    match = REGISTER_RE.fullmatch(word)
    return int(match.group(1)) if match else None


def hex_digits(word: str) -> Optional[str]:
    """Digits of an ``x``-prefixed hex literal, else None."""
    match = HEX_RE.fullmatch(word)
    return match.group(1) if match else None


def describe_signature(kinds: Tuple[OperandKind, ...]) -> str:
    """Human readable operand list, used in arity error messages."""
    if not kinds:
        return "no operands"
    return ", ".join(kind.value for kind in kinds)
