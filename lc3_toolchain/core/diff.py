"""
Line diff helpers for the formatter's check mode.
"""

import difflib
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class DiffTag(Enum):
    """Kind of a line-level edit."""
    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True)
class DiffOp:
    """
    One line of a diff.

    ``old_lineno`` / ``new_lineno`` are 1-based and None on the side the line
    does not exist in.
    """
    tag: DiffTag
    line: str
    old_lineno: Optional[int] = None
    new_lineno: Optional[int] = None

    @property
    def is_change(self) -> bool:
        return self.tag is not DiffTag.EQUAL


def diff_lines(original: str, formatted: str) -> Tuple[DiffOp, ...]:
    """
    Compute a line diff between two texts.

    Lines keep their terminators, so a missing final newline is a difference.

    Args:
        original: Text as found on disk
        formatted: Canonical text

    Returns:
        Empty tuple when the texts are identical, otherwise every line of both
        texts tagged equal, delete or insert in display order
    """
    if original == formatted:
        return ()

    old = original.splitlines(keepends=True)
    new = formatted.splitlines(keepends=True)
    ops: List[DiffOp] = []

    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == 'equal':
            for offset in range(i2 - i1):
                ops.append(DiffOp(DiffTag.EQUAL, old[i1 + offset], i1 + offset + 1, j1 + offset + 1))
            continue
        if tag in ('delete', 'replace'):
            for i in range(i1, i2):
                ops.append(DiffOp(DiffTag.DELETE, old[i], old_lineno=i + 1))
        if tag in ('insert', 'replace'):
            for j in range(j1, j2):
                ops.append(DiffOp(DiffTag.INSERT, new[j], new_lineno=j + 1))

    return tuple(ops)


def unified_diff(original: str, formatted: str, filename: str = "source", context: int = 3) -> str:
    """Render the difference between two texts as a unified diff."""
    lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        formatted.splitlines(keepends=True),
        fromfile=f"{filename} (original)",
        tofile=f"{filename} (formatted)",
        n=context,
    )
    return "".join(line if line.endswith('\n') else line + "\n\\ No newline at end of file\n" for line in lines)
