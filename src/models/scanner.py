"""
Scanner-specific data models

Type-safe structures for the lexical scanner and the edit list used to
rewrite script text without shifting offsets.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LexMode(Enum):
    """
    Lexical mode of a single character offset

    Exactly one mode applies to every offset. Opening and closing delimiters
    (quotes, backticks, comment markers) belong to the literal they delimit,
    so only CODE offsets are syntactically significant.
    """
    CODE = "code"
    STRING = "string"
    TEMPLATE = "template"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


@dataclass(frozen=True)
class ScanState:
    """
    Lexical state between two characters

    At most one of the four flags is set at any position. A fresh instance
    (all flags false) means ordinary code.

    Attributes:
        in_string: Inside a single- or double-quoted string
        string_delimiter: The quote that opened the current string
        in_template: Inside a backtick template literal
        in_block_comment: Inside a /* ... */ comment
        in_line_comment: Inside a // comment (ends at newline)
    """
    in_string: bool = False
    string_delimiter: Optional[str] = None
    in_template: bool = False
    in_block_comment: bool = False
    in_line_comment: bool = False

    @property
    def mode(self) -> LexMode:
        if self.in_string:
            return LexMode.STRING
        if self.in_template:
            return LexMode.TEMPLATE
        if self.in_block_comment:
            return LexMode.BLOCK_COMMENT
        if self.in_line_comment:
            return LexMode.LINE_COMMENT
        return LexMode.CODE


@dataclass(frozen=True)
class Span:
    """
    A balanced region or matched pattern in source text

    Attributes:
        start: Offset of the opening delimiter
        end: Offset of the closing delimiter (inclusive)
        text: source[start:end + 1]

    Example:
        For "f(a, b)" extracted at the "(":
        Span(start=1, end=6, text="(a, b)")
    """
    start: int
    end: int
    text: str

    @property
    def inner(self) -> str:
        """Text between the delimiters"""
        return self.text[1:-1]


@dataclass(frozen=True)
class Edit:
    """
    Replacement of source[start:end + 1] by `replacement`

    Offsets always refer to the text the edit list was collected against.
    """
    start: int
    end: int
    replacement: str


@dataclass
class EditList:
    """
    Ordered, non-overlapping edits against one immutable source text

    Edits are collected during read-only scans and applied together by
    materialize(), so offsets found by earlier scans stay valid.

    Example:
        >>> edits = EditList()
        >>> edits.add(0, 2, "xyz")
        >>> edits.materialize("abc def")
        'xyz def'
    """
    edits: List[Edit] = field(default_factory=list)

    def add(self, start: int, end: int, replacement: str) -> None:
        """
        Record a replacement of the inclusive range [start, end]

        Raises:
            ValueError: If the range overlaps an edit already recorded
        """
        if self.overlaps(start, end):
            raise ValueError(f"Edit [{start}, {end}] overlaps an existing edit")
        self.edits.append(Edit(start=start, end=end, replacement=replacement))

    def overlaps(self, start: int, end: int) -> bool:
        """Check whether the inclusive range [start, end] touches a recorded edit"""
        return any(start <= edit.end and edit.start <= end for edit in self.edits)

    def covers(self, offset: int) -> bool:
        """Check whether an offset falls inside an already recorded edit"""
        return any(edit.start <= offset <= edit.end for edit in self.edits)

    def materialize(self, source: str) -> str:
        """Apply all edits to source in a single pass"""
        parts = []
        pos = 0
        for edit in sorted(self.edits, key=lambda e: e.start):
            parts.append(source[pos:edit.start])
            parts.append(edit.replacement)
            pos = edit.end + 1
        parts.append(source[pos:])
        return ''.join(parts)

    def __len__(self) -> int:
        return len(self.edits)
