"""
Lexical scanner for setup-script source text

Tracks string, template-literal and comment state one character at a time
so higher-level passes can ignore delimiters and names that are not code.

The scan runs once per text: ScanTable records the lexical mode of every
offset and the brace depth before it, and every query (balanced extraction,
macro lookup, top-level checks) reads from that table.

Known limitations:
- Template literal interpolation (${...}) is not tracked. No brace inside a
  template literal is counted, and a backtick nested inside an interpolation
  closes the literal early.
- Regex literals are scanned as code, so quotes or slashes inside them can
  desynchronize the state.

Example:
    >>> table = ScanTable('f("(", g(1))')
    >>> table.balanced_extract(1, '(', ')').text
    '("(", g(1))'
"""

import re
from typing import List, Optional, Tuple

from ..models.scanner import LexMode, ScanState, Span


IDENT_CHAR = re.compile(r'[\w$]')

CODE_STATE = ScanState()
LINE_COMMENT_STATE = ScanState(in_line_comment=True)
BLOCK_COMMENT_STATE = ScanState(in_block_comment=True)
TEMPLATE_STATE = ScanState(in_template=True)
SINGLE_QUOTE_STATE = ScanState(in_string=True, string_delimiter="'")
DOUBLE_QUOTE_STATE = ScanState(in_string=True, string_delimiter='"')


def advance(code: str, position: int, state: ScanState) -> Tuple[ScanState, int]:
    """
    Consume the character(s) at position and return the next state

    Two characters are consumed for comment openers ("//", "/*"), the block
    comment closer ("*/") and backslash escapes inside strings and template
    literals; one otherwise.

    Args:
        code: Source text
        position: Offset of the character to consume
        state: State before the character

    Returns:
        Tuple of (state after, number of characters consumed)
    """
    ch = code[position]
    nxt = code[position + 1] if position + 1 < len(code) else ''

    if state.in_line_comment:
        if ch == '\n':
            return CODE_STATE, 1
        return state, 1

    if state.in_block_comment:
        if ch == '*' and nxt == '/':
            return CODE_STATE, 2
        return state, 1

    if state.in_string:
        if ch == '\\':
            return state, 2
        if ch == state.string_delimiter:
            return CODE_STATE, 1
        return state, 1

    if state.in_template:
        if ch == '\\':
            return state, 2
        if ch == '`':
            return CODE_STATE, 1
        return state, 1

    if ch == '/':
        if nxt == '/':
            return LINE_COMMENT_STATE, 2
        if nxt == '*':
            return BLOCK_COMMENT_STATE, 2
    if ch == '`':
        return TEMPLATE_STATE, 1
    if ch == "'":
        return SINGLE_QUOTE_STATE, 1
    if ch == '"':
        return DOUBLE_QUOTE_STATE, 1

    return state, 1


class ScanTable:
    """
    Position-indexed lexical state of one source text

    Built in a single forward pass. For every offset it stores the lexical
    mode of the character there, and for every offset up to len(code) the
    brace depth accumulated before it.

    Attributes:
        code: The scanned text (never modified)
        modes: LexMode per character offset
        depths: Brace depth before each offset (length len(code) + 1)
    """

    def __init__(self, code: str):
        self.code = code
        length = len(code)
        self.modes: List[LexMode] = [LexMode.CODE] * length
        self.depths: List[int] = [0] * (length + 1)

        state = CODE_STATE
        depth = 0
        pos = 0
        while pos < length:
            next_state, width = advance(code, pos, state)
            if state.mode is LexMode.CODE:
                # Opening delimiters belong to the literal they start
                mode = next_state.mode
            else:
                mode = state.mode

            for offset in range(pos, min(pos + width, length)):
                self.modes[offset] = mode
                if mode is LexMode.CODE:
                    if code[offset] == '{':
                        depth += 1
                    elif code[offset] == '}':
                        depth -= 1
                self.depths[offset + 1] = depth

            state = next_state
            pos += width

    def __len__(self) -> int:
        return len(self.code)

    def code_is(self, position: int) -> bool:
        """Check whether the character at position is significant code"""
        return 0 <= position < len(self.code) and self.modes[position] is LexMode.CODE

    def braceDepth_at(self, position: int) -> int:
        """
        Brace nesting depth before position

        Counts only code-mode braces at offsets strictly less than position.
        A value of 0 means position is at the outermost scope.
        """
        position = max(0, min(position, len(self.code)))
        return self.depths[position]

    def balanced_extract(
        self, open_offset: int, open_char: str, close_char: str
    ) -> Optional[Span]:
        """
        Extract the balanced region starting at the first open_char

        Scans from open_offset for the first code-mode open_char, then tracks
        depth on code-mode open_char/close_char until it returns to zero.

        Args:
            open_offset: Offset at or before the opening delimiter
            open_char: Opening delimiter (e.g. "(")
            close_char: Closing delimiter (e.g. ")")

        Returns:
            Span covering both delimiters, or None when the region never
            balances (or open_offset is out of range)

        Example:
            For "x = {a: {b: 1}}" at offset 0 with "{", "}":
            Span(start=4, end=14, text="{a: {b: 1}}")
        """
        if open_offset < 0 or open_offset >= len(self.code):
            return None

        depth = 0
        start = -1
        for pos in range(open_offset, len(self.code)):
            if self.modes[pos] is not LexMode.CODE:
                continue
            ch = self.code[pos]
            if ch == open_char:
                if depth == 0:
                    start = pos
                depth += 1
            elif ch == close_char and depth > 0:
                depth -= 1
                if depth == 0:
                    return Span(start=start, end=pos, text=self.code[start:pos + 1])
        return None

    def macroCall_find(self, name: str, from_offset: int = 0) -> int:
        """
        Find the next macro invocation of `name`

        A match must be code (not in a string, template or comment), must
        not be part of a longer identifier, and must be followed, after
        optional whitespace, by "(" or "<".

        Args:
            name: Macro identifier (e.g. "defineProps")
            from_offset: Offset to start searching from

        Returns:
            Offset of the first character of the name, or -1 when not found
        """
        code = self.code
        pos = code.find(name, max(0, from_offset))
        while pos != -1:
            end = pos + len(name)
            if self.code_is(pos) and self.word_is(pos, len(name)):
                follow = end
                while follow < len(code) and code[follow].isspace():
                    follow += 1
                if follow < len(code) and code[follow] in '(<':
                    return pos
            pos = code.find(name, pos + 1)
        return -1

    def word_is(self, position: int, length: int) -> bool:
        """Check that code[position:position + length] is a whole identifier word"""
        before = self.code[position - 1] if position > 0 else ''
        after = self.code[position + length] if position + length < len(self.code) else ''
        return not IDENT_CHAR.match(before or ' ') and not IDENT_CHAR.match(after or ' ')

    def args_splitTopLevel(self) -> List[str]:
        """
        Split the whole text on top-level commas

        A comma splits only when it is code and paren, brace and bracket
        depths are all zero. Elements are trimmed and a blank trailing
        element (dangling comma) is dropped.

        Example:
            "a, {b, c}, [d, e]" -> ["a", "{b, c}", "[d, e]"]
        """
        args = []
        paren = brace = bracket = 0
        start = 0
        for pos, ch in enumerate(self.code):
            if self.modes[pos] is not LexMode.CODE:
                continue
            if ch == '(':
                paren += 1
            elif ch == ')':
                paren -= 1
            elif ch == '{':
                brace += 1
            elif ch == '}':
                brace -= 1
            elif ch == '[':
                bracket += 1
            elif ch == ']':
                bracket -= 1
            elif ch == ',' and paren == 0 and brace == 0 and bracket == 0:
                args.append(self.code[start:pos].strip())
                start = pos + 1

        tail = self.code[start:].strip()
        if tail:
            args.append(tail)
        return args

    def suspend_detect(self, keyword: str = "await") -> bool:
        """
        Check for keyword as a whole code word at brace depth zero

        Used to decide whether the generated setup function must be async.
        """
        pattern = re.compile(r'(?<![\w$])' + re.escape(keyword) + r'(?![\w$])')
        for match in pattern.finditer(self.code):
            pos = match.start()
            if self.code_is(pos) and self.depths[pos] == 0:
                return True
        return False

    def comments_strip(self) -> str:
        """
        Return the text with comments removed

        Strings and template literals are kept verbatim. Newlines inside or
        ending a comment are kept so line structure survives.
        """
        parts = []
        for pos, ch in enumerate(self.code):
            mode = self.modes[pos]
            if mode is LexMode.LINE_COMMENT or mode is LexMode.BLOCK_COMMENT:
                if ch == '\n':
                    parts.append(ch)
                continue
            parts.append(ch)
        return ''.join(parts)


def balanced_extract(
    code: str, open_offset: int, open_char: str, close_char: str
) -> Optional[Span]:
    """Extract a balanced region from code; see ScanTable.balanced_extract"""
    return ScanTable(code).balanced_extract(open_offset, open_char, close_char)


def macroCall_find(code: str, name: str, from_offset: int = 0) -> int:
    """Locate the next invocation of a macro; see ScanTable.macroCall_find"""
    return ScanTable(code).macroCall_find(name, from_offset)


def args_splitTopLevel(code: str) -> List[str]:
    """Split a comma-separated list on top-level commas"""
    return ScanTable(code).args_splitTopLevel()


def braceDepth_at(code: str, position: int) -> int:
    """Brace depth of code before position"""
    return ScanTable(code).braceDepth_at(position)


def suspend_detect(code: str, keyword: str = "await") -> bool:
    """Check for a top-level suspend keyword in code"""
    return ScanTable(code).suspend_detect(keyword)


def comments_strip(code: str) -> str:
    """Remove comments from code, keeping strings and newlines"""
    return ScanTable(code).comments_strip()
