"""
Destructuring binding extraction

Walks object and array destructuring patterns as plain text and yields every
identifier they bind, handling renames (key: name), defaults (name = expr),
rest captures (...name) and arbitrary nesting.

Patterns are expected to be comment-free; only quoted strings and the three
bracket pairs are tracked.

Example:
    >>> bindings_extract("{ a, b: c, ...rest }")
    ['a', 'c', 'rest']
    >>> bindings_extract("[first, [second, { third }]]")
    ['first', 'second', 'third']
"""

import re
from typing import Iterator, List, Tuple

IDENTIFIER = re.compile(r'^[A-Za-z_$][\w$]*$')

OPENERS = '{[('
CLOSERS = '}])'


def pattern_walk(text: str) -> Iterator[Tuple[int, str, int]]:
    """
    Yield (offset, char, depth) for every character outside quoted strings

    Depth counts all three bracket pairs together and is reported before the
    character at offset is applied.
    """
    depth = 0
    quote = ''
    for pos, ch in enumerate(text):
        if quote:
            if ch == quote and text[pos - 1] != '\\':
                quote = ''
            continue
        if ch in '"\'':
            quote = ch
            continue
        yield pos, ch, depth
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1


def pattern_split(text: str) -> List[str]:
    """Split pattern elements on commas outside nested brackets and strings"""
    elements = []
    start = 0
    for pos, ch, depth in pattern_walk(text):
        if ch == ',' and depth == 0:
            elements.append(text[start:pos].strip())
            start = pos + 1
    tail = text[start:].strip()
    if tail:
        elements.append(tail)
    return elements


def colon_findTopLevel(element: str) -> int:
    """
    Offset of the key/target colon in an object pattern element, or -1

    A colon after a top-level "=" belongs to the default value
    (e.g. "a = ok ? x : y") and is not reported.
    """
    for pos, ch, depth in pattern_walk(element):
        if depth != 0:
            continue
        if ch == '=':
            return -1
        if ch == ':':
            return pos
    return -1


def nestedPattern_extract(text: str) -> str:
    """
    Return the leading balanced {...} or [...] of text

    Trailing text such as a default value ("{ a } = {}") is dropped. Text
    that never balances is returned unchanged.
    """
    text = text.strip()
    open_char = text[0]
    close_char = '}' if open_char == '{' else ']'
    depth = 0
    for pos, ch, _ in pattern_walk(text):
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[:pos + 1]
    return text


def name_clean(text: str) -> str:
    """Strip a default value from a binding target"""
    return text.split('=')[0].strip()


def target_bindings(target: str) -> List[str]:
    """Bindings of a single target: a nested pattern or a plain name"""
    target = target.strip()
    if target.startswith('{') or target.startswith('['):
        return bindings_extract(nestedPattern_extract(target))
    name = name_clean(target)
    return [name] if IDENTIFIER.match(name) else []


def bindings_extract(pattern: str) -> List[str]:
    """
    Extract every identifier bound by a destructuring pattern

    Args:
        pattern: Object ("{...}") or array ("[...]") pattern text

    Returns:
        Bound identifiers in source order. Tokens that are not valid
        identifiers are dropped; anything that is not a pattern yields [].

    Example:
        "{ outer: { inner: { deep } }, renamed: value }" -> ["deep", "value"]
    """
    pattern = pattern.strip()
    is_object = pattern.startswith('{') and pattern.endswith('}')
    is_array = pattern.startswith('[') and pattern.endswith(']')
    if not (is_object or is_array):
        return []

    bindings: List[str] = []
    for element in pattern_split(pattern[1:-1]):
        if not element:
            continue

        if element.startswith('...'):
            rest = name_clean(element[3:])
            if IDENTIFIER.match(rest):
                bindings.append(rest)
            continue

        if is_array:
            bindings.extend(target_bindings(element))
            continue

        colon = colon_findTopLevel(element)
        if colon == -1:
            name = name_clean(element)
            if IDENTIFIER.match(name):
                bindings.append(name)
        else:
            bindings.extend(target_bindings(element[colon + 1:]))

    return bindings
