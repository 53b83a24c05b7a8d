"""
Section splitter for single-file component sources

Partitions a component file into its template, script and style blocks.
Only top-level sections are recognized; the template keeps its inner markup
verbatim (nested <template> tags included).
"""

import re
from typing import Optional, Tuple

from ..models.sections import ScriptBlock, SfcDescriptor, StyleBlock
from .log import LOG


TEMPLATE_OPEN = re.compile(r'<template(\s[^>]*)?>', re.IGNORECASE)
TEMPLATE_CLOSE = re.compile(r'</template\s*>', re.IGNORECASE)
SCRIPT_BLOCK = re.compile(r'<script(\s[^>]*)?>([\s\S]*?)</script\s*>', re.IGNORECASE)
STYLE_BLOCK = re.compile(r'<style(\s[^>]*)?>([\s\S]*?)</style\s*>', re.IGNORECASE)
LANG_ATTR = re.compile(r'\blang\s*=\s*["\']?([\w-]+)')
SELF_CLOSING = re.compile(r'<([A-Z][A-Za-z0-9]*|[a-z]+-[a-z-]*)([^>]*?)\s*/>')


def attribute_has(attrs: Optional[str], name: str) -> bool:
    """Check for a bare or valued attribute in a tag's attribute text"""
    return bool(attrs) and re.search(r'(?:^|\s)' + re.escape(name) + r'(?:\s|=|$)', attrs) is not None


def selfClosing_expand(markup: str) -> str:
    """
    Expand self-closing component tags into open/close pairs

    Example:
        '<TodoItem :item="x" />' -> '<TodoItem :item="x"></TodoItem>'
    """
    return SELF_CLOSING.sub(lambda m: f"<{m.group(1)}{m.group(2)}></{m.group(1)}>", markup)


def template_locate(source: str) -> Optional[Tuple[int, int, int, int]]:
    """
    Offsets of the outermost template section

    Returns:
        (tag start, inner start, inner end, tag end) spanning the first
        <template> to the last </template>, or None when absent
    """
    opening = TEMPLATE_OPEN.search(source)
    if not opening:
        return None
    closings = list(TEMPLATE_CLOSE.finditer(source, opening.end()))
    if not closings:
        return None
    return opening.start(), opening.end(), closings[-1].start(), closings[-1].end()


def sections_split(source: str) -> SfcDescriptor:
    """
    Split a component source into its sections

    Args:
        source: Full text of a component file

    Returns:
        SfcDescriptor with template, script (first <script>) and styles

    Example:
        >>> sfc = sections_split("<template><p/></template><script setup>a()</script>")
        >>> sfc.script.setup
        True
    """
    descriptor = SfcDescriptor()

    located = template_locate(source)
    outside = source
    if located is not None:
        tag_start, inner_start, inner_end, tag_end = located
        descriptor.template = selfClosing_expand(source[inner_start:inner_end])
        outside = source[:tag_start] + source[tag_end:]

    script = SCRIPT_BLOCK.search(outside)
    if script:
        attrs = script.group(1) or ''
        lang = LANG_ATTR.search(attrs)
        descriptor.script = ScriptBlock(
            content=script.group(2),
            setup=attribute_has(attrs, 'setup'),
            lang=lang.group(1) if lang else None,
        )

    for style in STYLE_BLOCK.finditer(outside):
        descriptor.styles.append(StyleBlock(
            content=style.group(2),
            scoped=attribute_has(style.group(1), 'scoped'),
        ))

    LOG(
        f"Sections: template={'yes' if descriptor.template is not None else 'no'}, "
        f"script={'setup' if descriptor.script and descriptor.script.setup else ('plain' if descriptor.script else 'no')}, "
        f"styles={len(descriptor.styles)}",
        level=2,
    )
    return descriptor
