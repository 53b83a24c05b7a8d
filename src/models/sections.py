"""
Single-file component section models

Structures returned by sections_split() when a component file is
partitioned into its template, script and style blocks.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ScriptBlock:
    """
    The <script> section of a component file

    Attributes:
        content: Raw script text between the tags
        setup: True for <script setup>
        lang: Value of the lang attribute, if any
    """
    content: str
    setup: bool = False
    lang: Optional[str] = None


@dataclass
class StyleBlock:
    """The content of one <style> section and whether it is scoped"""
    content: str
    scoped: bool = False


@dataclass
class SfcDescriptor:
    """
    Sections of one component file

    Attributes:
        template: Inner HTML of the outermost <template>, None when absent
        script: The script block, None when absent
        styles: Style blocks in document order
    """
    template: Optional[str] = None
    script: Optional[ScriptBlock] = None
    styles: List[StyleBlock] = field(default_factory=list)
