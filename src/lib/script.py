"""
Script block routing

Chooses how a component's script block becomes an evaluable module body:
plain scripts get ES-module rewriting, setup scripts go through the mini
compiler with an optional full-compiler fallback.
"""

from typing import Any, Dict, Optional

from ..models.sections import ScriptBlock
from .compiler import FallbackCompiler, scriptSetup_compileWithFallback
from .esmodule import esModule_transform
from .log import LOG


def script_compile(
    block: ScriptBlock,
    options: Optional[Dict[str, Any]] = None,
    fallback: Optional[FallbackCompiler] = None,
) -> str:
    """
    Compile a script block to module text

    Args:
        block: Script section of a component
        options: Compile options ("componentName", "strict")
        fallback: Full compiler used when a setup script needs one

    Returns:
        Module body for the evaluator

    Raises:
        UnsupportedConstruct: For a setup script needing a full compiler
            when no fallback is given
    """
    if not block.setup:
        LOG("Plain script: rewriting ES-module syntax", level=2)
        return esModule_transform(block.content)

    LOG("Setup script: compiling with mini compiler", level=2)
    return scriptSetup_compileWithFallback(block.content, options, fallback)
