"""
Models package for setupmini

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .scanner import LexMode, ScanState, Span, Edit, EditList
from .macros import (
    MacroKind,
    MacroSpec,
    MacroCall,
    MacroResult,
    Declaration,
    UNSUPPORTED_MACROS,
    unsupported_is,
)
from .output import ImportKind, ImportRecord, ComponentImport, CompiledOutput
from .sections import ScriptBlock, StyleBlock, SfcDescriptor

__all__ = [
    "ProgramState",
    "pipeline",
    "LexMode",
    "ScanState",
    "Span",
    "Edit",
    "EditList",
    "MacroKind",
    "MacroSpec",
    "MacroCall",
    "MacroResult",
    "Declaration",
    "UNSUPPORTED_MACROS",
    "unsupported_is",
    "ImportKind",
    "ImportRecord",
    "ComponentImport",
    "CompiledOutput",
    "ScriptBlock",
    "StyleBlock",
    "SfcDescriptor",
]
