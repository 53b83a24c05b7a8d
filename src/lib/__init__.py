"""
setupmini - Minimal <script setup> compiler

Rewrites setup-style component scripts into plain module bodies without a
full framework compiler.
"""

__version__ = "1.0.0"

from .compiler import Compiler, scriptSetup_compile, scriptSetup_compileWithFallback
from .errors import SetupCompileError, UnsupportedConstruct, MalformedInput, DuplicateDeclaration
from .macros import MacroRegistry
from .scanner import ScanTable
from .script import script_compile
from .sections import sections_split
from .esmodule import esModule_transform
from .log import LOG, state_connectToLogger

__all__ = [
    "Compiler",
    "scriptSetup_compile",
    "scriptSetup_compileWithFallback",
    "SetupCompileError",
    "UnsupportedConstruct",
    "MalformedInput",
    "DuplicateDeclaration",
    "MacroRegistry",
    "ScanTable",
    "script_compile",
    "sections_split",
    "esModule_transform",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
