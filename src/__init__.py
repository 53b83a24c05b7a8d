"""
setupmini - Minimal <script setup> compiler

Rewrites setup-style component scripts into plain module bodies that run
without a full framework compiler.
"""

__version__ = "1.0.0"

from .lib import (
    Compiler,
    scriptSetup_compile,
    scriptSetup_compileWithFallback,
    UnsupportedConstruct,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Compiler",
    "scriptSetup_compile",
    "scriptSetup_compileWithFallback",
    "UnsupportedConstruct",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
