"""
Exceptions raised by the setup-script compiler

UnsupportedConstruct is the signal callers use to hand a script to a full
compiler. MalformedInput never leaves the compiler: a macro occurrence whose
delimiters do not balance is skipped.
"""

from typing import Optional


class SetupCompileError(Exception):
    """Base class for compiler errors"""


class UnsupportedConstruct(SetupCompileError):
    """
    A recognized macro that the mini compiler does not implement

    Attributes:
        macro: The macro name found in the script (e.g. "defineModel")
    """

    def __init__(self, macro: str, message: Optional[str] = None):
        self.macro = macro
        super().__init__(
            message or f"Unsupported macro: {macro}. Use a full compiler instead."
        )


class MalformedInput(SetupCompileError):
    """A macro call or pattern whose delimiters never balance"""


class DuplicateDeclaration(SetupCompileError):
    """
    A declaration macro that may appear once was found again (strict mode)

    Attributes:
        macro: The repeated macro name
        position: Offset of the repeated call
    """

    def __init__(self, macro: str, position: int):
        self.macro = macro
        self.position = position
        super().__init__(f"Duplicate {macro}() call at offset {position}")
