"""
Macro specification and metadata models

Defines the closed set of compile-time macros recognized in setup scripts,
their kinds, and the result records produced when they are rewritten.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set


class MacroKind(Enum):
    """
    Every macro name the compiler recognizes

    The value is the identifier as written in source. Four kinds are
    rewritten by the mini compiler; the rest are recognized only to be
    rejected so a full compiler can take over.
    """
    INPUT_DECL = "defineProps"
    EVENT_DECL = "defineEmits"
    DEFAULTS_APPLICATION = "withDefaults"
    EXPOSED_API = "defineExpose"
    MODEL_BINDING = "defineModel"
    SLOT_DECLARATION = "defineSlots"
    OPTIONS = "defineOptions"

    @property
    def macro_name(self) -> str:
        return self.value


@dataclass
class MacroSpec:
    """
    Specification for a supported macro

    Attributes:
        kind: Macro kind handled
        description: Human-readable description
        handler: Rewrite function (compiler) -> None
        examples: Example usage strings
    """
    kind: MacroKind
    description: str
    handler: Callable
    examples: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.kind.macro_name


@dataclass
class MacroCall:
    """
    Location of one macro invocation in source text

    Attributes:
        kind: Macro invoked
        start: Offset of the macro name
        end: Offset of the closing parenthesis (inclusive)
        arguments: Text between the parentheses
        type_arguments: Text between "<" and ">" for the generic form, else None

    Example:
        For "defineProps<{ a: string }>()" at offset 0:
        MacroCall(kind=INPUT_DECL, start=0, end=27, arguments="",
                  type_arguments="{ a: string }")
    """
    kind: MacroKind
    start: int
    end: int
    arguments: str
    type_arguments: Optional[str] = None


@dataclass
class Declaration:
    """
    The "const|let|var <target> =" immediately preceding a macro call

    Attributes:
        target: Declared name or destructuring pattern text
        is_pattern: True when target is an object/array pattern
    """
    target: str
    is_pattern: bool = False


@dataclass
class MacroResult:
    """
    Outcome of rewriting one macro call

    Attributes:
        kind: Which macro was rewritten
        raw_arguments: Argument text as written (e.g. '["count"]')
        bound_name: Variable the call was assigned to, if any

    Example:
        For "const emit = defineEmits(['save'])":
        MacroResult(kind=MacroKind.EVENT_DECL, raw_arguments="['save']", bound_name="emit")
    """
    kind: MacroKind
    raw_arguments: str
    bound_name: Optional[str] = None


# Macros that are recognized but must be compiled by a full compiler
UNSUPPORTED_MACROS: Set[MacroKind] = {
    MacroKind.MODEL_BINDING,     # defineModel()
    MacroKind.SLOT_DECLARATION,  # defineSlots()
    MacroKind.OPTIONS,           # defineOptions()
}


def unsupported_is(kind: MacroKind) -> bool:
    """Check if a macro kind is outside the mini compiler's surface"""
    return kind in UNSUPPORTED_MACROS
