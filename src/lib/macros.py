"""
Macro implementations for the setup-script compiler

Each supported macro has a handler that locates its calls through the
compiler's scan table, records a MacroResult, and queues replacement edits.
Handlers run in registry order: defaults application first so the
declaration it wraps is consumed before the standalone declaration pass.
"""

import re
from typing import Dict, List, Optional

from ..config import appsettings
from ..models.macros import MacroCall, MacroKind, MacroResult, MacroSpec, unsupported_is
from .errors import MalformedInput
from .log import LOG
from .scanner import ScanTable


TYPE_ARGS_END = re.compile(r'>\s*\(')


class MacroRegistry:
    """
    Registry of supported macro specifications and handlers

    Maps macro kinds to MacroSpec objects. Registration order is the order
    the compiler runs the handlers in.
    """

    def __init__(self) -> None:
        """Initialize the registry and register the built-in macros"""
        self.specs: Dict[MacroKind, MacroSpec] = {}
        self.builtinMacros_register()

    def register(self, spec: MacroSpec) -> None:
        """
        Register a macro specification

        Raises:
            ValueError: If the kind is one the mini compiler rejects
        """
        if unsupported_is(spec.kind):
            raise ValueError(f"{spec.name} cannot be registered: unsupported macro")
        self.specs[spec.kind] = spec

    def get(self, kind: MacroKind) -> Optional[MacroSpec]:
        return self.specs.get(kind)

    def specs_ordered(self) -> List[MacroSpec]:
        """Specs in registration (execution) order"""
        return list(self.specs.values())

    def builtinMacros_register(self) -> None:
        self.register(MacroSpec(
            kind=MacroKind.DEFAULTS_APPLICATION,
            description="Merge default values into a props declaration",
            handler=defaults_resolve,
            examples=["const props = withDefaults(defineProps<Props>(), { size: 1 })"],
        ))
        self.register(MacroSpec(
            kind=MacroKind.INPUT_DECL,
            description="Declare incoming props",
            handler=inputs_resolve,
            examples=[
                "const props = defineProps(['title'])",
                "const { title } = defineProps({ title: String })",
                "defineProps<{ title: string }>()",
            ],
        ))
        self.register(MacroSpec(
            kind=MacroKind.EVENT_DECL,
            description="Declare emitted events and bind the emit function",
            handler=events_resolve,
            examples=["const emit = defineEmits(['save', 'cancel'])"],
        ))
        self.register(MacroSpec(
            kind=MacroKind.EXPOSED_API,
            description="Expose local bindings to the parent through the context",
            handler=expose_resolve,
            examples=["defineExpose({ reset })"],
        ))


def call_locate(table: ScanTable, index: int, kind: MacroKind) -> MacroCall:
    """
    Resolve the extent of a macro call whose name starts at index

    Handles both name(args) and the generic form name<Type>(args). The type
    argument ends at the first code-mode ">" followed by "(", so arrow types
    and nested generics inside it are tolerated.

    Raises:
        MalformedInput: If no balanced argument list follows the name
    """
    code = table.code
    pos = index + len(kind.macro_name)
    while pos < len(code) and code[pos].isspace():
        pos += 1

    type_arguments = None
    if pos < len(code) and code[pos] == '<':
        for match in TYPE_ARGS_END.finditer(code, pos + 1):
            if table.code_is(match.start()):
                type_arguments = code[pos + 1:match.start()].strip()
                pos = match.end() - 1
                break
        else:
            raise MalformedInput(f"Unterminated type arguments for {kind.macro_name}")

    span = table.balanced_extract(pos, '(', ')')
    if span is None or span.start != pos:
        raise MalformedInput(f"Unbalanced arguments for {kind.macro_name}")

    return MacroCall(
        kind=kind,
        start=index,
        end=span.end,
        arguments=span.inner,
        type_arguments=type_arguments,
    )


def definition_select(call: MacroCall, empty: str) -> str:
    """Runtime definition of a declaration call; `empty` for the type-only form"""
    return call.arguments.strip() or empty


def propsDefinition_find(props_arg: str) -> Optional[str]:
    """
    Props definition carried by the first argument of withDefaults()

    Returns:
        "{}" for the type-only form, the runtime argument text (or "{}" when
        empty) for the runtime form, None when the argument holds no
        well-formed defineProps call
    """
    kind = MacroKind.INPUT_DECL
    table = ScanTable(props_arg)
    index = table.macroCall_find(kind.macro_name)
    if index == -1:
        return None

    try:
        call = call_locate(table, index, kind)
    except MalformedInput:
        return None
    return definition_select(call, '{}')


def defaults_resolve(compiler) -> None:
    """
    Rewrite withDefaults(defineProps(...), defaults) calls

    Each call wrapping a props declaration is replaced by a call to the
    synthesized defaults-merge helper. A call whose first argument holds no
    defineProps is left in place and scanning resumes after it.
    """
    kind = MacroKind.DEFAULTS_APPLICATION
    index = compiler.macroCall_next(kind.macro_name, 0)

    while index != -1:
        try:
            call = compiler.call_extract(index, kind)
        except MalformedInput as e:
            LOG(f"Skipping {kind.macro_name} at offset {index}: {e}", level=2)
            break

        if compiler.call_encloses_edit(call):
            index = compiler.macroCall_next(kind.macro_name, call.end + 1)
            continue

        args = ScanTable(call.arguments).args_splitTopLevel()
        props_arg = args[0] if args else ''
        defaults_arg = args[1] if len(args) > 1 else '{}'

        definition = propsDefinition_find(props_arg)
        if definition is None:
            LOG(f"{kind.macro_name} at offset {index} wraps no props declaration, skipped", level=3)
            index = compiler.macroCall_next(kind.macro_name, call.end + 1)
            continue

        if compiler.props_definition is None:
            compiler.props_definition = definition

        declaration = compiler.declaration_before(index)
        replacement = f"{appsettings.defaults_helper}({appsettings.props_param}, {defaults_arg})"
        compiler.edits.add(index, call.end, replacement)
        compiler.defaults_used = True
        compiler.results.append(MacroResult(
            kind=kind,
            raw_arguments=call.arguments.strip(),
            bound_name=declaration.target if declaration else None,
        ))
        LOG(f"Rewrote {kind.macro_name} at offset {index}", level=3)

        index = compiler.macroCall_next(kind.macro_name, call.end + 1)


def inputs_resolve(compiler) -> None:
    """
    Rewrite the first standalone defineProps call

    Shapes:
        const { a, b } = defineProps(...)   -> const { a, b } = __props__
        const props = defineProps(...)      -> const props = __props__
        defineProps(...) / defineProps<T>() -> marker line
    """
    kind = MacroKind.INPUT_DECL
    index = compiler.macroCall_next(kind.macro_name, 0)
    if index == -1:
        return

    try:
        call = compiler.call_extract(index, kind)
    except MalformedInput as e:
        LOG(f"Skipping {kind.macro_name} at offset {index}: {e}", level=2)
        return

    if compiler.call_encloses_edit(call):
        return

    definition = definition_select(call, '{}')

    if compiler.props_definition is not None:
        compiler.duplicate_report(kind, index)
    compiler.props_definition = definition

    declaration = compiler.declaration_before(index)
    if declaration is not None:
        replacement = appsettings.props_param
    else:
        replacement = compiler.bareReplacement_make(index, kind.macro_name)
    compiler.edits.add(index, call.end, replacement)

    compiler.results.append(MacroResult(
        kind=kind,
        raw_arguments=call.arguments.strip(),
        bound_name=None if declaration is None or declaration.is_pattern else declaration.target,
    ))
    LOG(f"Rewrote {kind.macro_name} at offset {index}", level=3)

    duplicate = compiler.macroCall_next(kind.macro_name, call.end + 1)
    if duplicate != -1:
        compiler.duplicate_report(kind, duplicate)


def events_resolve(compiler) -> None:
    """
    Rewrite the first defineEmits call into a binding of the emit function

    An assigned call becomes a reference to the reserved emit local; a bare
    call becomes "const emit = __emit__" since emitting always needs a name.
    """
    kind = MacroKind.EVENT_DECL
    index = compiler.macroCall_next(kind.macro_name, 0)
    if index == -1:
        return

    try:
        call = compiler.call_extract(index, kind)
    except MalformedInput as e:
        LOG(f"Skipping {kind.macro_name} at offset {index}: {e}", level=2)
        return

    if compiler.call_encloses_edit(call):
        return

    compiler.emits_definition = definition_select(call, '[]')

    declaration = compiler.declaration_before(index)
    if declaration is not None:
        replacement = appsettings.emit_param
        bound_name = None if declaration.is_pattern else declaration.target
    else:
        replacement = f"const emit = {appsettings.emit_param}"
        bound_name = 'emit'
    compiler.edits.add(index, call.end, replacement)

    compiler.results.append(MacroResult(
        kind=kind,
        raw_arguments=call.arguments.strip(),
        bound_name=bound_name,
    ))
    LOG(f"Rewrote {kind.macro_name} at offset {index}", level=3)

    duplicate = compiler.macroCall_next(kind.macro_name, call.end + 1)
    if duplicate != -1:
        compiler.duplicate_report(kind, duplicate)


def expose_resolve(compiler) -> None:
    """Remove the first defineExpose call and keep its argument for re-emission"""
    kind = MacroKind.EXPOSED_API
    index = compiler.macroCall_next(kind.macro_name, 0)
    if index == -1:
        return

    try:
        call = compiler.call_extract(index, kind)
    except MalformedInput as e:
        LOG(f"Skipping {kind.macro_name} at offset {index}: {e}", level=2)
        return

    if compiler.call_encloses_edit(call):
        return

    compiler.expose_definition = call.arguments.strip()
    compiler.edits.add(index, call.end, compiler.bareReplacement_make(index, kind.macro_name))
    compiler.results.append(MacroResult(kind=kind, raw_arguments=call.arguments.strip()))
    LOG(f"Rewrote {kind.macro_name} at offset {index}", level=3)
