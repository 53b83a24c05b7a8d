"""
Compiler for <script setup> source to a runnable component definition

Rewrites the setup-script dialect into a plain module body that assigns a
component definition object, without building an AST. Every pass reads a
ScanTable of immutable text and queues edits; the edits are materialized
once before bindings are collected.

Pipeline:
1. Reject unsupported macros (defineModel, defineSlots, defineOptions)
2. Hoist imports into require() bindings / the components map
3. Run macro handlers (withDefaults, defineProps, defineEmits, defineExpose)
4. Materialize edits and collect top-level bindings
5. Drop marker lines, detect top-level await
6. Emit the definition object

Example:
    >>> output = Compiler("const count = ref(0)\\nimport { ref } from 'vue'").compile()
    >>> output.bindings
    ['count']
"""

import re
from typing import Any, Callable, Dict, List, Optional

from ..config import appsettings
from ..models.macros import Declaration, MacroCall, MacroKind, MacroResult, unsupported_is
from ..models.output import CompiledOutput, ComponentImport, ImportKind, ImportRecord
from ..models.scanner import EditList
from .bindings import bindings_extract
from .errors import DuplicateDeclaration, UnsupportedConstruct
from .log import LOG
from .macros import MacroRegistry, call_locate
from .scanner import ScanTable


NAMED_IMPORT = re.compile(r'(?<![\w$.])import\s+\{([^}]+)\}\s+from\s+[\'"]([^\'"]+)[\'"]')
DEFAULT_IMPORT = re.compile(r'(?<![\w$.])import\s+([\w$]+)\s+from\s+[\'"]([^\'"]+)[\'"]')
IMPORT_RENAME = re.compile(r'^([\w$]+)\s+as\s+([\w$]+)$')

ASSIGNED_NAME = re.compile(r'(?<![\w$.])(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*$')
PATTERN_START = re.compile(r'(?<![\w$.])(?:const|let|var)\s+([{\[])')
SIMPLE_DECLARATION = re.compile(r'(?<![\w$.])(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=')
FUNCTION_DECLARATION = re.compile(r'(?<![\w$.])function\s*\*?\s*([A-Za-z_$][\w$]*)\s*\(')
STATEMENT_LEAD = re.compile(r'(?:^|[;}\n]|\*/)[ \t]*(?:(?:export|default|async)\s+)*$')
ASSIGNMENT = re.compile(r'\s*=\s*')

FallbackCompiler = Callable[[str, Dict[str, Any]], str]


class Compiler:
    """
    Compiles one setup script to a component definition module

    Responsibilities:
    - Reject macros that need a full compiler
    - Hoist imports
    - Rewrite declaration macros through the MacroRegistry handlers
    - Compute the names returned from setup
    - Generate the final module text
    """

    def __init__(
        self,
        source: str,
        component_name: Optional[str] = None,
        strict: Optional[bool] = None,
        registry: Optional[MacroRegistry] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            source: Setup script text (content of <script setup>)
            component_name: Name emitted in the definition (default from settings)
            strict: Raise on duplicate declaration macros (default from settings)
            registry: Macro registry; a fresh built-in registry when omitted
        """
        self.source = source
        self.component_name = component_name or appsettings.component_name
        self.strict = appsettings.strict_mode if strict is None else strict
        self.registry = registry or MacroRegistry()

        self.table = ScanTable(source)
        self.edits = EditList()

        self.imports: List[ImportRecord] = []
        self.components: List[ComponentImport] = []
        self.framework_names: List[str] = []
        self.results: List[MacroResult] = []

        self.props_definition: Optional[str] = None
        self.emits_definition: Optional[str] = None
        self.expose_definition: Optional[str] = None
        self.defaults_used = False

    def compile(self) -> CompiledOutput:
        """
        Compile the script

        Returns:
            CompiledOutput with the generated code and what was recorded

        Raises:
            UnsupportedConstruct: If the script uses a macro the mini
                compiler does not implement
            DuplicateDeclaration: In strict mode, if defineProps or
                defineEmits is called more than once
        """
        LOG(f"Compiling setup script for {self.component_name} ({len(self.source)} chars)", level=2)

        self.unsupported_check()
        self.imports_extract()

        for spec in self.registry.specs_ordered():
            spec.handler(self)

        transformed = self.edits.materialize(self.source)
        LOG(f"Applied {len(self.edits)} edits", level=3)

        bindings = self.bindings_collect(transformed)
        body = self.body_clean(transformed)
        is_async = ScanTable(body).suspend_detect(appsettings.suspend_keyword)

        exposed = [name for name in bindings if name not in self.framework_names]
        code = self.definition_emit(body, exposed, is_async)

        LOG(f"Returned bindings: {', '.join(exposed) or '(none)'}", level=2)

        return CompiledOutput(
            code=code,
            component_name=self.component_name,
            props=self.props_definition,
            emits=self.emits_definition,
            expose=self.expose_definition or None,
            imports=list(self.imports),
            components=list(self.components),
            bindings=exposed,
            framework_names=list(self.framework_names),
            is_async=is_async,
            macros=list(self.results),
        )

    def unsupported_check(self) -> None:
        """Fail fast on macros that only a full compiler can handle"""
        for kind in MacroKind:
            if unsupported_is(kind) and self.table.macroCall_find(kind.macro_name) != -1:
                LOG(f"Unsupported macro {kind.macro_name} found", level=2)
                raise UnsupportedConstruct(kind.macro_name)

    def imports_extract(self) -> None:
        """
        Hoist import statements out of the script body

        Component-file default imports go to the components map; named and
        default module imports become ImportRecords, kept in source order.
        Names imported from the framework module are remembered so they are
        not returned from setup. Each statement is replaced by a marker.
        """
        component_import = re.compile(
            r'(?<![\w$.])import\s+([\w$]+)\s+from\s+[\'"]([^\'"]+'
            + re.escape(appsettings.component_extension)
            + r')[\'"]'
        )

        found = []
        for match in component_import.finditer(self.source):
            if self.importMatch_claim(match):
                found.append((match.start(), ComponentImport(name=match.group(1), path=match.group(2))))

        for match in NAMED_IMPORT.finditer(self.source):
            if not self.importMatch_claim(match):
                continue
            names = []
            for raw in match.group(1).split(','):
                name = raw.strip()
                if not name:
                    continue
                rename = IMPORT_RENAME.match(name)
                names.append(f"{rename.group(1)}: {rename.group(2)}" if rename else name)
            found.append((match.start(), ImportRecord(
                names=names, module_path=match.group(2), kind=ImportKind.NAMED
            )))

        for match in DEFAULT_IMPORT.finditer(self.source):
            if self.importMatch_claim(match):
                found.append((match.start(), ImportRecord(
                    names=[match.group(1)], module_path=match.group(2), kind=ImportKind.DEFAULT
                )))

        for _, record in sorted(found, key=lambda item: item[0]):
            if isinstance(record, ComponentImport):
                self.components.append(record)
                continue
            self.imports.append(record)
            if record.module_path == appsettings.framework_module:
                for name in record.local_names:
                    if name not in self.framework_names:
                        self.framework_names.append(name)

        LOG(f"Hoisted {len(self.imports)} imports, {len(self.components)} components", level=2)

    def importMatch_claim(self, match: "re.Match[str]") -> bool:
        """Queue a marker edit for an import match that is code and not yet claimed"""
        start, end = match.start(), match.end() - 1
        if not self.table.code_is(start) or self.edits.covers(start) or self.edits.covers(end):
            return False
        statement = ' '.join(match.group(0).split())
        self.edits.add(start, end, appsettings.marker_make(statement))
        return True

    def macroCall_next(self, name: str, from_offset: int) -> int:
        """Next call of a macro that is not inside an already rewritten region"""
        index = self.table.macroCall_find(name, from_offset)
        while index != -1 and self.edits.covers(index):
            index = self.table.macroCall_find(name, index + 1)
        return index

    def call_extract(self, index: int, kind: MacroKind) -> MacroCall:
        """Extent of the macro call at index; raises MalformedInput when unbalanced"""
        return call_locate(self.table, index, kind)

    def call_encloses_edit(self, call: MacroCall) -> bool:
        """Whether a call's extent contains a call rewritten by an earlier handler"""
        if self.edits.overlaps(call.start, call.end):
            LOG(
                f"Skipping {call.kind.macro_name} at offset {call.start}: "
                f"its arguments hold an already rewritten macro call",
                level=2,
            )
            return True
        return False

    def declaration_before(self, index: int) -> Optional[Declaration]:
        """
        The "const|let|var <target> =" ending right before index, if any

        Example:
            For "const { a: { b } } = defineProps(...)" at the macro offset:
            Declaration(target="{ a: { b } }", is_pattern=True)
        """
        before = self.source[:index]

        assigned = ASSIGNED_NAME.search(before)
        if assigned and self.table.code_is(assigned.start()):
            return Declaration(target=assigned.group(1))

        candidates = [m for m in PATTERN_START.finditer(before) if self.table.code_is(m.start())]
        if not candidates:
            return None
        match = candidates[-1]
        open_char = match.group(1)
        close_char = '}' if open_char == '{' else ']'
        span = self.table.balanced_extract(match.start(1), open_char, close_char)
        if span is None or span.end >= index:
            return None
        if not ASSIGNMENT.fullmatch(self.source[span.end + 1:index]):
            return None
        return Declaration(target=span.text, is_pattern=True)

    def bareReplacement_make(self, index: int, name: str) -> str:
        """
        Replacement for a macro call used as a statement

        A marker line when the call starts its line (the line is dropped
        later); nothing when other code precedes it on the same line.
        """
        line_start = self.source.rfind('\n', 0, index) + 1
        if self.source[line_start:index].strip():
            return ''
        return appsettings.marker_make(name)

    def duplicate_report(self, kind: MacroKind, index: int) -> None:
        """Warn about a repeated declaration macro, or raise in strict mode"""
        if self.strict:
            raise DuplicateDeclaration(kind.macro_name, index)
        LOG(
            f"Warning: duplicate {kind.macro_name}() at offset {index}; "
            f"the first call is compiled, later calls are left as written",
            level=1,
        )

    def bindings_collect(self, transformed: str) -> List[str]:
        """
        Names declared at the top level of the rewritten script

        Scans the comment-stripped text for top-level simple declarations,
        object and array destructuring declarations, and named function
        declarations. Reserved names are excluded, as are names destructured
        directly from the props parameter (props stay on that parameter).

        Args:
            transformed: Script text with all edits applied

        Returns:
            Unique names in discovery order
        """
        source = ScanTable(transformed).comments_strip()
        table = ScanTable(source)
        reserved = {appsettings.props_param, appsettings.emit_param}
        props_source = re.compile(re.escape(appsettings.props_param) + r'(?![\w$])')
        bindings: List[str] = []

        def binding_add(name: str) -> None:
            if name not in reserved and name not in bindings:
                bindings.append(name)

        def topLevel_is(pos: int) -> bool:
            return table.code_is(pos) and table.braceDepth_at(pos) == 0

        for match in SIMPLE_DECLARATION.finditer(source):
            if topLevel_is(match.start()):
                binding_add(match.group(1))

        for open_char, close_char in (('{', '}'), ('[', ']')):
            for match in PATTERN_START.finditer(source):
                if match.group(1) != open_char or not topLevel_is(match.start()):
                    continue
                span = table.balanced_extract(match.start(1), open_char, close_char)
                if span is None:
                    LOG(f"Unbalanced destructuring at offset {match.start()}, skipped", level=2)
                    continue
                assignment = ASSIGNMENT.match(source, span.end + 1)
                if not assignment:
                    continue
                if props_source.match(source, assignment.end()):
                    continue
                for name in bindings_extract(span.text):
                    binding_add(name)

        def statementStart_is(offset: int) -> bool:
            return STATEMENT_LEAD.search(source, max(0, offset - 80), offset) is not None

        # Named function expressions ("= function name() {}") bind nothing here
        for match in FUNCTION_DECLARATION.finditer(source):
            if topLevel_is(match.start()) and statementStart_is(match.start()):
                binding_add(match.group(1))

        return bindings

    def body_clean(self, transformed: str) -> str:
        """Drop marker lines and trim the rewritten script"""
        lines = [line for line in transformed.split('\n') if not appsettings.marker_is(line)]
        return '\n'.join(lines).strip()

    def definition_emit(self, body: str, bindings: List[str], is_async: bool) -> str:
        """
        Generate the module text

        Args:
            body: Cleaned script body
            bindings: Names to return from setup
            is_async: Emit setup as an async function

        Returns:
            Module text beginning with the export prefix
        """
        props = appsettings.props_param
        ctx = appsettings.ctx_param
        loader = appsettings.runtime_loader

        parts = ['{\n', f'  name: "{self.component_name}",\n']

        if self.components:
            parts.append('  components: {\n')
            entries = []
            for comp in self.components:
                async_comp = f'{loader}("{comp.path}")'
                entries.append(f'    "{comp.name}": {async_comp},\n    "{comp.name.lower()}": {async_comp}')
            parts.append(',\n'.join(entries) + '\n')
            parts.append('  },\n')

        if self.props_definition is not None:
            parts.append(f'  props: {self.props_definition},\n')

        if self.emits_definition is not None:
            parts.append(f'  emits: {self.emits_definition},\n')

        async_keyword = 'async ' if is_async else ''
        parts.append(f'  setup: {async_keyword}function({props}, {ctx}) {{\n')
        parts.append(f'    var {appsettings.emit_param} = {ctx}.emit;\n')

        if self.defaults_used:
            parts.append(self.defaultsHelper_emit())

        for record in self.imports:
            if record.kind is ImportKind.NAMED:
                parts.append(f'    var {{ {", ".join(record.names)} }} = require("{record.module_path}");\n')
            else:
                parts.append(f'    var {record.names[0]} = require("{record.module_path}");\n')

        parts.append('\n' + body + '\n\n')

        if self.expose_definition:
            parts.append(f'    {ctx}.expose({self.expose_definition});\n')

        parts.append('    return {\n')
        parts.append(',\n'.join(f'      {name}: {name}' for name in bindings))
        if bindings:
            parts.append('\n')
        parts.append('    };\n')
        parts.append('  }\n')
        parts.append('}')

        return appsettings.export_prefix + ''.join(parts)

    def defaultsHelper_emit(self) -> str:
        """Runtime helper merging declared defaults under passed props"""
        helper = appsettings.defaults_helper
        props = appsettings.props_param
        return (
            f'    var {helper} = function({props}, __defaults__) {{\n'
            '      var result = {};\n'
            '      if (__defaults__) {\n'
            '        Object.keys(__defaults__).forEach(function(key) {\n'
            '          result[key] = __defaults__[key];\n'
            '        });\n'
            '      }\n'
            f'      if ({props}) {{\n'
            f'        Object.keys({props}).forEach(function(key) {{\n'
            f'          if ({props}[key] !== undefined) result[key] = {props}[key];\n'
            '        });\n'
            '      }\n'
            '      return result;\n'
            '    };\n'
        )


def scriptSetup_compile(code: str, options: Optional[Dict[str, Any]] = None) -> str:
    """
    Compile a setup script to module text

    Args:
        code: Setup script text
        options: Recognized keys: "componentName" (str), "strict" (bool)

    Returns:
        Generated module text

    Raises:
        UnsupportedConstruct: The signal to use a full compiler instead
    """
    options = options or {}
    compiler = Compiler(
        code,
        component_name=options.get('componentName'),
        strict=options.get('strict'),
    )
    return compiler.compile().code


def scriptSetup_compileWithFallback(
    code: str,
    options: Optional[Dict[str, Any]] = None,
    fallback: Optional[FallbackCompiler] = None,
) -> str:
    """
    Compile with the mini compiler, delegating unsupported scripts

    Args:
        code: Setup script text
        options: Compile options, passed unchanged to the fallback
        fallback: Full compiler with the same (code, options) signature

    Raises:
        UnsupportedConstruct: If the script needs a full compiler and no
            fallback was given
    """
    options = options or {}
    try:
        return scriptSetup_compile(code, options)
    except UnsupportedConstruct as e:
        if fallback is None:
            raise
        LOG(f"Mini compiler declined ({e}); delegating to fallback compiler", level=1)
        return fallback(code, options)
