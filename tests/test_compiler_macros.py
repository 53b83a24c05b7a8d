"""
Macro rewriting tests

Tests each declaration macro shape, duplicate handling, malformed calls,
unsupported macros and import hoisting.
"""

import pytest

from setupmini.lib.compiler import Compiler, scriptSetup_compile, scriptSetup_compileWithFallback
from setupmini.lib.errors import UnsupportedConstruct, DuplicateDeclaration, SetupCompileError
from setupmini.lib.macros import MacroRegistry
from setupmini.models.macros import MacroKind, MacroSpec
from setupmini.models.output import ImportKind


def compile_output(source, **kwargs):
    return Compiler(source, **kwargs).compile()


class TestInputDeclaration:
    """Test defineProps shapes"""

    def test_assigned(self):
        """An assigned call becomes a reference to the props parameter"""
        output = compile_output("const props = defineProps(['title'])")
        assert output.props == "['title']"
        assert "const props = __props__" in output.code
        assert "defineProps" not in output.code
        assert output.bindings == ["props"]

    def test_destructured(self):
        """Destructured props are declared but not returned from setup"""
        source = 'const { count } = defineProps(["count"])\nconst doubled = computed(() => count * 2)'
        output = compile_output(source)
        assert '["count"]' in output.props
        assert "const { count } = __props__" in output.code
        assert output.bindings == ["doubled"]
        assert "count: count" not in output.code

    def test_destructured_with_rename_and_default(self):
        """Renamed and defaulted props are still read from the props parameter"""
        source = "const { a: alias, b = 2 } = defineProps({ a: String, b: Number })\nconst c = 1"
        output = compile_output(source)
        assert output.props == "{ a: String, b: Number }"
        assert output.bindings == ["c"]

    def test_bare_type_only(self):
        """A bare generic call yields an empty definition and disappears"""
        output = compile_output("defineProps<{ title: string }>()\nconst x = 1")
        assert output.props == "{}"
        assert "defineProps" not in output.code
        assert "[extracted]" not in output.code
        assert output.macros[0].kind is MacroKind.INPUT_DECL

    def test_arrow_type_in_generic(self):
        """Arrow function types inside the type argument are tolerated"""
        output = compile_output("const props = defineProps<{ onSave: (id: number) => void }>()")
        assert output.props == "{}"
        assert "const props = __props__" in output.code

    def test_bare_call_after_code(self):
        """A bare call sharing a line with other code is removed in place"""
        output = compile_output("init(); defineProps(['a'])")
        assert output.props == "['a']"
        assert "defineProps" not in output.code
        assert "init();" in output.code

    def test_bound_name_recorded(self):
        """The MacroResult carries the assigned name"""
        output = compile_output("const p = defineProps(['a'])")
        assert output.macros[0].bound_name == "p"
        assert output.macros[0].raw_arguments == "['a']"

    def test_call_in_string_ignored(self):
        """A macro name inside a string is left alone"""
        output = compile_output("const label = 'defineProps(x)'")
        assert output.props is None
        assert "'defineProps(x)'" in output.code


class TestDefaultsApplication:
    """Test withDefaults rewriting"""

    def test_type_only_props(self):
        """Type-only props yield an empty definition and the merge helper"""
        source = "const props = withDefaults(defineProps<{ size?: number }>(), { size: 1 })"
        output = compile_output(source)
        assert output.props == "{}"
        assert "const props = __applyDefaults__(__props__, { size: 1 })" in output.code
        assert "var __applyDefaults__ = function(__props__, __defaults__) {" in output.code

    def test_runtime_props(self):
        """The runtime definition inside withDefaults becomes the props entry"""
        source = "const props = withDefaults(defineProps({ size: Number }), { size: 1 })"
        output = compile_output(source)
        assert output.props == "{ size: Number }"
        assert [m.kind for m in output.macros] == [MacroKind.DEFAULTS_APPLICATION]

    def test_missing_defaults_argument(self):
        """A missing defaults argument merges an empty object"""
        output = compile_output("const props = withDefaults(defineProps(['a']))")
        assert "__applyDefaults__(__props__, {})" in output.code

    def test_without_props_declaration_skipped(self):
        """A withDefaults call wrapping no defineProps is left as written"""
        output = compile_output("const x = withDefaults(other(), {})")
        assert output.props is None
        assert "withDefaults(other(), {})" in output.code
        assert "__applyDefaults__" not in output.code

    def test_skipped_call_does_not_hide_later_one(self):
        """Scanning continues past a skipped withDefaults"""
        source = (
            "const x = withDefaults(other(), {})\n"
            "const props = withDefaults(defineProps(['a']), { a: 1 })"
        )
        output = compile_output(source)
        assert output.props == "['a']"
        assert "withDefaults(other(), {})" in output.code
        assert "const props = __applyDefaults__(__props__, { a: 1 })" in output.code

    def test_no_helper_without_defaults(self):
        """The helper is only emitted when withDefaults fired"""
        output = compile_output("const props = defineProps(['a'])")
        assert "__applyDefaults__" not in output.code


class TestEventDeclaration:
    """Test defineEmits shapes"""

    def test_assigned(self):
        """An assigned call binds the emit local"""
        output = compile_output("const emit = defineEmits(['save'])")
        assert output.emits == "['save']"
        assert "const emit = __emit__" in output.code
        assert output.macros[0].bound_name == "emit"

    def test_bare(self):
        """A bare call still creates an emit binding"""
        output = compile_output("defineEmits(['save', 'cancel'])")
        assert output.emits == "['save', 'cancel']"
        assert "const emit = __emit__" in output.code
        assert output.bindings == ["emit"]

    def test_type_only(self):
        """Type-only events yield an empty list definition"""
        output = compile_output("const emit = defineEmits<{ (e: 'save'): void }>()")
        assert output.emits == "[]"
        assert "emits: []," in output.code

    def test_emit_local_always_declared(self):
        """The context emit function is bound before the body"""
        output = compile_output("const a = 1")
        assert "var __emit__ = __ctx__.emit;" in output.code


class TestExposedApi:
    """Test defineExpose"""

    def test_expose_reemitted(self):
        """The argument is passed to the context expose call"""
        output = compile_output("const reset = () => {}\ndefineExpose({ reset })")
        assert output.expose == "{ reset }"
        assert "    __ctx__.expose({ reset });\n" in output.code
        assert "defineExpose" not in output.code
        assert output.bindings == ["reset"]

    def test_no_expose_call_without_macro(self):
        """No expose call is emitted when the macro is absent"""
        output = compile_output("const a = 1")
        assert output.expose is None
        assert ".expose(" not in output.code


class TestDuplicates:
    """Test repeated declaration macros"""

    def test_duplicate_props_warns(self):
        """The first call is compiled, the second is left as written"""
        output = compile_output("defineProps(['a'])\ndefineProps(['b'])", strict=False)
        assert output.props == "['a']"
        assert "defineProps(['b'])" in output.code

    def test_duplicate_props_strict(self):
        """Strict mode raises on the second call"""
        with pytest.raises(DuplicateDeclaration) as excinfo:
            compile_output("defineProps(['a'])\ndefineProps(['b'])", strict=True)
        assert excinfo.value.macro == "defineProps"
        assert excinfo.value.position == len("defineProps(['a'])\n")

    def test_duplicate_emits_strict(self):
        """Strict mode also guards defineEmits"""
        with pytest.raises(DuplicateDeclaration):
            scriptSetup_compile("defineEmits(['a'])\ndefineEmits(['b'])", {"strict": True})

    def test_defaults_then_props_strict(self):
        """A standalone defineProps after withDefaults is a duplicate"""
        source = "const p = withDefaults(defineProps(['a']), {})\nconst q = defineProps(['b'])"
        with pytest.raises(DuplicateDeclaration):
            compile_output(source, strict=True)

    def test_duplicate_is_compile_error(self):
        """DuplicateDeclaration shares the compiler error base"""
        assert issubclass(DuplicateDeclaration, SetupCompileError)


class TestMalformedInput:
    """Test unbalanced macro calls"""

    def test_unbalanced_props_skipped(self):
        """An unterminated call is skipped, not raised"""
        output = compile_output("const props = defineProps(['a'")
        assert output.props is None
        assert "defineProps(['a'" in output.code

    def test_unterminated_generic_skipped(self):
        """An unterminated type argument is skipped"""
        output = compile_output("defineProps<{ a: string }")
        assert output.props is None

    def test_unbalanced_expose_skipped(self):
        """An unterminated defineExpose leaves no expose call"""
        output = compile_output("defineExpose({ a }")
        assert output.expose is None

    def test_props_inside_expose(self):
        """A defineExpose holding a defineProps call is skipped, not raised"""
        output = compile_output("defineExpose({ p: defineProps(['a']) })\n")
        assert output.props == "['a']"
        assert output.expose is None
        assert "__ctx__.expose(" not in output.code

    def test_emits_inside_expose(self):
        """The same holds for a first defineEmits nested in defineExpose"""
        output = compile_output("defineExpose({ e: defineEmits(['x']) })\n")
        assert output.emits == "['x']"
        assert output.expose is None

    def test_nested_call_with_fallback(self):
        """No error reaches the fallback path either"""
        def full_compiler(code, options):
            raise AssertionError("fallback should not run")

        code = scriptSetup_compileWithFallback(
            "defineExpose({ p: defineProps(['a']) })", None, full_compiler
        )
        assert code.startswith("module.exports = ")


class TestUnsupportedMacros:
    """Test macros that need a full compiler"""

    @pytest.mark.parametrize("source,macro", [
        ("const model = defineModel()", "defineModel"),
        ("const slots = defineSlots<{ default(): any }>()", "defineSlots"),
        ("defineOptions({ name: 'Custom' })", "defineOptions"),
    ])
    def test_raises(self, source, macro):
        """Each unsupported macro raises with its name"""
        with pytest.raises(UnsupportedConstruct) as excinfo:
            compile_output(source)
        assert excinfo.value.macro == macro
        assert macro in str(excinfo.value)

    def test_raises_before_other_macros(self):
        """Rejection happens even when supported macros come first"""
        with pytest.raises(UnsupportedConstruct):
            compile_output("const props = defineProps(['a'])\ndefineOptions({})")

    def test_mention_in_comment_allowed(self):
        """Unsupported names in comments and strings are ignored"""
        output = compile_output("// defineModel() is not used here\nconst s = 'defineSlots()'")
        assert output.bindings == ["s"]


class TestImports:
    """Test import hoisting"""

    def test_named_framework_import(self):
        """Framework names become a require binding and are never returned"""
        output = compile_output("import { ref, computed } from 'vue'\nconst n = ref(0)")
        assert 'var { ref, computed } = require("vue");' in output.code
        assert output.framework_names == ["ref", "computed"]
        assert output.bindings == ["n"]
        assert "import" not in output.code

    def test_renamed_import(self):
        """Renamed named imports use destructuring syntax"""
        output = compile_output("import { watch as w } from 'vue'")
        assert output.imports[0].names == ["watch: w"]
        assert output.framework_names == ["w"]
        assert 'var { watch: w } = require("vue");' in output.code

    def test_default_import(self):
        """Default imports become a plain require binding"""
        output = compile_output("import axios from 'axios'")
        assert output.imports[0].kind is ImportKind.DEFAULT
        assert 'var axios = require("axios");' in output.code

    def test_component_import(self):
        """Component-file imports are registered under both name casings"""
        output = compile_output("import TodoItem from './TodoItem.vue'")
        assert output.components[0].name == "TodoItem"
        assert output.imports == []
        assert '    "TodoItem": vueEsmRuntime("./TodoItem.vue"),\n' in output.code
        assert '    "todoitem": vueEsmRuntime("./TodoItem.vue")\n' in output.code

    def test_source_order(self):
        """Imports keep their source order"""
        source = "import b from 'b'\nimport { a } from 'a'\nimport c from 'c'"
        output = compile_output(source)
        assert [record.module_path for record in output.imports] == ["b", "a", "c"]

    def test_multiline_import(self):
        """An import spanning several lines is hoisted whole"""
        source = "import {\n  ref,\n  onMounted\n} from 'vue'\nconst x = ref(1)"
        output = compile_output(source)
        assert output.imports[0].names == ["ref", "onMounted"]
        assert "onMounted\n" not in output.code
        assert output.bindings == ["x"]

    def test_import_in_string_ignored(self):
        """Import syntax inside a string is not hoisted"""
        output = compile_output("const s = \"import x from 'y'\"")
        assert output.imports == []


class TestMacroRegistry:
    """Test the macro registry"""

    def test_builtin_order(self):
        """Handlers run defaults, props, emits, expose"""
        names = [spec.name for spec in MacroRegistry().specs_ordered()]
        assert names == ["withDefaults", "defineProps", "defineEmits", "defineExpose"]

    def test_unsupported_registration_rejected(self):
        """Unsupported kinds cannot be registered"""
        registry = MacroRegistry()
        with pytest.raises(ValueError):
            registry.register(MacroSpec(
                kind=MacroKind.MODEL_BINDING,
                description="two-way binding",
                handler=lambda compiler: None,
            ))

    def test_get(self):
        """Specs are looked up by kind"""
        registry = MacroRegistry()
        assert registry.get(MacroKind.EVENT_DECL).name == "defineEmits"
        assert registry.get(MacroKind.OPTIONS) is None

    def test_replaced_handler_is_used(self):
        """Re-registering a kind replaces its handler"""
        calls = []
        registry = MacroRegistry()
        registry.register(MacroSpec(
            kind=MacroKind.EXPOSED_API,
            description="recording handler",
            handler=lambda compiler: calls.append(compiler.component_name),
        ))
        Compiler("defineExpose({})", component_name="Probe", registry=registry).compile()
        assert calls == ["Probe"]
