"""
End-to-end compilation tests

Tests the full pipeline: setup script → Compiler → module text, plus the
fallback path, script routing and the command-line stages.

Validates that complete component scripts compile to the exact module
shape the evaluator expects.
"""

import pytest
from pathlib import Path
from argparse import Namespace
import tempfile

from setupmini.lib.compiler import Compiler, scriptSetup_compile, scriptSetup_compileWithFallback
from setupmini.lib.errors import UnsupportedConstruct
from setupmini.lib.script import script_compile
from setupmini.models import ProgramState, ScriptBlock, pipeline


class TestFullOutput:
    """Test the complete generated module"""

    def test_counter_component(self):
        """Compile a small component and compare the whole module"""
        source = (
            "import { ref } from 'vue'\n"
            "const count = ref(0)\n"
            "function increment() { count.value++ }\n"
        )
        expected = (
            'module.exports = {\n'
            '  name: "Counter",\n'
            '  setup: function(__props__, __ctx__) {\n'
            '    var __emit__ = __ctx__.emit;\n'
            '    var { ref } = require("vue");\n'
            '\n'
            'const count = ref(0)\n'
            'function increment() { count.value++ }\n'
            '\n'
            '    return {\n'
            '      count: count,\n'
            '      increment: increment\n'
            '    };\n'
            '  }\n'
            '}'
        )
        assert scriptSetup_compile(source, {"componentName": "Counter"}) == expected

    def test_default_component_name(self):
        """Without options the placeholder name is used"""
        code = scriptSetup_compile("const a = 1")
        assert code.startswith('module.exports = {\n  name: "SetupComponent",\n')

    def test_empty_script(self):
        """An empty script still yields a definition with an empty return"""
        code = scriptSetup_compile("")
        assert "setup: function(__props__, __ctx__) {" in code
        assert "    return {\n    };\n" in code

    def test_entry_order(self):
        """Definition entries appear as name, components, props, emits, setup"""
        source = (
            "import Child from './Child.vue'\n"
            "const props = defineProps(['title'])\n"
            "const emit = defineEmits(['close'])\n"
        )
        code = scriptSetup_compile(source, {"componentName": "Panel"})
        positions = [
            code.index('name: "Panel"'),
            code.index("components: {"),
            code.index("props: ['title'],"),
            code.index("emits: ['close'],"),
            code.index("setup: function"),
        ]
        assert positions == sorted(positions)

    def test_setup_order(self):
        """Setup contents follow emit, helper, requires, body, expose, return"""
        source = (
            "import { ref } from 'vue'\n"
            "const props = withDefaults(defineProps<{ n?: number }>(), { n: 1 })\n"
            "const total = ref(props.n)\n"
            "defineExpose({ total })\n"
        )
        code = scriptSetup_compile(source)
        positions = [
            code.index("var __emit__ = __ctx__.emit;"),
            code.index("var __applyDefaults__ = function"),
            code.index('var { ref } = require("vue");'),
            code.index("const total = ref(props.n)"),
            code.index("__ctx__.expose({ total });"),
            code.index("return {"),
        ]
        assert positions == sorted(positions)

    def test_todo_list_component(self):
        """A realistic component with every supported macro"""
        source = """
import { ref, computed } from 'vue'
import TodoItem from './TodoItem.vue'
import { format as fmt } from './utils.js'

// Props with defaults
const props = withDefaults(defineProps<{ title?: string }>(), { title: 'Todos' })
const emit = defineEmits(['change'])

const items = ref([])
const [first, ...others] = [1, 2, 3]
const { label, meta: { tags } } = useMeta()
const remaining = computed(() => {
  const open = items.value.filter(i => !i.done)
  return open.length
})

function add(text) {
  const item = { text, done: false }
  items.value.push(item)
  emit('change', fmt(item))
}

defineExpose({ add })
"""
        output = Compiler(source, component_name="TodoList").compile()

        assert output.props == "{}"
        assert output.emits == "['change']"
        assert output.expose == "{ add }"
        assert output.components[0].path == "./TodoItem.vue"
        assert output.framework_names == ["ref", "computed"]
        assert output.bindings == [
            "props", "emit", "items", "remaining", "label", "tags", "first", "others", "add"
        ]
        assert 'var { format: fmt } = require("./utils.js");' in output.code
        assert "// Props with defaults" in output.code
        assert "open: open" not in output.code
        assert "item: item" not in output.code
        assert not output.is_async

    def test_function_expression_name_not_returned(self):
        """Only declared functions are returned, not names of function expressions"""
        source = (
            "const handler = function onClick() { return 1 }\n"
            "async function load() {}\n"
            "run(function inner() {})\n"
        )
        output = Compiler(source).compile()
        assert output.bindings == ["handler", "load"]
        assert "onClick: onClick" not in output.code

    def test_str_is_code(self):
        """str() of the compiled output is the module text"""
        output = Compiler("const a = 1").compile()
        assert str(output) == output.code


class TestAsyncDetection:
    """Test async setup generation"""

    def test_top_level_await(self):
        """Top-level await marks setup async"""
        output = Compiler("const data = await fetch('/api')").compile()
        assert output.is_async
        assert "setup: async function(__props__, __ctx__) {" in output.code

    def test_nested_await(self):
        """await inside a nested function does not"""
        output = Compiler("async function load() {\n  await fetch('/api')\n}").compile()
        assert not output.is_async
        assert "setup: function(__props__, __ctx__) {" in output.code

    def test_await_in_comment(self):
        """await in a comment does not"""
        output = Compiler("// await later\nconst a = 1").compile()
        assert not output.is_async


class TestIdempotence:
    """Test compiling generated output again"""

    def test_second_pass_adds_nothing(self):
        """The output has no macros and no top-level bindings of its own"""
        source = (
            "import { ref } from 'vue'\n"
            "const props = defineProps(['a'])\n"
            "const emit = defineEmits(['b'])\n"
            "const c = ref(0)\n"
            "defineExpose({ c })\n"
        )
        first = Compiler(source).compile()
        second = Compiler(first.code).compile()

        assert second.macros == []
        assert second.bindings == []
        assert second.imports == []
        assert first.code in second.code

    def test_deterministic(self):
        """Compiling the same input twice gives identical text"""
        source = "const props = defineProps(['a'])\nconst b = 2"
        assert scriptSetup_compile(source) == scriptSetup_compile(source)


class TestFallback:
    """Test delegation to a full compiler"""

    def test_fallback_used_for_unsupported(self):
        """The fallback receives the script text and options unchanged"""
        received = []

        def full_compiler(code, options):
            received.append((code, options))
            return "FULL"

        options = {"componentName": "Modelled"}
        result = scriptSetup_compileWithFallback("const m = defineModel()", options, full_compiler)
        assert result == "FULL"
        assert received == [("const m = defineModel()", options)]

    def test_fallback_not_used_when_supported(self):
        """Supported scripts never reach the fallback"""
        def full_compiler(code, options):
            raise AssertionError("fallback should not run")

        result = scriptSetup_compileWithFallback("const a = 1", None, full_compiler)
        assert result.startswith("module.exports = ")

    def test_no_fallback_reraises(self):
        """Without a fallback the unsupported error propagates"""
        with pytest.raises(UnsupportedConstruct):
            scriptSetup_compileWithFallback("defineSlots()")


class TestScriptRouting:
    """Test script block routing"""

    def test_plain_script_rewritten(self):
        """Non-setup scripts get ES-module rewriting"""
        block = ScriptBlock(content="import x from 'y'\nexport default { x }")
        assert script_compile(block) == 'const x = require("y")\nmodule.exports = { x }'

    def test_setup_script_compiled(self):
        """Setup scripts go through the mini compiler"""
        block = ScriptBlock(content="const a = 1", setup=True)
        code = script_compile(block, {"componentName": "Routed"})
        assert 'name: "Routed"' in code

    def test_setup_script_fallback(self):
        """Setup scripts pass the fallback through"""
        block = ScriptBlock(content="defineOptions({})", setup=True)
        assert script_compile(block, fallback=lambda code, options: "FULL") == "FULL"


class TestCommandLinePipeline:
    """Test the command-line stages without the plugin wrapper"""

    def test_component_file(self):
        """A component file is split, compiled and written with a preview"""
        from setupmini.__main__ import (
            env_check, source_read, script_compileStage, output_write, results_report,
        )

        component = (
            "<template><p>{{ count }}</p></template>\n"
            "<script setup>\n"
            "import { ref } from 'vue'\n"
            "const count = ref(0)\n"
            "</script>\n"
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / "in"
            outputdir = Path(tmpdir) / "out"
            inputdir.mkdir()
            (inputdir / "Counter.vue").write_text(component)

            options = Namespace(
                inputFile="Counter.vue", componentName=None, outputSubdir=".",
                preview=True, verbosity=0,
            )
            state = ProgramState.state_createFromNamespace(options, inputdir, outputdir)
            final = pipeline(
                state, env_check, source_read, script_compileStage, output_write, results_report
            )

            assert final.envOK
            assert final.descriptor.script.setup
            module = (outputdir / "Counter.js").read_text()
            assert 'name: "Counter"' in module
            assert "count: count" in module
            assert (outputdir / "Counter.html").exists()
            assert final.compileResult["preview_file"].endswith("Counter.html")

    def test_bare_script_file(self):
        """A file without the component extension is a bare setup script"""
        from setupmini.__main__ import env_check, source_read, script_compileStage, output_write

        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir)
            (inputdir / "setup.js").write_text("const props = defineProps(['a'])\n")

            options = Namespace(
                inputFile="setup.js", componentName="Named", outputSubdir="build",
                preview=False, verbosity=0,
            )
            state = ProgramState.state_createFromNamespace(options, inputdir, inputdir)
            final = pipeline(state, env_check, source_read, script_compileStage, output_write)

            assert final.descriptor is None
            module = (inputdir / "build" / "setup.js").read_text()
            assert 'name: "Named"' in module
            assert final.compileResult["preview_file"] is None

    def test_missing_input_exits(self):
        """A missing input file exits with status 1"""
        from setupmini.__main__ import env_check

        with tempfile.TemporaryDirectory() as tmpdir:
            state = ProgramState(inputdir=Path(tmpdir), outputdir=Path(tmpdir), inputFile="nope.vue")
            with pytest.raises(SystemExit) as excinfo:
                env_check(state)
            assert excinfo.value.code == 1

    def test_unsupported_macro_exits(self):
        """A script needing a full compiler exits with status 1"""
        from setupmini.__main__ import script_compileStage

        state = ProgramState(
            inputSourceFile=Path("Modelled.js"),
            sourceText="const m = defineModel()",
            verbosity=0,
        )
        with pytest.raises(SystemExit):
            script_compileStage(state)
