"""
ES-module rewriting for plain (non-setup) component scripts

Converts import/export syntax into the require()/module.exports form the
evaluator understands. Component files are loaded through the runtime
loader; everything else goes through require().
"""

import re

from ..config import appsettings


DYNAMIC_IMPORT = re.compile(r'import\s*\(\s*[\'"]([^\'"]+)[\'"]\s*\)')
NAMED_IMPORT = re.compile(r'import\s+\{([^}]+)\}\s+from\s+[\'"]([^\'"]+)[\'"]')
DEFAULT_IMPORT = re.compile(r'import\s+([\w$]+)\s+from\s+[\'"]([^\'"]+)[\'"]')
BARE_IMPORT = re.compile(r'import\s+[\'"]([^\'"]+)[\'"]')
EXPORT_DEFAULT = re.compile(r'export\s+default\s+')
EXPORT_DECLARATION = re.compile(r'export\s+(const|let|var)\s+([\w$]+)\s*=')
EXPORT_FUNCTION = re.compile(r'export\s+function\s+([\w$]+)')
EXPORT_LIST = re.compile(r'export\s+\{([^}]+)\}')


def importNames_map(names: str) -> str:
    """Rewrite "a, b as c" into destructuring form "a, b: c" """
    mapped = []
    for raw in names.split(','):
        name = raw.strip()
        if name:
            mapped.append(re.sub(r'^([\w$]+)\s+as\s+([\w$]+)$', r'\1: \2', name))
    return ', '.join(mapped)


def componentName_fromPath(path: str) -> str:
    """File stem of a component path ("./ui/TodoItem.vue" -> "TodoItem")"""
    return path.split('/')[-1][:-len(appsettings.component_extension)]


def esModule_transform(code: str) -> str:
    """
    Rewrite ES-module syntax into require()/module.exports

    Args:
        code: Script source using import/export

    Returns:
        Equivalent script for a (module, exports, require) evaluator

    Example:
        "import { a as b } from 'x'; export default {}" ->
        'const {a: b} = require("x"); module.exports = {}'
    """
    loader = appsettings.runtime_loader
    extension = appsettings.component_extension

    def dynamic_rewrite(match: "re.Match[str]") -> str:
        path = match.group(1)
        if path.endswith(extension):
            return f'{loader}.loadComponent("{path}", "{componentName_fromPath(path)}")()'
        return f'{loader}.loadModule("{path}")'

    def default_rewrite(match: "re.Match[str]") -> str:
        name, path = match.group(1), match.group(2)
        if path.endswith(extension):
            return f'const {name} = {loader}("{path}")'
        return f'const {name} = require("{path}")'

    transformed = DYNAMIC_IMPORT.sub(dynamic_rewrite, code)
    transformed = NAMED_IMPORT.sub(
        lambda m: f'const {{{importNames_map(m.group(1))}}} = require("{m.group(2)}")', transformed
    )
    transformed = DEFAULT_IMPORT.sub(default_rewrite, transformed)
    transformed = BARE_IMPORT.sub(lambda m: f'require("{m.group(1)}")', transformed)

    transformed = EXPORT_DEFAULT.sub('module.exports = ', transformed)
    transformed = EXPORT_DECLARATION.sub(
        lambda m: f'{m.group(1)} {m.group(2)} = module.exports.{m.group(2)} =', transformed
    )
    transformed = EXPORT_FUNCTION.sub(
        lambda m: f'module.exports.{m.group(1)} = function {m.group(1)}', transformed
    )
    transformed = EXPORT_LIST.sub(
        lambda m: '; '.join(
            f'module.exports.{name.strip()} = {name.strip()}'
            for name in m.group(1).split(',') if name.strip()
        ),
        transformed,
    )
    return transformed
