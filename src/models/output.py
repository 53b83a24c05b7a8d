"""
Compiler output data models

Structures recorded while rewriting a setup script and the final compiled
result returned by Compiler.compile().
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .macros import MacroResult


class ImportKind(Enum):
    DEFAULT = "default"
    NAMED = "named"


@dataclass
class ImportRecord:
    """
    A module import hoisted into a require() binding

    Attributes:
        names: Bound names; renamed named imports are kept as "external: local"
        module_path: Module specifier as written
        kind: DEFAULT (import x from 'm') or NAMED (import { a } from 'm')

    Example:
        "import { ref, watch as w } from 'vue'" becomes
        ImportRecord(names=["ref", "watch: w"], module_path="vue", kind=ImportKind.NAMED)
    """
    names: List[str]
    module_path: str
    kind: ImportKind

    @property
    def local_names(self) -> List[str]:
        """Names visible inside the setup body (rename targets resolved)"""
        return [name.split(':')[-1].strip() for name in self.names]


@dataclass
class ComponentImport:
    """
    Default import of a component file, registered in the components map

    Example:
        "import TodoItem from './TodoItem.vue'" becomes
        ComponentImport(name="TodoItem", path="./TodoItem.vue")
    """
    name: str
    path: str


@dataclass
class CompiledOutput:
    """
    Result of compiling one setup script

    Attributes:
        code: Generated module body, always starting with the export prefix
        component_name: Name emitted in the definition
        props: Props definition text, None when no props macro fired
        emits: Emits definition text, None when no emits macro fired
        expose: Argument of the exposed-API call, None when absent
        imports: Hoisted module imports, in source order
        components: Component-file imports, in source order
        bindings: Names returned from setup (framework names excluded)
        framework_names: Names imported from the framework module
        is_async: Whether the setup function was emitted as async
        macros: Every macro rewrite performed, in pipeline order
    """
    code: str
    component_name: str
    props: Optional[str] = None
    emits: Optional[str] = None
    expose: Optional[str] = None
    imports: List[ImportRecord] = field(default_factory=list)
    components: List[ComponentImport] = field(default_factory=list)
    bindings: List[str] = field(default_factory=list)
    framework_names: List[str] = field(default_factory=list)
    is_async: bool = False
    macros: List[MacroResult] = field(default_factory=list)

    def __str__(self) -> str:
        return self.code
