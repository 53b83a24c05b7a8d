"""
State bus for the setupmini command line

One ProgramState flows through every CLI stage, and each stage returns a
copy with its own fields filled in. pipeline() chains the stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field
from functools import reduce


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, componentName,
          outputSubdir, preview
        - env_check: inputSourceFile, moduleOutputdir, envOK
        - source_read: sourceText, descriptor
        - script_compileStage: compiledModule
        - output_write: compileResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the component or script file
        outputdir: Base output directory
        verbosity: Logging verbosity level (0-3)
        inputFile: Input filename (relative to inputdir)
        componentName: Name for the generated definition (default: file stem)
        outputSubdir: Subdirectory within outputdir for output
        preview: Also write a syntax-highlighted HTML preview
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the input file
        moduleOutputdir: Final output directory (outputdir + outputSubdir)
        sourceText: Raw input text
        descriptor: SfcDescriptor for component files, None for bare scripts
        compiledModule: Generated module text
        compileResult: Output paths and statistics
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    componentName: Optional[str] = field(default=None)
    outputSubdir: str = field(default=".")
    preview: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    moduleOutputdir: Path = field(default=Path("/"))
    sourceText: str = field(default="")
    descriptor: Optional[Any] = field(default=None)  # SfcDescriptor at runtime
    compiledModule: Optional[str] = field(default=None)
    compileResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Build the initial state from the plugin's parsed arguments.

        Namespace entries without a matching field (for example the ones
        chris_plugin adds itself) are dropped.

        Args:
            options: Parsed CLI arguments (inputFile, componentName, preview, ...)
            inputdir: Directory holding the component or script
            outputdir: Directory receiving the compiled module
        """
        import dataclasses

        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """Shallow copy, so a stage never mutates the state it was given"""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run stages left to right, feeding each the state returned by the last.

    Example:
        pipeline(state, env_check, source_read, script_compileStage,
                 output_write, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
