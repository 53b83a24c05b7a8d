#!/usr/bin/env python3
"""
setupmini - Minimal <script setup> compiler

Compiles the setup-script dialect of single-file components into a plain
module body that assigns a component definition object, without loading a
full framework compiler.

Philosophy:
    - Text rewriting: no AST, one scan of the source, edits applied once
    - Small surface: defineProps, defineEmits, withDefaults, defineExpose
    - Honest refusal: anything else raises so a full compiler can take over

Usage:
    setupmini inputdir/ outputdir/ --inputFile TodoList.vue

    The compiled module is written to outputdir/ as <stem>.js, ready for
    an evaluator that provides module, require and the runtime loader.

Examples:
    # Basic compilation
    setupmini . output/ --inputFile TodoList.vue

    # Override the component name and write a highlighted HTML preview
    setupmini . output/ --inputFile TodoList.vue --componentName Todos --preview

    # Bare setup script (no sections), verbose output
    setupmini . output/ --inputFile setup.js -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    __version__,
    LOG,
    state_connectToLogger,
    sections_split,
    script_compile,
    SetupCompileError,
    UnsupportedConstruct,
)
from .lib.lexer import code_highlight
from .models import ProgramState, ScriptBlock, pipeline


DISPLAY_TITLE = r"""
            _                          _       _
   ___  ___| |_ _   _ _ __  _ __ ___ (_)_ __ (_)
  / __|/ _ \ __| | | | '_ \| '_ ` _ \| | '_ \| |
  \__ \  __/ |_| |_| | |_) | | | | | | | | | | |
  |___/\___|\__|\__,_| .__/|_| |_| |_|_|_| |_|_|
                     |_|
  Minimal <script setup> compiler
"""

# Define CLI arguments
parser = ArgumentParser(
    description="setupmini - Minimal <script setup> compiler for single-file components",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    required=True,
    type=str,
    help="Input component (.vue) or bare setup script (relative to inputdir)",
)

parser.add_argument(
    "--componentName",
    default=None,
    type=str,
    help="Name emitted in the component definition. Defaults to the input file stem",
)

parser.add_argument(
    "--outputSubdir",
    default=".",
    type=str,
    help="Subdirectory within outputdir for the compiled module",
)

parser.add_argument(
    "--preview",
    action="store_true",
    default=False,
    help="Also write a syntax-highlighted HTML preview of the compiled module",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input file
            - moduleOutputdir: Created output directory path
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile

    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.moduleOutputdir = state.outputdir / state.outputSubdir
    state.moduleOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.moduleOutputdir}", level=2)

    state.envOK = True
    return state


def source_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the input file and split component sources into sections.

    Files with the component extension are partitioned into template,
    script and style blocks; any other file is taken as a bare setup script.

    Args:
        inputstate: Program state with inputSourceFile path set

    Returns:
        ProgramState with added fields:
            - sourceText: Raw file contents
            - descriptor: SfcDescriptor, None for bare scripts

    Exits:
        1 if the file cannot be read or a component has no script block
    """

    state = inputstate.copy()

    LOG("Reading source file...", level=1)

    try:
        state.sourceText = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(state.sourceText)} characters from {state.inputSourceFile.name}", level=2)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    if state.inputSourceFile.suffix == appsettings.component_extension:
        LOG("Splitting component sections...", level=1)
        state.descriptor = sections_split(state.sourceText)
        if state.descriptor.script is None:
            print(f"Error: No <script> block in {state.inputSourceFile.name}", file=sys.stderr)
            sys.exit(1)
    else:
        LOG("No component extension: treating input as a bare setup script", level=2)
        state.descriptor = None
    return state


def script_compileStage(inputstate: ProgramState) -> ProgramState:
    """
    Compile the script block to module text.

    Args:
        inputstate: Program state with sourceText and descriptor

    Returns:
        ProgramState with added field:
            - compiledModule: Generated module text

    Exits:
        1 if the script needs a full compiler or compilation fails
    """

    state = inputstate.copy()

    if state.descriptor is not None:
        block = state.descriptor.script
    else:
        block = ScriptBlock(content=state.sourceText, setup=True)

    options = {"componentName": state.componentName or state.inputSourceFile.stem}

    LOG(f"Compiling {'setup' if block.setup else 'plain'} script...", level=1)
    try:
        state.compiledModule = script_compile(block, options)
    except UnsupportedConstruct as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except SetupCompileError as e:
        print(f"Compilation error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    LOG(f"Generated {len(state.compiledModule)} characters", level=2)
    if state.verbosity >= 3:
        LOG("\n" + code_highlight(state.compiledModule), level=3)
    return state


def output_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the compiled module, and its HTML preview when requested.

    Args:
        inputstate: Program state with compiledModule

    Returns:
        ProgramState with added field:
            - compileResult: Dict containing:
                - status: bool
                - output_file: str (path to <stem>.js)
                - preview_file: Optional[str] (path to <stem>.html)
                - setup: bool (compiled through the mini compiler)

    Exits:
        1 if compiledModule is None or writing fails
    """

    state = inputstate.copy()

    if state.compiledModule is None:
        print("Error: No compiled module available", file=sys.stderr)
        sys.exit(1)

    stem = state.inputSourceFile.stem
    output_file = state.moduleOutputdir / f"{stem}.js"
    preview_file = None

    try:
        output_file.write_text(state.compiledModule + "\n", encoding="utf-8")
        LOG(f"Wrote {output_file}", level=2)
        if state.preview:
            preview_file = state.moduleOutputdir / f"{stem}.html"
            preview_file.write_text(code_highlight(state.compiledModule, html=True), encoding="utf-8")
            LOG(f"Wrote {preview_file}", level=2)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)

    state.compileResult = {
        "status": True,
        "output_file": str(output_file),
        "preview_file": str(preview_file) if preview_file else None,
        "setup": state.descriptor is None or state.descriptor.script.setup,
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results to the user.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResult:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("\n✓ Compilation successful!", level=1)
        LOG(f"  Output:  {state.compileResult['output_file']}", level=1)
        if state.compileResult["preview_file"]:
            LOG(f"  Preview: {state.compileResult['preview_file']}", level=1)
        mode = "setup script" if state.compileResult["setup"] else "plain script (ES-module rewrite)"
        LOG(f"  Mode:    {mode}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="setupmini - Minimal <script setup> compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile one component or setup script to a module.

    Orchestrates the full compilation pipeline:
        1. env_check: Validate paths and environment
        2. source_read: Read the file and split component sections
        3. script_compileStage: Compile the script block
        4. output_write: Write <stem>.js (and <stem>.html preview)
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - inputFile: str - Input filename
            - componentName: Optional[str] - Name for the definition
            - outputSubdir: str - Output subdirectory name
            - preview: bool - Write an HTML preview
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing the source file
        outputdir: Directory where the compiled module will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_read, script_compileStage, output_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
