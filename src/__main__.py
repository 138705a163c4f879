#!/usr/bin/env python3
"""
mdpp - Markdown macro preprocessor

Expands directives embedded in a markdown document and writes the result,
optionally piped through a markdown renderer.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Directives:
    $(command)       Replaced by the first line the command prints
    $$text$$         Wrapped verbatim in a literal <pre> block
    %title text      Emits <title>, binds $title in the interpreter
    %meta name value Emits <meta>, binds $name in the interpreter
    %                Opens / closes the <head> section

    Lines indented by four spaces or a tab are code and pass through as-is.
    A backslash before a delimiter emits the delimiter literally.

Usage:
    mdpp inputdir/ outputdir/ --inputFile notes.md

Examples:
    # Preprocess only
    mdpp . output/ --inputFile notes.md

    # Preprocess and render to HTML
    mdpp . output/ --inputFile notes.md --render

    # Use bash as the interpreter, verbose output
    mdpp . output/ --inputFile notes.md --interpreter /bin/bash -vv

    # Filter mode: standard input to standard output
    cat notes.md | mdpp . . --inputFile - | less
"""

import sys
from contextlib import nullcontext
from pathlib import Path
from typing import ContextManager, TextIO
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Preprocessor, InterpreterSession, RendererPipe, PreprocessError, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


# Filename meaning standard input / standard output
STDIO = "-"


DISPLAY_TITLE = r"""
                _
  _ __ ___   __| |_ __  _ __
 | '_ ` _ \ / _` | '_ \| '_ \
 | | | | | | (_| | |_) | |_) |
 |_| |_| |_|\__,_| .__/| .__/
                 |_|   |_|

  Markdown macro preprocessor
"""

# Define CLI arguments
parser = ArgumentParser(
    description="mdpp - Markdown macro preprocessor with shell substitution",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input markdown file (relative to inputdir), or - for standard input"
)

parser.add_argument(
    "--outputFile",
    default="",
    type=str,
    help="Output filename (relative to outputdir). - for standard output. Defaults to the input name, <stem>.html with --render, or - when reading standard input",
)

parser.add_argument(
    "--render",
    action="store_true",
    help="Pipe the preprocessed document through the markdown renderer (MDPP_RENDERER_COMMAND)",
)

parser.add_argument(
    "--interpreter",
    default=None,
    type=str,
    help="Command evaluator for $( ) directives. Defaults to MDPP_INTERPRETER_COMMAND",
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
    Validate environment and resolve file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the input document (Path("-") for stdin)
            - outputTargetFile: Resolved path to the output file (Path("-") for stdout)
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found, or if the output file is the input file
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputFile == STDIO:
        state.inputSourceFile = Path(STDIO)
        LOG("Input: standard input", level=2)
    else:
        input_file = state.inputdir / state.inputFile
        if not input_file.is_file():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.inputSourceFile = input_file
        LOG(f"Input file: {input_file}", level=2)

    output_name = state.outputFile
    if not output_name:
        if state.inputFile == STDIO:
            output_name = STDIO
        elif state.render:
            output_name = f"{state.inputSourceFile.stem}.html"
        else:
            output_name = state.inputSourceFile.name

    if output_name == STDIO:
        state.outputTargetFile = Path(STDIO)
        LOG("Output: standard output", level=2)
    else:
        state.outputTargetFile = state.outputdir / output_name
        # Opening the target for writing would truncate the source before it is read
        if state.inputFile != STDIO and \
                state.outputTargetFile.resolve() == state.inputSourceFile.resolve():
            print(f"Error: output would overwrite input: {state.inputSourceFile}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.outputTargetFile.parent.mkdir(parents=True, exist_ok=True)
        LOG(f"Output file: {state.outputTargetFile}", level=2)

    state.envOK = True
    return state


def source_open(state: ProgramState) -> ContextManager[TextIO]:
    """Open the input document, or borrow stdin for '-' (left open)"""
    if state.inputFile == STDIO:
        return nullcontext(sys.stdin)
    return open(state.inputSourceFile, "r", encoding="utf-8")


def target_open(state: ProgramState) -> ContextManager[TextIO]:
    """Open the output file, or borrow stdout for '-' (left open)"""
    if state.outputTargetFile == Path(STDIO):
        return nullcontext(sys.stdout)
    return open(state.outputTargetFile, "w", encoding="utf-8")


def document_preprocess(inputstate: ProgramState) -> ProgramState:
    """
    Expand all directives of the input document into the output file.

    Starts one interpreter session for the whole document. With --render the
    output goes through the renderer pipe instead of straight to the file.

    Args:
        inputstate: Program state with resolved input/output paths

    Returns:
        ProgramState with added field:
            - preprocessResult: Dict containing:
                - status: bool
                - output_file: str
                - line_count: int

    Exits:
        1 on any preprocessing error (unclosed directive, malformed %meta,
        interpreter or I/O failure)
    """

    state = inputstate.copy()

    LOG("Preprocessing document...", level=1)

    try:
        with source_open(state) as source, \
                target_open(state) as dest, \
                InterpreterSession(state.interpreter) as session:
            preprocessor = Preprocessor(session)
            if state.render:
                with RendererPipe(dest) as renderer:
                    line_count = preprocessor.document_process(source, renderer.stdin)
            else:
                line_count = preprocessor.document_process(source, dest)
    except (PreprocessError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    state.preprocessResult = {
        "status": True,
        "output_file": "<stdout>" if state.outputTargetFile == Path(STDIO) else str(state.outputTargetFile),
        "line_count": line_count,
    }
    LOG(f"Preprocessing complete: {line_count} lines", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display preprocessing results.

    Exits:
        1 if preprocessResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.preprocessResult:
        print("Error: Preprocessing failed", file=sys.stderr)
        sys.exit(1)

    LOG("✓ Preprocessing successful!", level=1)
    LOG(f"  Output: {state.preprocessResult['output_file']}", level=1)
    LOG(f"  Lines: {state.preprocessResult['line_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="mdpp - Markdown macro preprocessor",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - preprocess a markdown document.

    Orchestrates the pipeline:
        1. env_check: Validate and resolve paths
        2. document_preprocess: Expand directives into the output file
        3. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the source document
        outputdir: Directory where the output will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, document_preprocess, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
