"""
Program and processor state models, plus the pipeline helper

Defines ProgramState for the functional CLI pipeline, ProcessorState for the
per-document preprocessing run, and pipeline() for composing stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as processing progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, outputFile,
          render, interpreter
        - env_check: inputSourceFile, outputTargetFile, envOK
        - document_preprocess: preprocessResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the source markdown file
        outputdir: Directory for the processed output
        verbosity: Logging verbosity level (1-3)
        inputFile: Input filename (relative to inputdir)
        outputFile: Output filename (relative to outputdir); derived if empty
        render: Pipe output through the downstream markdown renderer
        interpreter: Optional override of the interpreter command
        envOK: Environment validation passed
        inputSourceFile: Resolved path to input file
        outputTargetFile: Resolved path to output file
        preprocessResult: Run results (output_file, line_count, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    outputFile: str = field(default="")
    render: bool = field(default=False)
    interpreter: Optional[str] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    outputTargetFile: Path = field(default=Path("/"))
    preprocessResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, render, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Unknown options (e.g. chris_plugin's own) are dropped
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


@dataclass
class ProcessorState:
    """
    Mutable state of one preprocessing run.

    Owned by the Preprocessor and threaded through every directive handler.

    Attributes:
        in_code_block: Current line is inside an indented code block
        header_open: A bare % line has opened the header and not closed it
        session: Interpreter session (anything offering evaluate/execute/assign)
    """
    session: Any
    in_code_block: bool = False
    header_open: bool = False


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            document_preprocess,
            results_report
        )

    This is equivalent to:
        results_report(document_preprocess(env_check(initial_state)))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
