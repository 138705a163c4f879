"""
Document driver for mdpp

Reads a document line by line, tracks indented code blocks, dispatches
directives and writes the expansion, one output line per input line.
"""

from typing import Iterator, Optional, TextIO

from ..models.state import ProcessorState
from .directives import Dispatcher, DirectiveRegistry
from .exceptions import DocumentIOError
from .interpreter import InterpreterSession
from .log import LOG


LINE_TERMINATOR = "\n"


def codeBlock_is(line: str) -> bool:
    """A line is code if it starts with four spaces or a tab"""
    return line.startswith("    ") or line.startswith("\t")


def lines_read(stream: TextIO) -> Iterator[str]:
    """
    Yield the lines of a text stream with trailing whitespace removed

    Raises:
        DocumentIOError: If reading from the stream fails
    """
    while True:
        try:
            line = stream.readline()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentIOError(f"Unable to read next line: {e}") from e
        if not line:
            return
        yield line.rstrip()


class Preprocessor:
    """
    Drives a whole document through the dispatcher

    Responsibilities:
    - Own the ProcessorState (code-block flag, header flag, session)
    - Update code-block mode before each line is dispatched
    - Append one line terminator per input line
    """

    def __init__(self, session, registry: Optional[DirectiveRegistry] = None) -> None:
        """
        Initialize preprocessor

        Args:
            session: Interpreter session (evaluate/execute/assign)
            registry: Optional handler registry (default: built-in handlers)
        """
        self.state = ProcessorState(session=session)
        self.dispatcher = Dispatcher(registry)
        self.line_count = 0

    def line_process(self, line: str) -> str:
        """
        Process one right-trimmed line

        Code-block mode switches on with the first indented line and off with
        the first line that is not indented; the switching line itself is
        already handled in the new mode.

        Returns:
            Expanded line, without a line terminator
        """
        if codeBlock_is(line):
            if not self.state.in_code_block:
                LOG(f"line {self.line_count + 1}: entering code block", level=3)
            self.state.in_code_block = True
        elif self.state.in_code_block:
            LOG(f"line {self.line_count + 1}: leaving code block", level=3)
            self.state.in_code_block = False

        return self.dispatcher.line_dispatch(line, self.state)

    def document_process(self, source: TextIO, sink: TextIO) -> int:
        """
        Process every line of source and write the result to sink

        Args:
            source: Readable text stream
            sink: Writable text stream (file, terminal, or renderer stdin)

        Returns:
            Number of lines processed

        Raises:
            DocumentIOError: On read or write failure
            PreprocessError: On any directive failure (all fatal)
        """
        for line in lines_read(source):
            expanded = self.line_process(line)
            try:
                sink.write(expanded)
                sink.write(LINE_TERMINATOR)
            except OSError as e:
                raise DocumentIOError(f"Unable to write output: {e}") from e
            self.line_count += 1

        LOG(f"Processed {self.line_count} lines", level=2)
        return self.line_count


def document_preprocess(source: TextIO, sink: TextIO, interpreter: Optional[str] = None) -> int:
    """
    Preprocess a document with a fresh interpreter session

    The session is started before the first line and torn down after the
    last one, also when processing fails.

    Args:
        source: Readable text stream
        sink: Writable text stream
        interpreter: Interpreter command (default: settings interpreter_command)

    Returns:
        Number of lines processed
    """
    with InterpreterSession(interpreter) as session:
        return Preprocessor(session).document_process(source, sink)
