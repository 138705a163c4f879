"""
Interpreter session - a persistent command evaluator

One evaluator process is spawned per document and kept alive for the whole
run, so variables bound by %title / %meta are visible to every later $( )
substitution.

Protocol:
    - evaluate(): write one statement, flush, read exactly one line back
    - execute(): write one statement, flush, read nothing
    - at most one request in flight; every evaluate() consumes its line
      before the next request is written

A statement whose output spans several lines leaves the extra lines in the
pipe, where the next evaluate() will read them. A statement that prints
nothing blocks evaluate() forever. Both are known limitations.
"""

import shlex
import subprocess
from typing import List, Optional

from ..config import appsettings
from .exceptions import InterpreterError
from .log import LOG


class InterpreterSession:
    """
    Synchronous request/response client over an evaluator's stdin/stdout

    Usable as a context manager; close() tears the process down.
    """

    def __init__(self, command: Optional[str] = None, terminator: Optional[str] = None) -> None:
        """
        Spawn the evaluator

        Args:
            command: Evaluator command line (default: settings interpreter_command)
            terminator: Statement terminator (default: settings statement_terminator)

        Raises:
            InterpreterError: If the process cannot be spawned
        """
        self.command = command or appsettings.interpreter_command
        self.terminator = appsettings.statement_terminator if terminator is None else terminator

        argv: List[str] = shlex.split(self.command)
        try:
            self.process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise InterpreterError(f"Unable to start interpreter `{self.command}`: {e}") from e

        LOG(f"Interpreter started: {self.command} (pid {self.process.pid})", level=2)

    def statement_send(self, statement: str) -> None:
        """Write one terminated statement and flush it to the evaluator"""
        LOG(f"interpreter <- {statement}", level=3)
        try:
            self.process.stdin.write(f"{statement}{self.terminator}\n")
            self.process.stdin.flush()
        except (OSError, ValueError) as e:
            raise InterpreterError(f"Unable to write to interpreter: {e}") from e

    def evaluate(self, statement: str) -> str:
        """
        Run a statement and capture the first line it prints

        Args:
            statement: Statement text, without terminator

        Returns:
            The line read back, without its line ending

        Raises:
            InterpreterError: On write failure or if the evaluator closed its output
        """
        self.statement_send(statement)
        try:
            line = self.process.stdout.readline()
        except (OSError, ValueError) as e:
            raise InterpreterError(f"Unable to read from interpreter: {e}") from e

        if not line:
            raise InterpreterError(
                f"Interpreter closed its output while evaluating `{statement}`"
            )

        result = line.rstrip('\r\n')
        LOG(f"interpreter -> {result}", level=3)
        return result

    def execute(self, statement: str) -> None:
        """Run a statement for its side effects only; nothing is read back"""
        self.statement_send(statement)

    def assign(self, name: str, value: str) -> None:
        """
        Bind a variable in the evaluator's environment

        The value is wrapped in single quotes as-is; embedded quotes are not
        escaped.
        """
        self.execute(f"{name}='{value}'")

    def close(self) -> int:
        """
        Close both streams and wait for the evaluator to exit

        Returns:
            The evaluator's exit status
        """
        for stream in (self.process.stdin, self.process.stdout):
            try:
                stream.close()
            except OSError as e:
                LOG(f"Ignoring error while closing interpreter stream: {e}", level=2)
        status = self.process.wait()
        LOG(f"Interpreter exited with status {status}", level=2)
        return status

    def __enter__(self) -> "InterpreterSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
