"""
Downstream markdown renderer pipe

Spawns the renderer with its stdout bound to the destination file and hands
its stdin to the preprocessor as the output sink.
"""

import shlex
import subprocess
from typing import Optional, TextIO

from ..config import appsettings
from .exceptions import RendererError
from .log import LOG


class RendererPipe:
    """
    Renderer subprocess fed through a pipe

    Usable as a context manager; leaving the block closes the pipe and waits
    for the renderer.
    """

    def __init__(self, dest: TextIO, command: Optional[str] = None) -> None:
        """
        Start the renderer

        Args:
            dest: Open file receiving the renderer's output
            command: Renderer command line (default: settings renderer_command)

        Raises:
            RendererError: If the renderer cannot be started
        """
        self.command = command or appsettings.renderer_command
        try:
            self.process = subprocess.Popen(
                shlex.split(self.command),
                stdin=subprocess.PIPE,
                stdout=dest,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise RendererError(f"Unable to start renderer `{self.command}`: {e}") from e
        LOG(f"Renderer started: {self.command} (pid {self.process.pid})", level=2)

    @property
    def stdin(self) -> TextIO:
        return self.process.stdin

    def close(self) -> int:
        """
        Close the pipe and wait for the renderer to finish

        Raises:
            RendererError: If closing fails or the renderer exits non-zero
        """
        try:
            self.process.stdin.close()
        except OSError as e:
            self.process.wait()
            raise RendererError(f"Unable to close renderer pipe: {e}") from e

        status = self.process.wait()
        if status != 0:
            raise RendererError(f"Renderer `{self.command}` exited with status {status}")
        LOG("Renderer finished", level=2)
        return status

    def __enter__(self) -> "RendererPipe":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
            return
        # Already failing: reap without masking the original error
        try:
            self.process.stdin.close()
        except OSError as e:
            LOG(f"Ignoring error while closing renderer pipe: {e}", level=2)
        self.process.wait()
