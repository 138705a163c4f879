"""
mdpp - Markdown macro preprocessor

Expands shell substitutions, literal blocks and metadata directives in
markdown before it reaches a renderer.
"""

__version__ = "1.0.0"

from .parser import unescaped_find, content_extract, escapes_process
from .interpreter import InterpreterSession
from .directives import DirectiveRegistry, Dispatcher
from .preprocessor import Preprocessor, document_preprocess, lines_read
from .renderer import RendererPipe
from .exceptions import PreprocessError
from .log import LOG, state_connectToLogger

__all__ = [
    "unescaped_find",
    "content_extract",
    "escapes_process",
    "InterpreterSession",
    "DirectiveRegistry",
    "Dispatcher",
    "Preprocessor",
    "document_preprocess",
    "lines_read",
    "RendererPipe",
    "PreprocessError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
