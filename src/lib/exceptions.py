"""
Exception classes for mdpp

Every error is fatal to the run: the CLI reports it and exits non-zero,
whether it came from the document or from the environment.
"""


class PreprocessError(Exception):
    """Base class for all mdpp failures"""
    pass


class UnclosedDirectiveError(PreprocessError):
    """Raised when an inline directive has no matching close delimiter"""
    pass


class MalformedMetaError(PreprocessError):
    """Raised when a %meta directive has no space between name and value"""
    pass


class InterpreterError(PreprocessError):
    """Raised when the interpreter cannot be spawned, written to, or read from"""
    pass


class DocumentIOError(PreprocessError):
    """Raised when reading a source line or writing output fails"""
    pass


class RendererError(PreprocessError):
    """Raised when the downstream renderer cannot be started or fails"""
    pass
