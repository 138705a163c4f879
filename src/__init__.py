"""
mdpp - Markdown macro preprocessor

Expands $(shell) substitutions, $$literal$$ blocks and %title / %meta / %
directives line by line before handing the text to a markdown renderer.
"""

__version__ = "1.0.0"

from .lib import Preprocessor, InterpreterSession, DirectiveRegistry, LOG, state_connectToLogger

__all__ = ["Preprocessor", "InterpreterSession", "DirectiveRegistry", "LOG", "state_connectToLogger", "__version__"]
