"""
Models package for mdpp

Contains data structures and type definitions for the preprocessing pipeline.
"""

from .state import ProgramState, ProcessorState, pipeline
from .directives import Directive, DirectiveKind, DIRECTIVES
from .parser import ContentSpan

__all__ = [
    "ProgramState",
    "ProcessorState",
    "pipeline",
    "Directive",
    "DirectiveKind",
    "DIRECTIVES",
    "ContentSpan",
]
