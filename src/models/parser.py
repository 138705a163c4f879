"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass


@dataclass
class ContentSpan:
    """
    Result of extracting a directive's argument from a line

    Returned by content_extract() after the close delimiter (and, for
    asymmetric directives, every nested close) has been located.

    Attributes:
        content: Right-trimmed text between open and matching close,
                 before escape processing
        end: Offset in the extracted span where the matching close begins

    Example:
        For span "echo $(echo x)) rest" after a "$(" open:
        ContentSpan(content="echo $(echo x)", end=14)
    """
    content: str
    end: int
