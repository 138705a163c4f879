r"""
Delimiter matching, content extraction and escape processing

The scanning primitives the dispatcher uses to carve directive arguments out
of a single line of text.

The parser operates in three steps per inline directive:
1. Matching: Locate the first close delimiter not preceded by a backslash
2. Extraction: Extend the match over nested opens (asymmetric directives only)
3. Unescaping: Collapse backslash pairs before the content reaches a handler

Key features:
- Escape-aware search (\) is skipped, never unescaped here)
- Flat extend-on-demand nesting balance for $( ... ) style delimiters
- No balancing for symmetric delimiters such as $$ ... $$

Example:
    >>> span = content_extract(DIRECTIVES[0], "echo $(echo x)) tail")
    >>> span.content
    'echo $(echo x)'
    >>> escapes_process(r"a \) b")
    'a ) b'
"""

from typing import Optional

from ..models.directives import Directive
from ..models.parser import ContentSpan
from .exceptions import UnclosedDirectiveError


def unescaped_find(haystack: str, needle: str, start: int = 0) -> Optional[int]:
    r"""
    Find the first occurrence of needle not immediately preceded by a backslash

    Escaped occurrences are skipped and the search resumes just past them,
    so any run of consecutive escaped occurrences is stepped over in turn.

    Args:
        haystack: Text to search
        needle: Delimiter token to find
        start: Offset in haystack to begin searching from

    Returns:
        Offset of the first unescaped occurrence, or None if every occurrence
        is escaped or there is none

    Example:
        >>> unescaped_find(r"a \) b ) c", ")")
        7
        >>> unescaped_find(r"a \) b", ")") is None
        True
    """
    pos = start
    while True:
        index = haystack.find(needle, pos)
        if index < 0:
            return None
        if index > 0 and haystack[index - 1] == '\\':
            pos = index + len(needle)
            continue
        return index


def content_extract(directive: Directive, span: str) -> ContentSpan:
    """
    Extract an inline directive's argument from the text after its open

    Locates the first unescaped close. For asymmetric directives, every
    unescaped open found inside the content so far pushes the end out to the
    next unescaped close. This is a counter, not a stacked parser: an open
    that is never closed inside the span swallows a later sibling's close.

    Args:
        directive: Inline directive whose open has just been consumed
        span: Remainder of the line following the open delimiter

    Returns:
        ContentSpan with the right-trimmed content and the offset of the
        matching close in span

    Raises:
        UnclosedDirectiveError: If no matching close can be found

    Example:
        For "$(" with span "a $(b) c) d":
        ContentSpan(content="a $(b) c", end=8)
    """
    close = directive.close
    end = unescaped_find(span, close)
    if end is None:
        raise UnclosedDirectiveError(
            f"Directive '{directive.open}' was not closed with '{close}'"
        )

    if not directive.is_symmetric:
        scanned = 0
        while True:
            nested = unescaped_find(span[:end], directive.open, scanned)
            if nested is None:
                break
            scanned = nested + len(directive.open)

            extended = unescaped_find(span, close, end + len(close))
            if extended is None:
                raise UnclosedDirectiveError(
                    f"Nested directive '{directive.open}' was not closed with '{close}'"
                )
            end = extended

    return ContentSpan(content=span[:end].rstrip(), end=end)


def escapes_process(text: str) -> str:
    r"""
    Replace every backslash-escaped character with the character itself

    Scans left to right; pairs do not overlap, so "\\\\" yields one
    backslash. Any character may be escaped, not only delimiter characters.
    A trailing lone backslash is kept.

    Args:
        text: Extracted directive content

    Returns:
        Unescaped text (the input object itself if it has no backslash)

    Example:
        >>> escapes_process(r"echo \$HOME \)")
        'echo $HOME )'
    """
    if '\\' not in text:
        return text

    result = []
    pos = 0
    while pos < len(text):
        if text[pos] == '\\' and pos + 1 < len(text):
            result.append(text[pos + 1])
            pos += 2
        else:
            result.append(text[pos])
            pos += 1

    return ''.join(result)
