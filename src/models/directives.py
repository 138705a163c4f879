"""
Directive table and metadata models

Defines the closed set of mdpp directive kinds and the priority-ordered
table the dispatcher matches against.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple


class DirectiveKind(Enum):
    """
    Kinds of mdpp directives

    Each kind is bound to exactly one handler in DirectiveRegistry.
    """
    SHELL = "shell"                  # $(command)
    LITERAL_BLOCK = "literal-block"  # $$text$$
    TITLE = "title"                  # %title text
    META = "meta"                    # %meta name value
    HEADER_TOGGLE = "header-toggle"  # %


@dataclass(frozen=True)
class Directive:
    """
    A recognised directive delimiter pair

    Attributes:
        open: Opening delimiter (e.g., "$(" or "%title ")
        close: Closing delimiter, or None for whole-line directives
        kind: Which handler processes the directive's content

    Example:
        Directive(open="$(", close=")", kind=DirectiveKind.SHELL)
    """
    open: str
    close: Optional[str]
    kind: DirectiveKind

    @property
    def is_whole_line(self) -> bool:
        """True if the directive claims the rest of the line"""
        return self.close is None

    @property
    def is_symmetric(self) -> bool:
        """True if open and close are the same token (no nesting balance)"""
        return self.open == self.close


# Priority order matters: first match wins, and the specific %title / %meta
# prefixes must precede the bare % header toggle.
DIRECTIVES: Tuple[Directive, ...] = (
    Directive(open="$(", close=")", kind=DirectiveKind.SHELL),
    Directive(open="$$", close="$$", kind=DirectiveKind.LITERAL_BLOCK),
    Directive(open="%title ", close=None, kind=DirectiveKind.TITLE),
    Directive(open="%meta ", close=None, kind=DirectiveKind.META),
    Directive(open="%", close=None, kind=DirectiveKind.HEADER_TOGGLE),
)


def directives_wholeLine(table: Tuple[Directive, ...] = DIRECTIVES) -> Tuple[Directive, ...]:
    """Whole-line directives in table order"""
    return tuple(d for d in table if d.is_whole_line)


def directives_inline(table: Tuple[Directive, ...] = DIRECTIVES) -> Tuple[Directive, ...]:
    """Inline (open/close) directives in table order"""
    return tuple(d for d in table if not d.is_whole_line)
