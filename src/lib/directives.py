"""
Directive handlers and the per-line dispatcher for mdpp

Each handler turns a directive's content into its expansion text. The
dispatcher walks a line, matches the directive table in priority order and
stitches handler output together with the untouched text around it.
"""

from typing import Callable, Dict, List, Optional, Tuple

from ..config import appsettings
from ..models.directives import (
    Directive,
    DirectiveKind,
    DIRECTIVES,
    directives_inline,
    directives_wholeLine,
)
from ..models.state import ProcessorState
from .exceptions import MalformedMetaError
from .log import LOG
from .parser import content_extract, escapes_process


Handler = Callable[[str, ProcessorState], str]


class DirectiveRegistry:
    """
    Registry of directive handlers

    Maps every DirectiveKind to the function that expands it. All kinds must
    be bound; a missing handler is a construction error rather than a
    silently ignored directive.
    """

    def __init__(self) -> None:
        """Initialize the registry and register all built-in handlers"""
        self.handlers: Dict[DirectiveKind, Handler] = {}
        self.substitutionDirectives_register()
        self.metadataDirectives_register()

        unbound = [kind.value for kind in DirectiveKind if kind not in self.handlers]
        if unbound:
            raise TypeError(f"No handler registered for directive kinds: {', '.join(unbound)}")

    def register(self, kind: DirectiveKind, handler: Handler) -> None:
        """Bind a handler to a directive kind, replacing any previous one"""
        self.handlers[kind] = handler

    def get(self, kind: DirectiveKind) -> Handler:
        """Get the handler for a directive kind"""
        return self.handlers[kind]

    def substitutionDirectives_register(self) -> None:
        """Register inline directives that substitute text in place"""

        def shell_handler(content: str, state: ProcessorState) -> str:
            """Handle $(...) - evaluate content, emit the first output line"""
            return state.session.evaluate(content)

        def literal_handler(content: str, state: ProcessorState) -> str:
            """Handle $$...$$ - wrap content verbatim in the literal tag pair"""
            return f"{appsettings.literal_open_tag}{content}{appsettings.literal_close_tag}"

        self.register(DirectiveKind.SHELL, shell_handler)
        self.register(DirectiveKind.LITERAL_BLOCK, literal_handler)

    def metadataDirectives_register(self) -> None:
        """
        Register whole-line metadata directives

        %title and %meta also bind interpreter variables, so later $(...)
        substitutions can refer to them ($title, $author, ...).
        """

        def title_handler(content: str, state: ProcessorState) -> str:
            """Handle %title - emit title element, bind $title"""
            state.session.assign("title", content)
            return appsettings.titleTag_make(content)

        def meta_handler(content: str, state: ProcessorState) -> str:
            """Handle %meta name value - emit meta element, bind $name"""
            name, separator, value = content.partition(' ')
            if not separator:
                raise MalformedMetaError(
                    f"Meta directive '%meta {content}' needs a name and a value separated by a space"
                )
            state.session.assign(name, value)
            return appsettings.metaTag_make(name, value)

        def header_handler(content: str, state: ProcessorState) -> str:
            """Handle % - toggle the header; trailing text is discarded"""
            state.header_open = not state.header_open
            if state.header_open:
                return appsettings.header_open_tag
            return appsettings.header_close_tag

        self.register(DirectiveKind.TITLE, title_handler)
        self.register(DirectiveKind.META, meta_handler)
        self.register(DirectiveKind.HEADER_TOGGLE, header_handler)


class Dispatcher:
    """
    Matches directives within one line and applies their handlers

    Handles:
    - Whole-line directives (%title, %meta, %) at the start of the line
    - Code-block lines emitted verbatim
    - Inline directives ($(...), $$...$$) anywhere in the line
    - Backslash before a known delimiter, emitting the delimiter literally
    """

    def __init__(
        self,
        registry: Optional[DirectiveRegistry] = None,
        table: Tuple[Directive, ...] = DIRECTIVES,
    ) -> None:
        """
        Initialize dispatcher

        Args:
            registry: Handler registry (default: built-in handlers)
            table: Priority-ordered directive table
        """
        self.registry = registry or DirectiveRegistry()
        self.table = table
        self.whole_line = directives_wholeLine(table)
        self.inline = directives_inline(table)

        # Every open and close, in table order, for \-escape recognition
        self.delimiters: List[str] = []
        for directive in table:
            self.delimiters.append(directive.open)
            if directive.close is not None:
                self.delimiters.append(directive.close)

    def line_dispatch(self, line: str, state: ProcessorState) -> str:
        """
        Expand all directives in one line

        Args:
            line: Right-trimmed source line
            state: Processor state (code-block flag already updated)

        Returns:
            Expanded line, without a line terminator

        Raises:
            UnclosedDirectiveError: If an inline directive has no close
            MalformedMetaError: If a %meta line has no value
            InterpreterError: If evaluating a directive fails
        """
        for directive in self.whole_line:
            if line.startswith(directive.open):
                content = line[len(directive.open):].rstrip()
                LOG(f"whole-line {directive.kind.value}: {content!r}", level=3)
                return self.registry.get(directive.kind)(content, state)

        if state.in_code_block:
            return line

        return self.inline_dispatch(line, state)

    def inline_dispatch(self, text: str, state: ProcessorState) -> str:
        """Expand inline directives and escaped delimiters in text"""
        output = []
        pos = 0

        while pos < len(text):
            directive = self.directive_match(text, pos)
            if directive is not None:
                pos += len(directive.open)
                span = content_extract(directive, text[pos:])
                content = escapes_process(span.content)
                LOG(f"inline {directive.kind.value}: {content!r}", level=3)
                output.append(self.registry.get(directive.kind)(content, state))
                pos += span.end + len(directive.close)
                continue

            char = text[pos]
            pos += 1
            if char == '\\':
                delimiter = self.delimiter_match(text, pos)
                if delimiter is not None:
                    output.append(delimiter)
                    pos += len(delimiter)
                    continue
            output.append(char)

        return ''.join(output)

    def directive_match(self, text: str, pos: int) -> Optional[Directive]:
        """First inline directive whose open starts at pos, in table order"""
        for directive in self.inline:
            if text.startswith(directive.open, pos):
                return directive
        return None

    def delimiter_match(self, text: str, pos: int) -> Optional[str]:
        """First known delimiter (open or close of any directive) starting at pos"""
        for delimiter in self.delimiters:
            if text.startswith(delimiter, pos):
                return delimiter
        return None
