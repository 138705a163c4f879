"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDPP_ prefix (e.g., MDPP_INTERPRETER_COMMAND=/bin/bash).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDPP_ prefix.

    Examples:
        MDPP_INTERPRETER_COMMAND=/bin/bash
        MDPP_RENDERER_COMMAND=cmark
        MDPP_LITERAL_OPEN_TAG="<pre><code>"
    """

    model_config = SettingsConfigDict(
        env_prefix="MDPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Interpreter session
    interpreter_command: str = Field(
        default="/bin/sh",
        description="Command evaluator spawned once per document",
    )

    statement_terminator: str = Field(
        default=";",
        description="Appended to every statement sent to the interpreter",
    )

    # Downstream renderer
    renderer_command: str = Field(
        default="markdown",
        description="Markdown renderer the output is piped through with --render",
    )

    # Tags emitted by directives
    literal_open_tag: str = Field(default="<pre>", description="Opens a $$...$$ literal block")
    literal_close_tag: str = Field(default="</pre>", description="Closes a $$...$$ literal block")
    title_tag: str = Field(default="title", description="Element name wrapping %title content")
    header_open_tag: str = Field(default="<head>", description="Emitted by a % line opening the header")
    header_close_tag: str = Field(default="</head>", description="Emitted by a % line closing the header")

    def titleTag_make(self, content: str) -> str:
        """
        Wrap title content in the configured title element.

        Example:
            >>> AppSettings().titleTag_make("My Doc")
            '<title>My Doc</title>'
        """
        return f"<{self.title_tag}>{content}</{self.title_tag}>"

    def metaTag_make(self, name: str, value: str) -> str:
        """
        Build a metadata element for a %meta directive.

        Args:
            name: Metadata name (text before the first space)
            value: Metadata content (text after the first space)

        Returns:
            HTML meta element string

        Example:
            >>> AppSettings().metaTag_make("author", "Jane Doe")
            '<meta name="author" content="Jane Doe">'
        """
        return f'<meta name="{name}" content="{value}">'


# Singleton instance - import this in your code
appsettings = AppSettings()
