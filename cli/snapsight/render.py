from __future__ import annotations

from functools import lru_cache

from markdown_it import MarkdownIt
from rich.markdown import Markdown


@lru_cache(maxsize=1)
def _parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("table")


def render_markdown_html(markdown: str) -> str:
    """Convert analysis markdown into an HTML fragment."""
    if not markdown.strip():
        return ""
    return _parser().render(markdown)


def render_markdown_terminal(markdown: str) -> Markdown:
    return Markdown(markdown, code_theme="ansi_dark")
