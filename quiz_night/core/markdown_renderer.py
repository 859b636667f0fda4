"""Markdown rendering for question prompts shown by the API and the Qt console."""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass(slots=True)
class PromptRenderer:
    """Converts prompt markdown into HTML fragments."""

    enable_html: bool = False  # raw HTML in prompts is escaped
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = MarkdownIt("commonmark", {"html": self.enable_html}).enable("strikethrough")

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No question text.</em></p>"
        return self._markdown.render(sanitized)

    def render_hints(self, hints: list[str]) -> list[str]:
        return [self._markdown.renderInline(hint.strip()) for hint in hints if hint.strip()]


renderer = PromptRenderer()
