"""Markdown-to-HTML conversion with an allow-list sanitizer."""

from __future__ import annotations

import markdown
import nh3

ALLOWED_TAGS = frozenset(
    {"p", "br", "em", "strong", "i", "b", "ul", "ol", "li", "h1", "h2", "h3", "h4", "h5", "h6"}
)


def render_safe_html(text: str) -> str:
    """Render the model's markdown answer and strip everything outside ALLOWED_TAGS.

    No attributes survive. ``<script>``/``<style>`` bodies are dropped with
    their tags; other disallowed tags are unwrapped and keep their text.
    """
    if not text:
        return ""
    unsafe_html = markdown.markdown(text, extensions=["nl2br", "sane_lists"])
    return nh3.clean(
        unsafe_html,
        tags=set(ALLOWED_TAGS),
        attributes={},
        strip_comments=True,
    ).strip()
