"""HTML rendering of chat messages and small helpers for the chat view."""

from __future__ import annotations

from html import escape
from typing import Iterable, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from .models import ModelConfig
from .server import ChatMessage

MAX_ATTACHMENT_SIZE = 1024 * 1024

_CONTENT_TYPES = {
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}
_FALLBACK_CONTENT_TYPE = "application/octet-stream"

_TASK_MARKERS = {
    "[ ] ": '<input disabled="" type="checkbox"/>\n',
    "[x] ": '<input disabled="" type="checkbox" checked=""/>\n',
    "[X] ": '<input disabled="" type="checkbox" checked=""/>\n',
}


def _task_lists(state: StateCore) -> None:
    """Turn list items that start with "[ ]" or "[x]" into checkboxes."""
    tokens = state.tokens
    for item, para, inline in zip(tokens, tokens[1:], tokens[2:]):
        if (
            item.type != "list_item_open"
            or para.type != "paragraph_open"
            or inline.type != "inline"
            or not inline.children
        ):
            continue
        first = inline.children[0]
        if first.type != "text":
            continue
        marker = first.content[:4]
        checkbox = _TASK_MARKERS.get(marker)
        if checkbox is None:
            continue
        first.content = first.content[4:]
        inline.content = inline.content[4:]
        inline.children.insert(0, Token("html_inline", "", 0, content=checkbox))


def _build_markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    md.core.ruler.push("task_lists", _task_lists)
    return md


_MARKDOWN = _build_markdown()


def markdown_to_html(text: str) -> str:
    """Render Markdown with tables, strikethrough and task lists to HTML."""
    return _MARKDOWN.render(text)


def extract_math(text: str) -> Optional[str]:
    """Return the expression of a "$...$" or "$$...$$" message, else None."""
    if len(text) >= 4 and text.startswith("$$") and text.endswith("$$"):
        return text[2:-2].strip()
    if len(text) >= 2 and text.startswith("$") and text.endswith("$"):
        return text[1:-1].strip()
    return None


def _render_math(expr: str) -> str:
    return f'<span class="math math-inline">\\({escape(expr)}\\)</span>'


def render_message(msg: ChatMessage) -> str:
    """Return the HTML body of one chat message."""
    parts = ['<div class="message-content">']
    if msg.text is not None:
        expr = extract_math(msg.text)
        body = _render_math(expr) if expr is not None else markdown_to_html(msg.text)
        parts.append(f"<div>{body}</div>")
    if msg.attachment is not None:
        parts.append(
            f'<div class="attachment">Attachment: {escape(msg.attachment.filename)}</div>'
        )
    parts.append("</div>")
    return "".join(parts)


def content_type_for(filename: str) -> str:
    """Guess the MIME type of an uploaded file from its extension."""
    extension = filename.rsplit(".", 1)[-1]
    return _CONTENT_TYPES.get(extension, _FALLBACK_CONTENT_TYPE)


def filter_conversations(ids: Iterable[int], query: str) -> list[int]:
    """Keep the conversation ids whose decimal form contains the query."""
    needle = query.lower()
    return [cid for cid in ids if needle in str(cid).lower()]


def selected_model_index(models: Sequence[ModelConfig], name: Optional[str]) -> int:
    """Position of the model with this name, or 0 when there is none."""
    return next(
        (index for index, model in enumerate(models) if model.name == name),
        0,
    )