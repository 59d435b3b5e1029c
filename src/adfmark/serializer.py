"""ADF tree -> markdown-style markup."""

from __future__ import annotations

import logging
from itertools import groupby
from typing import TYPE_CHECKING, Any

from adfmark.inline import ATTACHMENT_SCHEME, apply_marks
from adfmark.models import (
    Blockquote,
    BulletList,
    CodeBlock,
    Date,
    Emoji,
    Expand,
    HardBreak,
    Heading,
    InlineCard,
    ListItem,
    Media,
    MediaGroup,
    MediaInline,
    MediaSingle,
    Mention,
    NestedExpand,
    OrderedList,
    Panel,
    Paragraph,
    Rule,
    Status,
    Table,
    TableHeader,
    TableRow,
    TaskItem,
    TaskList,
    TextNode,
    UnknownNode,
    is_block,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from adfmark.models import Document, Node

logger = logging.getLogger(__name__)

INDENT = "  "
HARD_BREAK = "  \n"
DEFAULT_EXPAND_TITLE = "Details"


def render_document(doc: Document) -> str:
    """Render a whole document; top-level blocks are separated by a blank line."""
    return _join_blocks(doc.content).strip()


def render_node(node: Node, depth: int = 0) -> str:
    """Render one node. ``depth`` is the list nesting level."""
    renderer = _RENDERERS.get(type(node))
    if renderer is None:
        return _render_unknown(node, depth)
    return renderer(node, depth)


def _join_blocks(nodes: Sequence[Node]) -> str:
    # Stray inline siblings at block level share one line.
    parts: list[str] = []
    for block, group in groupby(nodes, key=is_block):
        if block:
            parts.extend(render_node(node) for node in group)
        else:
            parts.append(_render_inline(list(group)))
    return "\n\n".join(part for part in parts if part.strip())


def _render_inline(nodes: Sequence[Node]) -> str:
    return "".join(render_node(node) for node in nodes)


def _render_text(node: TextNode, depth: int) -> str:
    return apply_marks(node.text, node.marks)


def _render_paragraph(node: Paragraph, depth: int) -> str:
    return _render_inline(node.content)


def _render_heading(node: Heading, depth: int) -> str:
    level = min(max(node.attrs.level, 1), 6)
    return "#" * level + " " + _render_inline(node.content)


def _render_list(node: BulletList | OrderedList, depth: int) -> str:
    ordered = isinstance(node, OrderedList)
    indent = INDENT * depth
    lines: list[str] = []
    number = 0
    for item in node.content:
        if not isinstance(item, ListItem):
            continue
        number += 1
        prefix = f"{number}. " if ordered else "- "
        lines.append(indent + prefix + _render_list_item(item, depth))
    return "\n".join(lines)


def _render_list_item(node: ListItem, depth: int) -> str:
    out = ""
    for i, child in enumerate(node.content):
        if isinstance(child, (BulletList, OrderedList, TaskList)):
            out += "\n" + render_node(child, depth + 1)
        elif i > 0:
            out += " " + render_node(child, depth + 1)
        else:
            out += render_node(child, depth + 1)
    return out


def _render_task_list(node: TaskList, depth: int) -> str:
    indent = INDENT * depth
    lines: list[str] = []
    for item in node.content:
        if isinstance(item, TaskList):
            lines.append(_render_task_list(item, depth + 1))
        elif isinstance(item, TaskItem):
            checkbox = "- [x] " if item.attrs.state == "DONE" else "- [ ] "
            lines.append(indent + checkbox + _render_inline(item.content))
    return "\n".join(lines)


def _render_code_block(node: CodeBlock, depth: int) -> str:
    language = node.attrs.language or ""
    code = "".join(child.text for child in node.content if isinstance(child, TextNode))
    return f"```{language}\n{code}\n```"


def _render_blockquote(node: Blockquote, depth: int) -> str:
    body = _join_blocks(node.content).strip()
    return "\n".join(f"> {line}" if line else ">" for line in body.split("\n"))


def _render_rule(node: Rule, depth: int) -> str:
    return "---"


def _render_hard_break(node: HardBreak, depth: int) -> str:
    return HARD_BREAK


def _cell_text(cell: Node) -> str:
    parts = [render_node(child) for child in getattr(cell, "content", [])]
    text = " ".join(part.strip() for part in parts if part.strip())
    return text.replace("\n", " ").replace("|", "\\|")


def _render_table(node: Table, depth: int) -> str:
    header: list[str] = []
    rows: list[list[str]] = []
    for row in node.content:
        if not isinstance(row, TableRow):
            continue
        cells = [_cell_text(cell) for cell in row.content]
        if not cells:
            continue
        if not header and any(isinstance(cell, TableHeader) for cell in row.content):
            header = cells
        else:
            rows.append(cells)

    lines: list[str] = []
    if header:
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + " --- |" * len(header))
    for cells in rows:
        lines.append("| " + " | ".join(cells) + " |")
    return "\n".join(lines)


def _render_panel(node: Panel, depth: int) -> str:
    body = _join_blocks(node.content)
    return f'<div data-panel="{node.attrs.panelType}">\n\n{body}\n\n</div>'


def _render_expand(node: Expand | NestedExpand, depth: int) -> str:
    title = node.attrs.title or DEFAULT_EXPAND_TITLE
    open_tag = 'details class="nested"' if isinstance(node, NestedExpand) else "details"
    body = _join_blocks(node.content)
    return f"<{open_tag}>\n<summary>{title}</summary>\n\n{body}\n</details>"


def _render_media(node: Media | MediaInline, depth: int) -> str:
    attrs = node.attrs
    if attrs.url:
        url = attrs.url
    elif attrs.src:
        url = attrs.src
    elif attrs.id:
        url = ATTACHMENT_SCHEME + attrs.id
    else:
        return ""
    return f"![{attrs.alt or ''}]({url})"


def _render_media_single(node: MediaSingle, depth: int) -> str:
    for child in node.content:
        if isinstance(child, Media):
            return _render_media(child, depth)
    return ""


def _render_media_group(node: MediaGroup, depth: int) -> str:
    images = [_render_media(child, depth) for child in node.content if isinstance(child, Media)]
    return " ".join(image for image in images if image)


def _render_emoji(node: Emoji, depth: int) -> str:
    return node.attrs.shortName or node.attrs.text or ""


def _render_mention(node: Mention, depth: int) -> str:
    name = node.attrs.text or node.attrs.id
    if not name:
        return "@user"
    return "@" + name.removeprefix("@")


def _render_date(node: Date, depth: int) -> str:
    if node.attrs.timestamp is None:
        return ""
    return str(node.attrs.timestamp)


def _render_status(node: Status, depth: int) -> str:
    color = node.attrs.color or "neutral"
    text = node.attrs.text or "Status"
    return f'<span data-status="{color}">{text}</span>'


def _render_inline_card(node: InlineCard, depth: int) -> str:
    url = node.attrs.url
    if not url:
        return ""
    title = url
    data = node.attrs.data or {}
    if isinstance(data.get("title"), str):
        title = data["title"]
    return f"[{title}]({url})"


def _render_unknown(node: Any, depth: int) -> str:
    kind = getattr(node, "type", "?")
    logger.debug("No renderer for node type %r, extracting text", kind)
    out = ""
    if isinstance(node, UnknownNode) and node.text:
        out = node.text
    for child in getattr(node, "content", []):
        out += render_node(child, depth)
    return out


_RENDERERS: dict[type, Callable[[Any, int], str]] = {
    TextNode: _render_text,
    Paragraph: _render_paragraph,
    Heading: _render_heading,
    BulletList: _render_list,
    OrderedList: _render_list,
    ListItem: _render_list_item,
    TaskList: _render_task_list,
    CodeBlock: _render_code_block,
    Blockquote: _render_blockquote,
    Rule: _render_rule,
    HardBreak: _render_hard_break,
    Table: _render_table,
    Panel: _render_panel,
    Expand: _render_expand,
    NestedExpand: _render_expand,
    Media: _render_media,
    MediaInline: _render_media,
    MediaSingle: _render_media_single,
    MediaGroup: _render_media_group,
    Emoji: _render_emoji,
    Mention: _render_mention,
    Date: _render_date,
    Status: _render_status,
    InlineCard: _render_inline_card,
}
