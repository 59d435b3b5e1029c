"""Markdown-style markup -> ADF tree.

A forward-only line scanner. Every block parser takes the line list and a
start index and returns ``(node, lines_consumed)``; nested lists and
panel/expand bodies recurse with ``depth + 1`` up to ``max_depth``. Parsing
never raises: anything unrecognized ends up as paragraph text.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from adfmark.inline import parse_inline
from adfmark.models import (
    Blockquote,
    BulletList,
    CodeBlock,
    CodeBlockAttrs,
    Document,
    Expand,
    ExpandAttrs,
    HardBreak,
    Heading,
    HeadingAttrs,
    ListItem,
    Media,
    MediaGroup,
    MediaInline,
    MediaSingle,
    MediaSingleAttrs,
    NestedExpand,
    OrderedList,
    Panel,
    PanelAttrs,
    Paragraph,
    Rule,
    Table,
    TableCell,
    TableHeader,
    TableRow,
    TaskItem,
    TaskItemAttrs,
    TaskList,
    TextNode,
)
from adfmark.serializer import DEFAULT_EXPAND_TITLE

if TYPE_CHECKING:
    from collections.abc import Callable

    from adfmark.models import Node

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50
FENCE = "```"

_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_RULE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
_ORDERED_ITEM = re.compile(r"^(\s*)\d+\.(?:\s+(.*))?$")
_UNORDERED_ITEM = re.compile(r"^(\s*)[-*+](?:\s+(.*))?$")
_TASK_ITEM = re.compile(r"^(\s*)-\s+\[([ xX])\](?:\s+(.*))?$")
_TABLE_SEPARATOR = re.compile(r"^[\s\-:]+$")
_TABLE_PIPE = re.compile(r"(?<!\\)\|")
_PANEL_OPEN = re.compile(r'^<div data-panel="([^"]+)">')
_SUMMARY = re.compile(r"<summary>([^<]+)</summary>")


def parse_markdown(text: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    """Parse markup into a document. Total: any string gives a document."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return Document(content=_parse_blocks(lines, 0, max_depth))


def _parse_blocks(lines: list[str], depth: int, max_depth: int) -> list[Node]:
    blocks: list[Node] = []
    i = 0
    while i < len(lines):
        if not lines[i].strip():
            i += 1
            continue
        node, consumed = _parse_block(lines, i, depth, max_depth)
        blocks.append(node)
        i += consumed
    return blocks


def _parse_block(lines: list[str], start: int, depth: int, max_depth: int) -> tuple[Node, int]:
    line = lines[start]
    stripped = line.strip()

    if line.startswith(FENCE):
        return _parse_code_block(lines, start)

    match = _HEADING.match(line)
    if match:
        heading = Heading(attrs=HeadingAttrs(level=len(match.group(1))), content=_inline(match.group(2)))
        return heading, 1

    if _RULE.match(stripped):
        return Rule(), 1

    if stripped.startswith("|"):
        table = _parse_table(lines, start)
        if table is not None:
            return table

    if _PANEL_OPEN.match(line) or line.startswith("<details"):
        if depth < max_depth:
            if line.startswith("<details"):
                return _parse_expand(lines, start, depth, max_depth)
            return _parse_panel(lines, start, depth, max_depth)
        logger.debug("Container at line %d exceeds max depth %d, keeping it as text", start + 1, max_depth)

    if _is_quote(line):
        return _parse_blockquote(lines, start)

    if _TASK_ITEM.match(line):
        return _parse_task_list(lines, start, depth, max_depth)

    if _UNORDERED_ITEM.match(line):
        return _parse_list(lines, start, False, depth, max_depth)

    if _ORDERED_ITEM.match(line):
        return _parse_list(lines, start, True, depth, max_depth)

    return _parse_paragraph(lines, start)


def _starts_block(line: str) -> bool:
    """True when ``line`` opens any block other than a paragraph."""
    stripped = line.strip()
    return bool(
        line.startswith(FENCE)
        or _HEADING.match(line)
        or _RULE.match(stripped)
        or stripped.startswith("|")
        or _PANEL_OPEN.match(line)
        or line.startswith("<details")
        or _is_quote(line)
        or _list_kind(line)
    )


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _inline(text: str) -> list[Node]:
    """Inline content for non-paragraph blocks: images stay inline."""
    return [MediaInline(attrs=node.attrs) if isinstance(node, Media) else node for node in parse_inline(text)]


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------


def _parse_paragraph(lines: list[str], start: int) -> tuple[Node, int]:
    text = lines[start]
    i = start + 1
    while i < len(lines):
        line = lines[i]
        if not line.strip() or _starts_block(line):
            break
        # Two trailing spaces mark a hard break.
        text += "\n" if text.endswith("  ") else " "
        text += line
        i += 1
    return _paragraph(text), i - start


def _paragraph(text: str) -> Node:
    content: list[Node] = []
    segments = text.split("\n")
    for n, segment in enumerate(segments):
        if n < len(segments) - 1:
            content.extend(parse_inline(segment.removesuffix("  ")))
            content.append(HardBreak())
        else:
            content.extend(parse_inline(segment))

    media = [node for node in content if isinstance(node, Media)]
    others = [node for node in content if not isinstance(node, Media)]
    only_media = media and all(isinstance(node, TextNode) and not node.text.strip() for node in others)
    if only_media:
        if len(media) == 1:
            return MediaSingle(attrs=MediaSingleAttrs(layout="center"), content=media)
        if all(node.attrs.type == "file" for node in media):
            return MediaGroup(content=media)

    return Paragraph(content=[MediaInline(attrs=node.attrs) if isinstance(node, Media) else node for node in content])


# ---------------------------------------------------------------------------
# Code blocks and quotes
# ---------------------------------------------------------------------------


def _parse_code_block(lines: list[str], start: int) -> tuple[Node, int]:
    language = lines[start][len(FENCE) :].strip()
    body: list[str] = []
    i = start + 1
    while i < len(lines) and not lines[i].startswith(FENCE):
        body.append(lines[i])
        i += 1

    if i < len(lines):
        consumed = i - start + 1  # closing fence
    else:
        logger.debug("Unclosed code fence at line %d, taking the rest of the input", start + 1)
        consumed = i - start

    code = "\n".join(body)
    block = CodeBlock(
        attrs=CodeBlockAttrs(language=language or None),
        content=[TextNode(text=code)] if code else [],
    )
    return block, consumed


def _is_quote(line: str) -> bool:
    return line.startswith("> ") or line.rstrip() == ">"


def _parse_blockquote(lines: list[str], start: int) -> tuple[Node, int]:
    paragraphs: list[list[str]] = [[]]
    i = start
    while i < len(lines) and _is_quote(lines[i]):
        body = lines[i][2:] if lines[i].startswith("> ") else ""
        if body.strip():
            paragraphs[-1].append(body)
        elif paragraphs[-1]:
            paragraphs.append([])
        i += 1

    content: list[Node] = [Paragraph(content=_inline("\n".join(p))) for p in paragraphs if p]
    return Blockquote(content=content), i - start


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def _list_kind(line: str) -> str | None:
    if _TASK_ITEM.match(line):
        return "task"
    if _UNORDERED_ITEM.match(line):
        return "bullet"
    if _ORDERED_ITEM.match(line):
        return "ordered"
    return None


def _parse_list(lines: list[str], start: int, ordered: bool, depth: int, max_depth: int) -> tuple[Node, int]:
    pattern = _ORDERED_ITEM if ordered else _UNORDERED_ITEM
    base = _indent(lines[start])
    items: list[Node] = []
    i = start

    while i < len(lines):
        line = lines[i]
        if _indent(line) != base:
            break
        match = pattern.match(line)
        if match is None or _TASK_ITEM.match(line):
            break

        content: list[Node] = [Paragraph(content=_inline(match.group(2) or ""))]
        i += 1

        # Deeper list lines belong to this item, whatever their marker.
        while i < len(lines) and _indent(lines[i]) > base:
            kind = _list_kind(lines[i])
            if kind is None:
                break
            if depth >= max_depth:
                logger.debug("List nesting at line %d exceeds max depth %d", i + 1, max_depth)
                break
            if kind == "task":
                sublist, consumed = _parse_task_list(lines, i, depth + 1, max_depth)
            else:
                sublist, consumed = _parse_list(lines, i, kind == "ordered", depth + 1, max_depth)
            content.append(sublist)
            i += consumed

        items.append(ListItem(content=content))

    node: Node = OrderedList(content=items) if ordered else BulletList(content=items)
    return node, i - start


def _parse_task_list(lines: list[str], start: int, depth: int, max_depth: int) -> tuple[Node, int]:
    base = _indent(lines[start])
    content: list[Node] = []
    i = start

    while i < len(lines):
        line = lines[i]
        indent = _indent(line)
        match = _TASK_ITEM.match(line)
        if match is None or indent < base:
            break
        if indent > base:
            if not content or depth >= max_depth:
                break
            nested, consumed = _parse_task_list(lines, i, depth + 1, max_depth)
            content.append(nested)
            i += consumed
            continue

        state = "DONE" if match.group(2) in ("x", "X") else "TODO"
        content.append(TaskItem(attrs=TaskItemAttrs(state=state), content=_inline(match.group(3) or "")))
        i += 1

    return TaskList(content=content), i - start


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _split_cells(row: str) -> list[str]:
    inner = row[1:]
    if inner.endswith("|") and not inner.endswith("\\|"):
        inner = inner[:-1]
    return [cell.strip().replace("\\|", "|") for cell in _TABLE_PIPE.split(inner)]


def _is_separator(cells: list[str]) -> bool:
    return any("-" in cell for cell in cells) and all(not cell or _TABLE_SEPARATOR.match(cell) for cell in cells)


def _parse_table(lines: list[str], start: int) -> tuple[Node, int] | None:
    rows: list[list[str]] = []
    i = start
    while i < len(lines):
        row = lines[i].strip()
        if not row.startswith("|"):
            break
        cells = _split_cells(row)
        if not _is_separator(cells):
            rows.append(cells)
        i += 1

    if not rows:
        return None

    header = TableRow(content=[TableHeader(content=[Paragraph(content=_inline(cell))]) for cell in rows[0]])
    body = [TableRow(content=[TableCell(content=[Paragraph(content=_inline(cell))]) for cell in row]) for row in rows[1:]]
    return Table(content=[header, *body]), i - start


# ---------------------------------------------------------------------------
# Panels and expands
# ---------------------------------------------------------------------------


def _container_body(
    lines: list[str], body_start: int, is_open: Callable[[str], bool], close_tag: str
) -> tuple[list[str], int]:
    """Collect lines up to the matching close tag.

    Returns the body and the index just past the close tag (or the end of
    input when the container is never closed).
    """
    nesting = 0
    body: list[str] = []
    i = body_start
    while i < len(lines):
        line = lines[i]
        if is_open(line):
            nesting += 1
        elif line.startswith(close_tag):
            if nesting == 0:
                return body, i + 1
            nesting -= 1
        body.append(line)
        i += 1
    logger.debug("Unclosed %s container, taking the rest of the input", close_tag)
    return body, i


def _parse_panel(lines: list[str], start: int, depth: int, max_depth: int) -> tuple[Node, int]:
    match = _PANEL_OPEN.match(lines[start])
    panel_type = match.group(1) if match else PanelAttrs().panelType
    body, end = _container_body(lines, start + 1, lambda line: bool(_PANEL_OPEN.match(line)), "</div>")
    panel = Panel(attrs=PanelAttrs(panelType=panel_type), content=_parse_blocks(body, depth + 1, max_depth))
    return panel, end - start


def _parse_expand(lines: list[str], start: int, depth: int, max_depth: int) -> tuple[Node, int]:
    first = lines[start]
    title = DEFAULT_EXPAND_TITLE
    body_start = start + 1

    match = _SUMMARY.search(first)
    if match:
        title = match.group(1)
    elif body_start < len(lines):
        match = _SUMMARY.search(lines[body_start])
        if match:
            title = match.group(1)
            body_start += 1

    body, end = _container_body(lines, body_start, lambda line: line.startswith("<details"), "</details>")
    content = _parse_blocks(body, depth + 1, max_depth)
    attrs = ExpandAttrs(title=title)
    node: Node = NestedExpand(attrs=attrs, content=content) if 'class="nested"' in first else Expand(attrs=attrs, content=content)
    return node, end - start
