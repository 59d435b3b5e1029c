"""Inline mark engine shared by both conversion directions.

Serializing wraps a text run in its marks using one fixed nesting order
(:data:`MARK_WRAPPERS`, innermost first). Parsing scans for the
earliest-starting construct among :data:`INLINE_PATTERNS`; ties go to the
pattern listed first. Anything unrecognized stays literal text, so parsing
never fails.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from adfmark.models import (
    AdfModel,
    BorderAttrs,
    BorderMark,
    CodeMark,
    ColorAttrs,
    Emoji,
    EmojiAttrs,
    EmMark,
    LinkAttrs,
    LinkMark,
    Media,
    MediaAttrs,
    Mention,
    MentionAttrs,
    Status,
    StatusAttrs,
    StrikeMark,
    StrongMark,
    SubSupAttrs,
    SubSupMark,
    TextColorMark,
    TextNode,
    UnderlineMark,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from adfmark.models import Mark, Node

logger = logging.getLogger(__name__)

ATTACHMENT_SCHEME = "attachment:"

# ---------------------------------------------------------------------------
# Serialize: text + marks -> markup
# ---------------------------------------------------------------------------


def _wrap_subsup(text: str, mark: SubSupMark) -> str:
    variant = mark.attrs.type
    if variant not in ("sub", "sup"):
        return text
    return f"<{variant}>{text}</{variant}>"


def _wrap_text_color(text: str, mark: TextColorMark) -> str:
    if not mark.attrs.color:
        return text
    return f'<span style="color: {mark.attrs.color}">{text}</span>'


def _wrap_border(text: str, mark: BorderMark) -> str:
    if not mark.attrs.color:
        return text
    return f'<span style="border: 1px solid {mark.attrs.color}">{text}</span>'


def _wrap_link(text: str, mark: LinkMark) -> str:
    if mark.attrs.href is None:
        return text
    return f"[{text}]({mark.attrs.href})"


# Innermost first, outermost (link) last.
MARK_WRAPPERS: tuple[tuple[type[AdfModel], Callable[[str, Any], str]], ...] = (
    (CodeMark, lambda text, _: f"`{text}`"),
    (SubSupMark, _wrap_subsup),
    (StrikeMark, lambda text, _: f"~~{text}~~"),
    (UnderlineMark, lambda text, _: f"<u>{text}</u>"),
    (TextColorMark, _wrap_text_color),
    (BorderMark, _wrap_border),
    (EmMark, lambda text, _: f"*{text}*"),
    (StrongMark, lambda text, _: f"**{text}**"),
    (LinkMark, _wrap_link),
)

_WRAPPED_KINDS = frozenset(kind for kind, _ in MARK_WRAPPERS)


def apply_marks(text: str, marks: Sequence[Mark]) -> str:
    """Wrap ``text`` in the markup for ``marks``.

    Bold plus italic renders as a single ``***text***`` wrap.
    """
    if not marks:
        return text

    present: dict[type[AdfModel], Any] = {}
    for mark in marks:
        if type(mark) not in _WRAPPED_KINDS:
            logger.debug("Ignoring unsupported mark %r", mark.type)
            continue
        present[type(mark)] = mark

    bold_italic = StrongMark in present and EmMark in present
    result = text
    for kind, wrap in MARK_WRAPPERS:
        mark = present.get(kind)
        if mark is None:
            continue
        if bold_italic and kind is EmMark:
            result = f"***{result}***"
        elif bold_italic and kind is StrongMark:
            continue
        else:
            result = wrap(result, mark)
    return result


# ---------------------------------------------------------------------------
# Parse: markup -> inline nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InlinePattern:
    """One inline recognizer: a compiled regex plus the node builder for a match.

    ``nestable`` patterns only produce marked text, so they are also tried
    inside the captured content of other marks.
    """

    name: str
    regex: re.Pattern[str]
    build: Callable[[re.Match[str]], list[Node]]
    nestable: bool = False


def _with_marks(nodes: list[Node], *marks: Mark) -> list[Node]:
    """Add ``marks`` (outermost first) to every text node in ``nodes``."""
    result: list[Node] = []
    for node in nodes:
        if isinstance(node, TextNode):
            have = {mark.type for mark in node.marks}
            outer = [mark for mark in marks if mark.type not in have]
            node = TextNode(text=node.text, marks=[*outer, *node.marks])
        result.append(node)
    return result


def _marked(*marks: Mark, group: int = 1) -> Callable[[re.Match[str]], list[Node]]:
    def build(match: re.Match[str]) -> list[Node]:
        return _with_marks(_tokenize(match.group(group), _NESTED_PATTERNS), *marks)

    return build


def _build_image(match: re.Match[str]) -> list[Node]:
    alt, url = match.group(1), match.group(2)
    if url.startswith(ATTACHMENT_SCHEME):
        attrs = MediaAttrs(id=url[len(ATTACHMENT_SCHEME) :], type="file", alt=alt)
    else:
        attrs = MediaAttrs(url=url, type="external", alt=alt)
    return [Media(attrs=attrs)]


def _build_link(match: re.Match[str]) -> list[Node]:
    link = LinkMark(attrs=LinkAttrs(href=match.group(2)))
    return _with_marks(_tokenize(match.group(1), _NESTED_PATTERNS), link)


def _build_code(match: re.Match[str]) -> list[Node]:
    return [TextNode(text=match.group(1), marks=[CodeMark()])]


def _build_status(match: re.Match[str]) -> list[Node]:
    return [Status(attrs=StatusAttrs(text=match.group(2), color=match.group(1)))]


def _build_text_color(match: re.Match[str]) -> list[Node]:
    mark = TextColorMark(attrs=ColorAttrs(color=match.group(1).strip()))
    return _with_marks(_tokenize(match.group(2), _NESTED_PATTERNS), mark)


def _build_border(match: re.Match[str]) -> list[Node]:
    mark = BorderMark(attrs=BorderAttrs(color=match.group(1).strip()))
    return _with_marks(_tokenize(match.group(2), _NESTED_PATTERNS), mark)


def _build_mention(match: re.Match[str]) -> list[Node]:
    name = match.group(1)
    return [Mention(attrs=MentionAttrs(id=name, text=f"@{name}"))]


def _build_emoji(match: re.Match[str]) -> list[Node]:
    short_name = f":{match.group(1)}:"
    return [Emoji(attrs=EmojiAttrs(shortName=short_name, text=short_name))]


# Priority order: on equal start positions the earlier entry wins.
INLINE_PATTERNS: tuple[InlinePattern, ...] = (
    InlinePattern("image", re.compile(r"!\[([^\]]*)\]\(([^)]+)\)"), _build_image),
    InlinePattern("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), _build_link),
    InlinePattern("code", re.compile(r"`([^`]+)`"), _build_code, nestable=True),
    InlinePattern("status", re.compile(r'<span data-status="([^"]+)">([^<]+)</span>'), _build_status),
    InlinePattern(
        "textColor", re.compile(r'<span style="color:\s*([^"]+)">([^<]+)</span>'), _build_text_color, nestable=True
    ),
    InlinePattern(
        "border",
        re.compile(r'<span style="border:\s*1px solid\s*([^"]+)">([^<]+)</span>'),
        _build_border,
        nestable=True,
    ),
    InlinePattern(
        "subscript",
        re.compile(r"<sub>([^<]+)</sub>"),
        _marked(SubSupMark(attrs=SubSupAttrs(type="sub"))),
        nestable=True,
    ),
    InlinePattern(
        "superscript",
        re.compile(r"<sup>([^<]+)</sup>"),
        _marked(SubSupMark(attrs=SubSupAttrs(type="sup"))),
        nestable=True,
    ),
    InlinePattern("underline", re.compile(r"<u>([^<]+)</u>"), _marked(UnderlineMark()), nestable=True),
    InlinePattern("mention", re.compile(r"@([\w.-]+)\b"), _build_mention),
    InlinePattern("emoji", re.compile(r":([a-z0-9_+-]+):"), _build_emoji),
    InlinePattern(
        "boldItalic", re.compile(r"\*\*\*([^*]+)\*\*\*"), _marked(StrongMark(), EmMark()), nestable=True
    ),
    InlinePattern("bold", re.compile(r"\*\*([^*]+)\*\*"), _marked(StrongMark()), nestable=True),
    InlinePattern("boldAlt", re.compile(r"__([^_]+)__"), _marked(StrongMark()), nestable=True),
    InlinePattern("italic", re.compile(r"\*([^*]+)\*"), _marked(EmMark()), nestable=True),
    InlinePattern("italicAlt", re.compile(r"_([^_]+)_"), _marked(EmMark()), nestable=True),
    InlinePattern("strike", re.compile(r"~~([^~]+)~~"), _marked(StrikeMark()), nestable=True),
)

_NESTED_PATTERNS: tuple[InlinePattern, ...] = tuple(p for p in INLINE_PATTERNS if p.nestable)


def _tokenize(text: str, patterns: Sequence[InlinePattern]) -> list[Node]:
    nodes: list[Node] = []
    pos = 0
    while pos < len(text):
        best: re.Match[str] | None = None
        best_pattern: InlinePattern | None = None
        for pattern in patterns:
            match = pattern.regex.search(text, pos)
            if match is not None and (best is None or match.start() < best.start()):
                best, best_pattern = match, pattern
        if best is None or best_pattern is None:
            nodes.append(TextNode(text=text[pos:]))
            break
        if best.start() > pos:
            nodes.append(TextNode(text=text[pos : best.start()]))
        nodes.extend(best_pattern.build(best))
        pos = best.end()
    return nodes


def parse_inline(text: str) -> list[Node]:
    """Tokenize inline markup into text leaves and inline nodes."""
    return _tokenize(text, INLINE_PATTERNS)
