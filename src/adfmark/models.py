"""Pydantic models for the Atlassian Document Format (ADF) tree.

Every node kind is its own model, discriminated on the wire tag ``type``.
Kinds we don't know about validate as :class:`UnknownNode` (and marks as
:class:`UnknownMark`) so that backend additions never break decoding.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


class AdfModel(BaseModel):
    """Base model for all ADF values.

    - extra="ignore": resilient to API additions (new attrs don't break us)
    - frozen=True: trees are immutable values, built fresh by each conversion
    - null fields on the wire fall back to the field default
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class AttrsModel(AdfModel):
    """Base for ``attrs`` payloads.

    A mistyped attribute (``"level": "two"``) degrades to the field default
    instead of failing the whole document, and so does a non-object ``attrs``.
    """

    @model_validator(mode="before")
    @classmethod
    def _require_mapping(cls, data: Any) -> Any:
        if isinstance(data, (dict, AttrsModel)):
            return data
        logger.debug("Ignoring non-object attrs %r on %s", data, cls.__name__)
        return {}

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_mismatch(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            logger.debug("Ignoring %s.%s=%r", cls.__name__, info.field_name, value)
            return cls.model_fields[str(info.field_name)].get_default(call_default_factory=True)


def _mapping_or_empty(value: Any) -> Any:
    if isinstance(value, dict):
        return value
    logger.debug("Ignoring non-object attrs %r", value)
    return {}


# Free-form attrs of kinds without a dedicated model.
AttrsDict = Annotated[dict[str, Any], BeforeValidator(_mapping_or_empty)]


# ---------------------------------------------------------------------------
# Marks
# ---------------------------------------------------------------------------


class StrongMark(AdfModel):
    type: Literal["strong"] = "strong"


class EmMark(AdfModel):
    type: Literal["em"] = "em"


class CodeMark(AdfModel):
    type: Literal["code"] = "code"


class StrikeMark(AdfModel):
    type: Literal["strike"] = "strike"


class UnderlineMark(AdfModel):
    type: Literal["underline"] = "underline"


class LinkAttrs(AttrsModel):
    href: str | None = None
    title: str | None = None


class LinkMark(AdfModel):
    type: Literal["link"] = "link"
    attrs: LinkAttrs = LinkAttrs()


class SubSupAttrs(AttrsModel):
    type: str = "sub"  # "sub" or "sup"


class SubSupMark(AdfModel):
    type: Literal["subsup"] = "subsup"
    attrs: SubSupAttrs = SubSupAttrs()


class ColorAttrs(AttrsModel):
    color: str | None = None


class TextColorMark(AdfModel):
    type: Literal["textColor"] = "textColor"
    attrs: ColorAttrs = ColorAttrs()


class BorderAttrs(AttrsModel):
    color: str | None = None
    size: int | None = None


class BorderMark(AdfModel):
    type: Literal["border"] = "border"
    attrs: BorderAttrs = BorderAttrs()


class UnknownMark(AdfModel):
    """Mark kind this library does not render (alignment, annotation, ...)."""

    type: str = Field(min_length=1)
    attrs: AttrsDict = {}


# ---------------------------------------------------------------------------
# Node attributes
# ---------------------------------------------------------------------------


class HeadingAttrs(AttrsModel):
    level: int = 1


class OrderedListAttrs(AttrsModel):
    order: int = 1


class TaskListAttrs(AttrsModel):
    localId: str | None = None


class TaskItemAttrs(AttrsModel):
    state: str = "TODO"  # "TODO" or "DONE"
    localId: str | None = None


class CodeBlockAttrs(AttrsModel):
    language: str | None = None


class PanelAttrs(AttrsModel):
    panelType: str = "info"


class ExpandAttrs(AttrsModel):
    title: str | None = None


class MediaAttrs(AttrsModel):
    id: str | None = None
    type: str | None = None  # "file", "link" or "external"
    collection: str | None = None
    url: str | None = None
    src: str | None = None
    alt: str | None = None
    width: int | float | None = None
    height: int | float | None = None


class MediaSingleAttrs(AttrsModel):
    layout: str | None = None
    width: int | float | None = None


class EmojiAttrs(AttrsModel):
    shortName: str | None = None
    text: str | None = None
    id: str | None = None


class MentionAttrs(AttrsModel):
    id: str | None = None
    text: str | None = None
    accessLevel: str | None = None


class DateAttrs(AttrsModel):
    timestamp: str | int | None = None


class StatusAttrs(AttrsModel):
    text: str | None = None
    color: str | None = None
    localId: str | None = None


class InlineCardAttrs(AttrsModel):
    url: str | None = None
    data: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Inline nodes
# ---------------------------------------------------------------------------


class TextNode(AdfModel):
    type: Literal["text"] = "text"
    text: str = ""
    marks: list[Mark] = []


class HardBreak(AdfModel):
    type: Literal["hardBreak"] = "hardBreak"


class Emoji(AdfModel):
    type: Literal["emoji"] = "emoji"
    attrs: EmojiAttrs = EmojiAttrs()


class Mention(AdfModel):
    type: Literal["mention"] = "mention"
    attrs: MentionAttrs = MentionAttrs()


class Date(AdfModel):
    type: Literal["date"] = "date"
    attrs: DateAttrs = DateAttrs()


class Status(AdfModel):
    type: Literal["status"] = "status"
    attrs: StatusAttrs = StatusAttrs()


class InlineCard(AdfModel):
    type: Literal["inlineCard"] = "inlineCard"
    attrs: InlineCardAttrs = InlineCardAttrs()


class Media(AdfModel):
    type: Literal["media"] = "media"
    attrs: MediaAttrs = MediaAttrs()


class MediaInline(AdfModel):
    type: Literal["mediaInline"] = "mediaInline"
    attrs: MediaAttrs = MediaAttrs()


# ---------------------------------------------------------------------------
# Block nodes
# ---------------------------------------------------------------------------


class Paragraph(AdfModel):
    type: Literal["paragraph"] = "paragraph"
    content: list[Node] = []


class Heading(AdfModel):
    type: Literal["heading"] = "heading"
    attrs: HeadingAttrs = HeadingAttrs()
    content: list[Node] = []


class BulletList(AdfModel):
    type: Literal["bulletList"] = "bulletList"
    content: list[Node] = []


class OrderedList(AdfModel):
    type: Literal["orderedList"] = "orderedList"
    attrs: OrderedListAttrs = OrderedListAttrs()
    content: list[Node] = []


class ListItem(AdfModel):
    type: Literal["listItem"] = "listItem"
    content: list[Node] = []


class TaskList(AdfModel):
    type: Literal["taskList"] = "taskList"
    attrs: TaskListAttrs = TaskListAttrs()
    content: list[Node] = []


class TaskItem(AdfModel):
    type: Literal["taskItem"] = "taskItem"
    attrs: TaskItemAttrs = TaskItemAttrs()
    content: list[Node] = []


class CodeBlock(AdfModel):
    type: Literal["codeBlock"] = "codeBlock"
    attrs: CodeBlockAttrs = CodeBlockAttrs()
    content: list[Node] = []


class Blockquote(AdfModel):
    type: Literal["blockquote"] = "blockquote"
    content: list[Node] = []


class Rule(AdfModel):
    type: Literal["rule"] = "rule"


class Table(AdfModel):
    type: Literal["table"] = "table"
    content: list[Node] = []


class TableRow(AdfModel):
    type: Literal["tableRow"] = "tableRow"
    content: list[Node] = []


class TableHeader(AdfModel):
    type: Literal["tableHeader"] = "tableHeader"
    content: list[Node] = []


class TableCell(AdfModel):
    type: Literal["tableCell"] = "tableCell"
    content: list[Node] = []


class Panel(AdfModel):
    type: Literal["panel"] = "panel"
    attrs: PanelAttrs = PanelAttrs()
    content: list[Node] = []


class Expand(AdfModel):
    type: Literal["expand"] = "expand"
    attrs: ExpandAttrs = ExpandAttrs()
    content: list[Node] = []


class NestedExpand(AdfModel):
    type: Literal["nestedExpand"] = "nestedExpand"
    attrs: ExpandAttrs = ExpandAttrs()
    content: list[Node] = []


class MediaSingle(AdfModel):
    type: Literal["mediaSingle"] = "mediaSingle"
    attrs: MediaSingleAttrs = MediaSingleAttrs()
    content: list[Node] = []


class MediaGroup(AdfModel):
    type: Literal["mediaGroup"] = "mediaGroup"
    content: list[Node] = []


class UnknownNode(AdfModel):
    """Node kind this library has no dedicated model for."""

    type: str = Field(min_length=1)
    content: list[Node] = []
    text: str | None = None
    marks: list[Mark] = []
    attrs: AttrsDict = {}


# ---------------------------------------------------------------------------
# Discriminated unions
# ---------------------------------------------------------------------------

MARK_TYPES: dict[str, type[AdfModel]] = {
    "strong": StrongMark,
    "em": EmMark,
    "code": CodeMark,
    "strike": StrikeMark,
    "underline": UnderlineMark,
    "link": LinkMark,
    "subsup": SubSupMark,
    "textColor": TextColorMark,
    "border": BorderMark,
}

INLINE_TYPES: dict[str, type[AdfModel]] = {
    "text": TextNode,
    "hardBreak": HardBreak,
    "emoji": Emoji,
    "mention": Mention,
    "date": Date,
    "status": Status,
    "inlineCard": InlineCard,
    "media": Media,
    "mediaInline": MediaInline,
}

BLOCK_TYPES: dict[str, type[AdfModel]] = {
    "paragraph": Paragraph,
    "heading": Heading,
    "bulletList": BulletList,
    "orderedList": OrderedList,
    "listItem": ListItem,
    "taskList": TaskList,
    "taskItem": TaskItem,
    "codeBlock": CodeBlock,
    "blockquote": Blockquote,
    "rule": Rule,
    "table": Table,
    "tableRow": TableRow,
    "tableHeader": TableHeader,
    "tableCell": TableCell,
    "panel": Panel,
    "expand": Expand,
    "nestedExpand": NestedExpand,
    "mediaSingle": MediaSingle,
    "mediaGroup": MediaGroup,
}


def _tag(value: Any, known: dict[str, type[AdfModel]] | set[str]) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if isinstance(kind, str) and kind in known and not isinstance(value, (UnknownNode, UnknownMark)):
        return kind
    return "unknown"


_NODE_KINDS = {*INLINE_TYPES, *BLOCK_TYPES}


def _mark_tag(value: Any) -> str:
    return _tag(value, MARK_TYPES)


def _node_tag(value: Any) -> str:
    return _tag(value, _NODE_KINDS)


Mark = Annotated[
    Union[
        Annotated[StrongMark, Tag("strong")],
        Annotated[EmMark, Tag("em")],
        Annotated[CodeMark, Tag("code")],
        Annotated[StrikeMark, Tag("strike")],
        Annotated[UnderlineMark, Tag("underline")],
        Annotated[LinkMark, Tag("link")],
        Annotated[SubSupMark, Tag("subsup")],
        Annotated[TextColorMark, Tag("textColor")],
        Annotated[BorderMark, Tag("border")],
        Annotated[UnknownMark, Tag("unknown")],
    ],
    Discriminator(_mark_tag),
]

Node = Annotated[
    Union[
        Annotated[TextNode, Tag("text")],
        Annotated[HardBreak, Tag("hardBreak")],
        Annotated[Emoji, Tag("emoji")],
        Annotated[Mention, Tag("mention")],
        Annotated[Date, Tag("date")],
        Annotated[Status, Tag("status")],
        Annotated[InlineCard, Tag("inlineCard")],
        Annotated[Media, Tag("media")],
        Annotated[MediaInline, Tag("mediaInline")],
        Annotated[Paragraph, Tag("paragraph")],
        Annotated[Heading, Tag("heading")],
        Annotated[BulletList, Tag("bulletList")],
        Annotated[OrderedList, Tag("orderedList")],
        Annotated[ListItem, Tag("listItem")],
        Annotated[TaskList, Tag("taskList")],
        Annotated[TaskItem, Tag("taskItem")],
        Annotated[CodeBlock, Tag("codeBlock")],
        Annotated[Blockquote, Tag("blockquote")],
        Annotated[Rule, Tag("rule")],
        Annotated[Table, Tag("table")],
        Annotated[TableRow, Tag("tableRow")],
        Annotated[TableHeader, Tag("tableHeader")],
        Annotated[TableCell, Tag("tableCell")],
        Annotated[Panel, Tag("panel")],
        Annotated[Expand, Tag("expand")],
        Annotated[NestedExpand, Tag("nestedExpand")],
        Annotated[MediaSingle, Tag("mediaSingle")],
        Annotated[MediaGroup, Tag("mediaGroup")],
        Annotated[UnknownNode, Tag("unknown")],
    ],
    Discriminator(_node_tag),
]


class Document(AdfModel):
    """Root of an ADF tree."""

    type: str = "doc"
    version: int = 1
    content: list[Node] = []

    def to_wire(self) -> dict[str, Any]:
        """Dump to the wire dict, leaving out nulls and empty optional fields."""
        data = self.model_dump(mode="json", exclude_none=True)
        data["content"] = [_prune(node) for node in data["content"]]
        return data


_OPTIONAL_KEYS = frozenset({"content", "marks", "attrs"})


def _prune(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if not (k in _OPTIONAL_KEYS and not v)}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


def is_block(node: AdfModel) -> bool:
    """True for block-level node kinds (and unknown kinds, which may hold blocks)."""
    return isinstance(node, (UnknownNode, *BLOCK_TYPES.values()))


for _model in (
    TextNode,
    UnknownNode,
    *BLOCK_TYPES.values(),
    Document,
):
    _model.model_rebuild()
