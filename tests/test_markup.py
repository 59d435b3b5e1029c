"""Tests for the ADF <-> markdown wire boundary."""

from __future__ import annotations

import json

import pytest

from adfmark.errors import DecodeError
from adfmark.markup import (
    adf_to_markdown,
    decode_document,
    encode_document,
    markdown_to_adf,
    markdown_to_adf_json,
)
from adfmark.models import Document, Paragraph, TextNode
from tests.conftest import NESTED_BULLET_ADF, RICH_ADF, doc, paragraph, text


class TestDecodeDocument:
    @pytest.mark.parametrize("raw", [None, "", "   ", "null", b"", b"null"])
    def test_empty_inputs(self, raw: str | bytes | None) -> None:
        assert decode_document(raw) == Document()

    def test_json_string(self) -> None:
        d = decode_document(json.dumps(NESTED_BULLET_ADF))
        assert d.to_wire() == NESTED_BULLET_ADF

    def test_bytes(self) -> None:
        d = decode_document(json.dumps(doc(paragraph(text("hé")))).encode())
        assert d.content == [Paragraph(content=[TextNode(text="hé")])]

    def test_mapping(self) -> None:
        assert decode_document(NESTED_BULLET_ADF).to_wire() == NESTED_BULLET_ADF

    def test_document_passes_through(self) -> None:
        d = Document()
        assert decode_document(d) is d

    def test_invalid_json(self) -> None:
        with pytest.raises(DecodeError, match="Invalid ADF JSON") as exc_info:
            decode_document('{"type": "doc", ')
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    @pytest.mark.parametrize("raw", ["[1, 2]", '"text"', "42"])
    def test_non_object_json(self, raw: str) -> None:
        with pytest.raises(DecodeError, match="must be a JSON object"):
            decode_document(raw)

    def test_node_without_type(self) -> None:
        with pytest.raises(DecodeError, match="Malformed ADF document"):
            decode_document({"type": "doc", "content": [{"content": []}]})

    def test_location_of_bad_node(self) -> None:
        raw = doc(paragraph(text("a"), text("b", {"attrs": {}})))
        with pytest.raises(DecodeError) as exc_info:
            decode_document(raw)
        assert exc_info.value.location == "content[0].content[1].marks[0].type"
        assert "content[0].content[1].marks[0].type" in str(exc_info.value)

    def test_non_object_attrs_ignored(self) -> None:
        d = decode_document(doc({"type": "codeBlock", "attrs": "python", "content": [text("x")]}))
        assert adf_to_markdown(d) == "```\nx\n```"

    def test_unknown_kind_non_object_attrs_ignored(self) -> None:
        d = decode_document(doc({"type": "fancyWidget", "attrs": [1, 2], "content": [text("hello")]}))
        assert d.to_wire() == doc({"type": "fancyWidget", "content": [text("hello")]})

    def test_too_deep(self) -> None:
        raw = '{"type": "doc", "content": ' + "[" * 100_000 + "]" * 100_000 + "}"
        with pytest.raises(DecodeError):
            decode_document(raw)

    def test_error_type(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_document("not json")
        assert exc_info.value.error_type == "decode_error"
        assert exc_info.value.suggestions


class TestAdfToMarkdown:
    def test_none_is_empty(self) -> None:
        assert adf_to_markdown(None) == ""

    def test_json_null_is_empty(self) -> None:
        assert adf_to_markdown("null") == ""

    def test_converts(self) -> None:
        assert adf_to_markdown(json.dumps(RICH_ADF)).startswith("## Summary\n\nFix the **login** page")

    def test_mistyped_heading_level(self) -> None:
        raw = doc({"type": "heading", "attrs": {"level": "two"}, "content": [text("Title")]})
        assert adf_to_markdown(raw) == "# Title"

    def test_mistyped_mention_id(self) -> None:
        assert adf_to_markdown(doc(paragraph({"type": "mention", "attrs": {"id": 12345}}))) == "@user"
        named = {"type": "mention", "attrs": {"id": 12345, "text": "@Alice"}}
        assert adf_to_markdown(doc(paragraph(named))) == "@Alice"

    def test_mistyped_media_single_width(self) -> None:
        raw = doc(
            {
                "type": "mediaSingle",
                "attrs": {"layout": "center", "width": "50%"},
                "content": [{"type": "media", "attrs": {"type": "external", "url": "https://x.io/a.png"}}],
            }
        )
        assert adf_to_markdown(raw) == "![](https://x.io/a.png)"
        assert decode_document(raw).content[0].attrs.width is None  # type: ignore[union-attr]

    def test_mistyped_panel_type_uses_default(self) -> None:
        raw = doc({"type": "panel", "attrs": {"panelType": 7}, "content": [paragraph(text("Careful"))]})
        assert adf_to_markdown(raw) == '<div data-panel="info">\n\nCareful\n\n</div>'


class TestMarkdownToAdf:
    def test_none_is_empty_document(self) -> None:
        assert markdown_to_adf(None) == {"type": "doc", "version": 1, "content": []}

    def test_empty_is_empty_document(self) -> None:
        assert markdown_to_adf("") == {"type": "doc", "version": 1, "content": []}

    def test_converts(self) -> None:
        assert markdown_to_adf("**hi**") == doc(paragraph(text("hi", {"type": "strong"})))

    def test_json_is_compact(self) -> None:
        out = markdown_to_adf_json("hi")
        assert out == '{"type":"doc","version":1,"content":[{"type":"paragraph","content":[{"type":"text","text":"hi"}]}]}'

    def test_json_keeps_unicode(self) -> None:
        assert "café" in markdown_to_adf_json("café")

    def test_max_depth_passed_through(self) -> None:
        md = "- a\n  - b\n    - c"
        shallow = markdown_to_adf(md, max_depth=1)
        item_a = shallow["content"][0]["content"][0]
        assert [n["type"] for n in item_a["content"]] == ["paragraph", "bulletList", "bulletList"]
        for sublist in item_a["content"][1:]:
            for sub_item in sublist["content"]:
                assert [n["type"] for n in sub_item["content"]] == ["paragraph"]


class TestEncodeDocument:
    def test_indent(self) -> None:
        out = encode_document(Document(), indent=2)
        assert json.loads(out) == {"type": "doc", "version": 1, "content": []}
        assert "\n" in out
