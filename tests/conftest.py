"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest
from click.testing import CliRunner

# ---------------------------------------------------------------------------
# Wire ADF fixtures
# ---------------------------------------------------------------------------


def text(value: str, *marks: dict[str, Any]) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": value}
    if marks:
        node["marks"] = list(marks)
    return node


def paragraph(*children: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "content": list(children)}


def item(*children: dict[str, Any]) -> dict[str, Any]:
    return {"type": "listItem", "content": list(children)}


def doc(*blocks: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "version": 1, "content": list(blocks)}


NESTED_BULLET_ADF = doc(
    {
        "type": "bulletList",
        "content": [
            item(
                paragraph(text("Parent 1")),
                {
                    "type": "bulletList",
                    "content": [
                        item(paragraph(text("Child 1"))),
                        item(paragraph(text("Child 2"))),
                    ],
                },
            ),
            item(paragraph(text("Parent 2"))),
        ],
    }
)

NESTED_ORDERED_ADF = doc(
    {
        "type": "orderedList",
        "content": [
            item(
                paragraph(text("Step 1")),
                {
                    "type": "orderedList",
                    "content": [
                        item(paragraph(text("Sub 1"))),
                        item(paragraph(text("Sub 2"))),
                    ],
                },
            ),
            item(paragraph(text("Step 2"))),
        ],
    }
)

RICH_ADF = doc(
    {"type": "heading", "attrs": {"level": 2}, "content": [text("Summary")]},
    paragraph(
        text("Fix the "),
        text("login", {"type": "strong"}),
        text(" page, see "),
        text("docs", {"type": "link", "attrs": {"href": "https://example.com/docs"}}),
    ),
    {"type": "codeBlock", "attrs": {"language": "go"}, "content": [text('fmt.Println("hi")')]},
    {"type": "rule"},
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def isolated_config(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> Any:
    """Run with no config file and no env overrides."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ("ADFMARK_CONFIG", "ADFMARK_MAX_DEPTH", "ADFMARK_JSON_INDENT"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path
