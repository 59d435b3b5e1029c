"""Transparent ADF <-> markdown conversion for issue descriptions and comments.

The tracker stores rich text as ADF JSON but local files hold markdown.
This module is the wire boundary: it decodes JSON into the document model
and hands it to the serializer, or parses markup and encodes the tree back.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from adfmark.errors import DecodeError
from adfmark.models import Document
from adfmark.parser import DEFAULT_MAX_DEPTH, parse_markdown
from adfmark.serializer import render_document


def decode_document(adf: str | bytes | Mapping[str, Any] | Document | None) -> Document:
    """Decode wire ADF into a :class:`Document`.

    ``None``, blank input and JSON ``null`` give an empty document.
    """
    if adf is None:
        return Document()
    if isinstance(adf, Document):
        return adf

    data: Any
    if isinstance(adf, (str, bytes, bytearray)):
        if not adf.strip():
            return Document()
        try:
            data = json.loads(adf)
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"Invalid ADF JSON: {e}") from e
    else:
        data = adf

    if data is None:
        return Document()
    if not isinstance(data, Mapping):
        raise DecodeError(f"ADF document must be a JSON object, got {type(data).__name__}")

    try:
        return Document.model_validate(dict(data))
    except ValidationError as e:
        location = _json_path(e.errors()[0]["loc"])
        raise DecodeError(f"Malformed ADF document at {location}: {e}", location=location) from e
    except RecursionError as e:
        raise DecodeError(f"Malformed ADF document: {e}") from e


def _json_path(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as a JSON path, dropping union tags.

    ``("content", 0, "unknown", "type")`` becomes ``content[0].type``.
    """
    path = ""
    after_index = False
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
            after_index = True
        elif after_index:
            # discriminator tag chosen for the list element
            after_index = False
        else:
            path += f".{part}" if path else part
    return path


def encode_document(doc: Document, indent: int | None = None) -> str:
    """Encode a document as wire JSON. ``indent=None`` gives compact output."""
    separators = (",", ":") if indent is None else None
    return json.dumps(doc.to_wire(), ensure_ascii=False, indent=indent, separators=separators)


def adf_to_markdown(adf: str | bytes | Mapping[str, Any] | Document | None) -> str:
    """Convert ADF to markdown. Empty or null input gives an empty string."""
    return render_document(decode_document(adf))


def markdown_to_document(md: str | None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    if not md:
        return Document()
    return parse_markdown(md, max_depth=max_depth)


def markdown_to_adf(md: str | None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> dict[str, Any]:
    """Convert markdown to a wire-ready ADF dict."""
    return markdown_to_document(md, max_depth=max_depth).to_wire()


def markdown_to_adf_json(md: str | None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Convert markdown to compact ADF JSON, ready to send."""
    return encode_document(markdown_to_document(md, max_depth=max_depth))
