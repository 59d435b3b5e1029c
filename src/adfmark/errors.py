"""Exception hierarchy and structured error output."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any


class AdfmarkError(Exception):
    """Base exception for all adfmark errors."""

    error_type: str = "adfmark_error"
    suggestions: list[str] = []

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        if suggestions is not None:
            self.suggestions = suggestions

    def to_dict(self) -> dict[str, Any]:
        """The ``error`` payload written by :func:`output_error`."""
        payload: dict[str, Any] = {"type": self.error_type, "message": str(self)}
        if self.suggestions:
            payload["suggestions"] = self.suggestions
        return payload


class DecodeError(AdfmarkError):
    """Document tree input is not valid ADF JSON.

    ``location`` is the JSON path of the offending node (``content[0].type``)
    when the JSON parsed but a node could not be decoded.
    """

    error_type = "decode_error"
    suggestions = [
        "Check that the input is a JSON object with type, version and content",
        "Pass markup to `adfmark to-adf` instead if the input is not JSON",
    ]

    def __init__(self, message: str, suggestions: list[str] | None = None, location: str | None = None) -> None:
        super().__init__(message, suggestions)
        self.location = location

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.location:
            payload["location"] = self.location
        return payload


class ConfigError(AdfmarkError):
    """Configuration error (missing or invalid config file, bad env vars)."""

    error_type = "config_error"
    suggestions = [
        "Check adfmark.toml or ~/.config/adfmark/config.toml",
        "Or unset ADFMARK_CONFIG to use auto-discovery",
    ]

    def __init__(self, message: str, suggestions: list[str] | None = None, path: Path | None = None) -> None:
        super().__init__(message, suggestions)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.path is not None:
            payload["file"] = str(self.path)
        return payload


def output_error(error: AdfmarkError, exit_code: int = 1) -> None:
    """Write ``error`` as structured JSON to stderr and exit."""
    print(json.dumps({"error": error.to_dict()}, ensure_ascii=False), file=sys.stderr)
    sys.exit(exit_code)
