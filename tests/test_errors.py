"""Tests for the exception hierarchy and structured error output."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from adfmark.errors import AdfmarkError, ConfigError, DecodeError, output_error


class TestHierarchy:
    def test_subclasses(self) -> None:
        assert issubclass(DecodeError, AdfmarkError)
        assert issubclass(ConfigError, AdfmarkError)

    def test_error_types(self) -> None:
        assert AdfmarkError("x").error_type == "adfmark_error"
        assert DecodeError("x").error_type == "decode_error"
        assert ConfigError("x").error_type == "config_error"

    def test_class_suggestions(self) -> None:
        assert DecodeError("x").suggestions == DecodeError.suggestions

    def test_instance_suggestions_override(self) -> None:
        err = ConfigError("x", suggestions=["do this"])
        assert err.suggestions == ["do this"]
        assert ConfigError.suggestions != ["do this"]


class TestToDict:
    def test_base_payload(self) -> None:
        assert AdfmarkError("boom").to_dict() == {"type": "adfmark_error", "message": "boom"}

    def test_decode_location(self) -> None:
        payload = DecodeError("bad node", location="content[0].type").to_dict()
        assert payload["location"] == "content[0].type"
        assert payload["suggestions"] == DecodeError.suggestions

    def test_decode_without_location(self) -> None:
        assert "location" not in DecodeError("bad json").to_dict()

    def test_config_file(self) -> None:
        payload = ConfigError("bad value", path=Path("/etc/adfmark.toml")).to_dict()
        assert payload["file"] == str(Path("/etc/adfmark.toml"))


class TestOutputError:
    def test_writes_json_and_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            output_error(DecodeError("bad input", suggestions=["try again"], location="content[2]"))
        assert exc_info.value.code == 1
        err = json.loads(capsys.readouterr().err)
        assert err == {
            "error": {
                "type": "decode_error",
                "message": "bad input",
                "suggestions": ["try again"],
                "location": "content[2]",
            }
        }

    def test_no_suggestions_key_when_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            output_error(AdfmarkError("nope"), exit_code=2)
        err = json.loads(capsys.readouterr().err)
        assert "suggestions" not in err["error"]

    def test_custom_exit_code(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            output_error(ConfigError("nope"), exit_code=2)
        assert exc_info.value.code == 2
