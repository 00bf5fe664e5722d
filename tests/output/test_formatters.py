"""Tests for result formatting."""

from __future__ import annotations

import json

from relpack.output.formatters import OutputSettings, format_result
from relpack.services.result import ServiceResult


class TestFormatResult:
    def test_human_success_lists_actions(self) -> None:
        result = ServiceResult(
            ok=True,
            op="assemble",
            data={"name": "myapp", "actions": ["mkdir var/log", "copy a -> b"]},
        )
        text = format_result(result)
        assert text.splitlines() == [
            "OK: assemble",
            "  name: myapp",
            "  actions:",
            "    - mkdir var/log",
            "    - copy a -> b",
        ]

    def test_quiet_hides_data(self) -> None:
        result = ServiceResult(ok=True, op="assemble", data={"name": "myapp"})
        assert format_result(result, settings=OutputSettings(quiet=True)) == "OK: assemble"

    def test_error(self) -> None:
        result = ServiceResult.failure("assemble", "OVERLAY_FAILED", "missing source")
        assert format_result(result) == "ERROR: assemble - missing source"

    def test_json(self) -> None:
        result = ServiceResult(ok=True, op="assemble")
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["op"] == "assemble"
