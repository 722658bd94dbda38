"""
test_logger - ScopeLogger file output and context scopes.
"""
import json
import logging

import pytest

from shared.logger import ScopeLogger


def _records(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestScopeLogger:
    """ScopeLogger behaviour."""

    def test_logger_name(self):
        ScopeLogger("test", console_output=False)

        underlying = logging.getLogger("elfscope.test")
        assert underlying.propagate is False
        assert underlying.handlers == []

    def test_json_lines(self, tmp_path):
        path = tmp_path / "logs" / "elfscope.log"
        log = ScopeLogger("test", log_file=path, json_logs=True, console_output=False)

        log.info("Decoded %s", "a.out", kind="truncated-input", offset=16)

        (record,) = _records(path)
        assert record["message"] == "Decoded a.out"
        assert record["level"] == "INFO"
        assert record["logger"] == "elfscope.test"
        assert record["tool_name"] == "test"
        assert record["extra"] == {"kind": "truncated-input", "offset": 16}

    def test_operation_scope(self, tmp_path):
        path = tmp_path / "elfscope.log"
        log = ScopeLogger("test", log_file=path, json_logs=True, console_output=False)

        with log.operation("decode"):
            with log.operation("summarize"):
                log.info("nested")
            log.info("inside")
        log.info("outside")

        nested, inside, outside = _records(path)
        assert nested["operation"] == "summarize"
        assert inside["operation"] == "decode"
        assert "operation" not in outside

    def test_timed_scope(self, tmp_path):
        path = tmp_path / "elfscope.log"
        log = ScopeLogger("test", log_level="DEBUG", log_file=path, json_logs=True, console_output=False)

        with log.timed("decode a.out"):
            pass

        started, completed = _records(path)
        assert started["message"] == "Started: decode a.out"
        assert completed["message"].startswith("Completed: decode a.out")
        assert completed["extra"]["elapsed"] >= 0

    def test_timed_scope_aborted(self, tmp_path):
        path = tmp_path / "elfscope.log"
        log = ScopeLogger("test", log_level="DEBUG", log_file=path, json_logs=True, console_output=False)

        with pytest.raises(RuntimeError):
            with log.timed("decode"):
                raise RuntimeError("boom")

        last = _records(path)[-1]
        assert last["message"].startswith("Aborted: decode")
        assert last["level"] == "DEBUG"

    def test_level_filtering(self, tmp_path):
        path = tmp_path / "elfscope.log"
        log = ScopeLogger("test", log_level="ERROR", log_file=path, console_output=False)

        log.info("hidden")
        log.error("shown")

        text = path.read_text(encoding="utf-8")
        assert "hidden" not in text
        assert "| ERROR    | elfscope.test | shown" in text

    def test_reinstantiation_does_not_stack_handlers(self, tmp_path):
        ScopeLogger("test", log_file=tmp_path / "a.log")
        ScopeLogger("test", log_file=tmp_path / "b.log")

        assert len(logging.getLogger("elfscope.test").handlers) == 2
