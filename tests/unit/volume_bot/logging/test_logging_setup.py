from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from volume_bot.logging import (
    StructuredJSONFormatter,
    configure_logging,
    get_run_id,
    run_context,
    update_domain_context,
)
from volume_bot.utilities.logging_patterns import get_logger, log_operation


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    package = logging.getLogger("volume_bot")
    saved = (list(root.handlers), root.level, list(package.handlers), package.level)
    yield
    for logger, handlers in ((root, saved[0]), (package, saved[2])):
        for handler in logger.handlers[:]:
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
    root.setLevel(saved[1])
    package.setLevel(saved[3])


def make_record(msg: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("volume_bot.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRunContext:
    def test_binds_and_restores_run_id(self) -> None:
        assert get_run_id() == ""
        with run_context(run_id="run-1") as run_id:
            assert run_id == "run-1"
            assert get_run_id() == "run-1"
        assert get_run_id() == ""

    def test_generates_run_id(self) -> None:
        with run_context() as run_id:
            assert len(run_id) == 12

    def test_context_fields_reach_json_records(self) -> None:
        formatter = StructuredJSONFormatter()
        with run_context(run_id="run-2", asset="0xfeed"):
            update_domain_context(execution_mode="pre_listing")
            entry = json.loads(formatter.format(make_record()))
        assert entry["run_id"] == "run-2"
        assert entry["asset"] == "0xfeed"
        assert entry["execution_mode"] == "pre_listing"

        outside = json.loads(formatter.format(make_record()))
        assert "run_id" not in outside


class TestJsonFormatter:
    def test_extra_fields_become_top_level_keys(self) -> None:
        entry = json.loads(
            StructuredJSONFormatter().format(make_record(component="engine", pattern="stealth-mode"))
        )
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["component"] == "engine"
        assert entry["pattern"] == "stealth-mode"

    def test_sensitive_keys_are_redacted(self) -> None:
        entry = json.loads(
            StructuredJSONFormatter().format(make_record(private_key="abc", rpc_url="http://x"))
        )
        assert entry["private_key"] == "[REDACTED]"
        assert entry["rpc_url"] == "[REDACTED]"

    def test_trade_amounts_are_plain_numbers(self) -> None:
        entry = json.loads(
            StructuredJSONFormatter().format(make_record(amount=0.00042, gas_used=21000))
        )
        assert entry["amount"] == 0.00042
        assert entry["gas_used"] == 21000

    def test_unserializable_values_fall_back(self) -> None:
        entry = json.loads(StructuredJSONFormatter().format(make_record(blob=object())))
        assert entry["message"].startswith("JSON serialization failed")
        assert entry["original_message"] == "hello"


def test_configure_logging_writes_text_and_json_files(tmp_path: Path, restore_logging) -> None:
    log_dir = configure_logging(tmp_path / "logs", console=False)
    assert log_dir == tmp_path / "logs"

    get_logger("volume_bot.test", component="test").warning("disk almost full", usage=0.97)
    for handler in logging.getLogger().handlers + logging.getLogger("volume_bot").handlers:
        handler.flush()

    assert "disk almost full" in (log_dir / "volume_bot.log").read_text()
    assert "disk almost full" in (log_dir / "critical_events.log").read_text()
    entry = json.loads((log_dir / "volume_bot.jsonl").read_text().strip().splitlines()[-1])
    assert entry["component"] == "test"
    assert entry["usage"] == 0.97


def test_configure_logging_is_idempotent(tmp_path: Path, restore_logging) -> None:
    configure_logging(tmp_path, console=False)
    before = len(logging.getLogger().handlers), len(logging.getLogger("volume_bot").handlers)
    configure_logging(tmp_path, console=False)
    after = len(logging.getLogger().handlers), len(logging.getLogger("volume_bot").handlers)
    assert before == after


def test_log_operation_logs_start_and_completion(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("volume_bot.test.ops", component="ops")
    with caplog.at_level(logging.INFO, logger="volume_bot.test.ops"):
        with log_operation("query_execution_mode", logger, asset="0xfeed"):
            pass

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["Started query_execution_mode", "Completed query_execution_mode"]
    assert caplog.records[-1].asset == "0xfeed"
    assert hasattr(caplog.records[-1], "duration_ms")
