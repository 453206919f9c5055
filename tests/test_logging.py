import json
import logging

import pytest

from core.logging_config import JSONFormatter, RequestContextFilter, request_id_var, setup_logging


def make_record(**extra):
    record = logging.LogRecord("services.ingestion", logging.INFO, __file__, 10, "Matches processed: %d new", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_carries_context_fields():
    record = make_record(fixture_id=1208021)
    RequestContextFilter().filter(record)

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "Matches processed: 3 new"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "-"
    assert entry["context"] == {"fixture_id": 1208021}


def test_filter_uses_current_request_id():
    token = request_id_var.set("req-42")
    try:
        record = make_record()
        RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-42"


def test_explicit_request_id_wins():
    token = request_id_var.set("req-42")
    try:
        record = make_record(request_id="req-7")
        RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-7"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_replaces_handlers(restore_root_logger, tmp_path):
    log_file = tmp_path / "api.log"

    setup_logging("debug", json_output=True)
    root = setup_logging("WARNING", log_file=str(log_file))

    assert root.level == logging.WARNING
    assert len(root.handlers) == 2
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    logging.getLogger("tests").warning("feed degraded")
    for handler in root.handlers:
        handler.flush()
    assert "feed degraded" in log_file.read_text()


@pytest.mark.asyncio
async def test_app_startup_configures_logging(app, restore_root_logger):
    from main import lifespan

    logging.getLogger().handlers.clear()

    async with lifespan(app):
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert any(isinstance(f, RequestContextFilter) for f in handlers[0].filters)
        assert app.state.sentry_enabled is False
