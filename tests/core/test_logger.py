import io
import json
import logging

from pgmq_client.core.logger import (
    SUCCESS_LEVEL,
    CustomFormatter,
    JSONFormatter,
    LoggingContext,
    setup_logger,
)


def _record(message="Created queue 'orders'", level=logging.INFO, **extra):
    record = logging.LogRecord("pgmq_client.test", level, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_custom_formatter_renders_metadata_and_extras():
    output = CustomFormatter().format(_record(queue_name="orders"))

    metadata, message, extras = output.splitlines()
    assert "[INFO]" in metadata
    assert message == "     Message: Created queue 'orders'"
    assert extras.strip() == "queue_name: orders"


def test_custom_formatter_indents_multiline_messages():
    output = CustomFormatter().format(_record("first\nsecond"))
    assert "     Message: first\n             second" in output


def test_json_formatter_emits_one_object():
    payload = json.loads(JSONFormatter().format(_record(level=logging.WARNING, pool="pgmq")))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Created queue 'orders'"
    assert payload["logger"] == "pgmq_client.test"
    assert payload["extra"] == {"pool": "pgmq"}


def test_setup_logger_does_not_stack_handlers(monkeypatch):
    monkeypatch.setenv("PGMQ_LOG_LEVEL", "debug")

    logger = setup_logger("pgmq_client.tests.handlers")
    setup_logger("pgmq_client.tests.handlers")

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_setup_logger_json_switch(monkeypatch):
    monkeypatch.setenv("PGMQ_LOG_JSON", "true")
    logger = setup_logger("pgmq_client.tests.json")
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)


def test_logging_context_and_success_level():
    logger = setup_logger("pgmq_client.tests.context", use_json=True)
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)

    with LoggingContext(queue_name="orders"):
        logger.success("Connection session reset succeeded")
    logger.info("outside")

    inside, outside = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert inside["level"] == "SUCCESS"
    assert inside["extra"] == {"queue_name": "orders"}
    assert "extra" not in outside
    assert logging.getLevelName(SUCCESS_LEVEL) == "SUCCESS"


def test_logging_context_nests_and_explicit_extra_wins():
    logger = setup_logger("pgmq_client.tests.nested", use_json=True)
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)

    with LoggingContext(pool="pgmq"):
        with LoggingContext(queue_name="orders", attempt=1):
            logger.warning("retrying", extra={"attempt": 2})
        logger.info("pool only")

    nested, outer = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert nested["extra"] == {"pool": "pgmq", "queue_name": "orders", "attempt": 2}
    assert outer["extra"] == {"pool": "pgmq"}
