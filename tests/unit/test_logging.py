"""Tests for structured logging helpers."""
import io
import json
import logging

from plugin_host.observability import get_logger, setup_logging, with_doc_context
from plugin_host.observability.logging import CustomJsonFormatter, DocContextFilter


def _capture(name: str) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    handler.addFilter(DocContextFilter())
    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger, stream


class TestJsonLogging:
    """Test JSON formatting with corpus context."""

    def test_context_fields(self):
        _, stream = _capture("test.context")
        log = get_logger("test.context")

        log.info(
            "Lint finished",
            extra=with_doc_context(corpus_root="/tmp/plugin", rule_id="FM001", errors=2),
        )

        record = json.loads(stream.getvalue())
        assert record["message"] == "Lint finished"
        assert record["level"] == "INFO"
        assert record["logger"] == "test.context"
        assert record["corpus_root"] == "/tmp/plugin"
        assert record["rule_id"] == "FM001"
        assert record["errors"] == 2
        assert "document" not in record

    def test_empty_context_is_omitted(self):
        _, stream = _capture("test.empty")

        get_logger("test.empty").warning("plain")

        record = json.loads(stream.getvalue())
        assert not {"corpus_root", "document", "doc_kind", "rule_id"} & set(record)

    def test_with_doc_context_skips_empty_values(self):
        assert with_doc_context(document="a", doc_kind=None, extra_field=1) == {
            "document": "a",
            "extra_field": 1,
        }


class TestSetupLogging:
    """Test setup_logging."""

    def test_level_and_format(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging(level="debug", fmt="json")

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)

            setup_logging(fmt="text")
            assert not isinstance(root.handlers[0].formatter, CustomJsonFormatter)
        finally:
            root.handlers, root.level = saved[0], saved[1]
