# File: tests/test_logger.py
import logging

from doc_scout.logger import configure, init_logging, page_logger


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_configure_writes_log_file(tmp_path):
    log_file = tmp_path / "scout.log"
    lg = configure(level="DEBUG", log_file=log_file)
    try:
        lg.debug("written to file")
        for handler in lg.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")
        assert len(lg.handlers) == 2
        assert lg.propagate is False
        assert logging.getLogger("aiohttp.access").level == logging.WARNING
    finally:
        init_logging()


def test_page_logger_tags_records():
    lg = init_logging(level="DEBUG")
    handler = ListHandler()
    lg.addHandler(handler)
    try:
        page_logger("https://example.com/docs/a", 2).info("%d links", 5)
    finally:
        lg.removeHandler(handler)
        init_logging()
    record = handler.records[0]
    assert record.getMessage() == "[depth 2 https://example.com/docs/a] 5 links"
    assert record.url == "https://example.com/docs/a"
    assert record.depth == 2
