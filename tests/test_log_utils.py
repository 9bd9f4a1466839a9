import logging

import pytest

from core.log_utils import PROJECT_TOPICS, ContextFilter, RichLogFormatter, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    topic_levels = {
        t: logging.getLogger(f"docstruct.{t}").level for t in PROJECT_TOPICS["docstruct"]
    }
    yield
    for h in root.handlers[:]:
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    for t, lvl in topic_levels.items():
        logging.getLogger(f"docstruct.{t}").setLevel(lvl)


def _record(name, msg, level=logging.INFO):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def test_formatter_prefixes_level_topic_and_context():
    record = _record("docstruct.tables", "found 2 tables")
    ContextFilter("report.pdf").filter(record)
    assert RichLogFormatter().format(record) == "INFO :tables[report.pdf]: found 2 tables"


def test_formatter_repeats_prefix_on_each_line():
    text = RichLogFormatter().format(_record("docstruct", "one\ntwo", logging.WARNING))
    assert text.splitlines() == ["WARNI:docstr: one", "WARNI:docstr: two"]


def test_color_formatter_wraps_level():
    text = RichLogFormatter(use_color=True).format(_record("docstruct.layout", "x"))
    assert text.startswith("\033[38;5;111mINFO ")


def test_debug_topics_match_by_prefix(restore_logging):
    setup_logging("docstruct", level=logging.WARNING, debug_topics="tab,ass")
    assert logging.getLogger("docstruct.tables").level == logging.DEBUG
    assert logging.getLogger("docstruct.assemble").level == logging.DEBUG
    assert logging.getLogger("docstruct.layout").level != logging.DEBUG
    assert logging.getLogger("pdfminer").level == logging.WARNING


def test_debug_all_enables_every_topic(restore_logging):
    setup_logging("docstruct", level=logging.WARNING, debug_topics="all")
    for topic in PROJECT_TOPICS["docstruct"]:
        assert logging.getLogger(f"docstruct.{topic}").level == logging.DEBUG


def test_log_file_handler(restore_logging, tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging("docstruct", level=logging.INFO, log_file=str(log_file))
    logging.getLogger("docstruct.api").info("hello")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "INFO :api   : hello" in log_file.read_text()
