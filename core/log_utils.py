#!/usr/bin/env python3
"""
core/log_utils.py: Logging setup shared by the docstruct tools.
This module contains:
- setup_logging: Installs console/file handlers and per-topic debug levels.
- RichLogFormatter: A custom logging formatter for colorful console output.
- ContextFilter: A logging filter that tags records with the current document.
"""

import logging

PROJECT_TOPICS = {
    "docstruct": {"layout", "structure", "tables", "assemble", "source", "config", "api"},
}


def setup_logging(
    project_name: str,
    level=logging.INFO,
    color_logs=False,
    debug_topics=None,
    log_file: str = None,
):
    """Configures logging for the application."""
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        for h in root_logger.handlers[:]:
            root_logger.removeHandler(h)
            h.close()

    # Console Handler (always enabled)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(RichLogFormatter(use_color=color_logs))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    # File Handler (optional)
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="w")
            file_handler.setFormatter(RichLogFormatter(use_color=False))
            root_logger.addHandler(file_handler)
            logging.getLogger(project_name).info("Logging to file: %s", log_file)
        except IOError as e:
            logging.getLogger(project_name).error(
                "Could not open log file %s: %s", log_file, e
            )

    # pdfminer is very chatty at INFO
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

    if debug_topics:
        user_topics = [t.strip() for t in debug_topics.split(",")]
        valid_topics = PROJECT_TOPICS.get(project_name, set())
        if "all" in user_topics:
            topics_to_set = valid_topics
        else:
            topics_to_set = {
                full for u in user_topics for full in valid_topics if full.startswith(u)
            }

        for topic in topics_to_set:
            logging.getLogger(f"{project_name}.{topic}").setLevel(logging.DEBUG)


class ContextFilter(logging.Filter):
    """Injects a context string (e.g. the PDF being processed) into log records."""

    def __init__(self, context_str=""):
        super().__init__()
        self.context_str = context_str

    def filter(self, record):
        record.context = self.context_str
        return True


class RichLogFormatter(logging.Formatter):
    """Formats records as `LEVEL:topic [context]: message`, optionally in color.

    Multi-line messages get the prefix repeated on every line so that log
    output stays greppable by topic.

    Args:
        use_color (bool): If True, ANSI color codes are used. Defaults to False.
    """

    LEVELS = [logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL]

    def __init__(self, use_color=False):
        super().__init__()
        if use_color:
            # 256-color palette
            self.COLORS = {
                logging.DEBUG: "\033[38;5;252m",
                logging.INFO: "\033[38;5;111m",
                logging.WARNING: "\033[38;5;229m",
                logging.ERROR: "\033[38;5;210m",
                logging.CRITICAL: "\033[38;5;217m",
            }
            self.BOLD = "\033[1m"
            self.RESET = "\033[0m"
        else:
            self.COLORS = {level: "" for level in self.LEVELS}
            self.BOLD = ""
            self.RESET = ""

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.RESET)
        level_name = record.levelname[:5]

        # "docstruct.tables" -> "tables"; bare project loggers keep their name
        name_parts = record.name.split(".")
        topic = name_parts[1][:6] if len(name_parts) > 1 else record.name[:6]

        context = getattr(record, "context", "")
        context_str = f"[{context}]" if context else ""

        prefix = (
            f"{color}{level_name:<5}{self.RESET}:"
            f"{self.BOLD}{topic:<6}{self.RESET}{context_str}: "
        )
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return "\n".join(f"{prefix}{line}" for line in message.split("\n"))
