"""
Structured Logging Configuration

One layout for every module in the package:

    [<utc timestamp>] LEVEL    [logger.name] session=<id> message

The ``session=`` field comes from a context variable bound with
:func:`session_context`, so records emitted anywhere inside an analysis
(including background tasks started from it) carry the session they belong
to without each call site repeating it.
"""
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional
from datetime import datetime, timezone

# Transport libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "google_genai", "langchain_google_genai")

FILE_LAYOUT = "%(asctime)s | %(levelname)s | %(name)s | session=%(session_id)s | %(message)s"

_session_id_var: ContextVar[str] = ContextVar("abg_session_id", default="-")


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``session_id``."""
    token = _session_id_var.set(session_id)
    try:
        yield
    finally:
        _session_id_var.reset(token)


def current_session_id() -> str:
    return _session_id_var.get()


class SessionFilter(logging.Filter):
    """Copies the bound session id onto each record as ``record.session_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """Console formatter; colour is applied only when writing to a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds")
        session_id = getattr(record, "session_id", "-")

        line = f"[{stamp}] {record.levelname:8} [{record.name}] "
        if session_id != "-":
            line += f"session={session_id} "
        line += record.getMessage()

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        if self.use_color and record.levelno in self.LEVEL_COLORS:
            return f"{self.LEVEL_COLORS[record.levelno]}{line}{self.RESET}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger for the service.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for an additional plain-text log
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    session_filter = SessionFilter()

    console = logging.StreamHandler(sys.stdout)
    console.addFilter(session_filter)
    console.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.addFilter(session_filter)
        file_handler.setFormatter(logging.Formatter(FILE_LAYOUT))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_logger.level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


setup_logging()
