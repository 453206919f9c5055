import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

# Set per request by ``middleware.error_handler.request_id_middleware``.
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
}

# Libraries that are chatty at INFO.
_QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "asyncio")


class RequestContextFilter(logging.Filter):
    """Stamps each record with the id of the request being served, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields land under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = {k: v for k, v in vars(record).items() if k not in _RESERVED}
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored level names for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s  %(levelname)s  [%(request_id)s] %(name)s  %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so the file handler keeps the plain level name.
        record = logging.makeLogRecord(vars(record))
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: int | str = logging.INFO,
    json_output: bool = False,
    log_file: str | None = None,
) -> logging.Logger:
    """
    Configure the root logger for the API process.

    Console output is JSON when ``json_output`` is set (what log shippers
    expect in production) and colored text otherwise.  ``log_file`` adds a
    size-rotated plain-text file.  Safe to call more than once; handlers from
    an earlier call are replaced.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    context = RequestContextFilter()

    console = logging.StreamHandler(sys.stdout)
    console.addFilter(context)
    console.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())
    root.addHandler(console)

    if log_file:
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        rotating.addFilter(context)
        rotating.setFormatter(
            logging.Formatter(
                "%(asctime)s  %(levelname)-8s  [%(request_id)s] %(name)s:%(lineno)d  %(message)s"
            )
        )
        root.addHandler(rotating)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root
