"""
Logging setup for the SCM frontend.
Call setup_logging() once when the Streamlit app starts.
"""
import json
import logging
from datetime import datetime, timezone

from scm_frontend.config import LOG_JSON, LOG_LEVEL

EXTRA_FIELDS = ("method", "url", "status")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable console format with color."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now().strftime("%H:%M:%S")
        return f"{color}{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}{self.RESET}"


def setup_logging(level=None, json_logs=None):
    """
    Configure the root logger.

    Args:
        level: Override log level (default: LOG_LEVEL env or INFO)
        json_logs: Force JSON lines (default: LOG_JSON env flag)
    """
    if level is None:
        level = LOG_LEVEL
    if json_logs is None:
        json_logs = LOG_JSON

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # httpx logs every request at INFO
    for name in ("httpx", "httpcore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("scm_frontend").debug("Logging initialized at %s", level)
