import json
import logging
import sys
from datetime import datetime
from typing import Any, TextIO


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Add extra fields passed via extra={"data": ...}
        if hasattr(record, "data"):
            log_record["data"] = record.data  # type: ignore

        return json.dumps(log_record, ensure_ascii=False, default=str)


def setup_logging(level: str | int = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """
    Configures the root logger to use JSON formatting.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())

    # Remove existing handlers to avoid duplicates
    logger.handlers = []
    logger.addHandler(handler)

    return logger
