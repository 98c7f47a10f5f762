"""
Logging configuration with optional JSON output.
"""
import logging
import sys
import json
import os
from datetime import datetime, timezone
from typing import Any, Dict

_EXTRA_FIELDS = ("request_id", "path", "status", "duration_ms", "state")


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "service": "clocker",
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_obj[field] = getattr(record, field)

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """
    Configure logging with optional JSON format.
    Set LOG_JSON=true in env to enable JSON logging, LOG_LEVEL to change the level.
    """
    use_json = os.getenv("LOG_JSON", "").lower() in ("true", "1", "yes")
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    handler = logging.StreamHandler(sys.stdout)

    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
    # httpx logs every request at INFO, including the full URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
