import json
import logging
from datetime import datetime, timezone

from app.config import get_settings

# Extra attributes callers attach via ``logger.info(..., extra={...})``.
_CONTEXT_FIELDS = ("medication_id", "adjustment_type", "quantity_changed", "attempt")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(level_name=None, json_output=None) -> None:
    settings = get_settings()
    level_name = level_name or settings.LOG_LEVEL
    if json_output is None:
        json_output = settings.LOG_JSON
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
