import json
import logging
from datetime import UTC, datetime


class StructuredLogger:
    """Emits domain events (uploads, moderation, deletions) as JSON lines
    through the standard logging pipeline, so they share handlers and
    formatting with the rest of the application logs.
    """

    def __init__(self, name: str = "eventsnap.events"):
        self._logger = logging.getLogger(name)

    def log_event(self, event: str, level: int = logging.INFO, **fields) -> None:
        """Emit a structured event, e.g. ``logger.log_event("photo_status_changed", photo_id=..., status=...)``."""
        payload = {"timestamp": datetime.now(UTC).isoformat(), "event": event}
        extra = fields.pop("extra", None)
        payload.update(fields)
        if isinstance(extra, dict):
            payload.update(extra)

        try:
            message = json.dumps(payload, default=str)
        except (TypeError, ValueError):
            message = f"{event} {fields}"
        self._logger.log(level, message)

    def info(self, msg: str, *args, **kwargs):
        return self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        return self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        return self._logger.error(msg, *args, **kwargs)


event_logger = StructuredLogger()

__all__ = ["event_logger", "StructuredLogger"]
