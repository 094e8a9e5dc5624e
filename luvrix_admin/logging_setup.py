import logging
import sys
import contextvars
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger
from luvrix_admin.config import settings

request_id_var = contextvars.ContextVar("request_id", default=None)

# Field names containing any of these never reach the log stream in clear
SECRETS = ["token", "secret", "password", "key", "authorization", "cookie", "salt"]
REDACTED = "***REDACTED***"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Third-party loggers that drown out console events at INFO
QUIET_LOGGERS = ("uvicorn.access", "apscheduler", "urllib3")


def redact(log_record: dict):
    for key, value in list(log_record.items()):
        if isinstance(value, str) and any(s in key.lower() for s in SECRETS):
            log_record[key] = REDACTED


class ConsoleJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["service_name"] = settings.service_name

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id
        redact(log_record)


def setup_logging(level: str | None = None):
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConsoleJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_event(event: str, level: str = "info", **fields):
    """Log a structured event; None-valued fields are dropped."""
    extra = {k: v for k, v in fields.items() if v is not None}
    extra["event"] = event
    logging.getLogger(settings.service_name).log(LEVELS.get(level.lower(), logging.INFO), event, extra=extra)
