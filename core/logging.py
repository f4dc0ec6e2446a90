"""
Logging setup for the reservation engine.
Structured JSON in deployed environments, plain lines on a developer machine.
"""
import logging
import sys
from typing import IO, Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from core.settings import Settings


# Loggers of this project; they follow the configured level
PROJECT_LOGGERS = ("core", "db", "domain", "services")


class ReservationJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with the app and restaurant it came from."""

    def __init__(self, *args: Any, static_fields: Optional[Dict[str, Any]] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.static_fields = static_fields or {}

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['source'] = f"{record.module}:{record.funcName}:{record.lineno}"
        log_record.update(self.static_fields)

        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def build_formatter(settings: Settings) -> logging.Formatter:
    if settings.app_env in ("production", "staging"):
        return ReservationJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S',
            static_fields={
                'app_name': settings.app_name,
                'environment': settings.app_env,
                'restaurant': settings.restaurant_name,
            },
        )
    return logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def setup_logging(settings: Optional[Settings] = None, stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Configure logging for the whole process.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        stream: Where log lines go (stdout by default)

    Returns:
        The handler installed on the root logger
    """
    settings = settings or Settings()
    level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter(settings))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in PROJECT_LOGGERS:
        logging.getLogger(name).setLevel(level)
    # SQL echo is opt-in through create_engine(echo=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "environment": settings.app_env,
            "json_logging": isinstance(handler.formatter, ReservationJsonFormatter),
        }
    )
    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger for a module of this project (pass ``__name__``)."""
    return logging.getLogger(name)
