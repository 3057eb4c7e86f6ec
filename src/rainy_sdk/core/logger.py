"""Logging configuration and service."""
import json
import logging
import logging.config
from typing import Any, Dict, List, Optional

from .settings import Settings

SDK_LOGGER_NAME = "rainy_sdk"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

# Extra fields whose values are never written out
_SECRET_FIELDS = frozenset({"api_key", "authorization", "headers"})
_REDACTED = "***"


class SdkFormatter(logging.Formatter):
    """Base formatter that collects and redacts ``extra`` fields."""

    def __init__(self, settings_instance: Settings) -> None:
        """Initialize formatter.

        Args:
            settings_instance: Settings instance for configuration
        """
        super().__init__()
        self.settings = settings_instance

    def extra_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Get ``extra`` fields of a record, secrets masked.

        Fields listed in ``LOG_EXTRA_FIELDS`` are included even when they
        collide with a standard record attribute.
        """
        names: List[str] = [
            key for key in vars(record) if key not in _RECORD_ATTRIBUTES
        ]
        names.extend(
            field
            for field in self.settings.LOG_EXTRA_FIELDS
            if field not in names and hasattr(record, field)
        )
        return {
            name: _REDACTED if name.lower() in _SECRET_FIELDS else getattr(record, name)
            for name in names
        }

    def exception_text(self, record: logging.LogRecord) -> Optional[str]:
        if not record.exc_info:
            return None
        return self.formatException(record.exc_info) or None


class JsonFormatter(SdkFormatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        entry.update(self.extra_fields(record))

        exception = self.exception_text(record)
        if exception:
            entry["exception"] = exception

        # Values json cannot encode are described rather than dropped
        return json.dumps(
            entry, default=lambda value: f"<non-serializable: {type(value).__name__}>"
        )


class TextFormatter(SdkFormatter):
    """Human-readable single line, extras appended as a dict."""

    def format(self, record: logging.LogRecord) -> str:
        line = " - ".join(
            (self.formatTime(record), record.levelname, record.name, record.getMessage())
        )
        extra = self.extra_fields(record)
        if extra:
            line = f"{line} - extra={extra}"

        exception = self.exception_text(record)
        return f"{line}\n{exception}" if exception else line


class StructuredFormatter(SdkFormatter):
    """``key=value`` pairs separated by spaces."""

    def format(self, record: logging.LogRecord) -> str:
        pairs: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        pairs.update(self.extra_fields(record))

        exception = self.exception_text(record)
        if exception:
            pairs["exception"] = exception

        return " ".join(f"{key}={value}" for key, value in pairs.items())


FORMATTERS = {
    "json": JsonFormatter,
    "text": TextFormatter,
    "structured": StructuredFormatter,
}


class LoggerService:
    """Service for configuring and providing SDK loggers.

    By default only the level of the ``rainy_sdk`` logger is set and
    handlers are left to the host application. ``LOG_HANDLER_ENABLED``
    attaches a stderr handler with the configured ``LOG_FORMAT`` to the
    ``rainy_sdk`` logger.
    """

    def __init__(
        self,
        settings_instance: Settings,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize logging configuration.

        Args:
            settings_instance: Settings instance to use
            config: Optional ``logging.config.dictConfig`` dictionary applied
                instead of the settings-driven setup
        """
        self.settings = settings_instance

        if config:
            logging.config.dictConfig(config)
            return

        sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
        sdk_logger.setLevel(settings_instance.LOG_LEVEL.upper())
        if settings_instance.LOG_HANDLER_ENABLED and not any(
            getattr(handler, "_rainy_sdk", False) for handler in sdk_logger.handlers
        ):
            sdk_logger.addHandler(self.create_handler(settings_instance.LOG_FORMAT))

    def create_handler(self, format: str) -> logging.Handler:
        """Create a stderr handler using one of the SDK formatters.

        Raises:
            ValueError: If the format is unknown
        """
        try:
            formatter_class = FORMATTERS[format]
        except KeyError:
            raise ValueError(
                f"Unknown log format {format!r}, expected one of {sorted(FORMATTERS)}"
            ) from None
        handler = logging.StreamHandler()
        handler.setFormatter(formatter_class(self.settings))
        handler._rainy_sdk = True  # type: ignore[attr-defined]
        return handler

    def get_logger(self, name: str, format: Optional[str] = None) -> logging.Logger:
        """Get logger instance.

        Args:
            name: Logger name, typically __name__
            format: Optional format override (json, text, structured)

        Returns:
            Logger instance
        """
        logger = logging.getLogger(name)

        # A format override gets its own handler instead of the package one
        if format and self.settings.LOG_HANDLER_ENABLED and not logger.handlers:
            logger.addHandler(self.create_handler(format))
            logger.propagate = False

        return logger
