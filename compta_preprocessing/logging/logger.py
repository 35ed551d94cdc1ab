import logging
import sys
from typing import TextIO


class _ContextFormatter(logging.Formatter):
    """Appends keyword context (tenant, document, page...) to the message."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context: dict[str, object] = getattr(record, "context", {})
        if not context:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{rendered}]"


class Log:
    """Centralized logging for the preprocessing pipeline.

    Keyword arguments are rendered as ``key=value`` context after the message:
    ``Log.warning("Page dropped", document="COMPTA 2022.pdf", page=99)``.
    """

    _logger: logging.Logger = logging.getLogger("compta_preprocessing")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Configure the logger with the specified level and a single stream handler.

        Logs go to stdout unless another ``stream`` is given; calling again
        redirects the existing handler.
        """
        cls._logger.setLevel(log_level.upper())
        stream = stream or sys.stdout
        for existing in cls._logger.handlers:
            if isinstance(existing, logging.StreamHandler):
                existing.setStream(stream)
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream)
            handler.setFormatter(
                _ContextFormatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra={"context": context})

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra={"context": context})

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra={"context": context})

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra={"context": context})
