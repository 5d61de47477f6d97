import logging
import sys

# attributes every LogRecord carries; anything else came in through Log(**context)
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _ContextFormatter(logging.Formatter):
    """Appends keyword context as key=value pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} | {pairs}"


class Log:
    """Centralized logging with structured format.

    Keyword arguments are carried as record extras and rendered after the
    message, e.g. ``Log.info("Stage committed", document_id=doc_id)``.
    """

    _logger: logging.Logger = logging.getLogger("idp")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                _ContextFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra=context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra=context)

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at error level with the active exception's traceback."""
        cls._logger.exception(message, extra=context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra=context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra=context)
