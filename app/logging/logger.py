import logging
import sys


class Log:
    """Centralized logging with structured format.

    Keyword arguments are rendered as ``key=value`` pairs after the message,
    e.g. ``Log.info("Task leased", task_id="abc", retries=2)``.
    """

    _logger: logging.Logger = logging.getLogger("audit_worker")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(threadName)s %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(cls._format(message, kwargs))

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(cls._format(message, kwargs))

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active exception's traceback."""
        cls._logger.exception(cls._format(message, kwargs))

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(cls._format(message, kwargs))

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(cls._format(message, kwargs))

    @staticmethod
    def _format(message: str, fields: dict[str, object]) -> str:
        if not fields:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} [{rendered}]"
