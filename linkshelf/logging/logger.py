import logging
import sys

# Libraries that log every request or every parsed PDF object at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "pdfminer", "urllib3")


class Log:
    """Centralized logging for ingestion threads and CLI commands."""

    _logger: logging.Logger = logging.getLogger("linkshelf")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler once and set the level.

        Third-party loggers in NOISY_LOGGERS are held at WARNING unless the
        application itself runs at DEBUG.
        """
        level = log_level.upper()
        cls._logger.setLevel(level)
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        library_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(library_level)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
