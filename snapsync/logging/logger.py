import logging
import sys


class Log:
    """Centralized logging with a bracketed component tag per line.

    ``Log.info("Saved a.jpg", component="Download")`` renders as
    ``... [INFO] [Download] Saved a.jpg``.
    """

    _logger: logging.Logger = logging.getLogger("snapsync")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @staticmethod
    def _tagged(message: str, component: str | None) -> str:
        return f"[{component}] {message}" if component else message

    @classmethod
    def info(cls, message: str, component: str | None = None, **kwargs: object) -> None:
        cls._logger.info(cls._tagged(message, component), extra=kwargs)

    @classmethod
    def error(cls, message: str, component: str | None = None, **kwargs: object) -> None:
        cls._logger.error(cls._tagged(message, component), extra=kwargs)

    @classmethod
    def exception(
        cls, message: str, component: str | None = None, **kwargs: object
    ) -> None:
        """Log an error together with the active traceback."""
        cls._logger.exception(cls._tagged(message, component), extra=kwargs)

    @classmethod
    def warning(cls, message: str, component: str | None = None, **kwargs: object) -> None:
        cls._logger.warning(cls._tagged(message, component), extra=kwargs)

    @classmethod
    def debug(cls, message: str, component: str | None = None, **kwargs: object) -> None:
        cls._logger.debug(cls._tagged(message, component), extra=kwargs)
