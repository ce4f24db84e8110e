import threading

from loguru import logger
from stock_recon.config import get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

_lock = threading.Lock()
_sink_id = None
_sink_level = None


class AppLogger:
    """Package logger configuration for the reconciliation engine.

    The package owns a single stdout sink at get_config().log_level. The first
    logger taken replaces loguru's default handler; after that only the
    package's own sink is ever touched, and only when the configured level
    changes, so sinks added by the embedding application are left alone.
    """
    def __init__(self) -> None:
        self._configure(get_config().log_level.upper())
        self.logger = logger

    @staticmethod
    def _configure(level: str) -> None:
        global _sink_id, _sink_level
        with _lock:
            if _sink_level == level:
                return
            if _sink_id is None:
                logger.remove()
            else:
                logger.remove(_sink_id)
            _sink_id = logger.add(
                sink=lambda msg: print(msg, end=""),
                level=level,
                format=LOG_FORMAT,
                filter=lambda record: "name" in record["extra"],
            )
            _sink_level = level

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Name for the logger context. Defaults to the package name.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        return self.logger.bind(name=name or "stock_recon")


def get_logger(name: str = None):
    """Get an application logger, reconfiguring the package sink if the level changed."""
    return AppLogger().get_logger(name)
