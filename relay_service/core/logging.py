import logging
from typing import Any, Dict

LOGGER_NAME = "relay"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(settings: Dict[str, Any]) -> None:
    """Attach handlers to the relay logger from the `logging` settings section.

    stderr always gets a handler; a file handler is added when `logging.path`
    is set. Safe to call more than once: existing handlers are replaced.
    """
    log_cfg = settings.get("logging", {}) or {}
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    path = log_cfg.get("path")
    if path:
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
