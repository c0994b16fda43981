import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

logger = logging.getLogger("device_registry")
_console_handler = None


def setup_logging(level: str = "INFO") -> None:
    """Route app and uvicorn logs through one console handler on the root logger."""
    global _console_handler
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _console_handler is None:
        _console_handler = logging.StreamHandler()
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(_console_handler)

    logger.info(f"Logging initialized at level {level.upper()}")
