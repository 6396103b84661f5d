import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_NAME = "networth-stdout"


def setup_logging(level: str | int = logging.INFO) -> None:
    """Send engine logs to stdout; calling it again only changes the level."""
    root_logger = logging.getLogger()
    if not any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(handler)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    # Quiet noisy libraries
    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
