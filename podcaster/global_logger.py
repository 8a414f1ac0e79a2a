import sys

from loguru import logger


def init_logging(log_level: str = "INFO", *, local_mode: bool = True) -> None:
    """Initialize loguru logger."""
    logger.remove()

    if local_mode:
        logger.add(
            sys.stdout,
            format="{time:HH:mm:ss} <level>{level: <8}</level> [podcaster] {message}",
            level=log_level.upper(),
            colorize=True,
        )
    else:
        logger.add(
            sys.stdout,
            format="[podcaster] - {level: <8} - {message}",
            level=log_level.upper(),
            colorize=False,
        )
