from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import unquote, urlparse

import sentry_sdk
from loguru import logger
from sentry_sdk.integrations.loguru import LoggingLevels, LoguruIntegration

from podcaster.config import ConfigProto
from podcaster.exceptions import NamingError


def derive_file_name(url: str) -> str:
    """Get the file name of an enclosure URL.

    The query string and fragment are ignored and only the last path component is kept.
    Ex. "https://cdn.example/shows/ep-12.mp3?token=abc" -> "ep-12.mp3"

    Raises:
        NamingError: If the URL path has no usable last component.
    """
    path = unquote(urlparse(url.strip()).path)
    file_name = PurePosixPath(path).name

    if file_name in ("", ".", "..") or "\\" in file_name:
        raise NamingError(url)

    return file_name


def setup_tracing(config: ConfigProto) -> None:
    """Send error logs to Sentry when a DSN is configured."""
    if not config.sentry_dsn:
        return

    sentry_loguru = LoguruIntegration(
        level=LoggingLevels.INFO.value,
        event_level=LoggingLevels.ERROR.value,
    )

    sentry_sdk.init(
        dsn=config.sentry_dsn,
        environment="local" if config.local_mode else "production",
        integrations=[sentry_loguru],
    )


def run_main_safely(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a function, logging any exception that ends the program."""
    try:
        result = func(*args, **kwargs)
    except Exception:
        logger.exception("Exiting due to exception.")
        raise
    else:
        logger.debug("Exiting without exception.")

    return result
