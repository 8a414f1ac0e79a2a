import os
from pathlib import Path
from typing import Any, Protocol, cast

import pydantic
from dynaconf import Dynaconf, ValidationError, Validator
from dynaconf.validator import ValidatorList

from podcaster.exceptions import ConfigError
from podcaster.models import PodcastConfig

APP_NAME = "podcaster"
CONFIG_FILE_NAME = "config.json"
STATE_FILE_NAME = "podcaster-state.json"

_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_HTTP_TIMEOUT = 60


class ConfigProto(Protocol):
    """Protocol for config object."""

    # Built-ins
    validators: ValidatorList

    def get(self, key: str, default: Any = None) -> Any: ...  # noqa: D102

    # Config variables
    local_mode: bool
    log_level: str
    http_timeout: float

    # Library
    media_dir: str
    podcasts: list[dict[str, str]]

    # Sentry (optional)
    sentry_dsn: str


def get_default_config_path() -> Path:
    """Return the config location for the current platform.

    Checked in order: XDG_CONFIG_HOME, HOME (Linux/macOS), APPDATA (Windows).
    Falls back to the working directory.
    """
    if config_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(config_home) / APP_NAME / CONFIG_FILE_NAME

    if home := os.environ.get("HOME"):
        return Path(home) / ".config" / APP_NAME / CONFIG_FILE_NAME

    if app_data := os.environ.get("APPDATA"):
        return Path(app_data) / APP_NAME / CONFIG_FILE_NAME

    return Path(CONFIG_FILE_NAME)


def load_config(config_path: Path | None = None) -> ConfigProto:
    """Load and validate the configuration file.

    Values can be overridden with PODCASTER_* environment variables or a .env file.

    Raises:
        ConfigError: If the file is missing, unreadable or fails validation.
    """
    path = (config_path or get_default_config_path()).expanduser().resolve()
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    config = Dynaconf(
        envvar_prefix="PODCASTER",
        settings_files=[str(path)],
        load_dotenv=True,
        ignore_unknown_envvars=True,
        validators=[
            Validator("media_dir", required=True, ne="", messages={"operations": "{name} must not be blank"}),
            Validator("podcasts", required=True, is_type_of=list),
            Validator("log_level", default=_DEFAULT_LOG_LEVEL, cast=lambda x: str(x).upper()),
            Validator("local_mode", default=True, is_type_of=bool),
            Validator("http_timeout", default=_DEFAULT_HTTP_TIMEOUT, cast=float, gte=0),
            Validator("sentry_dsn", default=""),
        ],
    )

    try:
        config.validators.validate_all()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read configuration {path}: {e}") from e

    return cast(ConfigProto, config)


def get_media_dir(config: ConfigProto) -> Path:
    """Return the media directory, with `~` expanded."""
    return Path(config.media_dir).expanduser()


def get_podcasts(config: ConfigProto) -> list[PodcastConfig]:
    """Build the podcast list from the `podcasts` setting.

    Raises:
        ConfigError: If an entry is malformed or an id is used twice.
    """
    podcasts: list[PodcastConfig] = []
    seen_ids: set[str] = set()

    for position, entry in enumerate(config.podcasts):
        try:
            podcast = PodcastConfig(id=entry.get("id", ""), feed_url=entry.get("url", ""))
        except (AttributeError, pydantic.ValidationError) as e:
            raise ConfigError(f"Invalid podcast entry #{position}: {e}") from e

        if not podcast.feed_url:
            raise ConfigError(f"Podcast '{podcast.id}' has no feed url")

        if podcast.id in seen_ids:
            raise ConfigError(f"Duplicate podcast id: '{podcast.id}'")

        seen_ids.add(podcast.id)
        podcasts.append(podcast)

    return podcasts
