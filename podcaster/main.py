import asyncio
from pathlib import Path

import click
from loguru import logger

from podcaster.config import ConfigProto, get_default_config_path, get_media_dir, get_podcasts, load_config
from podcaster.exceptions import ConfigError, StateError
from podcaster.global_logger import init_logging
from podcaster.models import PodcastConfig, RunState
from podcaster.pipeline import Pipeline
from podcaster.state import get_state_file, load_state, save_state
from podcaster.utils.helpers import run_main_safely, setup_tracing
from podcaster.utils.http_client import create_http_client


def download_podcasts(
    config: ConfigProto,
    podcasts: list[PodcastConfig],
    *,
    podcast_id: str | None = None,
    count: int = 1,
) -> RunState:
    """Download new episodes and persist the state, even if the run is interrupted."""
    media_dir = get_media_dir(config)
    state_file = get_state_file(media_dir)
    state = load_state(state_file)

    try:
        asyncio.run(_run_pipeline(config, media_dir, podcasts, state, podcast_id, count))
    finally:
        save_state(state, state_file)

    return state


async def _run_pipeline(
    config: ConfigProto,
    media_dir: Path,
    podcasts: list[PodcastConfig],
    state: RunState,
    podcast_id: str | None,
    count: int,
) -> None:
    async with create_http_client(config.http_timeout) as client:
        pipeline = Pipeline(client, media_dir, count)
        await pipeline.run(podcasts, state, podcast_id)


@click.command()
@click.option("--pid", "podcast_id", default=None, help="ID of the podcast to download (default: all podcasts)")
@click.option(
    "--count",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of latest episodes to download per podcast",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $XDG_CONFIG_HOME/podcaster/config.json)",
)
def main(podcast_id: str | None, count: int, config_path: Path | None) -> None:
    """Download the latest episodes of the podcasts listed in the config file."""
    init_logging()

    config_path = config_path or get_default_config_path()
    logger.info(f"Using config file: {config_path}")

    try:
        config = load_config(config_path)
        podcasts = get_podcasts(config)
    except ConfigError as e:
        raise click.ClickException(f"Failed to read config: {e}") from e

    init_logging(config.log_level, local_mode=config.local_mode)
    setup_tracing(config)

    try:
        run_main_safely(download_podcasts, config, podcasts, podcast_id=podcast_id, count=count)
    except StateError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
