import asyncio
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx
from loguru import logger

from podcaster.exceptions import (
    DirectoryError,
    DuplicateFileNameError,
    EmptyFeedError,
    FetchError,
    NamingError,
    ParseError,
    PodcasterError,
)
from podcaster.models import DownloadTask, PodcastConfig, RunState
from podcaster.parsers.rss_feed import fetch_feed
from podcaster.utils.helpers import derive_file_name

ErrorReporter = Callable[[PodcasterError], None]


async def scan_podcast(
    client: httpx.AsyncClient,
    podcast: PodcastConfig,
    output_dir: Path,
    count: int,
    state: RunState,
    report_error: ErrorReporter,
) -> AsyncIterator[DownloadTask]:
    """Yield a download task for each of the latest `count` episodes not yet downloaded.

    Errors are passed to `report_error` instead of being raised. A directory, fetch or
    parse error ends the scan. A naming error, or a file name already taken by an
    earlier episode of the same feed, only skips its episode. A negative `count` selects
    nothing.

    `state` is only read.
    """
    try:
        await asyncio.to_thread(output_dir.mkdir, parents=True, exist_ok=True)
    except OSError as e:
        report_error(DirectoryError(output_dir, e))
        return

    logger.info(f'Fetching RSS feed for {podcast.id} from "{podcast.feed_url}"...')
    try:
        episodes = await fetch_feed(client, podcast.feed_url)
    except (FetchError, ParseError) as e:
        report_error(e)
        return

    if not episodes:
        report_error(EmptyFeedError(podcast.feed_url))
        return

    emitted: set[Path] = set()
    for episode in episodes[: max(count, 0)]:
        try:
            file_name = derive_file_name(episode.enclosure_url)
        except NamingError as e:
            report_error(e)
            continue

        output_path = output_dir / file_name

        if output_path in state:
            logger.info(f'Episode "{episode.title}" was already downloaded: "{output_path}"')
            continue

        if output_path in emitted:
            report_error(DuplicateFileNameError(episode.enclosure_url, output_path))
            continue
        emitted.add(output_path)

        yield DownloadTask(title=episode.title, source_url=episode.enclosure_url, output_path=output_path)
