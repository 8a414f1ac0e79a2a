"""Concurrent fetch-and-download pipeline.

Scanners run one per podcast and feed a shared task queue. A dispatcher starts one
download per task. Completed paths flow to a single aggregator that owns the state,
and every error flows to a single logger.

Shutdown happens in stages: scanners finish, then the task queue is closed, then the
downloads finish, then the completion and error queues are closed.
"""

import asyncio
from collections.abc import Iterable
from pathlib import Path

import httpx
from loguru import logger

from podcaster.downloader import FileDownloader
from podcaster.exceptions import PodcasterError
from podcaster.models import DownloadTask, PodcastConfig, RunState
from podcaster.scanner import scan_podcast


def select_podcasts(podcasts: Iterable[PodcastConfig], podcast_id: str | None = None) -> list[PodcastConfig]:
    """Return the podcast with the given id, or all podcasts if no id is given."""
    if not podcast_id:
        return list(podcasts)

    selected = [podcast for podcast in podcasts if podcast.id == podcast_id]
    if not selected:
        logger.warning(f"No podcast with id '{podcast_id}' in the configuration.")

    return selected


class Pipeline:
    """Download the latest episodes of a set of podcasts into a media directory.

    Attributes:
        downloaded: Paths added to the state during the last run.
        errors: Errors reported during the last run.
    """

    def __init__(self, client: httpx.AsyncClient, media_dir: Path, count: int = 1) -> None:
        self.client = client
        self.media_dir = media_dir
        self.count = count
        self.downloader = FileDownloader(client)

        self.downloaded: list[Path] = []
        self.errors: list[Exception] = []

        self._tasks: asyncio.Queue[DownloadTask | None]
        self._completed: asyncio.Queue[Path | None]
        self._errors: asyncio.Queue[Exception | None]

    async def run(
        self,
        podcasts: Iterable[PodcastConfig],
        state: RunState,
        podcast_id: str | None = None,
    ) -> RunState:
        """Scan every selected podcast and download its new episodes.

        Individual failures are logged and never raised. `state` is updated in place
        and returned once every scan and download has finished.

        If the run is cancelled, downloads that already finished are still added to
        `state` before the cancellation propagates.
        """
        self.downloaded = []
        self.errors = []
        self._tasks = asyncio.Queue()
        self._completed = asyncio.Queue()
        self._errors = asyncio.Queue()

        selected = select_podcasts(podcasts, podcast_id)
        logger.info(f"Checking {len(selected)} podcasts for the latest {self.count} episodes...")

        aggregator = asyncio.create_task(self._aggregate(state))
        error_logger = asyncio.create_task(self._log_errors())

        try:
            async with asyncio.TaskGroup() as downloads:
                downloads.create_task(self._dispatch(downloads))

                async with asyncio.TaskGroup() as scans:
                    for podcast in selected:
                        scans.create_task(self._scan(podcast, state))

                # No scanner can emit anymore, so the task stream can be closed.
                await self._tasks.put(None)
        finally:
            # Runs on cancellation too, so finished downloads still reach the state.
            await self._close(self._completed, aggregator)
            await self._close(self._errors, error_logger)

        logger.success(f"All downloads completed: {len(self.downloaded)} new episodes, {len(self.errors)} errors.")
        return state

    def report_error(self, error: Exception) -> None:
        """Queue an error for logging."""
        self._errors.put_nowait(error)

    async def _scan(self, podcast: PodcastConfig, state: RunState) -> None:
        output_dir = self.media_dir / podcast.id

        try:
            async for task in scan_podcast(self.client, podcast, output_dir, self.count, state, self.report_error):
                await self._tasks.put(task)
        except Exception as e:  # noqa: BLE001
            self.report_error(e)

    async def _dispatch(self, downloads: asyncio.TaskGroup) -> None:
        while (task := await self._tasks.get()) is not None:
            downloads.create_task(self._download(task))

    async def _download(self, task: DownloadTask) -> None:
        try:
            output_path = await self.downloader.download(task)
        except Exception as e:  # noqa: BLE001
            self.report_error(e)
        else:
            await self._completed.put(output_path)

    @staticmethod
    async def _close(queue: asyncio.Queue, consumer: asyncio.Task) -> None:
        await queue.put(None)
        await consumer

    async def _aggregate(self, state: RunState) -> None:
        while (output_path := await self._completed.get()) is not None:
            if state.add(output_path):
                self.downloaded.append(output_path)

    async def _log_errors(self) -> None:
        while (error := await self._errors.get()) is not None:
            self.errors.append(error)

            if isinstance(error, PodcasterError):
                logger.error(str(error))
            else:
                logger.opt(exception=error).error(f"Unexpected {type(error).__name__}: {error}")
