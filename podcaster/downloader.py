import asyncio
import tempfile
from pathlib import Path

import httpx
from loguru import logger

from podcaster.exceptions import FetchError, WriteError
from podcaster.models import DownloadTask

_PARTIAL_SUFFIX = ".part"


def _create_partial_file(output_path: Path) -> Path:
    """Create an empty, uniquely named `.part` file next to the destination."""
    with tempfile.NamedTemporaryFile(
        dir=output_path.parent, prefix=f"{output_path.name}.", suffix=_PARTIAL_SUFFIX, delete=False
    ) as file:
        return Path(file.name)


class FileDownloader:
    """Stream episode files to disk with a shared async client."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def download(self, task: DownloadTask) -> Path:
        """Download a task's file and return the path it was written to.

        An existing file at the destination counts as downloaded and is not fetched again.
        The body is written to a uniquely named `.part` file that only replaces the
        destination once the transfer is complete. The `.part` file is removed whenever
        the download does not complete, including on cancellation.

        Raises:
            FetchError: If the request fails or the response is not a 2xx.
            WriteError: If the file cannot be created, written or moved into place.
        """
        output_path = task.output_path

        if output_path.exists():
            logger.info(f'Episode "{task.title}" already downloaded: "{output_path}"')
            return output_path

        logger.info(f'Downloading the episode "{task.title}" to "{output_path}"...')

        try:
            partial_path = await asyncio.to_thread(_create_partial_file, output_path)
        except OSError as e:
            raise WriteError(output_path, e) from e

        try:
            await self._stream_to_file(task.source_url, partial_path)
            await asyncio.to_thread(partial_path.replace, output_path)
        except OSError as e:
            raise WriteError(output_path, e) from e
        finally:
            # Gone already when the rename succeeded.
            partial_path.unlink(missing_ok=True)

        logger.info(f'Successfully downloaded episode "{task.title}" to "{output_path}"')
        return output_path

    async def _stream_to_file(self, url: str, path: Path) -> None:
        try:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()

                file = await asyncio.to_thread(path.open, "wb")
                try:
                    async for chunk in response.aiter_bytes():
                        await asyncio.to_thread(file.write, chunk)
                finally:
                    file.close()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"got HTTP status: {e.response.status_code} {e.response.reason_phrase}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, e) from e
