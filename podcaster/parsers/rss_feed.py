import asyncio
from typing import cast

import feedparser
import httpx
from feedparser.util import FeedParserDict
from loguru import logger

from podcaster.exceptions import FetchError, ParseError
from podcaster.models import Episode


async def fetch_feed(client: httpx.AsyncClient, url: str) -> list[Episode]:
    """Retrieve the episodes of a podcast feed, in feed order (newest first by convention).

    Raises:
        FetchError: If the request fails or the response is not a 2xx.
        ParseError: If the payload is not a feed.
    """
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"got HTTP status: {e.response.status_code} {e.response.reason_phrase}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, e) from e

    feed = await asyncio.to_thread(feedparser.parse, response.content)

    if feed.bozo:
        if not feed.entries:
            raise ParseError(url, feed.get("bozo_exception", "malformed feed"))

        logger.warning(f'RSS feed "{url}" has parsing issues: {feed.get("bozo_exception")}')

    return [_parse_entry(cast("FeedParserDict", entry)) for entry in feed.entries]


def _parse_entry(entry: FeedParserDict) -> Episode:
    enclosures = entry.get("enclosures") or []
    enclosure_url = cast("str", enclosures[0].get("href", "")) if enclosures else ""

    return Episode(title=cast("str", entry.get("title", "")), enclosure_url=enclosure_url.strip())
