"""Data models shared by the feed client, scanner, downloader and pipeline."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, field_validator
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class PodcastConfig:
    """A subscribed podcast.

    id: Name of the podcast's sub-directory in the media directory.
    feed_url: Location of the RSS feed.
    """

    id: str
    feed_url: str

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value or value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"podcast id must be a plain directory name, got {value!r}")
        return value


@dataclass(frozen=True)
class Episode:
    """A single item of a podcast feed."""

    title: str
    enclosure_url: str


@dataclass(frozen=True)
class DownloadTask:
    """Fetch `source_url` and store it at `output_path`."""

    title: str
    source_url: str
    output_path: Path


class RunState(BaseModel):
    """Persisted record of every file downloaded by any past run."""

    downloaded: list[str] = Field(default_factory=list)

    _index: set[str] = PrivateAttr(default_factory=set)

    def model_post_init(self, __context: Any) -> None:
        self.downloaded = list(dict.fromkeys(self.downloaded))
        self._index = set(self.downloaded)

    def __contains__(self, path: object) -> bool:
        return str(path) in self._index

    def __len__(self) -> int:
        return len(self.downloaded)

    def add(self, path: str | Path) -> bool:
        """Record a downloaded path. Returns False if it was already recorded."""
        key = str(path)
        if key in self._index:
            return False

        self._index.add(key)
        self.downloaded.append(key)
        return True
