from pathlib import Path

import httpx
import pytest

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
from podcaster.scanner import scan_podcast
from tests.fakes import FEED_URL_A, make_feed

FEED_E1_E2_E3 = make_feed(
    ("E1", "https://cdn.example/e1.mp3?token=abc"),
    ("E2", "https://cdn.example/e2.mp3"),
    ("E3", "https://cdn.example/e3.mp3"),
)


def _scan(
    run_with_client,
    podcast: PodcastConfig,
    output_dir: Path,
    count: int,
    state: RunState | None = None,
) -> tuple[list[DownloadTask], list[PodcasterError]]:
    errors: list[PodcasterError] = []
    state = state if state is not None else RunState()

    async def collect(client: httpx.AsyncClient) -> list[DownloadTask]:
        return [task async for task in scan_podcast(client, podcast, output_dir, count, state, errors.append)]

    return run_with_client(collect), errors


def test_scan_latest_episodes_in_feed_order(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    # Arrange
    server.add(FEED_URL_A, FEED_E1_E2_E3)
    output_dir = tmp_path / "a"

    # Act
    tasks, errors = _scan(run_with_client, podcast_a, output_dir, count=2)

    # Assert
    assert tasks == [
        DownloadTask(title="E1", source_url="https://cdn.example/e1.mp3?token=abc", output_path=output_dir / "e1.mp3"),
        DownloadTask(title="E2", source_url="https://cdn.example/e2.mp3", output_path=output_dir / "e2.mp3"),
    ]
    assert errors == []
    assert output_dir.is_dir()


def test_scan_count_larger_than_feed(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    server.add(FEED_URL_A, FEED_E1_E2_E3)

    tasks, _ = _scan(run_with_client, podcast_a, tmp_path / "a", count=10)

    assert [task.title for task in tasks] == ["E1", "E2", "E3"]


@pytest.mark.parametrize("count", [0, -1])
def test_scan_non_positive_count_selects_nothing(
    server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path, count: int
):
    server.add(FEED_URL_A, FEED_E1_E2_E3)

    tasks, errors = _scan(run_with_client, podcast_a, tmp_path / "a", count=count)

    assert tasks == []
    assert errors == []


def test_scan_skips_downloaded_episodes(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    # Arrange
    server.add(FEED_URL_A, FEED_E1_E2_E3)
    output_dir = tmp_path / "a"
    state = RunState(downloaded=[str(output_dir / "e1.mp3")])

    # Act
    tasks, errors = _scan(run_with_client, podcast_a, output_dir, count=2, state=state)

    # Assert
    assert [task.title for task in tasks] == ["E2"]
    assert errors == []
    assert state.downloaded == [str(output_dir / "e1.mp3")]


def test_scan_reports_naming_error_and_continues(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    server.add(FEED_URL_A, make_feed(("Bad", "https://cdn.example/"), ("E2", "https://cdn.example/e2.mp3")))

    tasks, errors = _scan(run_with_client, podcast_a, tmp_path / "a", count=2)

    assert [task.title for task in tasks] == ["E2"]
    assert len(errors) == 1
    assert isinstance(errors[0], NamingError)


def test_scan_fetch_error(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    server.add(FEED_URL_A, b"server error", status_code=500)

    tasks, errors = _scan(run_with_client, podcast_a, tmp_path / "a", count=1)

    assert tasks == []
    assert len(errors) == 1
    assert isinstance(errors[0], FetchError)


def test_scan_parse_error(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    server.add(FEED_URL_A, b"<html><body><p>not a feed")

    tasks, errors = _scan(run_with_client, podcast_a, tmp_path / "a", count=1)

    assert tasks == []
    assert [type(error) for error in errors] == [ParseError]


def test_scan_empty_feed(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    server.add(FEED_URL_A, make_feed())

    tasks, errors = _scan(run_with_client, podcast_a, tmp_path / "a", count=1)

    assert tasks == []
    assert [type(error) for error in errors] == [EmptyFeedError]


def test_scan_directory_error_skips_fetch(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    # Arrange
    server.add(FEED_URL_A, FEED_E1_E2_E3)
    output_dir = tmp_path / "a"
    output_dir.write_text("a file where the directory should be")

    # Act
    tasks, errors = _scan(run_with_client, podcast_a, output_dir, count=1)

    # Assert
    assert tasks == []
    assert [type(error) for error in errors] == [DirectoryError]
    assert server.requests == []


def test_scan_reports_duplicate_file_name(server, run_with_client, podcast_a: PodcastConfig, tmp_path: Path):
    # Arrange
    server.add(
        FEED_URL_A,
        make_feed(
            ("E1", "https://cdn.example/ep/1/audio.mp3"),
            ("E2", "https://cdn.example/ep/2/audio.mp3"),
            ("E3", "https://cdn.example/ep/3/e3.mp3"),
        ),
    )
    output_dir = tmp_path / "a"

    # Act
    tasks, errors = _scan(run_with_client, podcast_a, output_dir, count=3)

    # Assert
    assert [(task.title, task.output_path) for task in tasks] == [
        ("E1", output_dir / "audio.mp3"),
        ("E3", output_dir / "e3.mp3"),
    ]
    assert [type(error) for error in errors] == [DuplicateFileNameError]
    assert errors[0].url == "https://cdn.example/ep/2/audio.mp3"
    assert errors[0].path == output_dir / "audio.mp3"
