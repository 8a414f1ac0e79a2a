from pathlib import Path


class PodcasterError(Exception):
    """Base class for podcaster exceptions."""


class ConfigError(PodcasterError):
    """Exception raised when the configuration cannot be loaded or is invalid."""


class FetchError(PodcasterError):
    """Exception raised when a URL cannot be fetched."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f'failed to fetch URL "{url}": {reason}')
        self.url = url
        self.reason = reason


class ParseError(PodcasterError):
    """Exception raised when a feed document cannot be parsed."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f'failed to parse RSS feed "{url}": {reason}')
        self.url = url
        self.reason = reason


class EmptyFeedError(PodcasterError):
    """Exception raised when a feed has no episodes."""

    def __init__(self, url: str) -> None:
        super().__init__(f'no episodes found in the RSS feed "{url}"')
        self.url = url


class NamingError(PodcasterError):
    """Exception raised when no file name can be derived from an enclosure URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f'failed to determine the file name from the episode URL: "{url}"')
        self.url = url


class DirectoryError(PodcasterError):
    """Exception raised when an output directory cannot be created."""

    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f'failed to create directory "{path}": {reason}')
        self.path = path
        self.reason = reason


class WriteError(PodcasterError):
    """Exception raised when a downloaded file cannot be written."""

    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f'failed to write to file "{path}": {reason}')
        self.path = path
        self.reason = reason


class StateError(PodcasterError):
    """Exception raised when the state file cannot be saved."""

    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f'failed to save state "{path}": {reason}')
        self.path = path
        self.reason = reason


class DuplicateFileNameError(PodcasterError):
    """Exception raised when two episodes of a feed would be saved under the same file name."""

    def __init__(self, url: str, path: Path) -> None:
        super().__init__(f'episode URL "{url}" maps to "{path}", which an earlier episode of the feed already uses')
        self.url = url
        self.path = path
