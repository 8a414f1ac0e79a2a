"""Persistence of the downloaded-files record between runs."""

from pathlib import Path

import pydantic
from loguru import logger

from podcaster.config import STATE_FILE_NAME
from podcaster.exceptions import StateError
from podcaster.models import RunState


def get_state_file(media_dir: Path) -> Path:
    """Return the location of the state file for a media directory."""
    return media_dir / STATE_FILE_NAME


def load_state(state_file: Path) -> RunState:
    """Load the state file, starting from an empty state if it is missing or unreadable."""
    if not state_file.exists():
        logger.info(f'No state file at "{state_file}", starting fresh.')
        return RunState()

    try:
        state = RunState.model_validate_json(state_file.read_bytes())
    except (OSError, pydantic.ValidationError) as e:
        logger.warning(f'Ignoring unreadable state file "{state_file}": {e}')
        return RunState()

    logger.debug(f"Loaded state with {len(state)} downloaded episodes.")
    return state


def save_state(state: RunState, state_file: Path) -> None:
    """Overwrite the state file with the given state.

    Raises:
        StateError: If the file cannot be written.
    """
    temp_file = state_file.with_name(state_file.name + ".tmp")

    try:
        state_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        temp_file.replace(state_file)
    except OSError as e:
        if temp_file.exists():
            temp_file.unlink()
        raise StateError(state_file, e) from e

    logger.debug(f"Saved state with {len(state)} downloaded episodes to {state_file}")
