import logging
from pathlib import Path

from pydantic import ValidationError

from . import settings
from .models import SyncState

logger = logging.getLogger(__name__)


class SyncStateStore:
    """Keeps the latest SyncState in a small JSON file between runs."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else settings.SYNC_STATE_FILE

    def load(self) -> SyncState:
        """Saved state, or an empty one if nothing usable is on disk."""
        if not self.path.exists():
            return SyncState()

        try:
            return SyncState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable sync state at %s: %s", self.path, e)
            return SyncState()

    def save(self, state: SyncState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved sync state (last sync %s)", state.last_sync_time)
