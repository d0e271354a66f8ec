"""
Durable storage for the room document.

The document lives in a single JSON file holding two keys, "teams" and
"updatedAt". Writes go to a temp file first and are then atomically renamed
over the state file, so the pair is always persisted together and the file is
never left half-written.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

from .. import config
from ..errors import ValidationError
from .room_document import RoomDocument, next_timestamp

logger = logging.getLogger(__name__)

INVALID_TEAMS_MESSAGE = 'Invalid payload: "teams" must be an array'


class RoomStateStore:
    """Owns the single persisted room document."""

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the state store.

        Args:
            data_dir: Directory for the state file (default: config.DATA_DIR)
        """
        self.data_dir = Path(data_dir or config.DATA_DIR)
        self.state_file = self.data_dir / config.STATE_FILENAME

        self._lock = threading.Lock()
        self._document: Optional[RoomDocument] = None  # in-memory until first save
        self._loaded = False

    @property
    def loaded(self) -> bool:
        """Whether the state file has been read in this process."""
        return self._loaded

    def load(self) -> RoomDocument:
        """
        Return the current document.

        Reads the state file on first call. If nothing has been persisted yet,
        returns a default document (no teams, current timestamp) without
        writing it.

        Returns:
            Independent copy of the current RoomDocument
        """
        with self._lock:
            self._ensure_loaded()
            return self._document.copy()

    def save(self, teams: Any) -> RoomDocument:
        """
        Replace the team list and stamp a fresh timestamp.

        Args:
            teams: New ordered team list (opaque JSON values)

        Returns:
            Independent copy of the saved RoomDocument

        Raises:
            ValidationError: If teams is not a list
            OSError: If the state file cannot be written
        """
        if not isinstance(teams, list):
            raise ValidationError(INVALID_TEAMS_MESSAGE)

        with self._lock:
            self._ensure_loaded()
            previous = self._document.updated_at
            document = RoomDocument(teams=teams, updated_at=next_timestamp(previous)).copy()

            self._write_state_file(document)
            self._document = document

        logger.info(f"Saved room document: {len(teams)} teams at {document.updated_at}")
        return document.copy()

    def _ensure_loaded(self) -> None:
        """Read the state file once; callers must hold the lock."""
        if not self._loaded:
            self._document = self._read_state_file() or RoomDocument.default()
            self._loaded = True

    def _read_state_file(self) -> Optional[RoomDocument]:
        """
        Read the persisted document.

        Returns:
            RoomDocument or None if the file is missing or unreadable
        """
        if not self.state_file.exists():
            logger.debug(f"State file does not exist yet: {self.state_file}")
            return None

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to read state file {self.state_file}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed state file {self.state_file}")
            return None

        document = RoomDocument.from_dict(data)
        logger.info(
            f"Loaded room document: {len(document.teams)} teams, "
            f"updated {document.updated_at} ← {self.state_file}"
        )
        return document

    def _write_state_file(self, document: RoomDocument) -> None:
        """Atomic write: temp file + rename."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        temp_file = self.state_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(document.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            temp_file.replace(self.state_file)
        except Exception:
            temp_file.unlink(missing_ok=True)
            raise
