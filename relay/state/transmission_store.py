"""
Transmission Store for Relay Station.

Provides atomic, crash-resistant JSON storage for the transmission feed.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Union

from relay.clock.time_util import clock_label
from relay.constants import DEFAULT_TRANSMISSIONS_PATH, MAX_TRANSMISSIONS
from relay.state.transmission_state import TransmissionEntry, TransmissionState

logger = logging.getLogger(__name__)


class TransmissionStoreError(Exception):
    """Raised when the transmission store cannot be read or written."""


class TransmissionStoreMissingError(TransmissionStoreError):
    """Raised when the store file does not exist."""


class TransmissionStoreCorruptError(TransmissionStoreError):
    """Raised when the store file cannot be read or decoded."""


class TransmissionStore:
    """
    JSON-based feed storage with atomic writes.

    Uses a temporary file + atomic rename so a concurrent reader never
    sees a half-written document.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_TRANSMISSIONS_PATH):
        """
        Initialize transmission store.

        Args:
            path: Path to JSON store file
        """
        self.path = Path(path)
        # Set by load() when the loaded document needed repair
        self.last_load_repaired = False
        logger.debug(f"TransmissionStore initialized with path: {self.path}")

    def persist(self, state: TransmissionState) -> None:
        """
        Save the feed to the JSON store atomically.

        Creates the parent directory if missing, writes to a temporary
        file, then replaces the target.

        Args:
            state: Feed state to save

        Raises:
            TransmissionStoreError: If the state cannot be serialized or written
        """
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp, self.path)
            logger.debug(f"[STORE] Transmissions saved to {self.path}")
        except (OSError, TypeError, ValueError) as e:
            # Clean up temp file on error
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.debug(f"[STORE] Could not remove temp file {tmp}")
            raise TransmissionStoreError(f"Failed to persist transmissions to {self.path}: {e}") from e

    def load(self) -> TransmissionState:
        """
        Load the feed from the JSON store.

        Entries past MAX_TRANSMISSIONS are dropped and stale time labels
        are recomputed from their timestamps. last_load_repaired tells the
        caller whether the file on disk still holds the unrepaired form.

        Returns:
            Loaded feed state (may have an empty entry list)

        Raises:
            TransmissionStoreMissingError: If the store file does not exist
            TransmissionStoreCorruptError: If the file cannot be read or decoded
        """
        self.last_load_repaired = False
        if not self.path.exists():
            raise TransmissionStoreMissingError(f"No transmission store at {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise TransmissionStoreCorruptError(f"Unreadable transmission store {self.path}: {e}") from e

        try:
            state = TransmissionState.from_dict(data)
        except ValueError as e:
            raise TransmissionStoreCorruptError(f"Malformed transmission store {self.path}: {e}") from e

        self.last_load_repaired = _repair(state)
        logger.debug(f"[STORE] Transmissions loaded from {self.path} ({len(state.entries)} entries)")
        return state


def _repair(state: TransmissionState) -> bool:
    changed = False
    if len(state.entries) > MAX_TRANSMISSIONS:
        logger.warning(
            f"[STORE] Store held {len(state.entries)} entries, keeping newest {MAX_TRANSMISSIONS}"
        )
        del state.entries[MAX_TRANSMISSIONS:]
        changed = True

    repaired: List[TransmissionEntry] = []
    for entry in state.entries:
        expected = clock_label(entry.timestamp)
        if entry.time_label != expected:
            logger.warning(
                f"[STORE] Relabeling entry {entry.timestamp}: {entry.time_label!r} -> {expected!r}"
            )
            entry = TransmissionEntry.create(entry.timestamp, entry.message)
            changed = True
        repaired.append(entry)
    state.entries[:] = repaired
    return changed
