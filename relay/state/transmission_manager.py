"""
Transmission State Manager

Owns the shared transmission feed and the read/update/persist cycle.

The page-render path and the periodic refresh thread both call refresh();
the gate check and the mutation happen under one lock, so at most one entry
is generated per interval no matter how many callers race. Durable writes
happen after the lock is released, on a copy of the state.
"""

import logging
import threading
from typing import Callable, List, Optional

from relay.clock.time_util import now_seconds
from relay.state.transmission_state import (
    TransmissionEntry,
    TransmissionState,
    build_seed_state,
    refresh_if_due,
)
from relay.state.transmission_store import (
    TransmissionStore,
    TransmissionStoreError,
    TransmissionStoreMissingError,
)

logger = logging.getLogger(__name__)


class TransmissionStateManager:
    """
    Manages the TransmissionState lifecycle.

    Created once at startup and handed to every driver (HTTP handlers and
    the periodic refresh thread).

    One RLock guards both refresh and snapshot, so snapshots run one at a
    time rather than concurrently. Each holds the lock only long enough to
    copy at most MAX_TRANSMISSIONS references.
    """

    def __init__(self, store: TransmissionStore, clock: Callable[[], int] = now_seconds):
        """
        Initialize state manager.

        Args:
            store: Durable store for the feed
            clock: Source of current epoch seconds
        """
        self._store = store
        self._clock = clock
        self._state: Optional[TransmissionState] = None
        self._lock = threading.RLock()  # Guards _state

        # Serializes durable writes; never held together with _lock
        self._persist_lock = threading.Lock()
        self._persisted_generation: Optional[int] = None

    def load_or_seed(self, now: Optional[int] = None) -> TransmissionState:
        """
        Load the feed from the store, or fall back to the seed feed.

        A missing, unreadable, malformed or empty store is replaced by the
        seed feed, which is persisted immediately. A store the loader had
        to repair is written back in its repaired form. Persist failures
        are logged and otherwise ignored.

        Args:
            now: Load time in epoch seconds (defaults to the clock)

        Returns:
            A copy of the state now held by the manager
        """
        if now is None:
            now = self._clock()

        state: Optional[TransmissionState] = None
        try:
            state = self._store.load()
        except TransmissionStoreMissingError:
            logger.info(f"[TRANSMISSIONS] No store at {self._store.path}, seeding feed")
        except TransmissionStoreError as e:
            logger.warning(f"[TRANSMISSIONS] {e}; seeding feed")

        if state is not None and not state.entries:
            logger.warning("[TRANSMISSIONS] Store has no entries, seeding feed")
            state = None

        if state is None:
            state = build_seed_state(now)
            self._persist(state.copy())
        else:
            logger.info(
                f"[TRANSMISSIONS] Loaded {len(state.entries)} entries "
                f"(last generated at {state.last_generated_at})"
            )
            if self._store.last_load_repaired:
                logger.info("[TRANSMISSIONS] Writing repaired store back")
                self._persist(state.copy())

        with self._lock:
            self._state = state
            return state.copy()

    def refresh(self, now: Optional[int] = None) -> bool:
        """
        Generate a new entry if due, then persist the result.

        Safe to call concurrently. Only the caller that performs the
        mutation persists; persistence failures are logged and the
        in-memory change is kept.

        Args:
            now: Current epoch seconds (defaults to the clock)

        Returns:
            True if a new entry was generated
        """
        if now is None:
            now = self._clock()

        with self._lock:
            state = self._require_state()
            if not refresh_if_due(state, now):
                return False
            snapshot = state.copy()

        logger.info(f"[TRANSMISSIONS] New transmission: {snapshot.entries[0].message}")
        self._persist(snapshot)
        return True

    def snapshot(self) -> List[TransmissionEntry]:
        """
        Get a copy of current entries, newest first (read-only).

        Returns:
            List of entries; mutating it does not affect the manager
        """
        with self._lock:
            return list(self._require_state().entries)

    def refresh_and_snapshot(self, now: Optional[int] = None) -> List[TransmissionEntry]:
        """Refresh if due, then return the entries to display."""
        self.refresh(now)
        return self.snapshot()

    def get_state(self) -> TransmissionState:
        """Get a copy of the full state."""
        with self._lock:
            return self._require_state().copy()

    def _require_state(self) -> TransmissionState:
        if self._state is None:
            raise RuntimeError("TransmissionStateManager used before load_or_seed()")
        return self._state

    def _persist(self, state: TransmissionState) -> None:
        """
        Write a state copy to the store, outside the state lock.

        A copy older than one already written is skipped, so writers that
        finish out of order cannot roll the store back.
        """
        with self._persist_lock:
            if (self._persisted_generation is not None
                    and state.last_generated_at < self._persisted_generation):
                logger.debug(
                    f"[TRANSMISSIONS] Skipping stale persist ({state.last_generated_at} "
                    f"< {self._persisted_generation})"
                )
                return
            try:
                self._store.persist(state)
            except TransmissionStoreError as e:
                logger.error(f"[TRANSMISSIONS] Failed to persist transmissions: {e}")
                return
            self._persisted_generation = state.last_generated_at
