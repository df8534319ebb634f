"""
Transmission State

In-memory model of the transmission feed and the regeneration gate.

The feed is an ordered list of entries, newest first, capped at
MAX_TRANSMISSIONS. A new entry is generated at most once per
GENERATION_INTERVAL_SEC.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from relay.broadcast.synthesizer import synthesize
from relay.clock.time_util import clock_label
from relay.constants import GENERATION_INTERVAL_SEC, MAX_TRANSMISSIONS

logger = logging.getLogger(__name__)

# Seed feed used when no valid store exists: (age in seconds, message)
SEED_TRANSMISSIONS = (
    (1_200, "Uplink stabilized. Archive index pushed to public relay."),
    (3_300, "Detected repeating pattern in ambient static. Logged as anomaly A-17."),
    (5_800, "Scheduled new broadcast: Deep Space Transmitter."),
)


@dataclass(frozen=True)
class TransmissionEntry:
    """
    One broadcast record.

    time_label is derived from timestamp once, at creation. Use create()
    rather than the constructor so the two cannot disagree.
    """
    timestamp: int  # epoch seconds
    time_label: str  # HH:MM:SS of timestamp
    message: str

    @classmethod
    def create(cls, timestamp: int, message: str) -> "TransmissionEntry":
        return cls(timestamp=timestamp, time_label=clock_label(timestamp), message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "time_label": self.time_label,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TransmissionEntry":
        """
        Build an entry from its JSON form.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"entry must be an object, got {type(data).__name__}")
        timestamp = data.get("timestamp")
        time_label = data.get("time_label")
        message = data.get("message")
        if not _is_epoch_seconds(timestamp):
            raise ValueError(f"invalid entry timestamp: {timestamp!r}")
        if not isinstance(time_label, str):
            raise ValueError(f"invalid entry time_label: {time_label!r}")
        if not isinstance(message, str):
            raise ValueError(f"invalid entry message: {message!r}")
        return cls(timestamp=timestamp, time_label=time_label, message=message)


@dataclass
class TransmissionState:
    """
    Feed aggregate: regeneration bookkeeping plus entries, newest first.

    Mutated only by refresh_if_due().
    """
    last_generated_at: int
    entries: List[TransmissionEntry] = field(default_factory=list)

    def copy(self) -> "TransmissionState":
        """Return an independent copy (entries themselves are immutable)."""
        return TransmissionState(last_generated_at=self.last_generated_at, entries=list(self.entries))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_generated_at": self.last_generated_at,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TransmissionState":
        """
        Build a state from its JSON form, preserving entry order.

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"state must be an object, got {type(data).__name__}")
        last_generated_at = data.get("last_generated_at")
        entries = data.get("entries")
        if not _is_epoch_seconds(last_generated_at):
            raise ValueError(f"invalid last_generated_at: {last_generated_at!r}")
        if not isinstance(entries, list):
            raise ValueError(f"entries must be a list, got {type(entries).__name__}")
        return cls(
            last_generated_at=last_generated_at,
            entries=[TransmissionEntry.from_dict(item) for item in entries],
        )


def _is_epoch_seconds(value: Any) -> bool:
    # bool is an int subclass; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def is_due(state: TransmissionState, now: int) -> bool:
    """
    Regeneration gate.

    Elapsed time saturates at zero, so a clock that moved backwards keeps
    the gate shut until now passes last_generated_at + interval.
    """
    elapsed = max(0, now - state.last_generated_at)
    return elapsed >= GENERATION_INTERVAL_SEC


def refresh_if_due(state: TransmissionState, now: int) -> bool:
    """
    Generate a new entry if the regeneration interval has elapsed.

    Mutates state in place. Callers sharing a state between threads must
    hold an exclusive lock across this call.

    Args:
        state: Feed state to update
        now: Current epoch seconds

    Returns:
        True if a new entry was inserted
    """
    if not is_due(state, now):
        return False

    message = synthesize(now, len(state.entries))
    state.entries.insert(0, TransmissionEntry.create(now, message))
    del state.entries[MAX_TRANSMISSIONS:]
    state.last_generated_at = now

    logger.debug(f"[TRANSMISSIONS] Generated entry at {now}: {message}")
    return True


def build_seed_state(now: int) -> TransmissionState:
    """
    Build the fixed three-entry fallback feed anchored to now.

    Args:
        now: Load time in epoch seconds

    Returns:
        Seed state with last_generated_at = now
    """
    entries = [
        TransmissionEntry.create(max(0, now - age), message)
        for age, message in SEED_TRANSMISSIONS
    ]
    return TransmissionState(last_generated_at=now, entries=entries)
