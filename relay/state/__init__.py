"""
State module for Relay Station.

Provides the transmission feed model, its JSON store, and the manager that
coordinates refreshes between threads.
"""

from .transmission_manager import TransmissionStateManager
from .transmission_state import TransmissionEntry, TransmissionState, build_seed_state, refresh_if_due
from .transmission_store import (
    TransmissionStore,
    TransmissionStoreCorruptError,
    TransmissionStoreError,
    TransmissionStoreMissingError,
)

__all__ = [
    "TransmissionEntry",
    "TransmissionState",
    "TransmissionStateManager",
    "TransmissionStore",
    "TransmissionStoreCorruptError",
    "TransmissionStoreError",
    "TransmissionStoreMissingError",
    "build_seed_state",
    "refresh_if_due",
]
