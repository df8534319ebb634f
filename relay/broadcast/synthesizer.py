"""
Message synthesizer for Relay Station.

Builds short transmission sentences from a timestamp and the current feed
length. Output is fully determined by its inputs: no random source, no I/O.
"""

from typing import Sequence, Tuple

SUBJECTS: Tuple[str, ...] = (
    "Long-range scanner",
    "Relay drone",
    "Pirate beacon",
    "Outer rim array",
    "Subspace receiver",
    "Navigation core",
)

ACTIONS: Tuple[str, ...] = (
    "locked onto",
    "decoded",
    "flagged",
    "stabilized",
    "rerouted",
    "intercepted",
)

OBJECTS: Tuple[str, ...] = (
    "a drifting colony ping",
    "an encrypted trader channel",
    "a rogue moon telemetry burst",
    "a hidden wormhole marker",
    "an ion storm distress packet",
    "a ghost-fleet handshake",
)

# (stride applied to now, weight applied to entry_count) per word list
SUBJECT_STEP = (7, 3)
ACTION_STEP = (11, 5)
OBJECT_STEP = (13, 7)


def _pick(words: Sequence[str], now: int, entry_count: int, step: Tuple[int, int]) -> str:
    stride, weight = step
    return words[(now // stride + entry_count * weight) % len(words)]


def synthesize(now: int, entry_count: int) -> str:
    """
    Synthesize a transmission message.

    Args:
        now: Generation time in epoch seconds
        entry_count: Number of entries in the feed before this one

    Returns:
        Sentence of the form "{subject} {action} {object}."
    """
    subject = _pick(SUBJECTS, now, entry_count, SUBJECT_STEP)
    action = _pick(ACTIONS, now, entry_count, ACTION_STEP)
    obj = _pick(OBJECTS, now, entry_count, OBJECT_STEP)
    return f"{subject} {action} {obj}."
