"""
Contract tests for the transmission feed model and regeneration gate.

- No generation before GENERATION_INTERVAL_SEC has elapsed
- A due refresh prepends exactly one entry stamped at now
- The feed never exceeds MAX_TRANSMISSIONS; the oldest entries are dropped
- A backwards clock keeps the gate shut
- Seed feed content and ordering
"""

import pytest

from relay.broadcast.synthesizer import synthesize
from relay.clock.time_util import clock_label
from relay.constants import GENERATION_INTERVAL_SEC, MAX_TRANSMISSIONS
from relay.state.transmission_state import (
    SEED_TRANSMISSIONS,
    TransmissionEntry,
    TransmissionState,
    build_seed_state,
    is_due,
    refresh_if_due,
)
from relay.tests.contracts.test_doubles import make_state


LAST = 1_000_000


class TestRegenerationGate:

    @pytest.mark.parametrize("elapsed", [0, 1, 60, GENERATION_INTERVAL_SEC - 1])
    def test_not_due_within_interval(self, elapsed):
        state = make_state(3, last_generated_at=LAST)
        before = state.copy()

        assert refresh_if_due(state, LAST + elapsed) is False
        assert state == before

    @pytest.mark.parametrize("elapsed", [GENERATION_INTERVAL_SEC, GENERATION_INTERVAL_SEC + 1, 10 * GENERATION_INTERVAL_SEC])
    def test_due_after_interval(self, elapsed):
        state = make_state(3, last_generated_at=LAST)
        assert refresh_if_due(state, LAST + elapsed) is True

    def test_at_most_one_generation_per_interval(self):
        state = make_state(3, last_generated_at=LAST)
        first = LAST + GENERATION_INTERVAL_SEC
        second = first + GENERATION_INTERVAL_SEC - 1

        assert refresh_if_due(state, first) is True
        assert refresh_if_due(state, second) is False
        assert len(state.entries) == 4
        assert state.last_generated_at == first

    def test_backwards_clock_keeps_gate_shut(self):
        state = make_state(3, last_generated_at=LAST)
        assert is_due(state, LAST - 5 * GENERATION_INTERVAL_SEC) is False
        assert refresh_if_due(state, 0) is False
        assert state.last_generated_at == LAST


class TestDueRefresh:

    def test_prepends_new_entry_at_now(self):
        state = make_state(3, last_generated_at=LAST)
        before = list(state.entries)
        now = LAST + GENERATION_INTERVAL_SEC

        refresh_if_due(state, now)

        assert len(state.entries) == 4
        assert state.entries[0] == TransmissionEntry(
            timestamp=now, time_label=clock_label(now), message=synthesize(now, 3)
        )
        assert state.entries[1:] == before
        assert state.last_generated_at == now

    def test_truncates_oldest_entries(self):
        state = make_state(MAX_TRANSMISSIONS, last_generated_at=LAST)
        before = list(state.entries)
        now = LAST + GENERATION_INTERVAL_SEC

        refresh_if_due(state, now)

        assert len(state.entries) == MAX_TRANSMISSIONS
        assert state.entries[0].timestamp == now
        assert state.entries[1:] == before[:MAX_TRANSMISSIONS - 1]

    def test_feed_stays_capped_over_many_generations(self):
        state = make_state(1, last_generated_at=LAST)
        now = LAST
        previous_generation = state.last_generated_at
        for _ in range(30):
            now += GENERATION_INTERVAL_SEC
            assert refresh_if_due(state, now) is True
            assert len(state.entries) <= MAX_TRANSMISSIONS
            assert state.last_generated_at >= previous_generation
            previous_generation = state.last_generated_at

        assert len(state.entries) == MAX_TRANSMISSIONS
        timestamps = [entry.timestamp for entry in state.entries]
        assert timestamps == sorted(timestamps, reverse=True)
        assert all(entry.time_label == clock_label(entry.timestamp) for entry in state.entries)


class TestSeedState:

    def test_seed_content_and_order(self):
        now = 1_700_000_000
        state = build_seed_state(now)

        assert state.last_generated_at == now
        assert [entry.timestamp for entry in state.entries] == [now - 1_200, now - 3_300, now - 5_800]
        assert [entry.message for entry in state.entries] == [
            "Uplink stabilized. Archive index pushed to public relay.",
            "Detected repeating pattern in ambient static. Logged as anomaly A-17.",
            "Scheduled new broadcast: Deep Space Transmitter.",
        ]
        assert all(entry.time_label == clock_label(entry.timestamp) for entry in state.entries)

    def test_seed_offsets_saturate_at_epoch(self):
        state = build_seed_state(1_000)
        assert [entry.timestamp for entry in state.entries] == [0, 0, 0]
        assert len(state.entries) == len(SEED_TRANSMISSIONS)


class TestStateCodec:

    def test_dict_round_trip_preserves_order(self):
        state = make_state(5, last_generated_at=LAST)
        assert TransmissionState.from_dict(state.to_dict()) == state

    def test_copy_is_independent(self):
        state = make_state(2, last_generated_at=LAST)
        copied = state.copy()
        refresh_if_due(state, LAST + GENERATION_INTERVAL_SEC)

        assert len(copied.entries) == 2
        assert copied.last_generated_at == LAST

    @pytest.mark.parametrize("document", [
        [],
        {"entries": []},
        {"last_generated_at": "soon", "entries": []},
        {"last_generated_at": True, "entries": []},
        {"last_generated_at": -1, "entries": []},
        {"last_generated_at": 5, "entries": {}},
        {"last_generated_at": 5, "entries": ["text"]},
        {"last_generated_at": 5, "entries": [{"timestamp": 1, "time_label": "00:00:01"}]},
        {"last_generated_at": 5, "entries": [{"timestamp": 1.5, "time_label": "00:00:01", "message": "m"}]},
    ])
    def test_rejects_malformed_documents(self, document):
        with pytest.raises(ValueError):
            TransmissionState.from_dict(document)
