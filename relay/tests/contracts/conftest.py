"""
Shared pytest fixtures for Relay contract tests.
"""

import threading

import pytest

from relay.state.transmission_manager import TransmissionStateManager
from relay.state.transmission_store import TransmissionStore
from relay.tests.contracts.test_doubles import FIXED_NOW, FakeClock, FakeTransmissionStore, make_state


@pytest.fixture
def fake_clock():
    """Create a settable clock at FIXED_NOW."""
    return FakeClock(FIXED_NOW)


@pytest.fixture
def fake_store():
    """Create an in-memory store holding three entries generated at FIXED_NOW."""
    return FakeTransmissionStore(make_state(3, last_generated_at=FIXED_NOW))


@pytest.fixture
def manager(fake_store, fake_clock):
    """Create a loaded manager backed by the fake store and clock."""
    manager = TransmissionStateManager(fake_store, clock=fake_clock)
    manager.load_or_seed()
    return manager


@pytest.fixture
def store_path(tmp_path):
    """Path for a real JSON store inside a not-yet-existing directory."""
    return tmp_path / "data" / "recent_transmissions.json"


@pytest.fixture
def file_store(store_path):
    """Create a TransmissionStore on disk."""
    return TransmissionStore(store_path)


@pytest.fixture(autouse=False)
def thread_leak_guard():
    """
    Optional fixture to detect thread leaks between tests.

    Request it explicitly in tests that start threads.
    """
    before = set(t.ident for t in threading.enumerate())
    yield
    after = set(t.ident for t in threading.enumerate())
    leaked = after - before
    if leaked:
        leaked_threads = [t for t in threading.enumerate() if t.ident in leaked]
        thread_info = '\n'.join(f"  - {t.name} (daemon={t.daemon})" for t in leaked_threads)
        assert False, f"Thread leak detected - shutdown incomplete.\nLeaked threads:\n{thread_info}"
