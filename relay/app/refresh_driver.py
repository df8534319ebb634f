"""
Periodic transmission refresh thread.

This module provides TransmissionRefreshThread, a long-lived thread that
wakes on a fixed tick and runs the same gated refresh the page-render path
runs. It is a backstop: most generations happen lazily on page views.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from relay.constants import REFRESH_TICK_SEC
from relay.state.transmission_manager import TransmissionStateManager

logger = logging.getLogger(__name__)


class TransmissionRefreshThread(threading.Thread):
    """
    Dedicated thread that calls manager.refresh() every tick.

    Attributes:
        manager: Shared TransmissionStateManager
        tick_sec: Seconds between refresh attempts
        shutdown_event: Event to signal thread shutdown
    """

    def __init__(
        self,
        manager: TransmissionStateManager,
        tick_sec: float = REFRESH_TICK_SEC,
        shutdown_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Initialize refresh thread.

        Args:
            manager: Shared TransmissionStateManager
            tick_sec: Seconds between refresh attempts
            shutdown_event: Event to signal thread shutdown (created if omitted)
        """
        super().__init__(name="TransmissionRefresh", daemon=True)
        self.manager = manager
        self.tick_sec = tick_sec
        self.shutdown_event = shutdown_event or threading.Event()

    def run(self) -> None:
        """
        Main refresh loop.

        Waits one tick, refreshes, repeats until shutdown_event is set.
        The startup refresh pass is done by the caller before the thread
        starts, so the first attempt here is one tick later.
        """
        logger.info(f"[REFRESH] Transmission refresh thread started (tick={self.tick_sec}s)")

        while not self.shutdown_event.wait(self.tick_sec):
            try:
                if self.manager.refresh():
                    logger.debug("[REFRESH] Periodic refresh generated a transmission")
            except Exception as e:
                # Keep the backstop alive; the next tick retries
                logger.error(f"[REFRESH] Periodic refresh failed: {e}", exc_info=True)

        logger.info("[REFRESH] Transmission refresh thread stopped")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the thread to stop and wait for it to exit."""
        self.shutdown_event.set()
        if self.is_alive():
            self.join(timeout=timeout)
