"""
Main entry point for Relay Station.

Wires the transmission feed to its two refresh drivers (HTTP page views and
the periodic refresh thread) and serves HTTP until stopped.

Startup order:
1. load-or-seed the feed
2. one refresh pass
3. start the periodic refresh thread
4. serve traffic
"""

import argparse
import logging
import logging.handlers
import os
import signal
import sys
import threading
from typing import Optional

from relay.app.http_server import ThreadingHTTPServer, create_server
from relay.app.refresh_driver import TransmissionRefreshThread
from relay.config import RelayConfig
from relay.state.transmission_manager import TransmissionStateManager
from relay.state.transmission_store import TransmissionStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Relay:
    """
    Relay orchestrator.

    Owns the shared TransmissionStateManager and both of its drivers.
    start() and stop() are idempotent.
    """

    def __init__(self, config: RelayConfig, manager: Optional[TransmissionStateManager] = None):
        """
        Initialize Relay components.

        Components are created but the feed is not loaded until start().

        Args:
            config: Relay configuration
            manager: Pre-built manager (defaults to one backed by config.transmissions_path)
        """
        self.config = config
        self.manager = manager or TransmissionStateManager(TransmissionStore(config.transmissions_path))
        self.refresh_thread: Optional[TransmissionRefreshThread] = None
        self.server: Optional[ThreadingHTTPServer] = None
        self._server_thread: Optional[threading.Thread] = None
        self.running = False

    @property
    def server_address(self):
        """Bound (host, port), or None before start()."""
        if self.server is None:
            return None
        return self.server.server_address[:2]

    def start(self) -> None:
        """
        Load the feed, run one refresh, start the refresh thread, serve HTTP.

        Raises:
            OSError: If the HTTP address cannot be bound
        """
        if self.running:
            logger.warning("[RELAY] Relay already started, ignoring duplicate start() call")
            return

        logger.info("=== Relay starting ===")

        self.manager.load_or_seed()
        self.manager.refresh()

        self.refresh_thread = TransmissionRefreshThread(self.manager, tick_sec=self.config.refresh_tick_sec)
        self.refresh_thread.start()

        try:
            self.server = create_server(self.config.host, self.config.port, self.manager)
        except OSError:
            self.refresh_thread.stop()
            self.refresh_thread = None
            raise

        self._server_thread = threading.Thread(
            target=self.server.serve_forever, name="RelayHTTPServer", daemon=True
        )
        self._server_thread.start()
        self.running = True

        host, port = self.server_address
        logger.info(f"[RELAY] Listening on http://{host}:{port}")

    def stop(self) -> None:
        """Stop the refresh thread and the HTTP server."""
        if not self.running:
            return

        logger.info("=== Relay stopping ===")
        self.running = False

        if self.refresh_thread:
            self.refresh_thread.stop()
            self.refresh_thread = None

        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.server = None

        if self._server_thread:
            self._server_thread.join(timeout=5.0)
            self._server_thread = None

        logger.info("=== Relay stopped ===")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up root logging, plus a rotation-tolerant file handler if requested.

    Failing to open or write the log file never stops the relay.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not log_file:
        return

    # FileHandler stores baseFilename as an absolute path
    log_path = os.path.abspath(log_file)
    root = logging.getLogger()
    if any(isinstance(h, logging.handlers.WatchedFileHandler)
           and getattr(h, "baseFilename", None) == log_path
           for h in root.handlers):
        return

    try:
        # WatchedFileHandler reopens the file after external rotation
        handler = logging.handlers.WatchedFileHandler(log_file, mode="a")
    except OSError as e:
        logger.warning(f"[RELAY] Cannot open log file {log_file}: {e}")
        return
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value} (must be an integer)")
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"invalid port: {value} (must be 1-65535)")
    return port


def _parse_args(args: Optional[list]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="relay", description="Relay Station transmission feed server")
    parser.add_argument("--host", help="Address to bind (overrides RELAY_HOST)")
    parser.add_argument("--port", type=_port, help="Port to bind (overrides RELAY_PORT)")
    parser.add_argument("--transmissions-path", help="JSON store path (overrides RELAY_TRANSMISSIONS_PATH)")
    return parser.parse_args(args)


def main(args: Optional[list] = None) -> None:
    """
    Main entry point for Relay Station.

    Loads configuration, starts the relay, and runs until SIGINT/SIGTERM.
    """
    options = _parse_args(args)
    config = RelayConfig.load_config()
    if options.host:
        config.host = options.host
    if options.port is not None:
        config.port = options.port
    if options.transmissions_path:
        config.transmissions_path = options.transmissions_path

    configure_logging(config.log_level, config.log_file)

    relay = Relay(config)
    stop_requested = threading.Event()

    def signal_handler(sig, frame):
        signal_name = "SIGTERM" if sig == signal.SIGTERM else "SIGINT"
        logger.info(f"[RELAY] Received {signal_name} signal - shutting down")
        stop_requested.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        relay.start()
    except OSError as e:
        logger.error(f"[RELAY] Failed to bind {config.host}:{config.port}: {e}")
        sys.exit(1)

    try:
        while not stop_requested.wait(0.5):
            pass
    finally:
        relay.stop()


if __name__ == "__main__":
    main()
