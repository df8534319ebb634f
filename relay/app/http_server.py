"""
HTTP Server for Relay Station.

Serves the transmission feed. Every feed view runs the gated refresh
before reading the entries to display.
"""

import html
import json
import logging
import socketserver
from http.server import BaseHTTPRequestHandler
from typing import List
from urllib.parse import urlsplit

from relay.clock.time_util import current_year
from relay.state.transmission_manager import TransmissionStateManager
from relay.state.transmission_state import TransmissionEntry

logger = logging.getLogger(__name__)

KNOWN_PATHS = ("/", "/transmissions", "/software", "/about")


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        f"<head><meta charset=\"utf-8\"><title>{html.escape(title)} | Relay Station</title></head>\n"
        f"<body>\n{body}\n"
        f"<footer>&copy; {current_year()} Relay Station</footer>\n"
        "</body>\n</html>\n"
    )


def render_transmissions(entries: List[TransmissionEntry]) -> str:
    """Render the feed as an HTML list, newest first."""
    items = "\n".join(
        f"  <li><time>{html.escape(entry.time_label)}</time> {html.escape(entry.message)}</li>"
        for entry in entries
    )
    return _page("Home", f"<h1>Recent transmissions</h1>\n<ul class=\"transmissions\">\n{items}\n</ul>")


class RelayRequestHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the feed pages.

    The manager is bound per server by create_handler_class().
    """

    manager: TransmissionStateManager = None
    head_only = False

    def do_GET(self):
        """Handle GET requests."""
        path = urlsplit(self.path).path
        if path == "/":
            self._handle_index()
        elif path == "/transmissions":
            self._handle_transmissions()
        elif path == "/software":
            self._send_html(200, _page("Software", "<h1>Software</h1>"))
        elif path == "/about":
            self.send_response(301)
            self.send_header("Location", "/software")
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            self._send_html(404, _page("404 Not Found", "<h1>404 Not Found</h1>"))

    def do_HEAD(self):
        """Handle HEAD requests: same status and headers as GET, no body."""
        self.head_only = True
        self.do_GET()

    def do_POST(self):
        """Reject POST requests."""
        self._reject()

    def do_PUT(self):
        """Reject PUT requests."""
        self._reject()

    def do_PATCH(self):
        """Reject PATCH requests."""
        self._reject()

    def do_DELETE(self):
        """Reject DELETE requests."""
        self._reject()

    def _reject(self):
        if urlsplit(self.path).path in KNOWN_PATHS:
            self.send_error(405, "Method Not Allowed")
        else:
            self.send_error(404, "Not Found")

    def _handle_index(self):
        entries = self.manager.refresh_and_snapshot()
        self._send_html(200, render_transmissions(entries))

    def _handle_transmissions(self):
        """Handle /transmissions GET request with the feed as JSON."""
        entries = self.manager.refresh_and_snapshot()
        payload = json.dumps({"transmissions": [entry.to_dict() for entry in entries]})
        self._send_body(200, "application/json", payload.encode("utf-8"))

    def _send_html(self, status: int, document: str):
        self._send_body(status, "text/html; charset=utf-8", document.encode("utf-8"))

    def _send_body(self, status: int, content_type: str, body: bytes):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        if self.head_only:
            return
        try:
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError) as e:
            logger.debug(f"[HTTP] Client went away before response was sent: {e}")

    def log_message(self, format, *args):
        """Override to use our logger instead of stderr."""
        logger.debug(f"[HTTP] {self.address_string()} - {format % args}")


def create_handler_class(manager: TransmissionStateManager):
    """
    Create a handler class with the transmission manager bound.

    Args:
        manager: TransmissionStateManager instance

    Returns:
        Handler class with manager set
    """
    class Handler(RelayRequestHandler):
        pass

    Handler.manager = manager
    return Handler


class ThreadingHTTPServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """
    Threaded HTTP server for handling multiple concurrent connections.

    Uses ThreadingMixIn to handle each request in a separate thread.
    """
    allow_reuse_address = True
    daemon_threads = True


def create_server(host: str, port: int, manager: TransmissionStateManager) -> ThreadingHTTPServer:
    """
    Bind a threaded HTTP server for the feed.

    Raises:
        OSError: If the address cannot be bound
    """
    return ThreadingHTTPServer((host, port), create_handler_class(manager))
