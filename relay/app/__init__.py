"""Relay application: HTTP server, refresh thread, and orchestrator."""
