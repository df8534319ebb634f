"""
Relay Station.

Self-refreshing transmission feed served over a small HTTP backend.
"""

__version__ = "0.1.0"
