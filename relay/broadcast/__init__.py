"""Transmission message generation."""

from .synthesizer import synthesize

__all__ = ["synthesize"]
