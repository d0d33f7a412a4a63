"""Heuristic classification of captured authentication traffic."""

__version__ = "0.1.0"
