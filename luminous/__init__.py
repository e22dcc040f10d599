"""Luminous substrate: persistent identity over dual-model orchestration."""

__version__ = "0.1.0"
