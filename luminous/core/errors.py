"""Base exception for the Luminous substrate."""


class LuminousError(Exception):
    """Root of every error raised by the luminous package."""
    pass
