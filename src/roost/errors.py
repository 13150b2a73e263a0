"""Roost exception hierarchy.

Shared across the descriptor, registration, and server modules so every
module raises and catches the same types.
"""


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when an application or server configuration is invalid.

    Surfaces synchronously from ``build()`` calls, before the server
    starts serving anything.
    """
