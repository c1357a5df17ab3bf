"""Custom exception hierarchy for skygate.

All skygate-specific exceptions inherit from GateError, so the gate can turn
every expected failure into a ``Failed`` result with a single except clause.
"""

from __future__ import annotations


class GateError(Exception):
    """Base exception for all skygate errors."""


class ConfigurationError(GateError):
    """Raised for invalid configuration or missing required settings."""

    def __init__(self, message: str, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        super().__init__(message)


class BackendError(GateError):
    """Raised when the provisioning backend rejects or fails a call.

    The message is the backend's own message, kept verbatim.
    """


class QueryError(BackendError):
    """Raised when listing instances fails or times out.

    Never to be read as "no active instance found".
    """


class LaunchError(BackendError):
    """Raised when the create call fails. The instance state is unknown."""
