"""Custom exceptions for the portfolio history tracker.

Only request-terminating conditions are exceptions. An unavailable
benchmark or rate series is not an error: providers return None or an
empty map and the engine degrades that channel.
"""


class TrackerError(Exception):
    """Base exception for all tracker errors."""


class InvalidInput(TrackerError):
    """Raised for a malformed ticker or range, before any upstream call.

    The message is safe to return to the caller verbatim.
    """


class AssetNotFound(TrackerError):
    """Raised when the primary asset series has no usable price."""


class InternalError(TrackerError):
    """Raised when alignment fails unexpectedly.

    Carries a generic message; the original exception is chained and logged.
    """
