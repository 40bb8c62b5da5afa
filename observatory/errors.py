# observatory/errors.py
"""
Error hierarchy for the Observatory client.

Every exception raised by this package inherits from ObservatoryError so a
caller can catch one base class. Higher-level operations re-raise the error
they received with a short prefix naming the operation ("invoke assessment
failed: ..."), keeping the original exception type so callers can still tell
a failed scan from a network problem:

    try:
        client.analyze("example.com")
    except ScanFailedError:
        ...
    except TransportError as e:
        log(e.status_code)
"""

from __future__ import annotations

import copy
from typing import Optional


class ObservatoryError(Exception):
    """Base class for all Observatory client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def wrap(self, prefix: str) -> "ObservatoryError":
        """
        Return a copy of this error (same type, same attributes) whose message
        is prefixed with `prefix`. Use with `raise err.wrap(...) from err`.
        """
        err = copy.copy(self)
        err.message = f"{prefix}: {self.message}"
        err.args = (err.message,)
        return err


class ConfigurationError(ObservatoryError):
    """Invalid option, setting or argument combination."""


class TransportError(ObservatoryError):
    """Network failure, timeout or non-200 response from the API."""

    def __init__(
        self,
        message: str,
        api_call: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.api_call = api_call
        self.status_code = status_code


class DecodeError(ObservatoryError):
    """Response body could not be decoded into the expected shape."""

    def __init__(self, message: str, api_call: Optional[str] = None) -> None:
        super().__init__(message)
        self.api_call = api_call


class ScanFailedError(ObservatoryError):
    """The remote scanner reported FAILED (site unavailable, timeout, ...)."""


class ScanAbortedError(ObservatoryError):
    """The remote scanner reported ABORTED for internal reasons."""


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

class OperationCancelled(ObservatoryError):
    """The caller cancelled the operation."""


class DeadlineExceeded(ObservatoryError):
    """The operation's maximum wait elapsed."""


class ScanCancelledError(ObservatoryError):
    """
    The poll loop stopped before the scan reached a terminal state.

    `cause` is the OperationCancelled / DeadlineExceeded that triggered it
    (also available as __cause__ when raised).
    """

    def __init__(self, message: str, cause: Optional[ObservatoryError] = None) -> None:
        super().__init__(message)
        self.cause = cause
