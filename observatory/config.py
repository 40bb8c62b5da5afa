# observatory/config.py
"""
Client configuration.

Settings     — where the API lives and how long to wait for it (env driven).
ScanOptions  — per-call options for analyze().
RecentScansQuery — score bound for get_recent_scans().

All three are frozen dataclasses: build them with keyword overrides, the
defaults fill in the rest. Invalid combinations raise ConfigurationError at
construction time, never halfway through a scan.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from observatory import __version__
from observatory.errors import ConfigurationError

API_URL = "https://http-observatory.security.mozilla.org/api/v1"

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 10.0

HOSTNAME_RE = re.compile(r"^(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)*[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def normalize_host(host: str) -> str:
    return (host or "").strip().lower().rstrip(".")


def validate_host(host: str) -> str:
    """Normalize `host` and check it is a DNS hostname. Returns the normalized value."""
    h = normalize_host(host)
    if not h:
        raise ConfigurationError("host is required")
    if not HOSTNAME_RE.match(h):
        raise ConfigurationError(f"invalid hostname: {host!r}")
    return h


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than 0, got {raw!r}")
    return value


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    """
    Connection settings for ObservatoryClient.

    Fields:
        api_url:          Base URL including the versioned prefix.
        connect_timeout:  Seconds allowed for the TCP/TLS handshake.
        read_timeout:     Seconds allowed for the response.
        user_agent:       Sent with every request.
    """
    api_url: str = API_URL
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    user_agent: str = f"observatory-client/{__version__}"

    def __post_init__(self):
        if not self.api_url:
            raise ConfigurationError("api_url is required")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("timeouts must be greater than 0")

    @property
    def timeout(self) -> tuple:
        """(connect, read) tuple in the form requests expects."""
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables:
            OBSERVATORY_API_URL, OBSERVATORY_CONNECT_TIMEOUT,
            OBSERVATORY_READ_TIMEOUT, OBSERVATORY_USER_AGENT
        Unset variables keep their defaults.
        """
        return cls(
            api_url=(os.getenv("OBSERVATORY_API_URL") or API_URL).rstrip("/"),
            connect_timeout=_env_float("OBSERVATORY_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
            read_timeout=_env_float("OBSERVATORY_READ_TIMEOUT", DEFAULT_READ_TIMEOUT),
            user_agent=os.getenv("OBSERVATORY_USER_AGENT") or f"observatory-client/{__version__}",
        )


# ---------------------------------------------------------------------------
# Per-call options
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanOptions:
    """
    Options for a scan submission.

    Fields:
        hidden:           Keep the scan out of the public recent-scans listing.
        force_rescan:     Ignore the 24h cached result. The remote side still
                          refuses to scan a host more than once every 3 minutes
                          and returns the cached result in that case.
        wait_for_finish:  Block until the scan reaches a terminal state.
        poll_interval:    Seconds between status polls while waiting.
        max_wait:         Optional overall bound on waiting, in seconds. With
                          None the wait is unbounded and only the caller's
                          cancellation token can stop it.
    """
    hidden: bool = False
    force_rescan: bool = False
    wait_for_finish: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_wait: Optional[float] = None

    def __post_init__(self):
        if self.wait_for_finish and not self.poll_interval > 0:
            raise ConfigurationError(
                f"poll_interval must be greater than 0 when waiting, got {self.poll_interval!r}"
            )
        if self.max_wait is not None and not self.max_wait > 0:
            raise ConfigurationError(f"max_wait must be greater than 0, got {self.max_wait!r}")


@dataclass(frozen=True)
class ScanRequest:
    """A validated scan target. `host` is stored normalized."""
    host: str
    hidden: bool = False
    force_rescan: bool = False

    def __post_init__(self):
        object.__setattr__(self, "host", validate_host(self.host))

    @classmethod
    def build(cls, host: str, options: ScanOptions) -> "ScanRequest":
        return cls(host=host, hidden=options.hidden, force_rescan=options.force_rescan)

    def form_data(self) -> dict:
        """POST body for the analyze call. Booleans are sent as "true"/"false"."""
        return {
            "hidden": "true" if self.hidden else "false",
            "rescan": "true" if self.force_rescan else "false",
        }


@dataclass(frozen=True)
class RecentScansQuery:
    """
    Score bound for the recent-scans listing. Exactly one of min_score /
    max_score must be set.
    """
    min_score: Optional[int] = None
    max_score: Optional[int] = None

    def __post_init__(self):
        if (self.min_score is None) == (self.max_score is None):
            raise ConfigurationError("exactly one of min_score or max_score is required")
        bound = self.min_score if self.min_score is not None else self.max_score
        if isinstance(bound, bool) or not isinstance(bound, int) or bound < 0:
            raise ConfigurationError(f"score bound must be a non-negative integer, got {bound!r}")

    def params(self) -> dict:
        if self.min_score is not None:
            return {"min": str(self.min_score)}
        return {"max": str(self.max_score)}
