# observatory/transport.py
"""
HTTP transport for the Observatory API.

One call to execute() is exactly one request/response exchange against a
named API operation. It never retries: retry and polling decisions belong to
the orchestrator.

Errors:
    TransportError — connection failure, timeout, non-200 status
    DecodeError    — the body is not JSON
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from observatory.config import Settings
from observatory.errors import ConfigurationError, DecodeError, TransportError

logger = logging.getLogger(__name__)


class ApiCall:
    """Named remote operations (sub-paths of the API base URL)."""
    ANALYZE = "analyze"
    GET_SCAN_RESULTS = "getScanResults"
    GET_SCANNER_STATES = "getScannerStates"
    GET_GRADE_DISTRIBUTION = "getGradeDistribution"
    GET_HOST_HISTORY = "getHostHistory"
    GET_RECENT_SCANS = "getRecentScans"

    ALL = (
        ANALYZE,
        GET_SCAN_RESULTS,
        GET_SCANNER_STATES,
        GET_GRADE_DISTRIBUTION,
        GET_HOST_HISTORY,
        GET_RECENT_SCANS,
    )


METHODS = ("GET", "POST")


class Transport:
    """
    Thin wrapper around a requests.Session bound to one API base URL.

    Pass your own `session` to control pooling, proxies or TLS; timeouts still
    come from `settings` unless the session is used directly elsewhere.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or Settings()
        self._owns_session = session is None
        self.session = session or requests.Session()

    def url_for(self, api_call: str) -> str:
        return f"{self.settings.api_url.rstrip('/')}/{api_call}"

    def execute(
        self,
        api_call: str,
        method: str = "GET",
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue one request and return the decoded JSON body.

        Args:
            api_call: One of ApiCall.ALL.
            method:   "GET" or "POST".
            params:   Query-string parameters.
            data:     Form body, POST only.
        """
        if api_call not in ApiCall.ALL:
            raise ConfigurationError(f"unknown API call: {api_call!r}")
        method = method.upper()
        if method not in METHODS:
            raise ConfigurationError(f"unsupported method: {method!r}")

        url = self.url_for(api_call)
        headers = {"User-Agent": self.settings.user_agent, "Accept": "application/json"}
        body = None
        if method == "POST":
            body = urlencode(data or {})
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            headers["Content-Length"] = str(len(body))

        logger.debug("%s %s params=%s", method, api_call, params or {})

        try:
            r = self.session.request(
                method,
                url,
                params=params or None,
                data=body,
                headers=headers,
                timeout=self.settings.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"http request failed: {type(e).__name__}: {e}", api_call=api_call,
            ) from e

        if r.status_code != 200:
            status_line = f"{r.status_code} {r.reason or ''}".strip()
            logger.warning("Observatory %s returned %s", api_call, status_line)
            raise TransportError(
                f"http request failed: {status_line}",
                api_call=api_call,
                status_code=r.status_code,
            )

        try:
            return r.json()
        except ValueError as e:
            raise DecodeError(f"invalid JSON in {api_call} response: {e}", api_call=api_call) from e

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
