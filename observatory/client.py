# observatory/client.py
"""
ObservatoryClient — the public entry point.

Wires a Transport to a ScanOrchestrator for scan submission/polling, and
implements the read-only endpoints directly: each of those is a single
transport call with its errors prefixed by the operation name.

    from observatory import ObservatoryClient, ScanOptions, RecentScansQuery

    with ObservatoryClient() as client:
        result = client.analyze("example.com", ScanOptions(wait_for_finish=True))
        print(result.grade, result.score)
        best = client.get_recent_scans(RecentScansQuery(min_score=100))
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests

from observatory.config import RecentScansQuery, ScanOptions, ScanRequest, Settings, validate_host
from observatory.errors import ConfigurationError, ObservatoryError
from observatory.models import (
    GradeDistribution,
    HostHistoryEntry,
    ScannerStates,
    ScanResult,
    TestResult,
    parse_host_history,
    parse_recent_scans,
    parse_test_results,
)
from observatory.scanner import CancelToken, ScanOrchestrator
from observatory.transport import ApiCall, Transport

logger = logging.getLogger(__name__)


class ObservatoryClient:
    """
    Client for the HTTP Observatory API.

    Args:
        settings:  Connection settings. Defaults to the public API with a 5s
                   handshake / 10s read timeout.
        session:   Optional pre-configured requests.Session.
        transport: Optional Transport (overrides settings/session).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        transport: Optional[Transport] = None,
    ):
        self.transport = transport or Transport(settings=settings, session=session)
        self.orchestrator = ScanOrchestrator(self.transport)

    @classmethod
    def from_env(cls) -> "ObservatoryClient":
        return cls(settings=Settings.from_env())

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "ObservatoryClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def analyze(
        self,
        host: str,
        options: Optional[ScanOptions] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ScanResult:
        """
        Invoke a scan of `host`. By default the API returns a cached result
        if the site was scanned in the previous 24 hours; use
        ScanOptions(force_rescan=True) to ignore it. Regardless, a host is
        never scanned more often than every 3 minutes.

        With ScanOptions(wait_for_finish=True) this blocks until the scan is
        FINISHED. There is no built-in upper bound on that wait: pass a
        CancelToken and/or ScanOptions.max_wait to bound it.
        """
        options = options or ScanOptions()
        try:
            request = ScanRequest.build(host, options)
        except ConfigurationError as e:
            raise e.wrap("invoke assessment failed") from e
        return self.orchestrator.submit(request, options, cancel)

    def get_assessment(self, host: str) -> ScanResult:
        """Retrieve the results of an existing, ongoing or completed scan."""
        return self.orchestrator.fetch_status(host)

    def get_test_results(self, scan_id: int) -> Dict[str, TestResult]:
        """Detailed per-test results of a scan; complete once the scan is FINISHED."""
        try:
            if isinstance(scan_id, bool) or not isinstance(scan_id, int):
                raise ConfigurationError(f"scan id must be an integer, got {scan_id!r}")
            payload = self.transport.execute(
                ApiCall.GET_SCAN_RESULTS, "GET", params={"scan": str(scan_id)},
            )
            return parse_test_results(payload)
        except ObservatoryError as e:
            raise e.wrap("retrieve test results failed") from e

    # ------------------------------------------------------------------
    # Read-only statistics
    # ------------------------------------------------------------------

    def get_scanner_states(self) -> ScannerStates:
        """Scanner load: how many scans are pending, running, finished, etc."""
        try:
            payload = self.transport.execute(ApiCall.GET_SCANNER_STATES, "GET")
            return ScannerStates.from_dict(payload)
        except ObservatoryError as e:
            raise e.wrap("retrieve scanner states failed") from e

    def get_grade_distribution(self) -> GradeDistribution:
        try:
            payload = self.transport.execute(ApiCall.GET_GRADE_DISTRIBUTION, "GET")
            return GradeDistribution.from_dict(payload)
        except ObservatoryError as e:
            raise e.wrap("retrieve overall grade distribution failed") from e

    def get_scan_history(self, host: str) -> List[HostHistoryEntry]:
        """The most recent scans of `host`."""
        try:
            host = validate_host(host)
            payload = self.transport.execute(ApiCall.GET_HOST_HISTORY, "GET", params={"host": host})
            return parse_host_history(payload)
        except ObservatoryError as e:
            raise e.wrap("retrieve host's scan history failed") from e

    def get_recent_scans(self, query: RecentScansQuery) -> Dict[str, str]:
        """
        The ten most recent public scans within a score bound, as a
        hostname → grade mapping.
        """
        try:
            if not isinstance(query, RecentScansQuery):
                raise ConfigurationError("a RecentScansQuery is required")
            payload = self.transport.execute(ApiCall.GET_RECENT_SCANS, "GET", params=query.params())
            return parse_recent_scans(payload)
        except ObservatoryError as e:
            raise e.wrap("retrieve recent scans failed") from e
