# observatory/scanner/orchestrator.py
"""
Scan Orchestrator — turns the asynchronous remote scan job into a blocking call.

    1. submit():       POST analyze for the host, inspect the returned state
    2. fetch_status(): GET analyze for the host (read-only, idempotent)
    3. _poll():        wait poll_interval, fetch_status, repeat until FINISHED

State handling on submit:
    FAILED / ABORTED   → ScanFailedError / ScanAbortedError, never retried
    "" (no state)      → one fetch_status(), its result is returned as-is.
                         The API sometimes omits the state when the submission
                         resolves straight to a previously completed scan.
    FINISHED           → returned immediately
    anything else      → returned immediately unless wait_for_finish is set

The poll loop has no iteration cap. It ends on FINISHED, on the first error
from fetch_status(), when the caller's CancelToken fires, or when the
optional ScanOptions.max_wait elapses. The remote side throttles scans of a
host to one every 3 minutes, so the poll interval only controls how often
status is checked, not how often scans run.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from observatory.config import ScanOptions, ScanRequest, validate_host
from observatory.errors import (
    DeadlineExceeded,
    ObservatoryError,
    OperationCancelled,
    ScanAbortedError,
    ScanCancelledError,
    ScanFailedError,
)
from observatory.models import ScanResult, ScanState
from observatory.scanner.cancellation import CancelToken
from observatory.transport import ApiCall, Transport

logger = logging.getLogger(__name__)


def check_scan_state(result: ScanResult) -> ScanResult:
    """Raise for the terminal error states, pass anything else through."""
    if result.state is ScanState.ABORTED:
        raise ScanAbortedError("scan aborted")
    if result.state is ScanState.FAILED:
        raise ScanFailedError("scan failed")
    return result


class ScanOrchestrator:

    def __init__(self, transport: Transport):
        self.transport = transport

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def submit(
        self,
        request: ScanRequest,
        options: Optional[ScanOptions] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ScanResult:
        """
        Invoke a scan of request.host and return its result.

        With options.wait_for_finish this blocks until the scan is FINISHED.
        The wait is unbounded unless `cancel` fires or options.max_wait is set;
        either ends it with ScanCancelledError.
        """
        options = options or ScanOptions()

        try:
            result = self._analyze(request)
        except ObservatoryError as e:
            raise e.wrap("invoke assessment failed") from e

        if result.state is None:
            logger.debug("Empty scan state for %s, re-fetching assessment", request.host)
            return self.fetch_status(request.host)

        if result.state is ScanState.FINISHED or not options.wait_for_finish:
            return result

        return self._poll(request.host, options, cancel or CancelToken())

    def fetch_status(self, host: str) -> ScanResult:
        """Retrieve the current state of an existing, ongoing or completed scan."""
        try:
            host = validate_host(host)
            payload = self.transport.execute(ApiCall.ANALYZE, "GET", params={"host": host})
            return check_scan_state(ScanResult.from_dict(payload))
        except ObservatoryError as e:
            raise e.wrap("retrieve assessment failed") from e

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _analyze(self, request: ScanRequest) -> ScanResult:
        payload = self.transport.execute(
            ApiCall.ANALYZE,
            "POST",
            params={"host": request.host},
            data=request.form_data(),
        )
        return check_scan_state(ScanResult.from_dict(payload))

    def _poll(self, host: str, options: ScanOptions, cancel: CancelToken) -> ScanResult:
        deadline = None
        if options.max_wait is not None:
            deadline = time.monotonic() + options.max_wait

        logger.info(
            "Waiting for scan of %s to finish (poll every %ss)", host, options.poll_interval,
        )
        start = time.monotonic()
        polls = 0

        while True:
            interval = options.poll_interval
            # The deadline falls inside this wait: whatever wakes us ends the loop.
            last_wait = False
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= interval:
                    interval = max(0.0, remaining)
                    last_wait = True

            cause: Optional[ObservatoryError] = None
            if cancel.wait(interval):
                cause = cancel.cause or OperationCancelled("cancelled by caller")
            elif last_wait:
                cause = DeadlineExceeded(f"max wait of {options.max_wait}s exceeded")

            if cause is not None:
                logger.info("Scan wait for %s aborted after %d polls: %s", host, polls, cause)
                raise ScanCancelledError(
                    f"retrieve assessment aborted: {cause}", cause=cause,
                ) from cause

            polls += 1
            result = self.fetch_status(host)
            logger.debug("Poll %d for %s: state=%s", polls, host, result.state)

            if result.state is ScanState.FINISHED:
                logger.info(
                    "Scan of %s finished after %d polls (%.1fs)",
                    host, polls, time.monotonic() - start,
                )
                return result
