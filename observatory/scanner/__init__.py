# observatory/scanner/__init__.py
"""
Scan submission and polling.

Usage:
    from observatory.scanner import ScanOrchestrator, CancelToken

    orchestrator = ScanOrchestrator(transport)
    result = orchestrator.submit(ScanRequest("example.com"), ScanOptions(wait_for_finish=True))
"""

from observatory.scanner.cancellation import CancelToken
from observatory.scanner.orchestrator import ScanOrchestrator, check_scan_state

__all__ = ["CancelToken", "ScanOrchestrator", "check_scan_state"]
