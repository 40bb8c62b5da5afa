"""
Client for the Mozilla HTTP Observatory API.

    from observatory import ObservatoryClient, ScanOptions

    client = ObservatoryClient()
    result = client.analyze("example.com", ScanOptions(wait_for_finish=True))
"""

__version__ = "1.0.0"

from observatory.client import ObservatoryClient
from observatory.config import RecentScansQuery, ScanOptions, ScanRequest, Settings
from observatory.errors import (
    ConfigurationError,
    DeadlineExceeded,
    DecodeError,
    ObservatoryError,
    OperationCancelled,
    ScanAbortedError,
    ScanCancelledError,
    ScanFailedError,
    TransportError,
)
from observatory.models import (
    GradeDistribution,
    HostHistoryEntry,
    ScannerStates,
    ScanResult,
    ScanState,
    TestResult,
)
from observatory.scanner import CancelToken

__all__ = [
    "ObservatoryClient",
    "Settings", "ScanOptions", "ScanRequest", "RecentScansQuery",
    "CancelToken",
    "ScanResult", "ScanState", "ScannerStates", "GradeDistribution",
    "HostHistoryEntry", "TestResult",
    "ObservatoryError", "ConfigurationError", "TransportError", "DecodeError",
    "ScanFailedError", "ScanAbortedError", "ScanCancelledError",
    "OperationCancelled", "DeadlineExceeded",
]
