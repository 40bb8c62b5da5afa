# observatory/models.py
"""
Payload shapes returned by the HTTP Observatory API.

Every transport call builds fresh instances from the decoded JSON; nothing
here is cached or mutated after construction. ScanResult keeps the decoded
payload in `raw` so callers can get at fields this client does not model.

API reference:
    https://github.com/mozilla/http-observatory/blob/master/httpobs/docs/api.md
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from observatory.errors import DecodeError


class ScanState(str, Enum):
    PENDING = "PENDING"      # issued by the API but not yet picked up by a scanner
    STARTING = "STARTING"    # assigned to a scanning instance
    RUNNING = "RUNNING"      # currently scanning the site
    FINISHED = "FINISHED"    # completed successfully
    FAILED = "FAILED"        # site unavailable or timed out
    ABORTED = "ABORTED"      # aborted for internal technical reasons

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.FINISHED, ScanState.FAILED, ScanState.ABORTED)

    @classmethod
    def parse(cls, value: Any) -> Optional["ScanState"]:
        """Empty or missing state decodes to None; unknown values are a DecodeError."""
        if value is None or value == "":
            return None
        try:
            return cls(value)
        except ValueError:
            raise DecodeError(f"unknown scan state: {value!r}")


def _require_mapping(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise DecodeError(f"expected a JSON object for {what}, got {type(payload).__name__}")
    return payload


def _int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DecodeError(f"expected an integer, got {value!r}")


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    """Optional nested object: None decodes to {}, anything but a dict is a DecodeError."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"expected a JSON object for {what}, got {type(value).__name__}")
    return dict(value)


@dataclass(frozen=True)
class ScanResult:
    """Summarized result of a scan, as returned by the analyze endpoint."""
    state: Optional[ScanState]
    scan_id: Optional[int] = None
    grade: Optional[str] = None
    score: Optional[int] = None
    likelihood_indicator: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    tests_passed: Optional[int] = None
    tests_failed: Optional[int] = None
    tests_quantity: Optional[int] = None
    response_headers: Dict[str, str] = field(default_factory=dict)
    hidden: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.state is not None and self.state.is_terminal

    @classmethod
    def from_dict(cls, payload: Any) -> "ScanResult":
        data = _require_mapping(payload, "scan result")
        return cls(
            state=ScanState.parse(data.get("state")),
            scan_id=_int(data.get("scan_id")),
            grade=data.get("grade"),
            score=_int(data.get("score")),
            likelihood_indicator=data.get("likelihood_indicator"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            tests_passed=_int(data.get("tests_passed")),
            tests_failed=_int(data.get("tests_failed")),
            tests_quantity=_int(data.get("tests_quantity")),
            response_headers=_mapping(data.get("response_headers"), "response_headers"),
            hidden=bool(data.get("hidden", False)),
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)


@dataclass(frozen=True)
class ScannerStates:
    """Scanner load: how many scans are currently in each state."""
    pending: int = 0
    starting: int = 0
    running: int = 0
    finished: int = 0
    failed: int = 0
    aborted: int = 0

    @property
    def in_progress(self) -> int:
        return self.pending + self.starting + self.running

    @classmethod
    def from_dict(cls, payload: Any) -> "ScannerStates":
        data = _require_mapping(payload, "scanner states")
        return cls(**{s.value.lower(): _int(data.get(s.value)) or 0 for s in ScanState})

    def to_dict(self) -> Dict[str, int]:
        return {s.value: getattr(self, s.value.lower()) for s in ScanState}


GRADES = ("A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "D-", "F")


@dataclass(frozen=True)
class GradeDistribution:
    """How many public scans have fallen into each grade."""
    counts: Dict[str, int] = field(default_factory=dict)

    def __getitem__(self, grade: str) -> int:
        return self.counts.get(grade, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @classmethod
    def from_dict(cls, payload: Any) -> "GradeDistribution":
        data = _require_mapping(payload, "grade distribution")
        return cls(counts={g: _int(data.get(g)) or 0 for g in GRADES})

    def to_dict(self) -> Dict[str, int]:
        return dict(self.counts)


@dataclass(frozen=True)
class HostHistoryEntry:
    """Short summary of one past scan of a host."""
    scan_id: int
    grade: Optional[str] = None
    score: Optional[int] = None
    end_time: Optional[str] = None
    end_time_unix_timestamp: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "HostHistoryEntry":
        data = _require_mapping(payload, "host history entry")
        scan_id = _int(data.get("scan_id"))
        if scan_id is None:
            raise DecodeError("host history entry is missing scan_id")
        return cls(
            scan_id=scan_id,
            grade=data.get("grade"),
            score=_int(data.get("score")),
            end_time=data.get("end_time"),
            end_time_unix_timestamp=_int(data.get("end_time_unix_timestamp")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_id": self.scan_id,
            "grade": self.grade,
            "score": self.score,
            "end_time": self.end_time,
            "end_time_unix_timestamp": self.end_time_unix_timestamp,
        }


def parse_host_history(payload: Any) -> List[HostHistoryEntry]:
    if not isinstance(payload, list):
        raise DecodeError(f"expected a JSON array for host history, got {type(payload).__name__}")
    return [HostHistoryEntry.from_dict(item) for item in payload]


def parse_recent_scans(payload: Any) -> Dict[str, str]:
    """Recent scans are a hostname → grade mapping; returned as-is."""
    data = _require_mapping(payload, "recent scans")
    for host, grade in data.items():
        if not isinstance(grade, str):
            raise DecodeError(f"expected a grade string for {host!r}, got {grade!r}")
    return dict(data)


@dataclass(frozen=True)
class TestResult:
    """Outcome of a single test (CSP, cookies, HSTS, ...) within a scan."""
    __test__ = False  # not a pytest test class

    name: str
    expectation: Optional[str] = None
    result: Optional[str] = None
    passed: bool = False
    score_modifier: int = 0
    score_description: Optional[str] = None
    output: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, payload: Any) -> "TestResult":
        data = _require_mapping(payload, f"test result {name!r}")
        return cls(
            name=data.get("name") or name,
            expectation=data.get("expectation"),
            result=data.get("result"),
            passed=bool(data.get("pass", False)),
            score_modifier=_int(data.get("score_modifier")) or 0,
            score_description=data.get("score_description"),
            output=_mapping(data.get("output"), f"output of test {name!r}"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "expectation": self.expectation,
            "result": self.result,
            "pass": self.passed,
            "score_modifier": self.score_modifier,
            "score_description": self.score_description,
            "output": self.output,
        }


def parse_test_results(payload: Any) -> Dict[str, TestResult]:
    """Detailed test results keyed by test name."""
    data = _require_mapping(payload, "test results")
    return {name: TestResult.from_dict(name, item) for name, item in data.items()}
