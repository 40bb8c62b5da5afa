"""Tests for settings, option records, the error wrapper and CancelToken."""

from __future__ import annotations

import dataclasses

import pytest

from observatory.config import API_URL, RecentScansQuery, ScanOptions, ScanRequest, Settings
from observatory.errors import (
    ConfigurationError,
    DeadlineExceeded,
    OperationCancelled,
    ScanFailedError,
    TransportError,
)
from observatory.scanner.cancellation import CancelToken


class TestScanOptions:

    def test_defaults(self):
        opts = ScanOptions()
        assert opts.hidden is False
        assert opts.force_rescan is False
        assert opts.wait_for_finish is False
        assert opts.poll_interval == 10.0
        assert opts.max_wait is None

    def test_partial_override_keeps_other_defaults(self):
        opts = ScanOptions(wait_for_finish=True)
        assert opts.poll_interval == 10.0
        assert dataclasses.replace(opts, hidden=True).wait_for_finish is True

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ScanOptions().hidden = True

    @pytest.mark.parametrize("interval", [0, -1])
    def test_non_positive_interval_rejected_when_waiting(self, interval):
        with pytest.raises(ConfigurationError):
            ScanOptions(wait_for_finish=True, poll_interval=interval)

    def test_interval_not_checked_without_waiting(self):
        assert ScanOptions(poll_interval=0).poll_interval == 0

    def test_max_wait_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            ScanOptions(wait_for_finish=True, max_wait=0)


class TestScanRequest:

    def test_host_is_normalized(self):
        assert ScanRequest("  WWW.Example.COM. ").host == "www.example.com"

    def test_form_data(self):
        assert ScanRequest("example.com").form_data() == {"hidden": "false", "rescan": "false"}
        assert ScanRequest("example.com", hidden=True, force_rescan=True).form_data() == {
            "hidden": "true", "rescan": "true",
        }

    def test_build_from_options(self):
        req = ScanRequest.build("example.com", ScanOptions(force_rescan=True))
        assert req.force_rescan is True
        assert req.hidden is False

    @pytest.mark.parametrize("host", ["", "exa mple.com", "example..com", "under_score.com"])
    def test_invalid_hosts(self, host):
        with pytest.raises(ConfigurationError):
            ScanRequest(host)


class TestRecentScansQuery:

    def test_min(self):
        assert RecentScansQuery(min_score=119).params() == {"min": "119"}

    def test_max(self):
        assert RecentScansQuery(max_score=20).params() == {"max": "20"}

    def test_neither_rejected(self):
        with pytest.raises(ConfigurationError, match="exactly one"):
            RecentScansQuery()

    def test_both_rejected(self):
        with pytest.raises(ConfigurationError, match="exactly one"):
            RecentScansQuery(min_score=10, max_score=90)

    @pytest.mark.parametrize("bound", [-1, 1.5, "100", True])
    def test_bound_must_be_non_negative_int(self, bound):
        with pytest.raises(ConfigurationError):
            RecentScansQuery(min_score=bound)


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.api_url == API_URL
        assert s.timeout == (5.0, 10.0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OBSERVATORY_API_URL", "http://localhost:57001/api/v1/")
        monkeypatch.setenv("OBSERVATORY_CONNECT_TIMEOUT", "2")
        monkeypatch.setenv("OBSERVATORY_READ_TIMEOUT", "30.5")
        monkeypatch.setenv("OBSERVATORY_USER_AGENT", "scanner-bot/1.0")

        s = Settings.from_env()

        assert s.api_url == "http://localhost:57001/api/v1"
        assert s.timeout == (2.0, 30.5)
        assert s.user_agent == "scanner-bot/1.0"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("OBSERVATORY_API_URL", "OBSERVATORY_CONNECT_TIMEOUT",
                     "OBSERVATORY_READ_TIMEOUT", "OBSERVATORY_USER_AGENT"):
            monkeypatch.delenv(name, raising=False)

        assert Settings.from_env() == Settings()

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_from_env_invalid_timeout(self, monkeypatch, value):
        monkeypatch.setenv("OBSERVATORY_READ_TIMEOUT", value)
        with pytest.raises(ConfigurationError, match="OBSERVATORY_READ_TIMEOUT"):
            Settings.from_env()


class TestErrorWrap:

    def test_wrap_keeps_type_and_attributes(self):
        err = TransportError("http request failed: 502 Bad Gateway", api_call="analyze", status_code=502)

        wrapped = err.wrap("retrieve assessment failed")

        assert type(wrapped) is TransportError
        assert wrapped.status_code == 502
        assert wrapped.api_call == "analyze"
        assert str(wrapped) == "retrieve assessment failed: http request failed: 502 Bad Gateway"
        assert str(err) == "http request failed: 502 Bad Gateway"

    def test_wrap_chains(self):
        err = ScanFailedError("scan failed").wrap("retrieve assessment failed").wrap("outer")
        assert str(err) == "outer: retrieve assessment failed: scan failed"
        assert isinstance(err, ScanFailedError)


class TestCancelToken:

    def test_fresh_token_is_live(self):
        token = CancelToken()
        assert token.cancelled is False
        assert token.cause is None
        assert token.remaining() is None

    def test_cancel_reports_reason(self):
        token = CancelToken()
        token.cancel("shutting down")

        assert token.cancelled is True
        assert isinstance(token.cause, OperationCancelled)
        assert str(token.cause) == "shutting down"
        assert token.wait(5) is True

    def test_first_reason_wins(self):
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")
        assert str(token.cause) == "first"

    def test_deadline_fires(self):
        token = CancelToken.with_timeout(0.01)

        assert token.wait(5) is True
        assert token.expired is True
        assert isinstance(token.cause, DeadlineExceeded)
        assert token.remaining() == 0.0

    def test_wait_times_out_without_firing(self):
        assert CancelToken().wait(0.01) is False
