"""Shared fakes for the Observatory client tests."""

from __future__ import annotations

from collections import deque

import pytest

from observatory.client import ObservatoryClient
from observatory.errors import ObservatoryError
from observatory.scanner.cancellation import CancelToken


class FakeTransport:
    """
    Scripted stand-in for Transport.

    Responses are queued per (api_call, method). Each queued item is either a
    payload returned as decoded JSON, or an exception instance to raise.
    Every call is recorded in `calls`.
    """

    def __init__(self):
        self.calls = []
        self._responses = {}

    def script(self, api_call, method, *responses):
        self._responses.setdefault((api_call, method), deque()).extend(responses)
        return self

    def remaining(self, api_call, method):
        return len(self._responses.get((api_call, method), ()))

    def calls_for(self, api_call, method):
        return [c for c in self.calls if c[0] == api_call and c[1] == method]

    def execute(self, api_call, method="GET", params=None, data=None):
        self.calls.append((api_call, method, params, data))
        queue = self._responses.get((api_call, method))
        if not queue:
            raise AssertionError(f"unexpected call: {method} {api_call} {params}")
        item = queue.popleft()
        if isinstance(item, ObservatoryError):
            raise item
        return item

    def close(self):
        pass


class FakeToken(CancelToken):
    """CancelToken that never sleeps; records each wait and can self-cancel."""

    def __init__(self, cancel_after=None):
        super().__init__()
        self.waits = []
        self.cancel_after = cancel_after

    def wait(self, timeout):
        self.waits.append(timeout)
        if self.cancel_after is not None and len(self.waits) > self.cancel_after:
            self.cancel()
        return self.cancelled


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return ObservatoryClient(transport=transport)
