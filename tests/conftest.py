"""Shared fixtures: a stand-in for requests.Session and a small legend."""

from __future__ import annotations

import json

import pytest
import requests

from surgery_watcher.legend import Legend, LegendEntry

_NO_BODY = object()


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=_NO_BODY):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not _NO_BODY else text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is _NO_BODY:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)


@pytest.fixture
def legend():
    return Legend([
        LegendEntry("red", "white", "In OR"),
        LegendEntry("green", "white", "Case Complete"),
        LegendEntry("black", "yellow", "Pre-Op"),
    ])
