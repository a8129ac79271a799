"""Shared test fixtures."""

import json
from collections import deque
from typing import Any, Dict, List, Optional

import pytest
import requests


class FakeResponse:
    """Just enough of :class:`requests.Response` for the clients"""

    def __init__(self, body: Any = None, status_code: int = 200, text: Optional[str] = None):
        self.status_code = status_code
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Replays queued responses and records every request made"""

    def __init__(self, *responses):
        self.headers: Dict[str, str] = {}
        self.responses = deque(responses)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append({
            'method': method,
            'url': url,
            'headers_at_call': dict(self.headers),
            **kwargs,
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response


class BrokenSession(FakeSession):
    def request(self, method, url, **kwargs):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def fake_session():
    return FakeSession()
