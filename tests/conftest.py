"""Shared test fixtures for all tests."""
import json
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import pytest
import requests
from jose import jwt

from ufc_dashboard.config import Settings
from ufc_dashboard.notices import NoticeBoard
from ufc_dashboard.services.fetcher import ApiClient
from ufc_dashboard.session import Session

API_BASE = "http://api.test"


def make_token(expires_in: Optional[float] = 3600, now: Optional[float] = None, **claims) -> str:
    """Signed JWT; the client never verifies the signature, only ``exp``."""
    payload = {"sub": "admin", **claims}
    if expires_in is not None:
        payload["exp"] = int((now if now is not None else time.time()) + expires_in)
    return jwt.encode(payload, "test-secret", algorithm="HS256")


def make_response(status: int = 200, body: Any = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    return response


@dataclass
class Call:
    method: str
    path: str
    params: Optional[dict]
    json: Optional[dict]
    headers: dict


class FakeHTTP:
    """Stands in for requests.Session; routes are answered in order, the last outcome repeats."""

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[Call] = []

    def add(self, method: str, path: str, *outcomes) -> "FakeHTTP":
        self.routes.setdefault((method, path), []).extend(outcomes)
        return self

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append(Call(method, path, params, json, dict(headers or {})))
        outcomes = self.routes.get((method, path))
        if not outcomes:
            raise AssertionError(f"Unexpected request {method} {path}")
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_to(self, path: str) -> list[Call]:
        return [c for c in self.calls if c.path == path]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base_url=API_BASE,
        socket_url=API_BASE,
        fetch_retries=2,
        fetch_retry_delay=1.0,
        page_size=10,
        token_store_path=tmp_path / "session.json",
        cache_ttl_seconds=30,
    )


@pytest.fixture
def notices():
    return NoticeBoard()


@pytest.fixture
def session(notices):
    s = Session(notices=notices)
    assert s.set_credential(make_token())
    return s


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(session, settings, http, sleeps):
    return ApiClient(session, settings, http=http, sleep=sleeps.append)


class FakeTransport:
    """Push transport driven by the test instead of a socket."""

    def __init__(self, fail_handshake: bool = False):
        self.fail_handshake = fail_handshake
        self.token = None
        self.handlers = {}
        self.connects = 0
        self.disconnects = 0

    def connect(self, token, *, on_connect, on_event, on_error, on_disconnect):
        self.connects += 1
        self.token = token
        self.handlers = {
            "connect": on_connect,
            "event": on_event,
            "error": on_error,
            "disconnect": on_disconnect,
        }
        if self.fail_handshake:
            raise ConnectionError("handshake refused")
        on_connect()

    def disconnect(self):
        self.disconnects += 1

    def emit(self, data):
        self.handlers["event"](data)

    def error(self, message="boom"):
        self.handlers["error"](message)

    def drop(self):
        self.handlers["disconnect"]()

    def reconnect(self):
        self.handlers["connect"]()


@pytest.fixture
def transport():
    return FakeTransport()
