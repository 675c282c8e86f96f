"""Pytest shared fixtures for the authorization client tests."""
import json
import pathlib
import sys
import threading

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from asapi.config.settings import Config
from asapi.core.authorize import AuthorizeHandle, ErrorResult, TokenInfo, TransportError


# ─────────────────────────────────────────────────────────────────────────────
# Test doubles
# ─────────────────────────────────────────────────────────────────────────────
class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Scripted transport recording every request it is asked to send.

    Queued responses are consumed in order; once the queue is empty the
    default response is returned.
    """

    def __init__(self, default=(200, b"{}")):
        self.calls = []
        self.responses = []
        self.default = default
        self._lock = threading.Lock()

    def respond(self, status: int = 200, body=None) -> "FakeTransport":
        if body is None:
            buf = b""
        elif isinstance(body, bytes):
            buf = body
        elif isinstance(body, str):
            buf = body.encode("utf-8")
        else:
            buf = json.dumps(body).encode("utf-8")
        self.responses.append((status, buf))
        return self

    def fail(self, message: str) -> "FakeTransport":
        self.responses.append(TransportError(message))
        return self

    def send(self, req):
        with self._lock:
            self.calls.append(req)
            item = self.responses.pop(0) if self.responses else self.default
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        pass

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last(self):
        return self.calls[-1]


class FakeTokenHandle:
    """Token handle returning a fixed token or a fixed error."""

    def __init__(self, token: str = "svc-token", result: ErrorResult = None):
        self.token = token
        self.result = result
        self.calls = 0

    def get(self):
        self.calls += 1
        if self.result is not None:
            return "", self.result
        return self.token, None

    def force_get(self):
        self.calls += 1
        if self.result is not None:
            return None, self.result
        return TokenInfo(access_token=self.token, expires_in=7200), None


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def make_config():
    def _make(**overrides):
        base = dict(
            asapi_url="http://as.test",
            service_identify="SVC",
            client_id="svc-client",
            client_secret="svc-secret",
            is_enabled_cache=True,
            cache_gc_interval=60,
            request_timeout=5.0,
            token_expiry_margin=30,
        )
        base.update(overrides)
        return Config(**base)
    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def token_handle():
    return FakeTokenHandle()


@pytest.fixture
def make_handle(make_config, transport, token_handle, clock):
    """Factory for AuthorizeHandle wired to the fake transport and token handle."""
    created = []

    def _make(cfg=None, **overrides):
        handle = AuthorizeHandle(
            cfg or make_config(**overrides),
            token_handle=token_handle,
            transport=transport,
            clock=clock,
        )
        created.append(handle)
        return handle

    yield _make
    for handle in created:
        handle.close()


@pytest.fixture
def handle(make_handle):
    return make_handle()
