from __future__ import annotations

import json
import logging
import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import jwt
import pytest

from unifi_cli import ClientOptions, Credentials, UnifiClient

FIXTURES = Path(__file__).parent / "fixtures"

LOGIN_TIME = datetime(2021, 10, 11, 14, 33, 0, tzinfo=timezone.utc)
TOKEN_EXPIRY = LOGIN_TIME + timedelta(minutes=60)
CSRF_TOKEN = "d1c3a6a0-7a2b-4c4e-9a0a-3b2f3c0e5e11"
SIGNING_KEY = "unit-test-signing-key-0123456789abcdef"


def pytest_configure(config: pytest.Config) -> None:
    # Optional: load env vars for integration tests from a dotenv file.
    env_file = os.getenv("UNIFI_ENV_FILE", ".env.test")
    p = Path(env_file)
    if p.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=p)


def load_fixture(name: str) -> Any:
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


def make_token(*, expiry: datetime = TOKEN_EXPIRY, csrf_token: str | None = CSRF_TOKEN) -> str:
    claims: dict[str, Any] = {"userId": "61558f0d8e188e7795ff5f1a", "exp": int(expiry.timestamp())}
    if csrf_token is not None:
        claims["csrfToken"] = csrf_token
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")


class FakeClock:
    def __init__(self, now: datetime = LOGIN_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class ControllerStub:
    """httpx.MockTransport handler that records requests and serves canned responses."""

    def __init__(self, token: str) -> None:
        self.token = token
        self.login_status = 200
        self.routes: dict[tuple[str, str], httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, response: httpx.Response | Exception) -> None:
        self.routes[(method.upper(), path)] = response

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    @property
    def login_calls(self) -> list[httpx.Request]:
        return self.calls("POST", "/api/auth/login")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/auth/login":
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"meta": {"rc": "error", "msg": "api.err.Invalid"}})
            return httpx.Response(
                200,
                headers={"set-cookie": f"TOKEN={self.token}; path=/; httponly"},
                json={"unique_id": "61558f0d8e188e7795ff5f1a", "username": "foo"},
            )
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"meta": {"rc": "error", "msg": "api.err.NotFound"}, "data": []})
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    # CLI tests reconfigure the root logger.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token() -> str:
    return make_token()


@pytest.fixture
def controller(token: str) -> ControllerStub:
    return ControllerStub(token)


@pytest.fixture
def options() -> ClientOptions:
    return ClientOptions(
        base_url="https://example.com",
        credentials=Credentials(username="foo", password="bar"),
        default_interface="wan",
    )


@pytest.fixture
def client(options: ClientOptions, controller: ControllerStub, clock: FakeClock) -> Generator[UnifiClient, None, None]:
    with UnifiClient(options, clock=clock, transport=httpx.MockTransport(controller)) as c:
        yield c
