from __future__ import annotations

import itertools
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from .configmanager import ConfigManager
from .errors import ClientTimeoutError, UnifiHttpError

if TYPE_CHECKING:
    from .session_manager import Session

logger = ConfigManager.get_logger(__name__)

LOGIN_PATH = "api/auth/login"
TOKEN_COOKIE_NAME = "TOKEN"
CSRF_TOKEN_HEADER_NAME = "X-CSRF-Token"

_REDACTED_HEADERS = frozenset({"cookie", "set-cookie", CSRF_TOKEN_HEADER_NAME.lower(), "authorization"})
_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _redact_headers(headers: httpx.Headers) -> dict[str, str]:
    return {k: ("<redacted>" if k.lower() in _REDACTED_HEADERS else v) for k, v in headers.items()}


@dataclass
class UnifiApi:
    """Thin httpx wrapper for the controller.

    Authentication is cookie based: `POST /api/auth/login` answers with a `TOKEN`
    cookie, which is presented on every later call. State-changing calls also
    carry the `X-CSRF-Token` header. The wrapper never keeps cookies between
    calls; the session to use is passed explicitly.
    """

    base_url: str
    verify_tls: bool = True
    timeout_s: float = 30.0
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        logger.debug(
            "Initializing UnifiApi base_url=%s verify_tls=%s timeout_s=%s",
            self.base_url,
            self.verify_tls,
            self.timeout_s,
        )
        self._request_seq = itertools.count(1)

        def _log_request(request: httpx.Request) -> None:
            if not logger.isEnabledFor(10):
                return
            req_id = next(self._request_seq)
            request.extensions["unifi.req_id"] = req_id
            request.extensions["unifi.start"] = time.perf_counter()

            body_len: int | None
            try:
                body_len = len(request.content) if request.content is not None else 0
            except httpx.RequestNotRead:
                body_len = None

            logger.debug(
                "HTTP -> #%s %s %s headers=%s body_bytes=%s",
                req_id,
                request.method,
                request.url,
                _redact_headers(request.headers),
                body_len,
            )

        def _log_response(response: httpx.Response) -> None:
            if not logger.isEnabledFor(10):
                return
            req = response.request
            req_id = req.extensions.get("unifi.req_id")
            start = req.extensions.get("unifi.start")
            ms: float | None = None
            if isinstance(start, (int, float)):
                ms = (time.perf_counter() - float(start)) * 1000.0

            logger.debug(
                "HTTP <- #%s %s %s status=%s elapsed_ms=%s content_type=%s",
                req_id,
                req.method,
                req.url,
                response.status_code,
                f"{ms:.1f}" if ms is not None else None,
                response.headers.get("content-type"),
            )

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_s,
            verify=self.verify_tls,
            headers={"accept": "application/json"},
            transport=self.transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> UnifiApi:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # type: ignore[no-untyped-def]
        self.close()

    def _web_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request, translating timeouts and network failures.

        No retries: a timeout surfaces as `ClientTimeoutError`, anything else
        on the wire as `UnifiHttpError` without a status code.
        """
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("HTTP timeout after %ss on %s %s", self.timeout_s, method, path)
            raise ClientTimeoutError(f"Request timed out after {self.timeout_s}s: {method} {path}") from e
        except httpx.TransportError as e:
            raise UnifiHttpError(
                f"HTTP transport error for {method} {path}: {e}",
                method=method,
                url=str(self._client.base_url.join(path)),
            ) from e
        # Cookies are managed per session, not by the shared client.
        self._client.cookies.clear()
        return resp

    def post_login(self, username: str, password: str) -> httpx.Response:
        resp = self._web_request("POST", LOGIN_PATH, json={"username": username, "password": password})
        self._raise_for_status(resp)
        return resp

    def request(
        self,
        method: str,
        path: str,
        session: Session,
        *,
        json: Any = None,
    ) -> httpx.Response:
        """Authenticated request; raises `UnifiHttpError` on a non-success status."""
        method_u = method.upper().strip()
        headers = {"Cookie": f"{TOKEN_COOKIE_NAME}={session.session_token}"}
        if method_u not in _SAFE_METHODS:
            headers[CSRF_TOKEN_HEADER_NAME] = session.csrf_token
        kwargs: dict[str, Any] = {"headers": headers}
        if json is not None:
            kwargs["json"] = json
        resp = self._web_request(method_u, path, **kwargs)
        self._raise_for_status(resp)
        return resp

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {resp.status_code} for {resp.request.method} {resp.request.url}"
            body = resp.text
            raise UnifiHttpError(
                f"{msg}: {body}" if body else msg,
                method=resp.request.method,
                url=str(resp.request.url),
                status_code=resp.status_code,
                body=body,
            ) from e
