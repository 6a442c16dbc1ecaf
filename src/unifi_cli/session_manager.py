from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import jwt

from .configmanager import ConfigManager
from .errors import LoginFailedError, UnifiHttpError
from .options import Credentials
from .session_cache import SESSION_CACHE_KEY, SessionCache
from .unifi_api import TOKEN_COOKIE_NAME, UnifiApi

logger = ConfigManager.get_logger(__name__)

# Subtracted from the token's own expiry to allow for clock skew.
EXPIRY_SAFETY_MARGIN = timedelta(minutes=10)
CSRF_TOKEN_CLAIM = "csrfToken"


@dataclass(frozen=True)
class Session:
    session_token: str = field(repr=False)
    csrf_token: str = field(repr=False)
    expires_at: datetime


def decode_session_token(token: str) -> tuple[datetime, str]:
    """Return `(token expiry, csrf token)` from an encoded session token.

    The signature is not checked; the token came over the trusted channel.
    """
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as e:
        raise LoginFailedError(f"Login response carried an undecodable {TOKEN_COOKIE_NAME} cookie") from e

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise LoginFailedError("Session token has no usable exp claim")
    csrf_token = claims.get(CSRF_TOKEN_CLAIM)
    if not isinstance(csrf_token, str) or not csrf_token:
        raise LoginFailedError(f"Session token has no {CSRF_TOKEN_CLAIM} claim")
    try:
        expiry = datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, ValueError, OSError) as e:
        raise LoginFailedError("Session token has no usable exp claim") from e
    return expiry, csrf_token


class SessionManager:
    """Decides when to log in and keeps the resulting session in the cache.

    `get_session()` reuses a cached session when one is still valid;
    `login()` always authenticates again and replaces the cached entry.
    Concurrent cache misses may each log in; the last stored session wins.
    """

    def __init__(self, api: UnifiApi, credentials: Credentials, cache: SessionCache) -> None:
        self._api = api
        self._credentials = credentials
        self._cache = cache

    @property
    def cache(self) -> SessionCache:
        return self._cache

    def get_session(self) -> Session:
        session = self._cache.get(SESSION_CACHE_KEY)
        if session is not None:
            return session
        return self.login()

    def login(self) -> Session:
        logger.info("Logging in to UniFi controller as %s", self._credentials.username)
        try:
            resp = self._api.post_login(self._credentials.username, self._credentials.password)
        except UnifiHttpError as e:
            logger.warning("Login failed status_code=%s", e.status_code)
            raise LoginFailedError(f"Login failed: {e}") from e

        session = self._session_from_response(resp)
        self._cache.set(session, session.expires_at, SESSION_CACHE_KEY)
        if session.expires_at <= self._cache.now():
            logger.warning("Session token expires within the safety margin; it will not be reused")
        logger.info("Login succeeded; session valid until %s", session.expires_at.isoformat())
        return session

    @staticmethod
    def _session_from_response(resp: httpx.Response) -> Session:
        token = resp.cookies.get(TOKEN_COOKIE_NAME)
        if not token:
            raise LoginFailedError(f"Login response did not set a {TOKEN_COOKIE_NAME} cookie")
        token_expiry, csrf_token = decode_session_token(token)
        try:
            expires_at = token_expiry - EXPIRY_SAFETY_MARGIN
        except OverflowError as e:
            raise LoginFailedError("Session token has no usable exp claim") from e
        return Session(session_token=token, csrf_token=csrf_token, expires_at=expires_at)
