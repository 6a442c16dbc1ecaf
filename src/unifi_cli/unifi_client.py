from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote

import httpx

from .configmanager import ConfigManager
from .errors import InvalidIdError, UnifiError, UnifiHttpError
from .models import PortForward, PortForwardForm
from .options import ClientOptions
from .session_cache import Clock, SessionCache
from .session_manager import Session, SessionManager
from .unifi_api import UnifiApi

__all__ = [
    "ApiErrorMeta",
    "UnifiClient",
]

logger = ConfigManager.get_logger(__name__)

PORT_FORWARD_PATH = "proxy/network/api/s/default/rest/portforward"
ID_INVALID_MESSAGE = "api.err.IdInvalid"


@dataclass(frozen=True)
class ApiErrorMeta:
    """The `meta` block of a controller error body: `{"meta": {"rc": ..., "msg": ...}}`."""

    rc: str | None
    msg: str | None

    @classmethod
    def parse(cls, body: str | bytes | None) -> ApiErrorMeta | None:
        """Best-effort parse; anything that is not the expected shape yields None."""
        if not body:
            return None
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        meta = payload.get("meta")
        if not isinstance(meta, dict):
            return None
        rc = meta.get("rc")
        msg = meta.get("msg")
        return cls(
            rc=rc if isinstance(rc, str) else None,
            msg=msg if isinstance(msg, str) else None,
        )


def _is_id_invalid(error: UnifiHttpError) -> bool:
    if error.status_code != 400:
        return False
    meta = ApiErrorMeta.parse(error.body)
    return meta is not None and meta.msg == ID_INVALID_MESSAGE


def _require_id(item_id: str | None) -> str:
    s = str(item_id or "").strip()
    if not s:
        raise InvalidIdError(item_id, "id is required")
    if s in {".", ".."}:
        raise InvalidIdError(item_id)
    return s


def _item_path(item_id: str) -> str:
    # The id is one path segment; `/`, `?` and `#` must not change the target.
    return f"{PORT_FORWARD_PATH}/{quote(item_id, safe='')}"


def _unwrap_data(resp: httpx.Response) -> list[dict[str, Any]]:
    """Return the `data` list of a `{"data": [...]}` envelope; absent data is empty."""
    try:
        payload = resp.json()
    except ValueError as e:
        raise UnifiError(f"Expected JSON response from {resp.request.method} {resp.request.url}") from e
    if not isinstance(payload, dict):
        raise UnifiError(
            f"Expected object response from {resp.request.method} {resp.request.url}, got {type(payload).__name__}"
        )
    data = payload.get("data")
    if data is None:
        return []
    if not isinstance(data, list):
        raise UnifiError(f"Expected list in data from {resp.request.method} {resp.request.url}, got {type(data).__name__}")
    if not all(isinstance(d, dict) for d in data):
        raise UnifiError(f"Expected objects in data from {resp.request.method} {resp.request.url}")
    return data


class UnifiClient:
    """UniFi network controller client for port-forward rules.

    Every call first obtains a session from the `SessionManager` (cached or
    freshly logged in) and then performs exactly one request. Entities are
    never cached.
    """

    def __init__(
        self,
        options: ClientOptions,
        *,
        cache: SessionCache | None = None,
        clock: Clock | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.options = options
        self._api = UnifiApi(
            base_url=options.base_url,
            verify_tls=options.verify_tls,
            timeout_s=options.effective_timeout_s,
            transport=transport,
        )
        self._sessions = SessionManager(
            self._api,
            options.credentials,
            cache if cache is not None else SessionCache(clock),
        )

    def close(self) -> None:
        self._api.close()

    def __enter__(self) -> UnifiClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # type: ignore[no-untyped-def]
        self.close()

    # --- Session ---
    def get_session(self) -> Session:
        return self._sessions.get_session()

    def login(self) -> Session:
        return self._sessions.login()

    def logout_local(self) -> None:
        """Forget the cached session; the next call logs in again."""
        self._sessions.cache.evict()

    # --- Port forwards ---
    def list_port_forwards(self) -> list[PortForward]:
        session = self.get_session()
        logger.debug("GET %s", PORT_FORWARD_PATH)
        resp = self._api.request("GET", PORT_FORWARD_PATH, session)
        return [PortForward.from_json(d) for d in _unwrap_data(resp)]

    def get_port_forward(self, item_id: str) -> PortForward | None:
        """Fetch one rule; None when the controller answers with an empty `data` list."""
        item_id = _require_id(item_id)
        session = self.get_session()
        path = _item_path(item_id)
        logger.debug("GET %s", path)
        try:
            resp = self._api.request("GET", path, session)
        except UnifiHttpError as e:
            if e.status_code == 404:
                raise InvalidIdError(item_id, f"Port forward id {item_id} not found") from e
            raise
        data = _unwrap_data(resp)
        if not data:
            return None
        return PortForward.from_json(data[0])

    def create_port_forward(self, form: PortForwardForm) -> PortForward:
        if form.interface is None:
            form = replace(form, interface=self.options.default_interface)
        session = self.get_session()
        payload = form.to_payload()
        logger.debug("POST %s (json body keys=%s)", PORT_FORWARD_PATH, sorted(payload.keys()))
        resp = self._api.request("POST", PORT_FORWARD_PATH, session, json=payload)
        data = _unwrap_data(resp)
        if len(data) != 1:
            raise UnifiError(f"Expected exactly one port forward in create response, got {len(data)}")
        created = PortForward.from_json(data[0])
        logger.info("Created %s %s (%s)", created.kind, created.id, created.natural_index)
        return created

    def update_port_forward(self, item_id: str, form: PortForwardForm) -> None:
        item_id = _require_id(item_id)
        session = self.get_session()
        path = _item_path(item_id)
        payload = form.to_payload()
        logger.debug("PUT %s (json body keys=%s)", path, sorted(payload.keys()))
        try:
            self._api.request("PUT", path, session, json=payload)
        except UnifiHttpError as e:
            if _is_id_invalid(e):
                raise InvalidIdError(item_id, f"Update failed, id: {item_id} is invalid.") from e
            raise
        logger.info("Updated %s %s", PortForward.kind, item_id)

    def delete_port_forward(self, item_id: str) -> None:
        item_id = _require_id(item_id)
        session = self.get_session()
        path = _item_path(item_id)
        logger.debug("DELETE %s", path)
        try:
            self._api.request("DELETE", path, session)
        except UnifiHttpError as e:
            if _is_id_invalid(e):
                raise InvalidIdError(item_id, f"Deletion failed, id: {item_id} is invalid.") from e
            raise
        logger.info("Deleted %s %s", PortForward.kind, item_id)
