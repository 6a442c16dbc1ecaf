from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from .. import utils

# Entity attribute -> server field name.
FIELD_NAMES: dict[str, str] = {
    "name": "name",
    "enabled": "enabled",
    "source": "src",
    "destination_port": "dst_port",
    "forward": "fwd",
    "forward_port": "fwd_port",
    "protocol": "proto",
    "log": "log",
    "interface": "pfwd_interface",
    "site_id": "site_id",
}


@dataclass
class PortForwardForm:
    """Writable fields of a port-forward rule.

    Unset (None) fields are left out of the request body. An unset `interface`
    is replaced by the client's default interface on create.
    """

    name: str | None = None
    enabled: bool | None = None
    source: str | None = None
    destination_port: str | None = None
    forward: str | None = None
    forward_port: str | None = None
    protocol: str | None = None
    log: bool | None = None
    interface: str | None = None
    site_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, server_name in FIELD_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                out[server_name] = value
        return out


@dataclass
class PortForward:
    kind: ClassVar[str] = "port-forward"

    id: str
    name: str | None = None
    enabled: bool | None = None
    source: str | None = None
    destination_port: str | None = None
    forward: str | None = None
    forward_port: str | None = None
    protocol: str | None = None
    log: bool | None = None
    interface: str | None = None
    site_id: str | None = None

    @property
    def natural_index(self) -> str:
        return (self.name or "").strip()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> PortForward:
        item_id = data.get("_id")
        if item_id is None:
            item_id = data.get("id")
        return cls(
            id=str(item_id or "").strip(),
            name=utils.normalize_str(data.get("name")),
            enabled=utils.normalize_bool(data.get("enabled")),
            source=utils.normalize_str(data.get("src")),
            destination_port=utils.normalize_str(data.get("dst_port")),
            forward=utils.normalize_str(data.get("fwd")),
            forward_port=utils.normalize_str(data.get("fwd_port")),
            protocol=utils.normalize_str(data.get("proto")),
            log=utils.normalize_bool(data.get("log")),
            interface=utils.normalize_str(data.get("pfwd_interface")),
            site_id=utils.normalize_str(data.get("site_id")),
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"_id": self.id}
        for attr, server_name in FIELD_NAMES.items():
            out[server_name] = getattr(self, attr)
        return out

    def to_form(self) -> PortForwardForm:
        return PortForwardForm(**{attr: getattr(self, attr) for attr in FIELD_NAMES})
