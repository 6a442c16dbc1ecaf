from __future__ import annotations

from dataclasses import dataclass, field

from .configmanager import ConfigManager

DEFAULT_TIMEOUT_S = 30.0


def _normalize_base_url(base_url: str) -> str:
    url = (base_url or "").strip()
    if not url:
        raise ValueError("base_url is required")
    return url.rstrip("/")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)

    def to_json(self) -> dict[str, str]:
        return {"username": self.username, "password": self.password}


@dataclass(frozen=True)
class ClientOptions:
    """Static client configuration, fixed for the lifetime of a `UnifiClient`."""

    base_url: str
    credentials: Credentials
    allow_invalid_certificate: bool = False
    default_interface: str | None = None
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", _normalize_base_url(self.base_url))
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")

    @property
    def verify_tls(self) -> bool:
        return not self.allow_invalid_certificate

    @property
    def effective_timeout_s(self) -> float:
        return DEFAULT_TIMEOUT_S if self.timeout_s is None else self.timeout_s

    @classmethod
    def from_env(cls) -> ClientOptions:
        base_url = ConfigManager.base_url()
        if not base_url:
            raise ValueError("UNIFI_BASE_URL is required")
        username = ConfigManager.username()
        password = ConfigManager.password()
        if not username or not password:
            raise ValueError("UNIFI_USERNAME and UNIFI_PASSWORD are required")
        return cls(
            base_url=base_url,
            credentials=Credentials(username=username, password=password),
            allow_invalid_certificate=not ConfigManager.verify_tls(),
            default_interface=ConfigManager.default_interface(),
            timeout_s=ConfigManager.timeout_s(),
        )
