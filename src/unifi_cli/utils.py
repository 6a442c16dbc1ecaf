from __future__ import annotations


def normalize_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    return None


def normalize_str(value: object) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def normalize_port(value: object) -> str | None:
    """Port or port range (`8080`, `8000-8010`) in the controller's string form."""
    s = normalize_str(value)
    if s is None:
        return None
    parts = s.split("-")
    if len(parts) > 2:
        raise ValueError(f"Invalid port: {s}")
    for p in parts:
        try:
            port = int(p.strip())
        except ValueError as e:
            raise ValueError(f"Invalid port: {s}") from e
        if port <= 0 or port > 65535:
            raise ValueError(f"Invalid port: {s}")
    return "-".join(p.strip() for p in parts)
