from __future__ import annotations

import json
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import typer

from .configmanager import ConfigManager
from .options import ClientOptions
from .unifi_client import UnifiClient


def load_config_callback(value: str | None) -> str | None:
    """Eager callback to load env file before other options are processed."""
    ConfigManager.load_dotenv(value)
    return value


def print_json(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2))


def require_force_if_interactive(*, force: bool, prompt: str) -> None:
    if force:
        return
    if not typer.confirm(prompt, default=False):
        raise typer.Exit(code=1)


@contextmanager
def client_context() -> Generator[UnifiClient, None, None]:
    """Create a UnifiClient from environment configuration.

    Login happens lazily on the first call that needs a session.
    """
    try:
        options = ClientOptions.from_env()
    except ValueError as e:
        raise typer.BadParameter(f"{e} (set in environment or .env)") from None

    with UnifiClient(options) as client:
        yield client
