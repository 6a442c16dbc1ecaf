from __future__ import annotations

import typer

from .cli_common import client_context, load_config_callback, print_json
from .cli_port_forwards import port_forward_app
from .configmanager import ConfigManager
from .errors import UnifiError

logger = ConfigManager.get_logger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
    pretty_exceptions_short=True,
)
app.add_typer(port_forward_app, name="port-forward", help="Manage port-forward rules")


@app.callback()
def _main(
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        envvar="UNIFI_ENV_FILE",
        help="Env file to load before reading configuration",
        callback=load_config_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="UNIFI_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        show_default=True,
    ),
    log_file: str | None = typer.Option(None, "--log-file", envvar="UNIFI_LOG_FILE", help="Also log to this file"),
) -> None:
    _ = env_file
    try:
        ConfigManager.configure_logging(log_level, log_file=log_file, file_level="DEBUG" if log_file else None)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


@app.command("login")
def login(json_out: bool = typer.Option(False, "--json", help="Print JSON")) -> None:
    """Log in and report when the session will be renewed."""
    with client_context() as client:
        session = client.login()
        if json_out:
            print_json({"expires_at": session.expires_at.isoformat()})
            return
        print(f"expires_at\t{session.expires_at.isoformat()}")


def main() -> None:
    try:
        app()
    except UnifiError as e:
        logger.error("%s", e)
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
