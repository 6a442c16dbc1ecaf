from __future__ import annotations

from dataclasses import replace

import typer

from . import utils
from .cli_common import client_context, print_json, require_force_if_interactive
from .errors import InvalidIdError
from .models import PortForward, PortForwardForm
from .unifi_client import UnifiClient

port_forward_app = typer.Typer(no_args_is_help=True)


def _port_option(value: str | None, *, field: str) -> str | None:
    try:
        return utils.normalize_port(value)
    except ValueError as e:
        raise typer.BadParameter(f"{field}: {e}") from None


def _resolve_port_forward(client: UnifiClient, identifier: str) -> PortForward:
    """Find a rule by id, falling back to a unique name match."""
    needle = str(identifier or "").strip()
    if not needle:
        raise typer.BadParameter("IDENTIFIER is required")
    items = client.list_port_forwards()
    by_id = [x for x in items if x.id == needle]
    if by_id:
        return by_id[0]
    matches = [x for x in items if x.natural_index.lower() == needle.lower()]
    if not matches:
        raise typer.BadParameter(f"Unknown port-forward: {identifier}")
    if len(matches) > 1:
        raise typer.BadParameter(f"Ambiguous port-forward identifier (matched {len(matches)}): {identifier}")
    return matches[0]


def _print_row(x: PortForward) -> None:
    forward = f"{x.forward or ''}:{x.forward_port or ''}"
    print(f"{x.id}\t{int(bool(x.enabled))}\t{x.name or ''}\t{x.protocol or ''}\t{x.destination_port or ''}\t{forward}")


@port_forward_app.command("list")
def port_forward_list(json_out: bool = typer.Option(False, "--json", help="Print JSON")) -> None:
    with client_context() as client:
        items = client.list_port_forwards()
        if json_out:
            print_json([x.to_json() for x in items])
            return
        for x in items:
            _print_row(x)


@port_forward_app.command("show")
def port_forward_show(
    item_id: str = typer.Argument(..., help="Port forward id"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    with client_context() as client:
        try:
            item = client.get_port_forward(item_id)
        except InvalidIdError as e:
            raise typer.BadParameter(str(e)) from None
        if item is None:
            raise typer.BadParameter(f"Unknown port-forward id: {item_id}")
        if json_out:
            print_json(item.to_json())
            return
        for key, value in item.to_json().items():
            print(f"{key}\t{'' if value is None else value}")


@port_forward_app.command("create")
def port_forward_create(
    name: str = typer.Option(..., "--name"),
    destination_port: str = typer.Option(..., "--dst-port", help="External port or range"),
    forward: str = typer.Option(..., "--fwd", help="Internal target address"),
    forward_port: str = typer.Option(..., "--fwd-port", help="Internal port or range"),
    protocol: str = typer.Option("tcp_udp", "--proto", help="tcp, udp or tcp_udp"),
    source: str = typer.Option("any", "--src", help="Allowed source address"),
    interface: str | None = typer.Option(None, "--interface", help="Defaults to UNIFI_DEFAULT_INTERFACE"),
    log: bool = typer.Option(False, "--log/--no-log"),
    enabled: bool = typer.Option(True, "--enabled/--disabled"),
    dry_run: bool = typer.Option(False, "--dry-run"),
) -> None:
    form = PortForwardForm(
        name=name,
        enabled=enabled,
        source=source,
        destination_port=_port_option(destination_port, field="--dst-port"),
        forward=forward,
        forward_port=_port_option(forward_port, field="--fwd-port"),
        protocol=protocol,
        log=log,
        interface=interface,
    )
    if dry_run:
        print_json({"action": "create", "kind": PortForward.kind, "payload": form.to_payload()})
        return
    with client_context() as client:
        created = client.create_port_forward(form)
        print_json(created.to_json())


@port_forward_app.command("update")
def port_forward_update(
    identifier: str = typer.Argument(..., help="Port forward id or name"),
    name: str | None = typer.Option(None, "--name"),
    destination_port: str | None = typer.Option(None, "--dst-port"),
    forward: str | None = typer.Option(None, "--fwd"),
    forward_port: str | None = typer.Option(None, "--fwd-port"),
    protocol: str | None = typer.Option(None, "--proto"),
    source: str | None = typer.Option(None, "--src"),
    interface: str | None = typer.Option(None, "--interface"),
    log: bool | None = typer.Option(None, "--log/--no-log"),
    enabled: bool | None = typer.Option(None, "--enabled/--disabled"),
    dry_run: bool = typer.Option(False, "--dry-run"),
) -> None:
    with client_context() as client:
        existing = _resolve_port_forward(client, identifier)
        form = existing.to_form()
        if name is not None:
            form.name = name
        if destination_port is not None:
            form.destination_port = _port_option(destination_port, field="--dst-port")
        if forward is not None:
            form.forward = forward
        if forward_port is not None:
            form.forward_port = _port_option(forward_port, field="--fwd-port")
        if protocol is not None:
            form.protocol = protocol
        if source is not None:
            form.source = source
        if interface is not None:
            form.interface = interface
        if log is not None:
            form.log = log
        if enabled is not None:
            form.enabled = enabled

        if dry_run:
            print_json({"action": "update", "kind": PortForward.kind, "id": existing.id, "payload": form.to_payload()})
            return
        client.update_port_forward(existing.id, form)


@port_forward_app.command("delete")
def port_forward_delete(
    identifier: str = typer.Argument(..., help="Port forward id or name"),
    force: bool = typer.Option(False, "--force"),
    dry_run: bool = typer.Option(False, "--dry-run"),
) -> None:
    with client_context() as client:
        item = _resolve_port_forward(client, identifier)
        require_force_if_interactive(force=force, prompt=f"Delete port forward {item.id} ({item.natural_index})?")
        if dry_run:
            print_json({"action": "delete", "kind": PortForward.kind, "id": item.id})
            return
        client.delete_port_forward(item.id)


def _set_enabled(identifier: str, enabled: bool) -> None:
    with client_context() as client:
        item = _resolve_port_forward(client, identifier)
        client.update_port_forward(item.id, replace(item.to_form(), enabled=enabled))


@port_forward_app.command("enable")
def port_forward_enable(identifier: str = typer.Argument(..., help="Port forward id or name")) -> None:
    _set_enabled(identifier, True)


@port_forward_app.command("disable")
def port_forward_disable(identifier: str = typer.Argument(..., help="Port forward id or name")) -> None:
    _set_enabled(identifier, False)
