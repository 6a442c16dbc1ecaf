from __future__ import annotations

import json
from collections.abc import Generator
from contextlib import contextmanager

import httpx
import pytest
from typer.testing import CliRunner

from unifi_cli import ClientOptions, UnifiClient
from unifi_cli import cli_port_forwards
from unifi_cli.cli import app

from tests.conftest import ControllerStub, FakeClock, load_fixture

BASE_PATH = "/proxy/network/api/s/default/rest/portforward"


@pytest.fixture
def stub_client_context(
    monkeypatch: pytest.MonkeyPatch, options: ClientOptions, controller: ControllerStub, clock: FakeClock
) -> ControllerStub:
    @contextmanager
    def _context() -> Generator[UnifiClient, None, None]:
        with UnifiClient(options, clock=clock, transport=httpx.MockTransport(controller)) as client:
            yield client

    monkeypatch.setattr(cli_port_forwards, "client_context", _context)
    controller.route("GET", BASE_PATH, httpx.Response(200, json=load_fixture("GetCurrentPortForward.json")))
    return controller


def test_cli_command_groups_exist_via_help() -> None:
    runner = CliRunner()
    commands = [
        ["login", "--help"],
        ["port-forward", "list", "--help"],
        ["port-forward", "show", "--help"],
        ["port-forward", "create", "--help"],
        ["port-forward", "update", "--help"],
        ["port-forward", "delete", "--help"],
        ["port-forward", "enable", "--help"],
        ["port-forward", "disable", "--help"],
    ]
    for argv in commands:
        result = runner.invoke(app, argv)
        assert result.exit_code == 0, f"{argv} failed: {result.output}"


def test_create_dry_run_prints_payload_without_client() -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "port-forward", "create",
            "--name", "rdp",
            "--dst-port", "3391",
            "--fwd", "192.168.5.93",
            "--fwd-port", "3389",
            "--proto", "tcp",
            "--dry-run",
        ],
    )
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["action"] == "create"
    assert out["payload"]["dst_port"] == "3391"
    assert "pfwd_interface" not in out["payload"]


def test_create_rejects_bad_port() -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["port-forward", "create", "--name", "x", "--dst-port", "70000", "--fwd", "h", "--fwd-port", "1", "--dry-run"],
    )
    assert result.exit_code != 0


def test_list_prints_one_row_per_rule(stub_client_context: ControllerStub) -> None:
    result = CliRunner().invoke(app, ["--log-level", "WARNING", "port-forward", "list"])
    assert result.exit_code == 0, result.output
    lines = [line for line in result.stdout.splitlines() if line.strip()]
    assert len(lines) == 2
    assert lines[0].startswith("60478d7f8e188e04d2ff3e8e\t1\tRemote desktop")


def test_disable_by_name_updates_rule(stub_client_context: ControllerStub) -> None:
    item_id = "60478d7f8e188e04d2ff3e8e"
    stub_client_context.route("PUT", f"{BASE_PATH}/{item_id}", httpx.Response(200, json={"data": []}))

    result = CliRunner().invoke(app, ["--log-level", "WARNING", "port-forward", "disable", "remote desktop"])

    assert result.exit_code == 0, result.output
    (req,) = stub_client_context.calls("PUT", f"{BASE_PATH}/{item_id}")
    body = json.loads(req.content)
    assert body["enabled"] is False
    assert body["fwd"] == "192.168.5.20"


def test_delete_unknown_identifier_is_bad_parameter(stub_client_context: ControllerStub) -> None:
    result = CliRunner().invoke(app, ["port-forward", "delete", "nope", "--force"])
    assert result.exit_code == 2
    assert stub_client_context.calls("DELETE", f"{BASE_PATH}/nope") == []
