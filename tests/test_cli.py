from __future__ import annotations

import pytest
from fakes import FakeTransport
from typer.testing import CliRunner

from trgenctl import cli
from trgenctl.core.session import DeviceSession
from trgenctl.protocol.framing import Command

runner = CliRunner()


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    fake = FakeTransport(values={Command.QUERY_STATUS: 3, Command.QUERY_LEVEL: 0xAB})
    monkeypatch.setattr(cli, "DeviceSession", lambda config: DeviceSession(config, transport=fake))
    return fake


def test_info_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 0
    assert "NeuroScan pins: 8" in result.stdout
    assert "Memory length:  32 (exponent 5)" in result.stdout


def test_probe_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["--host", "10.9.9.9", "--port", "5000", "probe"])
    assert result.exit_code == 0
    assert "10.9.9.9:5000 reachable" in result.stdout

    transport.reachable = False
    result = runner.invoke(cli.app, ["probe"])
    assert result.exit_code == 1
    assert "unreachable" in result.stdout


def test_status_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 0
    assert "status=3" in result.stdout
    assert [f.command_id for f in transport.parsed] == [Command.QUERY_STATUS]


def test_start_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["start", "ns0", "gpio3", "--width-us", "40"])
    assert result.exit_code == 0
    assert "Started NS0, GPIO3" in result.stdout
    assert transport.parsed[-1].command_id == Command.START


def test_start_unknown_pin_is_clean(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["start", "xx9"])
    assert result.exit_code == 1
    assert "Error: Unknown pin 'xx9'" in result.stderr
    assert transport.frames == []


def test_marker_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["marker", "--ns", "0b1", "--bit-order", "msb"])
    assert result.exit_code == 0
    assert "Marker on NS7" in result.stdout


def test_marker_without_masks(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["marker"])
    assert result.exit_code == 0
    assert "nothing sent" in result.stdout
    assert transport.frames == []


def test_marker_bad_mask(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["marker", "--gpio", "0x1FF"])
    assert result.exit_code == 1
    assert "Error: Marker mask must be 0-255" in result.stderr


def test_stop_command(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["stop"])
    assert result.exit_code == 0
    assert [f.command_id for f in transport.parsed] == [Command.STOP]


def test_stop_with_reset(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["stop", "--reset"])
    assert result.exit_code == 0
    assert "Stopped and reset" in result.stdout
    assert len(transport.frames) == 1 + 1 + 25


def test_reset_class(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["reset", "gpio"])
    assert result.exit_code == 0
    assert "Reset 8 pins" in result.stdout


def test_reset_unknown_class(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["reset", "usb"])
    assert result.exit_code == 1
    assert "unknown pin class" in result.stderr


def test_level_get_and_set(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["level"])
    assert result.exit_code == 0
    assert "level=0x000000AB" in result.stdout

    result = runner.invoke(cli.app, ["level", "0xF0"])
    assert result.exit_code == 0
    frame = transport.parsed[-1]
    assert (frame.command_id, frame.payload) == (Command.SET_LEVEL, (0xF0,))


def test_gpio_set(transport: FakeTransport) -> None:
    result = runner.invoke(cli.app, ["gpio", "15"])
    assert result.exit_code == 0
    frame = transport.parsed[-1]
    assert (frame.command_id, frame.payload) == (Command.SET_GPIO, (15,))


def test_connect_error_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeTransport(fail_after=0)
    monkeypatch.setattr(cli, "DeviceSession", lambda config: DeviceSession(config, transport=fake))
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 1
    assert "Error: TCP connect to 192.168.123.1:4242 failed" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_invalid_config_is_clean(transport: FakeTransport, tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("port: nope\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["--config", str(path), "stop"])
    assert result.exit_code == 1
    assert "Schema validation failed" in result.stderr
