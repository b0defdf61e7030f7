from __future__ import annotations

import pytest
from fakes import FakeTransport

from trgenctl.core.model import DeviceConfig
from trgenctl.core.session import DeviceSession


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(transport: FakeTransport) -> DeviceSession:
    s = DeviceSession(DeviceConfig(host="10.0.0.2", port=4242), transport=transport)
    assert s.connect()
    transport.frames.clear()
    return s


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
