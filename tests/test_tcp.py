from __future__ import annotations

import socket
import threading

import pytest

from trgenctl.core.errors import TransportConnectError, TransportTimeoutError
from trgenctl.core.model import DeviceConfig
from trgenctl.core.session import DeviceSession
from trgenctl.protocol.capabilities import encode_capabilities
from trgenctl.protocol.framing import build_frame, parse_frame
from trgenctl.transports.tcp import TCPTransport


class LoopbackDevice:
    """Accepts connections, records one frame per connection and answers with an ACK."""

    def __init__(self, reply: bool = True) -> None:
        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.bind(("127.0.0.1", 0))
        self.server.listen()
        self.port = self.server.getsockname()[1]
        self.reply = reply
        self.received: list[bytes] = []
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        while True:
            try:
                conn, _ = self.server.accept()
            except OSError:
                return
            with conn:
                data = conn.recv(4096)
                if not data:
                    continue
                self.received.append(data)
                if self.reply:
                    command_id = parse_frame(data).command_id
                    value = encode_capabilities(ns_pin_count=8, memory_length_exponent=4) if command_id == 4 else 0
                    conn.sendall(f"ACK{command_id}.{value}".encode("ascii"))
                else:
                    conn.recv(1)

    def close(self) -> None:
        self.server.close()


@pytest.fixture
def device():
    dev = LoopbackDevice()
    yield dev
    dev.close()


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_send_returns_reply(device: LoopbackDevice) -> None:
    reply = TCPTransport().send("127.0.0.1", build_frame(2), port=device.port, timeout_s=2.0)
    assert reply == b"ACK2.0"
    assert device.received == [build_frame(2)]


def test_probe(device: LoopbackDevice) -> None:
    assert TCPTransport().probe("127.0.0.1", port=device.port, timeout_s=1.0) is True
    assert TCPTransport().probe("127.0.0.1", port=_free_port(), timeout_s=1.0) is False


def test_connection_refused() -> None:
    with pytest.raises(TransportConnectError):
        TCPTransport().send("127.0.0.1", build_frame(2), port=_free_port(), timeout_s=1.0)


def test_receive_timeout() -> None:
    dev = LoopbackDevice(reply=False)
    try:
        with pytest.raises(TransportTimeoutError):
            TCPTransport().send("127.0.0.1", build_frame(2), port=dev.port, timeout_s=0.2)
    finally:
        dev.close()


def test_session_over_real_sockets(device: LoopbackDevice) -> None:
    session = DeviceSession(DeviceConfig(host="127.0.0.1", port=device.port, timeout_s=2.0))
    assert session.connect()
    assert session.memory_length == 16
    session.send_marker(ns=0b1)
    # query + 25 resets + 1 pulse + START, one connection each
    assert len(device.received) == 28
    assert parse_frame(device.received[-1]).command_id == 2
