"""TCP transport implementation using Python sockets.

The device closes its side after every reply, so each command gets its own
connection. Keeping one socket open across commands would need request ids
the protocol does not have.
"""

from __future__ import annotations

import socket

from trgenctl.core.errors import (
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)

RECV_BUFFER_SIZE = 64


class TCPTransport:
    def send(
        self,
        host: str,
        payload: bytes,
        *,
        port: int,
        timeout_s: float = 2.0,
    ) -> bytes:
        try:
            sock = socket.create_connection((host, port), timeout=timeout_s)
        except TimeoutError as exc:
            raise TransportTimeoutError(f"TCP connect to {host}:{port} timed out after {timeout_s}s") from exc
        except OSError as exc:
            raise TransportConnectError(f"TCP connect to {host}:{port} failed: {exc}") from exc

        try:
            try:
                sock.sendall(payload)
            except TimeoutError as exc:
                raise TransportTimeoutError(f"TCP send to {host}:{port} timed out") from exc
            except OSError as exc:
                raise TransportSendError(f"TCP send to {host}:{port} failed: {exc}") from exc

            try:
                return sock.recv(RECV_BUFFER_SIZE)
            except TimeoutError as exc:
                raise TransportTimeoutError(f"TCP receive from {host}:{port} timed out") from exc
            except OSError as exc:
                raise TransportSendError(f"TCP receive from {host}:{port} failed: {exc}") from exc
        finally:
            sock.close()

    def probe(self, host: str, *, port: int, timeout_s: float = 2.0) -> bool:
        try:
            with socket.create_connection((host, port), timeout=timeout_s):
                return True
        except OSError:
            return False
