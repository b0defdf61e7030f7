"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class Transport(Protocol):
    def send(
        self,
        host: str,
        payload: bytes,
        *,
        port: int,
        timeout_s: float = 2.0,
    ) -> bytes:
        """Open a connection, send payload, return the single reply, close."""

    def probe(self, host: str, *, port: int, timeout_s: float = 2.0) -> bool:
        """Return True if a connection to the device can be opened."""
