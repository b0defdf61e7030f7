"""Observability hooks called by the session on notable transitions."""

from __future__ import annotations

import logging
from typing import Protocol

from trgenctl.core.model import DeviceCapabilities

LOGGER = logging.getLogger(__name__)


class Reporter(Protocol):
    def connected(self, capabilities: DeviceCapabilities) -> None: ...

    def connect_failed(self, error: Exception) -> None: ...

    def command_sent(self, command_id: int, frame: bytes) -> None: ...

    def command_failed(self, command_id: int, error: Exception) -> None: ...


class LoggingReporter:
    """Default reporter writing to the standard ``logging`` tree."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    def connected(self, capabilities: DeviceCapabilities) -> None:
        self.logger.info(
            "Connected: ns=%d sa=%d gpio=%d tmso=%d tmsi=%d memory=%d",
            capabilities.ns_pin_count,
            capabilities.sa_pin_count,
            capabilities.gpio_pin_count,
            capabilities.tms_out_count,
            capabilities.tms_in_count,
            capabilities.program_memory_length,
        )

    def connect_failed(self, error: Exception) -> None:
        self.logger.warning("Connect failed: %s", error)

    def command_sent(self, command_id: int, frame: bytes) -> None:
        self.logger.debug("Sending packet 0x%08X: %s", command_id, frame.hex(" ").upper())

    def command_failed(self, command_id: int, error: Exception) -> None:
        self.logger.error("Command 0x%08X failed: %s", command_id, error)
