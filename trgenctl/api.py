"""Stable public API for building tooling on top of trgenctl.

This module is the supported integration surface for third-party callers
(experiment runners, stimulus presentation scripts). Avoid importing from
internal modules unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from trgenctl.core.config_loader import load_config
from trgenctl.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    InstructionRangeError,
    NotConnectedError,
    PinResolutionError,
    ProtocolError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    TrgenError,
)
from trgenctl.core.model import (
    Acknowledgment,
    BitOrder,
    DeviceCapabilities,
    DeviceConfig,
    SessionState,
)
from trgenctl.core.pins import PinClass, TriggerPin, parse_pin
from trgenctl.core.program import TriggerProgram
from trgenctl.core.reporting import LoggingReporter, Reporter
from trgenctl.core.session import DeviceSession
from trgenctl.transports.base import Transport

__all__ = [
    "TrgenError",
    "ConfigLoadError",
    "ConfigValidationError",
    "InstructionRangeError",
    "NotConnectedError",
    "PinResolutionError",
    "ProtocolError",
    "TransportError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "Acknowledgment",
    "BitOrder",
    "DeviceCapabilities",
    "DeviceConfig",
    "SessionState",
    "PinClass",
    "TriggerPin",
    "TriggerProgram",
    "Reporter",
    "LoggingReporter",
    "Client",
]


class Client:
    """Public client for driving one TrGEN device.

    A `Client` wraps config loading and a `DeviceSession`. Pins may be given
    as ids (`TriggerPin.NS0`) or names (`"ns0"`).
    """

    def __init__(
        self,
        config: DeviceConfig | None = None,
        *,
        config_path: Path | None = None,
        transport: Transport | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        if config is None:
            config = load_config(config_path).config
        self._session = DeviceSession(config, transport=transport, reporter=reporter)

    @property
    def config(self) -> DeviceConfig:
        return self._session.config

    @property
    def capabilities(self) -> DeviceCapabilities | None:
        return self._session.capabilities

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def last_error(self) -> TrgenError | None:
        return self._session.last_error

    def connect(self) -> bool:
        return self._session.connect()

    def is_available(self, timeout_s: float | None = None) -> bool:
        return self._session.is_available(timeout_s)

    def start_triggers(self, pins: Iterable[str | int], *, active_us: int | None = None) -> None:
        self._session.start_triggers([parse_pin(p) for p in pins], active_us)

    def send_marker(
        self,
        *,
        ns: int | None = None,
        sa: int | None = None,
        gpio: int | None = None,
        bit_order: BitOrder | None = None,
        active_us: int | None = None,
    ) -> list[int]:
        return self._session.send_marker(ns=ns, sa=sa, gpio=gpio, bit_order=bit_order, active_us=active_us)

    def reset(self, pins: Iterable[str | int]) -> None:
        self._session.reset_pins([parse_pin(p) for p in pins])

    def reset_class(self, pin_class: PinClass) -> None:
        self._session.reset_class(pin_class)

    def create_program(self, pin: str | int) -> TriggerProgram:
        return self._session.create_program(parse_pin(pin))

    def send_program(self, program: TriggerProgram) -> Acknowledgment:
        return self._session.send_program(program)

    def stop(self, *, reset: bool = False) -> None:
        if reset:
            self._session.stop_and_reset_all()
        else:
            self._session.stop()

    def set_level(self, mask: int) -> None:
        self._session.set_level(mask)

    def set_gpio(self, mask: int) -> None:
        self._session.set_gpio(mask)

    def get_level(self) -> int:
        return self._session.get_level()

    def get_gpio(self) -> int:
        return self._session.get_gpio()

    def get_status(self) -> int:
        return self._session.get_status()
